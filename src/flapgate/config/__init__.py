"""Configuration for Flapgate."""

from .settings import AudioSettings, DisplaySettings, GameSettings, Settings, get_settings

__all__ = ["AudioSettings", "DisplaySettings", "GameSettings", "Settings", "get_settings"]
