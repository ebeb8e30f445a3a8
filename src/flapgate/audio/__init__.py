"""
Flapgate audio system.

Named sound cues driven by intents published on the event bus.
"""

from .engine import AudioEngine

__all__ = ["AudioEngine"]
