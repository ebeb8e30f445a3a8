"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
Nested values use a double underscore, e.g. ``FLAPGATE_GAME__GRAVITY=0.3``.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GameSettings(BaseModel):
    """World geometry and physics constants (per-frame units)."""

    # Canvas
    canvas_width: int = 320
    canvas_height: int = 480
    background_color: tuple[int, int, int] = (112, 197, 206)  # #70c5ce
    background_height: int = 512

    # Physics
    gravity: float = 0.25
    jump: float = -4.5
    pipe_speed: float = 2.0

    # Bird
    bird_x: float = 50.0
    bird_start_y: float = 150.0
    bird_width: int = 50
    bird_height: int = 50
    bird_frames: int = Field(default=3, ge=1)
    animation_interval: int = Field(default=5, ge=1)  # frames per wing flap

    # Pipes
    pipe_width: int = 52
    pipe_length: int = 320
    pipe_gap: int = 100
    pipe_spawn_interval: int = Field(default=100, ge=1)  # frames
    min_pipe_height: int = 50

    # Ground
    ground_height: int = 112
    ground_width: int = Field(default=336, gt=0)

    # Audio cue timing
    flap_cue_duration: float = 2.5  # seconds before the flap cue is cut

    # Obstacle RNG seed (None = fresh entropy)
    seed: Optional[int] = None

    @property
    def ground_y(self) -> int:
        """Top edge of the ground strip."""
        return self.canvas_height - self.ground_height

    @property
    def max_pipe_height(self) -> int:
        """Tallest top segment that still leaves a min-height bottom segment."""
        return self.ground_y - self.pipe_gap - self.min_pipe_height

    @model_validator(mode="after")
    def _check_pipe_bounds(self) -> "GameSettings":
        if self.max_pipe_height < self.min_pipe_height:
            raise ValueError(
                f"pipe_gap={self.pipe_gap} leaves no room for two pipe segments "
                f"of at least {self.min_pipe_height}px above the ground"
            )
        return self


class DisplaySettings(BaseModel):
    """Window and frame pacing."""

    fps: int = Field(default=60, gt=0)
    scale: int = Field(default=1, ge=1)
    fullscreen: bool = False
    title: str = "Flapgate"
    show_debug: bool = False


class AudioSettings(BaseModel):
    """Mixer settings."""

    enabled: bool = True
    volume: float = Field(default=1.0, ge=0.0, le=1.0)
    sample_rate: int = 44100


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="FLAPGATE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False

    # Paths
    assets_path: Path = Field(default_factory=lambda: Path(__file__).parent.parent / "assets")
    log_file: Optional[Path] = None

    # Nested settings
    game: GameSettings = Field(default_factory=GameSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)

    @property
    def images_path(self) -> Path:
        """Directory holding sprite PNGs."""
        return self.assets_path / "images"

    @property
    def sounds_path(self) -> Path:
        """Directory holding sound cue files."""
        return self.assets_path / "sounds"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
