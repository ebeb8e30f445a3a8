"""World state for a single play session."""

from dataclasses import dataclass, field
from enum import Enum, auto
import logging

from flapgate.config.settings import GameSettings

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Session phases."""
    AWAITING_START = auto()  # "get ready" screen, only the ground scrolls
    ACTIVE = auto()          # bird under gravity, pipes moving
    ENDED = auto()           # game over, everything frozen


@dataclass
class Bird:
    """The player. x never changes; y grows downwards."""

    x: float
    y: float
    width: int
    height: int
    velocity: float = 0.0
    frame: int = 0

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class Obstacle:
    """A pipe pair with a passable gap below ``top_height``."""

    x: float
    top_height: int
    width: int
    gap: int
    passed: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def gap_top(self) -> int:
        return self.top_height

    @property
    def gap_bottom(self) -> int:
        return self.top_height + self.gap


@dataclass
class Session:
    """
    Aggregate of everything that changes while playing.

    Owned by a single game loop; physics, the state machine and the
    renderer all receive it explicitly.
    """

    settings: GameSettings
    bird: Bird
    obstacles: list[Obstacle] = field(default_factory=list)
    phase: Phase = Phase.AWAITING_START
    frame_count: int = 0
    score: int = 0
    ground_offset: float = 0.0

    @classmethod
    def new(cls, settings: GameSettings) -> "Session":
        """Create a session in its initial state."""
        return cls(settings=settings, bird=cls._initial_bird(settings))

    @staticmethod
    def _initial_bird(settings: GameSettings) -> Bird:
        return Bird(
            x=settings.bird_x,
            y=settings.bird_start_y,
            width=settings.bird_width,
            height=settings.bird_height,
        )

    def reset(self) -> None:
        """Return to the initial state: score, frames, bird and pipes cleared."""
        self.bird = self._initial_bird(self.settings)
        self.obstacles = []
        self.phase = Phase.AWAITING_START
        self.frame_count = 0
        self.score = 0
        self.ground_offset = 0.0
        logger.debug("Session reset")

    def snapshot(self) -> dict:
        """Summary used by the debug overlay and logs."""
        return {
            "phase": self.phase.name,
            "frame": self.frame_count,
            "score": self.score,
            "bird_y": round(self.bird.y, 2),
            "velocity": round(self.bird.velocity, 2),
            "obstacles": len(self.obstacles),
        }
