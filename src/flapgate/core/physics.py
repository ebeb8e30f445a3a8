"""
Per-frame world update: gravity, pipes, collisions and scoring.

All quantities are in pixels per frame. The only nondeterminism is the
pipe height draw, which comes from an injected random source.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol
import logging
import random

from flapgate.config.settings import GameSettings
from flapgate.core.session import Bird, Obstacle, Phase, Session

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything that can draw an inclusive integer, like ``random.Random``."""

    def randint(self, a: int, b: int) -> int: ...


class StepEventKind(Enum):
    COLLISION = auto()
    GROUND = auto()
    SCORE = auto()


@dataclass(frozen=True)
class StepEvent:
    """Something PhysicsStep noticed during a frame."""

    kind: StepEventKind
    score: int = 0


def overlaps_horizontally(bird: Bird, obstacle: Obstacle) -> bool:
    return bird.right > obstacle.x and bird.left < obstacle.right


def collides(bird: Bird, obstacle: Obstacle) -> bool:
    """True when the bird overlaps the pipe columns outside the gap."""
    if not overlaps_horizontally(bird, obstacle):
        return False
    return bird.top < obstacle.gap_top or bird.bottom > obstacle.gap_bottom


def hits_ground(bird: Bird, settings: GameSettings) -> bool:
    return bird.bottom > settings.ground_y


class PhysicsStep:
    """
    Advances an ACTIVE session by one frame.

    The caller (the state machine) decides whether a frame is ACTIVE;
    ``step`` refuses to touch a session in any other phase.
    """

    def __init__(self, settings: GameSettings, rng: RandomSource | None = None) -> None:
        self.settings = settings
        self.rng = rng if rng is not None else random.Random(settings.seed)

    # Bird

    def flap(self, bird: Bird) -> None:
        """Overwrite vertical velocity with the jump impulse."""
        bird.velocity = self.settings.jump

    def apply_gravity(self, bird: Bird) -> None:
        bird.velocity += self.settings.gravity
        bird.y += bird.velocity

    def advance_animation(self, bird: Bird, frame_count: int) -> None:
        if frame_count % self.settings.animation_interval == 0:
            bird.frame = (bird.frame + 1) % self.settings.bird_frames

    # Pipes

    def spawn_obstacle(self) -> Obstacle:
        s = self.settings
        top_height = self.rng.randint(s.min_pipe_height, s.max_pipe_height)
        logger.debug(f"Spawning pipe with top height {top_height}")
        return Obstacle(
            x=float(s.canvas_width),
            top_height=top_height,
            width=s.pipe_width,
            gap=s.pipe_gap,
        )

    def step(self, session: Session) -> list[StepEvent]:
        """Run one ACTIVE frame and report collisions and score changes."""
        if session.phase is not Phase.ACTIVE:
            return []

        s = self.settings
        bird = session.bird
        events: list[StepEvent] = []

        self.apply_gravity(bird)
        self.advance_animation(bird, session.frame_count)

        if session.frame_count % s.pipe_spawn_interval == 0:
            session.obstacles.append(self.spawn_obstacle())

        # Reverse order so deleting index i never shifts an unvisited pipe
        for i in range(len(session.obstacles) - 1, -1, -1):
            obstacle = session.obstacles[i]
            obstacle.x -= s.pipe_speed

            if collides(bird, obstacle):
                events.append(StepEvent(StepEventKind.COLLISION))

            if not obstacle.passed and bird.right > obstacle.right:
                obstacle.passed = True
                session.score += 1
                events.append(StepEvent(StepEventKind.SCORE, score=session.score))

            if obstacle.right < 0:
                del session.obstacles[i]

        if hits_ground(bird, s):
            events.append(StepEvent(StepEventKind.GROUND))

        session.frame_count += 1
        return events

    def scroll_ground(self, session: Session) -> None:
        """Move the ground tiles; frozen once the session has ended."""
        if session.phase is Phase.ENDED:
            return
        session.ground_offset = (session.ground_offset - self.settings.pipe_speed) % self.settings.ground_width
