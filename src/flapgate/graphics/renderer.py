"""Projection of a session onto an ordered list of draw commands."""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from flapgate.core.session import Phase, Session

Color = Tuple[int, int, int]

# Image handles resolved by the asset library
IMG_BACKGROUND = "bg"
IMG_PIPE = "pipe"
IMG_GROUND = "land"
IMG_GET_READY = "get_ready"
IMG_GAME_OVER = "game_over"


def bird_image(frame: int) -> str:
    """Handle of the bird sprite for an animation frame."""
    return f"bird_{frame}"


@dataclass(frozen=True)
class FillCommand:
    """Clear the whole canvas to a solid color."""

    color: Color


@dataclass(frozen=True)
class ImageCommand:
    """Blit an image, optionally scaled to width/height and rotated.

    Rotation is in degrees counter-clockwise about the destination
    rectangle's centre, so the rectangle itself stays put.
    """

    image: str
    x: float
    y: float
    width: Optional[int] = None
    height: Optional[int] = None
    rotation: int = 0


DrawCommand = Union[FillCommand, ImageCommand]


@dataclass(frozen=True)
class Hud:
    """Display-layer toggles derived from the phase."""

    score: int
    show_score: bool
    show_get_ready: bool
    show_game_over: bool


@dataclass
class Frame:
    """Everything a backend needs to present one frame."""

    commands: list[DrawCommand] = field(default_factory=list)
    hud: Optional[Hud] = None


class Renderer:
    """
    Reads a session and produces draw commands.

    Draw order (back to front): background, pipes, ground, bird. The
    renderer never modifies the session.
    """

    def render(self, session: Session) -> Frame:
        s = session.settings
        commands: list[DrawCommand] = [
            FillCommand(s.background_color),
            ImageCommand(IMG_BACKGROUND, 0, s.canvas_height - s.background_height),
        ]

        for obstacle in session.obstacles:
            # Top segment is the pipe sprite turned upside down, ending at the gap
            commands.append(ImageCommand(
                IMG_PIPE,
                obstacle.x,
                obstacle.gap_top - s.pipe_length,
                obstacle.width,
                s.pipe_length,
                rotation=180,
            ))
            commands.append(ImageCommand(
                IMG_PIPE,
                obstacle.x,
                obstacle.gap_bottom,
                obstacle.width,
                s.pipe_length,
            ))

        # Two tiles back to back so the wrap seam is always covered
        first_tile_x = session.ground_offset - s.ground_width
        commands.append(ImageCommand(IMG_GROUND, first_tile_x, s.ground_y))
        commands.append(ImageCommand(IMG_GROUND, first_tile_x + s.ground_width, s.ground_y))

        bird = session.bird
        commands.append(ImageCommand(
            bird_image(bird.frame), bird.x, bird.y, bird.width, bird.height
        ))

        return Frame(commands=commands, hud=self.hud(session))

    def hud(self, session: Session) -> Hud:
        return Hud(
            score=session.score,
            show_score=session.phase is not Phase.AWAITING_START,
            show_get_ready=session.phase is Phase.AWAITING_START,
            show_game_over=session.phase is Phase.ENDED,
        )
