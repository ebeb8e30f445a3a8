"""Graphics module for Flapgate rendering pipeline."""

from flapgate.graphics.renderer import (
    DrawCommand,
    FillCommand,
    Frame,
    Hud,
    ImageCommand,
    Renderer,
)

__all__ = [
    "DrawCommand",
    "FillCommand",
    "Frame",
    "Hud",
    "ImageCommand",
    "Renderer",
]
