"""
Sprite loading.

Images are read from the assets directory by handle. Any file that is
missing or fails to decode is replaced with a generated placeholder so the
game stays playable from a bare checkout.
"""

from pathlib import Path
from typing import Callable, Dict, Optional
import logging

import pygame

from flapgate.graphics.primitives import (
    Buffer, draw_circle, draw_rect, new_buffer, vertical_gradient
)
from flapgate.graphics.renderer import (
    IMG_BACKGROUND, IMG_GAME_OVER, IMG_GET_READY, IMG_GROUND, IMG_PIPE, bird_image
)

logger = logging.getLogger(__name__)

# Pure black is the transparent key for generated sprites
COLOR_KEY = (0, 0, 0)

IMAGE_FILES: Dict[str, str] = {
    IMG_BACKGROUND: "bg.png",
    IMG_PIPE: "pipe_green.png",
    IMG_GROUND: "land_0.png",
    IMG_GET_READY: "get_ready.png",
    IMG_GAME_OVER: "game_over.png",
    bird_image(0): "bird_0.png",
    bird_image(1): "bird_1.png",
    bird_image(2): "bird_2.png",
}


def buffer_to_surface(buffer: Buffer, colorkey: Optional[tuple] = None) -> pygame.Surface:
    """Convert an (h, w, 3) buffer to a surface."""
    surface = pygame.surfarray.make_surface(buffer.swapaxes(0, 1))
    if colorkey is not None:
        surface.set_colorkey(colorkey)
    return surface


def _placeholder_background() -> Buffer:
    buffer = new_buffer(288, 512)
    vertical_gradient(buffer, (78, 192, 202), (170, 228, 220))
    # City silhouette
    for i, height in enumerate((60, 90, 45, 110, 70, 85, 50, 100, 65)):
        draw_rect(buffer, i * 32, 400 - height, 30, height, (120, 200, 160))
    return buffer


def _placeholder_pipe() -> Buffer:
    buffer = new_buffer(52, 320, (84, 180, 48))
    draw_rect(buffer, 6, 0, 8, 320, (140, 220, 90))
    draw_rect(buffer, 40, 0, 6, 320, (50, 120, 30))
    # Lip at the open end
    draw_rect(buffer, 0, 0, 52, 24, (70, 160, 40))
    draw_rect(buffer, 0, 22, 52, 2, (40, 90, 20))
    return buffer


def _placeholder_ground() -> Buffer:
    buffer = new_buffer(336, 112, (222, 216, 149))
    draw_rect(buffer, 0, 0, 336, 12, (100, 190, 60))
    for x in range(0, 336, 24):
        draw_rect(buffer, x, 2, 12, 8, (130, 215, 80))
    return buffer


def _placeholder_bird(frame: int) -> Callable[[], Buffer]:
    def build() -> Buffer:
        buffer = new_buffer(50, 50, COLOR_KEY)
        draw_circle(buffer, 25, 25, 20, (250, 200, 40))
        draw_circle(buffer, 33, 19, 6, (255, 255, 255))
        draw_circle(buffer, 35, 19, 3, (20, 20, 20))
        draw_rect(buffer, 38, 27, 11, 6, (240, 100, 40))
        # Wing position changes per animation frame
        draw_rect(buffer, 8, 18 + frame * 6, 16, 8, (255, 240, 180))
        return buffer
    return build


def _placeholder_banner(color: tuple) -> Callable[[], Buffer]:
    def build() -> Buffer:
        buffer = new_buffer(184, 50, (255, 255, 255))
        draw_rect(buffer, 4, 4, 176, 42, color)
        return buffer
    return build


PLACEHOLDERS: Dict[str, Callable[[], Buffer]] = {
    IMG_BACKGROUND: _placeholder_background,
    IMG_PIPE: _placeholder_pipe,
    IMG_GROUND: _placeholder_ground,
    IMG_GET_READY: _placeholder_banner((240, 150, 40)),
    IMG_GAME_OVER: _placeholder_banner((220, 70, 50)),
    bird_image(0): _placeholder_bird(0),
    bird_image(1): _placeholder_bird(1),
    bird_image(2): _placeholder_bird(2),
}

COLOR_KEYED = {bird_image(0), bird_image(1), bird_image(2)}


class AssetLibrary:
    """Loaded sprites keyed by image handle."""

    def __init__(self, images_path: Optional[Path] = None) -> None:
        self.images_path = images_path
        self._images: Dict[str, pygame.Surface] = {}
        self._placeholders: set[str] = set()

    def load_all(self) -> None:
        """Load every known handle, generating placeholders where needed."""
        for handle in IMAGE_FILES:
            self._images[handle] = self._load(handle)
        logger.info(
            f"Loaded {len(self._images)} images "
            f"({len(self._placeholders)} placeholders)"
        )

    def _load(self, handle: str) -> pygame.Surface:
        if self.images_path is not None:
            path = self.images_path / IMAGE_FILES[handle]
            if path.exists():
                try:
                    image = pygame.image.load(str(path))
                    if pygame.display.get_surface() is not None:
                        image = image.convert_alpha()
                    return image
                except Exception as e:
                    logger.warning(f"Could not load {path}: {e}")

        self._placeholders.add(handle)
        colorkey = COLOR_KEY if handle in COLOR_KEYED else None
        return buffer_to_surface(PLACEHOLDERS[handle](), colorkey)

    def get(self, handle: str) -> Optional[pygame.Surface]:
        """Image for a handle, loading it on first use; None if unknown."""
        if handle not in self._images:
            if handle not in IMAGE_FILES:
                return None
            self._images[handle] = self._load(handle)
        return self._images[handle]

    def is_placeholder(self, handle: str) -> bool:
        return handle in self._placeholders
