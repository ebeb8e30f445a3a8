"""Executes renderer frames on a pygame surface."""

from typing import Dict, Optional, Tuple
import logging

import pygame

from flapgate.graphics.assets import AssetLibrary
from flapgate.graphics.renderer import (
    IMG_GAME_OVER, IMG_GET_READY, FillCommand, Frame, Hud, ImageCommand
)

logger = logging.getLogger(__name__)

SCORE_COLOR = (255, 255, 255)
SCORE_SHADOW = (40, 40, 40)


class SurfaceBackend:
    """
    The image and display capabilities on top of pygame.

    Scaled/rotated variants of each sprite are cached, so steady-state
    frames only blit.
    """

    def __init__(self, assets: AssetLibrary) -> None:
        self.assets = assets
        self._variants: Dict[Tuple[str, Optional[int], Optional[int], int], pygame.Surface] = {}
        self._missing: set[str] = set()
        self._font: Optional[pygame.font.Font] = None

    def _variant(self, command: ImageCommand) -> Optional[pygame.Surface]:
        key = (command.image, command.width, command.height, command.rotation)
        surface = self._variants.get(key)
        if surface is not None:
            return surface

        image = self.assets.get(command.image)
        if image is None:
            if command.image not in self._missing:
                self._missing.add(command.image)
                logger.warning(f"Unknown image handle: {command.image}")
            return None

        if command.width is not None and command.height is not None:
            if image.get_size() != (command.width, command.height):
                image = pygame.transform.scale(image, (command.width, command.height))
        if command.rotation:
            image = pygame.transform.rotate(image, command.rotation)

        self._variants[key] = image
        return image

    def draw_image(self, surface: pygame.Surface, command: ImageCommand) -> None:
        image = self._variant(command)
        if image is None:
            return
        surface.blit(image, (round(command.x), round(command.y)))

    def execute(self, frame: Frame, surface: pygame.Surface) -> None:
        """Draw every command in order, then the HUD on top."""
        for command in frame.commands:
            if isinstance(command, FillCommand):
                surface.fill(command.color)
            else:
                self.draw_image(surface, command)

        if frame.hud is not None:
            self.draw_hud(frame.hud, surface)

    def draw_hud(self, hud: Hud, surface: pygame.Surface) -> None:
        width, height = surface.get_size()

        if hud.show_get_ready:
            self._blit_centered(surface, IMG_GET_READY, width // 2, int(height * 0.3))
        if hud.show_game_over:
            self._blit_centered(surface, IMG_GAME_OVER, width // 2, int(height * 0.3))
        if hud.show_score:
            self._draw_score(surface, hud.score, width // 2, 20)

    def _blit_centered(self, surface: pygame.Surface, handle: str, cx: int, cy: int) -> None:
        image = self.assets.get(handle)
        if image is None:
            return
        rect = image.get_rect(center=(cx, cy))
        surface.blit(image, rect)

    def _draw_score(self, surface: pygame.Surface, score: int, cx: int, top: int) -> None:
        if not pygame.font.get_init():
            return
        if self._font is None:
            self._font = pygame.font.Font(None, 56)
        text = str(score)
        shadow = self._font.render(text, True, SCORE_SHADOW)
        label = self._font.render(text, True, SCORE_COLOR)
        x = cx - label.get_width() // 2
        surface.blit(shadow, (x + 2, top + 2))
        surface.blit(label, (x, top))
