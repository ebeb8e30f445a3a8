"""
Desktop game window using pygame.

Owns the display: posts keyboard/mouse input to the bus, delivers it at
the start of each refresh, emits a TICK and presents the game loop's
latest frame.
"""

import pygame
import asyncio
import logging
from dataclasses import dataclass

from flapgate.core.events import EventBus, EventType, Event, flap_event, tick_event
from flapgate.core.loop import GameLoop
from flapgate.graphics.assets import AssetLibrary
from flapgate.graphics.backend import SurfaceBackend

logger = logging.getLogger(__name__)

FLAP_KEYS = (pygame.K_SPACE, pygame.K_RETURN, pygame.K_UP)


@dataclass
class WindowConfig:
    """Game window configuration."""
    canvas_width: int = 320
    canvas_height: int = 480
    scale: int = 1
    title: str = "Flapgate"
    fullscreen: bool = False
    fps: int = 60
    show_debug: bool = False

    # Colors
    bg_color: tuple[int, int, int] = (0, 0, 0)
    panel_color: tuple[int, int, int] = (20, 20, 30)
    text_color: tuple[int, int, int] = (200, 200, 220)

    @property
    def window_size(self) -> tuple[int, int]:
        return (self.canvas_width * self.scale, self.canvas_height * self.scale)


class GameWindow:
    """
    Main game window.

    Keyboard Mapping:
        SPACE / RETURN / UP, mouse button: Flap
        M: Toggle mute
        D: Toggle debug overlay
        F: Toggle fullscreen
        S: Screenshot
        ESC / Q: Exit
    """

    def __init__(
        self,
        game: GameLoop,
        assets: AssetLibrary,
        config: WindowConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.config = config or WindowConfig()
        self.game = game
        self.event_bus = event_bus or game.event_bus
        self.assets = assets
        self.backend = SurfaceBackend(assets)

        # Pygame setup
        self._screen: pygame.Surface | None = None
        self._canvas: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._running = False
        self._frame_count = 0
        self._show_debug = self.config.show_debug
        self._small_font: pygame.font.Font | None = None

        logger.info("GameWindow created")

    @property
    def running(self) -> bool:
        return self._running

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)
        self._set_mode()
        self._canvas = pygame.Surface((self.config.canvas_width, self.config.canvas_height))
        self._clock = pygame.time.Clock()

        pygame.font.init()
        self._small_font = pygame.font.Font(None, 18)

        # Sprites can only be converted once a display exists
        self.assets.load_all()

        logger.info(f"Pygame initialized: {self._screen.get_size()[0]}x{self._screen.get_size()[1]}")

    def _set_mode(self) -> None:
        if self.config.fullscreen:
            self._screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN | pygame.DOUBLEBUF)
        else:
            self._screen = pygame.display.set_mode(self.config.window_size, pygame.DOUBLEBUF)

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

            elif event.type == pygame.MOUSEBUTTONDOWN:
                self.event_bus.post(flap_event(source="pointer"))

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key

        if key in FLAP_KEYS:
            self.event_bus.post(flap_event(source="keyboard"))
        elif key == pygame.K_ESCAPE or key == pygame.K_q:
            self._running = False
        elif key == pygame.K_m:
            self.event_bus.post(Event(EventType.TOGGLE_MUTE, source="keyboard"))
        elif key == pygame.K_d:
            self._show_debug = not self._show_debug
        elif key == pygame.K_s:
            self._capture_screenshot()
        elif key == pygame.K_f:
            self._toggle_fullscreen()

    def _render(self) -> None:
        """Draw the current frame and present it."""
        if not self._screen or not self._canvas:
            return

        self.backend.execute(self.game.frame, self._canvas)
        if self._show_debug:
            self._render_debug_panel()

        self._screen.fill(self.config.bg_color)
        target = self._fit_rect()
        if target.size == self._canvas.get_size():
            self._screen.blit(self._canvas, target.topleft)
        else:
            self._screen.blit(pygame.transform.scale(self._canvas, target.size), target.topleft)

        pygame.display.flip()

    def _fit_rect(self) -> pygame.Rect:
        """Largest canvas-shaped rectangle centred in the window."""
        sw, sh = self._screen.get_size()
        cw, ch = self._canvas.get_size()
        factor = min(sw / cw, sh / ch)
        size = (int(cw * factor), int(ch * factor))
        rect = pygame.Rect((0, 0), size)
        rect.center = (sw // 2, sh // 2)
        return rect

    def _render_debug_panel(self) -> None:
        """Render the debug information panel onto the canvas."""
        if not self._small_font:
            return

        snapshot = self.game.session.snapshot()
        lines = [
            f"FPS: {self._clock.get_fps():.1f}" if self._clock else "FPS: --",
            f"Phase: {snapshot['phase']}",
            f"Frame: {snapshot['frame']}",
            f"Score: {snapshot['score']}",
            f"y={snapshot['bird_y']} v={snapshot['velocity']}",
            f"Pipes: {snapshot['obstacles']}",
        ]

        panel = pygame.Rect(4, 4, 150, 18 * len(lines) + 8)
        pygame.draw.rect(self._canvas, self.config.panel_color, panel, border_radius=4)
        y = panel.y + 6
        for line in lines:
            text_surface = self._small_font.render(line, True, self.config.text_color)
            self._canvas.blit(text_surface, (panel.x + 6, y))
            y += 18

    def _capture_screenshot(self) -> None:
        """Capture and save a screenshot."""
        if self._canvas:
            filename = f"screenshot_{self._frame_count}.png"
            pygame.image.save(self._canvas, filename)
            logger.info(f"Screenshot saved: {filename}")

    def _toggle_fullscreen(self) -> None:
        """Toggle fullscreen mode."""
        self.config.fullscreen = not self.config.fullscreen
        self._set_mode()
        logger.info(f"Fullscreen: {self.config.fullscreen}")

    async def run(self) -> None:
        """Main loop: one TICK, update and draw per display refresh."""
        self._init_pygame()
        self._running = True

        logger.info("Game window started")

        while self._running:
            self._handle_events()
            # Input lands between frames, before this frame's update
            self.event_bus.drain()

            if self._clock:
                delta = self._clock.get_time() / 1000.0
                self.event_bus.emit(tick_event(delta, self._frame_count))

            self._render()

            if self._clock:
                self._clock.tick(self.config.fps)

            self._frame_count += 1

            # Yield to other tasks
            await asyncio.sleep(0)

        self.event_bus.emit(Event(EventType.SHUTDOWN, source="window"))
        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        pygame.quit()
        logger.info("Game window stopped")

    def stop(self) -> None:
        """Stop the main loop after the current frame."""
        self._running = False
