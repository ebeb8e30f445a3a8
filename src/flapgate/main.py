"""
Main entry point for Flapgate.

Wires the game loop, audio and the pygame window together and runs until
the window is closed.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from flapgate.audio.engine import AudioEngine
from flapgate.config.settings import Settings, get_settings
from flapgate.core.events import Event, EventBus, EventType
from flapgate.core.loop import GameLoop
from flapgate.graphics.assets import AssetLibrary
from flapgate.simulator.window import GameWindow, WindowConfig

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure logging with optional file output."""
    level = logging.DEBUG if debug else logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        # Truncate on each run for fresh logs
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logging.info(f"Logging to file: {log_file}")

    # Per-subscription chatter is only useful when debugging the bus itself
    logging.getLogger("flapgate.core.events").setLevel(logging.INFO)


class FlapgateApp:
    """Main application integrating all systems."""

    def __init__(self, settings: Settings):
        self.settings = settings

        # Core systems
        self.event_bus = EventBus()
        self.game = GameLoop(settings.game, event_bus=self.event_bus)

        # Audio system
        self.audio = AudioEngine(
            volume=settings.audio.volume,
            sample_rate=settings.audio.sample_rate,
        )
        if settings.audio.enabled:
            if self.audio.init(settings.sounds_path):
                self.audio.attach(self.event_bus)
            else:
                logger.warning("Continuing without sound")
        else:
            logger.info("Audio disabled by configuration")

        # Window
        self.assets = AssetLibrary(settings.images_path)
        self.window_config = WindowConfig(
            canvas_width=settings.game.canvas_width,
            canvas_height=settings.game.canvas_height,
            scale=settings.display.scale,
            title=settings.display.title,
            fullscreen=settings.display.fullscreen,
            fps=settings.display.fps,
            show_debug=settings.display.show_debug or settings.debug,
        )
        self.window = GameWindow(
            game=self.game,
            assets=self.assets,
            config=self.window_config,
            event_bus=self.event_bus,
        )

        self._setup_event_handlers()
        logger.info("FlapgateApp initialized")

    def _setup_event_handlers(self) -> None:
        self.event_bus.subscribe(EventType.TICK, self._on_tick)
        self.event_bus.subscribe(EventType.TOGGLE_MUTE, self._on_toggle_mute)
        if self.settings.debug:
            self.event_bus.subscribe_all(self._trace_event)

    def _trace_event(self, event: Event) -> None:
        if event.type is not EventType.TICK:
            logger.debug(f"Event {event.type.name} from {event.source}: {event.data}")

    def _on_tick(self, event: Event) -> None:
        """Handle frame tick - advance the game and the audio clock."""
        delta_ms = event.data.get("delta", 0.016) * 1000
        self.game.run(delta_ms)
        self.audio.update(delta_ms)

    def _on_toggle_mute(self, event: Event) -> None:
        self.audio.toggle_mute()

    async def run(self) -> None:
        logger.info("Starting Flapgate...")
        try:
            await self.window.run()
        finally:
            self.game.close()
            self.audio.cleanup()


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug, settings.log_file)

    logger.info("Flapgate starting...")
    logger.info("Controls: SPACE/click = flap, M = mute, D = debug, F = fullscreen, S = screenshot, Q = quit")

    try:
        asyncio.run(FlapgateApp(settings).run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("Flapgate stopped")


if __name__ == "__main__":
    main()
