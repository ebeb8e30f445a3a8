"""
Frame-by-frame driver for a session.

The loop does not schedule itself. Whoever owns the display calls
``run`` once per refresh. Flap inputs are applied as soon as they arrive,
between frames, and take effect in the next ``run``.
"""

import logging

from flapgate.config.settings import GameSettings
from flapgate.core.events import Event, EventBus, EventType
from flapgate.core.physics import PhysicsStep, RandomSource
from flapgate.core.session import Phase, Session
from flapgate.core.state import StateMachine
from flapgate.graphics.renderer import Frame, Renderer

logger = logging.getLogger(__name__)


class GameLoop:
    """
    Owns one session and advances it a frame at a time.

    Each ``run``:
        1. runs PhysicsStep (ACTIVE only) and feeds its report to the
           state machine
        2. scrolls the ground unless the session has ended
        3. renders the resulting snapshot into ``self.frame``

    Events produced along the way are published on the bus.
    """

    def __init__(
        self,
        settings: GameSettings,
        event_bus: EventBus | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self.settings = settings
        self.event_bus = event_bus or EventBus()
        self.physics = PhysicsStep(settings, rng)
        self.state_machine = StateMachine(self.physics)
        self.renderer = Renderer()
        self.session = Session.new(settings)
        self.frame: Frame = self.renderer.render(self.session)

        self._elapsed_ms = 0.0
        self._frames_run = 0

        self._unsubscribe = self.event_bus.subscribe(EventType.FLAP, self._on_flap)
        logger.info("GameLoop initialized")

    @property
    def phase(self) -> Phase:
        return self.session.phase

    @property
    def elapsed_ms(self) -> float:
        """Total frame time fed to ``run``."""
        return self._elapsed_ms

    def _on_flap(self, event: Event) -> None:
        self.flap()

    def flap(self) -> None:
        """Apply one flap input to the session right away."""
        self._publish(self.state_machine.handle_flap(self.session))

    def _publish(self, events: list[Event]) -> None:
        for event in events:
            self.event_bus.emit(event)

    def run(self, frame_time: float = 0.0) -> Session:
        """
        Advance one display frame.

        Args:
            frame_time: Milliseconds since the previous frame. Physics is
                frame-locked, so this only feeds the elapsed-time counter.

        Returns:
            The (mutated) session
        """
        self._elapsed_ms += frame_time
        self._frames_run += 1
        session = self.session
        events: list[Event] = []

        if session.phase is Phase.ACTIVE:
            step_events = self.physics.step(session)
            events += self.state_machine.update(session, step_events)

        self.physics.scroll_ground(session)
        self.frame = self.renderer.render(session)

        self._publish(events)

        if logger.isEnabledFor(logging.DEBUG) and self._frames_run % 60 == 0:
            logger.debug(f"Frame {self._frames_run}: {session.snapshot()}")

        return session

    def close(self) -> None:
        """Stop listening for input."""
        self._unsubscribe()
