"""
In-process event bus.

Player input is posted by the window and delivered once per frame, just
before the frame runs. Everything the core produces (phase changes, score,
sound intents) is emitted straight away.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Optional
import logging
import time

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Built-in event types."""
    # Input events
    FLAP = auto()
    TOGGLE_MUTE = auto()

    # Game events
    PHASE_CHANGED = auto()
    SCORE = auto()
    COLLISION = auto()

    # Audio intents
    SOUND_PLAY = auto()
    SOUND_STOP = auto()

    # System events
    TICK = auto()  # Frame tick
    SHUTDOWN = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: What happened
        data: Event payload
        source: Component that emitted the event
        timestamp: When event was created
    """
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[Event], None]


class EventBus:
    """
    Synchronous publish/subscribe hub.

    ``emit`` calls every matching handler before returning. ``post`` only
    parks the event; it reaches handlers on the next ``drain``, so input
    gathered while a frame is being drawn cannot change that frame.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._handlers: dict[Optional[EventType], list[Handler]] = defaultdict(list)
        self._pending: deque[Event] = deque()
        self._history: deque[Event] = deque(maxlen=history_limit)

    def subscribe(self, event_type: Optional[EventType], handler: Handler) -> Callable[[], None]:
        """
        Register a handler for one event type, or for every event with None.

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler subscribed to {event_type}")

        def unsubscribe() -> None:
            handlers = self._handlers[event_type]
            if handler in handlers:
                handlers.remove(handler)
                logger.debug(f"Handler unsubscribed from {event_type}")

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Register a handler that sees every event."""
        return self.subscribe(None, handler)

    def emit(self, event: Event) -> None:
        """Deliver an event now. A failing handler is logged and skipped."""
        self._history.append(event)
        # Copy so handlers may unsubscribe while being called
        handlers = list(self._handlers.get(event.type, ())) + list(self._handlers.get(None, ()))
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.type}: {e}")

    def post(self, event: Event) -> None:
        """Hold an event until the next ``drain``."""
        self._pending.append(event)

    def drain(self) -> int:
        """Emit every posted event in arrival order; returns how many."""
        count = 0
        # Events posted by handlers during the drain wait for the next one
        for _ in range(len(self._pending)):
            self.emit(self._pending.popleft())
            count += 1
        return count

    @property
    def pending(self) -> int:
        return len(self._pending)

    def get_history(self, event_type: Optional[EventType] = None, limit: int = 10) -> list[Event]:
        """Most recent emitted events, oldest first."""
        history = [e for e in self._history if event_type is None or e.type == event_type]
        return history[-limit:]


# Convenience functions for creating common events
def flap_event(source: str = "keyboard") -> Event:
    """Create a flap input event."""
    return Event(EventType.FLAP, source=source)


def sound_play_event(name: str, duration: Optional[float] = None, source: str = "game") -> Event:
    """Create an intent to (re)start a named sound cue."""
    return Event(EventType.SOUND_PLAY, data={"name": name, "duration": duration}, source=source)


def sound_stop_event(name: str, source: str = "game") -> Event:
    """Create an intent to halt a named sound cue."""
    return Event(EventType.SOUND_STOP, data={"name": name}, source=source)


def tick_event(delta: float, frame: int) -> Event:
    """Create a frame tick event."""
    return Event(EventType.TICK, data={"delta": delta, "frame": frame})
