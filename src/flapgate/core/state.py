"""
State machine for the Flapgate session flow.

States:
    AWAITING_START: "Get ready" screen; only the ground scrolls
    ACTIVE: Bird and pipes simulated every frame
    ENDED: Game over; everything frozen until the next flap restarts
"""

from typing import Callable
import logging

from flapgate.core.events import Event, EventType, sound_play_event, sound_stop_event
from flapgate.core.physics import PhysicsStep, StepEvent, StepEventKind
from flapgate.core.session import Phase, Session

logger = logging.getLogger(__name__)

# Sound cue names understood by the audio collaborator
CUE_READY = "ready"
CUE_FLAP = "flap"
CUE_POINT = "point"
CUE_END = "end"

PhaseListener = Callable[[Phase, Phase, Session], None]


class StateMachine:
    """
    Gates which updates and inputs apply to a session.

    Every public method returns the events (audio intents, phase changes,
    score updates) it produced instead of performing any I/O.
    """

    VALID_TRANSITIONS: list[tuple[Phase, Phase]] = [
        (Phase.AWAITING_START, Phase.ACTIVE),
        (Phase.ACTIVE, Phase.ENDED),
        (Phase.ENDED, Phase.AWAITING_START),  # Restart
    ]

    def __init__(self, physics: PhysicsStep) -> None:
        self.physics = physics
        self._listeners: list[PhaseListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)

    def can_transition(self, session: Session, to_phase: Phase) -> bool:
        """Check if transition to given phase is valid."""
        return (session.phase, to_phase) in self._valid_transitions

    def transition(self, session: Session, to_phase: Phase) -> list[Event]:
        """
        Move the session to a new phase.

        Returns:
            A single PHASE_CHANGED event, or nothing if the move is invalid
        """
        if not self.can_transition(session, to_phase):
            logger.warning(
                f"Invalid transition: {session.phase.name} -> {to_phase.name}"
            )
            return []

        old_phase = session.phase
        session.phase = to_phase
        logger.info(f"Phase transition: {old_phase.name} -> {to_phase.name}")

        for listener in self._listeners:
            try:
                listener(old_phase, to_phase, session)
            except Exception as e:
                logger.error(f"Error in phase listener: {e}")

        return [Event(
            EventType.PHASE_CHANGED,
            data={"from": old_phase, "to": to_phase},
            source="state",
        )]

    def add_listener(self, callback: PhaseListener) -> None:
        """Add a phase change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: PhaseListener) -> None:
        """Remove a phase change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def handle_flap(self, session: Session) -> list[Event]:
        """
        Apply one flap input according to the current phase.

        A flap on the "get ready" screen starts the run and also counts as
        the first jump.
        """
        events: list[Event] = []

        if session.phase is Phase.AWAITING_START:
            events += self.transition(session, Phase.ACTIVE)
            events.append(sound_play_event(CUE_READY, source="state"))

        if session.phase is Phase.ACTIVE:
            self.physics.flap(session.bird)
            events.append(sound_play_event(
                CUE_FLAP,
                duration=self.physics.settings.flap_cue_duration,
                source="state",
            ))
        elif session.phase is Phase.ENDED:
            events += self.restart(session)

        return events

    def restart(self, session: Session) -> list[Event]:
        """Full reset back to the "get ready" screen."""
        events = self.transition(session, Phase.AWAITING_START)
        if events:
            session.reset()
        return events

    def update(self, session: Session, step_events: list[StepEvent]) -> list[Event]:
        """Turn the physics report for a frame into score and end events."""
        if session.phase is not Phase.ACTIVE:
            return []

        events: list[Event] = []
        ended = False
        for step_event in step_events:
            if step_event.kind is StepEventKind.SCORE:
                logger.info(f"Score: {step_event.score}")
                events.append(Event(EventType.SCORE, data={"score": step_event.score}, source="physics"))
                events.append(sound_play_event(CUE_POINT, source="state"))
            else:
                events.append(Event(
                    EventType.COLLISION,
                    data={"ground": step_event.kind is StepEventKind.GROUND},
                    source="physics",
                ))
                ended = True

        if ended:
            logger.info(f"Run over at frame {session.frame_count} with score {session.score}")
            events += self.transition(session, Phase.ENDED)
            events.append(sound_stop_event(CUE_FLAP, source="state"))
            events.append(sound_play_event(CUE_END, source="state"))

        return events
