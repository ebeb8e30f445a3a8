"""Core game framework for Flapgate."""

from .session import Bird, Obstacle, Phase, Session
from .events import EventBus, Event, EventType
from .physics import PhysicsStep
from .state import StateMachine

__all__ = [
    "Bird", "Obstacle", "Phase", "Session",
    "EventBus", "Event", "EventType",
    "PhysicsStep", "StateMachine",
]
