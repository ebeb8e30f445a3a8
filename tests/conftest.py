import pytest

from flapgate.config.settings import GameSettings
from flapgate.core.events import EventBus
from flapgate.core.loop import GameLoop
from flapgate.core.physics import PhysicsStep
from flapgate.core.session import Obstacle, Phase, Session
from flapgate.core.state import StateMachine


class FixedRandom:
    """Random source that always returns the same pick (or the low bound)."""

    def __init__(self, value=None):
        self.value = value
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return a if self.value is None else self.value


@pytest.fixture
def settings():
    return GameSettings()


@pytest.fixture
def rng():
    return FixedRandom(120)


@pytest.fixture
def physics(settings, rng):
    return PhysicsStep(settings, rng)


@pytest.fixture
def machine(physics):
    return StateMachine(physics)


@pytest.fixture
def session(settings):
    return Session.new(settings)


@pytest.fixture
def active_session(session):
    session.phase = Phase.ACTIVE
    return session


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorded(bus):
    events = []
    bus.subscribe_all(events.append)
    return events


@pytest.fixture
def game(settings, bus, rng):
    loop = GameLoop(settings, event_bus=bus, rng=rng)
    yield loop
    loop.close()


@pytest.fixture
def make_obstacle(settings):
    def build(x, top_height=120, passed=False):
        return Obstacle(
            x=x,
            top_height=top_height,
            width=settings.pipe_width,
            gap=settings.pipe_gap,
            passed=passed,
        )
    return build
