import logging

import pygame
import pytest

from flapgate.config.settings import AudioSettings, GameSettings, Settings
from flapgate.core.events import EventType, flap_event, tick_event
from flapgate.core.session import Phase
from flapgate.main import FlapgateApp


@pytest.fixture
def make_app(tmp_path):
    apps = []

    def build(audio_enabled=False, debug=False):
        settings = Settings(
            _env_file=None,
            debug=debug,
            assets_path=tmp_path,
            game=GameSettings(seed=11),
            audio=AudioSettings(enabled=audio_enabled),
        )
        app = FlapgateApp(settings)
        apps.append(app)
        return app

    yield build
    for app in apps:
        app.game.close()
        app.audio.cleanup()


@pytest.fixture
def app(make_app):
    return make_app()


def press(app, key):
    app.window._handle_keydown(pygame.event.Event(pygame.KEYDOWN, key=key))
    app.event_bus.drain()


def test_flap_key_starts_the_run(app):
    press(app, pygame.K_SPACE)

    assert app.game.phase is Phase.ACTIVE


def test_input_waits_for_the_next_frame(app):
    app.window._handle_keydown(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_SPACE))

    assert app.game.phase is Phase.AWAITING_START
    assert app.event_bus.pending == 1

    app.event_bus.drain()
    assert app.game.phase is Phase.ACTIVE


def test_tick_advances_game_and_audio_clock(app):
    press(app, pygame.K_UP)
    app.audio.register_cue("flap", _SilentSound())
    app.audio.play_cue("flap", duration=2.5)

    app.event_bus.emit(tick_event(0.016, 1))

    assert app.game.session.frame_count == 1
    assert app.game.elapsed_ms == pytest.approx(16.0)
    assert app.audio.pending_stops()["flap"] == pytest.approx(2484.0)


def test_mute_key_toggles_audio(app):
    press(app, pygame.K_m)
    assert app.audio.is_muted()
    assert app.event_bus.get_history(EventType.TOGGLE_MUTE)

    press(app, pygame.K_m)
    assert not app.audio.is_muted()


def test_quit_keys_stop_the_window(app):
    app.window._running = True
    press(app, pygame.K_q)
    assert not app.window.running


def test_stop_ends_the_window_loop(app):
    app.window._running = True
    app.window.stop()
    assert not app.window.running


def test_game_runs_when_the_mixer_cannot_open(make_app, monkeypatch):
    def no_device(*args, **kwargs):
        raise pygame.error("No available audio device")

    monkeypatch.setattr(pygame.mixer, "init", no_device)

    app = make_app(audio_enabled=True)

    assert not app.audio.initialized
    press(app, pygame.K_SPACE)
    for frame in range(5):
        app.event_bus.emit(tick_event(0.016, frame))
    assert app.game.phase is Phase.ACTIVE
    assert app.game.session.frame_count == 5


def test_debug_mode_traces_events(make_app, caplog):
    app = make_app(debug=True)
    caplog.set_level(logging.DEBUG, logger="flapgate.main")

    app.event_bus.emit(flap_event())
    app.event_bus.emit(tick_event(0.016, 0))

    traced = [r.getMessage() for r in caplog.records if r.name == "flapgate.main"]
    assert any(m.startswith("Event FLAP from keyboard") for m in traced)
    assert not any(m.startswith("Event TICK") for m in traced)


class _SilentSound:
    def play(self):
        pass

    def stop(self):
        pass

    def set_volume(self, value):
        pass
