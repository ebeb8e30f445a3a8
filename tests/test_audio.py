import pygame
import pytest

from flapgate.audio.engine import AudioEngine, render_samples, square
from flapgate.core.events import sound_play_event, sound_stop_event


class FakeSound:
    def __init__(self, fail=False):
        self.plays = 0
        self.stops = 0
        self.volume = None
        self.fail = fail

    def play(self):
        if self.fail:
            raise RuntimeError("device busy")
        self.plays += 1

    def stop(self):
        self.stops += 1

    def set_volume(self, value):
        self.volume = value


@pytest.fixture
def engine():
    engine = AudioEngine(volume=0.5)
    yield engine
    engine.cleanup()


@pytest.fixture
def flap_sound(engine):
    sound = FakeSound()
    engine.register_cue("flap", sound)
    return sound


def test_play_restarts_from_the_beginning(engine, flap_sound):
    assert engine.play_cue("flap")

    assert flap_sound.stops == 1
    assert flap_sound.plays == 1
    assert flap_sound.volume == 0.5
    assert engine.pending_stops() == {}


def test_auto_stop_after_duration(engine, flap_sound):
    engine.play_cue("flap", duration=2.5)
    assert engine.pending_stops() == {"flap": 2500.0}

    engine.update(1000)
    assert engine.pending_stops() == {"flap": 1500.0}
    assert flap_sound.stops == 1

    engine.update(1500)
    assert engine.pending_stops() == {}
    assert flap_sound.stops == 2


def test_retrigger_cancels_pending_auto_stop(engine, flap_sound):
    engine.play_cue("flap", duration=2.5)
    engine.update(2000)

    engine.play_cue("flap", duration=2.5)
    engine.update(2000)

    # The first deadline would have fired by now
    assert engine.pending_stops() == {"flap": 500.0}
    assert flap_sound.plays == 2

    engine.play_cue("flap")
    assert engine.pending_stops() == {}


def test_unknown_cue_is_ignored(engine):
    assert not engine.has_cue("missing")
    assert engine.play_cue("missing") is False
    engine.stop_cue("missing")


def test_init_reports_unavailable_mixer(engine, monkeypatch, tmp_path):
    def no_device(*args, **kwargs):
        raise pygame.error("No available audio device")

    monkeypatch.setattr(pygame.mixer, "init", no_device)

    assert engine.init(tmp_path) is False
    assert not engine.initialized
    assert not engine.has_cue("flap")
    assert engine.play_cue("flap", duration=2.5) is False
    engine.update(16.0)
    engine.cleanup()


def test_playback_failure_is_contained(engine):
    engine.register_cue("end", FakeSound(fail=True))
    assert engine.play_cue("end", duration=1.0) is False
    assert engine.pending_stops() == {}


def test_mute_blocks_playback_and_stops_sounds(engine, flap_sound):
    engine.play_cue("flap", duration=2.5)

    assert engine.toggle_mute() is True
    assert flap_sound.stops == 2
    assert engine.pending_stops() == {}
    assert engine.play_cue("flap") is False
    assert flap_sound.plays == 1

    assert engine.toggle_mute() is False
    assert engine.play_cue("flap")


def test_bus_intents_drive_playback(engine, flap_sound, bus):
    engine.attach(bus)

    bus.emit(sound_play_event("flap", duration=2.5))
    assert flap_sound.plays == 1
    assert "flap" in engine.pending_stops()

    bus.emit(sound_stop_event("flap"))
    assert engine.pending_stops() == {}

    engine.detach()
    bus.emit(sound_play_event("flap"))
    assert flap_sound.plays == 1


def test_volume_is_clamped(engine):
    engine.set_volume(3.0)
    assert engine.get_volume() == 1.0
    engine.set_volume(-1.0)
    assert engine.get_volume() == 0.0


def test_render_samples_length_and_range():
    samples = render_samples(0.01, lambda t: square(t, 440) * 4, lambda t: 1.0, sample_rate=8000)
    assert len(samples) == 80
    assert max(samples) == 32767
    assert min(samples) == -32767
