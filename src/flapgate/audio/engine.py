"""
Flapgate Audio Engine - named sound cues with optional auto-stop.

Cues are loaded from ``assets/sounds/<cue>.{ogg,wav,mp3}`` when present and
otherwise synthesised from simple chiptune waveforms. Playback problems are
logged and swallowed; they never reach the game loop.
"""

from pathlib import Path
from typing import Callable, Dict, Optional, Protocol
import array
import logging
import math

import pygame

from flapgate.core.events import Event, EventBus, EventType
from flapgate.core.state import CUE_END, CUE_FLAP, CUE_POINT, CUE_READY

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
SOUND_EXTENSIONS = (".ogg", ".wav", ".mp3")


class Playable(Protocol):
    """The part of ``pygame.mixer.Sound`` the engine relies on."""

    def play(self) -> object: ...

    def stop(self) -> None: ...

    def set_volume(self, value: float) -> None: ...


def square(t: float, freq: float) -> float:
    """Square wave oscillator."""
    return 1 if (t * freq) % 1 < 0.5 else -1


def triangle(t: float, freq: float) -> float:
    """Triangle wave oscillator."""
    p = (t * freq) % 1
    return 4 * abs(p - 0.5) - 1


def sine(t: float, freq: float) -> float:
    """Sine wave oscillator."""
    return math.sin(2 * math.pi * freq * t)


def render_samples(
    duration: float,
    voice: Callable[[float], float],
    envelope: Callable[[float], float],
    gain: float = 1.0,
    sample_rate: int = SAMPLE_RATE,
) -> array.array:
    """Render a mono 16-bit waveform from a voice and an envelope."""
    samples = array.array('h')
    for i in range(int(sample_rate * duration)):
        t = i / sample_rate
        val = max(-1.0, min(1.0, voice(t) * envelope(t) * gain))
        samples.append(int(val * 32767))
    return samples


class AudioEngine:
    """
    Plays the game's sound cues through ``pygame.mixer``.

    Auto-stop deadlines are advanced by ``update`` from the frame clock, so
    the engine never starts timers or threads of its own.
    """

    def __init__(self, volume: float = 1.0, sample_rate: int = SAMPLE_RATE) -> None:
        self._initialized = False
        self._sounds: Dict[str, Playable] = {}
        self._volume_master = max(0.0, min(1.0, volume))
        self._sample_rate = sample_rate
        self._muted = False
        self._stop_deadlines: Dict[str, float] = {}  # cue -> ms left
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self, sounds_path: Optional[Path] = None) -> bool:
        """Open the mixer and build the cue table."""
        try:
            pygame.mixer.pre_init(self._sample_rate, -16, 2, 512)
            pygame.mixer.init()
            self._initialized = True
            logger.info("Audio engine initialized")
        except Exception as e:
            logger.error(f"Failed to initialize audio: {e}")
            return False

        self._load_cues(sounds_path)
        return True

    # ===== CUE TABLE =====

    def register_cue(self, name: str, sound: Playable) -> None:
        """Add or replace a cue."""
        self._sounds[name] = sound

    def has_cue(self, name: str) -> bool:
        return name in self._sounds

    def _load_cues(self, sounds_path: Optional[Path]) -> None:
        generators = {
            CUE_READY: self._gen_ready,
            CUE_FLAP: self._gen_flap,
            CUE_POINT: self._gen_point,
            CUE_END: self._gen_end,
        }
        for name, generate in generators.items():
            sound = self._load_file(sounds_path, name) if sounds_path else None
            if sound is None:
                try:
                    sound = self._create_sound(generate())
                except Exception as e:
                    logger.error(f"Failed to synthesise cue {name}: {e}")
                    continue
            self.register_cue(name, sound)

        logger.info(f"Loaded {len(self._sounds)} sound cues")

    def _load_file(self, sounds_path: Path, name: str) -> Optional[pygame.mixer.Sound]:
        for ext in SOUND_EXTENSIONS:
            path = sounds_path / f"{name}{ext}"
            if not path.exists():
                continue
            try:
                sound = pygame.mixer.Sound(str(path))
                logger.debug(f"Loaded cue {name} from {path}")
                return sound
            except Exception as e:
                logger.warning(f"Could not load {path}: {e}")
        return None

    def _create_sound(self, samples: array.array) -> pygame.mixer.Sound:
        """Create a pygame Sound from mono samples (auto-converted to stereo)."""
        stereo = array.array('h')
        for s in samples:
            stereo.append(s)
            stereo.append(s)
        return pygame.mixer.Sound(buffer=stereo)

    def _gen_ready(self) -> array.array:
        """Rising swoosh."""
        return render_samples(
            0.25,
            lambda t: triangle(t, 300 + t * 2400),
            lambda t: max(0, 1 - t * 4),
            gain=0.35,
            sample_rate=self._sample_rate,
        )

    def _gen_flap(self) -> array.array:
        """Short wing beat."""
        return render_samples(
            0.12,
            lambda t: square(t, 520 - t * 1500) * 0.6 + sine(t, 180) * 0.4,
            lambda t: max(0, 1 - t * 9),
            gain=0.4,
            sample_rate=self._sample_rate,
        )

    def _gen_point(self) -> array.array:
        """Two-tone coin blip."""
        return render_samples(
            0.18,
            lambda t: square(t, 988 if t < 0.06 else 1319),
            lambda t: max(0, 1 - t * 5.5),
            gain=0.25,
            sample_rate=self._sample_rate,
        )

    def _gen_end(self) -> array.array:
        """Descending thud."""
        return render_samples(
            0.5,
            lambda t: square(t, max(60, 400 - t * 600)) * 0.7 + sine(t, 70) * 0.3,
            lambda t: max(0, 1 - t * 2),
            gain=0.35,
            sample_rate=self._sample_rate,
        )

    # ===== PLAYBACK API =====

    def play_cue(self, name: str, duration: Optional[float] = None) -> bool:
        """
        Restart a cue from its beginning.

        Args:
            name: Cue name
            duration: Seconds after which the cue is stopped, if given

        Returns:
            True if playback was started
        """
        # A new trigger always cancels the previous auto-stop for this cue
        self._stop_deadlines.pop(name, None)

        if self._muted:
            return False

        sound = self._sounds.get(name)
        if sound is None:
            logger.debug(f"Sound cue not available: {name}")
            return False

        try:
            sound.stop()
            sound.set_volume(self._volume_master)
            sound.play()
        except Exception as e:
            logger.warning(f"Playback of {name} failed: {e}")
            return False

        if duration:
            self._stop_deadlines[name] = duration * 1000.0
        return True

    def stop_cue(self, name: str) -> None:
        """Halt a cue and drop its pending auto-stop."""
        self._stop_deadlines.pop(name, None)
        sound = self._sounds.get(name)
        if sound is None:
            return
        try:
            sound.stop()
        except Exception as e:
            logger.warning(f"Stopping {name} failed: {e}")

    def pending_stops(self) -> Dict[str, float]:
        """Milliseconds left before each scheduled auto-stop."""
        return dict(self._stop_deadlines)

    def update(self, delta_ms: float) -> None:
        """Advance auto-stop deadlines by one frame."""
        if not self._stop_deadlines:
            return
        expired = []
        for name in self._stop_deadlines:
            self._stop_deadlines[name] -= delta_ms
            if self._stop_deadlines[name] <= 0:
                expired.append(name)
        for name in expired:
            logger.debug(f"Auto-stopping cue {name}")
            self.stop_cue(name)

    def stop_all(self) -> None:
        """Stop all sounds."""
        for name in list(self._sounds):
            self.stop_cue(name)

    # ===== VOLUME =====

    def set_volume(self, volume: float) -> None:
        """Set master volume (0.0 - 1.0)."""
        self._volume_master = max(0.0, min(1.0, volume))

    def get_volume(self) -> float:
        return self._volume_master

    def is_muted(self) -> bool:
        return self._muted

    def toggle_mute(self) -> bool:
        """Toggle mute state. Muting stops whatever is playing."""
        self._muted = not self._muted
        if self._muted:
            self.stop_all()
        logger.info(f"Audio {'muted' if self._muted else 'unmuted'}")
        return self._muted

    # ===== EVENT BUS =====

    def attach(self, event_bus: EventBus) -> None:
        """Consume SOUND_PLAY / SOUND_STOP intents from the bus."""
        self._unsubscribers.append(event_bus.subscribe(EventType.SOUND_PLAY, self._on_play))
        self._unsubscribers.append(event_bus.subscribe(EventType.SOUND_STOP, self._on_stop))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _on_play(self, event: Event) -> None:
        self.play_cue(event.data["name"], event.data.get("duration"))

    def _on_stop(self, event: Event) -> None:
        self.stop_cue(event.data["name"])

    def cleanup(self) -> None:
        """Cleanup audio resources."""
        self.detach()
        self._stop_deadlines.clear()
        if self._initialized:
            try:
                pygame.mixer.quit()
            except Exception as e:
                logger.warning(f"Mixer shutdown failed: {e}")
            self._initialized = False
            logger.info("Audio engine cleaned up")

