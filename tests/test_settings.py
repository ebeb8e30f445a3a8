import pytest
from pydantic import ValidationError

from flapgate.config.settings import GameSettings, Settings, get_settings


def test_game_defaults():
    game = GameSettings()

    assert (game.canvas_width, game.canvas_height) == (320, 480)
    assert game.ground_y == 368
    assert game.max_pipe_height == 218
    assert game.gravity == 0.25
    assert game.jump == -4.5
    assert game.seed is None


def test_gap_too_large_is_rejected():
    with pytest.raises(ValidationError):
        GameSettings(pipe_gap=300)


def test_spawn_interval_must_be_positive():
    with pytest.raises(ValidationError):
        GameSettings(pipe_spawn_interval=0)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FLAPGATE_DEBUG", "true")
    monkeypatch.setenv("FLAPGATE_GAME__GRAVITY", "0.3")
    monkeypatch.setenv("FLAPGATE_GAME__SEED", "7")
    monkeypatch.setenv("FLAPGATE_DISPLAY__FPS", "30")
    monkeypatch.setenv("FLAPGATE_AUDIO__ENABLED", "false")

    settings = Settings(_env_file=None)

    assert settings.debug is True
    assert settings.game.gravity == 0.3
    assert settings.game.seed == 7
    assert settings.game.jump == -4.5
    assert settings.display.fps == 30
    assert settings.audio.enabled is False


def test_asset_paths_follow_assets_root(tmp_path):
    settings = Settings(_env_file=None, assets_path=tmp_path)

    assert settings.images_path == tmp_path / "images"
    assert settings.sounds_path == tmp_path / "sounds"


def test_top_level_fields():
    assert set(Settings.model_fields) == {
        "debug", "assets_path", "log_file", "game", "display", "audio"
    }


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
