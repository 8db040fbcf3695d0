import json
from pathlib import Path

from nightfall.settings import Settings, load_settings, save_settings


def test_from_dict_clamps_and_coerces_values() -> None:
    settings = Settings.from_dict(
        {"sound_enabled": "off", "text_speed": 99, "reduce_animations": "yes", "color_output": 0}
    )

    assert settings.sound_enabled is False
    assert settings.text_speed == 4.0
    assert settings.reduce_animations is True
    assert settings.color_output is False


def test_load_settings_falls_back_to_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "missing.json") == Settings()

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert load_settings(broken) == Settings()


def test_save_settings_writes_sanitized_copy(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    settings = Settings(sound_enabled=False, text_speed=-3)

    saved = save_settings(settings, path)

    assert saved.text_speed == 0.0
    assert json.loads(path.read_text())["sound_enabled"] is False
    assert load_settings(path) == saved
    assert settings.text_speed == -3
