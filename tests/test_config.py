import json
import logging
import os
from pathlib import Path

import pytest

from config import AnalysisConfig, AppConfig, SettingsManager
from errors import InvalidConfigError, SignalScopeError


def test_analysis_defaults() -> None:
    config = AnalysisConfig()
    assert config.buffer_size == 2048
    assert config.sample_rate == 44_100
    assert config.nyquist == 22_050.0
    assert config.band_count == 1024


def test_analysis_config_is_immutable() -> None:
    config = AnalysisConfig()
    with pytest.raises(AttributeError):
        config.buffer_size = 4096


@pytest.mark.parametrize("kwargs", [
    {"buffer_size": 0},
    {"buffer_size": 1023},
    {"sample_rate": -1},
    {"window_type": "triangle"},
])
def test_analysis_config_rejects_bad_values(kwargs) -> None:
    with pytest.raises(InvalidConfigError):
        AnalysisConfig(**kwargs)


def test_invalid_config_error_is_library_error() -> None:
    assert issubclass(InvalidConfigError, SignalScopeError)
    assert issubclass(InvalidConfigError, ValueError)


def test_app_config_sets_root_log_level() -> None:
    previous = logging.getLogger().level
    try:
        AppConfig(log_level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG
    finally:
        logging.getLogger().setLevel(previous)


def test_settings_round_trip(tmp_path: Path) -> None:
    manager = SettingsManager(settings_file=tmp_path / "nested" / "settings.json")
    manager.save_settings({"analysis": {"window_type": "hanning"}, "app": {"debounce_ms": 50}})

    settings = manager.load_settings()
    assert manager.get_analysis_config(settings) == AnalysisConfig(window_type="hanning")
    assert manager.get_app_config(settings).debounce_ms == 50
    assert settings["app"]["log_level"] == "ERROR"


def test_missing_settings_file_gives_defaults(tmp_path: Path) -> None:
    manager = SettingsManager(settings_file=tmp_path / "absent.json")
    assert manager.get_analysis_config() == AnalysisConfig()


def test_corrupt_settings_file_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    manager = SettingsManager(settings_file=path)
    assert manager.load_settings() == manager.default_settings


def test_bad_analysis_values_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"analysis": {"buffer_size": 3, "unknown": 1}}))
    manager = SettingsManager(settings_file=path)
    assert manager.get_analysis_config() == AnalysisConfig()


@pytest.mark.skipif(os.name == "nt", reason="POSIX settings location")
def test_default_settings_path_uses_app_name(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    manager = SettingsManager(app_name="scope_test")
    assert manager.settings_file == tmp_path / ".config" / "scope_test" / "settings.json"


@pytest.mark.parametrize("kwargs", [
    {"buffer_size": 2048.0},
    {"buffer_size": True},
    {"sample_rate": 44100.0},
    {"sample_rate": "44100"},
])
def test_analysis_config_requires_integer_sizes(kwargs) -> None:
    with pytest.raises(InvalidConfigError):
        AnalysisConfig(**kwargs)


def test_float_buffer_size_in_settings_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"analysis": {"buffer_size": 2048.0}}))
    manager = SettingsManager(settings_file=path)
    assert manager.get_analysis_config() == AnalysisConfig()
