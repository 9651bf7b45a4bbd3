from __future__ import annotations

from pathlib import Path

import pytest

from image_analyzer.core.settings import SettingsError, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("APP_ANALYSIS_DELAY_S", "APP_DEFAULT_MODEL", "APP_LOG_LEVEL", "APP_SETTINGS_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_from_empty_file(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("", encoding="utf-8")

    loaded = load_settings(path)

    assert loaded.settings.analysis_delay_s == 2.0
    assert loaded.settings.default_model == "gpt-4o-mini"
    assert list(loaded.settings.model_labels()) == ["gpt-4o-mini", "gpt-4o", "gpt-5"]
    assert "svg" in loaded.settings.accepted_types


def test_yaml_values_and_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "app.yaml"
    path.write_text("analysis_delay_s: 0.5\ndefault_model: gpt-4o\n", encoding="utf-8")
    monkeypatch.setenv("APP_DEFAULT_MODEL", "gpt-5")
    monkeypatch.setenv("APP_LOG_LEVEL", "debug")

    settings = load_settings(path).settings

    assert settings.analysis_delay_s == 0.5
    assert settings.default_model == "gpt-5"
    assert settings.log_level == "DEBUG"


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("models: [unclosed", encoding="utf-8")

    with pytest.raises(SettingsError):
        load_settings(path)


def test_non_mapping_root_raises(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(SettingsError):
        load_settings(path)


def test_unknown_default_model_raises(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("default_model: claude\n", encoding="utf-8")

    with pytest.raises(SettingsError):
        load_settings(path)


def test_negative_delay_raises(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("analysis_delay_s: -1\n", encoding="utf-8")

    with pytest.raises(SettingsError):
        load_settings(path)


def test_missing_override_path_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_SETTINGS_PATH", str(tmp_path / "nope.yaml"))

    with pytest.raises(SettingsError):
        load_settings()


def test_project_settings_file_loads():
    path = Path(__file__).resolve().parents[1] / "config" / "app.yaml"

    settings = load_settings(path).settings

    assert settings.default_model == "gpt-4o-mini"
    assert {"avif", "heic", "ico", "svg"} <= set(settings.accepted_types)
