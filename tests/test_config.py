from __future__ import annotations

from pathlib import Path

import pytest

from motor_tariff.core import config as app_config


def _write_settings(tmp_path: Path, body: str) -> Path:
    settings = tmp_path / "config" / "settings.yaml"
    settings.parent.mkdir(parents=True, exist_ok=True)
    settings.write_text(body, encoding="utf-8")
    return settings


def test_load_config_resolves_tariff_path_from_settings_location(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv(app_config.SOURCE_PATH_ENV, raising=False)
    settings = _write_settings(
        tmp_path,
        "tariff:\n  source: file\n  path: config/tariff.yaml\nquote:\n  validity_days: 30\n",
    )
    tariff_file = tmp_path / "config" / "tariff.yaml"
    tariff_file.write_text("version: test\n", encoding="utf-8")

    loaded = app_config.load_config(settings)

    assert loaded.tariff.source == "file"
    assert Path(loaded.tariff.path).resolve() == tariff_file.resolve()
    assert loaded.quote.validity_days == 30
    assert loaded.quote.reference_prefix == "SIM"
    assert loaded.quote.reference_length == 16
    assert loaded.logging.level == "INFO"


def test_source_path_env_overrides_settings(monkeypatch, tmp_path: Path) -> None:
    database = tmp_path / "tariff.db"
    monkeypatch.setenv(app_config.SOURCE_PATH_ENV, str(database))
    settings = _write_settings(tmp_path, "tariff:\n  source: database\n  path: data/other.db\n")

    loaded = app_config.load_config(settings)

    assert loaded.tariff.source == "database"
    assert loaded.tariff.path == str(database)


def test_config_path_env_is_preferred(monkeypatch, tmp_path: Path) -> None:
    settings = _write_settings(tmp_path, "logging:\n  level: debug\n")
    monkeypatch.setenv(app_config.CONFIG_PATH_ENV, str(settings))

    assert app_config.resolve_default_config_path().resolve() == settings.resolve()
    assert app_config.load_config().logging.level == "DEBUG"


def test_default_config_path_falls_back_to_working_directory(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv(app_config.CONFIG_PATH_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    settings = _write_settings(tmp_path, "{}\n")

    assert app_config.resolve_default_config_path().resolve() == settings.resolve()


def test_unknown_tariff_source_is_rejected(monkeypatch, tmp_path: Path) -> None:
    settings = _write_settings(tmp_path, "tariff:\n  source: http\n")

    with pytest.raises(RuntimeError):
        app_config.load_config(settings)
