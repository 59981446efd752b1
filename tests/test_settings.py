"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from config import settings
from config.settings import AppConfig, load_config


SETTING_KEYS = (
    "STORAGE_ROOT",
    "STORAGE_USE_ITEMS_DIR",
    "JPEG_QUALITY",
    "FETCH_TIMEOUT",
    "MAX_REDIRECTS",
    "SEND_BROWSER_HEADERS",
    "KEEP_FAILED_DOWNLOADS",
    "MAX_ALLOCATION_ATTEMPTS",
    "GIT_EXECUTABLE",
    "GIT_REMOTE",
    "GIT_TIMEOUT",
    "LOG_DIR",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch):
    """Keep .env values written by load_config from leaking into other tests."""
    environ = {key: value for key, value in settings.os.environ.items() if key not in SETTING_KEYS}
    monkeypatch.setattr(settings.os, "environ", environ)
    yield


def test_defaults_without_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_config(str(tmp_path / "missing.env"))

    assert config.storage_root == tmp_path.resolve()
    assert config.use_items_dir is False
    assert config.jpeg_quality == 90
    assert config.fetch_timeout == 30.0
    assert config.max_redirects == 10
    assert config.send_browser_headers is True
    assert config.keep_failed_downloads is False
    assert config.git_executable == "git"
    assert config.git_remote is None
    assert config.git_timeout is None
    assert config.log_dir is None


def test_env_file_values_are_loaded(tmp_path):
    storage = tmp_path / "storage"
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# local overrides",
                f"STORAGE_ROOT={storage}",
                "STORAGE_USE_ITEMS_DIR=yes",
                "JPEG_QUALITY=85",
                "FETCH_TIMEOUT=0",
                "MAX_REDIRECTS=4",
                "SEND_BROWSER_HEADERS=false",
                "KEEP_FAILED_DOWNLOADS=1",
                "GIT_REMOTE=origin",
                "GIT_TIMEOUT=60",
                f"LOG_DIR={tmp_path / 'logs'}",
                "LOG_LEVEL=debug",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(str(env_file))

    assert config.storage_root == storage.resolve()
    assert config.use_items_dir is True
    assert config.jpeg_quality == 85
    assert config.fetch_timeout is None
    assert config.max_redirects == 4
    assert config.send_browser_headers is False
    assert config.keep_failed_downloads is True
    assert config.git_remote == "origin"
    assert config.git_timeout == 60.0
    assert config.log_dir == (tmp_path / "logs").resolve()
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name, value",
    [
        ("JPEG_QUALITY", "high"),
        ("JPEG_QUALITY", "101"),
        ("MAX_REDIRECTS", "ten"),
        ("FETCH_TIMEOUT", "soon"),
        ("STORAGE_USE_ITEMS_DIR", "maybe"),
    ],
)
def test_invalid_values_raise(tmp_path, name, value):
    settings.os.environ[name] = value

    with pytest.raises(ValueError, match=name):
        load_config(str(tmp_path / "missing.env"))


def test_app_config_defaults():
    config = AppConfig()

    assert config.storage_root == Path(".")
    assert config.jpeg_quality == 90
    assert config.log_level == "INFO"
