"""Unit tests for config.py"""

from datetime import datetime, timedelta

import pytest

from postpub.config import load_config


@pytest.fixture(autouse=True)
def chdir_tmp(tmp_path, monkeypatch):
    """Run each test from a clean tmp directory so no stray config.yaml is read."""
    monkeypatch.chdir(tmp_path)


def test_load_config_defaults():
    """Settings defaults are used when no config.yaml, env var, or CLI override exists."""
    settings = load_config()
    assert settings.source_dir == "_posts"
    assert settings.link_prefix == "/posts/"
    assert settings.default_timezone is None
    assert settings.tz() is None


def test_load_config_reads_config_yaml(tmp_path):
    """Values in config.yaml replace the defaults."""
    (tmp_path / "config.yaml").write_text("output_dir: public\nworkers: 2\n")
    settings = load_config()
    assert settings.output_dir == "public"
    assert settings.workers == 2


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """POSTPUB_OUTPUT_DIR takes precedence over config.yaml output_dir."""
    (tmp_path / "config.yaml").write_text("output_dir: public\n")
    monkeypatch.setenv("POSTPUB_OUTPUT_DIR", "site")
    assert load_config().output_dir == "site"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("POSTPUB_WORKERS", "3")
    assert load_config(overrides={"workers": 1}).workers == 1
    assert load_config(overrides={"workers": None}).workers == 3


def test_load_config_env_strict_is_coerced(monkeypatch):
    """POSTPUB_STRICT env var is coerced to bool."""
    monkeypatch.setenv("POSTPUB_STRICT", "true")
    assert load_config().strict is True


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_rejects_zero_workers():
    with pytest.raises(ValueError):
        load_config(overrides={"workers": 0})


def test_load_config_default_timezone():
    """A known IANA zone is accepted and exposed as a tzinfo."""
    settings = load_config(overrides={"default_timezone": "UTC"})
    assert datetime(2025, 1, 1, tzinfo=settings.tz()).utcoffset() == timedelta(0)


def test_load_config_unknown_timezone():
    with pytest.raises(ValueError, match="Unknown timezone"):
        load_config(overrides={"default_timezone": "Mars/Olympus_Mons"})
