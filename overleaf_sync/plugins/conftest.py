"""Shared fixtures for plugin tests."""

import pytest

from .overleaf.config_loader import ENV_CONFIG_PATH, ENV_OVERRIDES


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point HOME at a temp dir and drop OVERLEAF_* overrides."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(ENV_CONFIG_PATH, raising=False)
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    return home
