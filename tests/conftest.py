"""Shared pytest fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Hide APP_* settings from the developer's shell so every test starts from defaults."""
    for name in [name for name in os.environ if name.startswith("APP_")]:
        monkeypatch.delenv(name)
