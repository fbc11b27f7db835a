"""Fixtures for end-to-end runs against the assembled application.

The app is started once per module in test mode, so the YouTube client is
backed by the demo transport, and with a single client key configured.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

E2E_API_KEY = "e2e-test-api-key"


@pytest.fixture(scope="module")
def e2e_env() -> Generator[None, None, None]:
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("APP_TESTING_TEST_MODE", "true")
        mp.setenv("APP_SECURITY_API_KEYS", f'["{E2E_API_KEY}"]')
        mp.setenv("APP_LOGGING_LEVEL", "WARNING")
        mp.setenv("APP_CONFIG_PATH", "nonexistent.yaml")
        yield


@pytest.fixture(scope="module")
def e2e_client(e2e_env: None) -> Generator[TestClient, None, None]:
    """Client whose lifespan has already run with the e2e environment."""
    from playlist_analyzer.main import create_app

    with TestClient(create_app()) as client:
        yield client


@pytest.fixture
def auth_headers() -> dict:
    return {"X-API-Key": E2E_API_KEY}


@pytest.fixture
def demo_playlist_url() -> str:
    """URL for the four-video demo playlist."""
    from playlist_analyzer.testing import DEMO_PLAYLIST_ID

    return f"https://www.youtube.com/playlist?list={DEMO_PLAYLIST_ID}"


@pytest.fixture
def watch_url_with_playlist() -> str:
    """Watch URL that carries the demo playlist in its list= parameter."""
    from playlist_analyzer.testing import DEMO_PLAYLIST_ID

    return f"https://www.youtube.com/watch?v=dQw4w9WgXcQ&list={DEMO_PLAYLIST_ID}&index=1"
