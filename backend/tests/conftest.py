"""Shared test fixtures and configuration for backend tests."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from ytmp3.config import AppSettings, StorageSettings, reset_config, set_config
from ytmp3.files.service import DownloadStore
from ytmp3.main import app
from ytmp3.media.runner import YtDlpRunner, get_runner


@pytest.fixture
def settings(tmp_path):
    """Install settings whose downloads directory lives under tmp_path."""
    cfg = AppSettings(
        storage=StorageSettings(downloads_dir=str(tmp_path / "downloads")),
    )
    set_config(cfg)
    DownloadStore.reset_instance()
    yield cfg
    DownloadStore.reset_instance()
    reset_config()


@pytest.fixture
def store(settings):
    """The download store the routers will use."""
    return DownloadStore.get_instance(settings.storage.downloads_dir)


@pytest.fixture
def fake_runner():
    """A YtDlpRunner stand-in injected through dependency_overrides."""
    runner = MagicMock(spec=YtDlpRunner)
    runner.fetch_info = AsyncMock()
    runner.extract_audio = AsyncMock()
    app.dependency_overrides[get_runner] = lambda: runner
    yield runner
    app.dependency_overrides.pop(get_runner, None)


@pytest.fixture
def api_client(settings):
    """Provide a TestClient for the main FastAPI app (lifespan not run)."""
    return TestClient(app)
