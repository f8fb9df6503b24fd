from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from perf_monitor.core.config import Settings
from perf_monitor.runtime.observer import PerformanceRuntime
from perf_monitor.services.collector import MetricsCollector


@pytest.fixture
def config():
    """Default settings for the testing environment."""
    return Settings(app_environment="testing")


@pytest.fixture
def runtime(config):
    return PerformanceRuntime(config.supported_entry_types)


@pytest.fixture
def collector(runtime, config):
    return MetricsCollector(runtime, config=config)


@pytest.fixture
def mock_logger(monkeypatch):
    """Replace the collector's module logger."""
    logger = MagicMock()
    monkeypatch.setattr("perf_monitor.services.collector.logger", logger)
    return logger


@pytest.fixture
def test_client():
    """FastAPI test client with the application lifespan running."""
    from perf_monitor.main import app

    with TestClient(app) as client:
        yield client
