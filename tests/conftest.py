"""Pytest configuration"""

import pytest

from fakes import FakeHost
from panekeeper.content.handlers import default_registry
from panekeeper.telemetry import metrics


@pytest.fixture
def anyio_backend():
    """Run anyio tests on asyncio only"""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def registry(host):
    return default_registry(host, settle_seconds=0)
