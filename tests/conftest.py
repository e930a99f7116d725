import os
import tempfile
from pathlib import Path

import pytest

# Keep test runs from writing ~/.config/satnames/satnames.log.
os.environ.setdefault("SATNAMES_LOG_FILE", "0")

from fakes import (  # noqa: E402
    FakeMarket,
    FakeRegistry,
    FakeTimer,
    FakeWalletProvider,
    RecordingNavigator,
    run_inline,
)
from satnames.features.session.service import SessionManager  # noqa: E402
from satnames.shared.durable_store import JsonFileStore  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_satnames_storage(monkeypatch):
    """Run tests with an isolated storage directory."""
    FakeTimer.instances.clear()
    with tempfile.TemporaryDirectory(prefix="satnames-test-") as tmp_dir:
        monkeypatch.setenv("SATNAMES_DIR", tmp_dir)
        monkeypatch.setenv("SATNAMES_LOG_FILE", "0")
        yield Path(tmp_dir)


@pytest.fixture
def store(isolate_satnames_storage):
    return JsonFileStore(isolate_satnames_storage)


@pytest.fixture
def provider():
    return FakeWalletProvider()


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def market():
    return FakeMarket()


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def session_manager(provider):
    """A session manager already connected to the fake wallet."""
    manager = SessionManager(provider, spawn=run_inline, timer_factory=FakeTimer)
    manager.connect()
    return manager
