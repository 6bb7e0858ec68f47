"""
Test Configuration File

Unified setup for Python path, avoiding sys.path.insert in each test file.
Provides isolated configuration and database fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add the src directory to the Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def anyio_backend():
    """Async tests run on asyncio only."""
    return "asyncio"


@pytest.fixture
def config(tmp_path, monkeypatch):
    """ConfigService bound to a throwaway file, with user directories sandboxed."""
    from services.config_service import ConfigService

    monkeypatch.setenv("APPDATA", str(tmp_path / "user-config"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "user-config"))

    ConfigService.reset_instance()
    service = ConfigService(str(tmp_path / "config.yaml"))
    service.reset()
    yield service
    ConfigService.reset_instance()


@pytest.fixture
def db(tmp_path):
    from core.database import DatabaseManager

    manager = DatabaseManager(str(tmp_path / "smart_queue.db"))
    yield manager
    manager.close()


@pytest.fixture
def event_bus():
    from core.event_bus import EventBus

    bus = EventBus()
    yield bus
    bus.clear()
