"""
Shared pytest fixtures for the Anisette server screen tests.
"""

from unittest.mock import Mock

import pytest

from models import Server
from storage import SettingsStore
from viewmodel import ServerListModel

SOURCE_URL = "https://example.test/servers.json"


@pytest.fixture
def settings(tmp_path):
    """A settings store backed by a file under tmp_path."""
    return SettingsStore(str(tmp_path / "settings.json"))


@pytest.fixture
def service():
    """A stand-in ServerListService returning one server."""
    fake = Mock()
    fake.fetch.return_value = ([Server("A", "1.2.3.4")], None)
    return fake


@pytest.fixture
def model(service, settings):
    return ServerListModel(service, settings, SOURCE_URL)
