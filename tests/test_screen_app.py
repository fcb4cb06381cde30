"""Tests that mount the server screen in a running Textual app."""

import threading
from pathlib import Path
from unittest.mock import Mock

import pytest

# Skip tests if textual or pytest-asyncio is not available
pytest.importorskip("textual")
pytest.importorskip("pytest_asyncio")

from textual.app import App
from textual.widgets import Input

from config import Config
from models import LoadStatus, Server
from screen import AnisetteServersScreen
from storage import SELECTED_SERVER_KEY, SettingsStore
from ui import SELECTED_MARK, ServerTable, StatusLine
from viewmodel import ServerListModel

SOURCE_URL = "https://example.test/servers.json"
FIVE_SERVERS = [Server(f"Server {i}", f"10.0.0.{i}") for i in range(5)]


class GatedService:
    """Returns a fixed list; fetches wait until `gate` is set."""
    def __init__(self, servers):
        self.servers = servers
        self.urls = []
        self.gate = threading.Event()
        self.gate.set()

    def fetch(self, url):
        self.urls.append(url)
        self.gate.wait(5)
        return list(self.servers), None


class ScreenHost(App):
    CSS_PATH = str(Path(__file__).resolve().parent.parent / "anisette_servers.tcss")

    def __init__(self, screen: AnisetteServersScreen):
        super().__init__()
        self.servers_screen = screen
        self.dismissed = []

    def on_mount(self) -> None:
        self.push_screen(self.servers_screen, callback=self.dismissed.append)


def make_host(tmp_path, servers, selected=""):
    settings = SettingsStore(str(tmp_path / "settings.json"))
    if selected:
        settings.set(SELECTED_SERVER_KEY, selected)
    service = GatedService(servers)
    model = ServerListModel(service, settings, SOURCE_URL)
    screen = AnisetteServersScreen(model, Mock(), Config(), error_callback=Mock())
    return ScreenHost(screen), screen, service, settings


async def settle(pilot, screen):
    await screen.workers.wait_for_complete()
    await pilot.pause()


class TestRendering:
    @pytest.mark.asyncio
    async def test_rows_show_name_then_address(self, tmp_path):
        app, screen, service, _ = make_host(tmp_path, FIVE_SERVERS)
        async with app.run_test() as pilot:
            await settle(pilot, screen)
            table = screen.query_one(ServerTable)

            assert service.urls == [SOURCE_URL]
            assert table.row_count == 5
            name, address, mark = table.get_row("10.0.0.2")
            assert "Server 2" in name
            assert "10.0.0.2" in address
            assert mark == ""
            assert screen.query_one(StatusLine).status_text == "[green]5 servers[/green]"

    @pytest.mark.asyncio
    async def test_saved_selection_is_marked(self, tmp_path):
        app, screen, _, _ = make_host(tmp_path, FIVE_SERVERS, selected="10.0.0.4")
        async with app.run_test() as pilot:
            await settle(pilot, screen)
            table = screen.query_one(ServerTable)

            assert table.get_cell("10.0.0.4", "selected") == SELECTED_MARK
            assert table.get_cell("10.0.0.0", "selected") == ""

    @pytest.mark.asyncio
    async def test_duplicate_address_shows_once(self, tmp_path):
        servers = [Server("First", "1.2.3.4"), Server("Second", "1.2.3.4"), Server("Other", "5.6.7.8")]
        app, screen, _, _ = make_host(tmp_path, servers)
        async with app.run_test() as pilot:
            await settle(pilot, screen)
            table = screen.query_one(ServerTable)

            assert table.row_count == 2
            assert "First" in table.get_cell("1.2.3.4", "name")


class TestSelection:
    @pytest.mark.asyncio
    async def test_choosing_a_row_persists_and_keeps_cursor(self, tmp_path):
        app, screen, _, settings = make_host(tmp_path, FIVE_SERVERS, selected="10.0.0.1")
        async with app.run_test() as pilot:
            await settle(pilot, screen)
            table = screen.query_one(ServerTable)
            table.focus()
            await pilot.pause()

            for _ in range(3):
                await pilot.press("down")
            await pilot.press("enter")
            await pilot.pause()

            assert screen.model.state.selected_address == "10.0.0.3"
            assert settings.get(SELECTED_SERVER_KEY) == "10.0.0.3"
            assert table.cursor_row == 3
            assert table.get_cell("10.0.0.3", "selected") == SELECTED_MARK
            assert table.get_cell("10.0.0.1", "selected") == ""


class TestRefreshResults:
    @pytest.mark.asyncio
    async def test_stale_result_does_not_reach_the_table(self, tmp_path):
        app, screen, service, _ = make_host(tmp_path, FIVE_SERVERS)
        async with app.run_test() as pilot:
            await settle(pilot, screen)
            stale = screen.model.begin_refresh()
            screen.model.begin_refresh()
            service.servers = [Server("Old", "9.9.9.9")]

            await screen.perform_refresh(stale, SOURCE_URL)
            await pilot.pause()

            table = screen.query_one(ServerTable)
            assert table.row_count == 5
            assert "9.9.9.9" not in table.rows

    @pytest.mark.asyncio
    async def test_invalid_source_shows_status_and_drops_fetch_in_flight(self, tmp_path):
        app, screen, service, _ = make_host(tmp_path, FIVE_SERVERS)
        service.gate.clear()
        async with app.run_test() as pilot:
            await pilot.pause()
            assert screen.model.state.status is LoadStatus.LOADING

            screen.query_one(Input).value = "not a url"
            await pilot.pause()
            service.gate.set()
            await settle(pilot, screen)

            assert service.urls == [SOURCE_URL]
            assert screen.model.state.servers == []
            assert screen.query_one(ServerTable).row_count == 0
            assert screen.query_one(StatusLine).status_text == "[red]Invalid URL[/red]"

    @pytest.mark.asyncio
    async def test_editing_source_fetches_new_url_once(self, tmp_path):
        app, screen, service, _ = make_host(tmp_path, FIVE_SERVERS)
        async with app.run_test() as pilot:
            await settle(pilot, screen)

            screen.query_one(Input).value = "https://other.test/servers.json"
            await pilot.pause()
            await settle(pilot, screen)

            assert service.urls == [SOURCE_URL, "https://other.test/servers.json"]


class TestBack:
    @pytest.mark.asyncio
    async def test_escape_dismisses_without_outcome(self, tmp_path):
        app, screen, _, _ = make_host(tmp_path, FIVE_SERVERS)
        async with app.run_test() as pilot:
            await settle(pilot, screen)
            screen.query_one(ServerTable).focus()
            await pilot.press("escape")
            await pilot.pause()

            assert app.dismissed == [None]
