# screen.py
import asyncio
import logging
from typing import Callable, Optional, Tuple

try:
    import pyperclip
except ImportError:
    pyperclip = None

from keyring.errors import KeyringError
from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header

from config import Config
from models import Server, ServerListState
from storage import CredentialStore
from ui import ActionBar, LogPane, ServerTable, SourceControls, StatusLine
from viewmodel import ServerListModel

logger = logging.getLogger(__name__)


class AnisetteServersScreen(Screen):
    """Pick an Anisette server from the remote list, edit the list source, or reset adi.pb."""
    BINDINGS = [
        ("escape", "back", "Back"),
        ("r", "refresh", "Refresh"),
        ("c", "copy_address", "Copy Address"),
    ]

    def __init__(self, model: ServerListModel, credentials: CredentialStore, config: Config,
                 error_callback: Callable[[], None]):
        super().__init__()
        self.model = model
        self.credentials = credentials
        self.config = config
        self.error_callback = error_callback
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._rendered_servers: Optional[Tuple[Server, ...]] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="server-pane"):
            yield ServerTable(id="server-table")
            yield StatusLine(id="status")
        with Vertical(id="controls"):
            yield SourceControls(self.model.state.source_url)
            yield ActionBar()
        yield LogPane(id="log", wrap=True, highlight=True, markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self._unsubscribe = self.model.subscribe(self.render_state)
        self.render_state(self.model.state)
        if self.config.DEBUG:
            self.query_one(LogPane).add_message("[yellow]⚠️ Debug build: Reset adi.pb leaves the keyring untouched.[/yellow]")
        self.start_refresh()

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def render_state(self, state: ServerListState) -> None:
        table = self.query_one(ServerTable)
        # rebuilding the table resets the cursor, so only a new list rebuilds it
        servers = tuple(state.servers)
        if servers != self._rendered_servers:
            self._rendered_servers = servers
            table.update_servers(state.servers, state.selected_address)
        elif state.selected_address != table.selected_address:
            table.mark_selected(state.selected_address)
        self.query_one(StatusLine).update_status(state)

    def start_refresh(self) -> None:
        self.workers.cancel_group(self, "refresh_worker")
        generation = self.model.begin_refresh()
        if generation is None:
            self.query_one(StatusLine).update_status(self.model.state)
            return
        url = self.model.state.source_url.strip()
        self.query_one(LogPane).add_message(f"🔎 Fetching servers from [b]{escape(url)}[/b]...")
        self.run_worker(self.perform_refresh(generation, url), group="refresh_worker", exclusive=True)

    async def perform_refresh(self, generation: int, url: str) -> None:
        log = self.query_one(LogPane)
        servers, error_details = await asyncio.to_thread(self.model.service.fetch, url)
        if not self.model.complete_refresh(generation, servers, error_details):
            return
        if error_details:
            log.add_message("[red]❌ Could not load the server list.[/red]")
            log.add_message(f"[dim]{escape(error_details)}[/dim]")
        else:
            log.add_message(f"🛰️ Loaded {len(servers)} servers.")

    def on_server_table_server_chosen(self, message: ServerTable.ServerChosen) -> None:
        log = self.query_one(LogPane)
        if self.model.select(message.address):
            log.add_message(f"[green]✅ Using [b]{escape(message.address)}[/b].[/green]")
        else:
            log.add_message(f"[red]❌ Selected {escape(message.address)}, but it could not be saved.[/red]")

    def on_source_controls_source_changed(self, message: SourceControls.SourceChanged) -> None:
        if message.url == self.model.state.source_url:
            return
        if not self.model.set_source_url(message.url):
            self.query_one(LogPane).add_message("[red]❌ Could not save the list source.[/red]")
        self.start_refresh()

    def on_action_bar_action_requested(self, message: ActionBar.ActionRequested) -> None:
        handlers = {
            "back": self.action_back,
            "refresh": self.action_refresh,
            "reset_adi_pb": self.action_reset_adi_pb,
        }
        handler = handlers.get(message.action)
        if handler:
            handler()

    def action_back(self) -> None:
        self.dismiss()

    def action_refresh(self) -> None:
        self.start_refresh()

    def reset_adi_pb(self) -> str:
        """Clears adi.pb from the keyring (skipped in debug builds) and returns what happened."""
        if self.config.DEBUG:
            outcome = "Debug build: adi.pb was left in the keychain."
        else:
            try:
                removed = self.credentials.clear_adi_pb()
            except KeyringError as e:
                logger.error("Clearing adi.pb from the keyring failed: %s", e)
                return f"Could not clear adi.pb: {e}"
            outcome = "Cleared adi.pb from keychain" if removed else "No adi.pb in the keychain to clear."
        logger.info(outcome)
        return outcome

    def action_reset_adi_pb(self) -> None:
        outcome = self.reset_adi_pb()
        self.error_callback()
        # the app reports the outcome once the screen is gone
        self.dismiss(outcome)

    def action_copy_address(self) -> None:
        log = self.query_one(LogPane)
        if not pyperclip:
            log.add_message("[red]❌ 'pyperclip' not installed (install the clipboard extra).[/red]")
            return
        address = self.model.state.selected_address
        if address:
            pyperclip.copy(address)
            log.add_message(f"📋 Copied [b]{escape(address)}[/b].")
        else:
            log.add_message("[yellow]⚠️ No server selected.[/yellow]")
