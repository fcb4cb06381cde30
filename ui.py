# ui.py
from typing import List

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button, DataTable, Input, Label, RichLog, Static

from models import LoadStatus, Server, ServerListState
from services import is_valid_source_url

SELECTED_MARK = "✔"


def describe_status(state: ServerListState) -> str:
    """One line of Rich markup describing where the list is in its load cycle."""
    if not is_valid_source_url(state.source_url):
        return "[red]Invalid URL[/red]"
    if state.status is LoadStatus.LOADING:
        return "[yellow]Loading servers...[/yellow]"
    if state.status is LoadStatus.FAILED:
        return f"[red]Failed: {escape(state.error or 'unknown error')}[/red]"
    if state.status is LoadStatus.LOADED:
        if not state.servers:
            return "No servers found."
        noun = "server" if len(state.servers) == 1 else "servers"
        return f"[green]{len(state.servers)} {noun}[/green]"
    return "[dim]Not loaded yet.[/dim]"


class ServerTable(DataTable):
    """Selectable list of servers keyed by address."""
    class ServerChosen(Message):
        def __init__(self, address: str) -> None:
            self.address = address
            super().__init__()

    def __init__(self, **kwargs) -> None:
        super().__init__(cursor_type="row", **kwargs)
        self.selected_address = ""
        # columns exist before mount so the screen can fill rows from its own on_mount
        self.add_column("Name", key="name")
        self.add_column("Address", key="address")
        self.add_column("", key="selected", width=2)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value:
            self.post_message(self.ServerChosen(event.row_key.value))

    def update_servers(self, servers: List[Server], selected_address: str) -> None:
        """Rebuilds every row. This resets the cursor, so use mark_selected for selection changes."""
        self.clear()
        self.selected_address = selected_address
        for s in servers:
            # add_row rejects duplicate keys, so a repeated address keeps its first row
            if s.address in self.rows:
                continue
            mark = SELECTED_MARK if selected_address and s.address == selected_address else ""
            self.add_row(f"[b]{escape(s.name)}[/b]", f"[dim]{escape(s.address)}[/dim]", mark, key=s.address)

    def mark_selected(self, address: str) -> None:
        """Moves the selected marker in place, keeping the cursor where it is."""
        previous = self.selected_address
        self.selected_address = address
        if previous and previous in self.rows:
            self.update_cell(previous, "selected", "")
        if address and address in self.rows:
            self.update_cell(address, "selected", SELECTED_MARK)


class SourceControls(Static):
    """Widget for the list source URL field."""
    class SourceChanged(Message):
        def __init__(self, url: str) -> None:
            self.url = url
            super().__init__()

    def __init__(self, source_url: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.source_url = source_url

    def compose(self) -> ComposeResult:
        yield Label("Server list source:")
        yield Input(value=self.source_url, placeholder="Anisette Server List", id="source-input")

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self.post_message(self.SourceChanged(event.value.strip()))


class ActionBar(Static):
    """The Back / Refresh Servers / Reset adi.pb buttons."""
    class ActionRequested(Message):
        def __init__(self, action: str) -> None:
            self.action = action
            super().__init__()

    def compose(self) -> ComposeResult:
        with Horizontal(id="nav-buttons"):
            yield Button("Back", id="back", variant="primary")
            yield Button("Refresh Servers", id="refresh", variant="primary")
        yield Button("Reset adi.pb", id="reset_adi_pb", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id:
            self.post_message(self.ActionRequested(event.button.id))


class StatusLine(Static):
    status_text = ""

    def update_status(self, state: ServerListState) -> None:
        self.status_text = describe_status(state)
        self.update(self.status_text)


class LogPane(RichLog):
    """A dedicated widget for logging application events."""
    def add_message(self, message: str) -> None:
        self.write(message)
