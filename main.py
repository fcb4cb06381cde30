# main.py
import logging
from typing import Optional

from textual.app import App

from config import Config
from screen import AnisetteServersScreen
from services import ServerListService
from storage import CredentialStore, SettingsStore
from viewmodel import ServerListModel

class AnisetteServersApp(App):
    BINDINGS = [
        ("d", "toggle_dark", "Toggle dark mode"),
        ("q", "quit", "Quit"),
    ]
    CSS_PATH = "anisette_servers.tcss"
    TITLE = "Anisette Servers"

    def __init__(self, model: ServerListModel, credentials: CredentialStore, config: Config):
        super().__init__()
        self.model = model
        self.credentials = credentials
        self.config = config
        self.adi_pb_reset = False
        self.reset_outcome: Optional[str] = None

    def on_mount(self) -> None:
        screen = AnisetteServersScreen(self.model, self.credentials, self.config, error_callback=self.on_adi_pb_reset)
        self.push_screen(screen, callback=self.handle_screen_dismissed)

    def handle_screen_dismissed(self, outcome: Optional[str]) -> None:
        self.reset_outcome = outcome
        self.exit()

    def on_adi_pb_reset(self) -> None:
        self.adi_pb_reset = True

    def action_toggle_dark(self) -> None:
        self.theme = "textual-light" if self.theme == "textual-dark" else "textual-dark"


def build_app(config: Config) -> AnisetteServersApp:
    settings = SettingsStore(config.SETTINGS_FILENAME)
    service = ServerListService(timeout=config.REQUEST_TIMEOUT)
    model = ServerListModel(service, settings, config.DEFAULT_SOURCE_URL)
    return AnisetteServersApp(model, CredentialStore(config.KEYRING_SERVICE), config)


if __name__ == "__main__":
    app_config = Config.from_env()
    logging.basicConfig(
        filename=app_config.LOG_FILENAME,
        level=logging.DEBUG if app_config.DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = build_app(app_config)
    app.run()
    selected = app.model.state.selected_address
    if selected:
        print(f"Anisette server: {selected}")
    if app.reset_outcome:
        print(app.reset_outcome)
    if app.adi_pb_reset:
        print("adi.pb was reset; sign in again to provision a new one.")
