# viewmodel.py
import logging
from dataclasses import replace
from typing import Callable, List, Optional

from models import LoadStatus, Server, ServerListState
from services import ServerListService, is_valid_source_url
from storage import SELECTED_SERVER_KEY, SERVER_LIST_KEY, SettingsStore

logger = logging.getLogger(__name__)

Listener = Callable[[ServerListState], None]


class ServerListModel:
    """State container for the server screen; notifies subscribers on every new snapshot."""
    def __init__(self, service: ServerListService, settings: SettingsStore, default_source_url: str):
        self.service = service
        self.settings = settings
        self._listeners: List[Listener] = []
        self._generation = 0
        self._state = ServerListState(
            source_url=settings.get(SERVER_LIST_KEY) or default_source_url,
            selected_address=settings.get(SELECTED_SERVER_KEY) or "",
        )

    @property
    def state(self) -> ServerListState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers `listener` for state changes and returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _set_state(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def set_source_url(self, url: str) -> bool:
        """Stores a new list source and persists it. Returns False if persisting failed."""
        if url == self._state.source_url:
            return True
        self._set_state(source_url=url)
        return self.settings.set(SERVER_LIST_KEY, url)

    def select(self, address: str) -> bool:
        """Marks `address` as the chosen server and persists it. Returns False if persisting failed."""
        self._set_state(selected_address=address)
        return self.settings.set(SELECTED_SERVER_KEY, address)

    def begin_refresh(self) -> Optional[int]:
        """
        Starts a refresh of the current source.

        Returns the generation the result must be completed with, or None
        when the source URL is not valid. An invalid source still supersedes
        any fetch in flight, so its result is dropped.
        """
        if not is_valid_source_url(self._state.source_url):
            self.cancel_refresh()
            return None
        self._generation += 1
        self._set_state(status=LoadStatus.LOADING, error=None)
        return self._generation

    def cancel_refresh(self) -> None:
        """Drops the result of any fetch in flight. A pending LOADING status falls back to IDLE."""
        self._generation += 1
        if self._state.status is LoadStatus.LOADING:
            self._set_state(status=LoadStatus.IDLE)

    def complete_refresh(self, generation: int, servers: Optional[List[Server]], error: Optional[str]) -> bool:
        """Applies a finished fetch. Results from superseded refreshes are dropped and False is returned."""
        if generation != self._generation:
            logger.debug("Dropping stale server list result (generation %d, latest %d)", generation, self._generation)
            return False
        if servers is None:
            self._set_state(status=LoadStatus.FAILED, error=error or "Unknown error")
        else:
            self._set_state(servers=list(servers), status=LoadStatus.LOADED, error=None)
        return True

    def refresh(self) -> Optional[int]:
        """Fetches the list synchronously. Returns the generation used, or None if the URL was invalid."""
        generation = self.begin_refresh()
        if generation is None:
            return None
        servers, error = self.service.fetch(self._state.source_url.strip())
        self.complete_refresh(generation, servers, error)
        return generation
