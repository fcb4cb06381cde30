# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

DEFAULT_SOURCE_URL = "https://servers.sidestore.io/servers.json"

@dataclass(frozen=True)
class Server:
    """A single Anisette server entry from the remote list."""
    name: str
    address: str

    @classmethod
    def from_dict(cls, item: dict) -> "Server":
        """Parses one raw `{"name", "address"}` item, raising ValueError if it is malformed."""
        if not isinstance(item, dict):
            raise ValueError(f"server entry must be an object, got {type(item).__name__}")
        name, address = item.get("name"), item.get("address")
        if not isinstance(name, str) or not isinstance(address, str):
            raise ValueError(f"server entry needs string 'name' and 'address': {item!r}")
        return cls(name=name, address=address)


class LoadStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class ServerListState:
    """A single object to hold the entire screen state."""
    source_url: str = DEFAULT_SOURCE_URL
    servers: List[Server] = field(default_factory=list)
    selected_address: str = ""
    status: LoadStatus = LoadStatus.IDLE
    error: Optional[str] = None
