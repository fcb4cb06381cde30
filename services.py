# services.py
import logging
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import requests

from models import Server

logger = logging.getLogger(__name__)

USER_AGENT = "anisette-servers/0.1"


def is_valid_source_url(url: str) -> bool:
    """True when `url` is an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ServerListService:
    """A service to fetch and decode the remote Anisette server list."""
    def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self.session = session

    def fetch(self, url: str) -> Tuple[Optional[List[Server]], Optional[str]]:
        """GETs the list at `url`, returning (servers, None) or (None, error_details)."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.info("Fetching server list from %s failed: %s", url, e)
            return None, f"Request failed: {e}"

        try:
            return self.decode(response.json()), None
        except ValueError as e:
            logger.warning("Failed to decode server list from %s: %s", url, e)
            return None, f"Failed to decode server list: {e}"

    def decode(self, payload) -> List[Server]:
        """Parses a decoded `{"servers": [...]}` body, raising ValueError on schema mismatch."""
        if not isinstance(payload, dict) or "servers" not in payload:
            raise ValueError("expected an object with a 'servers' field")
        items = payload["servers"]
        if not isinstance(items, list):
            raise ValueError("'servers' must be a list")
        return [Server.from_dict(item) for item in items]
