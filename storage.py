# storage.py
import json
import logging
import os
from typing import Any, Dict, Optional

import keyring
from keyring.errors import PasswordDeleteError

logger = logging.getLogger(__name__)

SELECTED_SERVER_KEY = "menuAnisetteURL"
SERVER_LIST_KEY = "menuAnisetteList"
ADI_PB_ENTRY = "adi.pb"


class SettingsStore:
    """A key-value settings file in JSON. Values read through get() are strings."""
    def __init__(self, filename: str):
        self.filename = filename

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.filename) or os.path.getsize(self.filename) == 0:
            return {}
        try:
            with open(self.filename, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            logger.warning("Settings file %s is unreadable, ignoring it: %s", self.filename, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Settings file %s does not hold an object, ignoring it", self.filename)
            return {}
        return data

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else default

    def set(self, key: str, value: str) -> bool:
        """Writes one key, leaving every other key as it was. Returns False if the file can't be written."""
        data = self._load()
        data[key] = value
        try:
            with open(self.filename, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4)
        except IOError as e:
            logger.error("Could not write %s to %s: %s", key, self.filename, e)
            return False
        return True


class CredentialStore:
    """The secure store holding the adi.pb blob."""
    def __init__(self, service: str):
        self.service = service

    def has_adi_pb(self) -> bool:
        return keyring.get_password(self.service, ADI_PB_ENTRY) is not None

    def clear_adi_pb(self) -> bool:
        """Deletes the adi.pb entry. Returns True if an entry was removed."""
        try:
            if not self.has_adi_pb():
                return False
            keyring.delete_password(self.service, ADI_PB_ENTRY)
        except PasswordDeleteError:
            return False
        return True
