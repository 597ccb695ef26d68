"""
Persisted microphone-permission setting.

Stored as a plain string ("granted" | "denied") under its own storage key;
an absent key means the user has not been asked yet.
"""

import logging
from typing import Optional

from gameverse.storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

GRANTED = "granted"
DENIED = "denied"


class PermissionSettings:
    def __init__(self, storage: KeyValueStorage, key: str = "micPermissionStatus"):
        self.storage = storage
        self.key = key
        self._cached: Optional[str] = None
        self._loaded = False

    def status(self) -> Optional[str]:
        """'granted', 'denied' or None when unset."""
        if not self._loaded:
            try:
                value = self.storage.get(self.key)
            except StorageError as e:
                logger.warning(f"[PERMISSION] Could not read {self.key}: {e}")
                value = None
            self._cached = value if value in (GRANTED, DENIED) else None
            self._loaded = True
        return self._cached

    @property
    def granted(self) -> bool:
        return self.status() == GRANTED

    @property
    def denied(self) -> bool:
        return self.status() == DENIED

    def grant(self) -> None:
        self._set(GRANTED)

    def deny(self) -> None:
        self._set(DENIED)

    def reset(self) -> None:
        self._cached = None
        self._loaded = True
        try:
            self.storage.remove(self.key)
        except StorageError as e:
            logger.warning(f"[PERMISSION] Could not clear {self.key}: {e}")
        logger.info("[PERMISSION] Microphone permission reset")

    def _set(self, value: str) -> None:
        self._cached = value
        self._loaded = True
        try:
            self.storage.set(self.key, value)
        except StorageError as e:
            logger.warning(f"[PERMISSION] Could not persist {value}: {e}")
        logger.info(f"[PERMISSION] Microphone permission {value}")
