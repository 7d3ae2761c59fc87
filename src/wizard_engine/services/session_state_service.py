"""WizardStateService for per-field wizard state persistence"""

import json
import logging
from typing import Any, Dict, Optional

from ..exceptions import SerializationError
from ..storage.session_store import SessionStore

logger = logging.getLogger(__name__)

CURRENT_FIELD = "current"
DATA_FIELD = "data"


class WizardStateService:
    """Service persisting a wizard's mutable fields

    Wraps a SessionStore and stores ``current`` and ``data`` under separate
    keys, ``[<prefix>::]<wizard>::<field>``, encoded as UTF-8 JSON.
    """

    def __init__(self, store: SessionStore, prefix: Optional[str] = None):
        """Initialize wizard state service

        Args:
            store: SessionStore implementation for persistence
            prefix: Optional namespace prepended to every key
        """
        self.store = store
        self.prefix = prefix

    def key(self, wizard_name: str, field: str) -> str:
        """Build the persistence key for one field of a wizard"""
        parts = [wizard_name, field]
        if self.prefix:
            parts.insert(0, self.prefix)
        return "::".join(parts)

    def _write(self, key: str, value: Any) -> None:
        self.store.save(key, json.dumps(value, sort_keys=True).encode("utf-8"))

    def _read(self, key: str) -> Any:
        payload = self.store.load(key)
        if payload is None:
            return None
        try:
            return json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationError(
                f"Persisted value under '{key}' is not valid JSON: {e}",
                "Delete the stored state for this wizard and start over"
            ) from e

    def save_current(self, wizard_name: str, current: Optional[str]) -> None:
        """Persist the current step name, deleting the key when it is None"""
        key = self.key(wizard_name, CURRENT_FIELD)
        if current is None:
            self.store.delete(key)
            return
        self._write(key, current)

    def load_current(self, wizard_name: str) -> Optional[str]:
        """Load the persisted current step name

        Raises:
            SerializationError: If the stored value is not a string
        """
        value = self._read(self.key(wizard_name, CURRENT_FIELD))
        if value is not None and not isinstance(value, str):
            raise SerializationError(
                f"Persisted current step of '{wizard_name}' must be a string, got {type(value).__name__}"
            )
        return value

    def save_data(self, wizard_name: str, data: Dict[str, Any]) -> None:
        """Persist the accumulated wizard data"""
        self._write(self.key(wizard_name, DATA_FIELD), data)

    def load_data(self, wizard_name: str) -> Optional[Dict[str, Any]]:
        """Load the persisted wizard data

        Raises:
            SerializationError: If the stored value is not a mapping
        """
        value = self._read(self.key(wizard_name, DATA_FIELD))
        if value is not None and not isinstance(value, dict):
            raise SerializationError(
                f"Persisted data of '{wizard_name}' must be a mapping, got {type(value).__name__}"
            )
        return value

    def load_state(self, wizard_name: str) -> Dict[str, Any]:
        """Load both fields, for diagnostics"""
        return {
            CURRENT_FIELD: self.load_current(wizard_name),
            DATA_FIELD: self.load_data(wizard_name),
        }

    def exists(self, wizard_name: str) -> bool:
        return any(
            self.store.exists(self.key(wizard_name, field))
            for field in (CURRENT_FIELD, DATA_FIELD)
        )

    def forget(self, wizard_name: str) -> None:
        """Delete all persisted fields of a wizard"""
        for field in (CURRENT_FIELD, DATA_FIELD):
            self.store.delete(self.key(wizard_name, field))
        logger.info("Forgot persisted state of wizard '%s'", wizard_name)
