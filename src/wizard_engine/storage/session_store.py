"""SessionStore abstract base class and implementations"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote, unquote


class SessionStore(ABC):
    """Abstract interface for wizard state persistence

    Keys look like ``"<wizard>::<field>"``; payloads are opaque bytes. The
    embedding host is responsible for serializing concurrent requests that
    share a key.
    """

    @abstractmethod
    def save(self, key: str, payload: bytes) -> None:
        """Save a payload

        Args:
            key: Persistence key
            payload: Bytes to persist
        """
        pass

    @abstractmethod
    def load(self, key: str) -> Optional[bytes]:
        """Load a payload

        Args:
            key: Persistence key

        Returns:
            Stored bytes if found, None otherwise
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a payload

        Args:
            key: Persistence key
        """
        pass

    def exists(self, key: str) -> bool:
        return self.load(key) is not None


class FilesystemStore(SessionStore):
    """SessionStore implementation using one file per key"""

    def __init__(self, base_path: Path = Path(".wizards")):
        """Initialize filesystem store

        Args:
            base_path: Base directory for state files (default: .wizards)
        """
        self.base_path = Path(base_path)

    def _path_for(self, key: str) -> Path:
        return self.base_path / f"{quote(key, safe='')}.state"

    def save(self, key: str, payload: bytes) -> None:
        """Atomic write of a state file

        Uses temporary file and atomic rename to ensure no partial writes.

        Raises:
            OSError: If file operations fail
        """
        self.base_path.mkdir(parents=True, exist_ok=True)

        state_file = self._path_for(key)
        temp_file = state_file.with_suffix(".state.tmp")

        try:
            temp_file.write_bytes(payload)
            temp_file.replace(state_file)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise OSError(f"Failed to save state {key}: {e}") from e

    def load(self, key: str) -> Optional[bytes]:
        """Load a state file

        Raises:
            OSError: If file read fails
        """
        state_file = self._path_for(key)

        if not state_file.exists():
            return None

        try:
            return state_file.read_bytes()
        except OSError as e:
            raise OSError(f"Failed to load state {key}: {e}") from e

    def delete(self, key: str) -> None:
        """Delete a state file

        Raises:
            OSError: If file deletion fails
        """
        state_file = self._path_for(key)

        if state_file.exists():
            try:
                state_file.unlink()
            except OSError as e:
                raise OSError(f"Failed to delete state {key}: {e}") from e

    def keys(self) -> List[str]:
        """Keys currently stored, decoded from file names"""
        if not self.base_path.exists():
            return []
        return sorted(unquote(path.name[:-len(".state")]) for path in self.base_path.glob("*.state"))


class InMemoryStore(SessionStore):
    """SessionStore implementation for testing without filesystem dependencies"""

    def __init__(self):
        """Initialize in-memory store"""
        self._storage: Dict[str, bytes] = {}

    def save(self, key: str, payload: bytes) -> None:
        self._storage[key] = bytes(payload)

    def load(self, key: str) -> Optional[bytes]:
        return self._storage.get(key)

    def delete(self, key: str) -> None:
        self._storage.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._storage.keys())
