"""Session storage implementations"""

from .session_store import SessionStore, FilesystemStore, InMemoryStore

__all__ = ["SessionStore", "FilesystemStore", "InMemoryStore"]
