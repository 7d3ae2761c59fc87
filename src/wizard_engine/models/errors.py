"""Error bag collecting validation messages keyed by field path"""
from typing import Dict, Iterator, List, Mapping, Optional


class ErrorBag:
    """Field path to message list mapping, e.g. ``{"account.email": ["..."]}``"""

    def __init__(self, messages: Optional[Mapping[str, List[str]]] = None):
        self._messages: Dict[str, List[str]] = {}
        for path, items in (messages or {}).items():
            for message in items:
                self.add(path, message)

    def add(self, path: str, message: str) -> "ErrorBag":
        """Append a message for path, ignoring exact duplicates"""
        bucket = self._messages.setdefault(path, [])
        if message not in bucket:
            bucket.append(message)
        return self

    def merge(self, other: "ErrorBag") -> "ErrorBag":
        for path, items in other.to_dict().items():
            for message in items:
                self.add(path, message)
        return self

    def has(self, path: str) -> bool:
        return bool(self._messages.get(path))

    def get(self, path: str) -> List[str]:
        return list(self._messages.get(path, []))

    def first(self, path: Optional[str] = None) -> Optional[str]:
        """First message for path, or the first message overall when path is None"""
        if path is not None:
            items = self._messages.get(path)
            return items[0] if items else None
        for items in self._messages.values():
            if items:
                return items[0]
        return None

    def keys(self) -> List[str]:
        return list(self._messages.keys())

    def all(self) -> List[str]:
        return [message for items in self._messages.values() for message in items]

    def is_empty(self) -> bool:
        return not any(self._messages.values())

    def to_dict(self) -> Dict[str, List[str]]:
        return {path: list(items) for path, items in self._messages.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, List[str]]) -> "ErrorBag":
        return cls(data)

    def __len__(self) -> int:
        return sum(len(items) for items in self._messages.values())

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.has(path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ErrorBag):
            return False
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"ErrorBag({self._messages!r})"
