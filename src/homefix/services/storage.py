"""Key-value storage abstractions for persisted session data."""

from dataclasses import dataclass, field
from typing import Protocol


class KeyValueStore(Protocol):
    """String key-value store surviving process restarts."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""

    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store used for tests and the memory backend."""

    entries: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.entries.get(key)

    def set(self, key: str, value: str) -> None:
        self.entries[key] = value

    def delete(self, key: str) -> None:
        self.entries.pop(key, None)
