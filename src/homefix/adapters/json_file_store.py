"""JSON file key-value store, the on-disk analogue of browser local storage."""

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from homefix.errors import PersistenceReadError
from homefix.services.storage import KeyValueStore


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Keeps all entries in a single JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value and flush the file."""
        entries = self._load(strict=False)
        entries[key] = value
        self._save(entries)

    def delete(self, key: str) -> None:
        """Remove a key and flush the file if anything changed."""
        entries = self._load(strict=False)
        if entries.pop(key, None) is not None:
            self._save(entries)

    def _load(self, strict: bool = True) -> dict[str, str]:
        # Writes start over from an empty object when the file is unreadable.
        try:
            return self._read()
        except PersistenceReadError:
            if strict:
                raise
            return {}

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PersistenceReadError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceReadError(f"{self.path} does not hold a JSON object")
        return {
            str(key): value for key, value in data.items() if isinstance(value, str)
        }

    def _save(self, entries: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file, then swap it into place.
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(entries, handle)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
