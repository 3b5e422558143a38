"""Persisted per-file cache validation state.

The store keeps the whole mapping in memory and rewrites the JSON document on
every mutation. There is no locking: one writer per document, last write wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
from pathlib import Path

from ucd_cache.errors import StateStoreError

LOGGER = logging.getLogger(__name__)

FIRST_DATE = datetime(1900, 1, 1, tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FileState:
    """Validators recorded after the last successful or not-modified fetch.

    Attributes:
        etag: Server ETag with any ``-gzip`` marker already removed.
        date: ``Last-Modified`` HTTP date string from the server.
        last_checked: When the server was last consulted for this file.
    """

    etag: str
    date: str
    last_checked: datetime = FIRST_DATE

    def to_json(self) -> dict[str, str]:
        return {
            "etag": self.etag,
            "date": self.date,
            "last_checked": self.last_checked.isoformat(),
        }

    @classmethod
    def from_json(cls, payload: object) -> FileState:
        """Build a state from its JSON form.

        Raises:
            ValueError: If required keys are missing or have the wrong type.
        """

        if not isinstance(payload, dict):
            raise ValueError(f"file state must be an object, got {type(payload).__name__}")
        etag = payload.get("etag")
        date = payload.get("date")
        if not isinstance(etag, str) or not isinstance(date, str):
            raise ValueError("file state requires string 'etag' and 'date'")
        checked = payload.get("last_checked")
        last_checked = datetime.fromisoformat(checked) if isinstance(checked, str) else FIRST_DATE
        return cls(etag=etag, date=date, last_checked=last_checked)


class StateStore:
    """JSON-backed mapping of logical file name to ``FileState``.

    Construct with ``path=None`` for a memory-only store. Call ``load()`` before
    use; ``set()`` flushes the full document each time.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._files: dict[str, FileState] = {}
        self._last_update = FIRST_DATE

    @classmethod
    def create(cls, path: Path | None = None) -> StateStore:
        """Construct and load a store in one step."""

        return cls(path).load()

    @property
    def last_update(self) -> datetime:
        return self._last_update

    @property
    def is_valid(self) -> bool:
        """Whether the store has been written at least once."""

        return self._last_update != FIRST_DATE

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, name: object) -> bool:
        return name in self._files

    def load(self) -> StateStore:
        """Replace in-memory state with the persisted document.

        A missing document leaves the store empty.

        Returns:
            ``self`` for chaining.

        Raises:
            StateStoreError: If the document cannot be read or is malformed.
        """

        if self.path is None:
            return self
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            LOGGER.debug("No state document at %s; starting empty", self.path)
            return self
        except OSError as exc:
            raise StateStoreError(f"Cannot read state document {self.path}: {exc}") from exc

        try:
            document = json.loads(text)
            if not isinstance(document, dict):
                raise ValueError("top-level value must be an object")
            files_payload = document.get("files", {})
            if not isinstance(files_payload, dict):
                raise ValueError("'files' must be an object")
            files = {name: FileState.from_json(item) for name, item in files_payload.items()}
            raw_update = document.get("last_update")
            last_update = datetime.fromisoformat(raw_update) if raw_update else FIRST_DATE
        except (ValueError, TypeError) as exc:
            raise StateStoreError(f"Malformed state document {self.path}: {exc}") from exc

        self._files = files
        self._last_update = last_update
        return self

    def flush(self) -> None:
        """Rewrite the whole persisted document from memory."""

        if self.path is None:
            return
        document = {
            "last_update": self._last_update.isoformat(),
            "files": {name: state.to_json() for name, state in sorted(self._files.items())},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")

    def get(self, name: str) -> FileState | None:
        return self._files.get(name)

    def set(self, name: str, state: FileState) -> FileState:
        """Store ``state`` for ``name`` stamped with the current time, then flush.

        Returns:
            The stored state including its fresh ``last_checked`` value.
        """

        now = _utcnow()
        stored = FileState(etag=state.etag, date=state.date, last_checked=now)
        self._files[name] = stored
        self._last_update = now
        self.flush()
        return stored
