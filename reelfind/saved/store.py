"""Persistence for saved searches.

The manager talks to any object implementing ``SavedSearchStore``. The
bundled implementation keeps records in a JSON file next to the config,
in the same camelCase shape the remote record store uses.

File format:
{
    "savedSearches": [
        {"id": "...", "name": "...", "searchQuery": "...", ...}
    ]
}
"""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from reelfind.config.paths import SAVED_SEARCHES_FILE

from .models import SavedSearch

logger = logging.getLogger(__name__)


class SavedSearchError(Exception):
    """Base error for saved-search operations."""

    pass


class SavedSearchNotFoundError(SavedSearchError):
    """No saved search with the given id."""

    pass


class SavedSearchStore(Protocol):
    """Create/list/update/delete over saved-search records."""

    async def create(self, saved: SavedSearch) -> SavedSearch: ...

    async def get(self, saved_id: str) -> SavedSearch: ...

    async def list_all(self) -> list[SavedSearch]: ...

    async def update(self, saved_id: str, **changes: Any) -> SavedSearch: ...

    async def increment_usage(self, saved_id: str, used_at: datetime) -> SavedSearch: ...

    async def delete(self, saved_id: str) -> None: ...


class JsonSavedSearchStore:
    """Saved searches kept in a local JSON file.

    File access runs in a worker thread so callers on the event loop
    don't block. A lock serializes read-modify-write cycles.

    Example:
        store = JsonSavedSearchStore()
        await store.create(saved)
        items = await store.list_all()
    """

    def __init__(self, path: Path | None = None):
        """Initialize the store.

        Args:
            path: JSON file location. Defaults to the config directory.
        """
        self._path = path or SAVED_SEARCHES_FILE
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def create(self, saved: SavedSearch) -> SavedSearch:
        async with self._lock:
            records = await asyncio.to_thread(self._read, True)
            if any(record.get("id") == saved.id for record in records):
                raise SavedSearchError(f"Saved search {saved.id} already exists")
            records.append(saved.to_dict())
            await asyncio.to_thread(self._write, records)
        logger.info("Created saved search %s (%s)", saved.id, saved.name)
        return saved

    async def get(self, saved_id: str) -> SavedSearch:
        for saved in await self.list_all():
            if saved.id == saved_id:
                return saved
        raise SavedSearchNotFoundError(f"Saved search {saved_id} not found")

    async def list_all(self) -> list[SavedSearch]:
        records = await asyncio.to_thread(self._read)
        items = []
        for record in records:
            try:
                items.append(SavedSearch.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                # Skip records we can't read rather than hiding the rest
                logger.warning("Skipping unreadable saved search record: %s", e)
        return items

    async def update(self, saved_id: str, **changes: Any) -> SavedSearch:
        """Apply field changes (SavedSearch attribute names) to one record."""
        async with self._lock:
            records = await asyncio.to_thread(self._read, True)
            for index, record in enumerate(records):
                if record.get("id") != saved_id:
                    continue
                saved = SavedSearch.from_dict(record)
                for name, value in changes.items():
                    if not hasattr(saved, name) or name == "id":
                        raise SavedSearchError(f"Cannot update field {name!r}")
                    setattr(saved, name, value)
                records[index] = saved.to_dict()
                await asyncio.to_thread(self._write, records)
                return saved
        raise SavedSearchNotFoundError(f"Saved search {saved_id} not found")

    async def increment_usage(self, saved_id: str, used_at: datetime) -> SavedSearch:
        """Add one to the stored usage count and stamp ``last_used_at``.

        The count is read under the lock, so concurrent loads each count.
        """
        async with self._lock:
            records = await asyncio.to_thread(self._read, True)
            for index, record in enumerate(records):
                if record.get("id") != saved_id:
                    continue
                saved = SavedSearch.from_dict(record)
                saved.usage_count += 1
                saved.last_used_at = used_at
                records[index] = saved.to_dict()
                await asyncio.to_thread(self._write, records)
                return saved
        raise SavedSearchNotFoundError(f"Saved search {saved_id} not found")

    async def delete(self, saved_id: str) -> None:
        async with self._lock:
            records = await asyncio.to_thread(self._read, True)
            remaining = [record for record in records if record.get("id") != saved_id]
            if len(remaining) == len(records):
                raise SavedSearchNotFoundError(f"Saved search {saved_id} not found")
            await asyncio.to_thread(self._write, remaining)
        logger.info("Deleted saved search %s", saved_id)

    def _read(self, strict: bool = False) -> list[dict]:
        """Read raw records.

        A corrupted file reads as empty, except when about to write
        (strict), where overwriting it would lose the stored searches.
        """
        if not self._path.exists():
            return []

        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            if strict:
                raise SavedSearchError(f"Could not read {self._path}: {e}") from e
            logger.warning("Could not read %s: %s", self._path, e)
            return []

        records = data.get("savedSearches") if isinstance(data, dict) else None
        if not isinstance(records, list):
            if strict:
                raise SavedSearchError(f"{self._path} has no savedSearches list")
            logger.warning("%s has no savedSearches list", self._path)
            return []
        return [record for record in records if isinstance(record, dict)]

    def _write(self, records: list[dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)

        self._path.write_text(json.dumps({"savedSearches": records}, indent=2))
        # Restrictive permissions: records include owner emails
        self._path.chmod(0o600)
