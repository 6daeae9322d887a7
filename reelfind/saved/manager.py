"""Saved search manager.

Creates, restores, lists and deletes saved searches on behalf of the
current user. Restoring a search is immediate; the usage bump it
triggers is written in the background so the caller never waits on
the store.
"""

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from reelfind.search.facets import (
    FacetedFilters,
    FilterDecodeError,
    deserialize_filters,
    serialize_filters,
)
from reelfind.search.panels import ActivePanel, PanelState

from .models import SavedSearch, Scope, Visibility
from .store import SavedSearchError, SavedSearchStore

logger = logging.getLogger(__name__)

# Asked before an irreversible delete: (saved search) -> confirmed?
ConfirmCallback = Callable[[SavedSearch], bool]


class SaveValidationError(SavedSearchError):
    """A saved search failed validation; nothing was persisted."""

    pass


@dataclass(frozen=True)
class UserIdentity:
    """The user saved searches are created for and listed to."""

    id: str
    email: str | None = None
    organization_id: str | None = None


@dataclass
class RestoredSearch:
    """What loading a saved search puts back into the search UI."""

    query: str
    filters: FacetedFilters = field(default_factory=FacetedFilters)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SavedSearchManager:
    """Manages the current user's saved searches.

    Example:
        manager = SavedSearchManager(store, UserIdentity("u1", "u1@example.com"))
        saved = await manager.save("Interviews", None, "sarah", filters)
        restored = await manager.load(saved)
        await manager.drain()
    """

    def __init__(
        self,
        store: SavedSearchStore,
        user: UserIdentity,
        panels: PanelState | None = None,
        clock: Callable[[], datetime] = _now,
    ):
        """Initialize the manager.

        Args:
            store: Where saved searches are persisted.
            user: Current user; owner of new searches.
            panels: Shared panel state (the saved panel closes on load).
            clock: Source of timestamps.
        """
        self._store = store
        self._user = user
        self._panels = panels or PanelState()
        self._clock = clock
        self._pending: set[asyncio.Task] = set()

    @property
    def panels(self) -> PanelState:
        return self._panels

    @property
    def panel_open(self) -> bool:
        return self._panels.is_open(ActivePanel.SAVED)

    def open_panel(self) -> None:
        self._panels.open(ActivePanel.SAVED)

    def close_panel(self) -> None:
        self._panels.close(ActivePanel.SAVED)

    async def save(
        self,
        name: str,
        description: str | None,
        query: str,
        filters: FacetedFilters,
        *,
        scope: Scope = Scope.ORGANIZATION,
        visibility: Visibility = Visibility.PRIVATE,
        project_id: str | None = None,
    ) -> SavedSearch:
        """Persist the current query and filters under ``name``.

        Raises:
            SaveValidationError: If the name is blank, or a project-scoped
                search has no project. Raised before the store is touched.
        """
        name = _validate_name(name)
        if scope is Scope.PROJECT and not project_id:
            raise SaveValidationError("Project-scoped searches need a project id")

        saved = SavedSearch(
            id=str(uuid.uuid4()),
            name=name,
            description=(description or "").strip() or None,
            search_query=query,
            filters=serialize_filters(filters),
            scope=scope,
            visibility=visibility,
            usage_count=0,
            is_pinned=False,
            organization_id=self._user.organization_id,
            project_id=project_id if scope is Scope.PROJECT else None,
            created_by=self._user.id,
            created_by_email=self._user.email,
            created_at=self._clock(),
        )
        return await self._store.create(saved)

    async def load(self, saved: SavedSearch) -> RestoredSearch:
        """Restore a saved search's query and filters.

        Malformed stored filters restore as the default configuration.
        The usage bump is scheduled in the background and doesn't delay
        the restore; call ``drain()`` before shutting down.
        """
        try:
            filters = deserialize_filters(saved.filters)
        except FilterDecodeError as e:
            logger.warning(
                "Saved search %s has malformed filters, using defaults: %s",
                saved.id,
                e,
            )
            filters = FacetedFilters()

        task = asyncio.create_task(self._record_usage(saved))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

        self.close_panel()
        return RestoredSearch(query=saved.search_query, filters=filters)

    async def delete(self, saved_id: str, confirm: ConfirmCallback) -> bool:
        """Delete a saved search once the user confirms.

        Returns:
            True if the search was removed, False if confirmation was declined.
        """
        saved = await self._store.get(saved_id)
        if not confirm(saved):
            logger.debug("Delete of saved search %s not confirmed", saved_id)
            return False

        await self._store.delete(saved_id)
        return True

    async def list_visible(self, project_id: str | None = None) -> list[SavedSearch]:
        """Saved searches the current user may see.

        That is every organization-visible search plus the user's own
        private ones. With ``project_id``, project-scoped searches for
        other projects are left out.

        Ordering: pinned first, then most recently used, then newest.
        """
        visible = [
            saved
            for saved in await self._store.list_all()
            if self._can_see(saved, project_id)
        ]

        visible.sort(key=lambda s: s.created_at.timestamp(), reverse=True)
        visible.sort(
            key=lambda s: s.last_used_at.timestamp() if s.last_used_at else float("-inf"),
            reverse=True,
        )
        visible.sort(key=lambda s: not s.is_pinned)
        return visible

    async def update(
        self,
        saved_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        query: str | None = None,
        filters: FacetedFilters | None = None,
    ) -> SavedSearch:
        """Edit a saved search. Only the given fields change.

        Raises:
            SaveValidationError: If a new name is blank.
        """
        changes: dict = {}
        if name is not None:
            changes["name"] = _validate_name(name)
        if description is not None:
            changes["description"] = description.strip() or None
        if query is not None:
            changes["search_query"] = query
        if filters is not None:
            changes["filters"] = serialize_filters(filters)

        if not changes:
            return await self._store.get(saved_id)

        changes["updated_at"] = self._clock()
        return await self._store.update(saved_id, **changes)

    async def set_pinned(self, saved_id: str, pinned: bool) -> SavedSearch:
        return await self._store.update(
            saved_id, is_pinned=pinned, updated_at=self._clock()
        )

    async def drain(self) -> None:
        """Wait for background usage updates to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def _record_usage(self, saved: SavedSearch) -> None:
        try:
            await self._store.increment_usage(saved.id, self._clock())
        except Exception as e:
            logger.warning("Could not record usage of saved search %s: %s", saved.id, e)

    def _can_see(self, saved: SavedSearch, project_id: str | None) -> bool:
        if saved.visibility is not Visibility.ORGANIZATION and saved.created_by != self._user.id:
            return False
        if project_id is not None and saved.scope is Scope.PROJECT:
            return saved.project_id == project_id
        return True


def _validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise SaveValidationError("Saved search name cannot be empty")
    return name
