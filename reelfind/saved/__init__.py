"""Saved searches: named, persisted query + facet snapshots."""

from .manager import (
    RestoredSearch,
    SavedSearchManager,
    SaveValidationError,
    UserIdentity,
)
from .models import SavedSearch, Scope, Visibility
from .store import (
    JsonSavedSearchStore,
    SavedSearchError,
    SavedSearchNotFoundError,
    SavedSearchStore,
)

__all__ = [
    "JsonSavedSearchStore",
    "RestoredSearch",
    "SaveValidationError",
    "SavedSearch",
    "SavedSearchError",
    "SavedSearchManager",
    "SavedSearchNotFoundError",
    "SavedSearchStore",
    "Scope",
    "UserIdentity",
    "Visibility",
]
