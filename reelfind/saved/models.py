"""Data models for saved searches."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Scope(str, Enum):
    ORGANIZATION = "organization"
    PROJECT = "project"


class Visibility(str, Enum):
    PRIVATE = "private"
    ORGANIZATION = "organization"


@dataclass
class SavedSearch:
    """A named, persisted query plus facet configuration.

    ``filters`` holds the serialized FacetedFilters exactly as stored;
    it is only decoded when the search is loaded.
    """

    id: str
    name: str
    search_query: str
    filters: str
    scope: Scope
    visibility: Visibility
    created_by: str
    created_at: datetime
    created_by_email: str | None = None
    description: str | None = None
    organization_id: str | None = None
    project_id: str | None = None
    usage_count: int = 0
    last_used_at: datetime | None = None
    is_pinned: bool = False
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to the stored record (camelCase keys)."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "searchQuery": self.search_query,
            "filters": self.filters,
            "scope": self.scope.value,
            "visibility": self.visibility.value,
            "usageCount": self.usage_count,
            "lastUsedAt": _iso(self.last_used_at),
            "isPinned": self.is_pinned,
            "organizationId": self.organization_id,
            "projectId": self.project_id,
            "createdBy": self.created_by,
            "createdByEmail": self.created_by_email,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SavedSearch":
        """Build from a stored record.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If an enum or timestamp value is invalid.
        """
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            search_query=data.get("searchQuery") or "",
            filters=data.get("filters") or "",
            scope=Scope(data.get("scope", Scope.ORGANIZATION.value)),
            visibility=Visibility(data.get("visibility", Visibility.PRIVATE.value)),
            usage_count=int(data.get("usageCount") or 0),
            last_used_at=_parse_iso(data.get("lastUsedAt")),
            is_pinned=bool(data.get("isPinned", False)),
            organization_id=data.get("organizationId"),
            project_id=data.get("projectId"),
            created_by=data["createdBy"],
            created_by_email=data.get("createdByEmail"),
            created_at=datetime.fromisoformat(data["createdAt"]),
            updated_at=_parse_iso(data.get("updatedAt")),
        )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
