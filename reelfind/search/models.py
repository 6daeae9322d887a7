"""Data models for search results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ResultType(str, Enum):
    """Kinds of records the search backend can return."""

    PROJECT = "project"
    ASSET = "asset"
    COMMENT = "comment"
    MESSAGE = "message"
    CALLSHEET = "callsheet"
    BRIEF = "brief"
    TASK = "task"


# Tie-break order when two results share a relevance score (lower first)
TYPE_PRIORITY: dict[ResultType, int] = {
    result_type: index for index, result_type in enumerate(ResultType)
}


@dataclass(frozen=True)
class TypeInfo:
    """Display metadata for a result type."""

    icon: str
    label: str


TYPE_INFO: dict[str, TypeInfo] = {
    ResultType.PROJECT.value: TypeInfo("📁", "Project"),
    ResultType.ASSET.value: TypeInfo("🎬", "Asset"),
    ResultType.COMMENT.value: TypeInfo("💬", "Comment"),
    ResultType.MESSAGE.value: TypeInfo("✉️", "Message"),
    ResultType.CALLSHEET.value: TypeInfo("📋", "Call Sheet"),
    ResultType.BRIEF.value: TypeInfo("📝", "Brief"),
    ResultType.TASK.value: TypeInfo("✅", "Task"),
}

UNKNOWN_TYPE_INFO = TypeInfo("📄", "Result")


def type_info(result_type: str | ResultType) -> TypeInfo:
    """Look up the icon and label for a result type.

    Unknown types get a generic fallback instead of an error.
    """
    if isinstance(result_type, ResultType):
        result_type = result_type.value
    return TYPE_INFO.get(result_type, UNKNOWN_TYPE_INFO)


@dataclass(frozen=True)
class ResultAttributes:
    """Facet-relevant metadata attached to a result.

    Every field is optional: None means the backend didn't say, which is
    different from an explicit False/0 value.
    """

    asset_type: str | None = None
    resolution: str | None = None
    frame_rate: str | None = None
    codec: str | None = None
    has_transcript: bool | None = None
    duration: float | None = None  # Seconds
    file_size: int | None = None  # Bytes
    timestamp: datetime | None = None
    scene_labels: tuple[str, ...] = ()
    shot_type: str | None = None


@dataclass(frozen=True)
class SearchResult:
    """A single normalized search hit.

    Immutable once decoded: relevance is assigned by the server and
    client-side stages only drop or reorder results.
    """

    type: ResultType
    id: str
    title: str = ""
    description: str = ""
    project_id: str | None = None
    project_name: str | None = None
    relevance: float = 0.0  # 0..1, server-assigned
    highlights: tuple[str, ...] = ()
    attributes: ResultAttributes = field(default_factory=ResultAttributes)

    @property
    def key(self) -> str:
        """Identifier unique across types (ids are only unique per type)."""
        return f"{self.type.value}-{self.id}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        attrs = self.attributes
        return {
            "type": self.type.value,
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "projectId": self.project_id,
            "projectName": self.project_name,
            "relevance": self.relevance,
            "highlights": list(self.highlights),
            "metadata": {
                "assetType": attrs.asset_type,
                "resolution": attrs.resolution,
                "frameRate": attrs.frame_rate,
                "codec": attrs.codec,
                "hasTranscript": attrs.has_transcript,
                "duration": attrs.duration,
                "fileSize": attrs.file_size,
                "timestamp": attrs.timestamp.isoformat() if attrs.timestamp else None,
                "sceneLabels": list(attrs.scene_labels),
                "shotType": attrs.shot_type,
            },
        }
