"""Faceted filtering over normalized search results.

Facets combine with AND across categories and OR within a category's
selected values. Every facet defaults to "no constraint": an empty
selection or an unset range never excludes anything.

Usage:
    filters = FacetedFilters(asset_types={"video"}, has_transcript=True)
    visible = evaluate(results, filters)
    badge = active_filter_count(filters)
"""

import json
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .models import SearchResult


class FilterDecodeError(ValueError):
    """Serialized filters could not be decoded."""

    pass


@dataclass
class DateRange:
    """Inclusive calendar-date range; either end may be open."""

    start: date | None = None
    end: date | None = None

    @property
    def is_set(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass
class NumericRange:
    """Inclusive numeric range; either bound may be open."""

    min: float | None = None
    max: float | None = None

    @property
    def is_set(self) -> bool:
        return self.min is not None or self.max is not None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass
class FacetedFilters:
    """Client-side facet configuration.

    Attributes:
        asset_types: Accepted asset types (e.g., "video", "audio").
        resolution: Accepted resolutions (e.g., "3840x2160").
        frame_rate: Accepted frame rates (e.g., "23.976").
        codec: Accepted codecs (e.g., "prores").
        date_range: Inclusive range on the result timestamp.
        has_transcript: True/False to require the flag, None for no constraint.
        duration: Range on duration in seconds.
        file_size: Range on file size in bytes.
    """

    asset_types: set[str] = field(default_factory=set)
    resolution: set[str] = field(default_factory=set)
    frame_rate: set[str] = field(default_factory=set)
    codec: set[str] = field(default_factory=set)
    date_range: DateRange | None = None
    has_transcript: bool | None = None
    duration: NumericRange | None = None
    file_size: NumericRange | None = None

    def is_default(self) -> bool:
        """True when no facet imposes a constraint."""
        return active_filter_count(self) == 0

    def to_dict(self) -> dict:
        """Convert to a JSON-compatible dict (camelCase keys)."""
        return {
            "assetTypes": sorted(self.asset_types),
            "resolution": sorted(self.resolution),
            "frameRate": sorted(self.frame_rate),
            "codec": sorted(self.codec),
            "dateRange": _date_range_to_dict(self.date_range),
            "hasTranscript": self.has_transcript,
            "duration": _range_to_dict(self.duration),
            "fileSize": _range_to_dict(self.file_size),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FacetedFilters":
        """Build filters from a dict produced by to_dict().

        Missing keys fall back to their defaults.

        Raises:
            FilterDecodeError: If a value has the wrong shape.
        """
        if not isinstance(data, dict):
            raise FilterDecodeError(f"Expected an object, got {type(data).__name__}")

        has_transcript = data.get("hasTranscript")
        if has_transcript is not None and not isinstance(has_transcript, bool):
            raise FilterDecodeError("hasTranscript must be a boolean or null")

        return cls(
            asset_types=_string_set(data, "assetTypes"),
            resolution=_string_set(data, "resolution"),
            frame_rate=_string_set(data, "frameRate"),
            codec=_string_set(data, "codec"),
            date_range=_date_range_from_dict(data.get("dateRange")),
            has_transcript=has_transcript,
            duration=_range_from_dict(data.get("duration"), "duration"),
            file_size=_range_from_dict(data.get("fileSize"), "fileSize"),
        )


def evaluate(
    results: list[SearchResult], filters: FacetedFilters
) -> list[SearchResult]:
    """Return the results that satisfy every active facet, order preserved."""
    return [result for result in results if matches(result, filters)]


def matches(result: SearchResult, filters: FacetedFilters) -> bool:
    """Check one result against every active facet category."""
    attrs = result.attributes

    if not _in_selection(attrs.asset_type, filters.asset_types):
        return False
    if not _in_selection(attrs.resolution, filters.resolution):
        return False
    if not _in_selection(attrs.frame_rate, filters.frame_rate):
        return False
    if not _in_selection(attrs.codec, filters.codec):
        return False

    if filters.has_transcript is not None:
        # None on the result means "unknown", which satisfies neither side
        if attrs.has_transcript is not filters.has_transcript:
            return False

    if filters.date_range is not None and filters.date_range.is_set:
        if attrs.timestamp is None:
            return False
        if not filters.date_range.contains(attrs.timestamp.date()):
            return False

    if not _in_range(attrs.duration, filters.duration):
        return False
    if not _in_range(attrs.file_size, filters.file_size):
        return False

    return True


def active_filter_count(filters: FacetedFilters) -> int:
    """Count facet categories that currently impose a constraint.

    Always computed from the configuration, never cached.
    """
    active = [
        bool(filters.asset_types),
        bool(filters.resolution),
        bool(filters.frame_rate),
        bool(filters.codec),
        filters.date_range is not None and filters.date_range.is_set,
        filters.has_transcript is not None,
        filters.duration is not None and filters.duration.is_set,
        filters.file_size is not None and filters.file_size.is_set,
    ]
    return sum(active)


def serialize_filters(filters: FacetedFilters) -> str:
    """Serialize filters to the JSON string stored on a saved search."""
    return json.dumps(filters.to_dict(), sort_keys=True)


def deserialize_filters(payload: str | dict | None) -> FacetedFilters:
    """Restore filters from their stored form.

    None or an empty string gives the default configuration.

    Raises:
        FilterDecodeError: If the payload is malformed.
    """
    if payload is None or payload == "":
        return FacetedFilters()

    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise FilterDecodeError(f"Invalid filters JSON: {e}") from e

    return FacetedFilters.from_dict(payload)


def _in_selection(value: str | None, selected: set[str]) -> bool:
    # Empty selection means the facet isn't applied
    if not selected:
        return True
    if value is None:
        return False
    return value.casefold() in {choice.casefold() for choice in selected}


def _in_range(value: float | None, bounds: NumericRange | None) -> bool:
    if bounds is None or not bounds.is_set:
        return True
    if value is None:
        return False
    return bounds.contains(value)


def _string_set(data: dict, key: str) -> set[str]:
    values = data.get(key)
    if values is None:
        return set()
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise FilterDecodeError(f"{key} must be a list of strings")
    return set(values)


def _date_range_to_dict(value: DateRange | None) -> dict | None:
    if value is None:
        return None
    return {
        "start": value.start.isoformat() if value.start else None,
        "end": value.end.isoformat() if value.end else None,
    }


def _date_range_from_dict(data: Any) -> DateRange | None:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise FilterDecodeError("dateRange must be an object")
    try:
        return DateRange(
            start=date.fromisoformat(data["start"]) if data.get("start") else None,
            end=date.fromisoformat(data["end"]) if data.get("end") else None,
        )
    except (TypeError, ValueError) as e:
        raise FilterDecodeError(f"Invalid dateRange: {e}") from e


def _range_to_dict(value: NumericRange | None) -> dict | None:
    if value is None:
        return None
    return {"min": value.min, "max": value.max}


def _range_from_dict(data: Any, key: str) -> NumericRange | None:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise FilterDecodeError(f"{key} must be an object")

    bounds = {}
    for bound in ("min", "max"):
        value = data.get(bound)
        if value is not None and (
            isinstance(value, bool) or not isinstance(value, (int, float))
        ):
            raise FilterDecodeError(f"{key}.{bound} must be a number or null")
        bounds[bound] = value

    return NumericRange(min=bounds["min"], max=bounds["max"])
