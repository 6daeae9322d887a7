"""Normalize raw backend payloads into SearchResult records.

The search backend returns loosely-typed JSON: sometimes a list,
sometimes a JSON string encoding a list, with records whose fields may
be missing or of the wrong type. Everything is decoded here, at the
boundary, so the rest of the engine only sees well-formed results.
"""

import json
import logging
import math
from datetime import datetime
from typing import Any

from .models import ResultAttributes, ResultType, SearchResult

logger = logging.getLogger(__name__)

# Keys checked, in order, for the timestamp a date-range facet compares against
_TIMESTAMP_KEYS = ("timestamp", "createdAt", "uploadedAt", "updatedAt")


def decode_payload(payload: Any) -> list:
    """Turn a raw backend payload into a list of raw records.

    JSON strings are decoded first. Anything that isn't a list after
    decoding (None, dicts, numbers, undecodable strings) becomes [].
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.warning("Discarding undecodable search payload: %s", e)
            return []

    if not isinstance(payload, list):
        if payload is not None:
            logger.warning(
                "Expected a list of search results, got %s", type(payload).__name__
            )
        return []

    return payload


def normalize_results(payload: Any) -> list[SearchResult]:
    """Decode a raw payload into SearchResults, dropping invalid records.

    Order is preserved: the backend sends results ranked by relevance.
    """
    results = []
    for raw in decode_payload(payload):
        result = normalize_result(raw)
        if result is not None:
            results.append(result)
    return results


def normalize_result(raw: Any) -> SearchResult | None:
    """Decode a single raw record.

    Returns None for records that aren't objects, have an unknown type,
    or have no id.
    """
    if not isinstance(raw, dict):
        logger.debug("Skipping non-object search record: %r", raw)
        return None

    try:
        result_type = ResultType(raw.get("type"))
    except ValueError:
        logger.debug("Skipping search record with unknown type: %r", raw.get("type"))
        return None

    record_id = _as_text(raw.get("id"))
    if not record_id:
        logger.debug("Skipping %s record without an id", result_type.value)
        return None

    highlights = raw.get("highlights")
    if not isinstance(highlights, list):
        highlights = []

    return SearchResult(
        type=result_type,
        id=record_id,
        title=_as_text(raw.get("title")) or "",
        description=_as_text(raw.get("description")) or "",
        project_id=_as_text(raw.get("projectId")),
        project_name=_as_text(raw.get("projectName")),
        relevance=_as_relevance(raw.get("relevance")),
        highlights=tuple(h for h in highlights if isinstance(h, str)),
        attributes=_parse_attributes(raw),
    )


def _parse_attributes(raw: dict) -> ResultAttributes:
    """Extract facet attributes from a record's metadata object."""
    metadata = raw.get("metadata")
    if isinstance(metadata, str):
        # Some resolvers send metadata as an AWSJSON string
        try:
            metadata = json.loads(metadata)
        except json.JSONDecodeError:
            metadata = None
    if not isinstance(metadata, dict):
        metadata = {}

    timestamp = None
    for key in _TIMESTAMP_KEYS:
        timestamp = _as_datetime(metadata.get(key))
        if timestamp is not None:
            break

    labels = metadata.get("sceneLabels")
    if not isinstance(labels, list):
        labels = []

    file_size = _as_number(metadata.get("fileSize"))

    return ResultAttributes(
        asset_type=_as_text(metadata.get("assetType")),
        resolution=_as_text(metadata.get("resolution")),
        frame_rate=_as_text(metadata.get("frameRate")),
        codec=_as_text(metadata.get("codec")),
        has_transcript=_as_bool(metadata.get("hasTranscript")),
        duration=_as_number(metadata.get("duration")),
        file_size=int(file_size) if file_size is not None else None,
        timestamp=timestamp,
        scene_labels=tuple(label for label in labels if isinstance(label, str)),
        shot_type=_as_text(metadata.get("shotType")),
    )


def _as_text(value: Any) -> str | None:
    """Coerce scalars to str; None and containers become None."""
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    if isinstance(value, float):
        # 24.0 -> "24", 23.976 -> "23.976"
        return repr(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_bool(value: Any) -> bool | None:
    # Only real booleans count; "false" strings are too ambiguous
    return value if isinstance(value, bool) else None


def _as_relevance(value: Any) -> float:
    """Read the server relevance score, defaulting to 0.0 when not a number.

    The score itself is passed through unchanged.
    """
    number = _as_number(value)
    if number is None:
        return 0.0
    if not 0.0 <= number <= 1.0:
        logger.debug("Relevance %r is outside [0, 1]; keeping server value", number)
    return number


def _as_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
