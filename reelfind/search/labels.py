"""Label text stage: substring matching on scene labels and shot type.

Kept apart from the facet evaluator on purpose. Facets are structured
predicates; this stage is free-text matching over fields the server
doesn't rank on. Neither stage touches relevance.
"""

from .models import SearchResult


def filter_by_label(results: list[SearchResult], text: str | None) -> list[SearchResult]:
    """Keep results whose scene labels or shot type contain ``text``.

    Matching is a case-insensitive substring test. Empty text passes
    every result through unchanged.
    """
    needle = (text or "").strip().casefold()
    if not needle:
        return list(results)

    return [result for result in results if _label_matches(result, needle)]


def _label_matches(result: SearchResult, needle: str) -> bool:
    attrs = result.attributes
    if attrs.shot_type and needle in attrs.shot_type.casefold():
        return True
    return any(needle in label.casefold() for label in attrs.scene_labels)
