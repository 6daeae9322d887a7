"""Search module: dispatch, normalization, facets and ranking.

The backend does the full-text match; this package decides when to ask
it, cleans up what comes back, and filters and orders the results
client-side.
"""

from .backend import GraphQLSearchBackend, SearchBackend, SearchBackendError
from .dispatcher import SearchDispatcher
from .facets import (
    DateRange,
    FacetedFilters,
    FilterDecodeError,
    NumericRange,
    active_filter_count,
    deserialize_filters,
    evaluate,
    serialize_filters,
)
from .labels import filter_by_label
from .models import ResultAttributes, ResultType, SearchResult, type_info
from .normalize import normalize_results
from .panels import ActivePanel, PanelState
from .ranking import ResultView, TypeTab, filter_by_tab, rank

__all__ = [
    "ActivePanel",
    "DateRange",
    "FacetedFilters",
    "FilterDecodeError",
    "GraphQLSearchBackend",
    "NumericRange",
    "PanelState",
    "ResultAttributes",
    "ResultType",
    "ResultView",
    "SearchBackend",
    "SearchBackendError",
    "SearchDispatcher",
    "SearchResult",
    "TypeTab",
    "active_filter_count",
    "deserialize_filters",
    "evaluate",
    "filter_by_label",
    "filter_by_tab",
    "normalize_results",
    "rank",
    "serialize_filters",
    "type_info",
]
