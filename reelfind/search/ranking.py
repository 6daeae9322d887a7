"""Result ordering, type tabs and keyboard navigation.

The backend ranks by relevance. Client-side this module only breaks
ties by type priority, subsets by tab, and tracks which row is
selected; it never re-scores.
"""

from enum import Enum

from .models import TYPE_PRIORITY, ResultType, SearchResult


class TypeTab(str, Enum):
    """Tabs shown above the results list."""

    ALL = "all"
    PROJECT = "project"
    ASSET = "asset"
    COMMENT = "comment"
    MESSAGE = "message"
    TASK = "task"


TAB_LABELS: dict[TypeTab, str] = {
    TypeTab.ALL: "All",
    TypeTab.PROJECT: "Projects",
    TypeTab.ASSET: "Assets",
    TypeTab.COMMENT: "Comments",
    TypeTab.MESSAGE: "Messages",
    TypeTab.TASK: "Tasks",
}


def rank(results: list[SearchResult]) -> list[SearchResult]:
    """Order by relevance (descending), breaking ties by type priority.

    The sort is stable, so results with equal relevance and type keep
    the order the backend sent them in.
    """
    return sorted(results, key=lambda r: (-r.relevance, TYPE_PRIORITY[r.type]))


def filter_by_tab(results: list[SearchResult], tab: TypeTab) -> list[SearchResult]:
    """Subset results to one type, preserving their relative order."""
    if tab is TypeTab.ALL:
        return list(results)
    wanted = ResultType(tab.value)
    return [result for result in results if result.type is wanted]


def tab_counts(results: list[SearchResult]) -> dict[TypeTab, int]:
    """Count results per tab (ALL counts everything)."""
    counts = {tab: 0 for tab in TypeTab}
    counts[TypeTab.ALL] = len(results)
    for result in results:
        try:
            counts[TypeTab(result.type.value)] += 1
        except ValueError:
            # Call sheets and briefs only appear under ALL
            pass
    return counts


def visible_tabs(results: list[SearchResult]) -> list[TypeTab]:
    """Tabs worth showing: ALL always, others only when non-empty."""
    counts = tab_counts(results)
    return [tab for tab in TypeTab if tab is TypeTab.ALL or counts[tab] > 0]


class ResultView:
    """The ranked result list as the user navigates it.

    Tracks the active tab and the keyboard cursor. The cursor clamps at
    both ends; it never wraps around.

    Example:
        view = ResultView(results)
        view.select_tab(TypeTab.ASSET)
        view.move_down()
        chosen = view.selected
    """

    def __init__(self, results: list[SearchResult] | None = None):
        self._results: list[SearchResult] = rank(results or [])
        self._tab = TypeTab.ALL
        self._index = 0

    @property
    def results(self) -> list[SearchResult]:
        """All ranked results, regardless of tab."""
        return list(self._results)

    @property
    def tab(self) -> TypeTab:
        return self._tab

    @property
    def index(self) -> int:
        return self._index

    @property
    def visible(self) -> list[SearchResult]:
        """Results under the active tab."""
        return filter_by_tab(self._results, self._tab)

    @property
    def selected(self) -> SearchResult | None:
        visible = self.visible
        if not visible:
            return None
        return visible[self._index]

    def set_results(self, results: list[SearchResult]) -> None:
        """Replace the result list and reset the cursor."""
        self._results = rank(results)
        self._index = 0

    def select_tab(self, tab: TypeTab) -> None:
        """Switch tab and reset the cursor to the first item."""
        self._tab = tab
        self._index = 0

    def next_tab(self) -> TypeTab:
        """Advance to the next tab, cycling back to ALL after the last."""
        tabs = list(TypeTab)
        position = tabs.index(self._tab)
        self.select_tab(tabs[(position + 1) % len(tabs)])
        return self._tab

    def move_down(self) -> None:
        self._index = min(max(len(self.visible) - 1, 0), self._index + 1)

    def move_up(self) -> None:
        self._index = max(0, self._index - 1)
