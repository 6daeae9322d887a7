"""Which search panel is currently showing.

The results dropdown, facet bar, saved-search list and suggestions are
mutually exclusive, so they share one enum-valued state instead of a
boolean each.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ActivePanel(str, Enum):
    CLOSED = "closed"
    RESULTS = "results"
    FACETS = "facets"
    SAVED = "saved"
    SUGGESTIONS = "suggestions"


class PanelState:
    """Holds the single active panel.

    Example:
        panels = PanelState()
        panels.open(ActivePanel.SAVED)
        panels.close(ActivePanel.SAVED)
        assert panels.active is ActivePanel.CLOSED
    """

    def __init__(self, active: ActivePanel = ActivePanel.CLOSED):
        self._active = active

    @property
    def active(self) -> ActivePanel:
        return self._active

    def is_open(self, panel: ActivePanel) -> bool:
        return self._active is panel

    def open(self, panel: ActivePanel) -> None:
        """Show ``panel``, replacing whatever was open."""
        if panel is not self._active:
            logger.debug("Panel %s -> %s", self._active.value, panel.value)
        self._active = panel

    def close(self, panel: ActivePanel | None = None) -> None:
        """Close ``panel`` if it is showing, or whatever is open if None.

        Closing a panel that isn't active is a no-op, so one component
        can't close another's panel by accident.
        """
        if panel is None or self._active is panel:
            self.open(ActivePanel.CLOSED)

    def toggle(self, panel: ActivePanel) -> None:
        if self._active is panel:
            self.close(panel)
        else:
            self.open(panel)
