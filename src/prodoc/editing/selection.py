"""
Selection tracker: keeps the caret/selection alive across dialogs.

Opening a dialog moves focus away from the editing surface and destroys its
live selection. The tracker copies the selection before that happens and
puts it back before the dialog's action mutates the document.
"""

from __future__ import annotations

import copy
import logging
from typing import Optional

from ..core.rich_tree import SelectionRange
from .surface import EditingSurface


logger = logging.getLogger(__name__)


class SelectionTracker:
    """Holds at most one saved selection mark."""

    def __init__(self, surface: EditingSurface):
        self.surface = surface
        self._mark: Optional[SelectionRange] = None

    @property
    def mark(self) -> Optional[SelectionRange]:
        return self._mark

    def capture(self) -> Optional[SelectionRange]:
        """Save a copy of the live selection, replacing any earlier mark."""
        self._mark = copy.deepcopy(self.surface.selection)
        logger.debug(f"Captured selection {self._mark}")
        return self._mark

    def restore(self) -> SelectionRange:
        """
        Focus the surface and bring back the saved selection.

        Without a saved mark the caret goes to the end of the document.

        Returns:
            The selection now live on the surface
        """
        self.surface.focus()
        if self._mark is None:
            return self.surface.collapse_to_end()
        return self.surface.set_selection(self._mark)

    def clear(self) -> None:
        self._mark = None
