"""
Page view state: zoom level of the editing page.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import ZoomConfig


logger = logging.getLogger(__name__)


class ViewState:
    """Zoom of the page, in percent, clamped to configured bounds."""

    DEFAULT_ZOOM = 100

    def __init__(self, zoom_config: Optional[ZoomConfig] = None):
        self.config = zoom_config or ZoomConfig()
        self._zoom = self.DEFAULT_ZOOM

    @property
    def zoom(self) -> int:
        return self._zoom

    def set_zoom(self, level: int) -> int:
        self._zoom = max(self.config.minimum, min(self.config.maximum, int(level)))
        logger.debug(f"Zoom set to {self._zoom}%")
        return self._zoom

    def zoom_in(self) -> int:
        return self.set_zoom(self._zoom + self.config.step)

    def zoom_out(self) -> int:
        return self.set_zoom(self._zoom - self.config.step)

    def reset_zoom(self) -> int:
        return self.set_zoom(self.DEFAULT_ZOOM)

    @property
    def transform(self) -> str:
        """CSS transform applied to the page element."""
        return f"scale({self._zoom / 100:g})"

    @property
    def label(self) -> str:
        return f"{self._zoom}%"
