"""
Value models behind the insertion dialogs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import ValidationError


MAX_TABLE_SIZE = 10


@dataclass
class LinkDialogState:
    """Initial values shown in the link dialog."""

    text: str = ""
    url: str = "https://"
    new_tab: bool = True
    editing: bool = False


@dataclass
class TableSizePicker:
    """
    The hover grid for choosing a table size.

    Hovering cell (row, col) selects a rows x cols table; both are 1-based
    and bounded by the grid size.
    """

    rows: int = 1
    cols: int = 1
    size: int = MAX_TABLE_SIZE

    def hover(self, row: int, col: int) -> Tuple[int, int]:
        self.rows = max(1, min(self.size, row))
        self.cols = max(1, min(self.size, col))
        return self.rows, self.cols

    def is_selected(self, row: int, col: int) -> bool:
        return row <= self.rows and col <= self.cols

    def selected_cells(self) -> int:
        return self.rows * self.cols

    @property
    def label(self) -> str:
        return f"{self.rows} × {self.cols} table"

    def confirm(self) -> Tuple[int, int]:
        if not (1 <= self.rows <= self.size and 1 <= self.cols <= self.size):
            raise ValidationError(f"Table size must be between 1 and {self.size}")
        return self.rows, self.cols
