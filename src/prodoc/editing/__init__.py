"""
Editing layer: the editable surface, selection tracking and command execution.
"""

from .surface import EditingSurface
from .selection import SelectionTracker
from .executor import CommandExecutor, CommandResult
from .dialogs import LinkDialogState, TableSizePicker

__all__ = [
    "EditingSurface", "SelectionTracker", "CommandExecutor", "CommandResult",
    "LinkDialogState", "TableSizePicker",
]
