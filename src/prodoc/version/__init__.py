"""
Undo/redo history for document content.
"""

from .history import HistoryEntry, HistoryManager

__all__ = ["HistoryEntry", "HistoryManager"]
