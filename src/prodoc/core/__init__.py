"""
Core document representation: rich-text tree, navigation and the document store.
"""

from .rich_tree import Position, RichTree, SelectionRange
from .tree_handler import TreeHandler
from .document_model import DocumentRecord, DocumentStats, DocumentStore, OutlineEntry

__all__ = [
    "Position", "RichTree", "SelectionRange", "TreeHandler",
    "DocumentRecord", "DocumentStats", "DocumentStore", "OutlineEntry",
]
