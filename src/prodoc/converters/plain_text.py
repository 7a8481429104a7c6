"""
Plain-text rendering of the rich-text tree.
"""

from __future__ import annotations

from ..core.rich_tree import RichTree
from ..core.tree_handler import TreeHandler


def to_plain_text(tree: RichTree) -> str:
    """
    Visible text of a tree.

    Blocks are separated by blank lines, list items and table rows by
    newlines, table cells by tabs; line breaks become newlines.
    """
    return TreeHandler(tree).get_text_content()
