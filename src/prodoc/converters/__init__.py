"""
Converters between the rich-text tree and external formats.
"""

from .html_to_tree import HtmlToTreeConverter
from .tree_to_html import TreeToHtmlConverter
from .tree_to_markdown import TreeToMarkdownConverter
from .tree_to_docx import TreeToDocxConverter
from .plain_text import to_plain_text

__all__ = [
    "HtmlToTreeConverter", "TreeToHtmlConverter", "TreeToMarkdownConverter", "TreeToDocxConverter",
    "to_plain_text",
]
