"""
Converter from the rich-text tree to Markdown.

Covers headings up to level 3, bold, italic, links, images, lists,
blockquotes and code blocks. Everything else falls back to its text.
"""

from __future__ import annotations

from typing import List

from ..core.rich_tree import (
    Block, BlockQuote, CodeBlock, Heading, Image, Inline, InlineStyle, LineBreak, Link,
    ListBlock, ListItem, MediaEmbed, Paragraph, RawBlock, RawInline, RichTree, Span,
    Styled, Table, Text, inline_text,
)
from ..core.tree_handler import TreeHandler


class TreeToMarkdownConverter:
    """Converts a RichTree to Markdown text."""

    def convert(self, tree: RichTree) -> str:
        return "".join(self._convert_block(block) for block in tree.blocks)

    def _convert_block(self, block: Block) -> str:
        if isinstance(block, Heading):
            content = self._convert_inlines(block.children)
            if block.level <= 3:
                return f"{'#' * block.level} {content}\n\n"
            return f"{content}\n\n"

        if isinstance(block, Paragraph):
            return f"{self._convert_inlines(block.children)}\n\n"

        if isinstance(block, ListBlock):
            lines = []
            for number, item in enumerate(block.items, 1):
                prefix = f"{number}. " if block.ordered else "- "
                lines.append(f"{prefix}{self._convert_inlines(item.children)}\n")
            return "".join(lines) + "\n"

        if isinstance(block, ListItem):
            return f"- {self._convert_inlines(block.children)}\n"

        if isinstance(block, BlockQuote):
            inner = "".join(self._convert_block(child) for child in block.children).strip("\n")
            quoted = "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
            return f"{quoted}\n\n"

        if isinstance(block, CodeBlock):
            return f"```\n{block.text}\n```\n\n"

        if isinstance(block, Table):
            rows = []
            for row in block.rows:
                cells = [" ".join(TreeHandler.extract_text_from_block(child) for child in cell.children)
                         for cell in row.cells]
                rows.append(" | ".join(cells) + "\n")
            return "".join(rows) + "\n"

        if isinstance(block, MediaEmbed):
            return ""

        if isinstance(block, RawBlock):
            return f"{block.text}\n\n" if block.text.strip() else ""

        return ""

    def _convert_inlines(self, inlines: List[Inline]) -> str:
        return "".join(self._convert_inline(node) for node in inlines)

    def _convert_inline(self, node: Inline) -> str:
        if isinstance(node, Text):
            return node.text

        if isinstance(node, LineBreak):
            return "\n"

        if isinstance(node, Styled):
            content = self._convert_inlines(node.children)
            if node.style == InlineStyle.BOLD:
                return f"**{content}**"
            if node.style == InlineStyle.ITALIC:
                return f"*{content}*"
            return content

        if isinstance(node, Span):
            return self._convert_inlines(node.children)

        if isinstance(node, Link):
            return f"[{inline_text(node.children)}]({node.href})"

        if isinstance(node, Image):
            return f"![Image]({node.src})"

        if isinstance(node, RawInline):
            return node.text

        return ""
