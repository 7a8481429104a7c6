"""
Renders the rich-text tree back to editor markup.

The output is the persisted ``content`` of a document and the snapshot
format of the undo history, so rendering is deterministic.
"""

from __future__ import annotations

from html import escape
from typing import Dict, List, Optional

from ..core.rich_tree import (
    Block, BlockQuote, CodeBlock, Heading, Image, Inline, InlineStyle, LineBreak, Link,
    ListBlock, ListItem, MediaEmbed, Paragraph, RawBlock, RawInline, RichTree, Span,
    Styled, Table, TableCell, TableRow, Text,
)


STYLE_TAGS = {
    InlineStyle.BOLD: "strong",
    InlineStyle.ITALIC: "em",
    InlineStyle.UNDERLINE: "u",
    InlineStyle.STRIKE: "s",
}

TABLE_STYLE = "width: 100%; border-collapse: collapse;"
CELL_STYLE = "border: 1px solid #dee2e6; padding: 8px; min-width: 50px;"
HEADER_CELL_STYLE = CELL_STYLE + " background-color: #f8f9fa; font-weight: 600; text-align: center;"
CODE_BLOCK_STYLE = ("background: var(--bg-tertiary); padding: 16px; border-radius: var(--radius); "
                    "overflow: auto; margin: 16px 0;")
IFRAME_STYLE = "border:none; border-radius: var(--radius);"
VIDEO_STYLE = "border-radius: var(--radius);"


def format_css(css: Dict[str, str]) -> str:
    return " ".join(f"{prop}: {value};" for prop, value in css.items())


def _attr(name: str, value: Optional[str]) -> str:
    if value is None or value == "":
        return ""
    return f' {name}="{escape(str(value), quote=True)}"'


def _align_attr(align: Optional[str]) -> str:
    return _attr("style", f"text-align: {align};") if align else ""


class TreeToHtmlConverter:
    """Converts a RichTree to HTML markup."""

    def convert(self, tree: RichTree) -> str:
        return self.render_blocks(tree.blocks)

    def render_blocks(self, blocks: List[Block]) -> str:
        return "".join(self.render_block(block) for block in blocks)

    def render_block(self, block: Block) -> str:
        if isinstance(block, Paragraph):
            return f"<p{_align_attr(block.align)}>{self._leaf_content(block.children)}</p>"

        if isinstance(block, Heading):
            tag = f"h{block.level}"
            return f"<{tag}{_align_attr(block.align)}>{self._leaf_content(block.children)}</{tag}>"

        if isinstance(block, ListBlock):
            tag = "ol" if block.ordered else "ul"
            items = "".join(self.render_block(item) for item in block.items)
            return f"<{tag}>{items}</{tag}>"

        if isinstance(block, ListItem):
            return f"<li>{self._leaf_content(block.children)}</li>"

        if isinstance(block, BlockQuote):
            return f"<blockquote>{self.render_blocks(block.children)}</blockquote>"

        if isinstance(block, Table):
            rows = "".join(self.render_block(row) for row in block.rows)
            return f'<table style="{TABLE_STYLE}"><tbody>{rows}</tbody></table>'

        if isinstance(block, TableRow):
            return f"<tr>{''.join(self.render_block(cell) for cell in block.cells)}</tr>"

        if isinstance(block, TableCell):
            tag, style = ("th", HEADER_CELL_STYLE) if block.header else ("td", CELL_STYLE)
            return f'<{tag} style="{style}">{self.render_blocks(block.children)}</{tag}>'

        if isinstance(block, CodeBlock):
            return f'<pre style="{CODE_BLOCK_STYLE}"><code>{escape(block.text, quote=False)}</code></pre>'

        if isinstance(block, MediaEmbed):
            media = self._render_media(block)
            if block.align:
                return f"<p{_align_attr(block.align)}>{media}</p>"
            return media

        if isinstance(block, RawBlock):
            return block.html

        raise TypeError(f"Unknown block node: {type(block).__name__}")

    def _render_media(self, media: MediaEmbed) -> str:
        sizes = _attr("width", media.width) + _attr("height", media.height)
        if media.kind == "video":
            return f'<video{_attr("src", media.src)}{sizes} controls style="{VIDEO_STYLE}"></video>'
        return f'<iframe{_attr("src", media.src)}{sizes} style="{IFRAME_STYLE}" allowfullscreen></iframe>'

    def _leaf_content(self, inlines: List[Inline]) -> str:
        # Empty blocks carry a line break so they stay visible and editable
        return self.render_inlines(inlines) if inlines else "<br>"

    def render_inlines(self, inlines: List[Inline]) -> str:
        return "".join(self.render_inline(node) for node in inlines)

    def render_inline(self, node: Inline) -> str:
        if isinstance(node, Text):
            return escape(node.text, quote=False)

        if isinstance(node, LineBreak):
            return "<br>"

        if isinstance(node, Styled):
            tag = STYLE_TAGS[node.style]
            return f"<{tag}>{self.render_inlines(node.children)}</{tag}>"

        if isinstance(node, Span):
            style = _attr("style", format_css(node.css))
            if node.size:
                return f'<font size="{escape(node.size, quote=True)}"{style}>{self.render_inlines(node.children)}</font>'
            return f"<span{style}>{self.render_inlines(node.children)}</span>"

        if isinstance(node, Link):
            return (f'<a href="{escape(node.href, quote=True)}"{_attr("target", node.target)}>'
                    f"{self.render_inlines(node.children)}</a>")

        if isinstance(node, Image):
            return (f'<img src="{escape(node.src, quote=True)}"{_attr("alt", node.alt)}'
                    f'{_attr("style", node.style)}{_attr("class", node.classes)}>')

        if isinstance(node, RawInline):
            return node.html

        raise TypeError(f"Unknown inline node: {type(node).__name__}")
