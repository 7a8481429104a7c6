"""
Converter from editor markup (HTML) to the rich-text tree.

Parses with BeautifulSoup. Known elements become typed nodes; anything
else is kept verbatim as raw markup so it survives a round trip.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from ..core.rich_tree import (
    ALIGNMENTS, Block, BlockQuote, CodeBlock, Heading, Image, Inline, InlineStyle,
    LineBreak, Link, ListBlock, ListItem, MediaEmbed, Paragraph, RawBlock, RawInline,
    RichTree, Span, Styled, Table, TableCell, TableRow, Text,
)


BLOCK_TAGS = {
    "p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li", "blockquote",
    "table", "thead", "tbody", "tfoot", "tr", "td", "th", "pre", "iframe", "video",
    "hr", "figure", "section", "article", "header", "footer", "nav", "aside", "main",
    "form", "dl", "address", "fieldset", "details",
}

STYLE_TAGS = {
    "b": InlineStyle.BOLD,
    "strong": InlineStyle.BOLD,
    "i": InlineStyle.ITALIC,
    "em": InlineStyle.ITALIC,
    "u": InlineStyle.UNDERLINE,
    "s": InlineStyle.STRIKE,
    "strike": InlineStyle.STRIKE,
    "del": InlineStyle.STRIKE,
}

MEDIA_TAGS = ("iframe", "video")


def parse_css(style: Optional[str]) -> Dict[str, str]:
    """Parse an inline ``style`` attribute into an ordered dict."""
    css: Dict[str, str] = {}
    for declaration in (style or "").split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop, value = prop.strip().lower(), value.strip()
        if prop and value:
            css[prop] = value
    return css


def _alignment(tag: Tag) -> Optional[str]:
    align = parse_css(tag.get("style")).get("text-align") or tag.get("align")
    align = align.lower() if align else None
    return align if align in ALIGNMENTS else None


def _is_blank(node: PageElement) -> bool:
    return isinstance(node, NavigableString) and not str(node).strip()


def _is_ignored(node: PageElement) -> bool:
    # Comments, doctypes, CDATA and processing instructions
    return isinstance(node, PreformattedString)


@dataclass
class Fragment:
    """Parsed markup destined for insertion at the caret."""

    blocks: List[Block] = field(default_factory=list)
    inlines: List[Inline] = field(default_factory=list)

    @property
    def is_inline(self) -> bool:
        return not self.blocks


class HtmlToTreeConverter:
    """
    Converts editor markup to a RichTree.

    Loose inline content at block level is wrapped into paragraphs. A block
    holding nothing but a single ``<br>`` is an empty line and parses to an
    empty block.
    """

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    def convert(self, html: Optional[str]) -> RichTree:
        """
        Parse a full document body.

        Returns:
            RichTree with at least one block
        """
        soup = BeautifulSoup(html or "", self.parser)
        blocks = self._parse_blocks(soup.contents)
        return RichTree(blocks=blocks) if blocks else RichTree.blank()

    def parse_fragment(self, html: str) -> Fragment:
        """Parse markup to be inserted; inline-only markup stays inline."""
        soup = BeautifulSoup(html or "", self.parser)
        nodes = [node for node in soup.contents if not _is_ignored(node)]
        if all(self._is_inline_node(node) for node in nodes):
            return Fragment(inlines=self._parse_inlines(nodes))
        return Fragment(blocks=self._parse_blocks(nodes))

    @staticmethod
    def _is_inline_node(node: PageElement) -> bool:
        if isinstance(node, NavigableString):
            return True
        return isinstance(node, Tag) and node.name not in BLOCK_TAGS

    # Blocks

    def _parse_blocks(self, nodes: List[PageElement]) -> List[Block]:
        blocks: List[Block] = []
        pending: List[PageElement] = []

        def flush() -> None:
            if any(not _is_blank(node) for node in pending):
                blocks.append(Paragraph(children=self._parse_inlines(pending)))
            pending.clear()

        for node in nodes:
            if _is_ignored(node):
                continue
            if self._is_inline_node(node):
                pending.append(node)
                continue
            flush()
            blocks.extend(self._parse_block(node))
        flush()
        return blocks

    def _parse_block(self, tag: Tag) -> List[Block]:
        name = tag.name

        if name == "p":
            return [self._parse_paragraph(tag)]

        if name == "div":
            if any(isinstance(child, Tag) and child.name in BLOCK_TAGS for child in tag.children):
                return self._parse_blocks(list(tag.contents))
            return [Paragraph(children=self._leaf_inlines(tag), align=_alignment(tag))]

        if name in ("h1", "h2", "h3", "h4", "h5", "h6"):
            return [Heading(level=int(name[1]), children=self._leaf_inlines(tag), align=_alignment(tag))]

        if name in ("ul", "ol"):
            return [self._parse_list(tag)]

        if name == "blockquote":
            return [BlockQuote(children=self._parse_blocks(list(tag.contents)))]

        if name == "table":
            return [self._parse_table(tag)]

        if name == "pre":
            return [CodeBlock(text=tag.get_text())]

        if name in MEDIA_TAGS:
            return [self._parse_media(tag, align=None)]

        return [RawBlock(html=str(tag), text=tag.get_text())]

    def _parse_paragraph(self, tag: Tag) -> Block:
        align = _alignment(tag)
        meaningful = [child for child in tag.contents if not _is_blank(child) and not _is_ignored(child)]
        if len(meaningful) == 1 and isinstance(meaningful[0], Tag) and meaningful[0].name in MEDIA_TAGS:
            return self._parse_media(meaningful[0], align=align)
        return Paragraph(children=self._leaf_inlines(tag), align=align)

    def _parse_media(self, tag: Tag, align: Optional[str]) -> MediaEmbed:
        return MediaEmbed(
            kind=tag.name,
            src=tag.get("src", ""),
            width=tag.get("width"),
            height=tag.get("height"),
            align=align,
        )

    def _parse_list(self, tag: Tag) -> ListBlock:
        items = []
        for child in tag.children:
            if _is_blank(child) or _is_ignored(child):
                continue
            if isinstance(child, Tag) and child.name == "li":
                items.append(ListItem(children=self._leaf_inlines(child)))
            else:
                items.append(ListItem(children=self._parse_inlines([child])))
        return ListBlock(ordered=tag.name == "ol", items=items)

    def _parse_table(self, tag: Tag) -> Table:
        rows = []
        for child in tag.children:
            if not isinstance(child, Tag):
                continue
            if child.name in ("thead", "tbody", "tfoot"):
                rows.extend(self._parse_row(row) for row in child.find_all("tr", recursive=False))
            elif child.name == "tr":
                rows.append(self._parse_row(child))
        return Table(rows=rows)

    def _parse_row(self, tag: Tag) -> TableRow:
        cells = []
        for cell in tag.find_all(["th", "td"], recursive=False):
            children = self._parse_blocks(list(cell.contents)) or [Paragraph()]
            cells.append(TableCell(header=cell.name == "th", children=children))
        return TableRow(cells=cells)

    # Inlines

    def _leaf_inlines(self, tag: Tag) -> List[Inline]:
        """Inline content of a text-bearing block."""
        inlines: List[Inline] = []
        for child in tag.contents:
            if isinstance(child, Tag) and child.name in ("p", "div"):
                # Paragraphs nested in list items or divs flatten to lines
                if inlines:
                    inlines.append(LineBreak())
                inlines.extend(self._parse_inlines(list(child.contents)))
            else:
                inlines.extend(self._parse_inlines([child]))
        if len(inlines) == 1 and isinstance(inlines[0], LineBreak):
            return []
        return inlines

    def _parse_inlines(self, nodes: List[PageElement]) -> List[Inline]:
        inlines: List[Inline] = []
        for node in nodes:
            if _is_ignored(node):
                continue
            if isinstance(node, NavigableString):
                inlines.append(Text(str(node)))
                continue
            if not isinstance(node, Tag):
                continue
            inline = self._parse_inline_tag(node)
            if inline is not None:
                inlines.extend(inline)
        return inlines

    def _parse_inline_tag(self, tag: Tag) -> Optional[List[Inline]]:
        name = tag.name
        children = lambda: self._parse_inlines(list(tag.contents))

        if name == "br":
            return [LineBreak()]

        if name in STYLE_TAGS:
            return [Styled(style=STYLE_TAGS[name], children=children())]

        if name == "span":
            css = parse_css(tag.get("style"))
            if not css:
                return children()
            return [Span(css=css, children=children())]

        if name == "font":
            css: Dict[str, str] = {}
            if tag.get("face"):
                css["font-family"] = tag["face"]
            if tag.get("color"):
                css["color"] = tag["color"]
            css.update(parse_css(tag.get("style")))
            return [Span(css=css, size=tag.get("size"), children=children())]

        if name == "a":
            return [Link(href=tag.get("href", ""), target=tag.get("target"), children=children())]

        if name == "img":
            classes = tag.get("class") or []
            if isinstance(classes, str):
                classes = classes.split()
            return [Image(
                src=tag.get("src", ""),
                style=tag.get("style", ""),
                classes=" ".join(classes),
                alt=tag.get("alt", ""),
            )]

        return [RawInline(html=str(tag), text=tag.get_text())]
