"""
Rich-text tree: the in-memory representation of document content.

Blocks hold either inline content (paragraphs, headings, list items, code
blocks) or other blocks (lists, quotes, tables). Positions address a
text-bearing leaf block by its path of child indexes plus a character offset
into the leaf's flattened content.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


class InlineStyle(Enum):
    """Character styles toggled by the formatting commands."""
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKE = "strike"


ALIGNMENTS = ("left", "center", "right", "justify")


# Inline nodes

@dataclass
class Text:
    text: str


@dataclass
class LineBreak:
    pass


@dataclass
class Styled:
    style: InlineStyle
    children: List["Inline"] = field(default_factory=list)


@dataclass
class Span:
    """Font face, colour, background or size styling."""

    css: Dict[str, str] = field(default_factory=dict)
    size: Optional[str] = None
    children: List["Inline"] = field(default_factory=list)


@dataclass
class Link:
    href: str
    target: Optional[str] = None
    children: List["Inline"] = field(default_factory=list)


@dataclass
class Image:
    src: str
    style: str = ""
    classes: str = ""
    alt: str = ""


@dataclass
class RawInline:
    """Unknown inline markup kept verbatim."""

    html: str
    text: str = ""


Inline = Union[Text, LineBreak, Styled, Span, Link, Image, RawInline]


# Block nodes

@dataclass
class Paragraph:
    children: List[Inline] = field(default_factory=list)
    align: Optional[str] = None


@dataclass
class Heading:
    level: int
    children: List[Inline] = field(default_factory=list)
    align: Optional[str] = None


@dataclass
class ListItem:
    children: List[Inline] = field(default_factory=list)


@dataclass
class ListBlock:
    ordered: bool = False
    items: List[ListItem] = field(default_factory=list)


@dataclass
class BlockQuote:
    children: List["Block"] = field(default_factory=list)


@dataclass
class TableCell:
    header: bool = False
    children: List["Block"] = field(default_factory=list)


@dataclass
class TableRow:
    cells: List[TableCell] = field(default_factory=list)


@dataclass
class Table:
    rows: List[TableRow] = field(default_factory=list)


@dataclass
class CodeBlock:
    text: str = ""


@dataclass
class MediaEmbed:
    """An embedded iframe player or native video element."""

    kind: str
    src: str
    width: Optional[str] = None
    height: Optional[str] = None
    align: Optional[str] = None


@dataclass
class RawBlock:
    """Unknown block markup kept verbatim."""

    html: str
    text: str = ""


Block = Union[Paragraph, Heading, ListBlock, ListItem, BlockQuote, Table, TableRow,
              TableCell, CodeBlock, MediaEmbed, RawBlock]

# Blocks a position can point into.
TEXT_BLOCKS = (Paragraph, Heading, ListItem, CodeBlock)


def child_blocks(node: Block) -> Optional[List[Block]]:
    """Return the mutable list of block children of a container, or None."""
    if isinstance(node, (BlockQuote, TableCell)):
        return node.children
    if isinstance(node, ListBlock):
        return node.items
    if isinstance(node, Table):
        return node.rows
    if isinstance(node, TableRow):
        return node.cells
    return None


def inline_children(node: Union[Block, Inline]) -> Optional[List[Inline]]:
    """Return the inline children of a node, or None for leaves and containers."""
    if isinstance(node, (Paragraph, Heading, ListItem, Styled, Span, Link)):
        return node.children
    return None


def text_to_inlines(text: str) -> List[Inline]:
    """Turn plain text into inlines, newlines becoming line breaks."""
    inlines: List[Inline] = []
    for index, line in enumerate(text.split("\n")):
        if index:
            inlines.append(LineBreak())
        if line:
            inlines.append(Text(line))
    return inlines


def inline_length(node: Inline) -> int:
    """Offset length of an inline node."""
    if isinstance(node, Text):
        return len(node.text)
    children = inline_children(node)
    if children is not None:
        return sum(inline_length(child) for child in children)
    return 1


def inline_text(inlines: List[Inline]) -> str:
    """Visible text of inline content."""
    parts = []
    for node in inlines:
        if isinstance(node, Text):
            parts.append(node.text)
        elif isinstance(node, LineBreak):
            parts.append("\n")
        elif isinstance(node, RawInline):
            parts.append(node.text)
        else:
            children = inline_children(node)
            if children is not None:
                parts.append(inline_text(children))
    return "".join(parts)


@dataclass(frozen=True, order=True)
class Position:
    """A caret location: leaf block path plus character offset."""

    path: Tuple[int, ...]
    offset: int = 0

    def __str__(self) -> str:
        return f"{'.'.join(str(i) for i in self.path)}:{self.offset}"


@dataclass(frozen=True)
class SelectionRange:
    """A selection from anchor to focus; collapsed when both are equal."""

    anchor: Position
    focus: Position

    @classmethod
    def caret(cls, position: Position) -> SelectionRange:
        return cls(position, position)

    @property
    def collapsed(self) -> bool:
        return self.anchor == self.focus

    @property
    def start(self) -> Position:
        return min(self.anchor, self.focus)

    @property
    def end(self) -> Position:
        return max(self.anchor, self.focus)


@dataclass
class RichTree:
    """Ordered list of top-level blocks."""

    blocks: List[Block] = field(default_factory=list)

    @classmethod
    def blank(cls) -> RichTree:
        """A document holding one empty paragraph."""
        return cls(blocks=[Paragraph()])

    @classmethod
    def from_text(cls, text: str) -> RichTree:
        """Build a tree from plain text: blank lines split paragraphs."""
        text = text.replace("\r\n", "\n")
        return cls(blocks=[Paragraph(children=text_to_inlines(part)) for part in text.split("\n\n")])

    def copy(self) -> RichTree:
        return copy.deepcopy(self)

    def get_text_content(self) -> str:
        """Extract plain text content from the tree."""
        from .tree_handler import TreeHandler
        return TreeHandler(self).get_text_content()
