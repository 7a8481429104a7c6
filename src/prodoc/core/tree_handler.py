"""
Tree handler for navigation and manipulation of rich-text trees.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple, Type

from .rich_tree import (
    Block, BlockQuote, CodeBlock, Heading, Inline, ListBlock, ListItem,
    MediaEmbed, Paragraph, Position, RawBlock, RichTree, Table, TableCell, TEXT_BLOCKS,
    child_blocks, inline_children, inline_length, inline_text,
)


Path = Tuple[int, ...]


class TreeHandler:
    """
    Handles navigation and manipulation of rich-text trees.

    Paths are tuples of child indexes from the top-level block list down to
    a node. Text-bearing leaves never contain one another, so comparing
    their paths as tuples gives document order.
    """

    def __init__(self, tree: RichTree):
        self.tree = tree

    # Structure

    def get_node(self, path: Sequence[int]) -> Optional[Block]:
        """Return the block at a path, or None when the path does not resolve."""
        siblings: Optional[List[Block]] = self.tree.blocks
        node: Optional[Block] = None
        for index in path:
            if siblings is None or index < 0 or index >= len(siblings):
                return None
            node = siblings[index]
            siblings = child_blocks(node)
        return node

    def parent(self, path: Sequence[int]) -> Optional[Block]:
        """Return the container holding the node at a path (None at top level)."""
        if len(path) < 2:
            return None
        return self.get_node(path[:-1])

    def container_of(self, path: Sequence[int]) -> Tuple[List[Block], int]:
        """Return the mutable sibling list holding a node, and its index in it."""
        if len(path) == 1:
            return self.tree.blocks, path[0]
        siblings = child_blocks(self.get_node(path[:-1]))
        if siblings is None:
            raise IndexError(f"No container at path {tuple(path[:-1])}")
        return siblings, path[-1]

    def find_enclosing(self, path: Sequence[int], node_type: Type) -> Optional[Tuple[Path, Block]]:
        """Find the nearest ancestor (or the node itself) of a given type."""
        for depth in range(len(path), 0, -1):
            node = self.get_node(path[:depth])
            if isinstance(node, node_type):
                return tuple(path[:depth]), node
        return None

    def iter_nodes(self, blocks: Optional[List[Block]] = None, prefix: Path = ()) -> Iterator[Tuple[Path, Block]]:
        """Walk all blocks in document order (pre-order)."""
        if blocks is None:
            blocks = self.tree.blocks
        for index, block in enumerate(blocks):
            path = prefix + (index,)
            yield path, block
            children = child_blocks(block)
            if children is not None:
                yield from self.iter_nodes(children, path)

    def iter_leaves(self, blocks: Optional[List[Block]] = None, prefix: Path = ()) -> Iterator[Tuple[Path, Block]]:
        """Walk the text-bearing leaf blocks in document order."""
        for path, block in self.iter_nodes(blocks, prefix):
            if isinstance(block, TEXT_BLOCKS):
                yield path, block

    def path_of(self, node: Block) -> Optional[Path]:
        """Locate a block by identity."""
        for path, block in self.iter_nodes():
            if block is node:
                return path
        return None

    def leaf_ordinal(self, path: Path) -> int:
        """Index of a leaf among all leaves, in document order."""
        for ordinal, (leaf_path, _) in enumerate(self.iter_leaves()):
            if leaf_path == path:
                return ordinal
        raise IndexError(f"No text block at path {path}")

    def leaf_path(self, ordinal: int) -> Optional[Path]:
        """Inverse of ``leaf_ordinal``; None when out of range."""
        for index, (path, _) in enumerate(self.iter_leaves()):
            if index == ordinal:
                return path
        return None

    def ensure_leaf(self) -> None:
        """Guarantee at least one text-bearing block exists."""
        if next(self.iter_leaves(), None) is None:
            self.tree.blocks.append(Paragraph())

    # Positions

    def start_position(self) -> Position:
        self.ensure_leaf()
        path, _ = next(self.iter_leaves())
        return Position(path, 0)

    def end_position(self) -> Position:
        self.ensure_leaf()
        path, block = list(self.iter_leaves())[-1]
        return Position(path, self.leaf_length(block))

    def is_valid(self, position: Position) -> bool:
        block = self.get_node(position.path)
        return isinstance(block, TEXT_BLOCKS) and 0 <= position.offset <= self.leaf_length(block)

    def clamp(self, position: Position) -> Position:
        """Map a possibly stale position onto the current tree."""
        block = self.get_node(position.path)
        if not isinstance(block, TEXT_BLOCKS):
            return self.end_position()
        return Position(position.path, max(0, min(position.offset, self.leaf_length(block))))

    @staticmethod
    def leaf_length(block: Block) -> int:
        if isinstance(block, CodeBlock):
            return len(block.text)
        return sum(inline_length(node) for node in block.children)

    @staticmethod
    def leaf_text(block: Block) -> str:
        if isinstance(block, CodeBlock):
            return block.text
        return inline_text(block.children)

    def inline_chain_at(self, position: Position) -> List[Inline]:
        """
        Inline ancestors of the character touching a caret.

        Uses the character before the caret, or the first one when the caret
        sits at the start of the block.

        Returns:
            Outermost-first list of inline nodes enclosing that character
        """
        block = self.get_node(position.path)
        if not isinstance(block, (Paragraph, Heading, ListItem)):
            return []
        target = max(position.offset - 1, 0)

        def search(inlines: List[Inline], start: int) -> Optional[List[Inline]]:
            cursor = start
            for node in inlines:
                length = inline_length(node)
                if cursor <= target < cursor + length:
                    children = inline_children(node)
                    if children is None:
                        return [node]
                    inner = search(children, cursor)
                    return [node] + (inner or [])
                cursor += length
            return None

        return search(block.children, 0) or []

    # Queries

    def find_headings(self, levels: Optional[Sequence[int]] = None) -> List[Tuple[Path, Heading]]:
        """Find headings, optionally restricted to some levels."""
        results = []
        for path, block in self.iter_nodes():
            if isinstance(block, Heading) and (levels is None or block.level in levels):
                results.append((path, block))
        return results

    def get_text_content(self) -> str:
        """Visible text: blocks separated by blank lines, cells by tabs."""
        return "\n\n".join(self.extract_text_from_block(block) for block in self.tree.blocks)

    @classmethod
    def extract_text_from_block(cls, block: Block) -> str:
        if isinstance(block, TEXT_BLOCKS):
            return cls.leaf_text(block)
        if isinstance(block, ListBlock):
            return "\n".join(cls.leaf_text(item) for item in block.items)
        if isinstance(block, BlockQuote):
            return "\n\n".join(cls.extract_text_from_block(child) for child in block.children)
        if isinstance(block, Table):
            return "\n".join(
                "\t".join(
                    " ".join(cls.extract_text_from_block(child) for child in cell.children)
                    for cell in row.cells
                )
                for row in block.rows
            )
        if isinstance(block, RawBlock):
            return block.text
        return ""

    def count_blocks(self, block_types: Tuple[Type, ...]) -> int:
        return sum(1 for _, block in self.iter_nodes() if isinstance(block, block_types))

    def validate_structure(self) -> List[str]:
        """Validate tree structure and return a list of issues."""
        issues = []

        for path, block in self.iter_nodes():
            if isinstance(block, Heading) and not 1 <= block.level <= 6:
                issues.append(f"Heading at {path} has invalid level {block.level}")
            elif isinstance(block, ListBlock) and not block.items:
                issues.append(f"List at {path} has no items")
            elif isinstance(block, MediaEmbed) and block.kind not in ("iframe", "video"):
                issues.append(f"Media at {path} has unknown kind {block.kind}")
            elif isinstance(block, TableCell) and not block.children:
                issues.append(f"Table cell at {path} is empty")

        return issues
