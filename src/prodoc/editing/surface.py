"""
The editing surface: an editable view over the document store.

Exposes the three capabilities the command layer builds on: apply a named
formatting command to the live selection, report whether a command is
active at the selection, and insert markup at the selection.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from ..converters.html_to_tree import HtmlToTreeConverter
from ..core.document_model import DocumentStore
from ..core.rich_tree import (
    Block, BlockQuote, CodeBlock, Heading, Inline, InlineStyle, Link, ListBlock, ListItem,
    Paragraph, Position, RichTree, SelectionRange, child_blocks, text_to_inlines,
)
from ..core.tree_handler import Path, TreeHandler
from ..errors import ValidationError
from .runs import (
    Marks, Run, flatten, leaf_runs, runs_length, runs_text, set_leaf_runs, slice_runs, split_at,
)


logger = logging.getLogger(__name__)

STYLE_COMMANDS = {
    "bold": InlineStyle.BOLD,
    "italic": InlineStyle.ITALIC,
    "underline": InlineStyle.UNDERLINE,
    "strikethrough": InlineStyle.STRIKE,
}

ALIGN_COMMANDS = {
    "justifyLeft": "left",
    "justifyCenter": "center",
    "justifyRight": "right",
    "justifyFull": "justify",
}

LIST_COMMANDS = {
    "insertOrderedList": True,
    "insertUnorderedList": False,
}

CSS_COMMANDS = {
    "fontName": "font-family",
    "foreColor": "color",
    "backColor": "background-color",
}

BLOCK_FORMATS = {"p", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre"}

# One touched leaf: path, block, start and end offsets inside it.
Segment = Tuple[Path, Block, int, int]


class EditingSurface:
    """
    Editable surface over a document store.

    Holds the live selection and focus. All commands act on the live
    selection; structural commands keep the selection on the same text by
    remembering leaf ordinals, which they never change.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self.selection: Optional[SelectionRange] = None
        self.has_focus = False
        self._parser = HtmlToTreeConverter()

        self._commands: Dict[str, Callable[[Optional[str]], None]] = {
            "removeFormat": lambda _: self._restyle_selection(lambda marks: Marks(link=marks.link)),
            "formatBlock": self._format_block,
            "outdent": lambda _: self._outdent(),
            "insertText": lambda value: self.insert_text(value or ""),
            "fontSize": lambda value: self._restyle_selection(lambda marks: marks.with_size(str(value))),
        }
        for name, style in STYLE_COMMANDS.items():
            self._commands[name] = lambda _, style=style: self._toggle_style(style)
        for name, align in ALIGN_COMMANDS.items():
            self._commands[name] = lambda _, align=align: self._align(align)
        for name, ordered in LIST_COMMANDS.items():
            self._commands[name] = lambda _, ordered=ordered: self._toggle_list(ordered)
        for name, prop in CSS_COMMANDS.items():
            self._commands[name] = lambda value, prop=prop: self._restyle_selection(
                lambda marks: marks.with_css(prop, str(value)))

    @property
    def tree(self) -> RichTree:
        return self.store.tree

    @property
    def handler(self) -> TreeHandler:
        return TreeHandler(self.store.tree)

    # Focus and selection

    def focus(self) -> None:
        """Give the surface focus; a fresh focus puts the caret at the start."""
        self.has_focus = True
        if self.selection is None:
            self.selection = SelectionRange.caret(self.handler.start_position())
        else:
            self.set_selection(self.selection)

    def blur(self) -> None:
        """Lose focus, and with it the live selection."""
        self.has_focus = False
        self.selection = None

    def set_selection(self, selection: SelectionRange) -> SelectionRange:
        handler = self.handler
        self.selection = SelectionRange(handler.clamp(selection.anchor), handler.clamp(selection.focus))
        return self.selection

    def select(self, anchor: Position, focus: Optional[Position] = None) -> SelectionRange:
        self.has_focus = True
        return self.set_selection(SelectionRange(anchor, focus or anchor))

    def select_all(self) -> SelectionRange:
        handler = self.handler
        return self.select(handler.start_position(), handler.end_position())

    def collapse_to_end(self) -> SelectionRange:
        self.selection = SelectionRange.caret(self.handler.end_position())
        return self.selection

    def selected_text(self) -> str:
        if self.selection is None or self.selection.collapsed:
            return ""
        parts = []
        for _, block, start, end in self._segments(self.selection):
            _, middle, _ = slice_runs(leaf_runs(block), start, end)
            parts.append(runs_text(middle))
        return "\n".join(parts)

    def in_blockquote(self) -> bool:
        if self.selection is None:
            return False
        return self.handler.find_enclosing(self.selection.focus.path, BlockQuote) is not None

    def enclosing_link(self) -> Optional[Link]:
        """The link around the caret, if any."""
        if self.selection is None:
            return None
        for node in reversed(self.handler.inline_chain_at(self.selection.focus)):
            if isinstance(node, Link):
                return node
        return None

    def current_block(self) -> Optional[Block]:
        if self.selection is None:
            return None
        return self.handler.get_node(self.selection.focus.path)

    # Native capabilities

    def apply_command(self, name: str, value: Optional[str] = None) -> None:
        """Apply a named formatting command to the live selection."""
        command = self._commands.get(name)
        if command is None:
            raise ValidationError(f"Unsupported editing command: {name}")
        if self.selection is None:
            self.focus()
        logger.debug(f"Applying {name}({value!r}) at {self.selection.focus}")
        command(value)

    def query_command_state(self, name: str) -> bool:
        """Whether a command is active at the live selection."""
        if self.selection is None:
            return False

        if name in STYLE_COMMANDS:
            style = STYLE_COMMANDS[name]
            return self._selection_has(lambda marks: style in marks.styles)

        block = self.current_block()

        if name in ALIGN_COMMANDS:
            align = getattr(block, "align", None) or "left"
            return align == ALIGN_COMMANDS[name]

        if name in LIST_COMMANDS:
            if not isinstance(block, ListItem):
                return False
            parent = self.handler.parent(self.selection.focus.path)
            return isinstance(parent, ListBlock) and parent.ordered == LIST_COMMANDS[name]

        return False

    def insert_markup(self, markup: str) -> None:
        """Replace the selection with parsed markup and put the caret after it."""
        fragment = self._parser.parse_fragment(markup)
        if self.selection is None:
            self.focus()
        if not self.selection.collapsed:
            self._delete_range(self.selection)
        caret = self.selection.focus

        if fragment.is_inline:
            self._insert_runs(caret, flatten(fragment.inlines))
        else:
            self._insert_blocks(caret, fragment.blocks)

    def insert_text(self, text: str) -> None:
        """Type text at the caret, continuing the formatting before it."""
        if self.selection is None:
            self.focus()
        if not self.selection.collapsed:
            self._delete_range(self.selection)
        caret = self.selection.focus
        marks = self._marks_at(caret)
        self._insert_runs(caret, [Run(leaf, marks) for leaf in text_to_inlines(text)])

    def delete_selection(self) -> None:
        if self.selection is not None and not self.selection.collapsed:
            self._delete_range(self.selection)

    # Selection helpers

    def _segments(self, selection: SelectionRange) -> List[Segment]:
        start, end = selection.start, selection.end
        handler = self.handler
        segments = []
        for path, block in handler.iter_leaves():
            if path < start.path or path > end.path:
                continue
            seg_start = start.offset if path == start.path else 0
            seg_end = end.offset if path == end.path else handler.leaf_length(block)
            segments.append((path, block, seg_start, seg_end))
        return segments

    def _marks_at(self, position: Position) -> Marks:
        block = self.handler.get_node(position.path)
        runs = leaf_runs(block)
        before, after = split_at(runs, position.offset)
        if before:
            return before[-1].marks
        if after:
            return after[0].marks
        return Marks()

    def _selection_has(self, predicate: Callable[[Marks], bool]) -> bool:
        if self.selection.collapsed:
            return predicate(self._marks_at(self.selection.focus))
        marks = []
        for _, block, start, end in self._segments(self.selection):
            if isinstance(block, CodeBlock):
                continue
            _, middle, _ = slice_runs(leaf_runs(block), start, end)
            marks.extend(run.marks for run in middle)
        return bool(marks) and all(predicate(mark) for mark in marks)

    def _remember_selection(self) -> Tuple[int, int, int, int]:
        handler = self.handler
        anchor, focus = self.selection.anchor, self.selection.focus
        return (handler.leaf_ordinal(anchor.path), anchor.offset,
                handler.leaf_ordinal(focus.path), focus.offset)

    def _restore_selection(self, remembered: Tuple[int, int, int, int]) -> None:
        handler = self.handler
        anchor_ordinal, anchor_offset, focus_ordinal, focus_offset = remembered
        anchor_path = handler.leaf_path(anchor_ordinal)
        focus_path = handler.leaf_path(focus_ordinal)
        if anchor_path is None or focus_path is None:
            self.collapse_to_end()
            return
        self.set_selection(SelectionRange(Position(anchor_path, anchor_offset),
                                          Position(focus_path, focus_offset)))

    # Inline formatting

    def _restyle_selection(self, change: Callable[[Marks], Marks]) -> None:
        # A collapsed selection has nothing to restyle
        if self.selection.collapsed:
            return
        for _, block, start, end in self._segments(self.selection):
            if isinstance(block, CodeBlock) or start >= end:
                continue
            head, middle, tail = slice_runs(leaf_runs(block), start, end)
            set_leaf_runs(block, head + [Run(run.leaf, change(run.marks)) for run in middle] + tail)

    def _toggle_style(self, style: InlineStyle) -> None:
        active = self._selection_has(lambda marks: style in marks.styles)
        self._restyle_selection(lambda marks: marks.with_style(style, not active))

    def _align(self, align: str) -> None:
        for _, block, _, _ in self._segments(self.selection):
            if isinstance(block, (Paragraph, Heading)):
                block.align = align

    # Block structure

    def _toggle_list(self, ordered: bool) -> None:
        remembered = self._remember_selection()
        handler = self.handler
        leaves = [(path, block) for path, block, _, _ in self._segments(self.selection)]
        unlist = all(
            isinstance(block, ListItem) and handler.parent(path).ordered == ordered
            for path, block in leaves
        )

        for path, block in reversed(leaves):
            if isinstance(block, ListItem):
                parent = handler.parent(path)
                if unlist:
                    self._unlist(path)
                elif parent.ordered != ordered:
                    parent.ordered = ordered
            elif isinstance(block, (Paragraph, Heading)):
                siblings, index = handler.container_of(path)
                siblings[index] = ListBlock(ordered=ordered, items=[ListItem(children=block.children)])

        self._merge_adjacent_lists(self.tree.blocks)
        self._restore_selection(remembered)

    def _unlist(self, path: Path) -> None:
        """Turn a list item into a paragraph, splitting its list around it."""
        handler = self.handler
        siblings, index = handler.container_of(path[:-1])
        list_block = siblings[index]
        position = path[-1]
        before, item, after = list_block.items[:position], list_block.items[position], list_block.items[position + 1:]

        replacement: List[Block] = []
        if before:
            replacement.append(ListBlock(ordered=list_block.ordered, items=before))
        replacement.append(Paragraph(children=item.children))
        if after:
            replacement.append(ListBlock(ordered=list_block.ordered, items=after))
        siblings[index:index + 1] = replacement

    def _merge_adjacent_lists(self, blocks: List[Block]) -> None:
        merged: List[Block] = []
        for block in blocks:
            if (isinstance(block, ListBlock) and merged and isinstance(merged[-1], ListBlock)
                    and merged[-1].ordered == block.ordered):
                merged[-1].items.extend(block.items)
                continue
            merged.append(block)
            children = child_blocks(block)
            if children is not None and not isinstance(block, ListBlock):
                self._merge_adjacent_lists(children)
        blocks[:] = merged

    def _format_block(self, value: Optional[str]) -> None:
        tag = (value or "").strip().strip("<>").lower()
        if tag not in BLOCK_FORMATS:
            raise ValidationError(f"Unsupported block format: {value}")

        remembered = self._remember_selection()
        leaves = [(path, block) for path, block, _, _ in self._segments(self.selection)]
        if tag == "blockquote":
            self._wrap_in_blockquote(leaves)
        else:
            handler = self.handler
            for path, block in reversed(leaves):
                if isinstance(block, ListItem):
                    continue
                siblings, index = handler.container_of(path)
                siblings[index] = self._convert_leaf(block, tag)
        self._restore_selection(remembered)

    @staticmethod
    def _convert_leaf(block: Block, tag: str) -> Block:
        if isinstance(block, CodeBlock):
            children: List[Inline] = text_to_inlines(block.text)
            align = None
        else:
            children = block.children
            align = block.align
        if tag == "p":
            return Paragraph(children=children, align=align)
        if tag == "pre":
            return CodeBlock(text=TreeHandler.leaf_text(block))
        return Heading(level=int(tag[1]), children=children, align=align)

    def _wrap_in_blockquote(self, leaves: List[Tuple[Path, Block]]) -> None:
        handler = self.handler
        if all(handler.find_enclosing(path, BlockQuote) for path, _ in leaves):
            return

        units: Dict[Path, List[int]] = {}
        for path, block in leaves:
            if handler.find_enclosing(path, BlockQuote):
                continue
            unit = path[:-1] if isinstance(block, ListItem) else path
            indexes = units.setdefault(unit[:-1], [])
            if unit[-1] not in indexes:
                indexes.append(unit[-1])

        # Deeper containers first, so shallower paths stay valid
        for container_path in sorted(units, key=len, reverse=True):
            siblings = self.tree.blocks if not container_path else child_blocks(handler.get_node(container_path))
            groups: List[List[int]] = []
            for index in sorted(units[container_path]):
                if groups and groups[-1][-1] == index - 1:
                    groups[-1].append(index)
                else:
                    groups.append([index])
            for group in reversed(groups):
                first, last = group[0], group[-1]
                siblings[first:last + 1] = [BlockQuote(children=siblings[first:last + 1])]

    def _outdent(self) -> None:
        remembered = self._remember_selection()
        handler = self.handler
        leaves = [(path, block) for path, block, _, _ in self._segments(self.selection)]
        for path, block in reversed(leaves):
            if isinstance(block, ListItem):
                self._unlist(path)
            elif isinstance(handler.parent(path), BlockQuote):
                self._lift_from_blockquote(path)
        self._restore_selection(remembered)

    def _lift_from_blockquote(self, path: Path) -> None:
        """Move a block out of its quote, splitting the quote around it."""
        siblings, index = self.handler.container_of(path[:-1])
        quote = siblings[index]
        position = path[-1]
        before, node, after = quote.children[:position], quote.children[position], quote.children[position + 1:]

        replacement: List[Block] = []
        if before:
            replacement.append(BlockQuote(children=before))
        replacement.append(node)
        if after:
            replacement.append(BlockQuote(children=after))
        siblings[index:index + 1] = replacement

    # Insertion and deletion

    def _insert_runs(self, caret: Position, runs: List[Run]) -> None:
        block = self.handler.get_node(caret.path)
        head, tail = split_at(leaf_runs(block), caret.offset)
        set_leaf_runs(block, head + runs + tail)
        inserted = len(runs_text(runs)) if isinstance(block, CodeBlock) else runs_length(runs)
        self.selection = SelectionRange.caret(Position(caret.path, caret.offset + inserted))

    def _insert_blocks(self, caret: Position, blocks: List[Block]) -> None:
        """Split the caret's block and put blocks between the halves."""
        handler = self.handler
        block = handler.get_node(caret.path)
        head, tail = split_at(leaf_runs(block), caret.offset)
        before = self._clone_leaf(block, head) if head else None
        after = self._clone_leaf(block, tail) if tail else None

        if isinstance(block, ListItem):
            siblings, index = handler.container_of(caret.path[:-1])
            list_block = siblings[index]
            position = caret.path[-1]
            first_items = list_block.items[:position] + ([before] if before else [])
            last_items = ([after] if after else []) + list_block.items[position + 1:]
            replacement: List[Block] = []
            if first_items:
                replacement.append(ListBlock(ordered=list_block.ordered, items=first_items))
            replacement.extend(blocks)
            if last_items:
                replacement.append(ListBlock(ordered=list_block.ordered, items=last_items))
        else:
            siblings, index = handler.container_of(caret.path)
            replacement = ([before] if before else []) + list(blocks) + ([after] if after else [])

        siblings[index:index + 1] = replacement

        if after is not None:
            target, offset = after, 0
        else:
            inserted_leaves = list(handler.iter_leaves(list(blocks)))
            if inserted_leaves:
                target = inserted_leaves[-1][1]
                offset = handler.leaf_length(target)
            else:
                target, offset = Paragraph(), 0
                siblings.insert(index + len(replacement), target)

        self.selection = SelectionRange.caret(Position(handler.path_of(target), offset))

    @staticmethod
    def _clone_leaf(block: Block, runs: List[Run]) -> Block:
        if isinstance(block, Paragraph):
            clone: Block = Paragraph(align=block.align)
        elif isinstance(block, Heading):
            clone = Heading(level=block.level, align=block.align)
        elif isinstance(block, ListItem):
            clone = ListItem()
        else:
            clone = CodeBlock()
        set_leaf_runs(clone, runs)
        return clone

    def _delete_range(self, selection: SelectionRange) -> None:
        handler = self.handler
        start, end = selection.start, selection.end
        first = handler.get_node(start.path)

        if start.path == end.path:
            head, _, tail = slice_runs(leaf_runs(first), start.offset, end.offset)
            set_leaf_runs(first, head + tail)
        else:
            last = handler.get_node(end.path)
            head, _ = split_at(leaf_runs(first), start.offset)
            _, tail = split_at(leaf_runs(last), end.offset)

            if start.path[:-1] == end.path[:-1]:
                # Same container: join the two ends and drop everything between
                set_leaf_runs(first, head + tail)
                siblings, index = handler.container_of(start.path)
                del siblings[index + 1:end.path[-1] + 1]
            else:
                for path, block, _, _ in self._segments(selection):
                    if path not in (start.path, end.path):
                        set_leaf_runs(block, [])
                set_leaf_runs(first, head)
                set_leaf_runs(last, tail)

        self.selection = SelectionRange.caret(start)
