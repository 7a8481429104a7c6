"""
Formatted runs: a flat view of a leaf block's inline content.

Formatting commands split a block's content into runs, each carrying the
marks (styles, CSS, font size marker, link) of its inline ancestors, change
the marks of the selected runs and rebuild nested inline nodes.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field, replace
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

from ..core.rich_tree import (
    Block, CodeBlock, Image, Inline, InlineStyle, LineBreak, Link, RawInline, Span,
    Styled, Text,
)


LeafInline = Union[Text, LineBreak, Image, RawInline]

# Outermost first; decides how rebuilt inline nodes nest.
STYLE_ORDER = (InlineStyle.BOLD, InlineStyle.ITALIC, InlineStyle.UNDERLINE, InlineStyle.STRIKE)


@dataclass(frozen=True)
class Marks:
    """Formatting inherited by a run from its inline ancestors."""

    styles: FrozenSet[InlineStyle] = frozenset()
    css: Tuple[Tuple[str, str], ...] = ()
    size: Optional[str] = None
    link: Optional[Tuple[str, Optional[str]]] = None

    def with_style(self, style: InlineStyle, enabled: bool = True) -> Marks:
        styles = self.styles | {style} if enabled else self.styles - {style}
        return replace(self, styles=frozenset(styles))

    def with_css(self, prop: str, value: str) -> Marks:
        css = dict(self.css)
        css[prop] = value
        return replace(self, css=tuple(sorted(css.items())))

    def with_size(self, size: Optional[str]) -> Marks:
        return replace(self, size=size)


@dataclass
class Run:
    leaf: LeafInline
    marks: Marks = field(default_factory=Marks)

    @property
    def length(self) -> int:
        return len(self.leaf.text) if isinstance(self.leaf, Text) else 1

    @property
    def text(self) -> str:
        if isinstance(self.leaf, Text):
            return self.leaf.text
        if isinstance(self.leaf, LineBreak):
            return "\n"
        if isinstance(self.leaf, RawInline):
            return self.leaf.text
        return ""


def flatten(inlines: Sequence[Inline], marks: Optional[Marks] = None) -> List[Run]:
    """Flatten nested inlines into runs."""
    marks = marks or Marks()
    runs: List[Run] = []
    for node in inlines:
        if isinstance(node, Text):
            if node.text:
                runs.append(Run(Text(node.text), marks))
        elif isinstance(node, (LineBreak, Image, RawInline)):
            runs.append(Run(node, marks))
        elif isinstance(node, Styled):
            runs.extend(flatten(node.children, marks.with_style(node.style)))
        elif isinstance(node, Span):
            inner = marks
            for prop, value in node.css.items():
                inner = inner.with_css(prop, value)
            if node.size:
                inner = inner.with_size(node.size)
            runs.extend(flatten(node.children, inner))
        elif isinstance(node, Link):
            runs.extend(flatten(node.children, replace(marks, link=(node.href, node.target))))
    return runs


def _style_layer(style: InlineStyle):
    def key(marks: Marks):
        return True if style in marks.styles else None

    def wrap(_, children: List[Inline]) -> Inline:
        return Styled(style=style, children=children)

    return key, wrap


def _span_key(marks: Marks):
    return (marks.css, marks.size) if (marks.css or marks.size) else None


def _wrap_span(key, children: List[Inline]) -> Inline:
    css, size = key
    return Span(css=dict(css), size=size, children=children)


def _wrap_link(key, children: List[Inline]) -> Inline:
    href, target = key
    return Link(href=href, target=target, children=children)


_LAYERS: List[Tuple[Callable, Callable]] = [
    (lambda marks: marks.link, _wrap_link),
    (_span_key, _wrap_span),
] + [_style_layer(style) for style in STYLE_ORDER]


def rebuild(runs: Sequence[Run]) -> List[Inline]:
    """Rebuild nested inline nodes from runs."""
    return _build(_merge_text(runs), 0)


def _build(runs: List[Run], depth: int) -> List[Inline]:
    if depth == len(_LAYERS):
        return [run.leaf for run in runs]
    key_fn, wrap = _LAYERS[depth]
    nodes: List[Inline] = []
    for key, group in itertools.groupby(runs, key=lambda run: key_fn(run.marks)):
        children = _build(list(group), depth + 1)
        if key is None:
            nodes.extend(children)
        else:
            nodes.append(wrap(key, children))
    return nodes


def _merge_text(runs: Sequence[Run]) -> List[Run]:
    merged: List[Run] = []
    for run in runs:
        if (merged and isinstance(run.leaf, Text) and isinstance(merged[-1].leaf, Text)
                and merged[-1].marks == run.marks):
            merged[-1] = Run(Text(merged[-1].leaf.text + run.leaf.text), run.marks)
        else:
            merged.append(run)
    return merged


def split_at(runs: Sequence[Run], offset: int) -> Tuple[List[Run], List[Run]]:
    """Split runs at a character offset, cutting a text run if needed."""
    before: List[Run] = []
    after: List[Run] = []
    position = 0
    for run in runs:
        end = position + run.length
        if end <= offset:
            before.append(run)
        elif position >= offset:
            after.append(run)
        else:
            cut = offset - position
            before.append(Run(Text(run.leaf.text[:cut]), run.marks))
            after.append(Run(Text(run.leaf.text[cut:]), run.marks))
        position = end
    return before, after


def slice_runs(runs: Sequence[Run], start: int, end: int) -> Tuple[List[Run], List[Run], List[Run]]:
    """Split runs into the parts before, inside and after ``[start, end)``."""
    head, rest = split_at(runs, start)
    middle, tail = split_at(rest, end - start)
    return head, middle, tail


def runs_length(runs: Sequence[Run]) -> int:
    return sum(run.length for run in runs)


def runs_text(runs: Sequence[Run]) -> str:
    return "".join(run.text for run in runs)


def leaf_runs(block: Block) -> List[Run]:
    """Runs of a text-bearing block; code blocks are one unformatted run."""
    if isinstance(block, CodeBlock):
        return [Run(Text(block.text))] if block.text else []
    return flatten(block.children)


def set_leaf_runs(block: Block, runs: Sequence[Run]) -> None:
    """Replace a text-bearing block's content; code blocks keep only text."""
    if isinstance(block, CodeBlock):
        block.text = runs_text(runs)
    else:
        block.children = rebuild(runs)
