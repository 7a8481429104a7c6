"""
Core document model: the persisted record and the live document store.
"""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .rich_tree import BlockQuote, Heading, ListItem, Paragraph, RichTree
from .tree_handler import TreeHandler


DEFAULT_TITLE = "Untitled Document"
DOCUMENT_VERSION = "1.0.0"
WORDS_PER_MINUTE = 200
OUTLINE_INDENT_PX = 16

_WORD_PATTERN = re.compile(r"\S+")


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class DocumentRecord(BaseModel):
    """The persisted document: title, markup content and bookkeeping."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = DEFAULT_TITLE
    content: str = ""
    created_at: int = Field(default_factory=now_ms, alias="created")
    modified_at: int = Field(default_factory=now_ms, alias="modified")
    version: str = DOCUMENT_VERSION
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with the persisted key names."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> DocumentRecord:
        return cls.model_validate(data)


@dataclass
class DocumentStats:
    """Counts shown in the status bar."""

    words: int
    characters: int
    paragraphs: int
    reading_minutes: int

    def to_metadata(self) -> Dict[str, int]:
        return {
            "wordCount": self.words,
            "charCount": self.characters,
            "paraCount": self.paragraphs,
        }


@dataclass
class OutlineEntry:
    """A heading listed in the sidebar outline."""

    level: int
    text: str
    path: Tuple[int, ...]

    @property
    def indent(self) -> int:
        """Left indentation in pixels."""
        return (self.level - 1) * OUTLINE_INDENT_PX


def compute_stats(tree: RichTree) -> DocumentStats:
    """Word, character, paragraph counts and reading time of a tree."""
    handler = TreeHandler(tree)
    text = handler.get_text_content()
    words = len(_WORD_PATTERN.findall(text))
    paragraphs = handler.count_blocks((Paragraph, Heading, ListItem, BlockQuote)) or 1
    return DocumentStats(
        words=words,
        characters=len(text),
        paragraphs=paragraphs,
        reading_minutes=max(1, math.ceil(words / WORDS_PER_MINUTE)),
    )


def generate_outline(tree: RichTree) -> List[OutlineEntry]:
    """Non-empty level 1-3 headings, in document order."""
    handler = TreeHandler(tree)
    outline = []
    for path, heading in handler.find_headings(levels=(1, 2, 3)):
        text = handler.leaf_text(heading).strip()
        if text:
            outline.append(OutlineEntry(level=heading.level, text=text, path=path))
    return outline


class DocumentStore:
    """
    The authoritative in-memory document.

    Holds the title, the rich-text content tree and the record carrying
    creation time, version and metadata. The editing surface, the command
    executor and the converters all read and write through it.
    """

    def __init__(self, record: Optional[DocumentRecord] = None, tree: Optional[RichTree] = None):
        self.record = record or DocumentRecord()
        self.tree = tree or RichTree.blank()
        self.is_dirty = False

    @classmethod
    def from_record(cls, record: DocumentRecord) -> DocumentStore:
        """Create a store from a persisted record, parsing its markup."""
        from ..converters.html_to_tree import HtmlToTreeConverter

        return cls(record=record, tree=HtmlToTreeConverter().convert(record.content))

    @property
    def title(self) -> str:
        return self.record.title

    def set_title(self, title: str) -> None:
        self.record.title = title
        self.mark_dirty()

    def replace_content(self, tree: RichTree) -> None:
        """Swap in new content (undo/redo, import)."""
        self.tree = tree

    def replace_record(self, record: DocumentRecord, tree: RichTree) -> None:
        self.record = record
        self.tree = tree

    def mark_dirty(self) -> None:
        self.is_dirty = True

    def mark_clean(self) -> None:
        self.is_dirty = False

    def snapshot(self) -> str:
        """Serialized content, as stored in history and on disk."""
        from ..converters.tree_to_html import TreeToHtmlConverter

        return TreeToHtmlConverter().convert(self.tree)

    def get_text_content(self) -> str:
        return self.tree.get_text_content()

    def get_stats(self) -> DocumentStats:
        return compute_stats(self.tree)

    def get_outline(self) -> List[OutlineEntry]:
        return generate_outline(self.tree)

    def effective_title(self, fallback: str = DEFAULT_TITLE) -> str:
        return self.record.title.strip() or fallback

    def to_record(self, default_title: str = DEFAULT_TITLE) -> DocumentRecord:
        """
        Refresh the record from live state for saving.

        Updates title, content, modification time and the statistics
        metadata; returns the refreshed record.
        """
        self.record.title = self.effective_title(default_title)
        self.record.content = self.snapshot()
        self.record.modified_at = now_ms()
        self.record.metadata = {**self.record.metadata, **self.get_stats().to_metadata()}
        return self.record

    def validate_integrity(self) -> List[str]:
        """Validate document integrity and return any issues."""
        issues = TreeHandler(self.tree).validate_structure()
        if not self.tree.blocks:
            issues.insert(0, "Document has no content blocks")
        return issues
