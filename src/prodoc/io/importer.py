"""
Document import from JSON records and plain-text files.

JSON files must be a document record with a title and content. Text,
Markdown and HTML files are all read as plain text: blank lines start a new
paragraph and single newlines become line breaks.
"""

from __future__ import annotations

import json
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import pydantic

from ..converters.html_to_tree import HtmlToTreeConverter
from ..converters.tree_to_html import TreeToHtmlConverter
from ..core.document_model import DocumentRecord
from ..core.rich_tree import RichTree
from ..errors import ParseError, ValidationError


logger = logging.getLogger(__name__)

IMPORT_EXTENSIONS = (".json", ".txt", ".md", ".html")
IMPORTED_TITLE = "Imported Document"


@dataclass
class ImportResult:
    """A parsed import, ready to replace the live document."""

    title: str
    tree: RichTree
    record: DocumentRecord
    message: str


def title_from_filename(filename: str) -> str:
    """File name without its last extension."""
    stem = Path(filename).name.rpartition(".")[0]
    return stem or IMPORTED_TITLE


class DocumentImporter:
    """Parses imported files without touching the live document."""

    def __init__(self):
        self.html_parser = HtmlToTreeConverter()

    def load(self, filename: str, content: str, current: Optional[DocumentRecord] = None) -> ImportResult:
        """
        Parse file content into a document.

        Args:
            filename: Name of the imported file, used for type and title
            content: Decoded file content
            current: Live document record that JSON fields are merged onto

        Returns:
            The parsed import

        Raises:
            ValidationError: for unsupported file types or invalid records
            ParseError: for malformed JSON
        """
        extension = Path(filename).suffix.lower()
        if extension not in IMPORT_EXTENSIONS:
            raise ValidationError(f"Unsupported file type: {extension or filename}")

        current = current or DocumentRecord()
        if extension == ".json":
            return self._load_json(content, current)
        return self._load_text(filename, content, current)

    def import_file(self, path: Union[str, Path], current: Optional[DocumentRecord] = None) -> ImportResult:
        """Read a file from disk and parse it."""
        path = Path(path)
        if path.suffix.lower() not in IMPORT_EXTENSIONS:
            raise ValidationError(f"Unsupported file type: {path.suffix or path.name}")

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Could not read {path.name}: {e}") from e

        logger.info(f"Importing {path}")
        return self.load(path.name, content, current)

    def _load_json(self, content: str, current: DocumentRecord) -> ImportResult:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Malformed JSON: {e}") from e

        if not isinstance(data, dict) or not data.get("title") or not data.get("content"):
            raise ValidationError("Invalid ProDoc JSON format: title and content are required")

        try:
            record = DocumentRecord.from_wire({**current.to_wire(), **data})
        except pydantic.ValidationError as e:
            raise ParseError(f"Invalid document record: {e}") from e

        tree = self.html_parser.convert(record.content)
        return ImportResult(title=record.title, tree=tree, record=record,
                            message="JSON document imported")

    def _load_text(self, filename: str, content: str, current: DocumentRecord) -> ImportResult:
        title = title_from_filename(filename)
        tree = RichTree.from_text(content)
        record = current.model_copy(update={
            "title": title,
            "content": TreeToHtmlConverter().convert(tree),
        })
        return ImportResult(title=title, tree=tree, record=record, message=f"Imported {filename}")


def read_image_file(path: Union[str, Path]) -> Tuple[bytes, str]:
    """
    Read a local image for embedding.

    Returns:
        File bytes and the guessed mime type

    Raises:
        ValidationError: if the path is not an image file
        ParseError: if the file cannot be read
    """
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValidationError(f"Not an image file: {path.name}")

    try:
        return path.read_bytes(), mime_type
    except OSError as e:
        raise ParseError(f"Could not read {path.name}: {e}") from e
