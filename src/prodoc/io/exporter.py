"""
Document export to files.

Each export produces an ``ExportArtifact`` (payload, file name and mime
type); writing it to disk is left to the caller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..converters.html_page import render_page
from ..converters.json_export import build_envelope, dumps_envelope
from ..converters.pdf import PageRasterizer, PdfAssembler, PdfExporter
from ..converters.plain_text import to_plain_text
from ..converters.tree_to_docx import DOCX_MIME_TYPE, TreeToDocxConverter
from ..converters.tree_to_markdown import TreeToMarkdownConverter
from ..core.document_model import DocumentStore
from ..errors import ExternalServiceFailure, ValidationError
from ..view import ViewState


logger = logging.getLogger(__name__)

EXPORT_FALLBACK_TITLE = "Document"


class ExportFormat(Enum):
    """Supported export formats, by file extension."""
    DOCX = "docx"
    PDF = "pdf"
    HTML = "html"
    TXT = "txt"
    MD = "md"
    JSON = "json"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]


_MIME_TYPES = {
    ExportFormat.DOCX: DOCX_MIME_TYPE,
    ExportFormat.PDF: "application/pdf",
    ExportFormat.HTML: "text/html",
    ExportFormat.TXT: "text/plain;charset=utf-8",
    ExportFormat.MD: "text/markdown;charset=utf-8",
    ExportFormat.JSON: "application/json;charset=utf-8",
}


@dataclass
class ExportArtifact:
    """An exported document ready to be written or downloaded."""

    format: ExportFormat
    payload: Union[str, bytes]
    filename: str
    mime_type: str

    def write(self, directory: Union[str, Path]) -> Path:
        """Write the payload into a directory under its file name."""
        directory = Path(directory)
        target = directory / self.filename
        try:
            directory.mkdir(parents=True, exist_ok=True)
            if isinstance(self.payload, bytes):
                target.write_bytes(self.payload)
            else:
                target.write_text(self.payload, encoding="utf-8")
        except OSError as e:
            raise ExternalServiceFailure(f"Could not write {target}: {e}") from e
        return target


def export_filename(title: str, export_format: ExportFormat) -> str:
    """``<title>.<ext>``, with path separators replaced."""
    safe_title = re.sub(r"[\\/]", "_", title.strip()) or EXPORT_FALLBACK_TITLE
    return f"{safe_title}.{export_format.extension}"


class DocumentExporter:
    """Renders the live document in each export format."""

    def __init__(self, store: DocumentStore, view: Optional[ViewState] = None,
                 rasterizer: Optional[PageRasterizer] = None,
                 assembler: Optional[PdfAssembler] = None):
        self.store = store
        self.view = view or ViewState()
        self.pdf = PdfExporter(self.view, rasterizer, assembler)
        self.docx = TreeToDocxConverter()
        self.markdown = TreeToMarkdownConverter()

    def export(self, export_format: Union[str, ExportFormat]) -> ExportArtifact:
        """
        Export the document.

        Args:
            export_format: Format or file extension (docx, pdf, html, txt, md, json)

        Returns:
            The exported artifact

        Raises:
            ValidationError: for unknown formats
            ExternalServiceFailure: if DOCX or PDF rendering fails
        """
        try:
            export_format = ExportFormat(export_format)
        except ValueError:
            raise ValidationError(f"Export format not supported: {export_format}") from None

        title = self.store.effective_title(EXPORT_FALLBACK_TITLE)
        logger.info(f"Exporting '{title}' as {export_format.value}")

        payload = self._render(export_format, title)
        return ExportArtifact(
            format=export_format,
            payload=payload,
            filename=export_filename(title, export_format),
            mime_type=export_format.mime_type,
        )

    def _render(self, export_format: ExportFormat, title: str) -> Union[str, bytes]:
        tree = self.store.tree

        if export_format is ExportFormat.TXT:
            return to_plain_text(tree)

        if export_format is ExportFormat.MD:
            return self.markdown.convert(tree).strip()

        if export_format is ExportFormat.HTML:
            return render_page(self.store.snapshot(), title)

        if export_format is ExportFormat.JSON:
            record = self.store.record.model_copy(update={"title": title, "content": self.store.snapshot()})
            return dumps_envelope(build_envelope(record, to_plain_text(tree)))

        if export_format is ExportFormat.DOCX:
            return self.docx.convert(tree, title)

        return self.pdf.export(self.store.snapshot())
