"""
Converter from the rich-text tree to a DOCX word-processor document.

Builds the document directly with python-docx:
1. A title paragraph and an empty spacer paragraph
2. One paragraph per top-level block, styled by block kind
3. Runs carrying bold/italic/underline/strike inherited from any ancestor
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import List, Optional

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt
from docx.text.paragraph import Paragraph as DocxParagraph

from ..core.rich_tree import (
    Block, BlockQuote, CodeBlock, Heading, Inline, InlineStyle, LineBreak, Link, ListBlock,
    MediaEmbed, Paragraph, RawBlock, RawInline, RichTree, Span, Styled, Table, Text,
)
from ..core.tree_handler import TreeHandler
from ..errors import ExternalServiceFailure


DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALIGNMENT_MAP = {
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}

QUOTE_STYLE = "Intense Quote"
CODE_FONT = "Courier New"


@dataclass
class DocxRun:
    """A formatted piece of text, or a line break, for one paragraph."""

    text: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    line_break: bool = False


class TreeToDocxConverter:
    """
    Converts a RichTree to DOCX bytes.

    Images, media embeds and raw objects have no text runs and are dropped
    from the document; raw markup contributes its plain text.
    """

    def convert(self, tree: RichTree, title: str) -> bytes:
        """
        Build the DOCX document and serialize it.

        Args:
            tree: Document content
            title: Document title, used for the title paragraph and properties

        Returns:
            The DOCX file content
        """
        try:
            doc = self.build(tree, title)
            buffer = io.BytesIO()
            doc.save(buffer)
            return buffer.getvalue()
        except (ValueError, KeyError, OSError) as e:
            raise ExternalServiceFailure(f"Failed to generate Word document: {e}") from e

    def build(self, tree: RichTree, title: str) -> DocxDocument:
        doc = Document()
        doc.core_properties.title = title

        doc.add_paragraph(title, style="Title")
        doc.add_paragraph("")

        for block in tree.blocks:
            self._add_block(doc, block)

        return doc

    def _add_block(self, doc: DocxDocument, block: Block) -> None:
        if isinstance(block, Heading):
            self._add_runs_paragraph(doc, block.children, style=f"Heading {block.level}", align=block.align)

        elif isinstance(block, Paragraph):
            self._add_runs_paragraph(doc, block.children, align=block.align)

        elif isinstance(block, ListBlock):
            style = "List Number" if block.ordered else "List Bullet"
            for item in block.items:
                self._add_runs_paragraph(doc, item.children, style=style)

        elif isinstance(block, BlockQuote):
            runs = self._collect_quote_runs(block.children)
            if runs:
                self._write_paragraph(doc, runs, style=QUOTE_STYLE)

        elif isinstance(block, CodeBlock):
            run = doc.add_paragraph().add_run()
            run.font.name = CODE_FONT
            run.font.size = Pt(10)
            for index, line in enumerate(block.text.split("\n")):
                if index:
                    run.add_break()
                run.add_text(line)

        elif isinstance(block, Table):
            self._add_table(doc, block)

        elif isinstance(block, RawBlock):
            if block.text.strip():
                doc.add_paragraph(block.text)

        elif isinstance(block, MediaEmbed):
            # Players have no document representation
            pass

    def _add_runs_paragraph(self, doc: DocxDocument, inlines: List[Inline],
                            style: Optional[str] = None, align: Optional[str] = None) -> None:
        runs = self._collect_runs(inlines)
        if not runs and inlines:
            # Only images or objects: nothing to write
            return
        self._write_paragraph(doc, runs, style=style, align=align)

    def _write_paragraph(self, doc: DocxDocument, runs: List[DocxRun],
                         style: Optional[str] = None, align: Optional[str] = None) -> DocxParagraph:
        paragraph = doc.add_paragraph(style=style) if style else doc.add_paragraph()
        self._fill_paragraph(paragraph, runs)
        if align in ALIGNMENT_MAP:
            paragraph.alignment = ALIGNMENT_MAP[align]
        return paragraph

    @staticmethod
    def _fill_paragraph(paragraph: DocxParagraph, runs: List[DocxRun]) -> None:
        last = None
        for item in runs:
            if item.line_break:
                (last or paragraph.add_run()).add_break()
                continue
            last = paragraph.add_run(item.text)
            if item.bold:
                last.bold = True
            if item.italic:
                last.italic = True
            if item.underline:
                last.underline = True
            if item.strike:
                last.font.strike = True

    def _collect_runs(self, inlines: List[Inline], bold: bool = False, italic: bool = False,
                      underline: bool = False, strike: bool = False) -> List[DocxRun]:
        """Walk inline content, carrying formatting from ancestors."""
        runs: List[DocxRun] = []
        for node in inlines:
            if isinstance(node, Text):
                if node.text:
                    runs.append(DocxRun(node.text, bold, italic, underline, strike))
            elif isinstance(node, LineBreak):
                runs.append(DocxRun(line_break=True))
            elif isinstance(node, RawInline):
                if node.text:
                    runs.append(DocxRun(node.text, bold, italic, underline, strike))
            elif isinstance(node, Styled):
                runs.extend(self._collect_runs(
                    node.children,
                    bold=bold or node.style == InlineStyle.BOLD,
                    italic=italic or node.style == InlineStyle.ITALIC,
                    underline=underline or node.style == InlineStyle.UNDERLINE,
                    strike=strike or node.style == InlineStyle.STRIKE,
                ))
            elif isinstance(node, (Span, Link)):
                runs.extend(self._collect_runs(node.children, bold, italic, underline, strike))
        return runs

    def _collect_quote_runs(self, blocks: List[Block]) -> List[DocxRun]:
        """Runs of every text block inside a quote, one line per block."""
        runs: List[DocxRun] = []
        for _, leaf in TreeHandler(RichTree(blocks=blocks)).iter_leaves():
            if isinstance(leaf, CodeBlock):
                leaf_runs = [DocxRun(leaf.text)] if leaf.text else []
            else:
                leaf_runs = self._collect_runs(leaf.children)
            if runs:
                runs.append(DocxRun(line_break=True))
            runs.extend(leaf_runs)
        return runs

    def _add_table(self, doc: DocxDocument, table: Table) -> None:
        if not table.rows:
            return
        columns = max(len(row.cells) for row in table.rows)
        if columns == 0:
            return
        docx_table = doc.add_table(rows=len(table.rows), cols=columns)
        docx_table.style = "Table Grid"
        for row_index, row in enumerate(table.rows):
            for col_index, cell in enumerate(row.cells):
                target = docx_table.cell(row_index, col_index)
                runs: List[DocxRun] = []
                for _, leaf in TreeHandler(RichTree(blocks=cell.children)).iter_leaves():
                    if runs:
                        runs.append(DocxRun(line_break=True))
                    if isinstance(leaf, CodeBlock):
                        runs.append(DocxRun(leaf.text))
                    else:
                        runs.extend(self._collect_runs(leaf.children, bold=cell.header))
                self._fill_paragraph(target.paragraphs[0], runs)
