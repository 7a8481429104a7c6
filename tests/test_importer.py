"""Tests for document import."""

import json

import pytest

from prodoc.core.document_model import DocumentRecord
from prodoc.core.rich_tree import LineBreak, Paragraph, Text
from prodoc.errors import ParseError, ValidationError
from prodoc.io.importer import DocumentImporter, read_image_file, title_from_filename


@pytest.fixture
def importer():
    return DocumentImporter()


class TestTitles:
    """Titles derived from file names."""

    @pytest.mark.parametrize("filename, title", [
        ("notes.txt", "notes"),
        ("archive.tar.md", "archive.tar"),
        ("/tmp/dir/report.html", "report"),
        ("README", "Imported Document"),
    ])
    def test_title_from_filename(self, filename, title):
        assert title_from_filename(filename) == title


class TestTextImport:
    """Plain text, Markdown and HTML files."""

    def test_paragraphs_and_line_breaks(self, importer):
        result = importer.load("notes.txt", "First line\nsecond\n\nNext paragraph")

        assert result.title == "notes"
        assert result.tree.blocks == [
            Paragraph([Text("First line"), LineBreak(), Text("second")]),
            Paragraph([Text("Next paragraph")]),
        ]
        assert result.record.content == "<p>First line<br>second</p><p>Next paragraph</p>"
        assert result.message == "Imported notes.txt"

    def test_windows_line_endings(self, importer):
        result = importer.load("notes.txt", "a\r\n\r\nb")
        assert len(result.tree.blocks) == 2

    def test_html_file_is_read_as_text(self, importer):
        result = importer.load("page.html", "<b>not bold</b>")

        assert result.tree.blocks == [Paragraph([Text("<b>not bold</b>")])]
        assert result.record.content == "<p>&lt;b&gt;not bold&lt;/b&gt;</p>"

    def test_keeps_current_record_fields(self, importer):
        current = DocumentRecord(title="Old", created_at=123, metadata={"wordCount": 9})

        result = importer.load("new.md", "text", current)

        assert result.record.created_at == 123
        assert result.record.title == "new"
        assert current.title == "Old"

    def test_unsupported_extension(self, importer):
        with pytest.raises(ValidationError):
            importer.load("image.png", "data")


class TestJsonImport:
    """ProDoc JSON records."""

    def test_record_is_merged(self, importer):
        payload = json.dumps({"title": "Imported", "content": "<h1>Hi</h1>", "created": 42})

        result = importer.load("doc.json", payload, DocumentRecord(title="Old", version="0.9"))

        assert result.title == "Imported"
        assert result.record.created_at == 42
        assert result.record.version == "0.9"
        assert result.message == "JSON document imported"
        assert result.tree.blocks[0].level == 1

    @pytest.mark.parametrize("payload", [
        {"title": "Only title"},
        {"content": "<p>x</p>"},
        {"title": "", "content": "<p>x</p>"},
        ["not", "an", "object"],
    ])
    def test_missing_fields_are_rejected(self, importer, payload):
        with pytest.raises(ValidationError, match="title and content are required"):
            importer.load("doc.json", json.dumps(payload))

    def test_malformed_json(self, importer):
        with pytest.raises(ParseError):
            importer.load("doc.json", "{not json")

    def test_wrong_field_types(self, importer):
        with pytest.raises(ParseError):
            importer.load("doc.json", json.dumps({"title": "T", "content": "c", "created": "yesterday"}))


class TestFiles:
    """Reading from disk."""

    def test_import_file(self, importer, tmp_path):
        path = tmp_path / "draft.txt"
        path.write_text("Hello", encoding="utf-8")

        result = importer.import_file(path)

        assert result.title == "draft"
        assert result.record.content == "<p>Hello</p>"

    def test_missing_file(self, importer, tmp_path):
        with pytest.raises(ParseError):
            importer.import_file(tmp_path / "missing.txt")

    def test_read_image_file(self, tmp_path):
        path = tmp_path / "pic.png"
        path.write_bytes(b"\x89PNG")

        assert read_image_file(path) == (b"\x89PNG", "image/png")

    def test_read_non_image_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("x")
        with pytest.raises(ValidationError):
            read_image_file(path)
