"""Tests for keyed document storage and the editor's save/restore cycle."""

import json

import pytest

from prodoc.core.document_model import DocumentRecord
from prodoc.editor import SAVE_STATUS_SAVED, Editor
from prodoc.errors import ExternalServiceFailure, ParseError
from prodoc.io.storage import DocumentStorage
from prodoc.notifications import NotificationLevel


class TestDocumentStorage:
    """The JSON record on disk."""

    def test_round_trip(self, storage):
        record = DocumentRecord(title="Stored", content="<p>x</p>", created_at=1, modified_at=2,
                                metadata={"wordCount": 1})

        path = storage.save(record)

        assert path == storage.path
        assert storage.load() == record

    def test_wire_format_on_disk(self, storage):
        storage.save(DocumentRecord(title="Ünïcode", content="<p>x</p>"))

        data = json.loads(storage.path.read_text(encoding="utf-8"))
        assert data["title"] == "Ünïcode"
        assert {"created", "modified", "version", "metadata"} <= set(data)

    def test_missing_record(self, storage):
        assert not storage.exists()
        assert storage.load() is None

    def test_corrupt_record(self, storage):
        storage.directory.mkdir(parents=True)
        storage.path.write_text("{broken", encoding="utf-8")

        with pytest.raises(ParseError):
            storage.load()

    def test_invalid_record_fields(self, storage):
        storage.directory.mkdir(parents=True)
        storage.path.write_text(json.dumps({"title": ["not", "text"]}), encoding="utf-8")

        with pytest.raises(ParseError):
            storage.load()

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(ExternalServiceFailure):
            DocumentStorage(blocker / "storage").save(DocumentRecord())

    def test_key_selects_file(self, tmp_path):
        assert DocumentStorage(tmp_path, "custom").path == tmp_path / "custom.json"


class TestEditorPersistence:
    """Restoring on start and saving."""

    def test_blank_start(self, editor, notifier):
        assert editor.store.snapshot() == "<p><br></p>"
        assert editor.store.title == editor.config.default_title
        assert not editor.store.is_dirty
        assert notifier.notifications == []

    def test_restores_stored_document(self, config, storage, notifier):
        storage.save(DocumentRecord(title="Kept", content="<h1>Hello</h1>"))

        session = Editor(config, storage=storage, notifier=notifier)
        session.start()

        assert session.store.title == "Kept"
        assert session.store.snapshot() == "<h1>Hello</h1>"
        assert notifier.latest.message == "Document restored from local storage"
        assert [entry.content for entry in session.history.entries] == ["<h1>Hello</h1>"]

    def test_corrupt_storage_starts_blank(self, config, storage, notifier):
        storage.directory.mkdir(parents=True)
        storage.path.write_text("not json", encoding="utf-8")

        session = Editor(config, storage=storage, notifier=notifier)
        session.start()

        assert session.store.snapshot() == "<p><br></p>"
        assert notifier.latest.level == NotificationLevel.ERROR
        assert notifier.latest.message == "Failed to restore document"

    def test_save_writes_content_and_metadata(self, editor, storage):
        editor.type_text("Hello world")

        assert editor.save_document() is True

        record = storage.load()
        assert record.content == "<p>Hello world</p>"
        assert record.metadata == {"wordCount": 2, "charCount": 11, "paraCount": 1}
        assert editor.save_status == SAVE_STATUS_SAVED
        assert not editor.store.is_dirty

    def test_blank_title_saved_as_default(self, editor, storage):
        editor.on_title_input("   ")
        editor.save_document()

        assert storage.load().title == editor.config.default_title

    def test_save_toast(self, editor, notifier):
        editor.save_document(show_toast=True)
        assert notifier.latest.message == "Document saved"

    def test_save_failure_is_reported(self, config, notifier, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file")
        session = Editor(config, storage=DocumentStorage(blocker / "storage"), notifier=notifier)
        session.start()
        session.type_text("unsaved")

        assert session.save_document() is False

        assert notifier.latest.level == NotificationLevel.ERROR
        assert session.store.is_dirty
