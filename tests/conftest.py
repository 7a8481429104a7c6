"""Shared pytest fixtures for ProDoc tests."""

from pathlib import Path
from typing import Callable

import pytest

from prodoc.config import AutoSaveConfig, ProDocConfig
from prodoc.converters.html_to_tree import HtmlToTreeConverter
from prodoc.core.document_model import DocumentRecord, DocumentStore
from prodoc.editing.executor import CommandExecutor
from prodoc.editing.selection import SelectionTracker
from prodoc.editing.surface import EditingSurface
from prodoc.editor import Editor
from prodoc.io.storage import DocumentStorage
from prodoc.notifications import Notifier
from prodoc.version.history import HistoryManager


@pytest.fixture
def make_store() -> Callable[[str], DocumentStore]:
    """Build a document store from editor markup."""

    def build(html: str = "", title: str = "Test Document") -> DocumentStore:
        tree = HtmlToTreeConverter().convert(html)
        return DocumentStore(DocumentRecord(title=title, content=html), tree)

    return build


@pytest.fixture
def make_executor(make_store):
    """Build a command executor, with its collaborators, over editor markup."""

    def build(html: str = "") -> CommandExecutor:
        store = make_store(html)
        surface = EditingSurface(store)
        return CommandExecutor(store, surface, SelectionTracker(surface), HistoryManager())

    return build


@pytest.fixture
def config(tmp_path: Path) -> ProDocConfig:
    """Configuration storing under a temporary directory, without auto-save."""
    return ProDocConfig(
        storage_dir=tmp_path / "storage",
        autosave=AutoSaveConfig(enabled=False),
        export_dir=tmp_path / "exports",
    )


@pytest.fixture
def storage(config: ProDocConfig) -> DocumentStorage:
    return DocumentStorage(config.storage_dir, config.storage_key)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def editor(config, storage, notifier) -> Editor:
    """A started editor over empty storage."""
    session = Editor(config, storage=storage, notifier=notifier)
    session.start()
    return session
