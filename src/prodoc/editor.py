"""
The editor application context.

``Editor`` is built once per editing session and wires the document store,
editing surface, selection tracker, history, command executor, import,
export and auto-save together. Its public methods are the handlers the
host UI calls; every operation runs behind a boundary that turns ProDoc
errors into notifications so that no failure ends the session.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, TypeVar, Union

from .autosave import AutoSaveScheduler
from .config import ProDocConfig
from .converters.html_to_tree import HtmlToTreeConverter
from .converters.pdf import PageRasterizer, PdfAssembler
from .core.document_model import DocumentRecord, DocumentStats, DocumentStore, OutlineEntry
from .core.rich_tree import Position, RichTree
from .editing.dialogs import LinkDialogState, TableSizePicker
from .editing.executor import CommandExecutor, CommandResult
from .editing.selection import SelectionTracker
from .editing.surface import EditingSurface
from .errors import ProDocError, ValidationError
from .io.exporter import DocumentExporter, ExportArtifact, ExportFormat
from .io.importer import DocumentImporter, ImportResult, read_image_file
from .io.storage import DocumentStorage
from .notifications import NotificationLevel, Notifier
from .version.history import HistoryManager
from .view import ViewState


T = TypeVar("T")

SAVE_STATUS_SAVED = "Saved"
SAVE_STATUS_TYPING = "Typing..."

FORMAT_SHORTCUTS = {"b": "bold", "i": "italic", "u": "underline"}

EXPORT_LABELS = {
    ExportFormat.DOCX: "Word",
    ExportFormat.PDF: "PDF",
    ExportFormat.HTML: "HTML",
    ExportFormat.TXT: "Text",
    ExportFormat.MD: "Markdown",
    ExportFormat.JSON: "JSON",
}


class Editor:
    """A single editing session over one stored document."""

    def __init__(self, config: Optional[ProDocConfig] = None,
                 storage: Optional[DocumentStorage] = None,
                 notifier: Optional[Notifier] = None,
                 rasterizer: Optional[PageRasterizer] = None,
                 assembler: Optional[PdfAssembler] = None):
        self.config = config or ProDocConfig()
        self.storage = storage or DocumentStorage(self.config.storage_dir, self.config.storage_key)
        self.notifier = notifier or Notifier()
        self.logger = logging.getLogger(__name__)

        self.store = DocumentStore(DocumentRecord(title=self.config.default_title))
        self.view = ViewState(self.config.zoom)
        self.surface = EditingSurface(self.store)
        self.selection = SelectionTracker(self.surface)
        self.history = HistoryManager(self.config.history_limit)
        self.executor = CommandExecutor(self.store, self.surface, self.selection, self.history)
        self.importer = DocumentImporter()
        self.exporter = DocumentExporter(self.store, self.view, rasterizer, assembler)
        self.autosave = AutoSaveScheduler(
            save=self.save_document,
            is_dirty=lambda: self.store.is_dirty,
            debounce_seconds=self.config.autosave.debounce_seconds,
            interval_seconds=self.config.autosave.interval_seconds,
        )
        self._parser = HtmlToTreeConverter()

        # Derived state shown around the page
        self.save_status = ""
        self.stats: Optional[DocumentStats] = None
        self.outline: List[OutlineEntry] = []
        self.toolbar_state: Dict[str, bool] = {}

    # Lifecycle

    def start(self) -> None:
        """Restore the stored document and record the initial history entry."""
        self.load_document()
        self.refresh_derived()
        self.history.record(self.store.snapshot())
        self.logger.info(f"Editor started with '{self.store.title}'")

    def start_autosave(self) -> None:
        """Start background saving; call from a running event loop."""
        if self.config.autosave.enabled:
            self.autosave.start()

    def stop(self) -> None:
        self.autosave.stop()

    def load_document(self) -> None:
        """
        Load the stored document, or keep a fresh one.

        An unreadable stored record is reported and replaced by a blank
        document.
        """
        try:
            record = self.storage.load()
        except ProDocError as e:
            self.logger.error(f"Failed to load stored document: {e.message}")
            self.notifier.notify("Failed to restore document", NotificationLevel.ERROR)
            record = None

        if record is not None:
            self.store.replace_record(record, self._parser.convert(record.content))
            self.notifier.notify("Document restored from local storage")
        else:
            self.store.replace_record(DocumentRecord(title=self.config.default_title), RichTree.blank())
        self.store.mark_clean()

    def save_document(self, show_toast: bool = False) -> bool:
        """Persist the document; returns True when saved."""
        return self._run(lambda: self._save(show_toast)) is not None

    def _save(self, show_toast: bool) -> Path:
        path = self.storage.save(self.store.to_record(self.config.default_title))
        self.stats = self.store.get_stats()
        self.save_status = SAVE_STATUS_SAVED
        self.store.mark_clean()
        if show_toast:
            self.notifier.notify("Document saved")
        return path

    # Input events

    def on_input(self) -> None:
        """The document content changed through typing."""
        self.store.mark_dirty()
        self._schedule_autosave()
        self.stats = self.store.get_stats()
        self.outline = self.store.get_outline()

    def on_title_input(self, title: str) -> None:
        self.store.set_title(title)
        self._schedule_autosave()

    def type_text(self, text: str) -> None:
        """Type text at the caret."""
        self.surface.insert_text(text)
        self.on_input()

    def on_keydown(self, key: str, ctrl: bool = False, meta: bool = False, shift: bool = False) -> bool:
        """
        Handle a key press.

        Returns:
            True when the key was consumed
        """
        if self.executor.handle_blockquote_exit(key):
            self.toolbar_state = dict(self.executor.toolbar_state)
            return True

        if not (ctrl or meta):
            return False

        key = key.lower()
        if key == "s":
            self.save_document(show_toast=True)
        elif key == "z":
            if shift:
                self.redo()
            else:
                self.undo()
        elif key == "y":
            self.redo()
        elif key in FORMAT_SHORTCUTS:
            self.format(FORMAT_SHORTCUTS[key])
        else:
            return False
        return True

    def on_keyup(self, ctrl: bool = False, meta: bool = False) -> None:
        if not (ctrl or meta):
            self.history.record(self.store.snapshot())
        self.refresh_toolbar()

    def on_mouseup(self) -> None:
        self.history.record(self.store.snapshot())
        self.refresh_toolbar()

    def on_wheel(self, delta_y: float, ctrl: bool = False) -> bool:
        """Ctrl + wheel zooms the page."""
        if not ctrl:
            return False
        if delta_y < 0:
            self.view.zoom_in()
        else:
            self.view.zoom_out()
        return True

    # Formatting

    def format(self, command: str, value: Optional[str] = None,
               argument: Optional[Union[str, int]] = None) -> Optional[CommandResult]:
        """Run a toolbar formatting command."""
        result = self._run(lambda: self.executor.execute(command, value, argument))
        if result is not None:
            self.toolbar_state = result.toolbar_state
        return result

    # History

    def undo(self) -> bool:
        entry = self.history.undo()
        if entry is None:
            return False
        self._apply_snapshot(entry.content)
        self.notifier.notify("Undone")
        return True

    def redo(self) -> bool:
        entry = self.history.redo()
        if entry is None:
            return False
        self._apply_snapshot(entry.content)
        self.notifier.notify("Redone")
        return True

    def _apply_snapshot(self, content: str) -> None:
        self.store.replace_content(self._parser.convert(content))
        if self.surface.selection is not None:
            self.surface.set_selection(self.surface.selection)
        self._after_history()

    def _after_history(self) -> None:
        self.refresh_derived()
        self.store.mark_dirty()

    # Insertion dialogs

    def open_link_dialog(self) -> LinkDialogState:
        return self.executor.link_dialog_defaults()

    def open_insert_dialog(self) -> None:
        """Remember the selection before a dialog takes focus."""
        self.selection.capture()

    def confirm_link(self, url: str, text: str = "", new_tab: bool = True) -> bool:
        return self._insert(lambda: self.executor.insert_link(url, text, new_tab))

    def confirm_image(self, url: Optional[str] = None, path: Optional[Union[str, Path]] = None,
                      width: int = 400, height: Optional[int] = None, rounded: bool = False,
                      shadow: bool = False, border: bool = False) -> bool:
        def insert() -> CommandResult:
            file_data, mime_type = (None, "image/png")
            if not (url and url.startswith("http")) and path:
                file_data, mime_type = read_image_file(path)
            return self.executor.insert_image(url, file_data, mime_type, width, height,
                                              rounded, shadow, border)

        return self._insert(insert)

    def confirm_video(self, url: str, width: int = 560, height: int = 315) -> bool:
        return self._insert(lambda: self.executor.insert_video(url, width, height))

    def confirm_table(self, picker: TableSizePicker) -> bool:
        return self._insert(lambda: self.executor.insert_table(*picker.confirm()))

    def insert_table(self, rows: int, cols: int) -> bool:
        return self._insert(lambda: self.executor.insert_table(rows, cols))

    def insert_code_block(self) -> bool:
        return self._insert(self.executor.insert_code_block)

    def insert_quote(self) -> bool:
        inserted = self._insert(self.executor.insert_quote)
        if inserted:
            self.notifier.notify("Quote format applied")
        return inserted

    def _insert(self, action: Callable[[], CommandResult]) -> bool:
        result = self._run(action)
        if result is None:
            return False
        self.toolbar_state = result.toolbar_state
        self.stats = self.store.get_stats()
        self.outline = self.store.get_outline()
        if result.message:
            self.notifier.notify(result.message)
        return True

    # Import and export

    def import_file(self, path: Union[str, Path]) -> bool:
        """Import a file from disk, replacing the document."""
        result = self._run(lambda: self.importer.import_file(path, self.store.record))
        return result is not None and self._apply_import(result)

    def import_data(self, filename: str, content: str) -> bool:
        """Import already-read file content, replacing the document."""
        result = self._run(lambda: self.importer.load(filename, content, self.store.record))
        return result is not None and self._apply_import(result)

    def _apply_import(self, result: ImportResult) -> bool:
        self.store.replace_record(result.record, result.tree)
        self.surface.selection = None
        self._after_history()
        self.history.record(self.store.snapshot())
        self.notifier.notify(result.message)
        self.save_document()
        return True

    def export(self, export_format: Union[str, ExportFormat]) -> Optional[ExportArtifact]:
        """Export the document; returns None when export failed."""
        artifact = self._run(lambda: self._export(export_format))
        if artifact is not None:
            self.notifier.notify(f"{EXPORT_LABELS[artifact.format]} document exported")
        return artifact

    def export_to(self, export_format: Union[str, ExportFormat],
                  directory: Optional[Union[str, Path]] = None) -> Optional[Path]:
        """Export the document and write it into a directory."""
        target_dir = Path(directory or self.config.export_dir or Path.cwd())

        def write() -> Path:
            artifact = self._export(export_format)
            path = artifact.write(target_dir)
            self.logger.info(f"Wrote {path}")
            return path

        path = self._run(write)
        if path is not None:
            self.notifier.notify(f"Exported {path.name}")
        return path

    def _export(self, export_format: Union[str, ExportFormat]) -> ExportArtifact:
        if export_format in (ExportFormat.DOCX, ExportFormat.PDF, "docx", "pdf"):
            label = EXPORT_LABELS[ExportFormat(export_format)]
            self.notifier.notify(f"Creating {label} document...", NotificationLevel.INFO)
        return self.exporter.export(export_format)

    # Derived state

    def refresh_derived(self) -> None:
        """Recompute statistics, outline and toolbar state."""
        self.stats = self.store.get_stats()
        self.outline = self.store.get_outline()
        self.refresh_toolbar()

    def refresh_toolbar(self) -> None:
        self.toolbar_state = self.executor.refresh_toolbar_state()

    def focus_heading(self, index: int) -> Position:
        """
        Move the caret to the start of an outline heading.

        Raises:
            ValidationError: if there is no such outline entry
        """
        outline = self.store.get_outline()
        if not 0 <= index < len(outline):
            raise ValidationError(f"No outline entry {index}")
        position = Position(outline[index].path, 0)
        self.surface.select(position)
        return position

    # Operation boundary

    def _schedule_autosave(self) -> None:
        self.save_status = SAVE_STATUS_TYPING
        if self.config.autosave.enabled:
            self.autosave.schedule()

    def _run(self, action: Callable[[], T]) -> Optional[T]:
        """Run an operation, turning ProDoc errors into notifications."""
        try:
            return action()
        except ValidationError as e:
            self.logger.warning(f"Rejected: {e.message}")
            self.notifier.notify(e.message, NotificationLevel.WARNING)
        except ProDocError as e:
            self.logger.error(f"{type(e).__name__}: {e.message}")
            self.notifier.notify(e.message, NotificationLevel.ERROR)
        return None
