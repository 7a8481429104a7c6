"""
Command execution engine for formatting and insertion commands.

Every command follows the same protocol: bring back the user's selection,
mutate the document through the editing surface, refresh the toolbar state,
mark the document dirty and record a history snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from ..core.document_model import DocumentStore
from ..core.rich_tree import Span, Text, inline_children, inline_text
from ..core.tree_handler import TreeHandler
from ..errors import ValidationError
from ..version.history import HistoryManager
from .dialogs import MAX_TABLE_SIZE, LinkDialogState
from .media import (
    LINK_PATTERN, build_code_block, build_image, build_link, build_table, build_video, to_data_url,
)
from .selection import SelectionTracker
from .surface import EditingSurface


TOOLBAR_COMMANDS = (
    "bold", "italic", "underline", "strikethrough",
    "insertOrderedList", "insertUnorderedList",
    "justifyLeft", "justifyCenter", "justifyRight", "justifyFull",
)

# Ordinal the browser-style fontSize command marks text with before it is
# rewritten to an explicit pixel size.
FONT_SIZE_MARKER = "7"


@dataclass
class CommandResult:
    """Outcome of an executed command."""

    command: str
    success: bool = True
    message: str = ""
    document_modified: bool = True
    toolbar_state: Dict[str, bool] = field(default_factory=dict)


class CommandExecutor:
    """
    Executes editing commands against the document store.

    Insertion commands restore the tracked selection before touching the
    document and record history afterwards; input is validated before any
    mutation so a rejected command leaves the document unchanged.
    """

    def __init__(self, store: DocumentStore, surface: EditingSurface,
                 selection: SelectionTracker, history: HistoryManager):
        self.store = store
        self.surface = surface
        self.selection = selection
        self.history = history
        self.logger = logging.getLogger(__name__)

        self.toolbar_state: Dict[str, bool] = {}

    def execute(self, command: str, value: Optional[str] = None,
                argument: Optional[Union[str, int]] = None) -> CommandResult:
        """
        Apply a named formatting command to the current selection.

        Args:
            command: Command name (bold, justifyCenter, formatBlock, ...)
            value: Command value (block tag, colour, font name, size ordinal)
            argument: Pixel size used to rewrite ordinal font sizes

        Returns:
            Command result with the refreshed toolbar state
        """
        pixels = self._pixel_size(argument) if command == "fontSize" and argument else None

        self.surface.focus()
        self.logger.info(f"Executing command {command} with value {value!r}")
        self.surface.apply_command(command, value)

        if pixels:
            self._apply_pixel_font_size(pixels)

        return self._finish(command)

    @staticmethod
    def _pixel_size(pixels: Union[str, int]) -> str:
        size = str(pixels).strip().lower().removesuffix("px")
        if not size.isdigit():
            raise ValidationError(f"Invalid font size: {pixels}")
        return size

    def _apply_pixel_font_size(self, size: str) -> None:
        """Turn every ordinal size marker into an explicit pixel font size."""
        def rewrite(inlines) -> None:
            for node in inlines:
                if isinstance(node, Span) and node.size == FONT_SIZE_MARKER:
                    node.size = None
                    node.css["font-size"] = f"{size}px"
                children = inline_children(node)
                if children is not None:
                    rewrite(children)

        for _, block in TreeHandler(self.store.tree).iter_leaves():
            children = inline_children(block)
            if children is not None:
                rewrite(children)

    def _finish(self, command: str, message: str = "") -> CommandResult:
        self.toolbar_state = self.refresh_toolbar_state()
        self.store.mark_dirty()
        self.history.record(self.store.snapshot())
        return CommandResult(command=command, message=message, toolbar_state=dict(self.toolbar_state))

    def refresh_toolbar_state(self) -> Dict[str, bool]:
        """Active flags for the toolbar buttons at the current selection."""
        state = {command: self.surface.query_command_state(command) for command in TOOLBAR_COMMANDS}
        state["blockquote"] = self.surface.in_blockquote()
        self.toolbar_state = state
        return state

    # Links

    def link_dialog_defaults(self) -> LinkDialogState:
        """Capture the selection and compute the link dialog's initial values."""
        self.selection.capture()
        link = self.surface.enclosing_link()
        if link is not None:
            return LinkDialogState(
                text=inline_text(link.children),
                url=link.href,
                new_tab=link.target == "_blank",
                editing=True,
            )
        return LinkDialogState(text=self.surface.selected_text())

    def insert_link(self, url: str, text: str = "", new_tab: bool = True) -> CommandResult:
        """
        Insert a link at the selection, or update the link around it.

        Raises:
            ValidationError: if the URL is not an http(s) or ftp URL
        """
        self.selection.restore()
        url = (url or "").strip()
        if not LINK_PATTERN.match(url):
            raise ValidationError("Please enter a valid link URL")
        text = text or url

        link = self.surface.enclosing_link()
        if link is not None:
            link.href = url
            link.children = [Text(text)]
            link.target = "_blank" if new_tab else None
            message = "Link updated"
        else:
            self.surface.insert_markup(build_link(url, text, new_tab))
            message = "Link inserted"

        return self._finish("insertLink", message)

    # Media

    def insert_image(self, url: Optional[str] = None, file_data: Optional[bytes] = None,
                     mime_type: str = "image/png", width: int = 400, height: Optional[int] = None,
                     rounded: bool = False, shadow: bool = False, border: bool = False) -> CommandResult:
        """
        Insert a centred image from a URL or from local file content.

        Raises:
            ValidationError: if neither an http URL nor file content is given
        """
        if url and url.startswith("http"):
            src = url
        elif file_data:
            src = to_data_url(file_data, mime_type)
        else:
            raise ValidationError("Please choose an image file or enter a valid image URL")

        self.selection.restore()
        self.surface.insert_markup(build_image(src, width, height, rounded, shadow, border))
        return self._finish("insertImage", "Image inserted")

    def insert_video(self, url: str, width: int = 560, height: int = 315) -> CommandResult:
        """
        Insert a video player for a YouTube, Bilibili or direct video link.

        Raises:
            ValidationError: for non-http or unsupported links
        """
        if not url or not url.startswith("http"):
            raise ValidationError("Please enter a valid video link")
        markup = build_video(url, width, height)

        self.selection.restore()
        self.surface.insert_markup(markup)
        return self._finish("insertVideo", "Video inserted")

    def insert_table(self, rows: int, cols: int) -> CommandResult:
        """Insert a table with a header row, followed by an empty paragraph."""
        if not (1 <= rows <= MAX_TABLE_SIZE and 1 <= cols <= MAX_TABLE_SIZE):
            raise ValidationError(f"Table size must be between 1 and {MAX_TABLE_SIZE}")

        self.selection.restore()
        self.surface.insert_markup(build_table(rows, cols))
        return self._finish("insertTable", "Table inserted")

    def insert_code_block(self) -> CommandResult:
        self.selection.restore()
        self.surface.insert_markup(build_code_block())
        return self._finish("insertCodeBlock", "Code block inserted")

    def insert_quote(self) -> CommandResult:
        return self.execute("formatBlock", "blockquote")

    # Keyboard

    def handle_blockquote_exit(self, key: str) -> bool:
        """
        Leave a quote with Enter on an empty line or Backspace at line start.

        Returns:
            True when the key was consumed
        """
        if key not in ("Enter", "Backspace"):
            return False
        current = self.surface.selection
        if current is None or not current.collapsed or not self.surface.in_blockquote():
            return False

        block = self.surface.current_block()
        if key == "Enter" and TreeHandler.leaf_text(block).strip():
            return False
        if key == "Backspace" and current.focus.offset != 0:
            return False

        self.logger.debug(f"Leaving blockquote on {key}")
        self.surface.apply_command("outdent")
        self.store.mark_dirty()
        self.refresh_toolbar_state()
        return True
