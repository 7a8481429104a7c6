"""Tests for the command executor: formatting, insertions and quote exit."""

import pytest

from prodoc.core.rich_tree import CodeBlock, Image, MediaEmbed, Paragraph, Position, Table
from prodoc.editing.dialogs import TableSizePicker
from prodoc.editing.media import CODE_PLACEHOLDER
from prodoc.errors import ValidationError


class TestExecute:
    """Formatting commands through the executor."""

    def test_execute_marks_dirty_and_records_history(self, make_executor):
        executor = make_executor("<p>Hello world</p>")
        executor.surface.select(Position((0,), 0), Position((0,), 5))

        result = executor.execute("bold")

        assert result.success
        assert result.toolbar_state["bold"] is True
        assert executor.store.is_dirty
        assert [entry.content for entry in executor.history.entries] == [
            "<p><strong>Hello</strong> world</p>"
        ]

    def test_font_size_is_rewritten_to_pixels(self, make_executor):
        executor = make_executor("<p>Hi</p>")
        executor.surface.select_all()

        executor.execute("fontSize", "7", "24")

        assert executor.store.snapshot() == '<p><span style="font-size: 24px;">Hi</span></p>'

    def test_invalid_pixel_size_leaves_document_unchanged(self, make_executor):
        executor = make_executor("<p>Hi</p>")
        executor.surface.select_all()

        with pytest.raises(ValidationError):
            executor.execute("fontSize", "7", "huge")

        assert executor.store.snapshot() == "<p>Hi</p>"
        assert executor.history.entries == []

    def test_toolbar_state_reports_blockquote(self, make_executor):
        executor = make_executor("<blockquote><p>Quoted</p></blockquote>")
        executor.surface.select(Position((0, 0), 2))

        state = executor.refresh_toolbar_state()

        assert state["blockquote"] is True
        assert state["justifyLeft"] is True
        assert state["bold"] is False


class TestLinks:
    """Link insertion and editing."""

    def test_javascript_url_is_rejected(self, make_executor):
        executor = make_executor("<p>Hello</p>")

        with pytest.raises(ValidationError):
            executor.insert_link("javascript:alert(1)")

        assert executor.store.snapshot() == "<p>Hello</p>"
        assert executor.history.entries == []

    def test_link_inserted_with_exact_href(self, make_executor):
        executor = make_executor("")

        result = executor.insert_link("https://example.com")

        assert result.message == "Link inserted"
        assert executor.store.snapshot() == (
            '<p><a href="https://example.com" target="_blank">https://example.com</a></p>'
        )

    def test_link_without_new_tab(self, make_executor):
        executor = make_executor("")

        executor.insert_link("ftp://files.example.com", "Files", new_tab=False)

        assert executor.store.snapshot() == '<p><a href="ftp://files.example.com">Files</a></p>'

    def test_existing_link_is_edited_in_place(self, make_executor):
        executor = make_executor('<p><a href="https://old.example.com" target="_blank">Old</a></p>')
        executor.surface.select(Position((0,), 2))

        defaults = executor.link_dialog_defaults()
        assert defaults.editing
        assert defaults.text == "Old"
        assert defaults.url == "https://old.example.com"
        assert defaults.new_tab is True

        executor.surface.blur()
        result = executor.insert_link("https://new.example.com", "New", new_tab=False)

        assert result.message == "Link updated"
        assert executor.store.snapshot() == '<p><a href="https://new.example.com">New</a></p>'

    def test_dialog_defaults_use_selected_text(self, make_executor):
        executor = make_executor("<p>Read the docs</p>")
        executor.surface.select(Position((0,), 9), Position((0,), 13))

        defaults = executor.link_dialog_defaults()

        assert defaults.text == "docs"
        assert defaults.url == "https://"
        assert not defaults.editing


class TestMedia:
    """Images, videos, tables and code blocks."""

    def test_image_from_url(self, make_executor):
        executor = make_executor("")

        executor.insert_image(url="https://example.com/a.png", width=300, rounded=True, shadow=True)

        paragraph = executor.store.tree.blocks[0]
        assert isinstance(paragraph, Paragraph)
        assert paragraph.align == "center"
        image = paragraph.children[0]
        assert isinstance(image, Image)
        assert image.src == "https://example.com/a.png"
        assert image.style == "max-width: 100%; width: 300px; height: auto; border-radius: var(--radius-lg);"
        assert image.classes == "image-shadow"

    def test_image_from_file_content(self, make_executor):
        executor = make_executor("")

        executor.insert_image(file_data=b"\x89PNG", mime_type="image/png")

        image = executor.store.tree.blocks[0].children[0]
        assert image.src.startswith("data:image/png;base64,")

    def test_image_requires_url_or_file(self, make_executor):
        executor = make_executor("")
        with pytest.raises(ValidationError):
            executor.insert_image(url="example.com/a.png")

    def test_youtube_link_becomes_embed(self, make_executor):
        executor = make_executor("")

        executor.insert_video("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=10")

        embed = executor.store.tree.blocks[0]
        assert isinstance(embed, MediaEmbed)
        assert embed.kind == "iframe"
        assert embed.src == "https://www.youtube.com/embed/dQw4w9WgXcQ"
        assert embed.align == "center"
        assert isinstance(executor.store.tree.blocks[1], Paragraph)

    def test_bilibili_link_becomes_player(self, make_executor):
        executor = make_executor("")

        executor.insert_video("https://www.bilibili.com/video/BV1xx411c7mD")

        embed = executor.store.tree.blocks[0]
        assert embed.src == "//player.bilibili.com/player.html?bvid=BV1xx411c7mD&page=1"

    def test_video_file_becomes_native_player(self, make_executor):
        executor = make_executor("")

        executor.insert_video("https://cdn.example.com/clip.webm", width=640, height=360)

        embed = executor.store.tree.blocks[0]
        assert embed.kind == "video"
        assert (embed.width, embed.height) == ("640", "360")

    @pytest.mark.parametrize("url", ["https://vimeo.com/12345", "ftp://example.com/clip.mp4", ""])
    def test_unsupported_video_is_not_inserted(self, make_executor, url):
        executor = make_executor("<p>Text</p>")

        with pytest.raises(ValidationError):
            executor.insert_video(url)

        assert executor.store.snapshot() == "<p>Text</p>"

    def test_table_has_one_header_row(self, make_executor):
        executor = make_executor("")

        executor.insert_table(3, 2)

        table = executor.store.tree.blocks[0]
        assert isinstance(table, Table)
        assert len(table.rows) == 3
        assert [cell.header for cell in table.rows[0].cells] == [True, True]
        for row in table.rows[1:]:
            assert [cell.header for cell in row.cells] == [False, False]
        assert isinstance(executor.store.tree.blocks[1], Paragraph)
        assert executor.surface.selection.focus == Position((1,), 0)

    @pytest.mark.parametrize("rows, cols", [(0, 2), (11, 1), (3, 11)])
    def test_table_size_is_bounded(self, make_executor, rows, cols):
        executor = make_executor("")
        with pytest.raises(ValidationError):
            executor.insert_table(rows, cols)

    def test_code_block_with_placeholder(self, make_executor):
        executor = make_executor("")

        result = executor.insert_code_block()

        blocks = executor.store.tree.blocks
        assert isinstance(blocks[0], CodeBlock)
        assert blocks[0].text == CODE_PLACEHOLDER
        assert isinstance(blocks[1], Paragraph)
        assert result.message == "Code block inserted"

    def test_insert_quote(self, make_executor):
        executor = make_executor("<p>Quote me</p>")
        executor.surface.select(Position((0,), 0))

        result = executor.insert_quote()

        assert executor.store.snapshot() == "<blockquote><p>Quote me</p></blockquote>"
        assert result.toolbar_state["blockquote"] is True


class TestBlockquoteExit:
    """Leaving a quote from the keyboard."""

    def test_enter_on_empty_line_leaves_quote(self, make_executor):
        executor = make_executor("<blockquote><p>Line</p><p><br></p></blockquote>")
        executor.surface.select(Position((0, 1), 0))

        assert executor.handle_blockquote_exit("Enter") is True

        assert executor.store.snapshot() == "<blockquote><p>Line</p></blockquote><p><br></p>"
        assert executor.toolbar_state["blockquote"] is False

    def test_enter_on_text_line_is_not_consumed(self, make_executor):
        executor = make_executor("<blockquote><p>Line</p></blockquote>")
        executor.surface.select(Position((0, 0), 4))
        assert executor.handle_blockquote_exit("Enter") is False

    def test_backspace_at_line_start_leaves_quote(self, make_executor):
        executor = make_executor("<blockquote><p>Line</p></blockquote>")
        executor.surface.select(Position((0, 0), 0))

        assert executor.handle_blockquote_exit("Backspace") is True
        assert executor.store.snapshot() == "<p>Line</p>"

    def test_backspace_mid_line_is_not_consumed(self, make_executor):
        executor = make_executor("<blockquote><p>Line</p></blockquote>")
        executor.surface.select(Position((0, 0), 2))
        assert executor.handle_blockquote_exit("Backspace") is False

    def test_outside_quote_is_not_consumed(self, make_executor):
        executor = make_executor("<p><br></p>")
        executor.surface.select(Position((0,), 0))
        assert executor.handle_blockquote_exit("Enter") is False

    def test_other_keys_are_ignored(self, make_executor):
        executor = make_executor("<blockquote><p><br></p></blockquote>")
        executor.surface.select(Position((0, 0), 0))
        assert executor.handle_blockquote_exit("Tab") is False


class TestTableSizePicker:
    """The hover grid behind the table dialog."""

    def test_hover_selects_size(self):
        picker = TableSizePicker()

        assert picker.hover(3, 4) == (3, 4)
        assert picker.selected_cells() == 12
        assert picker.is_selected(2, 4)
        assert not picker.is_selected(4, 1)
        assert picker.label == "3 × 4 table"

    def test_hover_is_clamped_to_grid(self):
        picker = TableSizePicker()
        assert picker.hover(15, 0) == (10, 1)

    def test_confirm_rejects_out_of_range(self):
        picker = TableSizePicker(rows=0, cols=3)
        with pytest.raises(ValidationError):
            picker.confirm()
