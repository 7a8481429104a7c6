"""
Markup builders for inserted media: links, images, video players, tables
and code blocks.
"""

from __future__ import annotations

import base64
import re
from html import escape
from typing import Optional

from ..converters.tree_to_html import (
    CELL_STYLE, CODE_BLOCK_STYLE, HEADER_CELL_STYLE, IFRAME_STYLE, TABLE_STYLE, VIDEO_STYLE,
)
from ..errors import ValidationError


LINK_PATTERN = re.compile(r"^(https?|ftp)://", re.IGNORECASE)
BILIBILI_ID_PATTERN = re.compile(r"BV[a-zA-Z0-9]+")
VIDEO_FILE_PATTERN = re.compile(r"\.(mp4|webm|ogg)$", re.IGNORECASE)

EMPTY_LINE = "<p><br></p>"
CODE_PLACEHOLDER = "Enter code here..."


def _centered(inner: str) -> str:
    return f'<p style="text-align: center;">{inner}</p>'


def build_link(url: str, text: str, new_tab: bool) -> str:
    target = ' target="_blank"' if new_tab else ""
    return f'<a href="{escape(url, quote=True)}"{target}>{escape(text, quote=False)}</a>'


def to_data_url(data: bytes, mime_type: str) -> str:
    """Embed file content as a ``data:`` URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def build_image(src: str, width: int, height: Optional[int] = None, rounded: bool = False,
                shadow: bool = False, border: bool = False) -> str:
    """Centred paragraph holding a styled image."""
    height_css = f"{height}px" if height else "auto"
    style = f"max-width: 100%; width: {width}px; height: {height_css};"
    if rounded:
        style += " border-radius: var(--radius-lg);"
    classes = " ".join(name for name, enabled in (("image-shadow", shadow), ("image-border", border)) if enabled)
    class_attr = f' class="{classes}"' if classes else ""
    return _centered(f'<img src="{escape(src, quote=True)}" style="{style}"{class_attr}>')


def build_video(url: str, width: int, height: int) -> str:
    """
    Centred player markup for a video link.

    YouTube watch links and Bilibili video links become iframe players;
    direct .mp4/.webm/.ogg files become a native video element.

    Raises:
        ValidationError: for any other link
    """
    sizes = f'width="{int(width)}" height="{int(height)}"'

    if "youtube.com/watch?v=" in url:
        video_id = url.split("v=", 1)[1].split("&", 1)[0]
        if video_id:
            src = f"https://www.youtube.com/embed/{escape(video_id, quote=True)}"
            return _centered(f'<iframe src="{src}" {sizes} style="{IFRAME_STYLE}" allowfullscreen></iframe>')

    if "bilibili.com/video/" in url:
        match = BILIBILI_ID_PATTERN.search(url)
        if match:
            src = f"//player.bilibili.com/player.html?bvid={match.group(0)}&amp;page=1"
            return _centered(f'<iframe src="{src}" {sizes} style="{IFRAME_STYLE}" allowfullscreen></iframe>')

    if VIDEO_FILE_PATTERN.search(url):
        return _centered(f'<video src="{escape(url, quote=True)}" {sizes} controls style="{VIDEO_STYLE}"></video>')

    raise ValidationError("Unsupported video link format")


def build_table(rows: int, cols: int) -> str:
    """Table with one header row and empty cells, followed by an empty line."""
    lines = []
    for row in range(rows):
        tag, style = ("th", HEADER_CELL_STYLE) if row == 0 else ("td", CELL_STYLE)
        cells = "".join(f'<{tag} style="{style}">{EMPTY_LINE}</{tag}>' for _ in range(cols))
        lines.append(f"<tr>{cells}</tr>")
    return f'<table style="{TABLE_STYLE}"><tbody>{"".join(lines)}</tbody></table>{EMPTY_LINE}'


def build_code_block() -> str:
    return f'<pre style="{CODE_BLOCK_STYLE}"><code>{CODE_PLACEHOLDER}</code></pre>{EMPTY_LINE}'
