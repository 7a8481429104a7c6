"""
Standalone HTML page wrapping exported content.

The page inlines the editor stylesheet so that quotes, tables, code blocks
and image decorations look the same as in the editor.
"""

from __future__ import annotations

from html import escape


EDITOR_STYLESHEET = """
:root {
  --text-primary: #1f2328;
  --text-secondary: #59636e;
  --bg-tertiary: #f6f8fa;
  --border-color: #d1d9e0;
  --accent: #2563eb;
  --radius: 6px;
  --radius-lg: 12px;
}
body { margin: 0; font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; color: var(--text-primary); }
.page { max-width: 794px; margin: 0 auto; line-height: 1.7; font-size: 16px; }
.page h1 { font-size: 2em; margin: 0.67em 0; }
.page h2 { font-size: 1.5em; margin: 0.75em 0; }
.page h3 { font-size: 1.25em; margin: 0.8em 0; }
.page p { margin: 0 0 1em; }
.page a { color: var(--accent); }
.page blockquote { margin: 1em 0; padding: 8px 16px; border-left: 4px solid var(--accent); background: var(--bg-tertiary); color: var(--text-secondary); }
.page table { width: 100%; border-collapse: collapse; }
.page th, .page td { border: 1px solid var(--border-color); padding: 8px; }
.page th { background: var(--bg-tertiary); }
.page pre { background: var(--bg-tertiary); padding: 16px; border-radius: var(--radius); overflow-x: auto; }
.page code { font-family: "SFMono-Regular", Consolas, "Liberation Mono", monospace; }
.page img { max-width: 100%; }
.page .image-shadow { box-shadow: 0 8px 24px rgba(0, 0, 0, 0.15); }
.page .image-border { border: 1px solid var(--border-color); padding: 4px; }
""".strip()


def render_page(content: str, title: str, lang: str = "en") -> str:
    """Wrap rendered content into a self-contained HTML document."""
    return (
        f'<!DOCTYPE html>\n<html lang="{escape(lang, quote=True)}">\n<head>\n'
        f'<meta charset="UTF-8">\n<title>{escape(title, quote=False)}</title>\n'
        f"<style>{EDITOR_STYLESHEET}</style>\n</head>\n"
        f'<body style="background:#fff;padding:40px;">\n'
        f'<div class="page">{content}</div>\n</body>\n</html>'
    )


def render_view(content: str, transform: str) -> str:
    """Render the on-screen page element as a rasterizer sees it."""
    return (
        f"<style>{EDITOR_STYLESHEET}</style>"
        f'<div class="page" style="transform: {escape(transform, quote=True)}; transform-origin: top center;">'
        f"{content}</div>"
    )
