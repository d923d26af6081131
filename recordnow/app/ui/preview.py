from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QTextBrowser

from recordnow.app.rendering import pygments_css, render_markdown

PREVIEW_CSS = """
h1 { font-size: 26pt; font-weight: 700; }
h2 { font-size: 20pt; font-weight: 600; }
h3 { font-size: 16pt; font-weight: 600; }
blockquote { color: #6b7280; font-style: italic; margin-left: 12px; }
pre { background-color: #f6f8fa; font-family: monospace; }
code { font-family: monospace; background-color: #f3f4f6; }
table { border-collapse: collapse; }
th, td { border: 1px solid #d1d5db; padding: 4px 10px; }
.mermaid pre { background-color: #eef2ff; }
.math { font-family: serif; font-style: italic; }
"""


def preview_html(markdown_text: str, code_css: Optional[str] = None) -> str:
    body = render_markdown(markdown_text)
    if code_css is None:
        code_css = pygments_css()
    return f"<html><head><style>{PREVIEW_CSS}{code_css}</style></head><body>{body}</body></html>"


class PreviewPane(QTextBrowser):
    """Read-only rendered view of a whole document (Preview and Split modes)."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setOpenExternalLinks(True)
        self._markdown = ""

    def set_markdown(self, markdown_text: str) -> None:
        if markdown_text == self._markdown and self.toPlainText():
            return
        self._markdown = markdown_text
        scroll = self.verticalScrollBar().value()
        self.setHtml(preview_html(markdown_text))
        self.verticalScrollBar().setValue(scroll)

    def markdown(self) -> str:
        return self._markdown
