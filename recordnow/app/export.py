from __future__ import annotations

import logging
from html import escape
from pathlib import Path

from jinja2 import Template

from recordnow.storage.models import Document

from .rendering import pygments_css, render_markdown

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("pdf", "html", "md")

PAGE_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <style>
        @page { margin: 20mm; size: A4; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
            line-height: 1.6;
            max-width: 800px;
            margin: 20px auto;
            padding: 20px;
            color: #333;
        }
        h1 { border-bottom: 1px solid #eee; padding-bottom: 0.3em; }
        blockquote { border-left: 4px solid #ddd; margin-left: 0; padding-left: 1em; color: #666; font-style: italic; }
        table { border-collapse: collapse; }
        th, td { border: 1px solid #ddd; padding: 6px 12px; }
        pre { background: #f6f8fa; padding: 12px; border-radius: 6px; overflow-x: auto; }
        img { max-width: 100%; }
        {{ code_css }}
    </style>
</head>
<body>
{{ body }}
</body>
</html>
""",
    autoescape=False,
)


def suggested_filename(doc: Document, fmt: str) -> str:
    return f"{doc.title}.{fmt}"


def render_page_html(title: str, content: str) -> str:
    """Render a Markdown document into a standalone HTML page."""
    return PAGE_TEMPLATE.render(
        title=escape(title),
        body=render_markdown(content),
        code_css=pygments_css(),
    )


def export_markdown(doc: Document, path: Path) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(doc.content)
    return path


def export_html(doc: Document, path: Path) -> Path:
    path = Path(path)
    path.write_text(render_page_html(doc.title, doc.content), encoding="utf-8")
    return path


def export_pdf(doc: Document, path: Path) -> Path:
    """Print the rendered page to PDF. Needs a running QApplication."""
    from PySide6.QtGui import QPageSize, QTextDocument
    from PySide6.QtPrintSupport import QPrinter

    path = Path(path)
    printer = QPrinter(QPrinter.PrinterMode.HighResolution)
    printer.setOutputFormat(QPrinter.OutputFormat.PdfFormat)
    printer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
    printer.setOutputFileName(str(path))
    document = QTextDocument()
    document.setHtml(render_page_html(doc.title, doc.content))
    document.print_(printer)
    logger.info("Exported %s to %s", doc.title, path)
    return path


def export_document(doc: Document, fmt: str, path: Path) -> Path:
    if fmt == "md":
        return export_markdown(doc, path)
    if fmt == "html":
        return export_html(doc, path)
    if fmt == "pdf":
        return export_pdf(doc, path)
    raise ValueError(f"Unknown export format: {fmt}")
