import pytest

from recordnow.app.export import export_document, render_page_html, suggested_filename
from recordnow.storage import Document


@pytest.fixture
def doc():
    return Document(id="notes.md", title="My <Notes>", content="# Hi\n\n| a |\n| --- |\n| 1 |\n")


def test_suggested_filename(doc):
    assert suggested_filename(doc, "pdf") == "My <Notes>.pdf"
    assert suggested_filename(doc, "md") == "My <Notes>.md"


def test_render_page_html_escapes_title(doc):
    page = render_page_html(doc.title, doc.content)
    assert page.startswith("<!DOCTYPE html>")
    assert "<title>My &lt;Notes&gt;</title>" in page
    assert "<h1>Hi</h1>" in page
    assert "<table>" in page
    assert ".codehilite" in page


def test_export_markdown_writes_content_verbatim(tmp_path, doc):
    doc.content = "line1\r\nline2\n"
    target = export_document(doc, "md", tmp_path / "out.md")
    assert target.read_bytes() == b"line1\r\nline2\n"


def test_export_html(tmp_path, doc):
    target = export_document(doc, "html", tmp_path / "out.html")
    assert "<h1>Hi</h1>" in target.read_text(encoding="utf-8")


def test_unknown_format(tmp_path, doc):
    with pytest.raises(ValueError):
        export_document(doc, "docx", tmp_path / "out.docx")
