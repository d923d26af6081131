import pytest
from PySide6.QtWidgets import QApplication

from recordnow.app import config
from recordnow.app.ui.main_window import VIEW_INDEX, MainWindow
from recordnow.app.ui.preview import PreviewPane, preview_html
from recordnow.app.ui.sidebar import DOC_ID_ROLE, Sidebar
from recordnow.storage import Document, SaveStatus


@pytest.fixture(scope="module")
def app():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def folder(tmp_path):
    root = tmp_path / "notes"
    root.mkdir()
    (root / "alpha.md").write_text("# Alpha\n\nbody", encoding="utf-8")
    (root / "beta.md").write_text("beta", encoding="utf-8")
    return root


@pytest.fixture
def window(app, folder):
    win = MainWindow(folder=str(folder))
    yield win
    win.autosave_timer.stop()


def test_opens_first_document_in_hybrid_mode(window, folder):
    assert window.workspace.active_id == "alpha.md"
    assert window.hybrid_editor.content() == "# Alpha\n\nbody"
    assert window.stack.currentIndex() == VIEW_INDEX["hybrid"]
    assert config.load_last_folder() == str(folder.resolve())
    assert window.sidebar.file_list.count() == 2
    assert window.sidebar.outline.topLevelItemCount() == 1


def test_edits_are_autosaved_from_snapshot(window, folder):
    block = window.hybrid_editor.store.blocks[2]
    window.hybrid_editor.store.update_block_content(block.id, "changed")
    assert window.workspace.save_status is SaveStatus.SAVING
    assert window.autosave_timer.isActive()
    window._autosave()
    assert (folder / "alpha.md").read_text(encoding="utf-8") == "# Alpha\n\nchanged"
    assert window.workspace.save_status is SaveStatus.SAVED


def test_switching_documents_flushes_pending_save(window, folder):
    window.hybrid_editor.store.update_block_content(window.hybrid_editor.store.blocks[0].id, "# A2")
    window._open_document("beta.md")
    assert (folder / "alpha.md").read_text(encoding="utf-8").startswith("# A2")
    assert window.hybrid_editor.content() == "beta"


def test_view_modes_share_content(window):
    window.set_view_mode("edit")
    assert window.source_editor.toPlainText() == "# Alpha\n\nbody"
    window.source_editor.setPlainText("# Alpha\n\n| a |\n| --- |")
    window.set_view_mode("hybrid")
    blocks = window.hybrid_editor.store.blocks
    assert blocks[-1].is_table
    assert config.load_view_mode() == "hybrid"
    window.set_view_mode("split")
    assert window.split_preview.markdown() == "# Alpha\n\n| a |\n| --- |"
    window.set_view_mode("nonsense")
    assert window.view_mode == "split"


def test_new_rename_delete(window, folder):
    window._new_document()
    assert (folder / "Untitled 3.md").exists()
    window._rename_document("Untitled 3.md", "Gamma")
    assert (folder / "Gamma.md").exists()
    window._delete_document("Gamma.md")
    assert not (folder / "Gamma.md").exists()
    assert window.workspace.active_id is None
    assert window.hybrid_editor.content() == ""


def test_outline_navigation_focuses_block(window):
    window._go_to_line(2)
    assert window.hybrid_editor.store.focused_id == window.hybrid_editor.store.blocks[2].id


def test_local_storage_mode(app, tmp_path):
    win = MainWindow(use_local=True)
    try:
        assert win.workspace.mode == "local"
        win._new_document()
        assert win.workspace.active_document.title == "Untitled 1"
        assert config.load_storage_mode() == "local"
    finally:
        win.autosave_timer.stop()


def test_sidebar_lists_documents(app):
    sidebar = Sidebar()
    selected = []
    sidebar.documentSelected.connect(selected.append)
    docs = [Document(id="a.md", title="a"), Document(id="b.md", title="b")]
    sidebar.set_documents(docs, active_id="b.md")
    assert selected == []
    assert sidebar.file_list.currentItem().data(DOC_ID_ROLE) == "b.md"
    sidebar.file_list.setCurrentRow(0)
    assert selected == ["a.md"]


def test_sidebar_outline_nesting(app):
    sidebar = Sidebar()
    lines = []
    sidebar.headingActivated.connect(lines.append)
    sidebar.set_outline("# One\n## Two\n# Three")
    assert sidebar.outline.topLevelItemCount() == 2
    child = sidebar.outline.topLevelItem(0).child(0)
    assert child.text(0) == "Two"
    sidebar._on_heading_activated(child)
    assert lines == [1]


def test_preview_pane(app):
    pane = PreviewPane()
    pane.set_markdown("# Heading\n\ntext")
    assert pane.markdown() == "# Heading\n\ntext"
    assert "Heading" in pane.toPlainText()
    assert "<h1>Heading</h1>" in preview_html("# Heading")
