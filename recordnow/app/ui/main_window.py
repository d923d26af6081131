from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QByteArray, Qt, QTimer
from PySide6.QtGui import QAction, QActionGroup, QFont, QFontDatabase, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QSplitter,
    QStackedWidget,
)

from recordnow.app import config
from recordnow.app.export import EXPORT_FORMATS, export_document, suggested_filename
from recordnow.app.page_load_logger import PageLoadLogger
from recordnow.storage import FileAccessError, LocalStore, SaveStatus, Workspace

from .hybrid_editor import HybridEditor
from .preview import PreviewPane
from .sidebar import Sidebar

logger = logging.getLogger(__name__)

VIEW_INDEX = {"hybrid": 0, "edit": 1, "split": 2, "preview": 3}

_EXPORT_FILTERS = {
    "pdf": "PDF Files (*.pdf)",
    "html": "HTML Files (*.html)",
    "md": "Markdown Files (*.md)",
}

_STATUS_BADGES = {
    SaveStatus.SAVED: ("Saved", "#81c784", "All changes saved"),
    SaveStatus.SAVING: ("Saving…", "#ffd54f", "Changes pending"),
    SaveStatus.UNSAVED: ("Unsaved", "#e57373", "Last save failed; changes are only in memory"),
}


class MainWindow(QMainWindow):
    def __init__(self, folder: Optional[str] = None, use_local: bool = False) -> None:
        super().__init__()
        self.setWindowTitle("RecordNow")
        self.workspace = Workspace(LocalStore(config.local_store_path()))
        self.view_mode = config.load_view_mode()
        self._pending_save: Optional[tuple[str, str]] = None
        self._loading = False

        self.sidebar = Sidebar()
        self.sidebar.documentSelected.connect(self._open_document)
        self.sidebar.newDocumentRequested.connect(self._new_document)
        self.sidebar.renameRequested.connect(self._rename_document)
        self.sidebar.deleteRequested.connect(self._delete_document)
        self.sidebar.headingActivated.connect(self._go_to_line)

        self.hybrid_editor = HybridEditor()
        self.hybrid_editor.contentChanged.connect(self._on_content_changed)
        self.source_editor = self._make_source_editor()
        self.split_source = self._make_source_editor()
        self.split_preview = PreviewPane()
        self.preview = PreviewPane()

        split = QSplitter(Qt.Horizontal)
        split.addWidget(self.split_source)
        split.addWidget(self.split_preview)
        split.setSizes([500, 500])

        self.stack = QStackedWidget()
        self.stack.addWidget(self.hybrid_editor)
        self.stack.addWidget(self.source_editor)
        self.stack.addWidget(split)
        self.stack.addWidget(self.preview)

        self.main_splitter = QSplitter(Qt.Horizontal)
        self.main_splitter.addWidget(self.sidebar)
        self.main_splitter.addWidget(self.stack)
        self.main_splitter.setStretchFactor(1, 1)
        self.main_splitter.setSizes([240, 900])
        self.setCentralWidget(self.main_splitter)
        self.sidebar.setVisible(config.load_sidebar_visible())

        self.autosave_timer = QTimer(self)
        self.autosave_timer.setInterval(config.load_autosave_delay_ms())
        self.autosave_timer.setSingleShot(True)
        self.autosave_timer.timeout.connect(self._autosave)

        self._badge_base_style = "border: 1px solid #666; padding: 2px 6px; border-radius: 3px;"
        self._save_status_label = QLabel("")
        self._save_status_label.setObjectName("saveStatusLabel")
        self.statusBar().addPermanentWidget(self._save_status_label, 0)
        self.statusBar().showMessage("Open a folder or use local storage to get started")

        self._build_menus()
        self._apply_font_size(config.load_font_size())
        self._restore_geometry()
        self._update_save_indicator()
        self._open_initial(folder, use_local)
        self.set_view_mode(self.view_mode)

    def _make_source_editor(self) -> QPlainTextEdit:
        editor = QPlainTextEdit()
        editor.setFont(QFontDatabase.systemFont(QFontDatabase.FixedFont))
        editor.textChanged.connect(lambda e=editor: self._on_source_changed(e))
        return editor

    # -- menus

    def _build_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        new_action = QAction("New Document", self)
        new_action.setShortcut(QKeySequence.New)
        new_action.triggered.connect(self._new_document)
        open_action = QAction("Open Folder…", self)
        open_action.setShortcut(QKeySequence.Open)
        open_action.triggered.connect(self._choose_folder)
        local_action = QAction("Use Local Storage", self)
        local_action.triggered.connect(self._use_local_storage)
        save_action = QAction("Save", self)
        save_action.setShortcut(QKeySequence.Save)
        save_action.triggered.connect(self._autosave)
        file_menu.addAction(new_action)
        file_menu.addAction(open_action)
        file_menu.addAction(local_action)
        file_menu.addAction(save_action)

        export_menu = file_menu.addMenu("Export")
        for fmt, label in (("pdf", "PDF…"), ("html", "HTML…"), ("md", "Markdown…")):
            action = QAction(label, self)
            action.triggered.connect(lambda _checked=False, f=fmt: self._export(f))
            export_menu.addAction(action)

        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = self.menuBar().addMenu("&View")
        self._view_actions: dict[str, QAction] = {}
        group = QActionGroup(self)
        group.setExclusive(True)
        for number, (mode, label) in enumerate(
            (("hybrid", "Hybrid"), ("edit", "Edit Source"), ("split", "Split"), ("preview", "Preview")),
            start=1,
        ):
            action = QAction(label, self)
            action.setCheckable(True)
            action.setShortcut(QKeySequence(f"Ctrl+{number}"))
            action.triggered.connect(lambda _checked=False, m=mode: self.set_view_mode(m))
            group.addAction(action)
            view_menu.addAction(action)
            self._view_actions[mode] = action
        view_menu.addSeparator()
        sidebar_action = QAction("Toggle Sidebar", self)
        sidebar_action.setShortcut(QKeySequence("Ctrl+B"))
        sidebar_action.triggered.connect(self._toggle_sidebar)
        view_menu.addAction(sidebar_action)
        bigger = QAction("Larger Text", self)
        bigger.setShortcut(QKeySequence.ZoomIn)
        bigger.triggered.connect(lambda: self._change_font_size(1))
        smaller = QAction("Smaller Text", self)
        smaller.setShortcut(QKeySequence.ZoomOut)
        smaller.triggered.connect(lambda: self._change_font_size(-1))
        view_menu.addAction(bigger)
        view_menu.addAction(smaller)

    # -- storage

    def _open_initial(self, folder: Optional[str], use_local: bool) -> None:
        if folder:
            self.open_folder(folder)
            return
        if use_local:
            self._use_local_storage()
            return
        mode = config.load_storage_mode()
        last = config.load_last_folder()
        if mode == "folder" and last and Path(last).is_dir():
            self.open_folder(last)
        elif mode == "local":
            self._use_local_storage()

    def _choose_folder(self) -> None:
        start = config.load_last_folder() or str(Path.home())
        path = QFileDialog.getExistingDirectory(self, "Open Folder", start)
        if path:
            self.open_folder(path)

    def open_folder(self, path: str) -> bool:
        self._flush_pending_save()
        try:
            docs = self.workspace.open_folder(path)
        except (OSError, FileAccessError) as exc:
            logger.error("Failed to open folder %s: %s", path, exc)
            QMessageBox.warning(self, "Open Folder", f"Could not open {path}:\n{exc}")
            return False
        config.save_last_folder(str(self.workspace.root))
        config.save_storage_mode("folder")
        self._after_workspace_opened(docs)
        return True

    def _use_local_storage(self) -> None:
        self._flush_pending_save()
        docs = self.workspace.use_local_storage()
        config.save_storage_mode("local")
        self._after_workspace_opened(docs)

    def _after_workspace_opened(self, docs) -> None:
        self.sidebar.set_folder_name(self.workspace.folder_name)
        self._refresh_file_list()
        self.statusBar().showMessage(f"Opened {self.workspace.folder_name}", 3000)
        if docs:
            self._open_document(docs[0].id)
        else:
            self._show_content("")
        self._update_save_indicator()

    def _refresh_file_list(self) -> None:
        self.sidebar.set_documents(self.workspace.documents, self.workspace.active_id)

    def _open_document(self, doc_id: str) -> None:
        if doc_id == self.workspace.active_id:
            return
        self._flush_pending_save()
        page_logger = PageLoadLogger(doc_id)
        doc = self.workspace.select_document(doc_id)
        page_logger.mark("read")
        if doc is None:
            return
        self._show_content(doc.content)
        page_logger.end("rendered")
        self.setWindowTitle(f"{doc.title} - RecordNow")
        self._refresh_file_list()

    def _new_document(self) -> None:
        self._flush_pending_save()
        try:
            doc = self.workspace.create_document()
        except (OSError, FileAccessError) as exc:
            QMessageBox.warning(self, "New Document", str(exc))
            return
        self._refresh_file_list()
        self._show_content(doc.content)
        self.setWindowTitle(f"{doc.title} - RecordNow")
        if self.view_mode == "hybrid":
            self.hybrid_editor.focus_end()

    def _rename_document(self, doc_id: str, title: str) -> None:
        self._flush_pending_save()
        try:
            doc = self.workspace.rename_document(doc_id, title)
        except FileExistsError:
            QMessageBox.warning(self, "Rename", f"A document named '{title}' already exists.")
            return
        except (OSError, FileAccessError) as exc:
            QMessageBox.warning(self, "Rename", f"Could not rename document:\n{exc}")
            return
        self._refresh_file_list()
        if doc is not None and doc.id == self.workspace.active_id:
            self.setWindowTitle(f"{doc.title} - RecordNow")

    def _delete_document(self, doc_id: str) -> None:
        if self._pending_save and self._pending_save[0] == doc_id:
            self._pending_save = None
            self.autosave_timer.stop()
        else:
            self._flush_pending_save()
        was_active = doc_id == self.workspace.active_id
        try:
            self.workspace.delete_document(doc_id)
        except (OSError, FileAccessError) as exc:
            QMessageBox.warning(self, "Delete", f"Could not delete document:\n{exc}")
            return
        self._refresh_file_list()
        if was_active:
            self._show_content("")
            self.setWindowTitle("RecordNow")
        self._update_save_indicator()

    # -- content flow

    def _show_content(self, content: str) -> None:
        self._loading = True
        try:
            if self.view_mode == "hybrid":
                self.hybrid_editor.load_document(content)
            elif self.view_mode == "edit":
                self.source_editor.setPlainText(content)
            elif self.view_mode == "split":
                self.split_source.setPlainText(content)
                self.split_preview.set_markdown(content)
            else:
                self.preview.set_markdown(content)
        finally:
            self._loading = False
        self.sidebar.set_outline(content)

    def _on_source_changed(self, editor: QPlainTextEdit) -> None:
        if self._loading:
            return
        content = editor.toPlainText()
        if editor is self.split_source:
            self.split_preview.set_markdown(content)
        self._on_content_changed(content)

    def _on_content_changed(self, content: str) -> None:
        if self._loading:
            return
        snapshot = self.workspace.update_content(content)
        if snapshot is None:
            return
        self._pending_save = snapshot
        self.autosave_timer.start()
        self.sidebar.set_outline(content)
        self._update_save_indicator()

    def _autosave(self) -> None:
        snapshot = self._pending_save
        self._pending_save = None
        if snapshot is None:
            return
        doc_id, content = snapshot
        if not self.workspace.persist(doc_id, content):
            self.statusBar().showMessage("Save failed; changes are kept in memory", 5000)
        self._update_save_indicator()

    def _flush_pending_save(self) -> None:
        self.autosave_timer.stop()
        self._autosave()

    def _update_save_indicator(self) -> None:
        text, color, tip = _STATUS_BADGES[self.workspace.save_status]
        self._save_status_label.setText(text)
        self._save_status_label.setStyleSheet(
            self._badge_base_style + f" background-color: {color}; color: #000; margin-right: 6px;"
        )
        self._save_status_label.setToolTip(tip)

    # -- views

    def set_view_mode(self, mode: str) -> None:
        if mode not in VIEW_INDEX:
            logger.warning("Ignoring unknown view mode %s", mode)
            return
        self.view_mode = mode
        doc = self.workspace.active_document
        # entering hybrid re-segments whatever the other views produced
        self._show_content(doc.content if doc else "")
        self.stack.setCurrentIndex(VIEW_INDEX[mode])
        self._view_actions[mode].setChecked(True)
        config.save_view_mode(mode)

    def _go_to_line(self, line: int) -> None:
        if self.view_mode == "preview":
            self.set_view_mode("hybrid")
        if self.view_mode == "hybrid":
            self.hybrid_editor.focus_line(line)
            return
        editor = self.source_editor if self.view_mode == "edit" else self.split_source
        block = editor.document().findBlockByNumber(line)
        if block.isValid():
            cursor = editor.textCursor()
            cursor.setPosition(block.position())
            editor.setTextCursor(cursor)
            editor.centerCursor()
            editor.setFocus()

    def _toggle_sidebar(self) -> None:
        visible = not self.sidebar.isVisible()
        self.sidebar.setVisible(visible)
        config.save_sidebar_visible(visible)

    def _apply_font_size(self, size: int) -> None:
        font = QFont(self.hybrid_editor.font())
        font.setPointSize(size)
        self.hybrid_editor.setFont(font)
        for editor in (self.source_editor, self.split_source):
            mono = QFont(editor.font())
            mono.setPointSize(size)
            editor.setFont(mono)

    def _change_font_size(self, delta: int) -> None:
        size = max(6, min(48, config.load_font_size() + delta))
        config.save_font_size(size)
        self._apply_font_size(size)

    # -- export

    def _export(self, fmt: str) -> None:
        doc = self.workspace.active_document
        if doc is None:
            self.statusBar().showMessage("Open a document to export", 3000)
            return
        if fmt not in EXPORT_FORMATS:
            return
        start_dir = self.workspace.root or Path.home()
        target, _ = QFileDialog.getSaveFileName(
            self, "Export", str(Path(start_dir) / suggested_filename(doc, fmt)), _EXPORT_FILTERS[fmt]
        )
        if not target:
            return
        try:
            export_document(doc, fmt, Path(target))
        except OSError as exc:
            logger.error("Export to %s failed: %s", target, exc)
            QMessageBox.warning(self, "Export", f"Could not export:\n{exc}")
            return
        self.statusBar().showMessage(f"Exported {target}", 3000)

    # -- geometry

    def _restore_geometry(self) -> None:
        geometry = config.load_window_geometry()
        if geometry:
            self.restoreGeometry(QByteArray.fromBase64(geometry.encode("ascii")))
        else:
            self.resize(1200, 800)

    def _save_geometry(self) -> None:
        config.save_window_geometry(bytes(self.saveGeometry().toBase64()).decode("ascii"))

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._flush_pending_save()
        self._save_geometry()
        return super().closeEvent(event)
