from __future__ import annotations

from typing import Iterable, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMenu,
    QMessageBox,
    QTabWidget,
    QToolButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from recordnow.storage.models import Document

from .heading_utils import Heading, parse_headings

DOC_ID_ROLE = Qt.UserRole
LINE_ROLE = Qt.UserRole + 1


class Sidebar(QWidget):
    """Document list and heading outline for the open folder."""

    documentSelected = Signal(str)
    newDocumentRequested = Signal()
    renameRequested = Signal(str, str)
    deleteRequested = Signal(str)
    headingActivated = Signal(int)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._suppress_selection = False

        self.folder_label = QLabel("No folder open")
        self.folder_label.setStyleSheet("font-weight: 600; padding: 4px;")
        new_button = QToolButton()
        new_button.setText("+")
        new_button.setToolTip("New document")
        new_button.setAutoRaise(True)
        new_button.clicked.connect(lambda _checked=False: self.newDocumentRequested.emit())
        header = QHBoxLayout()
        header.setContentsMargins(0, 0, 0, 0)
        header.addWidget(self.folder_label, 1)
        header.addWidget(new_button)

        self.file_list = QListWidget()
        self.file_list.setObjectName("fileList")
        self.file_list.currentItemChanged.connect(self._on_current_changed)
        self.file_list.itemDoubleClicked.connect(self._rename_item)
        self.file_list.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.file_list.customContextMenuRequested.connect(self._open_context_menu)

        self.outline = QTreeWidget()
        self.outline.setObjectName("outlineTree")
        self.outline.setHeaderHidden(True)
        self.outline.setIndentation(12)
        self.outline.setUniformRowHeights(True)
        self.outline.itemActivated.connect(self._on_heading_activated)
        self.outline.itemClicked.connect(self._on_heading_activated)

        self.tabs = QTabWidget()
        self.tabs.addTab(self.file_list, "Files")
        self.tabs.addTab(self.outline, "Outline")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)
        layout.addLayout(header)
        layout.addWidget(self.tabs, 1)

    # -- files

    def set_folder_name(self, name: str) -> None:
        self.folder_label.setText(name or "No folder open")

    def set_documents(self, documents: Iterable[Document], active_id: Optional[str] = None) -> None:
        self._suppress_selection = True
        try:
            self.file_list.clear()
            for doc in documents:
                item = QListWidgetItem(doc.title)
                item.setData(DOC_ID_ROLE, doc.id)
                item.setToolTip(str(doc.path) if doc.path else doc.title)
                self.file_list.addItem(item)
                if doc.id == active_id:
                    self.file_list.setCurrentItem(item)
        finally:
            self._suppress_selection = False

    def _on_current_changed(self, current: Optional[QListWidgetItem], _previous) -> None:
        if self._suppress_selection or current is None:
            return
        self.documentSelected.emit(current.data(DOC_ID_ROLE))

    def _rename_item(self, item: QListWidgetItem) -> None:
        title, ok = QInputDialog.getText(self, "Rename", "New name:", text=item.text())
        if ok and title.strip() and title.strip() != item.text():
            self.renameRequested.emit(item.data(DOC_ID_ROLE), title.strip())

    def _confirm_delete(self, item: QListWidgetItem) -> None:
        reply = QMessageBox.question(
            self,
            "Delete Document",
            f"Delete '{item.text()}'? This cannot be undone.",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        if reply == QMessageBox.Yes:
            self.deleteRequested.emit(item.data(DOC_ID_ROLE))

    def _open_context_menu(self, pos) -> None:
        item = self.file_list.itemAt(pos)
        menu = QMenu(self)
        new_action = QAction("New Document", menu)
        new_action.triggered.connect(lambda: self.newDocumentRequested.emit())
        menu.addAction(new_action)
        if item is not None:
            rename_action = QAction("Rename", menu)
            rename_action.triggered.connect(lambda: self._rename_item(item))
            delete_action = QAction("Delete", menu)
            delete_action.triggered.connect(lambda: self._confirm_delete(item))
            menu.addAction(rename_action)
            menu.addAction(delete_action)
        menu.exec(self.file_list.viewport().mapToGlobal(pos))

    # -- outline

    def set_outline(self, markdown_text: str) -> list[Heading]:
        headings = parse_headings(markdown_text)
        self.outline.clear()
        parents: list[tuple[int, QTreeWidgetItem]] = []
        for heading in headings:
            item = QTreeWidgetItem([heading.text])
            item.setData(0, LINE_ROLE, heading.line)
            while parents and parents[-1][0] >= heading.level:
                parents.pop()
            if parents:
                parents[-1][1].addChild(item)
            else:
                self.outline.addTopLevelItem(item)
            parents.append((heading.level, item))
        self.outline.expandAll()
        return headings

    def _on_heading_activated(self, item: QTreeWidgetItem, _column: int = 0) -> None:
        line = item.data(0, LINE_ROLE)
        if line is not None:
            self.headingActivated.emit(int(line))
