from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QTableWidget,
    QTableWidgetItem,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from recordnow.editor.table_binding import TableBinding
from recordnow.editor.table_model import Alignment

_QT_ALIGN = {
    Alignment.LEFT: Qt.AlignLeft | Qt.AlignVCenter,
    Alignment.CENTER: Qt.AlignHCenter | Qt.AlignVCenter,
    Alignment.RIGHT: Qt.AlignRight | Qt.AlignVCenter,
}


class TableEditorWidget(QWidget):
    """Grid editor for one table block.

    Grid row 0 holds the headers; grid row ``n`` maps to data row ``n - 1``.
    Every edit goes through the :class:`TableBinding`, which writes the
    serialized table back into the owning block.
    """

    structureChanged = Signal()

    def __init__(self, binding: TableBinding, parent=None) -> None:
        super().__init__(parent)
        self.binding = binding
        self._updating = False

        self.grid = QTableWidget(self)
        self.grid.horizontalHeader().setVisible(False)
        self.grid.verticalHeader().setVisible(False)
        self.grid.setSelectionMode(QAbstractItemView.SingleSelection)
        self.grid.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.grid.cellChanged.connect(self._on_cell_changed)

        toolbar = QHBoxLayout()
        toolbar.setContentsMargins(0, 0, 0, 0)
        for label, tip, handler in (
            ("+ Row", "Add row below", self.add_row),
            ("− Row", "Remove row", self.remove_row),
            ("+ Col", "Add column to the right", self.add_column),
            ("− Col", "Remove column", self.remove_column),
            ("⇤", "Align column left", lambda: self.set_alignment(Alignment.LEFT)),
            ("↔", "Center column", lambda: self.set_alignment(Alignment.CENTER)),
            ("⇥", "Align column right", lambda: self.set_alignment(Alignment.RIGHT)),
            ("↑", "Move row up", lambda: self.move_row(-1)),
            ("↓", "Move row down", lambda: self.move_row(1)),
        ):
            toolbar.addWidget(self._make_button(label, tip, handler))
        toolbar.addStretch(1)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 4, 0, 4)
        layout.addLayout(toolbar)
        layout.addWidget(self.grid)
        self.reload()

    def _make_button(self, label: str, tip: str, handler: Callable[[], object]) -> QToolButton:
        button = QToolButton(self)
        button.setText(label)
        button.setToolTip(tip)
        button.setAutoRaise(True)
        button.clicked.connect(lambda _checked=False: handler())
        return button

    # -- grid <-> model

    def reload(self, focus: Optional[tuple[int, int]] = None) -> None:
        model = self.binding.model
        self._updating = True
        try:
            self.grid.clear()
            self.grid.setColumnCount(model.column_count)
            self.grid.setRowCount(model.row_count + 1)
            bold = QFont(self.grid.font())
            bold.setBold(True)
            for col, header in enumerate(model.headers):
                item = QTableWidgetItem(header)
                item.setFont(bold)
                item.setTextAlignment(int(_QT_ALIGN[model.alignments[col]]))
                self.grid.setItem(0, col, item)
            for row, cells in enumerate(model.rows, start=1):
                for col, cell in enumerate(cells):
                    item = QTableWidgetItem(cell)
                    item.setTextAlignment(int(_QT_ALIGN[model.alignments[col]]))
                    self.grid.setItem(row, col, item)
        finally:
            self._updating = False
        if focus is not None:
            row = max(0, min(focus[0], self.grid.rowCount() - 1))
            col = max(0, min(focus[1], self.grid.columnCount() - 1))
            self.grid.setCurrentCell(row, col)
        self._fit_height()

    def _fit_height(self) -> None:
        height = self.grid.frameWidth() * 2
        for row in range(self.grid.rowCount()):
            height += self.grid.rowHeight(row)
        if self.grid.horizontalScrollBar().isVisible():
            height += self.grid.horizontalScrollBar().height()
        self.grid.setFixedHeight(height + 2)

    def _on_cell_changed(self, row: int, col: int) -> None:
        if self._updating:
            return
        item = self.grid.item(row, col)
        value = item.text() if item is not None else ""
        # grid row 0 is the header row, which the model addresses as -1
        self.binding.set_cell(row - 1, col, value)

    def _current(self) -> tuple[int, int]:
        row = self.grid.currentRow()
        col = self.grid.currentColumn()
        if row < 0:
            row = self.grid.rowCount() - 1
        if col < 0:
            col = self.grid.columnCount() - 1
        return row, col

    def _after_structure_change(self, changed: bool, focus: tuple[int, int]) -> bool:
        if changed:
            self.reload(focus)
            self.structureChanged.emit()
        return changed

    # -- actions

    def add_row(self) -> bool:
        row, col = self._current()
        data_row = row - 1
        return self._after_structure_change(self.binding.add_row(data_row), (row + 1, col))

    def remove_row(self) -> bool:
        row, col = self._current()
        if row == 0:
            return False
        return self._after_structure_change(self.binding.remove_row(row - 1), (row, col))

    def add_column(self) -> bool:
        row, col = self._current()
        return self._after_structure_change(self.binding.add_column(col), (row, col + 1))

    def remove_column(self) -> bool:
        row, col = self._current()
        return self._after_structure_change(self.binding.remove_column(col), (row, col))

    def set_alignment(self, alignment: Alignment) -> bool:
        row, col = self._current()
        return self._after_structure_change(self.binding.set_alignment(col, alignment), (row, col))

    def move_row(self, delta: int) -> bool:
        row, col = self._current()
        if row == 0:
            return False
        src = row - 1
        return self._after_structure_change(self.binding.move_row(src, src + delta), (row + delta, col))
