"""Hybrid block editor: rendered Markdown blocks that turn editable when focused."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QBuffer, QIODevice, Qt, Signal
from PySide6.QtGui import QFontDatabase, QImage, QTextCursor
from PySide6.QtWidgets import (
    QFrame,
    QLabel,
    QPlainTextEdit,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from recordnow.app.images import encode_image, encode_image_file, image_markdown, is_image_path
from recordnow.app.rendering import pygments_css
from recordnow.app.ui.preview import preview_html
from recordnow.app.ui.table_editor import TableEditorWidget
from recordnow.editor import (
    ARROW_DOWN,
    ARROW_UP,
    BACKSPACE,
    ENTER,
    TAB,
    Block,
    BlockStore,
    BlockType,
    EditEventHandler,
    KeyInput,
    open_table,
)

logger = logging.getLogger(__name__)

_KEY_NAMES = {
    Qt.Key_Return: ENTER,
    Qt.Key_Enter: ENTER,
    Qt.Key_Backspace: BACKSPACE,
    Qt.Key_Tab: TAB,
    Qt.Key_Up: ARROW_UP,
    Qt.Key_Down: ARROW_DOWN,
}


def _image_data_uri(image: QImage) -> str:
    buffer = QBuffer()
    buffer.open(QIODevice.WriteOnly)
    image.save(buffer, "PNG")
    return encode_image(bytes(buffer.data()), "image/png")


def _image_paths(mime) -> list[Path]:
    if not mime.hasUrls():
        return []
    paths = []
    for url in mime.urls():
        if not url.isLocalFile():
            continue
        path = Path(url.toLocalFile())
        if path.is_file() and is_image_path(path):
            paths.append(path)
    return paths


def _preview_source(block: Block) -> str:
    if block.type is BlockType.CODE_OPEN:
        # render an unterminated fence as if it were closed
        return block.content + "\n```"
    return block.content


class _ClickableLabel(QLabel):
    clicked = Signal()

    def mousePressEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.LeftButton:
            self.clicked.emit()
            event.accept()
            return
        super().mousePressEvent(event)


class BlockTextEdit(QPlainTextEdit):
    """Plain-text editor for one text-family block."""

    def __init__(self, block_widget: "TextBlockWidget") -> None:
        super().__init__(block_widget)
        self.block_widget = block_widget
        self._composing = False
        self.setFrameShape(QFrame.NoFrame)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setLineWrapMode(QPlainTextEdit.WidgetWidth)
        self.document().contentsChanged.connect(self.fit_height)

    def fit_height(self) -> None:
        # the plain text layout reports its height in lines, not pixels
        lines = max(1, int(self.document().documentLayout().documentSize().height()))
        margins = self.contentsMargins()
        height = lines * self.fontMetrics().lineSpacing()
        height += int(self.document().documentMargin() * 2) + margins.top() + margins.bottom()
        self.setFixedHeight(height + 2)

    def resizeEvent(self, event):  # type: ignore[override]
        super().resizeEvent(event)
        self.fit_height()

    def _at_edge(self, direction) -> bool:
        cursor = QTextCursor(self.textCursor())
        cursor.clearSelection()
        return not cursor.movePosition(direction)

    def inputMethodEvent(self, event):  # type: ignore[override]
        self._composing = bool(event.preeditString())
        super().inputMethodEvent(event)

    def keyPressEvent(self, event):  # type: ignore[override]
        key = _KEY_NAMES.get(event.key())
        if key is not None:
            cursor = self.textCursor()
            key_input = KeyInput(
                key,
                shift=bool(event.modifiers() & Qt.ShiftModifier),
                composing=self._composing,
                caret=cursor.selectionStart(),
                selection_end=cursor.selectionEnd(),
                on_first_line=self._at_edge(QTextCursor.Up),
                on_last_line=self._at_edge(QTextCursor.Down),
            )
            if self.block_widget.handle_key(key_input):
                event.accept()
                return
        super().keyPressEvent(event)

    def insertFromMimeData(self, source) -> None:  # type: ignore[override]
        cursor = self.textCursor()
        if source.hasImage():
            image = source.imageData()
            if isinstance(image, QImage) and not image.isNull():
                self.block_widget.insert_inline(image_markdown(_image_data_uri(image)), cursor.selectionStart())
                return
        if source.hasText():
            if self.block_widget.handle_paste(source.text(), cursor.selectionStart(), cursor.selectionEnd()):
                return
            # single-line or unhandled paste: insert as plain text, no rich formatting
            cursor.insertText(source.text())
            return
        super().insertFromMimeData(source)

    def dragEnterEvent(self, event):  # type: ignore[override]
        if _image_paths(event.mimeData()):
            event.acceptProposedAction()
            return
        super().dragEnterEvent(event)

    def dropEvent(self, event):  # type: ignore[override]
        paths = _image_paths(event.mimeData())
        if paths:
            self.block_widget.editor.drop_images(paths, self.block_widget.block_id)
            event.acceptProposedAction()
            return
        super().dropEvent(event)

    def focusInEvent(self, event):  # type: ignore[override]
        super().focusInEvent(event)
        self.block_widget.editor.block_focused(self.block_widget.block_id)


class BlockWidget(QWidget):
    """Base for one block's row: rendered preview when idle, an editor when active."""

    def __init__(self, editor: "HybridEditor", block: Block) -> None:
        super().__init__()
        self.editor = editor
        self.block_id = block.id
        self.block_type = block.type
        self.active = False
        self.label = _ClickableLabel(self)
        self.label.setTextFormat(Qt.RichText)
        self.label.setWordWrap(True)
        self.label.setMinimumHeight(self.fontMetrics().lineSpacing() + 6)
        self.label.clicked.connect(lambda: self.editor.focus_block(self.block_id))
        self.layout_ = QVBoxLayout(self)
        self.layout_.setContentsMargins(0, 0, 0, 0)
        self.layout_.setSpacing(0)
        self.layout_.addWidget(self.label)
        self._rendered: Optional[str] = None

    def matches(self, block: Block) -> bool:
        return block.is_table == (self.block_type is BlockType.TABLE)

    def render_preview(self, block: Block) -> None:
        source = _preview_source(block)
        if source != self._rendered:
            self._rendered = source
            self.label.setText(preview_html(source, self.editor.code_css) if source.strip() else "")

    def refresh(self, block: Block, active: bool) -> None:
        raise NotImplementedError

    def activate(self, offset: int) -> bool:
        raise NotImplementedError


class TextBlockWidget(BlockWidget):
    def __init__(self, editor: "HybridEditor", block: Block) -> None:
        super().__init__(editor, block)
        self._syncing = False
        self.text_edit = BlockTextEdit(self)
        self.text_edit.hide()
        self.text_edit.textChanged.connect(self._on_text_changed)
        self.layout_.addWidget(self.text_edit)

    def _on_text_changed(self) -> None:
        if self._syncing:
            return
        self.editor.store.update_block_content(self.block_id, self.text_edit.toPlainText())

    def _apply_font(self, block: Block) -> None:
        if block.is_code:
            font = QFontDatabase.systemFont(QFontDatabase.FixedFont)
        else:
            font = self.editor.font()
        if self.text_edit.font() != font:
            self.text_edit.setFont(font)

    def refresh(self, block: Block, active: bool) -> None:
        self.block_type = block.type
        self.active = active
        if active:
            self._apply_font(block)
            if self.text_edit.toPlainText() != block.content:
                self._syncing = True
                try:
                    self.text_edit.setPlainText(block.content)
                finally:
                    self._syncing = False
            self.label.hide()
            self.text_edit.show()
            self.text_edit.fit_height()
        else:
            self.text_edit.hide()
            self.render_preview(block)
            self.label.show()

    def activate(self, offset: int) -> bool:
        block = self.editor.store.get(self.block_id)
        if block is None:
            return False
        self.refresh(block, True)
        cursor = self.text_edit.textCursor()
        cursor.setPosition(min(offset, len(self.text_edit.toPlainText())))
        self.text_edit.setTextCursor(cursor)
        self.text_edit.setFocus(Qt.OtherFocusReason)
        return True

    def _index(self) -> int:
        return self.editor.store.index_of(self.block_id)

    def handle_key(self, key_input: KeyInput) -> bool:
        handled = self.editor.handler.handle_key(self._index(), key_input)
        if handled:
            self.editor.sync_widgets()
        return handled

    def handle_paste(self, text: str, caret: int, selection_end: int) -> bool:
        handled = self.editor.handler.handle_paste(self._index(), text, caret, selection_end)
        if handled:
            self.editor.sync_widgets()
        return handled

    def insert_inline(self, text: str, caret: int) -> None:
        if self.editor.handler.insert_text_at(self._index(), text, caret):
            self.editor.sync_widgets()


class TableBlockWidget(BlockWidget):
    def __init__(self, editor: "HybridEditor", block: Block) -> None:
        super().__init__(editor, block)
        self.table_editor: Optional[TableEditorWidget] = None

    def _close_table_editor(self) -> None:
        if self.table_editor is not None:
            self.layout_.removeWidget(self.table_editor)
            self.table_editor.deleteLater()
            self.table_editor = None

    def refresh(self, block: Block, active: bool) -> None:
        self.block_type = block.type
        self.active = active and self.table_editor is not None
        if not self.active:
            self._close_table_editor()
            self.render_preview(block)
            self.label.show()

    def activate(self, offset: int) -> bool:
        if self.table_editor is not None:
            self.table_editor.grid.setFocus(Qt.OtherFocusReason)
            return True
        binding = open_table(self.editor.store, self.block_id)
        if binding is None:
            return False
        self.table_editor = TableEditorWidget(binding, self)
        self.table_editor.structureChanged.connect(lambda: self.editor.ensureWidgetVisible(self))
        self.layout_.addWidget(self.table_editor)
        self.label.hide()
        self.active = True
        self.table_editor.grid.setCurrentCell(0, 0)
        self.table_editor.grid.setFocus(Qt.OtherFocusReason)
        return True


class _BlockColumn(QWidget):
    def __init__(self, editor: "HybridEditor") -> None:
        super().__init__()
        self.editor = editor

    def mousePressEvent(self, event):  # type: ignore[override]
        # clicks that land between or below blocks
        if event.button() == Qt.LeftButton:
            self.editor.focus_end()
            event.accept()
            return
        super().mousePressEvent(event)


class HybridEditor(QScrollArea):
    """Block editor over a :class:`BlockStore`.

    ``contentChanged`` fires with the joined Markdown after every mutation.
    """

    contentChanged = Signal(str)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setWidgetResizable(True)
        self.setAcceptDrops(True)
        self._column = _BlockColumn(self)
        self._column.setMinimumHeight(120)
        self._layout = QVBoxLayout(self._column)
        self._layout.setContentsMargins(24, 16, 24, 48)
        self._layout.setSpacing(4)
        self._layout.addStretch(1)
        self.setWidget(self._column)
        self._widgets: dict[str, BlockWidget] = {}
        self.code_css = pygments_css()
        self.store = BlockStore(on_change=self._on_store_changed)
        self.handler = EditEventHandler(self.store)
        self.sync_widgets()

    # -- document

    def load_document(self, content: str) -> None:
        for widget in self._widgets.values():
            self._layout.removeWidget(widget)
            widget.hide()
            widget.deleteLater()
        self._widgets.clear()
        self.code_css = pygments_css()
        self.store = BlockStore.from_markdown(content, on_change=self._on_store_changed)
        self.handler = EditEventHandler(self.store)
        logger.debug("Loaded %d blocks into hybrid editor", len(self.store))
        self.sync_widgets()

    def content(self) -> str:
        return self.store.joined_content

    def _on_store_changed(self, content: str) -> None:
        self.contentChanged.emit(content)

    # -- widgets

    def _make_widget(self, block: Block) -> BlockWidget:
        if block.is_table:
            return TableBlockWidget(self, block)
        return TextBlockWidget(self, block)

    def sync_widgets(self) -> None:
        """Match block widgets to the store's order and apply any pending cursor request."""
        blocks = self.store.blocks
        live_ids = {block.id for block in blocks}
        for block_id in list(self._widgets):
            widget = self._widgets[block_id]
            block = self.store.get(block_id)
            if block_id not in live_ids or (block is not None and not widget.matches(block)):
                self._layout.removeWidget(widget)
                widget.hide()
                widget.deleteLater()
                del self._widgets[block_id]

        for widget in self._widgets.values():
            self._layout.removeWidget(widget)
        for position, block in enumerate(blocks):
            widget = self._widgets.get(block.id)
            if widget is None:
                widget = self._make_widget(block)
                self._widgets[block.id] = widget
            self._layout.insertWidget(position, widget)
            widget.refresh(block, block.id == self.store.focused_id)

        request = self.store.take_cursor_request()
        if request is None:
            return
        widget = self._widgets.get(request.block_id)
        if widget is None:
            return
        if not widget.activate(request.offset):
            # table content failed to parse; the block is now plain text
            self.store.request_focus(request.block_id, request.offset)
            self.sync_widgets()
            return
        self.ensureWidgetVisible(widget)

    def widget_for(self, block_id: str) -> Optional[BlockWidget]:
        return self._widgets.get(block_id)

    # -- focus

    def focus_block(self, block_id: str) -> None:
        block = self.store.get(block_id)
        if block is None:
            return
        self.store.request_focus(block_id, len(block.content))
        self.sync_widgets()

    def block_focused(self, block_id: str) -> None:
        previous = self.store.focused_id
        if previous == block_id:
            return
        self.store.focused_id = block_id
        widget = self._widgets.get(previous) if previous else None
        block = self.store.get(previous) if previous else None
        if widget is not None and block is not None:
            widget.refresh(block, False)

    def focus_end(self) -> None:
        self.store.focus_end()
        self.sync_widgets()

    def focus_line(self, line_number: int) -> bool:
        """Focus the block containing zero-based ``line_number`` of the document."""
        block = self.store.block_at_line(line_number)
        if block is None:
            return False
        self.store.request_focus(block.id, 0)
        self.sync_widgets()
        return True

    # -- drops

    def drop_images(self, paths: list[Path], block_id: Optional[str] = None) -> int:
        index = self.store.index_of(block_id) if block_id else -1
        inserted = 0
        for path in paths:
            try:
                data_uri = encode_image_file(path)
            except OSError:
                logger.warning("Could not read dropped image %s", path, exc_info=True)
                continue
            block = self.handler.insert_image(index if index >= 0 else None, data_uri)
            index = self.store.index_of(block.id)
            inserted += 1
        if inserted:
            self.sync_widgets()
        return inserted

    def dragEnterEvent(self, event):  # type: ignore[override]
        if _image_paths(event.mimeData()):
            event.acceptProposedAction()
            return
        super().dragEnterEvent(event)

    def dragMoveEvent(self, event):  # type: ignore[override]
        if _image_paths(event.mimeData()):
            event.acceptProposedAction()
            return
        super().dragMoveEvent(event)

    def dropEvent(self, event):  # type: ignore[override]
        paths = _image_paths(event.mimeData())
        if paths:
            self.drop_images(paths, self.store.focused_id)
            event.acceptProposedAction()
            return
        super().dropEvent(event)
