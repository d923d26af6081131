"""Keyboard, paste and drop handling for the hybrid block editor.

The handler mutates a :class:`BlockStore` in response to discrete input
events. Each ``handle_*`` method returns True when it consumed the event, in
which case the widget layer must suppress the native behavior and re-render
from the store (including its pending cursor request).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .block_store import BlockStore
from .blocks import Block, BlockType
from .line_classifier import leading_whitespace
from .table_model import header_table_markdown, parse_row

logger = logging.getLogger(__name__)

TAB_SPACES = " " * 4

ENTER = "Enter"
BACKSPACE = "Backspace"
TAB = "Tab"
ARROW_UP = "ArrowUp"
ARROW_DOWN = "ArrowDown"


@dataclass(frozen=True)
class KeyInput:
    key: str
    shift: bool = False
    composing: bool = False
    caret: int = 0
    selection_end: Optional[int] = None
    on_first_line: Optional[bool] = None
    on_last_line: Optional[bool] = None


def _clamp(offset: int, text: str) -> int:
    return max(0, min(offset, len(text)))


def _selection(text: str, caret: int, selection_end: Optional[int]) -> tuple[int, int]:
    start = _clamp(caret, text)
    end = start if selection_end is None else _clamp(selection_end, text)
    return min(start, end), max(start, end)


def table_headers_from_row(content: str) -> list[str]:
    """Header cells typed as a bare ``| a | b |`` row.

    Empty cells between pipes are kept as empty headers; only the outer pipes
    are dropped.
    """
    return parse_row(content)


def is_table_trigger(content: str) -> bool:
    return content.strip().startswith("|") and content.count("|") >= 2


class EditEventHandler:
    def __init__(self, store: BlockStore) -> None:
        self.store = store

    def _block(self, index: int) -> Optional[Block]:
        if 0 <= index < len(self.store):
            return self.store.blocks[index]
        return None

    # -- keys

    def handle_key(self, index: int, event: KeyInput) -> bool:
        if event.composing:
            return False
        block = self._block(index)
        if block is None or not block.is_text:
            return False
        if event.key == ENTER and not event.shift:
            return self._enter(index, block, event)
        if event.key == BACKSPACE:
            return self._backspace(index, block)
        if event.key == TAB and not event.shift:
            return self._tab(block, event)
        if event.key == ARROW_UP:
            return self._arrow_up(index, block, event)
        if event.key == ARROW_DOWN:
            return self._arrow_down(index, block, event)
        return False

    def _enter(self, index: int, block: Block, event: KeyInput) -> bool:
        content = block.content
        start, end = _selection(content, event.caret, event.selection_end)

        if block.type is BlockType.CODE_OPEN:
            line_start = content.rfind("\n", 0, start) + 1
            indent = leading_whitespace(content[line_start:start])
            insert = "\n" + indent
            self.store.update_block_content(block.id, content[:start] + insert + content[end:])
            self.store.request_focus(block.id, start + len(insert))
            return True

        if block.type is BlockType.TEXT and is_table_trigger(content):
            headers = table_headers_from_row(content)
            if any(headers):
                logger.debug("Converting block %s into a %d-column table", block.id, len(headers))
                self.store.convert_to_table(index, header_table_markdown(headers))
                return True

        new_block = self.store.split_at(index, content[:start], content[end:])
        self.store.request_focus(new_block.id, 0)
        return True

    def _backspace(self, index: int, block: Block) -> bool:
        if block.content != "" or index == 0:
            return False
        self.store.merge_with_previous(block.id)
        return True

    def _tab(self, block: Block, event: KeyInput) -> bool:
        if not block.is_code:
            return False
        content = block.content
        start, end = _selection(content, event.caret, event.selection_end)
        self.store.update_block_content(block.id, content[:start] + TAB_SPACES + content[end:])
        self.store.request_focus(block.id, start + len(TAB_SPACES))
        return True

    def _arrow_up(self, index: int, block: Block, event: KeyInput) -> bool:
        if index == 0:
            return False
        first_line = event.on_first_line
        if first_line is None:
            first_line = "\n" not in block.content[: _clamp(event.caret, block.content)]
        if not first_line:
            return False
        previous = self.store.blocks[index - 1]
        self.store.request_focus(previous.id, len(previous.content))
        return True

    def _arrow_down(self, index: int, block: Block, event: KeyInput) -> bool:
        if index >= len(self.store) - 1:
            return False
        last_line = event.on_last_line
        if last_line is None:
            end = event.caret if event.selection_end is None else event.selection_end
            last_line = "\n" not in block.content[_clamp(end, block.content):]
        if not last_line:
            return False
        self.store.request_focus(self.store.blocks[index + 1].id, 0)
        return True

    # -- paste / drop

    def handle_paste(
        self, index: int, text: str, caret: int, selection_end: Optional[int] = None
    ) -> bool:
        block = self._block(index)
        if block is None or not block.is_text or not text:
            return False
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        if "\n" not in text:
            return False

        content = block.content
        start, end = _selection(content, caret, selection_end)

        if block.is_code:
            # fenced code keeps pasted lines verbatim inside the block
            self.store.update_block_content(block.id, content[:start] + text + content[end:])
            self.store.request_focus(block.id, start + len(text))
            return True

        fragments = text.split("\n")
        fragments[0] = content[:start] + fragments[0]
        pasted_tail = len(fragments[-1])
        fragments[-1] = fragments[-1] + content[end:]
        created = self.store.split_into(index, fragments)
        self.store.request_focus(created[-1].id, pasted_tail)
        logger.debug("Pasted %d lines into block %s", len(fragments), block.id)
        return True

    def insert_text_at(self, index: int, text: str, caret: int) -> bool:
        block = self._block(index)
        if block is None or not block.is_text:
            return False
        offset = _clamp(caret, block.content)
        self.store.update_block_content(block.id, block.content[:offset] + text + block.content[offset:])
        self.store.request_focus(block.id, offset + len(text))
        return True

    def insert_image(self, index: Optional[int], data_uri: str) -> Block:
        """Embed an encoded image as a new text block and focus it."""
        if index is None or not (0 <= index < len(self.store)):
            index = len(self.store) - 1
        block = Block(f"![Image]({data_uri})", BlockType.TEXT)
        self.store.insert_after(index, block)
        self.store.request_focus(block.id, 0)
        return block
