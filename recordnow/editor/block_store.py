from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .blocks import Block, BlockType, join_blocks
from .line_classifier import kind_for_text
from .segmenter import segment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CursorRequest:
    block_id: str
    offset: int


class BlockStore:
    """Ordered blocks of one open document plus focus state.

    Every mutating call recomputes the joined Markdown and hands it to
    ``on_change`` before returning. Nothing here re-segments: the sequence is
    built once by :meth:`from_markdown` and then edited in place.
    """

    def __init__(
        self,
        blocks: Optional[Iterable[Block]] = None,
        on_change: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._blocks: list[Block] = list(blocks or [])
        if not self._blocks:
            self._blocks.append(Block())
        self._on_change = on_change
        self.focused_id: Optional[str] = None
        self._cursor_request: Optional[CursorRequest] = None

    @classmethod
    def from_markdown(
        cls, markdown: str, on_change: Optional[Callable[[str], None]] = None
    ) -> "BlockStore":
        return cls(segment(markdown), on_change=on_change)

    # -- read access

    @property
    def blocks(self) -> tuple[Block, ...]:
        return tuple(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    @property
    def joined_content(self) -> str:
        return join_blocks(self._blocks)

    def index_of(self, block_id: str) -> int:
        for index, block in enumerate(self._blocks):
            if block.id == block_id:
                return index
        return -1

    def get(self, block_id: str) -> Optional[Block]:
        index = self.index_of(block_id)
        return self._blocks[index] if index >= 0 else None

    def block_at_line(self, line_number: int) -> Optional[Block]:
        """Return the block holding zero-based ``line_number`` of the joined content."""
        if line_number < 0:
            return None
        start = 0
        for block in self._blocks:
            span = block.content.count("\n") + 1
            if line_number < start + span:
                return block
            start += span
        return None

    # -- focus / cursor

    @property
    def pending_cursor(self) -> Optional[CursorRequest]:
        return self._cursor_request

    def request_focus(self, block_id: str, offset: int = 0) -> bool:
        if self.index_of(block_id) < 0:
            logger.debug("Dropping focus request for unknown block %s", block_id)
            return False
        self.focused_id = block_id
        self._cursor_request = CursorRequest(block_id, offset)
        return True

    def take_cursor_request(self) -> Optional[CursorRequest]:
        """Pop the pending cursor request with its offset clamped to the block."""
        request = self._cursor_request
        self._cursor_request = None
        if request is None:
            return None
        block = self.get(request.block_id)
        if block is None:
            return None
        offset = max(0, min(request.offset, len(block.content)))
        return CursorRequest(request.block_id, offset)

    def focus_end(self) -> Block:
        last = self._blocks[-1]
        self.request_focus(last.id, len(last.content))
        return last

    # -- mutations

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.joined_content)

    def update_block_content(self, block_id: str, new_content: str) -> bool:
        block = self.get(block_id)
        if block is None:
            return False
        block.content = new_content
        if block.is_text:
            block.type = kind_for_text(new_content)
        self._notify()
        return True

    def set_block_type(self, block_id: str, block_type: BlockType) -> bool:
        block = self.get(block_id)
        if block is None or block.type is block_type:
            return False
        block.type = block_type
        return True

    def split_at(self, index: int, before_content: str, after_content: str) -> Block:
        return self.split_into(index, [before_content, after_content])[-1]

    def split_into(self, index: int, contents: list[str]) -> list[Block]:
        """Keep the block at ``index`` for ``contents[0]`` and add one block per remaining piece."""
        current = self._blocks[index]
        current.content = contents[0]
        if current.is_text:
            current.type = kind_for_text(current.content)
        created = [Block(text, kind_for_text(text)) for text in contents[1:]]
        self._blocks[index + 1 : index + 1] = created
        self._notify()
        return [current, *created]

    def merge_with_previous(self, block_id: str) -> Optional[Block]:
        index = self.index_of(block_id)
        if index <= 0:
            return None
        previous = self._blocks[index - 1]
        del self._blocks[index]
        self.request_focus(previous.id, len(previous.content))
        self._notify()
        return previous

    def convert_to_table(self, index: int, table_markdown: str) -> Block:
        current = self._blocks[index]
        current.content = table_markdown
        current.type = BlockType.TABLE
        follower = Block("", BlockType.TEXT)
        self._blocks.insert(index + 1, follower)
        self.request_focus(follower.id, 0)
        self._notify()
        return follower

    def insert_after(self, index: int, block: Block) -> Block:
        at = max(0, min(index + 1, len(self._blocks)))
        self._blocks.insert(at, block)
        self._notify()
        return block

    def remove(self, block_id: str) -> bool:
        index = self.index_of(block_id)
        if index < 0:
            return False
        del self._blocks[index]
        if not self._blocks:
            self._blocks.append(Block())
        if self.focused_id == block_id:
            self.focused_id = None
        self._notify()
        return True
