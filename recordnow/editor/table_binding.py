from __future__ import annotations

import logging
from typing import Optional

from .block_store import BlockStore
from .blocks import BlockType
from .table_model import Alignment, TableModel, parse_table

logger = logging.getLogger(__name__)


class TableBinding:
    """A table model tied to the block it was parsed from.

    Successful mutations are serialized straight back into the owning block
    through ``BlockStore.update_block_content``.
    """

    def __init__(self, store: BlockStore, block_id: str, model: TableModel) -> None:
        self.store = store
        self.block_id = block_id
        self.model = model

    def _push(self, changed: bool) -> bool:
        if changed:
            self.store.update_block_content(self.block_id, self.model.to_markdown())
        return changed

    def set_cell(self, row: int, col: int, value: str) -> bool:
        return self._push(self.model.set_cell(row, col, value))

    def set_header(self, col: int, value: str) -> bool:
        return self._push(self.model.set_header(col, value))

    def add_column(self, after_index: int) -> bool:
        return self._push(self.model.add_column(after_index))

    def remove_column(self, index: int) -> bool:
        return self._push(self.model.remove_column(index))

    def add_row(self, after_index: int) -> bool:
        return self._push(self.model.add_row(after_index))

    def remove_row(self, index: int) -> bool:
        return self._push(self.model.remove_row(index))

    def set_alignment(self, col: int, value: Alignment | str) -> bool:
        return self._push(self.model.set_alignment(col, value))

    def move_row(self, src: int, dst: int) -> bool:
        return self._push(self.model.move_row(src, dst))


def open_table(store: BlockStore, block_id: str) -> Optional[TableBinding]:
    """Open a table block for structured editing.

    Content that does not parse as a table demotes the block to plain text
    (its Markdown is left untouched) and yields None.
    """
    block = store.get(block_id)
    if block is None:
        return None
    model = parse_table(block.content)
    if model is None:
        logger.debug("Block %s is not a valid table; editing as text", block_id)
        store.set_block_type(block_id, BlockType.TEXT)
        return None
    return TableBinding(store, block_id, model)
