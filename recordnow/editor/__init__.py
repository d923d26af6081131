"""Block model behind the hybrid Markdown editor."""
from .block_store import BlockStore, CursorRequest
from .blocks import Block, BlockType, join_blocks
from .edit_handler import ARROW_DOWN, ARROW_UP, BACKSPACE, ENTER, TAB, EditEventHandler, KeyInput
from .segmenter import segment
from .table_binding import TableBinding, open_table
from .table_model import Alignment, TableModel, parse_table, serialize_table

__all__ = [
    "ARROW_DOWN",
    "ARROW_UP",
    "Alignment",
    "BACKSPACE",
    "Block",
    "BlockStore",
    "BlockType",
    "CursorRequest",
    "ENTER",
    "EditEventHandler",
    "KeyInput",
    "TAB",
    "TableBinding",
    "TableModel",
    "join_blocks",
    "open_table",
    "parse_table",
    "segment",
    "serialize_table",
]
