from __future__ import annotations

import itertools
import secrets
from dataclasses import dataclass, field
from enum import Enum


class BlockType(str, Enum):
    TEXT = "text"
    TABLE = "table"
    CODE_OPEN = "code_open"
    CODE_CLOSED = "code_closed"


CODE_TYPES = (BlockType.CODE_OPEN, BlockType.CODE_CLOSED)

_SESSION = secrets.token_hex(3)
_COUNTER = itertools.count(1)


def new_block_id() -> str:
    """Return a block id that is never handed out twice in this process."""
    return f"{_SESSION}-{next(_COUNTER):x}"


@dataclass
class Block:
    content: str = ""
    type: BlockType = BlockType.TEXT
    id: str = field(default_factory=new_block_id)

    @property
    def is_text(self) -> bool:
        # text, code_open and code_closed all edit as raw text
        return self.type is not BlockType.TABLE

    @property
    def is_code(self) -> bool:
        return self.type in CODE_TYPES

    @property
    def is_table(self) -> bool:
        return self.type is BlockType.TABLE


def join_blocks(blocks) -> str:
    return "\n".join(block.content for block in blocks)
