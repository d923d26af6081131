from __future__ import annotations

import logging

from .blocks import Block, BlockType, join_blocks
from .line_classifier import LineKind, classify_line

logger = logging.getLogger(__name__)

__all__ = ["segment", "join_blocks"]


def segment(markdown: str) -> list[Block]:
    """Split a Markdown document into editable blocks.

    Every input line lands in exactly one block, in order, so
    ``join_blocks(segment(text)) == text``. Fenced code regions (closing fence
    included) and runs of table lines become one block each; every other line
    is its own text block. An empty document still yields one empty block.
    """
    if not markdown:
        return [Block("", BlockType.TEXT)]

    lines = markdown.split("\n")
    blocks: list[Block] = []
    i = 0
    while i < len(lines):
        kind = classify_line(lines, i, in_code=False)
        if kind is LineKind.CODE_FENCE_OPEN:
            buffer = [lines[i]]
            i += 1
            closed = False
            while i < len(lines):
                buffer.append(lines[i])
                closing = classify_line(lines, i, in_code=True) is LineKind.CODE_FENCE_CLOSE
                i += 1
                if closing:
                    closed = True
                    break
            block_type = BlockType.CODE_CLOSED if closed else BlockType.CODE_OPEN
            blocks.append(Block("\n".join(buffer), block_type))
            continue
        if kind is LineKind.TABLE_LINE:
            buffer = [lines[i]]
            i += 1
            while i < len(lines) and classify_line(lines, i, in_code=False) is LineKind.TABLE_LINE:
                buffer.append(lines[i])
                i += 1
            blocks.append(Block("\n".join(buffer), BlockType.TABLE))
            continue
        blocks.append(Block(lines[i], BlockType.TEXT))
        i += 1

    logger.debug("Segmented %d lines into %d blocks", len(lines), len(blocks))
    return blocks
