"""Line-level classification used to segment Markdown into blocks."""
from __future__ import annotations

from enum import Enum
from typing import Sequence

from .blocks import BlockType

FENCE = "```"


class LineKind(str, Enum):
    CODE_FENCE_OPEN = "code-fence-open"
    CODE_FENCE_CLOSE = "code-fence-close"
    TABLE_LINE = "table-line"
    PLAIN = "plain"


def is_fence_line(line: str) -> bool:
    return line.strip().startswith(FENCE)


def is_table_line(line: str) -> bool:
    return line.strip().startswith("|")


def count_fence_lines(text: str) -> int:
    return sum(1 for line in text.split("\n") if is_fence_line(line))


def classify_line(lines: Sequence[str], index: int, in_code: bool) -> LineKind:
    """Classify ``lines[index]`` given whether a fenced region is currently open.

    Fences do not nest: a fence line while ``in_code`` always closes the region,
    and every other line inside a region is plain code content.
    """
    line = lines[index]
    if is_fence_line(line):
        return LineKind.CODE_FENCE_CLOSE if in_code else LineKind.CODE_FENCE_OPEN
    if in_code:
        return LineKind.PLAIN
    if is_table_line(line):
        return LineKind.TABLE_LINE
    return LineKind.PLAIN


def kind_for_text(content: str) -> BlockType:
    """Derive the code state of a text-family block from its content."""
    if not content.strip().startswith(FENCE):
        return BlockType.TEXT
    if count_fence_lines(content) >= 2:
        return BlockType.CODE_CLOSED
    return BlockType.CODE_OPEN


def leading_whitespace(line: str) -> str:
    stripped = line.lstrip(" \t")
    return line[: len(line) - len(stripped)]
