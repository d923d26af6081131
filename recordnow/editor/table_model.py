"""Structured view of a GFM table block.

The model is derived from a table block's Markdown and serialized back into
it after every edit; it is never the source of truth on its own.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


NEW_COLUMN_HEADER = "New"

_CELL_SEPARATOR = re.compile(r"(?<!\\)\|")

_DELIMITERS = {
    Alignment.CENTER: ":---:",
    Alignment.RIGHT: "---:",
    Alignment.LEFT: "---",
}


def parse_row(line: str) -> list[str]:
    """Split one table row into trimmed cells, dropping one outer pipe per side.

    Escaped pipes (``\\|``) stay inside their cell and come back unescaped.
    """
    text = line.strip()
    if text.startswith("|"):
        text = text[1:]
    if text.endswith("|") and not text.endswith("\\|"):
        text = text[:-1]
    return [cell.strip().replace("\\|", "|") for cell in _CELL_SEPARATOR.split(text)]


def escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


def alignment_for(cell: str) -> Alignment:
    cell = cell.strip()
    if cell.startswith(":") and cell.endswith(":"):
        return Alignment.CENTER
    if cell.endswith(":"):
        return Alignment.RIGHT
    return Alignment.LEFT


def _fit(cells: Sequence, width: int, filler) -> list:
    cells = list(cells[:width])
    cells.extend(filler for _ in range(width - len(cells)))
    return cells


def format_row(cells: Iterable[str]) -> str:
    return "| " + " | ".join(escape_cell(cell) for cell in cells) + " |"


def serialize_table(
    headers: Sequence[str],
    alignments: Sequence[Alignment | str],
    rows: Sequence[Sequence[str]],
) -> str:
    delimiter = [_DELIMITERS[Alignment(a)] for a in alignments]
    lines = [format_row(headers), format_row(delimiter)]
    lines.extend(format_row(row) for row in rows)
    return "\n".join(lines)


@dataclass
class TableModel:
    headers: list[str]
    alignments: list[Alignment] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_markdown(self) -> str:
        return serialize_table(self.headers, self.alignments, self.rows)

    def _empty_row(self) -> list[str]:
        return ["" for _ in self.headers]

    def _valid_column(self, index: int) -> bool:
        return 0 <= index < len(self.headers)

    def _valid_row(self, index: int) -> bool:
        return 0 <= index < len(self.rows)

    # -- mutations; each returns True when the model changed

    def set_header(self, col: int, value: str) -> bool:
        if not self._valid_column(col) or self.headers[col] == value:
            return False
        self.headers[col] = value
        return True

    def set_cell(self, row: int, col: int, value: str) -> bool:
        """Set a data cell; ``row == -1`` addresses the header row."""
        if row == -1:
            return self.set_header(col, value)
        if not (self._valid_row(row) and self._valid_column(col)):
            return False
        if self.rows[row][col] == value:
            return False
        self.rows[row][col] = value
        return True

    def add_column(self, after_index: int) -> bool:
        at = max(0, min(after_index + 1, len(self.headers)))
        self.headers.insert(at, NEW_COLUMN_HEADER)
        self.alignments.insert(at, Alignment.LEFT)
        for row in self.rows:
            row.insert(at, "")
        return True

    def remove_column(self, index: int) -> bool:
        if len(self.headers) <= 1 or not self._valid_column(index):
            return False
        del self.headers[index]
        del self.alignments[index]
        for row in self.rows:
            del row[index]
        return True

    def add_row(self, after_index: int) -> bool:
        at = max(0, min(after_index + 1, len(self.rows)))
        self.rows.insert(at, self._empty_row())
        return True

    def remove_row(self, index: int) -> bool:
        if not self._valid_row(index):
            return False
        del self.rows[index]
        if not self.rows:
            self.rows.append(self._empty_row())
        return True

    def set_alignment(self, col: int, value: Alignment | str) -> bool:
        if not self._valid_column(col):
            return False
        alignment = Alignment(value)
        if self.alignments[col] is alignment:
            return False
        self.alignments[col] = alignment
        return True

    def move_row(self, src: int, dst: int) -> bool:
        if not self._valid_row(src) or not self._valid_row(dst) or src == dst:
            return False
        row = self.rows.pop(src)
        self.rows.insert(dst, row)
        return True


def parse_table(markdown: str) -> Optional[TableModel]:
    """Parse table Markdown, or return None when it is not a table.

    Needs a header line and a delimiter line. Rows and alignments are padded or
    truncated to the header width so every row has one cell per column, and a
    table without data lines gets one empty row.
    """
    lines = [line for line in markdown.strip().split("\n") if line.strip()]
    if len(lines) < 2:
        return None
    headers = parse_row(lines[0])
    width = len(headers)
    alignments = _fit([alignment_for(cell) for cell in parse_row(lines[1])], width, Alignment.LEFT)
    rows = [_fit(parse_row(line), width, "") for line in lines[2:]] or [[""] * width]
    return TableModel(headers=headers, alignments=alignments, rows=rows)


def header_table_markdown(headers: Sequence[str]) -> str:
    """Build a new table: the given header row, a delimiter and one blank row."""
    return serialize_table(headers, [Alignment.LEFT] * len(headers), [[""] * len(headers)])
