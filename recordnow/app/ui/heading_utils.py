from __future__ import annotations

import re
from dataclasses import dataclass

_HEADING = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    line: int


def parse_headings(markdown: str) -> list[Heading]:
    """Outline of ``#`` headings, skipping lines inside fenced code."""
    headings: list[Heading] = []
    in_code = False
    for number, line in enumerate((markdown or "").split("\n")):
        if line.strip().startswith("```"):
            in_code = not in_code
            continue
        if in_code:
            continue
        match = _HEADING.match(line)
        if match and match.group(2).strip():
            headings.append(Heading(len(match.group(1)), match.group(2).strip(), number))
    return headings
