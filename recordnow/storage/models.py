from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class SaveStatus(str, Enum):
    SAVED = "saved"
    SAVING = "saving"
    UNSAVED = "unsaved"


@dataclass
class Document:
    id: str
    title: str
    content: str = ""
    last_modified: float = field(default_factory=time.time)
    path: Optional[Path] = None
    is_unsaved: bool = False
    loaded: bool = True

    def to_record(self) -> dict:
        """JSON-friendly form for the local store (no disk path, no flags)."""
        record = asdict(self)
        for key in ("path", "is_unsaved", "loaded"):
            record.pop(key, None)
        return record

    @classmethod
    def from_record(cls, record: dict) -> Optional["Document"]:
        doc_id = record.get("id")
        if not isinstance(doc_id, str) or not doc_id:
            return None
        title = record.get("title")
        content = record.get("content")
        modified = record.get("last_modified")
        return cls(
            id=doc_id,
            title=title if isinstance(title, str) else doc_id,
            content=content if isinstance(content, str) else "",
            last_modified=float(modified) if isinstance(modified, (int, float)) else time.time(),
        )
