"""Key-value document storage used when no folder is open."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List

from .models import Document

logger = logging.getLogger(__name__)

STORAGE_KEY = "recordnow_files"


class LocalStore:
    """Keeps the whole document list as one JSON value under ``STORAGE_KEY``."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Failed to load documents from local storage: %s", exc)
            return {}
        return payload if isinstance(payload, dict) else {}

    def load(self) -> List[Document]:
        records = self._read().get(STORAGE_KEY, [])
        if not isinstance(records, list):
            return []
        docs = []
        for record in records:
            if not isinstance(record, dict):
                continue
            doc = Document.from_record(record)
            if doc is not None:
                docs.append(doc)
        return docs

    def save(self, documents: Iterable[Document]) -> bool:
        payload = self._read()
        payload[STORAGE_KEY] = [doc.to_record() for doc in documents]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to save documents to local storage: %s", exc)
            return False
        return True
