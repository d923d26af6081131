from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path
from typing import List, Optional

from . import files
from .files import FileAccessError
from .local_store import LocalStore
from .models import Document, SaveStatus

logger = logging.getLogger(__name__)

MODE_FOLDER = "folder"
MODE_LOCAL = "local"
LOCAL_FOLDER_NAME = "Local Storage"


def generate_id() -> str:
    return secrets.token_hex(5)


class Workspace:
    """The open document collection, backed by a folder or the local store.

    Edits land in memory first (``update_content``) and are written by an
    explicit ``persist`` call, so a failed write never loses the in-memory
    text; it only flips the save status to ``unsaved``.
    """

    def __init__(self, local_store: LocalStore) -> None:
        self.local_store = local_store
        self.mode: Optional[str] = None
        self.root: Optional[Path] = None
        self.folder_name: str = ""
        self.documents: List[Document] = []
        self.active_id: Optional[str] = None
        self.save_status = SaveStatus.SAVED

    # -- opening

    def open_folder(self, path: Path | str) -> List[Document]:
        root = Path(path).expanduser().resolve()
        docs = files.list_documents(root)
        self.mode = MODE_FOLDER
        self.root = root
        self.folder_name = root.name
        self.documents = docs
        self.active_id = None
        self.save_status = SaveStatus.SAVED
        logger.info("Opened folder %s (%d documents)", root, len(docs))
        return docs

    def use_local_storage(self) -> List[Document]:
        self.mode = MODE_LOCAL
        self.root = None
        self.folder_name = LOCAL_FOLDER_NAME
        self.documents = self.local_store.load()
        self.active_id = None
        self.save_status = SaveStatus.SAVED
        logger.info("Using local storage (%d documents)", len(self.documents))
        return self.documents

    @property
    def is_open(self) -> bool:
        return self.mode is not None

    # -- lookup

    def get(self, doc_id: str) -> Optional[Document]:
        for doc in self.documents:
            if doc.id == doc_id:
                return doc
        return None

    @property
    def active_document(self) -> Optional[Document]:
        return self.get(self.active_id) if self.active_id else None

    def select_document(self, doc_id: str) -> Optional[Document]:
        doc = self.get(doc_id)
        if doc is None:
            return None
        if not doc.loaded and self.root is not None:
            try:
                doc.content = files.read_document(self.root, doc.id)
                doc.loaded = True
            except (OSError, FileAccessError) as exc:
                logger.error("Error reading %s: %s", doc.id, exc)
        self.active_id = doc_id
        return doc

    # -- document management

    def create_document(self) -> Document:
        if self.mode == MODE_FOLDER and self.root is not None:
            name = files.next_untitled_name(self.root, len(self.documents))
            doc = files.create_document(self.root, name)
        elif self.mode == MODE_LOCAL:
            doc = Document(id=generate_id(), title=f"{files.UNTITLED_PREFIX} {len(self.documents) + 1}")
        else:
            raise FileAccessError("Open a folder or switch to local storage first")
        self.documents.insert(0, doc)
        if self.mode == MODE_LOCAL:
            self.local_store.save(self.documents)
        self.active_id = doc.id
        return doc

    def rename_document(self, doc_id: str, new_title: str) -> Optional[Document]:
        doc = self.get(doc_id)
        cleaned = new_title.strip()
        if doc is None or not cleaned or cleaned == doc.title:
            return doc
        if self.mode == MODE_FOLDER and self.root is not None:
            target = files.rename_document(self.root, doc.id, cleaned)
            was_active = self.active_id == doc.id
            doc.id = target.name
            doc.path = target
            if was_active:
                self.active_id = doc.id
        doc.title = cleaned
        if self.mode == MODE_LOCAL:
            self.local_store.save(self.documents)
        else:
            self.documents.sort(key=lambda d: d.title.lower())
        return doc

    def delete_document(self, doc_id: str) -> None:
        doc = self.get(doc_id)
        if doc is None:
            return
        if self.mode == MODE_FOLDER and self.root is not None:
            files.delete_document(self.root, doc.id)
        self.documents = [d for d in self.documents if d.id != doc_id]
        if self.mode == MODE_LOCAL:
            self.local_store.save(self.documents)
        if self.active_id == doc_id:
            self.active_id = None

    # -- content

    def update_content(self, content: str) -> Optional[tuple[str, str]]:
        """Record an edit of the active document; return the snapshot to persist."""
        doc = self.active_document
        if doc is None:
            return None
        doc.content = content
        doc.is_unsaved = True
        self.save_status = SaveStatus.SAVING
        return doc.id, content

    def persist(self, doc_id: str, content: str) -> bool:
        doc = self.get(doc_id)
        if doc is None:
            logger.debug("Skipping save for closed document %s", doc_id)
            return False
        if self.mode == MODE_FOLDER and self.root is not None:
            try:
                files.write_document(self.root, doc.id, content)
            except (OSError, FileAccessError) as exc:
                logger.error("Save failed for %s: %s", doc.id, exc)
                self.save_status = SaveStatus.UNSAVED
                return False
        elif self.mode == MODE_LOCAL:
            doc.content = content
            if not self.local_store.save(self.documents):
                self.save_status = SaveStatus.UNSAVED
                return False
        doc.last_modified = time.time()
        if doc.content == content:
            doc.is_unsaved = False
        self.save_status = SaveStatus.SAVED
        return True

    def get_content(self, doc_id: str) -> str:
        doc = self.get(doc_id)
        return doc.content if doc else ""

    def set_content(self, doc_id: str, content: str) -> bool:
        doc = self.get(doc_id)
        if doc is None:
            return False
        doc.content = content
        doc.is_unsaved = True
        return self.persist(doc_id, content)
