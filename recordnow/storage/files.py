"""Folder-backed documents: every top-level ``*.md`` file is one document."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .models import Document

logger = logging.getLogger(__name__)

PAGE_SUFFIX = ".md"
UNTITLED_PREFIX = "Untitled"


class FileAccessError(RuntimeError):
    pass


def title_for(name: str) -> str:
    if name.lower().endswith(PAGE_SUFFIX):
        return name[: -len(PAGE_SUFFIX)]
    return name


def _ensure_page_file(path: Path) -> None:
    if path.suffix.lower() != PAGE_SUFFIX:
        raise FileAccessError(f"Only Markdown files ({PAGE_SUFFIX}) are supported.")


def _resolve(root: Path, name: str) -> Path:
    if not name:
        raise FileAccessError("Path must not be empty")
    root = root.resolve()
    target = (root / name.lstrip("/")).resolve()
    if target.parent != root:
        raise FileAccessError("Attempted access outside the document folder")
    _ensure_page_file(target)
    return target


def list_documents(root: Path) -> List[Document]:
    """Return one unloaded Document per Markdown file, sorted by title."""
    root = Path(root)
    if not root.is_dir():
        raise FileAccessError(f"Not a folder: {root}")
    docs: List[Document] = []
    for child in root.iterdir():
        if not child.is_file() or child.suffix.lower() != PAGE_SUFFIX:
            continue
        if child.name.startswith("."):
            continue
        try:
            modified = child.stat().st_mtime
        except OSError:
            continue
        docs.append(
            Document(
                id=child.name,
                title=title_for(child.name),
                last_modified=modified,
                path=child,
                loaded=False,
            )
        )
    docs.sort(key=lambda doc: doc.title.lower())
    return docs


def read_document(root: Path, name: str) -> str:
    target = _resolve(root, name)
    try:
        return target.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FileAccessError("File is not UTF-8 encoded text.") from exc


def write_document(root: Path, name: str, content: str) -> None:
    target = _resolve(root, name)
    # newline="" keeps the editor's "\n" separators byte-for-byte
    with target.open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)


def next_untitled_name(root: Path, count: int) -> str:
    index = max(1, count + 1)
    while (Path(root) / f"{UNTITLED_PREFIX} {index}{PAGE_SUFFIX}").exists():
        index += 1
    return f"{UNTITLED_PREFIX} {index}{PAGE_SUFFIX}"


def create_document(root: Path, name: str, content: str = "") -> Document:
    target = _resolve(root, name)
    if target.exists():
        raise FileExistsError(target)
    write_document(root, name, content)
    return Document(
        id=target.name,
        title=title_for(target.name),
        content=content,
        last_modified=target.stat().st_mtime,
        path=target,
    )


def rename_document(root: Path, name: str, new_title: str) -> Path:
    cleaned = new_title.strip()
    if not cleaned or "/" in cleaned or "\\" in cleaned:
        raise FileAccessError(f"Invalid document title: {new_title!r}")
    source = _resolve(root, name)
    target = _resolve(root, f"{cleaned}{PAGE_SUFFIX}")
    if target.exists() and target != source:
        raise FileExistsError(target)
    source.rename(target)
    logger.info("Renamed %s -> %s", source.name, target.name)
    return target


def delete_document(root: Path, name: str) -> None:
    target = _resolve(root, name)
    target.unlink()
