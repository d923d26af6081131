import pytest

from recordnow.storage import files
from recordnow.storage.files import FileAccessError


def test_list_documents_only_top_level_markdown(tmp_path):
    (tmp_path / "b.md").write_text("B", encoding="utf-8")
    (tmp_path / "A.md").write_text("A", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
    (tmp_path / ".hidden.md").write_text("x", encoding="utf-8")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.md").write_text("C", encoding="utf-8")
    docs = files.list_documents(tmp_path)
    assert [d.title for d in docs] == ["A", "b"]
    assert all(not d.loaded for d in docs)
    assert docs[0].id == "A.md"


def test_list_documents_requires_folder(tmp_path):
    with pytest.raises(FileAccessError):
        files.list_documents(tmp_path / "missing")


def test_read_and_write_preserve_newlines(tmp_path):
    files.create_document(tmp_path, "page.md")
    files.write_document(tmp_path, "page.md", "a\r\nb\n")
    assert (tmp_path / "page.md").read_bytes() == b"a\r\nb\n"
    assert files.read_document(tmp_path, "page.md") == "a\nb\n"


def test_read_rejects_non_utf8(tmp_path):
    (tmp_path / "bin.md").write_bytes(b"\xff\xfe\x00")
    with pytest.raises(FileAccessError):
        files.read_document(tmp_path, "bin.md")


def test_paths_outside_root_are_rejected(tmp_path):
    with pytest.raises(FileAccessError):
        files.read_document(tmp_path, "../escape.md")
    with pytest.raises(FileAccessError):
        files.write_document(tmp_path, "nested/page.md", "x")
    with pytest.raises(FileAccessError):
        files.write_document(tmp_path, "page.txt", "x")


def test_create_document_refuses_existing(tmp_path):
    doc = files.create_document(tmp_path, "New.md", "hello")
    assert doc.title == "New"
    assert doc.content == "hello"
    with pytest.raises(FileExistsError):
        files.create_document(tmp_path, "New.md")


def test_next_untitled_name_skips_taken(tmp_path):
    (tmp_path / "Untitled 1.md").write_text("", encoding="utf-8")
    assert files.next_untitled_name(tmp_path, 0) == "Untitled 2.md"
    assert files.next_untitled_name(tmp_path, 4) == "Untitled 5.md"


def test_rename_document(tmp_path):
    files.create_document(tmp_path, "old.md", "body")
    target = files.rename_document(tmp_path, "old.md", " New Name ")
    assert target.name == "New Name.md"
    assert target.read_text(encoding="utf-8") == "body"
    assert not (tmp_path / "old.md").exists()


def test_rename_document_conflicts_and_invalid_titles(tmp_path):
    files.create_document(tmp_path, "a.md")
    files.create_document(tmp_path, "b.md")
    with pytest.raises(FileExistsError):
        files.rename_document(tmp_path, "a.md", "b")
    with pytest.raises(FileAccessError):
        files.rename_document(tmp_path, "a.md", "sub/dir")
    with pytest.raises(FileAccessError):
        files.rename_document(tmp_path, "a.md", "   ")


def test_delete_document(tmp_path):
    files.create_document(tmp_path, "gone.md")
    files.delete_document(tmp_path, "gone.md")
    assert not (tmp_path / "gone.md").exists()
