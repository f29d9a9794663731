"""
Unit tests for document root access and confinement.
"""

from pathlib import Path

import pytest

from conftest import scandir_files
from syncserver.filesystem import DirectoryUnreadable, DocumentRoot, FileUnavailable


class TestResolve:

    def test_resolve_named(self, docs: DocumentRoot, doc_root: Path):
        assert docs.resolve_named("a.txt") == doc_root / "a.txt"

    @pytest.mark.parametrize("name", ["", ".", "..", "nested/page.html", "../etc/passwd"])
    def test_resolve_named_refuses_non_plain_names(self, docs: DocumentRoot, name: str):
        with pytest.raises(FileUnavailable):
            docs.resolve_named(name)

    def test_resolve_path(self, docs: DocumentRoot, doc_root: Path):
        assert docs.resolve_path("/nested/page.html") == doc_root / "nested" / "page.html"

    def test_traversal_refused(self, docs: DocumentRoot):
        with pytest.raises(FileUnavailable):
            docs.resolve_path("/../../etc/passwd")

    def test_symlink_out_of_root_refused(self, docs: DocumentRoot, doc_root: Path, tmp_path: Path):
        secret = tmp_path / "secret.txt"
        secret.write_text("secret")
        (doc_root / "link.txt").symlink_to(secret)

        with pytest.raises(FileUnavailable):
            docs.resolve_path("/link.txt")

    def test_confinement_can_be_disabled(self, doc_root: Path, tmp_path: Path):
        (tmp_path / "outside.txt").write_bytes(b"out")
        docs = DocumentRoot(doc_root, confine=False)

        path = docs.resolve_path("/../outside.txt")
        with docs.open_file(path) as f:
            assert f.read() == b"out"


class TestOpenFile:

    def test_open_reads_bytes(self, docs: DocumentRoot):
        with docs.open_file(docs.resolve_named("a.txt")) as f:
            assert f.read() == b"alpha\n"

    def test_missing_file(self, docs: DocumentRoot):
        with pytest.raises(FileUnavailable):
            docs.open_file(docs.resolve_named("missing.txt"))

    def test_directory_is_unavailable(self, docs: DocumentRoot):
        with pytest.raises(FileUnavailable):
            docs.open_file(docs.resolve_path("/nested"))


class TestListFiles:

    def test_lists_regular_files_only(self, docs: DocumentRoot):
        assert set(docs.list_files()) == {"a.txt", "b.txt", "index.html"}

    def test_keeps_enumeration_order(self, docs: DocumentRoot, doc_root: Path):
        for name in ("zeta.txt", "mid.txt", "alpha.txt"):
            (doc_root / name).write_bytes(b"")

        assert docs.list_files() == scandir_files(doc_root)

    def test_symlinks_skipped(self, docs: DocumentRoot, doc_root: Path):
        (doc_root / "alias.txt").symlink_to(doc_root / "a.txt")

        assert "alias.txt" not in docs.list_files()

    def test_missing_root(self, tmp_path: Path):
        docs = DocumentRoot(tmp_path / "does-not-exist")

        with pytest.raises(DirectoryUnreadable):
            docs.list_files()

    def test_empty_root(self, tmp_path: Path):
        assert DocumentRoot(tmp_path).list_files() == []
