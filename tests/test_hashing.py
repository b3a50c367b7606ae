"""Tests for docsync.hashing."""

from __future__ import annotations

from pathlib import Path

from docsync.hashing import hash_content, hash_file


def test_hash_content_is_sha256_hex() -> None:
    assert hash_content("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert len(hash_content("const x = 1;")) == 64
    assert hash_content("a") != hash_content("a ")


def test_hash_file_matches_hash_content(tmp_path: Path) -> None:
    path = tmp_path / "crlf.ts"
    path.write_bytes("const a = 1;\r\nconst b = 2;\r\n".encode("utf-8"))

    assert hash_file(path) == hash_content("const a = 1;\r\nconst b = 2;\r\n")


def test_hash_content_handles_unicode(tmp_path: Path) -> None:
    path = tmp_path / "unicode.py"
    path.write_text("name = 'café'\n", encoding="utf-8")

    assert hash_file(path) == hash_content("name = 'café'\n")
