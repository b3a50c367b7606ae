"""Tests for docsync.stores.documentation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docsync.errors import CorruptStoreError, NotFoundError
from docsync.models import DocumentationArtifact
from docsync.stores.documentation import DocumentationCache


def _artifact(path: str = "a.ts") -> DocumentationArtifact:
    return DocumentationArtifact(
        path=path,
        content="/** Adds numbers. */",
        summary="Adds numbers.",
        type="TypeScript",
        hash="deadbeef",
    )


def test_missing_store_loads_empty(tmp_path: Path) -> None:
    cache = DocumentationCache(tmp_path)

    assert cache.load_all().files == {}
    assert cache.get("a.ts") is None
    with pytest.raises(NotFoundError):
        cache.read()


def test_persist_round_trips_through_camel_case_json(tmp_path: Path) -> None:
    cache = DocumentationCache(tmp_path)
    cache.put("a.ts", _artifact())
    cache.persist()

    raw = json.loads(cache.path.read_text(encoding="utf-8"))
    assert raw["version"] == "1.0"
    assert "lastUpdated" in raw
    assert raw["files"]["a.ts"]["lastUpdated"]
    assert raw["files"]["a.ts"]["summary"] == "Adds numbers."

    reloaded = DocumentationCache(tmp_path)
    assert reloaded.get("a.ts") == cache.get("a.ts")


def test_discard_reloads_from_disk(tmp_path: Path) -> None:
    cache = DocumentationCache(tmp_path)
    cache.put("a.ts", _artifact())

    cache.discard()

    assert cache.get("a.ts") is None


def test_corrupt_store_raises(tmp_path: Path) -> None:
    cache = DocumentationCache(tmp_path)
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text(json.dumps({"files": {"a.ts": {"content": 1}}}), encoding="utf-8")

    with pytest.raises(CorruptStoreError):
        cache.load_all()

    cache.path.write_text("not json", encoding="utf-8")
    with pytest.raises(CorruptStoreError):
        cache.read()
