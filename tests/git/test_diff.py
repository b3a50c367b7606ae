"""Tests for git changed-file discovery."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from docsync.git import ChangeLister


def test_change_lister_merges_diff_and_status(tmp_path: Path) -> None:
    calls: list[tuple[list[str], Path]] = []

    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append((list(args), Path(cwd)))
        if args[:2] == ["git", "diff"]:
            return "src/app.py\nsrc/app.py\n"
        if args[:2] == ["git", "status"]:
            return (
                " M src/app.py\n"
                "?? new.ts\n"
                " D removed.ts\n"
                "R  old.ts -> renamed.ts\n"
                '?? "with space.ts"\n'
                "?? ../outside.ts\n"
            )
        return ""

    files = ChangeLister(runner=runner).list_changed_files(tmp_path, "origin/main")

    assert files == ["src/app.py", "new.ts", "renamed.ts", "with space.ts"]
    assert calls[0] == (["git", "diff", "--name-only", "--relative", "origin/main...HEAD"], tmp_path)
    assert calls[1][0] == ["git", "status", "--short", "--untracked-files=all"]


def test_change_lister_compares_against_head_without_base(tmp_path: Path) -> None:
    calls: list[list[str]] = []

    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append(list(args))
        return ""

    assert ChangeLister(runner=runner).list_changed_files(tmp_path) == []
    assert calls[0][-1] == "HEAD"


def test_change_lister_reports_unusable_repository(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        raise subprocess.CalledProcessError(128, list(args), stderr="not a git repository")

    with pytest.raises(RuntimeError, match="not a usable git repository"):
        ChangeLister(runner=runner).list_changed_files(tmp_path)
