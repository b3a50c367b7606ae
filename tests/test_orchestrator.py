"""Tests for docsync.orchestrator."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docsync.analyzers import SymbolExtractor
from docsync.detector import MODIFIED, NEW
from docsync.errors import CorruptSnapshotError, IOFailure, MissingCredentialsError
from docsync.git.diff import ChangeLister
from docsync.hashing import hash_content
from docsync.models import GenerationResult
from docsync.orchestrator import Orchestrator
from tests._fixtures.workspace import FailingRunner, RecordingRunner, WorkspaceBuilder


def _orchestrator(workspace: WorkspaceBuilder, runner, **kwargs) -> Orchestrator:
    return Orchestrator(
        workspace.context(),
        runner=runner,
        symbol_extractor=SymbolExtractor(enabled=False),
        **kwargs,
    )


def _tree_json(workspace: WorkspaceBuilder) -> dict:
    return json.loads((workspace.root / ".docsync" / "tree.json").read_text(encoding="utf-8"))


def _docs_json(workspace: WorkspaceBuilder) -> dict:
    return json.loads((workspace.root / ".docsync" / "docs.json").read_text(encoding="utf-8"))


def test_first_run_generates_and_commits_hash(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const x = 1;"})
    runner = RecordingRunner()
    orchestrator = _orchestrator(workspace, runner)

    result = orchestrator.process("a.ts")

    assert result.status == GenerationResult.GENERATED
    assert len(runner.calls) == 1
    assert "const x = 1;" in str(runner.calls[0]["prompt"])
    assert "TypeScript" in str(runner.calls[0]["prompt"])
    assert _tree_json(workspace)["files"]["a.ts"]["file_hash"] == hash_content("const x = 1;")
    stored = _docs_json(workspace)["files"]["a.ts"]
    assert stored["summary"] == "Documented file 1."
    assert stored["type"] == "TypeScript"
    assert stored["hash"] == hash_content("const x = 1;")
    assert (workspace.root / "a.ts").read_text(encoding="utf-8") == "const x = 1;"


def test_unchanged_file_is_skipped_without_generation(workspace: WorkspaceBuilder) -> None:
    workspace.write({"b.ts": "export const b = 2;\n"})
    _orchestrator(workspace, RecordingRunner()).process("b.ts")

    runner = RecordingRunner()
    result = _orchestrator(workspace, runner).process("b.ts")

    assert result.status == GenerationResult.SKIPPED
    assert runner.calls == []


def test_modified_file_is_regenerated_once(workspace: WorkspaceBuilder) -> None:
    workspace.write({"c.py": "VALUE = 1\n"})
    _orchestrator(workspace, RecordingRunner('"""First version."""\n')).process("c.py")

    workspace.write({"c.py": "VALUE = 2\n"})
    runner = RecordingRunner('"""Holds the second value."""\nVALUE = 2\n')
    orchestrator = _orchestrator(workspace, runner)
    result = orchestrator.process("c.py")

    assert result.status == GenerationResult.GENERATED
    assert len(runner.calls) == 1
    assert result.artifact is not None
    assert result.artifact.summary == "Holds the second value."
    assert result.artifact.type == "Python"
    assert _tree_json(workspace)["files"]["c.py"]["file_hash"] == hash_content("VALUE = 2\n")


def test_processing_twice_is_idempotent(workspace: WorkspaceBuilder) -> None:
    workspace.write({"src/util.js": "function add(a, b) { return a + b; }\n"})
    runner = RecordingRunner()
    orchestrator = _orchestrator(workspace, runner)

    first = orchestrator.process("src/util.js")
    tree_after_first = _tree_json(workspace)["files"]
    second = orchestrator.process("src/util.js")

    assert first.status == GenerationResult.GENERATED
    assert second.status == GenerationResult.SKIPPED
    assert len(runner.calls) == 1
    assert _tree_json(workspace)["files"] == tree_after_first


def test_generation_failure_leaves_stores_untouched(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const x = 1;"})
    orchestrator = _orchestrator(workspace, FailingRunner())

    result = orchestrator.process("a.ts")

    assert result.status == GenerationResult.FAILED
    assert result.reason is not None and "model unavailable" in result.reason
    assert not (workspace.root / ".docsync" / "tree.json").exists()
    assert not (workspace.root / ".docsync" / "docs.json").exists()
    assert orchestrator.documentation_for("a.ts") is None


def test_failed_regeneration_keeps_previous_record(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const x = 1;"})
    _orchestrator(workspace, RecordingRunner()).process("a.ts")
    previous = _docs_json(workspace)["files"]["a.ts"]

    workspace.write({"a.ts": "const x = 2;"})
    result = _orchestrator(workspace, FailingRunner()).process("a.ts")

    assert result.status == GenerationResult.FAILED
    assert _tree_json(workspace)["files"]["a.ts"]["file_hash"] == hash_content("const x = 1;")
    assert _docs_json(workspace)["files"]["a.ts"] == previous


def test_empty_generation_is_a_failure(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const x = 1;"})
    result = _orchestrator(workspace, RecordingRunner("```ts\n```")).process("a.ts")

    assert result.status == GenerationResult.FAILED
    assert not (workspace.root / ".docsync" / "tree.json").exists()


def test_missing_file_is_reported_as_failure(workspace: WorkspaceBuilder) -> None:
    runner = RecordingRunner()
    result = _orchestrator(workspace, runner).process("missing.ts")

    assert result.status == GenerationResult.FAILED
    assert runner.calls == []


def test_batch_continues_after_a_failure(workspace: WorkspaceBuilder) -> None:
    workspace.write(
        {
            "one.ts": "export const one = 1;\n",
            "two.ts": "export const broken = 2;\n",
            "three.ts": "export const three = 3;\n",
        }
    )
    runner = FailingRunner(fail_when="broken")
    orchestrator = _orchestrator(workspace, runner)

    report = orchestrator.process_batch(["one.ts", "two.ts", "three.ts"])

    assert [result.path for result in report.results] == ["one.ts", "two.ts", "three.ts"]
    assert [result.status for result in report.results] == [
        GenerationResult.GENERATED,
        GenerationResult.FAILED,
        GenerationResult.GENERATED,
    ]
    assert report.summary_line() == "3 file(s) processed: 2 generated, 0 skipped, 1 failed"
    files = _tree_json(workspace)["files"]
    assert set(files) == {"one.ts", "three.ts"}


def test_corrupt_snapshot_aborts_processing(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const x = 1;", ".docsync/tree.json": "{not json"})
    runner = RecordingRunner()
    orchestrator = _orchestrator(workspace, runner)

    with pytest.raises(CorruptSnapshotError):
        orchestrator.process("a.ts")
    with pytest.raises(CorruptSnapshotError):
        orchestrator.process_batch(["a.ts"])
    assert runner.calls == []


def test_file_changed_during_generation_is_not_committed(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const x = 1;"})

    class EditingRunner:
        def run(self, prompt: str, *, system: str | None = None) -> str:
            workspace.write({"a.ts": "const x = 99;"})
            return "/** Stale docs. */"

    orchestrator = _orchestrator(workspace, EditingRunner())
    result = orchestrator.process("a.ts")

    assert result.status == GenerationResult.FAILED
    assert result.reason is not None and "changed while" in result.reason
    assert orchestrator.documentation_for("a.ts") is None
    assert not (workspace.root / ".docsync" / "tree.json").exists()


def test_snapshot_failure_rolls_back_cached_artifact(
    workspace: WorkspaceBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    workspace.write({"a.ts": "const x = 1;"})
    orchestrator = _orchestrator(workspace, RecordingRunner())

    def fail(paths):  # type: ignore[no-untyped-def]
        raise IOFailure("disk full")

    monkeypatch.setattr(orchestrator.snapshot_store, "update_hashes", fail)
    result = orchestrator.process("a.ts")

    assert result.status == GenerationResult.FAILED
    assert result.reason == "disk full"
    assert orchestrator.documentation_for("a.ts") is None
    assert _docs_json(workspace)["files"] == {}


def test_snapshot_failure_restores_previous_artifact_and_source(
    workspace: WorkspaceBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    workspace.write({"a.ts": "const x = 1;"})
    _orchestrator(workspace, RecordingRunner()).process("a.ts")
    previous = _docs_json(workspace)["files"]["a.ts"]

    workspace.write({"a.ts": "const x = 2;"})
    orchestrator = _orchestrator(
        workspace, RecordingRunner("/** Rewritten. */\nconst x = 2;"), write_back=True
    )

    def fail(paths):  # type: ignore[no-untyped-def]
        raise IOFailure("disk full")

    monkeypatch.setattr(orchestrator.snapshot_store, "update_hashes", fail)
    result = orchestrator.process("a.ts")

    assert result.status == GenerationResult.FAILED
    assert _docs_json(workspace)["files"]["a.ts"] == previous
    assert (workspace.root / "a.ts").read_text(encoding="utf-8") == "const x = 2;"
    assert _tree_json(workspace)["files"]["a.ts"]["file_hash"] == hash_content("const x = 1;")


def test_write_back_replaces_source_and_records_new_hash(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const x = 1;\n"})
    documented = "```typescript\n/** Holds x. */\nconst x = 1;\n```"
    orchestrator = _orchestrator(workspace, RecordingRunner(documented), write_back=True)

    result = orchestrator.process("a.ts")

    expected = "/** Holds x. */\nconst x = 1;"
    assert result.status == GenerationResult.GENERATED
    assert (workspace.root / "a.ts").read_text(encoding="utf-8") == expected
    assert _tree_json(workspace)["files"]["a.ts"]["file_hash"] == hash_content(expected)
    assert orchestrator.process("a.ts").status == GenerationResult.SKIPPED


def test_write_back_can_be_enabled_from_config(workspace: WorkspaceBuilder) -> None:
    workspace.write({".docsync.yml": "write_back: true\n"})
    orchestrator = _orchestrator(workspace, RecordingRunner())
    assert orchestrator.write_back is True
    assert _orchestrator(workspace, RecordingRunner(), write_back=False).write_back is False


def test_absolute_paths_map_to_workspace_keys(workspace: WorkspaceBuilder) -> None:
    workspace.write({"src/app.ts": "export {};\n"})
    orchestrator = _orchestrator(workspace, RecordingRunner())

    result = orchestrator.process(workspace.root / "src" / "app.ts")

    assert result.path == "src/app.ts"
    assert orchestrator.documentation_for("./src/app.ts") is not None


def test_run_generate_with_explicit_paths(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const a = 1;\n", "b.ts": "const b = 2;\n"})
    runner = RecordingRunner()
    orchestrator = _orchestrator(workspace, runner)

    report = orchestrator.run_generate(paths=["b.ts"])

    assert [result.path for result in report.results] == ["b.ts"]
    snapshot = _tree_json(workspace)
    assert set(snapshot["files"]) == {"b.ts"}
    assert snapshot["tree"]["type"] == "directory"


def test_run_generate_all_files_uses_scan_order(workspace: WorkspaceBuilder) -> None:
    workspace.write(
        {
            "src/b.ts": "const b = 2;\n",
            "src/a.ts": "const a = 1;\n",
            "README.md": "# Readme\n",
            "image.png": "not really",
            "node_modules/lib/index.js": "module.exports = {};\n",
        }
    )
    orchestrator = _orchestrator(workspace, RecordingRunner())

    report = orchestrator.run_generate(all_files=True)

    assert [result.path for result in report.results] == ["README.md", "src/a.ts", "src/b.ts"]
    assert report.generated == 3
    rerun = orchestrator.run_generate(all_files=True)
    assert rerun.skipped == 3


def test_run_generate_uses_git_changes_by_default(workspace: WorkspaceBuilder) -> None:
    workspace.write({"src/app.ts": "const app = 1;\n", "logo.png": "png"})
    calls: list[list[str]] = []

    def git(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append(list(args))
        if args[:2] == ["git", "diff"]:
            return "src/app.ts\nlogo.png\nsrc/deleted.ts\n"
        return ""

    orchestrator = _orchestrator(workspace, RecordingRunner(), change_lister=ChangeLister(runner=git))
    report = orchestrator.run_generate(diff_base="main")

    assert [result.path for result in report.results] == ["src/app.ts"]
    assert calls[0] == ["git", "diff", "--name-only", "--relative", "main...HEAD"]


def test_stale_files_reports_new_and_modified(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const a = 1;\n", "b.ts": "const b = 2;\n"})
    orchestrator = _orchestrator(workspace, RecordingRunner())
    orchestrator.process("a.ts")
    orchestrator.process("b.ts")

    workspace.write({"a.ts": "const a = 10;\n", "c.ts": "const c = 3;\n"})

    assert orchestrator.stale_files() == [("a.ts", MODIFIED), ("c.ts", NEW)]


def test_stale_files_without_snapshot_lists_everything(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const a = 1;\n"})
    orchestrator = _orchestrator(workspace, RecordingRunner())

    assert orchestrator.stale_files() == [("a.ts", NEW)]
    assert not (workspace.root / ".docsync").exists()


def test_refresh_index_keeps_recorded_hashes(workspace: WorkspaceBuilder) -> None:
    workspace.write({"a.ts": "const a = 1;\n"})
    orchestrator = _orchestrator(workspace, RecordingRunner())
    orchestrator.process("a.ts")

    workspace.write({"a.ts": "const a = 2;\n", "b.ts": "const b = 1;\n"})
    snapshot = orchestrator.refresh_index()

    assert snapshot.records["a.ts"].file_hash == hash_content("const a = 1;\n")
    assert "b.ts" not in snapshot.records
    assert snapshot.tree is not None
    assert [node.path for node in snapshot.tree.iter_files()] == ["a.ts", "b.ts"]
    assert orchestrator.stale_files() == [("a.ts", MODIFIED), ("b.ts", NEW)]


def test_runner_built_from_config_requires_credentials(
    workspace: WorkspaceBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    for key in ("DOCSYNC_LLM_PROVIDER", "DOCSYNC_LLM_API_KEY", "GOOGLE_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    workspace.write({"a.ts": "const a = 1;\n"})
    orchestrator = Orchestrator(workspace.context(), symbol_extractor=SymbolExtractor(enabled=False))

    with pytest.raises(MissingCredentialsError):
        orchestrator.process("a.ts")


def test_same_named_file_in_another_directory_is_documented(workspace: WorkspaceBuilder) -> None:
    workspace.write({"__init__.py": ""})
    runner = RecordingRunner()
    orchestrator = _orchestrator(workspace, runner)
    orchestrator.process("__init__.py")

    workspace.write({"pkg/__init__.py": ""})
    result = orchestrator.process("pkg/__init__.py")

    assert result.status == GenerationResult.GENERATED
    assert len(runner.calls) == 2
    assert set(_tree_json(workspace)["files"]) == {"__init__.py", "pkg/__init__.py"}
    assert orchestrator.documentation_for("pkg/__init__.py") is not None
    assert orchestrator.process("__init__.py").status == GenerationResult.SKIPPED
