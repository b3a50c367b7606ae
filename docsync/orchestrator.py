"""Pipeline orchestration for documentation generation runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from .analyzers import SymbolExtractor
from .config import DocSyncContext
from .detector import UNCHANGED, ChangeDetector
from .errors import IOFailure, NotFoundError
from .git.diff import ChangeLister
from .hashing import hash_content, hash_file, read_text
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import BatchReport, DocumentationArtifact, GenerationResult, Snapshot
from .postproc.fences import strip_code_fences
from .postproc.summary import derive_summary
from .prompting.builder import PromptBuilder
from .scanner import ScanResult, WorkspaceScanner
from .stores import DocumentationCache, TreeSnapshotStore, WorkspaceLock
from .stores.atomic import write_text_atomic


class TextGenerator(Protocol):
    def run(self, prompt: str, *, system: str | None = None) -> str: ...


class Orchestrator:
    """Decides which files need documentation and drives their regeneration."""

    def __init__(
        self,
        context: DocSyncContext,
        *,
        runner: TextGenerator | None = None,
        prompt_builder: PromptBuilder | None = None,
        scanner: WorkspaceScanner | None = None,
        change_lister: ChangeLister | None = None,
        symbol_extractor: SymbolExtractor | None = None,
        write_back: Optional[bool] = None,
    ) -> None:
        self.context = context
        self.snapshot_store = TreeSnapshotStore(context.root, context.tree_path)
        self.doc_cache = DocumentationCache(context.root, context.docs_path)
        self.detector = ChangeDetector(self.snapshot_store)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.change_lister = change_lister or ChangeLister()
        self.symbols = symbol_extractor or SymbolExtractor()
        self.scanner = scanner or WorkspaceScanner(
            context.config, symbol_source=self.symbols.symbol_names
        )
        self.lock = WorkspaceLock(context.lock_path)
        self.write_back = context.config.write_back if write_back is None else write_back
        self.logger = get_logger("orchestrator")
        self._runner = runner

    @property
    def runner(self) -> TextGenerator:
        """Generation collaborator, built from config on first use."""
        if self._runner is None:
            self._runner = LLMRunner.from_config(self.context.config.llm)
        return self._runner

    # ------------------------------------------------------------------
    # Single file

    def process(self, file_path: str | Path) -> GenerationResult:
        """Regenerate documentation for one file when its content is stale.

        Failures reading the file or calling the model return a failed result
        and leave both stores untouched. A corrupt snapshot propagates.
        """
        key = self.snapshot_store.relative_key(file_path)
        absolute = self.context.root / key

        try:
            content = read_text(absolute)
        except (OSError, UnicodeDecodeError) as exc:
            return self._failed(key, f"Unable to read {key}: {exc}")

        try:
            snapshot = self._load_snapshot()
        except IOFailure as exc:
            return self._failed(key, str(exc))

        if not self.detector.is_stale(key, content, snapshot):
            self.logger.debug("Skipping %s; documentation is current", key)
            return GenerationResult.skipped(key)

        request = self.prompt_builder.build(key, content)
        runner = self.runner
        self.logger.info("Generating documentation for %s (%s)", key, request.file_type.value)
        try:
            response = runner.run(request.prompt, system=request.system)
        except Exception as exc:  # any collaborator failure is per-file
            return self._failed(key, f"Generation failed: {exc}")

        processed = strip_code_fences(response or "")
        if not processed.strip():
            return self._failed(key, "Generation returned no usable text")

        symbols = self._record_symbols(snapshot, key)
        artifact = DocumentationArtifact(
            path=key,
            content=processed,
            summary=derive_summary(processed, request.file_type, key, symbols),
            type=request.file_type.value,
            hash=hash_content(processed if self.write_back else content),
        )

        try:
            self._commit(key, absolute, content, artifact)
        except IOFailure as exc:
            return self._failed(key, str(exc))
        return GenerationResult.generated(key, artifact)

    def _commit(
        self, key: str, absolute: Path, content: str, artifact: DocumentationArtifact
    ) -> None:
        with self.lock:
            try:
                on_disk = hash_file(absolute)
            except (OSError, UnicodeDecodeError) as exc:
                raise IOFailure(f"Unable to re-read {key}: {exc}") from exc
            if on_disk != hash_content(content):
                raise IOFailure(f"{key} changed while documentation was generated; rerun to refresh it")

            previous = self.doc_cache.get(key)
            self.doc_cache.put(key, artifact)
            persisted = rewritten = False
            try:
                self.doc_cache.persist()
                persisted = True
                if self.write_back:
                    write_text_atomic(absolute, artifact.content)
                    rewritten = True
                self.snapshot_store.update_hashes([key])
            except IOFailure:
                self._rollback(key, absolute, content, previous, persisted=persisted, rewritten=rewritten)
                raise

    def _rollback(
        self,
        key: str,
        absolute: Path,
        content: str,
        previous: Optional[DocumentationArtifact],
        *,
        persisted: bool,
        rewritten: bool,
    ) -> None:
        """Undo a half-finished commit so neither store records the new artifact."""
        if previous is None:
            self.doc_cache.documentation.files.pop(key, None)
        else:
            self.doc_cache.put(key, previous)
        if persisted:
            try:
                self.doc_cache.persist()
            except IOFailure as exc:
                self.logger.error("Unable to roll back documentation for %s: %s", key, exc)
        if rewritten:
            try:
                write_text_atomic(absolute, content)
            except IOFailure as exc:
                self.logger.error("Unable to restore the original source of %s: %s", key, exc)

    def _load_snapshot(self) -> Optional[Snapshot]:
        try:
            return self.snapshot_store.load()
        except NotFoundError:
            return None

    def _record_symbols(self, snapshot: Optional[Snapshot], key: str) -> List[str]:
        if snapshot is None:
            return []
        record = self.snapshot_store.find_record(snapshot, key)
        return list(record.symbols) if record is not None else []

    def _failed(self, key: str, reason: str) -> GenerationResult:
        self.logger.warning("Failed to document %s: %s", key, reason)
        return GenerationResult.failed(key, reason)

    # ------------------------------------------------------------------
    # Batches

    def process_batch(self, paths: Iterable[str | Path]) -> BatchReport:
        """Process paths sequentially in the given order, continuing past per-file failures."""
        report = BatchReport()
        with self.lock:
            for path in paths:
                result = self.process(path)
                report.results.append(result)
        self.logger.info(report.summary_line())
        return report

    def run_generate(
        self,
        *,
        diff_base: str | None = None,
        all_files: bool = False,
        paths: Sequence[str] | None = None,
    ) -> BatchReport:
        """Refresh the tree snapshot, pick candidates, and document the stale ones."""
        with self.lock:
            scan = self.scanner.scan()
            self.refresh_index(scan)
            if paths:
                candidates = list(paths)
            elif all_files:
                candidates = list(scan.files)
            else:
                candidates = self.changed_files(diff_base)
            self.logger.info("Considering %d candidate file(s)", len(candidates))
            return self.process_batch(candidates)

    def changed_files(self, diff_base: str | None = None) -> List[str]:
        changed = self.change_lister.list_changed_files(self.context.root, diff_base)
        candidates = [
            path
            for path in changed
            if self.scanner.is_supported(path) and (self.context.root / path).is_file()
        ]
        if self.logger.isEnabledFor(logging.DEBUG):
            skipped = sorted(set(changed) - set(candidates))
            if skipped:
                self.logger.debug("Ignoring unsupported or deleted paths: %s", ", ".join(skipped))
        return candidates

    def candidate_files(self) -> List[str]:
        return self.scanner.scan().files

    def refresh_index(self, scan: ScanResult | None = None) -> Snapshot:
        """Rebuild the snapshot's tree metadata without touching recorded hashes."""
        with self.lock:
            snapshot = self.snapshot_store.refresh_tree(scan or self.scanner.scan())
        self.logger.debug("Snapshot tree refreshed with %d tracked record(s)", len(snapshot.records))
        return snapshot

    # ------------------------------------------------------------------
    # Read-only views

    def stale_files(self, paths: Iterable[str] | None = None) -> List[Tuple[str, str]]:
        """Classify candidates as new/modified without generating anything."""
        snapshot = self._load_snapshot()
        candidates = list(paths) if paths is not None else self.candidate_files()
        stale: List[Tuple[str, str]] = []
        for path in candidates:
            key = self.snapshot_store.relative_key(path)
            try:
                content = read_text(self.context.root / key)
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.warning("Unable to read %s: %s", key, exc)
                continue
            state = self.detector.classify(key, content, snapshot)
            if state != UNCHANGED:
                stale.append((key, state))
        return stale

    def documentation_for(self, path: str | Path) -> Optional[DocumentationArtifact]:
        return self.doc_cache.get(self.snapshot_store.relative_key(path))


__all__ = ["Orchestrator", "TextGenerator"]
