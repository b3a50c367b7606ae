"""Changed-file discovery through git."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List

from ..logging import get_logger

Runner = Callable[..., str]


class ChangeLister:
    """Lists workspace-relative paths that git reports as changed."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("git")

    def list_changed_files(self, repo_path: str | Path, diff_base: str | None = None) -> List[str]:
        """Return committed-since-base plus uncommitted and untracked paths.

        Paths are relative to ``repo_path`` and listed once each, committed
        changes first. Without ``diff_base`` only the working tree is compared
        against HEAD.
        """
        repo = Path(repo_path)
        args = ["git", "diff", "--name-only", "--relative"]
        if diff_base:
            args.append(f"{diff_base}...HEAD")
        else:
            args.append("HEAD")
        try:
            output = self._run(args, cwd=repo)
            status = self._run(["git", "status", "--short", "--untracked-files=all"], cwd=repo)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise RuntimeError(f"{repo} is not a usable git repository: {exc}") from exc

        files: List[str] = []
        for line in output.splitlines():
            path = line.strip()
            if path and path not in files:
                files.append(path)
        for line in status.splitlines():
            path = _status_path(line)
            if path and not path.startswith("../") and path not in files:
                files.append(path)
        self.logger.debug("git reports %d changed file(s)", len(files))
        return files

    def _run(self, args: Iterable[str], *, cwd: Path) -> str:
        return self._runner(args, cwd=cwd, capture_output=True)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def _status_path(line: str) -> str:
    if len(line) < 4:
        return ""
    code, rest = line[:2], line[3:].strip()
    if "D" in code:
        return ""
    if " -> " in rest:
        rest = rest.split(" -> ", 1)[1]
    if rest.startswith('"') and rest.endswith('"'):
        rest = rest[1:-1]
    return rest


__all__ = ["ChangeLister"]
