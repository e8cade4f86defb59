"""Git worktree enumeration, removal and file copying."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .models import DETACHED, WorktreeDirectory

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when a git invocation fails."""


def _run_git(args: Sequence[str], *, cwd: str | Path | None = None, git: str = "git") -> str:
    try:
        result = subprocess.run(
            [git, *args],
            cwd=cwd,
            check=True,
            text=True,
            capture_output=True,
        )
    except FileNotFoundError as exc:
        raise GitError(f"{git} executable not found") from exc
    except subprocess.CalledProcessError as exc:
        message = (exc.stderr or exc.stdout or "").strip() or f"git exited with code {exc.returncode}"
        raise GitError(message) from exc
    return result.stdout


def parse_worktrees(output: str) -> list[WorktreeDirectory]:
    """Parse ``git worktree list --porcelain`` output."""

    worktrees: list[WorktreeDirectory] = []
    block: dict[str, str] = {}

    def flush() -> None:
        if "worktree" in block:
            worktrees.append(
                WorktreeDirectory(
                    path=block["worktree"],
                    branch=block.get("branch", DETACHED),
                    commit=block.get("HEAD", "")[:7],
                )
            )
        block.clear()

    for line in output.splitlines():
        if line.startswith("worktree "):
            flush()
            block["worktree"] = line[len("worktree ") :]
        elif line.startswith("HEAD "):
            block["HEAD"] = line[len("HEAD ") :].strip()
        elif line.startswith("branch "):
            block["branch"] = line[len("branch ") :].strip().removeprefix("refs/heads/")
    flush()
    return worktrees


def list_worktrees(cwd: str | Path | None = None, *, git: str = "git") -> list[WorktreeDirectory]:
    """Return every worktree of the repository containing ``cwd``."""

    output = _run_git(["worktree", "list", "--porcelain"], cwd=cwd, git=git)
    worktrees = parse_worktrees(output)
    logger.debug("Listed worktrees", extra={"count": len(worktrees)})
    return worktrees


def sort_by_branch(worktrees: Iterable[WorktreeDirectory]) -> list[WorktreeDirectory]:
    return sorted(worktrees, key=lambda wt: wt.branch.lower())


@dataclass(slots=True)
class RemovalResult:
    worktree: WorktreeDirectory
    removed: bool
    forced: bool = False
    error: str | None = None


def remove_worktree(
    worktree: WorktreeDirectory,
    *,
    cwd: str | Path | None = None,
    git: str = "git",
) -> RemovalResult:
    """Remove a worktree, retrying with ``--force`` when the plain remove fails."""

    try:
        _run_git(["worktree", "remove", worktree.path], cwd=cwd, git=git)
        return RemovalResult(worktree=worktree, removed=True)
    except GitError as exc:
        first_error = str(exc)

    logger.info("Plain remove failed, forcing", extra={"path": worktree.path, "error": first_error})
    try:
        _run_git(["worktree", "remove", "--force", worktree.path], cwd=cwd, git=git)
    except GitError:
        return RemovalResult(worktree=worktree, removed=False, error=first_error)
    return RemovalResult(worktree=worktree, removed=True, forced=True)


@dataclass(slots=True)
class CopyResult:
    worktree: WorktreeDirectory
    destination: Path
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def copy_file(
    source_root: str | Path,
    relative_path: str,
    worktrees: Iterable[WorktreeDirectory],
) -> list[CopyResult]:
    """Copy ``source_root/relative_path`` to the same relative path in each worktree."""

    source = Path(source_root) / relative_path
    if not source.is_file():
        raise FileNotFoundError(f"File {relative_path} not found")

    results: list[CopyResult] = []
    for worktree in worktrees:
        destination = Path(worktree.path) / relative_path
        try:
            if destination.resolve() == source.resolve():
                results.append(CopyResult(worktree=worktree, destination=destination))
                continue
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as exc:
            results.append(CopyResult(worktree=worktree, destination=destination, error=str(exc)))
            continue
        results.append(CopyResult(worktree=worktree, destination=destination))
    return results


__all__ = [
    "CopyResult",
    "GitError",
    "RemovalResult",
    "copy_file",
    "list_worktrees",
    "parse_worktrees",
    "remove_worktree",
    "sort_by_branch",
]
