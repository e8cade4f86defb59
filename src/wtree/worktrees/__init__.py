"""Worktree discovery and maintenance helpers."""

from .git import (
    CopyResult,
    GitError,
    RemovalResult,
    copy_file,
    list_worktrees,
    parse_worktrees,
    remove_worktree,
    sort_by_branch,
)
from .models import DETACHED, WorktreeDirectory

__all__ = [
    "CopyResult",
    "DETACHED",
    "GitError",
    "RemovalResult",
    "WorktreeDirectory",
    "copy_file",
    "list_worktrees",
    "parse_worktrees",
    "remove_worktree",
    "sort_by_branch",
]
