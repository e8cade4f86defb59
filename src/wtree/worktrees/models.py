"""Data models for git worktrees."""

from __future__ import annotations

from dataclasses import dataclass, field

DETACHED = "detached"


@dataclass(frozen=True, slots=True)
class WorktreeDirectory:
    """One working copy reported by ``git worktree list``.

    Identity is the path: two records with the same path compare equal even if
    the branch or commit were read at different times.
    """

    path: str
    branch: str = field(default=DETACHED, compare=False)
    commit: str = field(default="", compare=False)

    @property
    def label(self) -> str:
        return f"{self.branch} ({self.path})"


__all__ = ["DETACHED", "WorktreeDirectory"]
