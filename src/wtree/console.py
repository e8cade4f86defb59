"""Console construction and the per-worktree color palette."""

from __future__ import annotations

from rich.console import Console

PALETTE = (
    "cyan",
    "yellow",
    "green",
    "magenta",
    "blue",
    "red",
    "bright_black",
    "bright_green",
    "bright_yellow",
    "bright_blue",
    "bright_magenta",
    "bright_cyan",
)


def worktree_style(index: int) -> str:
    """Color assigned to the worktree at ``index`` in the selection list."""

    return PALETTE[index % len(PALETTE)]


def make_console(**kwargs) -> Console:
    kwargs.setdefault("highlight", False)
    return Console(**kwargs)


__all__ = ["PALETTE", "make_console", "worktree_style"]
