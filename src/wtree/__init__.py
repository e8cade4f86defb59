"""Run commands across git worktrees."""

__version__ = "0.1.0"
