"""Concurrent command execution across worktrees."""

from .classify import extract_urls, is_error_line, is_important_line, normalize_route, route_url
from .coordinator import RunCoordinator, RunRequest
from .multiplexer import OutputMultiplexer, WorktreeRunResult
from .process import FakeProcessRunner, OutcomeStatus, ProcessRunner, RunOutcome
from .summary import RunSummary, SummaryEntry, print_summary

__all__ = [
    "FakeProcessRunner",
    "OutcomeStatus",
    "OutputMultiplexer",
    "ProcessRunner",
    "RunCoordinator",
    "RunOutcome",
    "RunRequest",
    "RunSummary",
    "SummaryEntry",
    "WorktreeRunResult",
    "extract_urls",
    "is_error_line",
    "is_important_line",
    "normalize_route",
    "print_summary",
    "route_url",
]
