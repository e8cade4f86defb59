"""Read-only run summary built once every worktree has settled."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rich.console import Console
from rich.text import Text

from ..console import worktree_style
from ..worktrees import WorktreeDirectory
from .classify import route_url
from .multiplexer import WorktreeRunResult
from .process import RunOutcome


@dataclass(frozen=True, slots=True)
class SummaryEntry:
    index: int
    worktree: WorktreeDirectory
    outcome: RunOutcome
    urls: tuple[str, ...] = ()
    route: str | None = None

    @property
    def route_urls(self) -> tuple[str, ...]:
        if not self.route:
            return ()
        return tuple(route_url(url, self.route) for url in self.urls)


@dataclass(frozen=True, slots=True)
class RunSummary:
    command: str
    entries: tuple[SummaryEntry, ...] = ()
    urls: tuple[str, ...] = ()
    route: str | None = None

    @classmethod
    def from_results(
        cls,
        command: str,
        results: Sequence[WorktreeRunResult],
        *,
        route: str | None = None,
    ) -> "RunSummary":
        entries = tuple(
            SummaryEntry(
                index=index,
                worktree=result.worktree,
                outcome=result.outcome,
                urls=tuple(result.urls),
                route=route,
            )
            for index, result in enumerate(results)
        )
        urls = tuple(dict.fromkeys(url for entry in entries for url in entry.urls))
        return cls(command=command, entries=entries, urls=urls, route=route)

    @property
    def succeeded(self) -> list[SummaryEntry]:
        return [entry for entry in self.entries if entry.outcome.ok]

    @property
    def failed(self) -> list[SummaryEntry]:
        return [entry for entry in self.entries if not entry.outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def route_urls(self) -> tuple[str, ...]:
        if not self.route:
            return ()
        return tuple(route_url(url, self.route) for url in self.urls)


def print_summary(summary: RunSummary, console: Console) -> None:
    """Render per-worktree status blocks followed by the combined service list."""

    if not summary.entries:
        return

    console.print()
    console.print(Text("📊 Summary:", style="bold"))
    console.print()

    for entry in summary.entries:
        glyph = ("✓", "green") if entry.outcome.ok else ("✗", "red")
        console.print(
            Text.assemble(glyph, " ", (entry.worktree.branch, worktree_style(entry.index)), f" ({entry.worktree.path})")
        )
        for url in entry.urls:
            console.print(Text.assemble("  ", ("→", "bright_black"), " ", (url, "underline")))
            if summary.route:
                console.print(
                    Text.assemble("    ", ("Route:", "bright_black"), " ", (route_url(url, summary.route), "underline"))
                )
        if not entry.outcome.ok:
            console.print(Text.assemble("  ", ("Error:", "red"), " ", entry.outcome.reason or "unknown error"))
        console.print()

    if summary.urls:
        console.print(Text("🌐 All running services:", style="bold green"))
        console.print()
        for url in summary.urls:
            console.print(Text.assemble("  ", ("•", "cyan"), " ", (url, "underline")))
            if summary.route:
                console.print(
                    Text.assemble("    ", ("Route:", "bright_black"), " ", (route_url(url, summary.route), "underline"))
                )
        console.print()


__all__ = ["RunSummary", "SummaryEntry", "print_summary"]
