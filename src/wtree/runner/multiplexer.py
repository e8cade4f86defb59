"""Per-worktree output handling: URL collection, filtering and tagged rendering."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console
from rich.text import Text

from ..console import worktree_style
from ..worktrees import WorktreeDirectory
from .classify import extract_urls, is_error_line, is_important_line, route_url
from .process import RunOutcome

ERROR_STYLE = "red"
URL_STYLE = "green"
ROUTE_MARKER = "┃ Route  "


@dataclass(slots=True)
class WorktreeRunResult:
    """Mutable state accumulated while a worktree's command runs."""

    worktree: WorktreeDirectory
    urls: list[str] = field(default_factory=list)
    raw_output: list[str] = field(default_factory=list)
    outcome: RunOutcome = field(default_factory=RunOutcome.pending)

    def add_urls(self, urls: list[str]) -> list[str]:
        """Record ``urls`` and return the ones not seen before."""

        added = [url for url in urls if url not in self.urls]
        self.urls.extend(added)
        return added

    def settle(self, outcome: RunOutcome) -> None:
        if self.outcome.settled:
            raise RuntimeError(f"Result for {self.worktree.path} already settled as {self.outcome.status.value}")
        if not outcome.settled:
            raise ValueError("Cannot settle a result with a pending outcome")
        self.outcome = outcome

    @property
    def output(self) -> str:
        return "".join(self.raw_output)


class OutputMultiplexer:
    """Feeds one worktree's output chunks into its result and onto the console."""

    def __init__(
        self,
        result: WorktreeRunResult,
        *,
        index: int,
        console: Console,
        verbose: bool = False,
        route: str | None = None,
    ) -> None:
        self._result = result
        self._console = console
        self._verbose = verbose
        self._route = route
        self._style = worktree_style(index)
        self._prefix = f"[{result.worktree.branch}]"

    @property
    def result(self) -> WorktreeRunResult:
        return self._result

    @property
    def style(self) -> str:
        return self._style

    def feed(self, chunk: str) -> None:
        self._result.raw_output.append(chunk)
        self._result.add_urls(extract_urls(chunk))

        for line in chunk.split("\n"):
            line = line.rstrip("\r")
            stripped = line.strip()
            if not stripped:
                continue
            if self._verbose or is_important_line(stripped):
                self._render(line, stripped)

    def _render(self, line: str, stripped: str) -> None:
        urls = extract_urls(stripped)
        if is_error_line(stripped):
            self._emit(Text(line, style=ERROR_STYLE))
        elif urls:
            self._emit(Text(line, style=URL_STYLE))
        else:
            self._emit(Text(line))

        if urls and self._route:
            for url in urls:
                self._emit(
                    Text.assemble((ROUTE_MARKER, "dim"), " ", (route_url(url, self._route), URL_STYLE))
                )

    def _emit(self, body: Text) -> None:
        # One print call per line keeps concurrent worktrees from interleaving mid-line.
        self._console.print(Text.assemble((self._prefix, self._style), " ", body), soft_wrap=True)


__all__ = ["OutputMultiplexer", "WorktreeRunResult"]
