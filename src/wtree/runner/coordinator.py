"""Concurrent execution of one command across many worktrees."""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, field_validator
from rich.console import Console
from rich.text import Text

from ..console import make_console
from ..worktrees import WorktreeDirectory
from .multiplexer import OutputMultiplexer, WorktreeRunResult
from .process import ProcessRunner, RunOutcome
from .summary import RunSummary, print_summary

logger = logging.getLogger(__name__)


class RunRequest(BaseModel):
    """A fully resolved request to run ``command`` in each of ``worktrees``."""

    model_config = ConfigDict(frozen=True)

    worktrees: tuple[InstanceOf[WorktreeDirectory], ...] = Field(
        default=(),
        description="Selected worktrees, in the order their colors are assigned.",
    )
    command: str = Field(..., description="Shell command run in every worktree.")
    route: str | None = Field(default=None, description="Path appended to discovered URLs.")
    verbose: bool = Field(default=False, description="Render every output line, not just important ones.")

    @field_validator("command")
    @classmethod
    def _require_command(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Command cannot be empty")
        return normalized

    @field_validator("route")
    @classmethod
    def _blank_route(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


class RunCoordinator:
    """Launch a command in every selected worktree at once and wait for all of them."""

    def __init__(self, runner: ProcessRunner | None = None, *, console: Console | None = None) -> None:
        self._runner = runner or ProcessRunner()
        self._console = console or make_console()

    async def execute(self, request: RunRequest) -> RunSummary:
        if not request.worktrees:
            self._console.print(Text("No worktrees selected.", style="yellow"))
            return RunSummary(command=request.command, route=request.route)

        self._console.print()
        self._console.print(
            Text(f'🚀 Running "{request.command}" in {len(request.worktrees)} worktree(s)...', style="bold")
        )
        self._console.print()
        logger.info(
            "Starting run",
            extra={"command": request.command, "worktrees": len(request.worktrees), "route": request.route},
        )

        multiplexers = [
            OutputMultiplexer(
                WorktreeRunResult(worktree=worktree),
                index=index,
                console=self._console,
                verbose=request.verbose,
                route=request.route,
            )
            for index, worktree in enumerate(request.worktrees)
        ]
        await asyncio.gather(*(self._run_one(request.command, mux) for mux in multiplexers))

        summary = RunSummary.from_results(
            request.command,
            [mux.result for mux in multiplexers],
            route=request.route,
        )
        logger.info(
            "Run finished",
            extra={"succeeded": len(summary.succeeded), "failed": len(summary.failed), "urls": len(summary.urls)},
        )
        print_summary(summary, self._console)
        return summary

    async def _run_one(self, command: str, mux: OutputMultiplexer) -> None:
        result = mux.result
        try:
            outcome = await self._runner.run(result.worktree.path, command, mux.feed)
        except Exception as exc:
            logger.exception("Worktree run crashed", extra={"path": result.worktree.path})
            outcome = RunOutcome.failed(str(exc) or exc.__class__.__name__)
        result.settle(outcome)

        if not outcome.ok:
            self._console.print(
                Text.assemble(
                    (f"[{result.worktree.branch}]", mux.style),
                    " ",
                    (f"✗ {outcome.reason}", "bold red"),
                ),
                soft_wrap=True,
            )


__all__ = ["RunCoordinator", "RunRequest"]
