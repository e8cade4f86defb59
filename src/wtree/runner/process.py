"""Async shell process runner with merged, line-aligned output streaming."""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Mapping, Sequence

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


class OutcomeStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """How one command invocation ended."""

    status: OutcomeStatus
    exit_code: int | None = None
    error: str | None = None

    @classmethod
    def pending(cls) -> "RunOutcome":
        return cls(OutcomeStatus.PENDING)

    @classmethod
    def succeeded(cls) -> "RunOutcome":
        return cls(OutcomeStatus.SUCCEEDED, exit_code=0)

    @classmethod
    def failed(cls, error: str, *, exit_code: int | None = None) -> "RunOutcome":
        return cls(OutcomeStatus.FAILED, exit_code=exit_code, error=error)

    @classmethod
    def from_exit_code(cls, code: int) -> "RunOutcome":
        if code == 0:
            return cls.succeeded()
        return cls.failed(f"Command exited with code {code}", exit_code=code)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    @property
    def settled(self) -> bool:
        return self.status is not OutcomeStatus.PENDING

    @property
    def reason(self) -> str | None:
        return self.error


class ProcessRunner:
    """Run a shell command in a directory, streaming stdout and stderr to one callback.

    Output is delivered in chunks that end on a line boundary, except for a
    trailing partial line flushed at EOF or when the buffer fills up.
    Failures to launch, non-zero exits and timeouts are all reported through
    the returned :class:`RunOutcome`; nothing is raised for them.
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        chunk_size: int = 64 * 1024,
    ) -> None:
        self._timeout = timeout
        self._chunk_size = chunk_size

    async def run(self, cwd: str | Path, command: str, on_output: OutputCallback) -> RunOutcome:
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=str(cwd),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            logger.warning("Failed to launch command", extra={"cwd": str(cwd), "error": str(exc)})
            return RunOutcome.failed(str(exc))

        logger.debug("Launched command", extra={"cwd": str(cwd), "pid": process.pid})
        try:
            await asyncio.wait_for(self._drain(process, on_output), timeout=self._timeout)
        except asyncio.TimeoutError:
            self._kill(process)
            await process.wait()
            logger.warning("Command timed out", extra={"cwd": str(cwd), "timeout": self._timeout})
            return RunOutcome.failed(f"Command timed out after {self._timeout:g}s")
        except BaseException:
            self._kill(process)
            await process.wait()
            raise

        returncode = process.returncode if process.returncode is not None else -1
        logger.debug("Command exited", extra={"cwd": str(cwd), "returncode": returncode})
        return RunOutcome.from_exit_code(returncode)

    async def _drain(self, process: asyncio.subprocess.Process, on_output: OutputCallback) -> None:
        assert process.stdout is not None and process.stderr is not None
        await asyncio.gather(
            self._pump(process.stdout, on_output),
            self._pump(process.stderr, on_output),
        )
        await process.wait()

    async def _pump(self, stream: asyncio.StreamReader, on_output: OutputCallback) -> None:
        # Decoder state carries multi-byte characters split across reads or flushes.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        while True:
            data = await stream.read(self._chunk_size)
            if not data:
                break
            pending += decoder.decode(data)
            head, newline, tail = pending.rpartition("\n")
            if newline:
                on_output(head + newline)
                pending = tail
            elif len(pending) >= self._chunk_size:
                on_output(pending)
                pending = ""
        pending += decoder.decode(b"", final=True)
        if pending:
            on_output(pending)

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except OSError:
            try:
                process.kill()
            except ProcessLookupError:
                pass


class FakeProcessRunner(ProcessRunner):
    """Test double that replays scripted output per working directory."""

    def __init__(  # type: ignore[override]
        self,
        scripts: Mapping[str, tuple[Iterable[str], RunOutcome]] | None = None,
    ) -> None:
        super().__init__()
        self._scripts = {str(key): (list(chunks), outcome) for key, (chunks, outcome) in (scripts or {}).items()}
        self._invocations: list[tuple[str, str]] = []

    async def run(self, cwd: str | Path, command: str, on_output: OutputCallback) -> RunOutcome:  # type: ignore[override]
        self._invocations.append((str(cwd), command))
        chunks, outcome = self._scripts.get(str(cwd), ((), RunOutcome.succeeded()))
        for chunk in chunks:
            on_output(chunk)
            await asyncio.sleep(0)
        return outcome

    @property
    def invocations(self) -> Sequence[tuple[str, str]]:
        return list(self._invocations)


__all__ = [
    "FakeProcessRunner",
    "OutcomeStatus",
    "OutputCallback",
    "ProcessRunner",
    "RunOutcome",
]
