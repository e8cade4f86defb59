from __future__ import annotations

import io

import pytest
from rich.console import Console

from rich.text import Text

from wtree.console import PALETTE, worktree_style
from wtree.runner.multiplexer import ERROR_STYLE, URL_STYLE, OutputMultiplexer, WorktreeRunResult
from wtree.runner.process import RunOutcome
from wtree.worktrees import WorktreeDirectory


def make_console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=200, color_system=None, highlight=False), buffer


def make_mux(*, verbose: bool = False, route: str | None = None) -> tuple[OutputMultiplexer, io.StringIO]:
    console, buffer = make_console()
    result = WorktreeRunResult(worktree=WorktreeDirectory(path="/wt/feature", branch="feature", commit="abc1234"))
    return OutputMultiplexer(result, index=0, console=console, verbose=verbose, route=route), buffer


def test_quiet_mode_renders_only_important_lines() -> None:
    mux, buffer = make_mux()

    mux.feed("compiling 12 modules\n\nready in 300ms\n")

    lines = buffer.getvalue().splitlines()
    assert lines == ["[feature] ready in 300ms"]


def test_verbose_mode_renders_every_non_blank_line() -> None:
    mux, buffer = make_mux(verbose=True)

    mux.feed("compiling 12 modules\n   \nready in 300ms\n")

    assert buffer.getvalue().splitlines() == [
        "[feature] compiling 12 modules",
        "[feature] ready in 300ms",
    ]


def test_feed_records_raw_output_and_unique_urls() -> None:
    mux, _ = make_mux()

    mux.feed("Local: http://localhost:5173/\n")
    mux.feed("again http://localhost:5173 and localhost:5174\n")

    assert mux.result.raw_output == [
        "Local: http://localhost:5173/\n",
        "again http://localhost:5173 and localhost:5174\n",
    ]
    assert mux.result.urls == ["http://localhost:5173", "http://localhost:5174"]
    assert mux.result.output.startswith("Local:")


def test_route_lines_follow_url_lines() -> None:
    mux, buffer = make_mux(route="pitchdeck/1")

    mux.feed("Server running on http://localhost:3000\n")

    lines = buffer.getvalue().splitlines()
    assert lines[0] == "[feature] Server running on http://localhost:3000"
    assert "Route" in lines[1]
    assert lines[1].endswith("http://localhost:3000/pitchdeck/1")


def test_no_route_lines_without_route() -> None:
    mux, buffer = make_mux()

    mux.feed("Server running on http://localhost:3000\n")

    assert len(buffer.getvalue().splitlines()) == 1


def test_process_text_is_not_treated_as_markup() -> None:
    mux, buffer = make_mux()

    mux.feed("error: unexpected [bold]token[/bold]\n")

    assert "[bold]token[/bold]" in buffer.getvalue()


def test_crlf_lines_are_trimmed() -> None:
    mux, buffer = make_mux(verbose=True)

    mux.feed("line one\r\nline two\r\n")

    assert buffer.getvalue().splitlines() == ["[feature] line one", "[feature] line two"]


def test_settle_happens_once() -> None:
    result = WorktreeRunResult(worktree=WorktreeDirectory(path="/wt/a", branch="a"))

    result.settle(RunOutcome.succeeded())

    assert result.outcome.ok
    with pytest.raises(RuntimeError):
        result.settle(RunOutcome.failed("late"))
    assert result.outcome.ok


def test_settle_rejects_pending() -> None:
    result = WorktreeRunResult(worktree=WorktreeDirectory(path="/wt/a", branch="a"))

    with pytest.raises(ValueError):
        result.settle(RunOutcome.pending())


class RecordingConsole:
    """Collects the renderables passed to ``print`` so their styles can be inspected."""

    def __init__(self) -> None:
        self.printed: list[Text] = []

    def print(self, *objects, **kwargs) -> None:
        self.printed.extend(obj for obj in objects if isinstance(obj, Text))


def styles_at(text: Text, offset: int) -> set[str]:
    return {str(span.style) for span in text.spans if span.start <= offset < span.end}


def make_recording_mux(*, index: int = 0, route: str | None = None) -> tuple[OutputMultiplexer, RecordingConsole]:
    console = RecordingConsole()
    result = WorktreeRunResult(worktree=WorktreeDirectory(path="/wt/feature", branch="feature"))
    mux = OutputMultiplexer(result, index=index, console=console, route=route)  # type: ignore[arg-type]
    return mux, console


BODY = len("[feature] ")


def test_error_url_and_plain_lines_are_styled_differently() -> None:
    mux, console = make_recording_mux()

    mux.feed("npm WARN deprecated package\nLocal: http://localhost:5173\nServer ready\n")

    error_line, url_line, plain_line = console.printed
    assert styles_at(error_line, BODY) == {ERROR_STYLE}
    assert styles_at(url_line, BODY) == {URL_STYLE}
    assert styles_at(plain_line, BODY) == set()
    assert ERROR_STYLE != URL_STYLE


def test_error_line_with_url_is_error_styled_and_keeps_route() -> None:
    mux, console = make_recording_mux(route="/deck")

    mux.feed("error: port in use, retrying on http://localhost:3001\n")

    error_line, route_line = console.printed
    assert styles_at(error_line, BODY) == {ERROR_STYLE}
    assert route_line.plain.endswith("http://localhost:3001/deck")
    assert styles_at(route_line, len(route_line.plain) - 1) == {URL_STYLE}
    assert styles_at(route_line, BODY) == {"dim"}


def test_tag_color_follows_index() -> None:
    for index in (0, 5, 11):
        mux, console = make_recording_mux(index=index)

        mux.feed("ready\n")

        (line,) = console.printed
        assert line.plain == "[feature] ready"
        assert styles_at(line, 0) == {PALETTE[index]}


def test_palette_cycles_after_twelve_colors() -> None:
    assert len(PALETTE) == 12
    assert len(set(PALETTE)) == 12
    assert worktree_style(12) == worktree_style(0)
    assert worktree_style(13) == PALETTE[1]

    mux, console = make_recording_mux(index=12)
    mux.feed("ready\n")
    assert styles_at(console.printed[0], 0) == {PALETTE[0]}
