"""Interactive selection helpers built on rich prompts."""

from __future__ import annotations

from typing import Iterable, Sequence

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.text import Text

from .worktrees import WorktreeDirectory, sort_by_branch

ALL_TOKENS = {"a", "all", "*"}


def parse_selection(text: str, count: int) -> list[int]:
    """Parse ``"1,3-4"`` style input into sorted zero-based indices.

    ``all`` (or ``a``/``*``) selects everything; an empty string selects nothing.
    Raises ``ValueError`` on malformed or out of range entries.
    """

    cleaned = text.strip().lower()
    if not cleaned:
        return []
    if cleaned in ALL_TOKENS:
        return list(range(count))

    selected: set[int] = set()
    for part in cleaned.replace(" ", ",").split(","):
        if not part:
            continue
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"Invalid range '{part}'")
            numbers = range(start, end + 1)
        else:
            numbers = range(int(part), int(part) + 1)
        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"{number} is not between 1 and {count}")
            selected.add(number - 1)
    return sorted(selected)


def select_worktrees(
    worktrees: Sequence[WorktreeDirectory],
    message: str,
    *,
    console: Console,
    preselected: Iterable[WorktreeDirectory] = (),
) -> list[WorktreeDirectory]:
    """Let the user tick worktrees from a list sorted by branch name."""

    ordered = sort_by_branch(worktrees)
    checked = set(preselected)
    default_numbers = [str(number) for number, wt in enumerate(ordered, start=1) if wt in checked]

    console.print(Text(message, style="bold"))
    for number, worktree in enumerate(ordered, start=1):
        mark = "x" if worktree in checked else " "
        console.print(Text(f"  [{mark}] {number}. {worktree.label}"))

    while True:
        answer = Prompt.ask(
            "Numbers (e.g. 1,3-4), 'all', or empty for none",
            console=console,
            default=",".join(default_numbers),
            show_default=bool(default_numbers),
        )
        try:
            indices = parse_selection(answer, len(ordered))
        except ValueError as exc:
            console.print(Text(str(exc), style="red"))
            continue
        return [ordered[index] for index in indices]


def choose(message: str, options: Sequence[str], *, console: Console) -> str:
    """Pick one entry from ``options`` by number."""

    console.print(Text(message, style="bold"))
    for number, option in enumerate(options, start=1):
        console.print(Text(f"  {number}. {option}"))
    choices = [str(number) for number in range(1, len(options) + 1)]
    answer = Prompt.ask("Choice", console=console, choices=choices, default="1")
    return options[int(answer) - 1]


def ask_text(message: str, *, console: Console, default: str | None = None, empty_error: str | None = None) -> str:
    """Ask for free text; when ``empty_error`` is given, blank answers are rejected with it."""

    while True:
        if default is None:
            answer = Prompt.ask(message, console=console)
        else:
            answer = Prompt.ask(message, console=console, default=default)
        answer = answer.strip()
        if answer or empty_error is None:
            return answer
        console.print(Text(empty_error, style="red"))


def confirm(message: str, *, console: Console, default: bool = False) -> bool:
    return Confirm.ask(message, console=console, default=default)


__all__ = ["ask_text", "choose", "confirm", "parse_selection", "select_worktrees"]
