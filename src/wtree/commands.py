"""Subcommand implementations for the wtree CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from rich.console import Console
from rich.text import Text

from .config import WtreeSettings, get_settings
from .console import make_console
from .preferences import PreferenceLoadError, Preferences, PreferenceStore
from .prompts import ask_text, choose, confirm, select_worktrees
from .runner import ProcessRunner, RunCoordinator, RunRequest, RunSummary
from .worktrees import GitError, WorktreeDirectory, copy_file, list_worktrees, remove_worktree

logger = logging.getLogger(__name__)

CUSTOM_COMMAND = "Enter custom command..."
CUSTOM_ROUTE = "Enter custom route..."
CUSTOM_FILE = "Enter custom file path..."
NO_ROUTE = "No route"
DEFAULT_SUFFIX = " (default)"


def _settings(args: argparse.Namespace) -> WtreeSettings:
    return getattr(args, "settings", None) or get_settings()


def _console(args: argparse.Namespace) -> Console:
    return getattr(args, "console", None) or make_console()


def _cwd(args: argparse.Namespace) -> Path:
    return Path(getattr(args, "cwd", None) or Path.cwd())


def _load_worktrees(cwd: Path, settings: WtreeSettings, console: Console, action: str) -> list[WorktreeDirectory]:
    try:
        return list_worktrees(cwd, git=settings.git_executable)
    except GitError as exc:
        console.print(Text(f"Error {action}: {exc}", style="red"))
        raise SystemExit(1)


def _load_preferences(store: PreferenceStore, console: Console) -> Preferences:
    try:
        return store.load()
    except PreferenceLoadError as exc:
        logger.warning("Ignoring unreadable preference file", extra={"error": str(exc)})
        console.print(Text("Warning: Could not parse config file", style="yellow"))
        return Preferences()


def _menu_with_default(saved: list[str], default: str | None) -> dict[str, str]:
    """Map menu labels to values, listing the default first."""

    options: dict[str, str] = {}
    if default:
        options[f"{default}{DEFAULT_SUFFIX}"] = default
    for value in saved:
        if value != default:
            options[value] = value
    return options


def cmd_list(args: argparse.Namespace) -> int:
    console = _console(args)
    worktrees = _load_worktrees(_cwd(args), _settings(args), console, "listing worktrees")
    if not worktrees:
        console.print(Text("No worktrees found.", style="yellow"))
        return 0

    console.print()
    console.print(Text("📁 Git Worktrees:", style="bold"))
    console.print()
    for number, worktree in enumerate(worktrees, start=1):
        console.print(Text(f"{number}. {worktree.branch}", style="blue"))
        console.print(Text(f"   Path: {worktree.path}", style="bright_black"))
        console.print(Text(f"   Commit: {worktree.commit}", style="bright_black"))
        console.print()
    return 0


def _resolve_command(
    args: argparse.Namespace,
    preferences: Preferences,
    store: PreferenceStore,
    console: Console,
) -> str:
    command = args.command
    if args.use_default_command and preferences.default_command:
        command = preferences.default_command
        console.print(Text(f"Using default command: {command}", style="bright_black"))
    if command:
        return command

    options = _menu_with_default(preferences.saved_commands, preferences.default_command)
    choice = choose("Select or enter command to run:", [*options, CUSTOM_COMMAND], console=console)
    if choice != CUSTOM_COMMAND:
        return options[choice]

    command = ask_text("Enter command to run", console=console, empty_error="Command cannot be empty")
    if confirm("Save this command for future use?", console=console):
        as_default = confirm("Set as default command?", console=console)
        store.remember_command(preferences, command, default=as_default)
        console.print(Text("✓ Command saved", style="green"))
    return command


def _resolve_route(
    args: argparse.Namespace,
    preferences: Preferences,
    store: PreferenceStore,
    console: Console,
) -> str | None:
    if args.route:
        return args.route
    if args.no_route:
        return None

    options = _menu_with_default(preferences.saved_routes, preferences.default_route)
    choice = choose(
        "Select a route to append to URLs (optional):",
        [*options, NO_ROUTE, CUSTOM_ROUTE],
        console=console,
    )
    if choice == NO_ROUTE:
        return None
    if choice != CUSTOM_ROUTE:
        return options[choice]

    route = ask_text("Enter route (e.g., /pitchdeck/1)", console=console, empty_error="Route cannot be empty")
    if confirm("Save this route for future use?", console=console):
        as_default = confirm("Set as default route?", console=console)
        store.remember_route(preferences, route, default=as_default)
        console.print(Text("✓ Route saved", style="green"))
    return route


def cmd_run(args: argparse.Namespace) -> int:
    settings = _settings(args)
    console = _console(args)
    cwd = _cwd(args)
    store = PreferenceStore(cwd, settings.config_file)
    preferences = _load_preferences(store, console)

    worktrees = _load_worktrees(cwd, settings, console, "running command")
    if not worktrees:
        console.print(Text("No worktrees found.", style="yellow"))
        return 0

    if args.all:
        selected = worktrees
    else:
        selected = select_worktrees(worktrees, "Select worktrees to run command in:", console=console)
    if not selected:
        console.print(Text("No worktrees selected.", style="yellow"))
        return 0

    command = _resolve_command(args, preferences, store, console)
    route = _resolve_route(args, preferences, store, console)

    request = RunRequest(worktrees=tuple(selected), command=command, route=route, verbose=args.verbose)
    coordinator = RunCoordinator(ProcessRunner(timeout=settings.run_timeout), console=console)
    summary: RunSummary = asyncio.run(coordinator.execute(request))
    if summary.failed:
        logger.info("Some worktrees failed", extra={"failed": [entry.worktree.path for entry in summary.failed]})
    return 0


def _resolve_file(
    args: argparse.Namespace,
    cwd: Path,
    preferences: Preferences,
    store: PreferenceStore,
    console: Console,
) -> str:
    if args.file:
        return args.file

    choice = choose("Select file to copy:", [*preferences.files_to_copy, CUSTOM_FILE], console=console)
    if choice != CUSTOM_FILE:
        return choice

    while True:
        relative = ask_text("Enter file path to copy", console=console, empty_error="File path cannot be empty")
        if (cwd / relative).is_file():
            break
        console.print(Text(f"File {relative} not found", style="red"))

    if confirm("Remember this file for future copying?", console=console):
        store.remember_file(preferences, relative)
        console.print(Text("✓ File saved to config", style="green"))
    return relative


def cmd_copy(args: argparse.Namespace) -> int:
    settings = _settings(args)
    console = _console(args)
    cwd = _cwd(args)
    store = PreferenceStore(cwd, settings.config_file)
    preferences = _load_preferences(store, console)

    worktrees = _load_worktrees(cwd, settings, console, "copying files")
    if not worktrees:
        console.print(Text("No worktrees found.", style="yellow"))
        return 0

    if args.all:
        selected = worktrees
    else:
        others = [wt for wt in worktrees if Path(wt.path).resolve() != cwd.resolve()]
        selected = select_worktrees(
            worktrees,
            "Select worktrees to copy file to:",
            console=console,
            preselected=others,
        )
    if not selected:
        console.print(Text("No worktrees selected.", style="yellow"))
        return 0

    relative = _resolve_file(args, cwd, preferences, store, console)
    if not (cwd / relative).is_file():
        console.print(Text(f"File {relative} not found", style="red"))
        return 1

    console.print()
    console.print(Text(f"📋 Copying {relative} to {len(selected)} worktree(s)...", style="bold"))
    console.print()
    for result in copy_file(cwd, relative, selected):
        if result.ok:
            console.print(Text(f"✓ {result.worktree.branch}: {relative} copied", style="green"))
        else:
            console.print(Text(f"✗ {result.worktree.branch}: Failed to copy - {result.error}", style="red"))

    console.print()
    console.print(Text("✨ Done!", style="bold green"))
    console.print()
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    settings = _settings(args)
    console = _console(args)
    cwd = _cwd(args)

    worktrees = _load_worktrees(cwd, settings, console, "removing worktrees")
    if not worktrees:
        console.print(Text("No worktrees found.", style="yellow"))
        return 0

    # The first entry is the main worktree and is never removed.
    removable = worktrees[1:]
    if not removable:
        console.print(Text("Only the main worktree exists. Nothing to remove.", style="yellow"))
        return 0

    if args.all:
        to_remove = removable
        prompt = f"Are you sure you want to remove ALL {len(to_remove)} worktree(s)? This cannot be undone!"
    else:
        to_remove = select_worktrees(removable, "Select worktrees to remove:", console=console)
        if not to_remove:
            console.print(Text("No worktrees selected.", style="yellow"))
            return 0
        prompt = f"Are you sure you want to remove {len(to_remove)} worktree(s)? This cannot be undone!"

    if not confirm(prompt, console=console):
        console.print(Text("Cancelled.", style="bright_black"))
        return 0

    console.print()
    console.print(Text(f"🗑️  Removing {len(to_remove)} worktree(s)...", style="bold"))
    console.print()
    for worktree in to_remove:
        result = remove_worktree(worktree, cwd=cwd, git=settings.git_executable)
        if not result.removed:
            console.print(Text(f"✗ Failed to remove: {worktree.branch} - {result.error}", style="red"))
        elif result.forced:
            console.print(Text(f"⚠ Force removed: {worktree.label}", style="yellow"))
        else:
            console.print(Text(f"✓ Removed: {worktree.label}", style="green"))

    console.print()
    console.print(Text("✨ Done!", style="bold green"))
    console.print()
    return 0


CONFIG_ACTIONS = (
    "View current configuration",
    "Set default command",
    "Add saved command",
    "Set default route",
    "Add saved route",
    "Add file to copy list",
    "Clear configuration",
)


def cmd_config(args: argparse.Namespace) -> int:
    settings = _settings(args)
    console = _console(args)
    store = PreferenceStore(_cwd(args), settings.config_file)
    preferences = _load_preferences(store, console)

    action = choose("What would you like to do?", CONFIG_ACTIONS, console=console)

    if action == "View current configuration":
        console.print()
        console.print(Text("📝 Current Configuration:", style="bold"))
        console.print()
        console.print(Text(json.dumps(preferences.model_dump(by_alias=True, exclude_none=True), indent=2)))
        console.print()
    elif action == "Set default command":
        value = ask_text("Enter default command", console=console, default=preferences.default_command or "")
        preferences.default_command = value or None
        store.save(preferences)
        console.print(Text("✓ Default command updated", style="green"))
    elif action == "Add saved command":
        value = ask_text("Enter command to save", console=console, empty_error="Command cannot be empty")
        store.remember_command(preferences, value)
        console.print(Text("✓ Command added", style="green"))
    elif action == "Set default route":
        value = ask_text(
            "Enter default route (e.g., /pitchdeck/1)",
            console=console,
            default=preferences.default_route or "",
        )
        preferences.default_route = value or None
        store.save(preferences)
        console.print(Text("✓ Default route updated", style="green"))
    elif action == "Add saved route":
        value = ask_text("Enter route to save (e.g., /pitchdeck/1)", console=console, empty_error="Route cannot be empty")
        store.remember_route(preferences, value)
        console.print(Text("✓ Route added", style="green"))
    elif action == "Add file to copy list":
        value = ask_text("Enter file path", console=console, default=".env")
        if value:
            store.remember_file(preferences, value)
        console.print(Text("✓ File added", style="green"))
    elif action == "Clear configuration":
        if confirm("Are you sure you want to clear all configuration?", console=console):
            store.clear()
            console.print(Text("✓ Configuration cleared", style="green"))
    return 0


__all__ = ["cmd_config", "cmd_copy", "cmd_list", "cmd_remove", "cmd_run"]
