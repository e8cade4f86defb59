"""Command line entry point for wtree."""

from __future__ import annotations

import argparse
import logging

from . import __version__
from .commands import cmd_config, cmd_copy, cmd_list, cmd_remove, cmd_run
from .config import get_settings

EPILOG = """\
examples:
  wtree list
  wtree run --all --command 'pnpm dev'
  wtree run --all -dc                   # use default command
  wtree run --all --command 'pnpm dev' --route /pitchdeck/1
  wtree run --verbose --command 'pnpm build'
  wtree copy --all --file .env
  wtree remove                          # interactive selection
  wtree remove --all                    # remove all (except main)
  wtree config
"""


def configure_logging(level: str) -> None:
    """Configure root logging for the CLI."""

    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wtree",
        description="Git worktree manager: list, run commands in parallel, copy files, remove.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="cmd")

    p_list = sub.add_parser("list", aliases=["ls"], help="List all git worktrees")
    p_list.set_defaults(func=cmd_list)

    p_run = sub.add_parser("run", help="Run a command in selected worktrees")
    p_run.add_argument("-a", "--all", action="store_true", help="Run in all worktrees")
    p_run.add_argument("-c", "--command", help="Command to run")
    p_run.add_argument(
        "-dc",
        "--default-command",
        dest="use_default_command",
        action="store_true",
        help="Use default command from config",
    )
    route_group = p_run.add_mutually_exclusive_group()
    route_group.add_argument(
        "-r",
        "--route",
        help="Show URLs with this route appended (e.g., /pitchdeck/1)",
    )
    route_group.add_argument("--no-route", action="store_true", help="Skip the route prompt")
    p_run.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show all output (default: only URLs, errors and status lines)",
    )
    p_run.set_defaults(func=cmd_run)

    p_copy = sub.add_parser("copy", help="Copy files to selected worktrees")
    p_copy.add_argument("-a", "--all", action="store_true", help="Copy to all worktrees")
    p_copy.add_argument("-f", "--file", help="File to copy, relative to the current directory")
    p_copy.set_defaults(func=cmd_copy)

    p_remove = sub.add_parser("remove", aliases=["rm"], help="Remove selected worktrees")
    p_remove.add_argument("-a", "--all", action="store_true", help="Remove all worktrees (except main)")
    p_remove.set_defaults(func=cmd_remove)

    p_config = sub.add_parser("config", help="Manage saved commands, routes and files")
    p_config.set_defaults(func=cmd_config)

    p_help = sub.add_parser("help", help="Show this help message")
    p_help.set_defaults(func=lambda _args: parser.print_help() or 0)

    return parser


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    try:
        exit_code = args.func(args)
    except KeyboardInterrupt:
        raise SystemExit(130)
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
