"""Waypost CLI — inspect a dispatcher's middleware stack.

Entry point registered as ``waypost`` in ``pyproject.toml``::

    [project.scripts]
    waypost = "waypost.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waypost`` command."""
    parser = argparse.ArgumentParser(
        prog="waypost",
        description="Waypost — a transport-agnostic middleware dispatcher.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- waypost stack ----------------------------------------------------
    stack_parser = subparsers.add_parser("stack", help="List registered middleware")
    stack_parser.add_argument(
        "dispatcher",
        help="Import string (e.g. myapp:dispatcher)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "stack":
        from waypost.cli._stack import run_stack

        run_stack(args)
