"""``waypost stack`` — list registered middleware.

Prints one row per entry, in the order the dispatcher would try them.
"""

import argparse
import re
import sys
from typing import Any

from waypost.cli._resolve import resolve_dispatcher
from waypost.errors import ConfigurationError
from waypost.registry import MiddlewareEntry

_HEADERS = ("KIND", "STOP", "PATH", "CONDITIONS", "HANDLER")


def run_stack(args: argparse.Namespace) -> None:
    """Print the middleware stack of the dispatcher named by ``args.dispatcher``."""
    try:
        dispatcher = resolve_dispatcher(args.dispatcher)
    except (ModuleNotFoundError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    entries = dispatcher.entries
    if not entries:
        print("No middleware registered.")
        return

    rows = [_row(entry) for entry in entries]
    widths = [max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(_HEADERS)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths[:-1]) + "  {}"

    print(fmt.format(*_HEADERS))
    print("-" * min(sum(widths) + 2 * (len(widths) - 1), 80))
    for row in rows:
        print(fmt.format(*row))


def _row(entry: MiddlewareEntry) -> tuple[str, str, str, str, str]:
    path = entry.path or "*"
    if entry.path and not entry.match_to_end:
        path += " (prefix)"
    conditions = ", ".join(f"{key}={_describe(value)}" for key, value in entry.conditions.items())
    return (
        entry.handler.kind.value,
        "yes" if entry.stop_on_match else "no",
        path,
        conditions or "-",
        entry.handler.name,
    )


def _describe(condition: Any) -> str:
    if isinstance(condition, re.Pattern):
        return f"/{condition.pattern}/"
    if callable(condition):
        return getattr(condition, "__qualname__", None) or type(condition).__name__
    return repr(condition)
