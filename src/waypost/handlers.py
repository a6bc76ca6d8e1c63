"""Handler kinds: the calling conventions a middleware can use.

Every registered callable is wrapped in a :class:`Handler` that records
how the dispatcher must call it:

    BASIC  -- ``handler(input, output)``; never receives control back,
              so the chain stops once it succeeds.
    NEXT   -- ``handler(input, output, next)``; may steer the chain.
    ERROR  -- ``handler(error, input, output, next)``; only runs when an
              error is pending.

The kind is picked explicitly with :func:`basic`, :func:`with_next` and
:func:`on_error`, or inferred from the callable's positional parameters.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from waypost.errors import ConfigurationError
from waypost.protocol import BasicHandler, ErrorHandler, NextHandler


class HandlerKind(Enum):
    BASIC = "basic"
    NEXT = "next"
    ERROR = "error"


# Positional argument count for each kind
_KIND_ARITY: dict[HandlerKind, int] = {
    HandlerKind.BASIC: 2,
    HandlerKind.NEXT: 3,
    HandlerKind.ERROR: 4,
}


@dataclass(frozen=True, slots=True)
class Handler:
    """A middleware callable tagged with its calling convention.

    ``arity`` is the number of leading arguments actually passed. It only
    differs from the kind's default for BASIC callables declaring fewer
    than two parameters (``lambda request: ...``).
    """

    fn: Callable[..., Any]
    kind: HandlerKind
    arity: int

    @classmethod
    def of(cls, fn: Any, kind: HandlerKind | None = None) -> Handler:
        """Wrap *fn*, inferring its kind from the signature when not given.

        Raises ``ConfigurationError`` if *fn* is not callable, or needs more
        positional arguments than its kind is called with.
        """
        if isinstance(fn, Handler):
            if kind is None or kind is fn.kind:
                return fn
            fn = fn.fn
        if not callable(fn):
            msg = f"Expected a middleware function, got {type(fn).__name__}"
            raise ConfigurationError(msg)

        count, required, variadic = _positional_params(fn)
        if kind is None:
            kind = _kind_for(count)
        arity = _KIND_ARITY[kind]
        if required > arity:
            name = getattr(fn, "__qualname__", None) or type(fn).__name__
            msg = (
                f"Middleware {name} requires {required} positional arguments, "
                f"but a {kind.value} handler receives {arity}"
            )
            raise ConfigurationError(msg)
        if kind is HandlerKind.BASIC and not variadic:
            arity = min(count, arity)
        return cls(fn=fn, kind=kind, arity=arity)

    @property
    def name(self) -> str:
        return getattr(self.fn, "__qualname__", None) or type(self.fn).__name__


def basic(fn: BasicHandler) -> Handler:
    """Mark *fn* as a BASIC ``(input, output)`` handler."""
    return Handler.of(fn, HandlerKind.BASIC)


def with_next(fn: NextHandler) -> Handler:
    """Mark *fn* as a NEXT ``(input, output, next)`` handler."""
    return Handler.of(fn, HandlerKind.NEXT)


def on_error(fn: ErrorHandler) -> Handler:
    """Mark *fn* as an ERROR ``(error, input, output, next)`` handler."""
    return Handler.of(fn, HandlerKind.ERROR)


def _kind_for(count: int) -> HandlerKind:
    if count >= 4:
        return HandlerKind.ERROR
    if count == 3:
        return HandlerKind.NEXT
    return HandlerKind.BASIC


def _positional_params(fn: Callable[..., Any]) -> tuple[int, int, bool]:
    """Count positional parameters (all, and those without defaults), and
    report whether ``*args`` is present.

    Callables without an inspectable signature count as two-parameter
    BASIC handlers.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return 2, 0, False

    count = required = 0
    variadic = False
    for param in sig.parameters.values():
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            count += 1
            if param.default is param.empty:
                required += 1
        elif param.kind is param.VAR_POSITIONAL:
            variadic = True
    return count, required, variadic
