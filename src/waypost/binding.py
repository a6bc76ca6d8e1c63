"""Condition bindings — partial application of ``Dispatcher.match``.

``dispatcher.match(conditions)`` without handlers returns a
:class:`ConditionBinding` that remembers the conditions (and an optional
base path) so several handlers can be registered against them later::

    get = dispatcher.match({"method": "GET"}, "/api")
    get("/users", list_users)      # registered at /api/users
    get(api_index)                 # registered at /api
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from waypost.errors import ConfigurationError
from waypost.handlers import Handler
from waypost.matching.mount import join_paths

if TYPE_CHECKING:
    from waypost.dispatcher import Dispatcher


def split_path_args(args: tuple[Any, ...]) -> tuple[str | None, tuple[Any, ...]]:
    """Split ``([path,] *handlers)`` call arguments.

    The first argument is a path unless it is already a handler.
    Raises ``ConfigurationError`` for a path that is not a string.
    """
    if not args:
        return None, ()
    first, rest = args[0], args[1:]
    if isinstance(first, Handler) or callable(first):
        return None, args
    if first is not None and not isinstance(first, str):
        msg = f"Expected path to be a string but was: {type(first).__name__}"
        raise ConfigurationError(msg)
    return first, rest


class ConditionBinding:
    """Conditions (and a base path) bound to a dispatcher, awaiting handlers.

    Calling the binding with ``([path,] *handlers)`` registers the handlers
    at the base path joined with *path*. Calling it with a path only returns
    a narrower binding.
    """

    __slots__ = ("_dispatcher", "conditions", "path")

    def __init__(
        self,
        dispatcher: Dispatcher,
        conditions: Mapping[str, Any],
        path: str | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self.conditions = conditions
        self.path = path

    def __call__(self, *args: Any) -> Dispatcher | ConditionBinding:
        path, handlers = split_path_args(args)
        return self._dispatcher.match(self.conditions, join_paths(self.path, path), *handlers)

    def bind_path(self, path: str | None) -> ConditionBinding:
        """Return a binding for *path* below this binding's base path."""
        return ConditionBinding(self._dispatcher, self.conditions, join_paths(self.path, path))

    def register(self, *handlers: Any) -> Dispatcher:
        """Register *handlers* at this binding's path."""
        if not handlers:
            msg = "Missing middleware function!"
            raise ConfigurationError(msg)
        return self._dispatcher.match(self.conditions, self.path, *handlers)

    def __repr__(self) -> str:
        return f"ConditionBinding(conditions={dict(self.conditions)!r}, path={self.path!r})"
