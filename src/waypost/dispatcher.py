"""The dispatcher — registration API and the run loop.

Mutable during setup (``use`` / ``match`` append entries), read-only
while running. A run filters the stack once, then walks the selected
entries one at a time::

    dispatcher = create_dispatcher(path_property="path")

    async def timing(request, response, next):
        start = time.monotonic()
        await next()
        response["elapsed"] = time.monotonic() - start

    dispatcher.use(timing)
    dispatcher.match({"method": "GET"}, "/users/:id", show_user)

    response = await dispatcher.run({"method": "GET", "path": "/users/7"}, {})
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Generator, Mapping
from typing import Any

import anyio

from waypost._internal.invoke import invoke
from waypost.binding import ConditionBinding, split_path_args
from waypost.config import DispatcherConfig
from waypost.errors import ConfigurationError, ContinuationError
from waypost.handlers import Handler, HandlerKind
from waypost.matching.mount import derive_input
from waypost.registry import MiddlewareEntry, MiddlewareRegistry, Selected

logger = logging.getLogger("waypost.dispatch")

# Returned by _Chain._call once the run has finished
_DONE = object()


class Dispatcher:
    """An ordered stack of conditional middleware.

    A dispatcher is itself a BASIC ``(input, output)`` handler, so one
    dispatcher can be mounted inside another::

        api = create_dispatcher(path_property="path")
        app = create_dispatcher(path_property="path")
        app.use("/api", api)

    Thread safety:
        Register everything before serving. Runs only read the stack, so
        any number of runs may be in flight at once.
    """

    __slots__ = ("_registry", "config")

    def __init__(self, config: DispatcherConfig | None = None) -> None:
        self.config: DispatcherConfig = config or DispatcherConfig()
        self._registry = MiddlewareRegistry(self.config)

    # -- Registration --

    def use(self, *args: Any) -> Dispatcher:
        """Register handlers for every input, optionally mounted at a path.

        ``use([path,] *handlers)``. The path is a prefix mount: ``"/api"``
        applies to ``/api`` and ``/api/users`` alike.
        """
        path, handlers = split_path_args(args)
        if not handlers or not (isinstance(handlers[0], Handler) or callable(handlers[0])):
            msg = "Missing middleware function!"
            raise ConfigurationError(msg)
        self._add(handlers, None, path, match_to_end=False, stop_on_match=False)
        return self

    def match(self, conditions: Mapping[str, Any] | None, *args: Any) -> Dispatcher | ConditionBinding:
        """Register handlers that only run when *conditions* hold.

        ``match(conditions, [path,] *handlers)``. The path must match the
        whole input path, and every entry registered here ends the run once
        it succeeds. Without handlers, returns a :class:`ConditionBinding`
        for registering them later.
        """
        if conditions is None:
            msg = "Missing matching conditions!"
            raise ConfigurationError(msg)
        if not isinstance(conditions, Mapping):
            msg = f"Expected conditions to be a mapping but was: {type(conditions).__name__}"
            raise ConfigurationError(msg)

        path, handlers = split_path_args(args)
        if not handlers:
            return ConditionBinding(self, conditions, path)
        self._add(handlers, conditions, path, match_to_end=True, stop_on_match=True)
        return self

    def _add(
        self,
        handlers: tuple[Any, ...],
        conditions: Mapping[str, Any] | None,
        path: str | None,
        *,
        match_to_end: bool,
        stop_on_match: bool,
    ) -> None:
        # Wrap everything first so a bad handler registers nothing
        wrapped = [Handler.of(fn) for fn in handlers]
        for handler in wrapped:
            self._registry.add(
                handler,
                conditions=conditions,
                path=path,
                match_to_end=match_to_end,
                stop_on_match=stop_on_match,
            )

    @property
    def entries(self) -> tuple[MiddlewareEntry, ...]:
        """Registered entries in registration order."""
        return self._registry.entries

    # -- Running --

    async def run(self, input: Any, output: Any) -> Any:
        """Run the matching middleware over *input* and *output*.

        Returns *output* once a handler stops the chain or the chain is
        exhausted. Raises the error that reached the end of the chain
        without being handled.
        """
        chain = _Chain(self.config, self._registry.select(input), input, output)
        try:
            return await chain.advance(0, None)
        except Exception as exc:
            logger.debug("Dispatch failed with unhandled %s", type(exc).__name__, exc_info=exc)
            raise

    async def __call__(self, input: Any, output: Any) -> Any:
        return await self.run(input, output)

    def run_sync(self, input: Any, output: Any, *, backend: str = "asyncio") -> Any:
        """Run the dispatcher from synchronous code on a fresh event loop."""
        return anyio.run(functools.partial(self.run, input, output), backend=backend)

    def __repr__(self) -> str:
        return f"Dispatcher(path_property={self.config.path_property!r}, entries={len(self._registry)})"


def create_dispatcher(
    config: DispatcherConfig | Mapping[str, Any] | None = None,
    *,
    path_property: str | None = None,
) -> Dispatcher:
    """Create a dispatcher.

    Accepts a :class:`DispatcherConfig`, a mapping of its fields, or the
    fields as keyword arguments::

        create_dispatcher(path_property="url")
        create_dispatcher({"path_property": "url"})
    """
    if config is None:
        config = DispatcherConfig(path_property=path_property)
    elif isinstance(config, Mapping):
        options = dict(config)
        if path_property is not None:
            options["path_property"] = path_property
        unknown = set(options) - {"path_property"}
        if unknown:
            msg = f"Unknown dispatcher options: {', '.join(sorted(unknown))}"
            raise ConfigurationError(msg)
        config = DispatcherConfig(**options)
    elif not isinstance(config, DispatcherConfig):
        msg = f"Expected a DispatcherConfig or mapping, got {type(config).__name__}"
        raise ConfigurationError(msg)
    elif path_property is not None:
        config = DispatcherConfig(path_property=path_property)
    return Dispatcher(config)


class _Chain:
    """Per-run state: the selected entries plus the input/output pair."""

    __slots__ = ("_config", "_input", "_output", "_selected")

    def __init__(
        self,
        config: DispatcherConfig,
        selected: tuple[Selected, ...],
        input: Any,
        output: Any,
    ) -> None:
        self._config = config
        self._selected = selected
        self._input = input
        self._output = output

    async def advance(self, index: int, error: Exception | None) -> Any:
        """Run the chain from *index*, carrying *error* if one is pending.

        Entries that finish without calling ``next`` hand control back
        here, so only an explicit ``next()`` nests another call.
        """
        while index < len(self._selected):
            selected = self._selected[index]
            kind = selected.entry.handler.kind
            if error is not None and kind is not HandlerKind.ERROR:
                raise error
            # ERROR handlers are skipped while nothing is pending
            if error is None and kind is HandlerKind.ERROR:
                index += 1
                continue
            step = await self._call(index, selected, error)
            if step is _DONE:
                return self._output
            index, error = index + 1, step

        if error is not None:
            raise error
        return self._output

    async def _call(self, index: int, selected: Selected, error: Exception | None) -> Any:
        """Invoke one entry.

        Returns ``_DONE`` when the run has finished, otherwise the error
        (or ``None``) to carry on to the following entry.
        """
        entry = selected.entry
        handler = entry.handler
        request = self._input_for(selected)

        step: _Continuation | None = None
        if handler.kind is HandlerKind.BASIC:
            args: tuple[Any, ...] = (request, self._output)[: handler.arity]
        else:
            step = _Continuation(self, index + 1)
            args = (request, self._output, step)
            if handler.kind is HandlerKind.ERROR:
                args = (error, *args)

        try:
            await invoke(handler.fn, *args)
        except Exception as exc:
            if step is not None and step.invoked:
                step.discard()
                raise
            if entry.stop_on_match:
                raise
            logger.debug("Handler %s failed, passing %s down the chain", handler.name, type(exc).__name__)
            return exc

        if step is not None and step.invoked:
            await step.settle()
            return _DONE
        if entry.stop_on_match:
            return _DONE
        return None

    def _input_for(self, selected: Selected) -> Any:
        mount = selected.entry.mount
        path_property = self._config.path_property
        original_property = self._config.original_path_property
        if mount is None or selected.path_match is None or path_property is None or original_property is None:
            return self._input
        return derive_input(mount, selected.path_match, self._input, path_property, original_property)


class _Continuation:
    """The ``next`` callable handed to NEXT and ERROR handlers.

    ``next(error=None)`` returns an awaitable resolving to the output once
    the rest of the chain has run. Awaiting it runs the downstream entries
    right away; if the handler never awaits it, the dispatcher runs them
    after the handler returns.
    """

    __slots__ = ("_chain", "_index", "_pending")

    def __init__(self, chain: _Chain, index: int) -> None:
        self._chain = chain
        self._index = index
        self._pending: _Downstream | None = None

    def __call__(self, error: Exception | None = None) -> _Downstream:
        if self._pending is not None:
            msg = "next() was called more than once by the same handler"
            raise ContinuationError(msg)
        self._pending = _Downstream(self._chain.advance(self._index, error))
        return self._pending

    @property
    def invoked(self) -> bool:
        return self._pending is not None

    async def settle(self) -> None:
        """Run the downstream chain if the handler left it un-awaited."""
        if self._pending is not None and not self._pending.started:
            await self._pending

    def discard(self) -> None:
        if self._pending is not None and not self._pending.started:
            self._pending.close()


class _Downstream:
    """Awaitable for the remainder of a chain; runs at most once."""

    __slots__ = ("_coro", "started")

    def __init__(self, coro: Any) -> None:
        self._coro = coro
        self.started = False

    def __await__(self) -> Generator[Any, None, Any]:
        self.started = True
        return self._coro.__await__()

    def close(self) -> None:
        self._coro.close()
