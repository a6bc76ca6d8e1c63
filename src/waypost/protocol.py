"""Handler protocols and the Next type alias.

A handler is any callable matching one of three shapes::

    def handler(input, output): ...                      # basic
    async def handler(input, output, next): ...          # next-aware
    async def handler(error, input, output, next): ...   # error handler

No base class required. The dispatcher checks the shape, not the lineage,
and ``def`` and ``async def`` are interchangeable.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

# The continuation handed to next-aware and error handlers; resolves to
# the output once the rest of the chain has run
type Next = Callable[..., Awaitable[Any]]


class BasicHandler(Protocol):
    """Runs and ends the chain::

        def not_found(request, response):
            response["status"] = 404
    """

    def __call__(self, input: Any, output: Any, /) -> Any: ...


class NextHandler(Protocol):
    """Runs, and may pass control on with ``next``::

        async def timing(request, response, next):
            start = time.monotonic()
            await next()
            response["elapsed"] = time.monotonic() - start
    """

    def __call__(self, input: Any, output: Any, next: Next, /) -> Any: ...


class ErrorHandler(Protocol):
    """Runs only while an error is pending::

        async def report(error, request, response, next):
            response["error"] = str(error)
            await next()
    """

    def __call__(self, error: Exception, input: Any, output: Any, next: Next, /) -> Any: ...
