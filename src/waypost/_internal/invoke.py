"""Invoke helpers — call sync or async handlers uniformly.

Waypost handlers can be ``def`` or ``async def``. Anything that calls a
user-provided handler goes through :func:`invoke` so the sync/async
check lives in exactly one place.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Exceptions raised synchronously by the handler surface from the
    ``await``, exactly like a failed coroutine::

        def tag(request, response):
            response["seen"] = True

        async def load(request, response):
            response["user"] = await fetch_user(request["user_id"])
    """
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
