"""Waypost — a transport-agnostic middleware dispatcher.

Register ordered handlers, each gated by field conditions and/or a mount
path, then run the applicable ones over an ``input``/``output`` pair.

Basic usage::

    from waypost import create_dispatcher

    app = create_dispatcher(path_property="path")

    async def auth(request, response, next):
        if not request.get("user"):
            raise PermissionError("login required")
        await next()

    def show_user(request, response):
        response["user_id"] = request["params"]["id"]

    app.use(auth)
    app.match({"method": "GET"}, "/users/:id", show_user)

    response = await app.run({"method": "GET", "path": "/users/7", "user": "ann"}, {})
"""

__version__ = "0.1.0"
__all__ = [
    "BasicHandler",
    "ConditionBinding",
    "ConfigurationError",
    "ContinuationError",
    "Dispatcher",
    "DispatcherConfig",
    "ErrorHandler",
    "Handler",
    "HandlerKind",
    "MiddlewareEntry",
    "Next",
    "NextHandler",
    "WaypostError",
    "basic",
    "create_dispatcher",
    "on_error",
    "with_next",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "BasicHandler": "waypost.protocol",
    "ErrorHandler": "waypost.protocol",
    "Next": "waypost.protocol",
    "NextHandler": "waypost.protocol",
    "ConditionBinding": "waypost.binding",
    "ConfigurationError": "waypost.errors",
    "ContinuationError": "waypost.errors",
    "Dispatcher": "waypost.dispatcher",
    "DispatcherConfig": "waypost.config",
    "Handler": "waypost.handlers",
    "HandlerKind": "waypost.handlers",
    "MiddlewareEntry": "waypost.registry",
    "WaypostError": "waypost.errors",
    "basic": "waypost.handlers",
    "create_dispatcher": "waypost.dispatcher",
    "on_error": "waypost.handlers",
    "with_next": "waypost.handlers",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypost`` cheap while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
