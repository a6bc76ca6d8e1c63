"""Locate a dispatcher from a ``"module[:attribute]"`` string.

The attribute part may be dotted (``"myapp.web:stacks.api"``). Without
one, the module's ``dispatcher`` attribute is used, or failing that the
only :class:`Dispatcher` defined at module level.
"""

import importlib
from types import ModuleType
from typing import Any

from waypost.dispatcher import Dispatcher
from waypost.errors import ConfigurationError

DEFAULT_ATTRIBUTE = "dispatcher"


def resolve_dispatcher(import_string: str) -> Dispatcher:
    """Import and return the dispatcher named by *import_string*.

    A resolved object that is not a dispatcher is treated as a factory and
    called with no arguments. Dispatchers are callable themselves, so they
    are never called here.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        ConfigurationError: If nothing usable is found at the attribute,
            or a factory fails or returns something else.
    """
    module_path, _, attr_path = import_string.partition(":")
    module = importlib.import_module(module_path)

    target = _lookup(module, attr_path) if attr_path else _default(module)
    if isinstance(target, Dispatcher):
        return target
    if not callable(target):
        msg = f"{import_string!r} is a {type(target).__name__}, expected a Dispatcher or a factory"
        raise ConfigurationError(msg)

    try:
        built = target()
    except Exception as exc:
        msg = f"Dispatcher factory {import_string!r} failed: {exc}"
        raise ConfigurationError(msg) from exc
    if not isinstance(built, Dispatcher):
        msg = f"Dispatcher factory {import_string!r} returned {type(built).__name__}"
        raise ConfigurationError(msg)
    return built


def _lookup(module: ModuleType, attr_path: str) -> Any:
    obj: Any = module
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            msg = f"{module.__name__!r} has no attribute {attr_path!r}"
            raise ConfigurationError(msg) from None
    return obj


def _default(module: ModuleType) -> Any:
    if hasattr(module, DEFAULT_ATTRIBUTE):
        return getattr(module, DEFAULT_ATTRIBUTE)

    found = [name for name, value in vars(module).items() if isinstance(value, Dispatcher)]
    if len(found) == 1:
        return getattr(module, found[0])
    if not found:
        msg = f"{module.__name__!r} defines no {DEFAULT_ATTRIBUTE!r} and no Dispatcher"
    else:
        msg = f"{module.__name__!r} defines several dispatchers ({', '.join(sorted(found))}); name one with ':'"
    raise ConfigurationError(msg)
