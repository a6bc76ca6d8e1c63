"""Middleware registry — the ordered, append-only stack of entries.

Entries are compiled when they are registered (conditions copied into a
read-only mapping, mount paths compiled to regexes) so a run only has to
filter and call.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from waypost.config import DispatcherConfig
from waypost.handlers import Handler, HandlerKind
from waypost.matching.conditions import conditions_hold
from waypost.matching.mount import compile_mount, match_mount
from waypost.matching.pattern import MountPath, PathMatch

logger = logging.getLogger("waypost.registry")

_NO_CONDITIONS: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class MiddlewareEntry:
    """A registered middleware. Immutable once registered."""

    handler: Handler
    conditions: Mapping[str, Any] = _NO_CONDITIONS
    mount: MountPath | None = None
    match_to_end: bool = False
    stop_on_match: bool = False

    @property
    def path(self) -> str | None:
        """The pattern this entry is mounted at, if any."""
        return self.mount.pattern if self.mount is not None else None


@dataclass(frozen=True, slots=True)
class Selected:
    """An entry chosen for a run, with its mount match when mounted."""

    entry: MiddlewareEntry
    path_match: PathMatch | None = None


def match_entry(entry: MiddlewareEntry, record: Any, path_property: str | None) -> Selected | None:
    """Return a :class:`Selected` when *entry* applies to *record*, else ``None``.

    The mount path is checked first, then every condition.
    """
    path_match: PathMatch | None = None
    if entry.mount is not None and path_property is not None:
        path_match = match_mount(entry.mount, record, path_property)
        if path_match is None:
            return None
    if not conditions_hold(entry.conditions, record):
        return None
    return Selected(entry=entry, path_match=path_match)


class MiddlewareRegistry:
    """Ordered list of middleware entries.

    Usage::

        registry = MiddlewareRegistry(DispatcherConfig(path_property="path"))
        registry.add(Handler.of(handler), path="/api")
        chain = registry.select({"path": "/api/users"})
    """

    __slots__ = ("_config", "_entries")

    def __init__(self, config: DispatcherConfig) -> None:
        self._config = config
        self._entries: list[MiddlewareEntry] = []

    def add(
        self,
        handler: Handler,
        *,
        conditions: Mapping[str, Any] | None = None,
        path: str | None = None,
        match_to_end: bool = False,
        stop_on_match: bool = False,
    ) -> MiddlewareEntry:
        """Compile and append one entry."""
        entry = MiddlewareEntry(
            handler=handler,
            conditions=MappingProxyType(dict(conditions)) if conditions else _NO_CONDITIONS,
            mount=compile_mount(
                path,
                end=match_to_end,
                enabled=self._config.path_property is not None,
            ),
            match_to_end=match_to_end,
            stop_on_match=stop_on_match or handler.kind is HandlerKind.BASIC,
        )
        self._entries.append(entry)
        logger.debug(
            "Registered %s handler %s (path=%r, conditions=%s, stop_on_match=%s)",
            handler.kind.value,
            handler.name,
            entry.path,
            sorted(entry.conditions),
            entry.stop_on_match,
        )
        return entry

    def select(self, record: Any) -> tuple[Selected, ...]:
        """Return the entries that apply to *record*, in registration order.

        Snapshots the stack first, so entries appended during a run are not
        seen by that run.
        """
        path_property = self._config.path_property
        selected: list[Selected] = []
        for entry in tuple(self._entries):
            chosen = match_entry(entry, record, path_property)
            if chosen is not None:
                selected.append(chosen)
        return tuple(selected)

    @property
    def entries(self) -> tuple[MiddlewareEntry, ...]:
        return tuple(self._entries)

    def __iter__(self) -> Iterator[MiddlewareEntry]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
