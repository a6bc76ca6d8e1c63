"""Tests for waypost.registry — compiled, append-only middleware stack."""

import pytest

from waypost.config import DispatcherConfig
from waypost.handlers import Handler, HandlerKind
from waypost.registry import MiddlewareEntry, MiddlewareRegistry, match_entry


def _basic(request, response):
    return None


def _next(request, response, next):
    return None


def _registry(path_property: str | None = "path") -> MiddlewareRegistry:
    return MiddlewareRegistry(DispatcherConfig(path_property=path_property))


class TestAdd:
    def test_returns_entry(self) -> None:
        registry = _registry()
        entry = registry.add(Handler.of(_next))
        assert isinstance(entry, MiddlewareEntry)
        assert registry.entries == (entry,)

    def test_basic_always_stops(self) -> None:
        entry = _registry().add(Handler.of(_basic))
        assert entry.stop_on_match is True

    def test_next_continues_by_default(self) -> None:
        entry = _registry().add(Handler.of(_next))
        assert entry.stop_on_match is False

    def test_stop_on_match_requested(self) -> None:
        entry = _registry().add(Handler.of(_next), stop_on_match=True)
        assert entry.stop_on_match is True

    def test_conditions_are_copied_read_only(self) -> None:
        conditions = {"a": 1}
        entry = _registry().add(Handler.of(_next), conditions=conditions)
        conditions["b"] = 2
        assert dict(entry.conditions) == {"a": 1}
        with pytest.raises(TypeError):
            entry.conditions["c"] = 3  # type: ignore[index]

    def test_only_own_keys_are_conditions(self) -> None:
        class Conditions(dict):
            b = 2

        entry = _registry().add(Handler.of(_next), conditions=Conditions(a=1))
        assert dict(entry.conditions) == {"a": 1}

    def test_mount_compiled(self) -> None:
        entry = _registry().add(Handler.of(_next), path="/api", match_to_end=True)
        assert entry.mount is not None
        assert entry.path == "/api"
        assert entry.mount.end is True

    def test_mount_disabled_without_path_property(self) -> None:
        entry = _registry(None).add(Handler.of(_next), path="/api")
        assert entry.mount is None
        assert entry.path is None

    def test_entry_frozen(self) -> None:
        entry = _registry().add(Handler.of(_next))
        with pytest.raises(AttributeError):
            entry.stop_on_match = True  # type: ignore[misc]

    def test_logs_registration(self, caplog) -> None:
        with caplog.at_level("DEBUG", logger="waypost.registry"):
            _registry().add(Handler.of(_next), path="/api")
        assert any("_next" in r.message and "/api" in r.message for r in caplog.records)


class TestSelect:
    def test_registration_order(self) -> None:
        registry = _registry()
        first = registry.add(Handler.of(_next))
        second = registry.add(Handler.of(_basic))
        assert [s.entry for s in registry.select({})] == [first, second]

    def test_filters_by_conditions(self) -> None:
        registry = _registry()
        registry.add(Handler.of(_next), conditions={"method": "POST"})
        get = registry.add(Handler.of(_next), conditions={"method": "GET"})
        assert [s.entry for s in registry.select({"method": "GET"})] == [get]

    def test_filters_by_mount(self) -> None:
        registry = _registry()
        api = registry.add(Handler.of(_next), path="/api")
        registry.add(Handler.of(_next), path="/admin")
        selected = registry.select({"path": "/api/users"})
        assert [s.entry for s in selected] == [api]
        assert selected[0].path_match is not None
        assert selected[0].path_match.length == len("/api")

    def test_unmounted_entries_have_no_match(self) -> None:
        registry = _registry()
        registry.add(Handler.of(_next))
        assert registry.select({"path": "/x"})[0].path_match is None

    def test_mount_ignored_without_path_property(self) -> None:
        registry = _registry(None)
        entry = registry.add(Handler.of(_next), path="/api")
        assert [s.entry for s in registry.select({"path": "/elsewhere"})] == [entry]

    def test_append_only(self) -> None:
        registry = _registry()
        first = registry.add(Handler.of(_next))
        registry.add(Handler.of(_basic))
        assert registry.entries[0] is first
        assert len(registry) == 2
        assert list(registry) == list(registry.entries)


class TestMatchEntry:
    def test_mount_checked_before_conditions(self) -> None:
        calls = []
        registry = _registry()
        entry = registry.add(
            Handler.of(_next),
            conditions={"a": lambda v: calls.append(v) or True},
            path="/api",
        )
        assert match_entry(entry, {"path": "/other", "a": 1}, "path") is None
        assert calls == []

    def test_selected_carries_entry(self) -> None:
        entry = _registry().add(Handler.of(_next), conditions={"a": 1})
        selected = match_entry(entry, {"a": 1}, "path")
        assert selected is not None
        assert selected.entry is entry
        assert selected.entry.handler.kind is HandlerKind.NEXT
