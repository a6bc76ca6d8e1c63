"""Tests for waypost.handlers — handler kinds and signature inference."""

import pytest

from waypost.dispatcher import create_dispatcher
from waypost.errors import ConfigurationError
from waypost.handlers import Handler, HandlerKind, basic, on_error, with_next


class TestInference:
    def test_two_params_is_basic(self) -> None:
        handler = Handler.of(lambda request, response: None)
        assert handler.kind is HandlerKind.BASIC
        assert handler.arity == 2

    def test_three_params_is_next(self) -> None:
        handler = Handler.of(lambda request, response, next: None)
        assert handler.kind is HandlerKind.NEXT
        assert handler.arity == 3

    def test_four_params_is_error(self) -> None:
        handler = Handler.of(lambda error, request, response, next: None)
        assert handler.kind is HandlerKind.ERROR
        assert handler.arity == 4

    def test_single_param_is_basic_with_one_arg(self) -> None:
        handler = Handler.of(lambda request: None)
        assert handler.kind is HandlerKind.BASIC
        assert handler.arity == 1

    def test_no_params_is_basic_with_no_args(self) -> None:
        handler = Handler.of(lambda: None)
        assert handler.kind is HandlerKind.BASIC
        assert handler.arity == 0

    def test_varargs_is_basic_with_two_args(self) -> None:
        handler = Handler.of(lambda *args: None)
        assert handler.kind is HandlerKind.BASIC
        assert handler.arity == 2

    def test_keyword_only_params_ignored(self) -> None:
        def handler(request, response, *, extra=None):
            return None

        assert Handler.of(handler).kind is HandlerKind.BASIC

    def test_async_function(self) -> None:
        async def handler(request, response, next):
            await next()

        assert Handler.of(handler).kind is HandlerKind.NEXT

    def test_bound_method_excludes_self(self) -> None:
        class Auth:
            def check(self, request, response, next):
                return None

        assert Handler.of(Auth().check).kind is HandlerKind.NEXT

    def test_callable_object(self) -> None:
        class Recover:
            def __call__(self, error, request, response, next):
                return None

        assert Handler.of(Recover()).kind is HandlerKind.ERROR


class TestExplicitKinds:
    def test_basic(self) -> None:
        handler = basic(lambda *args: None)
        assert handler.kind is HandlerKind.BASIC
        assert handler.arity == 2

    def test_with_next(self) -> None:
        handler = with_next(lambda *args: None)
        assert handler.kind is HandlerKind.NEXT
        assert handler.arity == 3

    def test_on_error(self) -> None:
        handler = on_error(lambda *args: None)
        assert handler.kind is HandlerKind.ERROR
        assert handler.arity == 4

    def test_wrapping_handler_returns_same(self) -> None:
        handler = with_next(lambda *args: None)
        assert Handler.of(handler) is handler

    def test_rewrapping_changes_kind(self) -> None:
        handler = with_next(lambda *args: None)
        rewrapped = on_error(handler)
        assert rewrapped.kind is HandlerKind.ERROR
        assert rewrapped.fn is handler.fn


class TestValidation:
    def test_non_callable_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="middleware function"):
            Handler.of("not a function")

    def test_five_required_params_rejected(self) -> None:
        def handler(error, request, response, next, extra):
            return None

        with pytest.raises(ConfigurationError, match="requires 5 positional arguments"):
            Handler.of(handler)

    def test_extra_defaulted_params_accepted(self) -> None:
        def handler(error, request, response, next, extra=None):
            return None

        handler_ = Handler.of(handler)
        assert handler_.kind is HandlerKind.ERROR
        assert handler_.arity == 4

    def test_explicit_kind_too_few_arguments(self) -> None:
        with pytest.raises(ConfigurationError, match="a next handler receives 3"):
            with_next(lambda error, request, response, next: None)

    def test_rejected_at_registration(self) -> None:
        dispatcher = create_dispatcher()
        with pytest.raises(ConfigurationError):
            dispatcher.use(lambda a, b, c, d, e: None)
        assert dispatcher.entries == ()

    def test_frozen(self) -> None:
        handler = Handler.of(lambda request, response: None)
        with pytest.raises(AttributeError):
            handler.kind = HandlerKind.NEXT  # type: ignore[misc]


class TestName:
    def test_function_name(self) -> None:
        def load_user(request, response):
            return None

        assert Handler.of(load_user).name.endswith("load_user")

    def test_object_without_qualname(self) -> None:
        class Timer:
            def __call__(self, request, response):
                return None

        assert Handler.of(Timer()).name == "Timer"
