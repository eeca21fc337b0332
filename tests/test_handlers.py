"""Tests for switchyard.routing.handlers — registry, resolution, binding."""

import inspect
import logging

import pytest

from switchyard.errors import HandlerUnresolvable
from switchyard.routing.handlers import (
    HandlerRef,
    HandlerRegistry,
    ResolvedHandler,
    bind_parameters,
    positional_parameters,
)


class SomeController:
    def page(self, *args):
        return list(args)

    def parameter_sort(self, id, group, user, page, tag, *rest):
        return ",".join(str(v) for v in (id, group, user, page, tag, *rest))

    def _protected(self):
        pass

    def __private(self):
        pass

    @staticmethod
    def static_page():
        return "static"

    @property
    def title(self):
        return "title"


class InvokableController:
    message = ""

    def __call__(self, id, user):
        return f"{self.message} {id}:{user}"


def plain_handler(name):
    return f"hello {name}"


@pytest.fixture
def registry() -> HandlerRegistry:
    registry = HandlerRegistry()
    registry.register(SomeController)
    registry.register(InvokableController)
    registry.register(plain_handler, name="hello")
    return registry


def _formals(*names: str) -> list[inspect.Parameter]:
    return [inspect.Parameter(n, inspect.Parameter.POSITIONAL_OR_KEYWORD) for n in names]


class TestHandlerRef:
    def test_key_and_method(self) -> None:
        assert HandlerRef.parse("SomeController::page") == HandlerRef("SomeController", "page")

    def test_key_only(self) -> None:
        assert HandlerRef.parse("InvokableController") == HandlerRef("InvokableController", None)

    def test_blank_method_means_call(self) -> None:
        assert HandlerRef.parse("InvokableController::  ").method is None

    def test_splits_once(self) -> None:
        assert HandlerRef.parse("a::b::c") == HandlerRef("a", "b::c")


class TestRegistry:
    def test_register_returns_object(self) -> None:
        registry = HandlerRegistry()
        assert registry.register(SomeController) is SomeController
        assert "SomeController" in registry
        assert len(registry) == 1

    def test_decorator_with_name(self) -> None:
        registry = HandlerRegistry()

        @registry.register(name="pages")
        class PageController:
            pass

        assert registry.get("pages") is PageController
        assert list(registry) == ["pages"]

    def test_bare_decorator(self) -> None:
        registry = HandlerRegistry()

        @registry.register
        class Home:
            pass

        assert registry.get("TestRegistry.test_bare_decorator.<locals>.Home") is Home

    def test_reregister_replaces(self) -> None:
        registry = HandlerRegistry()
        registry.register(SomeController, name="c")
        registry.register(InvokableController, name="c")
        assert registry.get("c") is InvokableController

    def test_get_missing(self) -> None:
        assert HandlerRegistry().get("missing") is None


class TestResolve:
    def test_public_method(self, registry: HandlerRegistry) -> None:
        resolved = registry.resolve("SomeController::page")
        assert resolved == ResolvedHandler(
            target="SomeController::page", owner=SomeController, method="page"
        )

    def test_invokable_class(self, registry: HandlerRegistry) -> None:
        resolved = registry.resolve("InvokableController")
        assert resolved is not None
        assert resolved.owner is InvokableController
        assert resolved.method is None

    def test_class_object_target(self, registry: HandlerRegistry) -> None:
        resolved = HandlerRegistry().resolve(InvokableController)
        assert resolved is not None
        assert resolved.owner is InvokableController

    def test_class_without_call_rejected(self, registry: HandlerRegistry) -> None:
        assert registry.resolve("SomeController") is None

    def test_unknown_key(self, registry: HandlerRegistry) -> None:
        assert registry.resolve("TestController::page") is None

    def test_missing_method(self, registry: HandlerRegistry) -> None:
        assert registry.resolve("SomeController::missing") is None

    @pytest.mark.parametrize("method", ["_protected", "__private", "_SomeController__private"])
    def test_non_public_rejected(self, registry: HandlerRegistry, method: str) -> None:
        assert registry.resolve(f"SomeController::{method}") is None

    def test_inherited_object_methods_rejected(self, registry: HandlerRegistry) -> None:
        assert registry.resolve("SomeController::__init__") is None
        assert registry.resolve("SomeController::__call__") is None

    def test_property_rejected(self, registry: HandlerRegistry) -> None:
        assert registry.resolve("SomeController::title") is None

    def test_staticmethod_accepted(self, registry: HandlerRegistry) -> None:
        assert registry.resolve("SomeController::static_page") is not None

    def test_plain_callable_by_key(self, registry: HandlerRegistry) -> None:
        resolved = registry.resolve("hello")
        assert resolved is not None
        assert resolved.owner is None
        assert resolved.bind() is plain_handler

    def test_method_on_plain_callable_rejected(self, registry: HandlerRegistry) -> None:
        assert registry.resolve("hello::upper") is None

    def test_direct_callable(self) -> None:
        resolved = HandlerRegistry().resolve(plain_handler)
        assert resolved is not None
        assert resolved.bind() is plain_handler

    def test_none_and_garbage(self, registry: HandlerRegistry) -> None:
        assert registry.resolve(None) is None
        assert registry.resolve(42) is None  # type: ignore[arg-type]

    def test_reason_logged(
        self, registry: HandlerRegistry, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="switchyard.routing"):
            registry.resolve("SomeController::_protected")
        assert "'_protected' is not public" in caplog.text


class TestResolvedHandlerBind:
    def test_constructs_instance(self, registry: HandlerRegistry) -> None:
        resolved = registry.resolve("SomeController::page")
        assert resolved is not None
        handler = resolved.bind()
        assert isinstance(handler.__self__, SomeController)

    def test_uses_given_instance(self, registry: HandlerRegistry) -> None:
        instance = InvokableController()
        resolved = registry.resolve("InvokableController")
        assert resolved is not None
        assert resolved.bind(instance) is instance

    def test_plain_callable(self) -> None:
        resolved = ResolvedHandler(target=len, owner=None, method=None, func=len)
        assert resolved.bind() is len

    def test_missing_callable_raises(self) -> None:
        resolved = ResolvedHandler(target="broken", owner=None, method=None)
        with pytest.raises(HandlerUnresolvable, match="broken"):
            resolved.bind()


class TestPositionalParameters:
    def test_bound_method_excludes_self(self) -> None:
        names = [p.name for p in positional_parameters(SomeController().parameter_sort)]
        assert names == ["id", "group", "user", "page", "tag"]

    def test_callable_instance(self) -> None:
        names = [p.name for p in positional_parameters(InvokableController())]
        assert names == ["id", "user"]

    def test_keyword_only_excluded(self) -> None:
        def handler(a, b=1, *args, out, **kwargs):
            pass

        assert [p.name for p in positional_parameters(handler)] == ["a", "b"]


class TestBindParameters:
    def test_exact_names_then_fill(self) -> None:
        params = {
            "group_name": "fi",
            "id": 1,
            "page_name": "profile",
            "user": "akane",
            "tag_name": "m",
            "flag": 2,
            "admin": 0,
        }
        bound = bind_parameters(_formals("id", "group", "user", "page", "tag"), params)
        assert bound.args == [1, "fi", "akane", "profile", "m"]
        assert bound.extra == {"flag": 2, "admin": 0}
        assert list(bound.extra) == ["flag", "admin"]

    def test_pool_order_independent_of_key(self) -> None:
        bound = bind_parameters(_formals("a", "b"), {"z": "1", "y": "2"})
        assert bound.args == ["1", "2"]

    def test_holes_beyond_pool_are_none(self) -> None:
        bound = bind_parameters(_formals("a", "b", "c"), {"b": "2"})
        assert bound.args == [None, "2", None]
        assert bound.extra == {}

    def test_holes_take_defaults(self) -> None:
        formals = [
            inspect.Parameter("a", inspect.Parameter.POSITIONAL_OR_KEYWORD),
            inspect.Parameter("b", inspect.Parameter.POSITIONAL_OR_KEYWORD, default=10),
        ]
        assert bind_parameters(formals, {"a": "1"}).args == ["1", 10]

    def test_no_formals(self) -> None:
        bound = bind_parameters([], {"page_id": "1"})
        assert bound.args == []
        assert bound.extra == {"page_id": "1"}

    def test_does_not_mutate_input(self) -> None:
        params = {"x": "1"}
        bind_parameters(_formals("a"), params)
        assert params == {"x": "1"}
