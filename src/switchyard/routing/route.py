"""Route and RouteMatch.

A ``Route`` is built once and registered in a ``RouteTable``. Its
setters stay usable afterwards; nothing derived from the template or
filters is cached, so a change affects the very next match.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from switchyard._internal.invoke import HandlerResult, invoke
from switchyard._internal.types import Target
from switchyard.errors import HandlerUnresolvable, PatternCompileError
from switchyard.routing.handlers import (
    BoundArguments,
    HandlerRef,
    HandlerRegistry,
    ResolvedHandler,
    bind_parameters,
    default_registry,
    positional_parameters,
)
from switchyard.routing.pattern import compile_matcher, compile_pattern, placeholder_names


def _as_methods(methods: str | Iterable[str] | None) -> frozenset[str]:
    if methods is None:
        return frozenset()
    if isinstance(methods, str):
        return frozenset({methods})
    return frozenset(methods)


class Route:
    """One template + method set bound to a handler target.

    Usage::

        route = Route(
            "/page/:page_id",
            target="SomeController::page",
            methods={"GET"},
            name="page",
            filters={"page_id": r"(\\d+)"},
        )
        route.pattern        # r"/page/(\\d+)"
        route.dispatch()     # handler output as text

    ``parameters`` holds the values extracted by the most recent match.
    Matching the same Route from several threads at once races on it.
    """

    __slots__ = ("_filters", "_methods", "_name", "_parameters", "_target", "_template")

    def __init__(
        self,
        template: str,
        target: Target = None,
        methods: str | Iterable[str] | None = None,
        name: str | None = None,
        filters: Mapping[str, str] | None = None,
        parameters: Mapping[str, Any] | None = None,
    ) -> None:
        # Stored as given; only the setter normalizes
        self._template = template
        self._target = target
        self._methods = _as_methods(methods)
        self._name = name
        self._filters = dict(filters or {})
        self._parameters = dict(parameters or {})

    # -- Mutators --

    @property
    def template(self) -> str:
        return self._template

    @template.setter
    def template(self, template: str) -> None:
        template = str(template)
        if not template.endswith("/"):
            template += "/"
        self._template = template

    @property
    def methods(self) -> frozenset[str]:
        return self._methods

    @methods.setter
    def methods(self, methods: str | Iterable[str]) -> None:
        self._methods = _as_methods(methods)

    @property
    def target(self) -> Target:
        return self._target

    @target.setter
    def target(self, target: Target) -> None:
        self._target = target

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, name: str | None) -> None:
        self._name = None if name is None else str(name)

    @property
    def filters(self) -> dict[str, str]:
        return dict(self._filters)

    @filters.setter
    def filters(self, filters: Mapping[str, str]) -> None:
        self._filters = dict(filters)

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self._parameters)

    @parameters.setter
    def parameters(self, parameters: Mapping[str, Any]) -> None:
        self._parameters = dict(parameters)

    # -- Patterns --

    @property
    def pattern(self) -> str:
        """The unanchored regex source for the current template and filters."""
        return compile_pattern(self._template, self._filters)

    @property
    def placeholders(self) -> list[str]:
        """Placeholder names declared in the template, in order."""
        return placeholder_names(self._template)

    def compile_matcher(self, base_path: str = "") -> re.Pattern[str]:
        """Compile the anchored matcher under *base_path*.

        Raises ``PatternCompileError`` if a filter is not valid regex.
        """
        try:
            return compile_matcher(self._template, self._filters, base_path)
        except re.error as exc:
            raise PatternCompileError(self._template, self.pattern, str(exc)) from exc

    def allows(self, method: str) -> bool:
        """Exact, case-sensitive membership in the method set."""
        return method in self._methods

    # -- Handlers --

    @property
    def handler_ref(self) -> HandlerRef | None:
        """The parsed key/method pair for string targets, else ``None``."""
        if isinstance(self._target, str):
            return HandlerRef.parse(self._target)
        return None

    def resolve_handler(self, registry: HandlerRegistry | None = None) -> ResolvedHandler | None:
        """Resolve the target against *registry*, or ``None`` if it is not valid."""
        if registry is None:
            registry = default_registry
        return registry.resolve(self._target)

    def valid_target(self, registry: HandlerRegistry | None = None) -> Target:
        """Return the target if it resolves, else ``None``. Never invokes it."""
        if self.resolve_handler(registry) is None:
            return None
        return self._target

    def bind_arguments(self, handler: Any) -> BoundArguments:
        """Order this route's parameters for *handler*'s positional signature."""
        return bind_parameters(positional_parameters(handler), self._parameters)

    def invoke(
        self,
        instance: object | None = None,
        registry: HandlerRegistry | None = None,
    ) -> HandlerResult:
        """Resolve, bind, and call the handler.

        A new instance is constructed with no arguments unless *instance*
        is given. Raises ``HandlerUnresolvable`` if the target is not valid.
        """
        resolved = self.resolve_handler(registry)
        if resolved is None:
            raise HandlerUnresolvable(self._target)
        handler = resolved.bind(instance)
        return invoke(handler, self.bind_arguments(handler))

    def dispatch(
        self,
        instance: object | None = None,
        registry: HandlerRegistry | None = None,
    ) -> str:
        """Invoke the handler and return its written and returned output."""
        return self.invoke(instance, registry).output

    def __repr__(self) -> str:
        methods = ",".join(sorted(self._methods))
        return f"<Route {methods} {self._template!r} -> {self._target!r}>"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
