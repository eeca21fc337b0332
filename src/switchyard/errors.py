"""Switchyard exception hierarchy.

Shared across Route, Router, the handler registry, and the config loader
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when router configuration is invalid."""


class PatternCompileError(ConfigurationError):
    """A route's filters produced a regular expression that does not compile.

    The router logs these and skips the offending route while scanning.
    """

    def __init__(self, template: str, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {pattern!r} for route {template!r}: {reason}")
        self.template = template
        self.pattern = pattern
        self.reason = reason


@dataclass(frozen=True, slots=True)
class HTTPError(SwitchyardError):
    """An error that maps directly to an HTTP status code.

    The request-handling layer around the router catches these and turns
    them into responses.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing is routed at the requested location."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class NoRouteMatch(NotFound):  # noqa: N818
    """No registered route accepts this method and path."""

    def __init__(self, method: str, path: str) -> None:
        super().__init__(detail=f"No route found for {method} '{path}'")
        # HTTPError is frozen; plain assignment goes through its __setattr__
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "path", path)


class HandlerUnresolvable(SwitchyardError):
    """The route's target does not resolve to a public, invocable handler.

    Unknown handler keys, missing methods and non-public methods all end
    here with the same message.
    """

    def __init__(self, target: object) -> None:
        super().__init__(f"No valid handler for target {target!r}")
        self.target = target


class UnknownRouteName(SwitchyardError, LookupError):
    """Reverse routing was asked for a name no route carries."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No route with the name {name!r} has been found.")
        self.name = name
