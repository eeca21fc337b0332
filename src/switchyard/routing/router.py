"""Router — newest-first route matching, dispatch, and reverse routing.

Routes are scanned from the most recently registered backwards, so a
later registration of an equivalent template overrides an earlier one.
"""

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from switchyard.config import RouterConfig
from switchyard.errors import NoRouteMatch, PatternCompileError, UnknownRouteName
from switchyard.http.request import RequestTarget
from switchyard.routing.handlers import HandlerRegistry, default_registry
from switchyard.routing.pattern import placeholder_names
from switchyard.routing.route import Route, RouteMatch
from switchyard.routing.table import RouteTable

logger = logging.getLogger("switchyard.routing")


class Router:
    """Matches ``(path, method)`` pairs against a shared RouteTable.

    Usage::

        table = RouteTable()
        table.attach(Route("/users/", "SomeController::users_create", {"GET"}, name="users"))
        table.attach(Route("/user/:id", "SomeController::user", {"GET"}, name="user"))

        router = Router(table, registry=registry)
        router.match("/user/42")             # handler output
        router.generate("user", {"id": 42})  # "/user/42"

    The named-route index is built once here; later duplicate names
    overwrite earlier ones in the index while both stay in the table.
    """

    __slots__ = ("_base_path", "_named_routes", "_registry", "_routes", "_script_name")

    def __init__(
        self,
        routes: RouteTable,
        *,
        base_path: str = "",
        script_name: str = "",
        registry: HandlerRegistry | None = None,
    ) -> None:
        self._routes = routes
        self._base_path = base_path.rstrip("/")
        self._script_name = script_name
        self._registry = registry if registry is not None else default_registry
        self._named_routes: dict[str, Route] = {}
        for route in routes.all():
            if route.name is not None:
                self._named_routes[route.name] = route

    @classmethod
    def from_config(cls, config: RouterConfig, registry: HandlerRegistry | None = None) -> "Router":
        """Build a router from configuration, registering routes in order."""
        table = RouteTable()
        for spec in config.routes:
            table.attach(
                Route(
                    spec.template,
                    target=spec.target,
                    methods=spec.methods,
                    name=spec.name,
                    filters=spec.filters,
                )
            )
        return cls(
            table,
            base_path=config.base_path,
            script_name=config.script_name,
            registry=registry,
        )

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def named_routes(self) -> Mapping[str, Route]:
        return MappingProxyType(self._named_routes)

    @property
    def base_path(self) -> str:
        """Prefix every route pattern is anchored under (no trailing ``/``)."""
        return self._base_path

    @base_path.setter
    def base_path(self, base_path: str) -> None:
        self._base_path = base_path.rstrip("/")

    @property
    def script_name(self) -> str:
        return self._script_name

    # -- Matching --

    def _normalize(self, path: str) -> str:
        if self._script_name not in ("", "/"):
            return path.replace(self._script_name, "", 1)
        return path

    def find_route(self, path: str, method: str) -> RouteMatch | None:
        """Return the newest route accepting *method* and *path*, or ``None``.

        Routes whose filters do not compile are logged and skipped.
        """
        path = self._normalize(path)

        for route in reversed(self._routes):
            if not route.allows(method):
                continue

            try:
                matcher = route.compile_matcher(self._base_path)
            except PatternCompileError as exc:
                logger.warning("Skipping route %r: %s", route, exc)
                continue

            found = matcher.fullmatch(path)
            if found is None:
                continue

            names = placeholder_names(route.template)
            values = found.groups()
            if len(names) != len(values) or None in values:
                # Extra, missing, or unparticipating groups would misalign the values
                continue

            return RouteMatch(route=route, path_params=dict(zip(names, values, strict=True)))

        return None

    def get_route(self, path: str, method: str = "GET") -> Route | None:
        """Find the route and store the extracted parameters on it."""
        found = self.find_route(path, method)
        if found is None:
            return None
        found.route.parameters = found.path_params
        return found.route

    def match(self, path: str, method: str = "GET") -> str:
        """Route and dispatch a request, returning the handler output.

        Raises ``NoRouteMatch`` when nothing accepts *method* and *path*.
        """
        route = self.get_route(path, method)
        if route is None:
            raise NoRouteMatch(method, path)
        return route.dispatch(registry=self._registry)

    def request_has_route(self, path: str, method: str = "GET") -> bool:
        """True if some route matches. Does not check its handler."""
        return self.find_route(path, method) is not None

    def request_has_valid_route(self, path: str, method: str = "GET") -> bool:
        """True if a route matches and its handler resolves."""
        found = self.find_route(path, method)
        if found is None:
            return False
        return found.route.valid_target(self._registry) is not None

    def request_route(self, request: RequestTarget) -> Route | None:
        return self.get_route(request.path, request.method)

    def match_request(self, request: RequestTarget) -> str:
        return self.match(request.path, request.method)

    # -- Reverse routing --

    def generate(self, name: str, params: Mapping[str, Any] | None = None) -> str:
        """Build a URL for the named route.

        Each distinct placeholder with a non-``None`` value in *params* has
        its first occurrence replaced; anything else stays literal. Values
        are not percent-encoded and the base path is not prepended.

        Raises ``UnknownRouteName`` if no route carries *name*.
        """
        route = self._named_routes.get(name)
        if route is None:
            raise UnknownRouteName(name)

        url = route.template
        if not params:
            return url

        for key in dict.fromkeys(placeholder_names(url)):
            value = params.get(key)
            if value is None:
                continue
            text = str(value)
            url = re.sub(rf":{re.escape(key)}(?!\w)", lambda _, text=text: text, url, count=1)
        return url
