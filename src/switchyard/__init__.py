"""Switchyard — request routing core.

Compiles ``:name`` URL templates, matches ``(path, method)`` pairs with
last-registered-wins precedence, binds extracted parameters to handler
signatures, and generates URLs from named routes.

Basic usage::

    from switchyard import HandlerRegistry, Route, RouteTable, Router

    registry = HandlerRegistry()

    @registry.register
    class PageController:
        def show(self, page_id, *, out):
            out.write(f"page {page_id}")

    table = RouteTable()
    table.attach(Route("/page/:page_id", "PageController::show", {"GET"}, name="page"))

    router = Router(table, registry=registry)
    router.match("/page/42")            # "page 42"
    router.generate("page", {"page_id": 7})  # "/page/7"
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "HTTPError",
    "HandlerRegistry",
    "HandlerResult",
    "HandlerUnresolvable",
    "NoRouteMatch",
    "NotFound",
    "PatternCompileError",
    "RequestTarget",
    "Route",
    "RouteMatch",
    "RouteSpec",
    "RouteTable",
    "Router",
    "RouterConfig",
    "SwitchyardError",
    "UnknownRouteName",
    "load_config",
    "register",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from switchyard.routing.router import Router

        return Router

    if name in ("Route", "RouteMatch"):
        from switchyard.routing import route as _route

        return getattr(_route, name)

    if name == "RouteTable":
        from switchyard.routing.table import RouteTable

        return RouteTable

    if name in ("HandlerRegistry", "register"):
        from switchyard.routing import handlers as _handlers

        return getattr(_handlers, name)

    if name == "HandlerResult":
        from switchyard._internal.invoke import HandlerResult

        return HandlerResult

    if name == "RequestTarget":
        from switchyard.http.request import RequestTarget

        return RequestTarget

    if name in ("RouteSpec", "RouterConfig", "load_config"):
        from switchyard import config as _config

        return getattr(_config, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "HandlerUnresolvable",
        "NoRouteMatch",
        "NotFound",
        "PatternCompileError",
        "SwitchyardError",
        "UnknownRouteName",
    ):
        from switchyard import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
