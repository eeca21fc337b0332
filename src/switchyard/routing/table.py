"""Ordered, append-only route table."""

from collections.abc import Iterable, Iterator, Sequence

from switchyard.routing.route import Route


class RouteTable:
    """Routes in registration order.

    No de-duplication and no removal: registering an equivalent template
    again adds a second entry, and the router's newest-first scan lets the
    later one win.
    """

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes: list[Route] = list(routes)

    def attach(self, route: Route) -> Route:
        """Append *route* and return it."""
        self._routes.append(route)
        return route

    def all(self) -> Sequence[Route]:
        """Return every route in registration order (read-only view)."""
        return tuple(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(tuple(self._routes))

    def __reversed__(self) -> Iterator[Route]:
        return reversed(tuple(self._routes))

    def __len__(self) -> int:
        return len(self._routes)
