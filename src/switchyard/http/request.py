"""Request target extraction.

The router only needs ``(method, path)``. ``RequestTarget`` derives that
pair once from whatever the server hands over, so nothing downstream
reads request globals::

    target = RequestTarget.from_environ(environ, form={"_method": "delete"})
    router.match_request(target)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Form field that lets an HTML form (GET/POST only) ask for another method
METHOD_OVERRIDE_FIELD = "_method"
OVERRIDABLE_METHODS = frozenset({"PUT", "DELETE"})


def _override(method: str, form: Mapping[str, Any] | None) -> str:
    if not form:
        return method
    value = form.get(METHOD_OVERRIDE_FIELD)
    if not isinstance(value, str):
        return method
    candidate = value.upper()
    if candidate in OVERRIDABLE_METHODS:
        return candidate
    return method


@dataclass(frozen=True, slots=True)
class RequestTarget:
    """The method and path a request is routed by."""

    method: str
    path: str

    @classmethod
    def from_uri(
        cls,
        method: str,
        uri: str,
        form: Mapping[str, Any] | None = None,
    ) -> "RequestTarget":
        """Build from a raw request URI, dropping the query string.

        A ``_method`` form field of ``PUT`` or ``DELETE`` (any case)
        replaces *method*; other values are ignored.
        """
        path, _, _ = uri.partition("?")
        return cls(method=_override(method, form), path=path)

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, Any],
        form: Mapping[str, Any] | None = None,
    ) -> "RequestTarget":
        """Build from a WSGI environ (``REQUEST_URI``, else ``PATH_INFO``)."""
        uri = environ.get("REQUEST_URI") or environ.get("PATH_INFO", "")
        return cls.from_uri(environ.get("REQUEST_METHOD", "GET"), uri, form)

    @classmethod
    def from_scope(
        cls,
        scope: Mapping[str, Any],
        form: Mapping[str, Any] | None = None,
    ) -> "RequestTarget":
        """Build from an ASGI HTTP scope. Its ``path`` never has a query."""
        return cls(method=_override(scope.get("method", "GET"), form), path=scope.get("path", ""))
