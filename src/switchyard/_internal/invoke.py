"""Invoke helpers — call a bound handler and collect what it produced.

Handlers produce output two ways: by writing to an injected ``out``
stream, and by returning a value. Both come back in a ``HandlerResult``
instead of going to the process's standard output::

    class PageController:
        def show(self, page_id, *, out):
            out.write(f"page {page_id}")
            return "!"

    result = invoke(handler, BoundArguments(args=["7"]))
    result.output  # "page 7!"
"""

import inspect
import io
import logging
from dataclasses import dataclass
from typing import Any

from switchyard._internal.types import Handler
from switchyard.routing.handlers import BoundArguments

logger = logging.getLogger("switchyard.routing")

# Keyword-only parameter name that receives the output stream
WRITER_PARAMETER = "out"


def is_echoable(value: Any) -> bool:
    """Return True if *value* has a textual form worth appending to output.

    Strings, numbers, and booleans qualify, as does any object whose class
    defines its own ``__str__``. ``None``, bytes, and containers that only
    inherit ``object.__str__`` do not.
    """
    if value is None or isinstance(value, (bytes, bytearray)):
        return False
    if isinstance(value, (str, int, float)):
        return True
    return type(value).__str__ is not object.__str__


def as_text(value: Any) -> str:
    """Render an echoable value. Booleans render as ``"1"`` and ``""``."""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


@dataclass(frozen=True, slots=True)
class HandlerResult:
    """What one handler call produced."""

    written: str
    returned: Any = None

    @property
    def output(self) -> str:
        """Written text followed by the returned value, when echoable."""
        if is_echoable(self.returned):
            return self.written + as_text(self.returned)
        return self.written


def invoke(handler: Handler, bound: BoundArguments) -> HandlerResult:
    """Call *handler* with *bound* arguments inside a fresh output scope.

    Leftover named values go to ``**kwargs`` if the handler has one,
    otherwise to ``*args``; a handler with neither never sees them.
    The output stream is closed on every exit path and handler
    exceptions propagate unchanged.
    """
    params = inspect.signature(handler).parameters.values()
    kinds = {p.kind for p in params}
    wants_writer = any(
        p.name == WRITER_PARAMETER and p.kind is inspect.Parameter.KEYWORD_ONLY for p in params
    )

    args = list(bound.args)
    kwargs: dict[str, Any] = {}
    if bound.extra:
        if inspect.Parameter.VAR_KEYWORD in kinds:
            kwargs.update(bound.extra)
        elif inspect.Parameter.VAR_POSITIONAL in kinds:
            args.extend(bound.extra.values())
        else:
            logger.debug("Dropping unbound route parameters %s", sorted(bound.extra))

    with io.StringIO() as out:
        if wants_writer:
            kwargs[WRITER_PARAMETER] = out
        returned = handler(*args, **kwargs)
        written = out.getvalue()
    return HandlerResult(written=written, returned=returned)
