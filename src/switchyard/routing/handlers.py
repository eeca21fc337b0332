"""Handler registry, resolution, and positional parameter binding.

Route targets are symbolic. ``"SomeController::page"`` names a class
registered under ``"SomeController"`` and its public ``page`` method;
``"InvokableController"`` (no method) means "call the instance". Classes
and plain callables are registered explicitly at startup::

    registry = HandlerRegistry()

    @registry.register
    class SomeController:
        def page(self, page_id, page_size): ...

    registry.resolve("SomeController::page")  # ResolvedHandler
    registry.resolve("SomeController::nope")  # None

Every failure mode resolves to ``None``. The reason is only logged.
"""

import inspect
import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from switchyard._internal.types import Handler, Target
from switchyard.errors import HandlerUnresolvable

logger = logging.getLogger("switchyard.routing")

SEPARATOR = "::"
CALL = "__call__"

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)

# Placeholder for a formal parameter that no route parameter was bound to
_HOLE: Any = object()


@dataclass(frozen=True, slots=True)
class HandlerRef:
    """A target split into its registry key and method name.

    ``method`` is ``None`` when the target names no method.
    """

    key: str
    method: str | None = None

    @classmethod
    def parse(cls, target: str) -> "HandlerRef":
        key, sep, method = target.partition(SEPARATOR)
        if not sep or not method.strip():
            return cls(key=key)
        return cls(key=key, method=method)


@dataclass(frozen=True, slots=True)
class ResolvedHandler:
    """A target that passed validation.

    ``owner`` is the class to instantiate, or ``None`` for a plain
    callable. ``method`` is ``None`` when the instance itself is called.
    """

    target: Target
    owner: type | None
    method: str | None
    func: Handler | None = None

    def bind(self, instance: object | None = None) -> Handler:
        """Return the callable to invoke.

        Constructs ``owner()`` with no arguments unless *instance* is given.
        """
        if self.owner is None:
            if self.func is None:
                raise HandlerUnresolvable(self.target)
            return self.func
        if instance is None:
            instance = self.owner()
        if self.method is None:
            return instance  # type: ignore[return-value]
        return getattr(instance, self.method)


@dataclass(slots=True)
class BoundArguments:
    """Positional arguments for a handler plus the leftover named values."""

    args: list[Any] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


def _find_attribute(owner: type, name: str) -> Any:
    """Look *name* up on the class MRO, ignoring ``object`` and the metaclass."""
    for klass in owner.__mro__:
        if klass is object:
            break
        if name in vars(klass):
            return vars(klass)[name]
    return None


def _is_public(name: str) -> bool:
    return name == CALL or not name.startswith("_")


class HandlerRegistry:
    """Explicit mapping from handler keys to classes and callables.

    Replaces looking types up by name at request time. Keys default to the
    registered object's ``__qualname__``.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: dict[str, Handler | type] = {}

    def register(self, obj: Any = None, *, name: str | None = None) -> Any:
        """Register a class or callable, directly or as a decorator.

        Usage::

            registry.register(SomeController)

            @registry.register(name="pages")
            class PageController: ...

        Registering an existing key replaces the previous entry.
        """

        def decorator(target: Any) -> Any:
            key = name or target.__qualname__
            if key in self._handlers:
                logger.debug("Replacing handler registered as %r", key)
            self._handlers[key] = target
            return target

        if obj is None:
            return decorator
        return decorator(obj)

    def get(self, key: str) -> Handler | type | None:
        """Look up a registered object by key. Returns ``None`` if not found."""
        return self._handlers.get(key)

    def resolve(self, target: Target) -> ResolvedHandler | None:
        """Validate *target* and return how to call it, or ``None``."""
        resolved, reason = self._resolve(target)
        if resolved is None:
            logger.debug("Target %r is not a valid handler: %s", target, reason)
        return resolved

    def _resolve(self, target: Target) -> tuple[ResolvedHandler | None, str]:
        if target is None:
            return None, "no target"

        if isinstance(target, type):
            owner: Any = target
            method = None
        elif isinstance(target, str):
            ref = HandlerRef.parse(target)
            owner = self._handlers.get(ref.key)
            method = ref.method
            if owner is None:
                return None, f"no handler registered as {ref.key!r}"
        elif callable(target):
            return ResolvedHandler(target=target, owner=None, method=None, func=target), ""
        else:
            return None, f"unsupported target type {type(target).__name__}"

        if not isinstance(owner, type):
            # Plain registered callables have no methods to select
            if method is not None:
                return None, f"{method!r} requested on a plain callable"
            return ResolvedHandler(target=target, owner=None, method=None, func=owner), ""

        attr_name = method or CALL
        if not _is_public(attr_name):
            return None, f"{attr_name!r} is not public"
        attr = _find_attribute(owner, attr_name)
        if attr is None:
            return None, f"{owner.__qualname__} has no method {attr_name!r}"
        if not callable(getattr(owner, attr_name)):
            return None, f"{owner.__qualname__}.{attr_name} is not callable"
        return ResolvedHandler(target=target, owner=owner, method=method), ""

    def __contains__(self, key: str) -> bool:
        return key in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)


default_registry = HandlerRegistry()
register = default_registry.register


def positional_parameters(handler: Callable[..., Any]) -> list[inspect.Parameter]:
    """Return the handler's positional formal parameters in declaration order."""
    return [p for p in inspect.signature(handler).parameters.values() if p.kind in _POSITIONAL]


def bind_parameters(
    formals: Sequence[inspect.Parameter],
    parameters: Mapping[str, Any],
) -> BoundArguments:
    """Arrange route *parameters* into the handler's positional order.

    1. Each formal whose name is a parameter key takes that value.
    2. Remaining formals are filled left to right from the unconsumed
       values, in their original order, until those run out.
    3. Formals still empty get their default, or ``None``.

    Values never consumed are returned in ``extra`` under their names.
    """
    pool = dict(parameters)
    slots: list[Any] = []
    for formal in formals:
        if formal.name in pool:
            slots.append(pool.pop(formal.name))
        else:
            slots.append(_HOLE)

    if pool:
        for index, value in enumerate(slots):
            if value is _HOLE:
                key = next(iter(pool))
                slots[index] = pool.pop(key)
            if not pool:
                break

    args = []
    for formal, value in zip(formals, slots, strict=True):
        if value is _HOLE:
            value = None if formal.default is inspect.Parameter.empty else formal.default
        args.append(value)
    return BoundArguments(args=args, extra=pool)
