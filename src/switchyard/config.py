"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation, built either
in code or from a YAML document::

    base_path: /blog
    routes:
      index: [/index, SomeController.indexAction, GET]
      save:
        path: /save/:id
        target: SomeController::save
        methods: [POST, PUT]
        filters: {id: '(\\d+)'}

Route entries keep document order, which is registration order.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from switchyard.errors import ConfigurationError
from switchyard.routing.handlers import SEPARATOR

logger = logging.getLogger("switchyard.config")


def normalize_target(target: str) -> str:
    """Turn a dotted ``Key.method`` target into ``Key::method``.

    Only the last dot splits, so dotted keys survive. Targets already
    using ``::`` are returned unchanged.
    """
    if SEPARATOR in target or "." not in target:
        return target
    key, _, method = target.rpartition(".")
    return f"{key}{SEPARATOR}{method}"


def _methods(value: Any, name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence) and all(isinstance(m, str) for m in value):
        return tuple(value)
    msg = f"Route {name!r}: methods must be a string or a list of strings, got {value!r}"
    raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class RouteSpec:
    """One route as declared in configuration."""

    template: str
    target: str
    methods: tuple[str, ...] = ("GET",)
    name: str | None = None
    filters: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_entry(cls, name: str | None, entry: Any) -> "RouteSpec":
        """Parse a ``[template, target, methods]`` list or a mapping entry."""
        if isinstance(entry, Mapping):
            try:
                template = entry["path"]
                target = entry["target"]
            except KeyError as exc:
                msg = f"Route {name!r} is missing required key {exc.args[0]!r}"
                raise ConfigurationError(msg) from exc
            methods = entry.get("methods", "GET")
            filters = entry.get("filters") or {}
        elif isinstance(entry, Sequence) and not isinstance(entry, str) and len(entry) == 3:
            template, target, methods = entry
            filters = {}
        else:
            msg = f"Route {name!r} must be [path, target, methods] or a mapping, got {entry!r}"
            raise ConfigurationError(msg)

        if not isinstance(template, str) or not isinstance(target, str):
            msg = f"Route {name!r}: path and target must be strings"
            raise ConfigurationError(msg)
        if not isinstance(filters, Mapping):
            msg = f"Route {name!r}: filters must be a mapping"
            raise ConfigurationError(msg)

        return cls(
            template=template,
            target=normalize_target(target),
            methods=_methods(methods, str(name)),
            name=name,
            filters={str(k): str(v) for k, v in filters.items()},
        )


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    Override what you need::

        config = RouterConfig(routes=(RouteSpec("/", "Home"),), base_path="/api")
    """

    routes: tuple[RouteSpec, ...] = ()

    # Prefix prepended to every route pattern
    base_path: str = ""

    # Front-controller directory removed from request paths before matching
    script_name: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RouterConfig":
        """Build from a parsed document with ``routes`` and optional ``base_path``.

        ``routes`` is a mapping of route name to entry, or a list of
        entries (unnamed unless a mapping entry carries ``name``).
        """
        if not isinstance(data, Mapping):
            msg = f"Router configuration must be a mapping, got {type(data).__name__}"
            raise ConfigurationError(msg)

        raw_routes = data.get("routes") or {}
        specs: list[RouteSpec] = []
        if isinstance(raw_routes, Mapping):
            for name, entry in raw_routes.items():
                specs.append(RouteSpec.from_entry(str(name), entry))
        elif isinstance(raw_routes, Sequence) and not isinstance(raw_routes, str):
            for entry in raw_routes:
                name = entry.get("name") if isinstance(entry, Mapping) else None
                specs.append(RouteSpec.from_entry(name, entry))
        else:
            msg = "'routes' must be a mapping or a list"
            raise ConfigurationError(msg)

        base_path = data.get("base_path") or ""
        script_name = data.get("script_name") or ""
        if not isinstance(base_path, str) or not isinstance(script_name, str):
            msg = "'base_path' and 'script_name' must be strings"
            raise ConfigurationError(msg)

        return cls(routes=tuple(specs), base_path=base_path, script_name=script_name)


def load_config(path: str | Path) -> RouterConfig:
    """Load a RouterConfig from a YAML file.

    Raises ``ConfigurationError`` for unreadable, malformed, or
    structurally invalid files.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        msg = f"Cannot read router configuration {str(path)!r}: {exc}"
        raise ConfigurationError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in router configuration {str(path)!r}: {exc}"
        raise ConfigurationError(msg) from exc

    config = RouterConfig.from_mapping(data or {})
    logger.debug("Loaded %d routes from %s", len(config.routes), path)
    return config
