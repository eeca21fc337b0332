"""Shared type aliases used across switchyard modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: user-defined callable with variable signature
Handler: TypeAlias = Callable[..., Any]

# What a route points at: "Key::method", "Key", a registered class, or a callable
Target: TypeAlias = str | type | Handler | None
