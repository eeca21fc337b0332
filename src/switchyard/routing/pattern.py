"""Route template compilation.

Templates are literal paths with ``:name`` placeholders::

    "/page/:page_id/:page_size"  ->  r"/page/([A-Za-z0-9_\\-%]+)/([A-Za-z0-9_\\-%]+)"

Literal text is escaped; each placeholder becomes its filter fragment or
the default fragment. Filters are raw regex fragments and must carry
their own capture group.

When matching, literal text (including the base path) compares
case-insensitively while filter fragments keep the case rules they were
written with.
"""

import re
from collections.abc import Mapping

# Shared by compilation, the match-time group count check, and generation
PLACEHOLDER = re.compile(r":(\w+)")

# One or more ASCII letters, digits, underscores, hyphens, or percent signs
# (captured). ASCII only, unlike ``\w`` on str patterns.
DEFAULT_FRAGMENT = r"([A-Za-z0-9_\-%]+)"


def placeholder_names(template: str) -> list[str]:
    """Return the placeholder names in *template*, in declaration order.

    Repeated names are kept::

        placeholder_names("/a/:id/b/:id")  ->  ["id", "id"]
    """
    return PLACEHOLDER.findall(template)


def filter_for(name: str, filters: Mapping[str, str]) -> str:
    """Return the regex fragment for placeholder *name*.

    Filter keys may be the bare name or the colon-prefixed token; the bare
    name wins when both are present.
    """
    if name in filters:
        return filters[name]
    return filters.get(f":{name}", DEFAULT_FRAGMENT)


def split_template(template: str) -> list[tuple[str, str | None]]:
    """Split *template* into ``(text, placeholder_name)`` pieces.

    Literal pieces have ``None`` as their name; empty literals are dropped.
    """
    pieces: list[tuple[str, str | None]] = []
    position = 0
    for placeholder in PLACEHOLDER.finditer(template):
        if placeholder.start() > position:
            pieces.append((template[position : placeholder.start()], None))
        pieces.append((placeholder.group(0), placeholder.group(1)))
        position = placeholder.end()
    if position < len(template):
        pieces.append((template[position:], None))
    return pieces


def compile_pattern(template: str, filters: Mapping[str, str] | None = None) -> str:
    """Compile a route template into an (unanchored) regex source string.

    The result is recomputed on every call, so filter changes on a route
    take effect on the next match.
    """
    filters = filters or {}
    return "".join(
        re.escape(text) if name is None else filter_for(name, filters)
        for text, name in split_template(template)
    )


def _caseless(text: str) -> str:
    return f"(?i:{re.escape(text)})" if text else ""


def anchored_pattern(
    template: str,
    filters: Mapping[str, str] | None = None,
    base_path: str = "",
) -> str:
    """Anchor a template's pattern under *base_path* for full-path matching.

    Trailing separators of the template become optional in the request path.
    """
    filters = filters or {}
    pieces = split_template(template.rstrip("/"))
    body = "".join(
        _caseless(text) if name is None else filter_for(name, filters) for text, name in pieces
    )
    return f"^{_caseless(base_path)}{body}/?$"


def compile_matcher(
    template: str,
    filters: Mapping[str, str] | None = None,
    base_path: str = "",
) -> re.Pattern[str]:
    """Build the matcher for a template.

    Raises ``re.error`` when a filter fragment is not valid regex.
    """
    return re.compile(anchored_pattern(template, filters, base_path))
