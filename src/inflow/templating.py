"""
Template Interpolation.

Replaces ``{{ path }}`` tokens in configuration strings with values from
the execution context:

    {{ user.name }}       -> str form of context["user"]["name"]
    {{ json items }}      -> JSON encoding of context["items"]

A token whose path does not resolve is left in the text verbatim.

Example:
    >>> interpolate("Hello {{user.name}}", {"user": {"name": "Ana"}})
    'Hello Ana'
    >>> interpolate("{{json items}}", {"items": [1, 2]})
    '[1,2]'
"""

import json
import re
from collections.abc import Mapping
from typing import Any, Iterable

TOKEN_PATTERN = re.compile(r"\{\{(\s*json\s+)?([^}]+)\}\}")

_MISSING = object()


def resolve_path(context: Mapping[str, Any], path: str) -> Any:
    """
    Walk a dotted path through nested mappings and lists.

    A segment indexes a list when it is a non-negative integer within
    range (``items.0.title``). Returns the sentinel ``_MISSING`` when a
    segment is absent or the current value cannot be walked into.
    """
    value: Any = context
    for key in path.strip().split("."):
        if isinstance(value, Mapping) and key in value:
            value = value[key]
        elif isinstance(value, list) and key.isdecimal() and int(key) < len(value):
            value = value[int(key)]
        else:
            return _MISSING
    return value


def to_json(value: Any) -> str:
    """Compact JSON encoding used for ``{{ json ... }}`` tokens."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def to_text(value: Any) -> str:
    """String form used for plain tokens."""
    if isinstance(value, str):
        return value
    # Keep null/booleans/containers in their JSON spelling
    if value is None or isinstance(value, (bool, Mapping, list, tuple)):
        return to_json(value)
    return str(value)


def interpolate(text: str, context: Mapping[str, Any]) -> str:
    """
    Substitute every template token in ``text``.

    Args:
        text: Text that may contain tokens.
        context: Execution context to resolve paths against.

    Returns:
        The text with resolvable tokens replaced.
    """
    if "{{" not in text:
        return text

    def _replace(match: re.Match) -> str:
        json_flag, path = match.group(1), match.group(2)
        value = resolve_path(context, path)
        if value is _MISSING:
            return match.group(0)
        if json_flag:
            return to_json(value)
        return to_text(value)

    return TOKEN_PATTERN.sub(_replace, text)


def interpolate_fields(
    data: Mapping[str, Any],
    context: Mapping[str, Any],
    fields: Iterable[str],
) -> dict[str, Any]:
    """
    Return a copy of ``data`` with the named string fields interpolated.

    Non-string and absent fields are left as they are.
    """
    result = dict(data)
    for name in fields:
        value = result.get(name)
        if isinstance(value, str):
            result[name] = interpolate(value, context)
    return result
