"""Placeholder substitution for tool templates.

Templates reference caller arguments as ``{{name}}`` and environment
variables as ``{{env:NAME}}``. A caller argument whose whole value is an
``{{env:NAME}}`` reference is replaced by that variable before substitution,
so both spellings resolve to the same text. Substituted text is not expanded
again; anything that still looks like a placeholder afterwards fails the
resolution.
"""

import json
import math
import os
import re
from typing import Any, Mapping, Union

from .exceptions import UnresolvedPlaceholdersError

ArgumentValue = Union[str, int, float, bool]

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")
ENV_REFERENCE_PATTERN = re.compile(r"\{\{env:([^{}]+)\}\}")
ENV_PREFIX = "env:"


def stringify_value(value: Any) -> str:
    """Render an argument value as template text.

    Strings are used verbatim, booleans as ``true``/``false``, integral
    floats without a fractional part. Anything else is rendered as compact
    JSON (``null`` for None).
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return json.dumps(value, separators=(",", ":"))


def expand_env_references(
    arguments: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return a copy of ``arguments`` with ``{{env:NAME}}`` values looked up."""
    env = os.environ if environ is None else environ
    expanded: dict[str, Any] = {}
    for key, value in arguments.items():
        if isinstance(value, str):
            match = ENV_REFERENCE_PATTERN.fullmatch(value)
            if match:
                value = env.get(match.group(1), "")
        expanded[key] = value
    return expanded


def find_placeholders(text: str) -> list[str]:
    """Return every ``{{...}}`` span in ``text``, verbatim and in order."""
    return [match.group(0) for match in PLACEHOLDER_PATTERN.finditer(text)]


def resolve_template(
    template: str,
    arguments: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
) -> str:
    """Substitute all placeholders in ``template``.

    Args:
        template: Text containing ``{{name}}`` / ``{{env:NAME}}`` placeholders.
        arguments: Caller arguments (defaults already applied).
        environ: Environment mapping, ``os.environ`` when omitted.

    Returns:
        The template with every placeholder substituted.

    Raises:
        UnresolvedPlaceholdersError: If any placeholder has no value.
    """
    env = os.environ if environ is None else environ
    values = expand_env_references(arguments, env)

    def _substitute(match: re.Match) -> str:
        name = match.group(1)
        if name.startswith(ENV_PREFIX):
            return env.get(name[len(ENV_PREFIX):], "")
        if name in values:
            return stringify_value(values[name])
        return match.group(0)

    result = PLACEHOLDER_PATTERN.sub(_substitute, template)

    unresolved = find_placeholders(result)
    if unresolved:
        raise UnresolvedPlaceholdersError(unresolved)

    return result
