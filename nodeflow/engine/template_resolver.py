"""
Template resolver for {{ }} references inside node configuration text.

Supported references:
    {{input}}                     the current node's input
    {{input.user.name}}           a path into the input
    {{nodeA}}                     the full output of an executed node
    {{nodeA.items[0].name}}       a path into a node's output

Tokens that cannot be resolved are left in place verbatim so that
partially-wired workflows stay diagnosable.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Sequence

TOKEN_PATTERN = re.compile(r"\{\{([^}]+)\}\}")
_BRACKET_PATTERN = re.compile(r"\[(\w+)\]")
_REFERENCE_PATTERN = re.compile(r"^([^.\[]+)(.*)$")
_INDEX_PATTERN = re.compile(r"^\d+$")


class _Unresolved:
    """Sentinel for a path that does not lead to a value."""

    _instance: _Unresolved | None = None

    def __new__(cls) -> _Unresolved:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED = _Unresolved()


def stringify_value(value: Any) -> str:
    """Convert a value to its interpolated text form."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def split_path(path: str) -> list[str]:
    """Normalize ``a[0].b`` to ``a.0.b`` and split into segments."""
    sanitized = _BRACKET_PATTERN.sub(r".\1", path).lstrip(".")
    return [segment for segment in sanitized.split(".") if segment]


def evaluate_path(root: Any, path: str) -> Any:
    """Walk ``root`` one segment at a time.

    Returns UNRESOLVED for a missing key, a bad index, or a walk through
    None or a scalar.
    """
    current = root
    for segment in split_path(path):
        if current is None or current is UNRESOLVED:
            return UNRESOLVED
        if isinstance(current, (list, tuple)):
            if not _INDEX_PATTERN.match(segment):
                return UNRESOLVED
            index = int(segment)
            if index >= len(current):
                return UNRESOLVED
            current = current[index]
        elif isinstance(current, Mapping):
            if segment not in current:
                return UNRESOLVED
            current = current[segment]
        else:
            return UNRESOLVED
    return current


def lookup_reference(
    path: str,
    input_value: Any,
    previous_outputs: Mapping[str, Any],
) -> Any:
    """Resolve a reference rooted at ``input`` or at a node id.

    Returns UNRESOLVED when the root node has not produced output yet.
    """
    match = _REFERENCE_PATTERN.match(path)
    if not match:
        return UNRESOLVED

    root_name, rest = match.group(1), match.group(2)
    if root_name == "input":
        root = input_value
    elif root_name in previous_outputs:
        root = previous_outputs[root_name]
    else:
        return UNRESOLVED

    if not rest:
        return root
    return evaluate_path(root, rest)


def resolve(
    text: Any,
    input_value: Any,
    previous_outputs: Mapping[str, Any],
) -> str:
    """Resolve all {{ }} tokens in ``text``.

    Non-string values are returned in their string form without scanning.
    """
    if not isinstance(text, str):
        return stringify_value(text)

    def replacer(match: re.Match[str]) -> str:
        path = match.group(1).strip()
        if not path:
            return match.group(0)

        if path == "input":
            return stringify_value(input_value)

        value = lookup_reference(path, input_value, previous_outputs)
        if value is UNRESOLVED:
            return match.group(0)
        # A whole-node reference interpolates even when the output is null
        if value is None and path not in previous_outputs:
            return match.group(0)
        return stringify_value(value)

    return TOKEN_PATTERN.sub(replacer, text)


def resolve_config(
    config: Mapping[str, Any],
    input_value: Any,
    previous_outputs: Mapping[str, Any],
    fields: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Resolve every string-valued field (or just ``fields``) of a config."""
    resolved: dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(value, str) and (fields is None or key in fields):
            resolved[key] = resolve(value, input_value, previous_outputs)
        else:
            resolved[key] = value
    return resolved
