"""Placeholder substitution for failure messages.

Supported placeholders:

- ``${0}``, ``${1}``, ... positional message arguments
- ``${VALUE}`` the value under test
- ``${PATH}`` the (first) attribution path, ``${PATH0}``, ``${PATH1}``, ...
  each attribution path when a failure is filed against several paths
- ``${CURRENT_PATH}`` the path segment that produced the node
- ``${PARENT_PATH}`` the attribution path without the current segment

A backslash right before ``${`` escapes the placeholder; the backslash is
dropped from the final message.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence, Set
from typing import Any, List

from .paths import get_parent_path

PLACEHOLDER_RE = re.compile(r"(\\?)\$\{([^}]+)\}")
PATH_INDEX_RE = re.compile(r"PATH(\d+)")


def format_message_arg(value: Any) -> str:
    """Render a value for insertion into a message.

    Lists, tuples and sets render as a JSON-like array (``["a", 2]``),
    everything else through ``str()``.
    """
    if isinstance(value, Set):
        value = list(value)
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value), default=str)
    return str(value)


def normalize_message_args(message_args: Any) -> List[Any]:
    """Turn ``message_args`` into a list of positional arguments.

    A single non-list argument is wrapped; to pass a list as a single
    argument it must itself be wrapped in a list.
    """
    if message_args is None:
        return []
    if isinstance(message_args, (list, tuple)):
        return list(message_args)
    return [message_args]


def resolve_message(
    template: str,
    value: Any = None,
    error_paths: Sequence[str] = ("",),
    current_path: str = "",
    message_args: Any = None,
) -> str:
    """Substitute the placeholders of a message template.

    Args:
        template: Message containing ``${...}`` placeholders
        value: The value under test (``${VALUE}``)
        error_paths: Attribution paths (``${PATH}``, ``${PATHn}``)
        current_path: Path segment of the node (``${CURRENT_PATH}``)
        message_args: Positional arguments (``${n}``)

    Returns:
        The resolved message; unknown placeholders are left untouched

    Example:
        ```python
        resolve_message('"${PATH}" is ${VALUE}, expected ${0}', 7, ["age"], "age", "a string")
        # '"age" is 7, expected a string'
        ```
    """
    if "${" not in template:
        return template
    args = normalize_message_args(message_args)

    def replace(match: re.Match) -> str:
        escape, name = match.group(1), match.group(2)
        if escape:
            return match.group(0)[1:]
        if name.isdigit():
            idx = int(name)
            return format_message_arg(args[idx]) if idx < len(args) else match.group(0)
        if name == "VALUE":
            return format_message_arg(value)
        if name == "PATH":
            return error_paths[0] if error_paths else ""
        if name == "CURRENT_PATH":
            return current_path
        if name == "PARENT_PATH":
            return get_parent_path(error_paths[0], current_path) if error_paths else ""
        path_index = PATH_INDEX_RE.fullmatch(name)
        if path_index:
            idx = int(path_index.group(1))
            if idx < len(error_paths):
                return error_paths[idx]
        return match.group(0)

    return PLACEHOLDER_RE.sub(replace, template)
