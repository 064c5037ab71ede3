"""Property path helpers.

Paths use indexed dot notation: ``person.addresses[0].zip``. The root of the
value under test is the empty path ``""``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, List, Tuple

SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[([^\]]*)\]")


def join_paths(*segments: str) -> str:
    """Join path segments, skipping empty ones.

    Segments starting with ``[`` are appended without a separating dot.

    Args:
        *segments: Path segments

    Returns:
        The joined path

    Example:
        ```python
        join_paths("person", "addresses", "[0]", "zip")
        # 'person.addresses[0].zip'
        ```
    """
    result = ""
    for segment in segments:
        if not segment:
            continue
        if result:
            if segment.startswith("["):
                result += segment
            else:
                result += "." + segment
        else:
            result = segment
    return result


def split_path(path: str) -> List[Tuple[str, bool]]:
    """Split a path into ``(segment, is_index)`` tuples."""
    segments = []
    for name, index in SEGMENT_RE.findall(path):
        if name:
            segments.append((name, False))
        else:
            segments.append((index, True))
    return segments


def _step(obj: Any, segment: str, is_index: bool) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        if segment in obj:
            return obj[segment]
        if is_index and _is_int(segment) and int(segment) in obj:
            return obj[int(segment)]
        return None
    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)):
        if _is_int(segment):
            idx = int(segment)
            if -len(obj) <= idx < len(obj):
                return obj[idx]
        return None
    if is_index:
        return None
    return getattr(obj, segment, None)


def _is_int(segment: str) -> bool:
    return segment.isdigit() or (segment.startswith("-") and segment[1:].isdigit())


def get_path_value(obj: Any, path: str) -> Any:
    """Resolve a path against a value.

    A mapping key equal to the whole path wins; otherwise the path is walked
    segment by segment through mappings (keys), sequences (int indexes) and
    plain objects (attributes).

    Args:
        obj: The value to resolve against
        path: Dotted path with optional ``[index]`` segments

    Returns:
        The resolved value, or None when any step is missing
    """
    if not path:
        return obj
    if isinstance(obj, Mapping) and path in obj:
        return obj[path]
    current = obj
    for segment, is_index in split_path(path):
        current = _step(current, segment, is_index)
        if current is None:
            return None
    return current


def is_nested_path(path: str, parent: str) -> bool:
    """Test whether ``path`` equals or is structurally nested under ``parent``.

    ``"name.first"`` and ``"name[0]"`` are nested under ``"name"``, while
    ``"nameSuffix"`` is not. Every path is nested under the root ``""``.
    """
    if not parent or path == parent:
        return True
    return path.startswith(parent) and path[len(parent)] in ".["


def get_parent_path(full_path: str, current_path: str) -> str:
    """Remove the current segment from a full path.

    Args:
        full_path: The full path, e.g. ``person.name``
        current_path: The segment that produced the node, e.g. ``name``

    Returns:
        The parent path, e.g. ``person``
    """
    if current_path and full_path.endswith(current_path):
        parent = full_path[: len(full_path) - len(current_path)]
    else:
        # the full path was redirected, drop its last structural segment
        match = re.search(r"(\.[^.\[]*|\[[^\]]*\])$", full_path)
        parent = full_path[: match.start()] if match else ""
    if parent.endswith("."):
        parent = parent[:-1]
    return parent
