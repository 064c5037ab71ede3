"""Logging-based tracer for predicate evaluation.

When enabled every predicate evaluation is logged at DEBUG level on the
``dataknobs_validator.trace`` logger:

    [V]  person.name="John" a_string
    [ ]  person fulfill_all_of<start>
    [-]    person.age=12 in_range [18, 99]
    [-]  person fulfill_all_of<end>

``[V]`` marks a fulfilled predicate, ``[-]`` a failed one and ``[ ]`` the
start of a combinator. Negated verbs prefix the predicate name with ``!``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Set
from typing import Any, Sequence

logger = logging.getLogger("dataknobs_validator.trace")


class Tracer:
    """Formats and logs trace lines, indenting nested combinators."""

    def __init__(self):
        self._depth = 0

    @property
    def depth(self) -> int:
        return self._depth

    def begin(self) -> None:
        self._depth += 1

    def end(self) -> None:
        self._depth = max(0, self._depth - 1)

    def log(
        self,
        name: str,
        success: bool | None,
        path: str,
        value: Any,
        args: Sequence[Any] = (),
        negated: bool = False,
    ) -> None:
        icon = "[ ]" if success is None else "[V]" if success else "[-]"
        args_str = self.args_to_str(args)
        prefix = "!" if negated else ""
        line = f"{path or 'ROOT'}={self.value_to_str(value)} {prefix}{name}"
        if args_str:
            line = f"{line} {args_str}"
        logger.debug(f"{icon}  {' ' * (self._depth * 2)}{line}")

    def args_to_str(self, args: Sequence[Any]) -> str:
        if not args:
            return ""
        return f"[{', '.join(self.value_to_str(arg) for arg in args)}]"

    @staticmethod
    def value_to_str(value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return "[Array]"
        if isinstance(value, Set):
            return "[Set]"
        if isinstance(value, Mapping):
            return "[Mapping]"
        if isinstance(value, str):
            return f'"{value}"'
        if value is None or isinstance(value, (bool, int, float)):
            return str(value)
        return f"[{type(value).__name__}]"


_tracer: Tracer | None = None


def get_tracer() -> Tracer | None:
    """Return the active tracer, or None when tracing is disabled."""
    return _tracer


def enable_trace(enable: bool = True) -> None:
    """Turn predicate tracing on (or off with ``enable=False``)."""
    global _tracer
    _tracer = Tracer() if enable else None


def disable_trace() -> None:
    """Turn predicate tracing off."""
    enable_trace(False)
