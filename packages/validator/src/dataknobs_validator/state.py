"""Per-node and per-tree bookkeeping for validators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Tuple

from .modes import Mode
from .paths import is_nested_path, join_paths
from .result import ValidationResult


class NodeState:
    """The payload carried by one validation node.

    Node states are pooled. ``_init`` binds every field, ``_reset`` drops the
    references again so a pooled state does not keep the validated value
    alive.
    """

    __slots__ = (
        "name",
        "mode",
        "value",
        "path",
        "local_path",
        "error_base_path",
        "error_paths",
        "redirected",
        "error_prefix",
        "result",
    )

    def __init__(self, name: str = ""):
        self.name = name
        self._reset()

    def _init(
        self,
        mode: Mode,
        value: Any,
        path: str,
        local_path: str,
        error_base_path: str,
        error_prefix: str,
        result: ValidationResult,
        error_paths: Tuple[str, ...] | None = None,
    ) -> NodeState:
        self.mode = mode
        self.value = value
        self.path = path
        self.local_path = local_path
        self.error_base_path = error_base_path
        self.error_prefix = error_prefix
        self.result = result
        if error_paths is None:
            self.error_paths = (join_paths(error_base_path, path),)
            self.redirected = False
        else:
            self.error_paths = error_paths
            self.redirected = True
        return self

    def _reset(self) -> None:
        self.mode = None
        self.value = None
        self.path = ""
        self.local_path = ""
        self.error_base_path = ""
        self.error_paths = ("",)
        self.redirected = False
        self.error_prefix = ""
        self.result = None

    @property
    def primary_error_path(self) -> str:
        return self.error_paths[0]

    def full_error_message(self, message: str) -> str:
        """Prepend the error prefix (if any) to a message."""
        if self.error_prefix:
            return f"{self.error_prefix} {message}"
        return message

    def clone_with(
        self,
        dest: NodeState,
        value: Any,
        path: str | None = None,
        local_path: str | None = None,
        error_paths: Tuple[str, ...] | None = None,
    ) -> NodeState:
        """Initialize ``dest`` as a child of this state.

        Args:
            dest: The (pooled) state to initialize
            value: The child's value
            path: The child's full path; defaults to this path
            local_path: The child's path segment; defaults to this segment
            error_paths: Redirected attribution paths. When omitted a
                redirection of this node is inherited, otherwise the paths
                are derived from the child's path.

        Returns:
            ``dest``
        """
        path = self.path if path is None else path
        local_path = self.local_path if local_path is None else local_path
        if error_paths is None and self.redirected:
            error_paths = self.error_paths
        return dest._init(
            self.mode,
            value,
            path,
            local_path,
            self.error_base_path,
            self.error_prefix,
            self.result,
            error_paths,
        )


@dataclass
class FailureState:
    """Paths that failed so far in one validation tree.

    Shared by reference by every node spawned from one root test-function
    call, and never across calls.
    """

    failed_paths: List[str] = field(default_factory=list)

    def add(self, path: str) -> None:
        self.failed_paths.append(path)

    def has_failures(self) -> bool:
        return bool(self.failed_paths)

    def covers(self, paths: Tuple[str, ...]) -> bool:
        """Test whether any of the paths is nested under a failed path."""
        for failed in self.failed_paths:
            for path in paths:
                if is_nested_path(path, failed):
                    return True
        return False


@dataclass
class StickyEntry:
    """Outcome tracker for one running ``fulfill_one_of``/``fulfill_all_of``.

    ``target`` is the predicate result that decides the combinator (True for
    one-of, False for all-of). None never decides, which keeps enclosing
    entries from reacting to the members of the combinator.
    """

    target: bool | None
    fulfilled: bool = False


class StickyStack:
    """Stack of sticky entries shared by a validator and its children."""

    __slots__ = ("_entries",)

    def __init__(self):
        self._entries: List[StickyEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, target: bool | None) -> StickyEntry:
        entry = StickyEntry(target)
        self._entries.append(entry)
        return entry

    def pop(self) -> StickyEntry:
        return self._entries.pop()

    @property
    def fulfilled(self) -> bool:
        """True when the innermost running combinator has reached its outcome."""
        return bool(self._entries) and self._entries[-1].fulfilled

    def notify(self, success: bool) -> None:
        """Record a finished predicate against the innermost entry."""
        if self._entries:
            top = self._entries[-1]
            if top.target is not None and success == top.target:
                top.fulfilled = True
