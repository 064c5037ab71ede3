"""Validation result collecting failure messages by path.
"""

from __future__ import annotations

from typing import Dict, Iterator, List

from .exceptions import UsageError


class ValidationResult:
    """Accumulates failure messages keyed by attribution path.

    A single result is shared by every validation made through one test
    function. It is append-only; ``reset()`` is the only way to clear it.

    Example:
        ```python
        test = Validator.create_on_error_next_path_validator()
        test({"age": "x"}).prop("age").is_.a_number("${PATH} must be a number")

        test.result.is_valid()        # False
        test.result.get_error("age")  # 'age must be a number'
        ```
    """

    def __init__(self):
        self._errors: Dict[str, List[str]] = {}

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.is_valid()

    def __repr__(self) -> str:
        return f"ValidationResult(errors={self._errors!r})"

    def add_failure(self, path: str, message: str) -> None:
        """Append a failure message for a path.

        Args:
            path: Attribution path, relative to the root value
            message: The resolved failure message

        Raises:
            UsageError: If the message is empty
        """
        if not message:
            raise UsageError(
                "A failure message cannot be empty",
                context={"path": path},
            )
        self._errors.setdefault(path, []).append(message)

    def get_error(self, path: str = "") -> str | None:
        """Get the first failure message for a path.

        Args:
            path: The path relative to the root value

        Returns:
            The first message, or None if the path has no failures
        """
        errors = self._errors.get(path)
        return errors[0] if errors else None

    def get_errors(self, path: str = "") -> List[str]:
        """Get all failure messages for a path (a copy)."""
        return list(self._errors.get(path, ()))

    def get_all_errors(self) -> List[str]:
        """Get every failure message, in the order the paths first failed."""
        all_errors: List[str] = []
        for errors in self._errors.values():
            all_errors.extend(errors)
        return all_errors

    def error_paths(self) -> Iterator[str]:
        """Iterate over the paths that have failures."""
        return iter(list(self._errors))

    def error_count(self) -> int:
        """Total number of recorded failure messages."""
        return sum(len(errors) for errors in self._errors.values())

    def is_valid(self) -> bool:
        """Return True when no failure has been recorded."""
        return not self._errors

    def is_path_valid(self, path: str) -> bool:
        """Return True when no failure has been recorded for the path."""
        return path not in self._errors

    def reset(self) -> None:
        """Forget every recorded failure."""
        self._errors.clear()

    def to_dict(self) -> Dict[str, List[str]]:
        """Return a copy of the failures as ``{path: [messages]}``."""
        return {path: list(errors) for path, errors in self._errors.items()}


class NoopValidationResult(ValidationResult):
    """A result that ignores every failure.

    Used for throwaway evaluations such as the probe of
    ``Validator.conditionally``.
    """

    def add_failure(self, path: str, message: str) -> None:
        pass

    def reset(self) -> None:
        pass
