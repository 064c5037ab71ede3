"""Failure propagation modes."""

from enum import Enum

from .exceptions import UsageError


class Mode(str, Enum):
    """How a test function reacts to a failing predicate.

    - ``ON_ERROR_THROW``: raise a ``ValidationError`` on the first failure.
    - ``ON_ERROR_BREAK``: record the first failure, then skip every later
      predicate of the test function.
    - ``ON_ERROR_NEXT_PATH``: record the failure and skip only later
      predicates nested under an already failed path.
    """

    ON_ERROR_THROW = "on_error_throw"
    ON_ERROR_BREAK = "on_error_break"
    ON_ERROR_NEXT_PATH = "on_error_next_path"

    @classmethod
    def coerce(cls, mode: "Mode | str") -> "Mode":
        """Convert a mode name or value into a ``Mode``.

        Args:
            mode: A ``Mode``, its value (``"on_error_break"``) or its name
                (``"ON_ERROR_BREAK"``)

        Returns:
            The matching Mode

        Raises:
            UsageError: If the mode is unknown
        """
        if isinstance(mode, cls):
            return mode
        if isinstance(mode, str):
            try:
                return cls(mode.lower())
            except ValueError:
                pass
            try:
                return cls[mode.upper()]
            except KeyError:
                pass
        raise UsageError(
            f"Invalid validator mode: {mode!r}",
            context={"mode": mode, "valid_modes": [m.value for m in cls]},
        )
