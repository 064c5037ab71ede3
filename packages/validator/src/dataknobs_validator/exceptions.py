"""Exception hierarchy for the validator package.

Two disjoint families of errors exist:

- **Validation failures** are expected, data-dependent outcomes. Only the
  ``ON_ERROR_THROW`` mode raises them (as ``ValidationError``); the other
  modes record them in a ``ValidationResult``.
- **Usage errors** signal a defect in the calling code (wrong argument
  types, duplicate rule paths, reuse of a consumed validator). They are
  raised immediately regardless of mode and are never recorded.

Example:
    ```python
    from dataknobs_validator import Validator, ValidationError

    test = Validator.create_on_error_throw_validator()
    try:
        test({"age": "x"}).prop("age").is_.a_number("${PATH} must be a number")
    except ValidationError as e:
        print(e.path)     # 'age'
        print(e.context)  # {'path': 'age'}
    ```
"""

from typing import Any, Dict


class ValidatorError(Exception):
    """Base exception for the validator package.

    Supports optional context data for rich error information.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (both are supported)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        # Details takes precedence if both are provided
        self.context = details or context or {}
        self.details = self.context


class ValidationError(ValidatorError):
    """Raised by ``ON_ERROR_THROW`` validators when a predicate fails.

    The path is the attribution path of the failing node. When a failure
    is filed against several paths (see ``Validator.error_context``) they
    are joined with ``|``.

    Example:
        ```python
        raise ValidationError("name must be a string", path="person.name")
        ```
    """

    def __init__(self, message: str, path: str = "", context: Dict[str, Any] | None = None):
        merged = {"path": path}
        if context:
            merged.update(context)
        super().__init__(message, context=merged)
        self.path = path


class UsageError(ValidatorError):
    """Raised when the validator API is misused.

    Common scenarios include:
    - Wrong argument type to a comparison predicate
    - A non-iterable value passed to ``each``
    - Registering two rules for the same path
    - Using a validator after its fluent chain has completed
    """

    pass


class ConfigurationError(ValidatorError):
    """Raised when validator settings are invalid or cannot be loaded.

    Example:
        ```python
        raise ConfigurationError(
            "pool_max_size must be a non-negative integer",
            context={"key": "pool_max_size", "value": -1}
        )
        ```
    """

    pass


__all__ = [
    "ValidatorError",
    "ValidationError",
    "UsageError",
    "ConfigurationError",
]
