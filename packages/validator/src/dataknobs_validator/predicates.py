"""Reusable transforms and composite predicates.

Composite predicates take a validator, so they can be passed to ``fulfill``
or used as lazy items of ``fulfill_all_of``/``fulfill_one_of`` lists:

    ```python
    test(name).fulfill_all_of(lambda name: [
        string_trimmed_not_empty,
        name.does.match(r"^\\w"),
    ], "${PATH} must be a non empty word")
    ```
"""

from __future__ import annotations

from typing import Any

from .validator import Validator


def string_trim(value: Any) -> Any:
    """Strip surrounding whitespace from strings; other values pass through."""
    if isinstance(value, str):
        return value.strip()
    return value


def string_trimmed_not_empty(validator: Validator) -> bool:
    """Test that the value is a string with at least one non-whitespace character."""
    return validator.fulfill_all_of(lambda value: [
        value.is_.a_string(),
        value.transform(string_trim).is_not.empty(),
    ])
