"""Reusable validation rules keyed by property path.

Example:
    ```python
    from dataknobs_validator import Validator

    rules = Validator.create_on_error_next_path_rule_set()
    rules.add_rule("", lambda person: person.is_.an_object("a person must be an object"))
    rules.add_rule("name", lambda name: name.is_.a_string('"${PATH}" must be a string'))
    rules.add_rule("address.zip", lambda zip_code, zip_codes: zip_code.is_.in_(
        zip_codes, "${PATH} is not a valid zip code"))

    person = {"name": "John", "address": {"zip": "8000"}}
    rules.validate(person, context=["8000", "9000"]).is_valid()
    # True
    rules.is_valid(person, ["", "name"])
    # True
    ```
"""

from __future__ import annotations

import inspect
import logging
import threading
from typing import Any, Callable, Dict, List, Sequence

from .exceptions import UsageError, ValidationError
from .modes import Mode
from .paths import get_path_value
from .result import ValidationResult
from .validator import TestFunction, Validator

logger = logging.getLogger(__name__)

Rule = Callable[..., Any]


class RuleSet:
    """A set of rules, at most one per path.

    The empty path ``""`` denotes the validated object itself.

    Args:
        error_prefix: Prepended to every failure message
        mode: The failure mode of every validation run
    """

    def __init__(self, error_prefix: str = "", mode: Mode | str = Mode.ON_ERROR_THROW):
        self._error_prefix = error_prefix or ""
        self._mode = Mode.coerce(mode)
        self._rules: Dict[str, _RegisteredRule] = {}
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"RuleSet(mode={self._mode.value}, paths={self.paths()!r})"

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def mode(self) -> Mode:
        return self._mode

    def add_rule(self, path: str, rule: Rule) -> RuleSet:
        """Register the rule for a path.

        Args:
            path: The property path the rule validates, ``""`` for the object
            rule: Called as ``rule(validator)`` or, when it accepts a second
                positional parameter, ``rule(validator, context)``

        Returns:
            This rule set, for chaining

        Raises:
            UsageError: If the path is not a string, the rule is not callable
                or a rule is already registered for the path
        """
        if not isinstance(path, str):
            raise UsageError(f"RuleSet usage error: path must be a string, got {type(path).__name__}")
        if not callable(rule):
            raise UsageError("RuleSet usage error: rule must be callable", context={"path": path})
        with self._lock:
            if path in self._rules:
                raise UsageError(
                    f"RuleSet usage error: a rule for path '{path}' is already defined",
                    context={"path": path},
                )
            self._rules[path] = _RegisteredRule(path, rule)
        return self

    def has_rule(self, path: str) -> bool:
        with self._lock:
            return path in self._rules

    def paths(self) -> List[str]:
        """Get the registered rule paths, in registration order."""
        with self._lock:
            return list(self._rules)

    def validate(
        self,
        value: Any,
        paths: str | Sequence[str] | None = None,
        context: Any = None,
    ) -> ValidationResult:
        """Validate the property paths of an object.

        Each selected rule receives a validator for the value at its path;
        failures are filed under the rule's path.

        Args:
            value: The object to validate
            paths: The path(s) to validate; all rules when omitted
            context: Passed to rules accepting a second parameter

        Returns:
            A new result holding the failures of this run

        Raises:
            UsageError: If no rule is registered for a requested path
            ValidationError: On the first failure in ``ON_ERROR_THROW`` mode
        """
        return self._run(value, paths, context, resolve_paths=True)

    def validate_value(
        self,
        value: Any,
        paths: str | Sequence[str] | None = None,
        context: Any = None,
    ) -> ValidationResult:
        """Validate a single value against the rule(s) for the path(s).

        Example:
            ```python
            rules.validate_value("8000", "address.zip", ["8000", "9000"]).is_valid()
            ```
        """
        return self._run(value, paths, context, resolve_paths=False)

    def is_valid(self, value: Any, paths: str | Sequence[str] | None = None, context: Any = None) -> bool:
        """Like ``validate`` but returns a boolean.

        A ``ValidationError`` (``ON_ERROR_THROW`` mode) yields False; usage
        errors propagate.
        """
        try:
            return self.validate(value, paths, context).is_valid()
        except ValidationError:
            return False

    def is_value_valid(self, value: Any, paths: str | Sequence[str] | None = None, context: Any = None) -> bool:
        """Like ``validate_value`` but returns a boolean."""
        try:
            return self.validate_value(value, paths, context).is_valid()
        except ValidationError:
            return False

    def _select(self, paths: str | Sequence[str] | None) -> List[_RegisteredRule]:
        with self._lock:
            if paths is None:
                return list(self._rules.values())
            if isinstance(paths, str):
                paths = [paths]
            selected = []
            for path in paths:
                rule = self._rules.get(path)
                if rule is None:
                    raise UsageError(
                        f'RuleSet usage error: no rule added for the path "{path}"',
                        context={"path": path, "registered": list(self._rules)},
                    )
                selected.append(rule)
            return selected

    def _run(
        self,
        value: Any,
        paths: str | Sequence[str] | None,
        context: Any,
        resolve_paths: bool,
    ) -> ValidationResult:
        rules = self._select(paths)
        test = TestFunction(self._mode, self._error_prefix)
        logger.debug(f"Validating {len(rules)} rule(s) in {self._mode.value} mode")
        for registered in rules:
            rule_value = get_path_value(value, registered.path) if resolve_paths else value
            validator = test(rule_value, registered.path)
            generation = validator._generation
            try:
                registered(validator, context)
            finally:
                validator._release_if_unconsumed(generation)
        return test.result


class _RegisteredRule:
    __slots__ = ("path", "rule", "takes_context")

    def __init__(self, path: str, rule: Rule):
        self.path = path
        self.rule = rule
        self.takes_context = _accepts_context(rule)

    def __call__(self, validator: Validator, context: Any) -> Any:
        if self.takes_context:
            return self.rule(validator, context)
        return self.rule(validator)


def _accepts_context(rule: Rule) -> bool:
    """Test whether a rule takes a second positional parameter."""
    try:
        signature = inspect.signature(rule)
    except (TypeError, ValueError):
        # builtins without introspection data get the validator only
        return False
    positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2
