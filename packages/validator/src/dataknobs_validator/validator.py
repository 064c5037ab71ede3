"""Fluent validator: navigation, modifiers, combinators and pool lifecycle.

A ``TestFunction`` (see ``Validator.create``) hands out a root ``Validator``
for every value it is called with. A validator is single-use: it stays bound
to its node until the first verb, navigation or ``value`` access made on it
(outside of a combinator callback) completes, then it returns to the pool.

Example:
    ```python
    from dataknobs_validator import Validator

    test = Validator.create_on_error_next_path_validator("Person:")
    person = {"name": "John", "age": 17, "tags": ["a", 3]}

    test(person).fulfill_all_of(lambda person: [
        person.is_.an_object("${PATH} must be an object"),
        person.prop("name").is_.a_string("${PATH} must be a string"),
        person.prop("age").is_.in_range(18, 99, "${PATH} must be in [${0}, ${1}]", [18, 99]),
        person.prop("tags").each(lambda tag: tag.is_.a_string(), "${PATH} must be a string"),
    ])

    test.result.to_dict()
    # {'age': ['Person: age must be in [18, 99]'], 'tags[1]': ['Person: tags[1] must be a string']}
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Set
from typing import TYPE_CHECKING, Any, Callable, Iterator, Tuple

from .exceptions import UsageError, ValidatorError
from .modes import Mode
from .paths import join_paths, get_path_value
from .pool import ObjectPool
from .result import NoopValidationResult, ValidationResult
from .settings import get_settings
from .state import FailureState, NodeState, StickyStack
from .surface import SHORT_CIRCUITED_SURFACE, PredicateSurface
from .trace import enable_trace

if TYPE_CHECKING:
    from .rule_set import RuleSet

logger = logging.getLogger(__name__)

_CONSTRUCTOR_KEY = object()

_NOOP_RESULT = NoopValidationResult()


class Validator:
    """Orchestrates one node of a validation tree.

    Use ``Validator.create*()`` to obtain a test function; validators are
    never constructed directly.
    """

    mode = Mode

    def __init__(self, name: str, constructor_key: object = None):
        if constructor_key is not _CONSTRUCTOR_KEY:
            raise UsageError("Use Validator.create*() to create a new test function")
        self._name = name
        self._generation = 0
        self._state: NodeState | None = None
        self._failure_state: FailureState | None = None
        self._sticky: StickyStack | None = None
        self._root_surface: PredicateSurface | None = None
        self._fulfilled = False
        self._permanently_fulfilled = False

    def __repr__(self) -> str:
        if self._state is None:
            return f"Validator({self._name}, idle)"
        return f"Validator({self._name}, path={self._state.path!r})"

    @classmethod
    def _instance(
        cls,
        state: NodeState,
        failure_state: FailureState,
        sticky: StickyStack,
        fulfilled: bool = False,
    ) -> Validator:
        validator = _validator_pool.acquire()
        validator._bind(state, failure_state, sticky, fulfilled)
        return validator

    def _bind(
        self,
        state: NodeState,
        failure_state: FailureState,
        sticky: StickyStack,
        fulfilled: bool,
    ) -> None:
        if self._state is not None:
            raise ValidatorError(
                "Internal error: the validator is busy, a new one should have been acquired",
                context={"validator": self._name},
            )
        self._generation += 1
        self._state = state
        self._failure_state = failure_state
        self._sticky = sticky
        self._fulfilled = fulfilled
        self._permanently_fulfilled = fulfilled

    def _release(self) -> None:
        """Return this validator and its node state to their pools."""
        root_surface = self._root_surface
        if (
            root_surface is not None
            and root_surface is not SHORT_CIRCUITED_SURFACE
            and root_surface._validator is self
        ):
            root_surface._reset()
        state = self._state
        self._state = None
        self._failure_state = None
        self._sticky = None
        self._root_surface = None
        self._fulfilled = False
        self._permanently_fulfilled = False
        if state is not None:
            state._reset()
            _state_pool.release(state)
        _validator_pool.release(self)

    def _release_if_unconsumed(self, generation: int) -> None:
        """Release a validator a callback never consumed.

        The generation guards against touching an instance that was consumed
        and has since been recycled for another node.
        """
        if self._generation == generation and self._state is not None:
            self._release()

    def _require_active(self) -> NodeState:
        if self._state is None:
            raise UsageError(
                "This validator has already been used; a validator is consumed by its "
                "first predicate or navigation call"
            )
        return self._state

    def _is_short_circuited(self) -> bool:
        if self._fulfilled or self._sticky.fulfilled:
            return True
        state = self._state
        if state.mode is Mode.ON_ERROR_BREAK:
            return self._failure_state.has_failures() or not state.result.is_valid()
        if state.mode is Mode.ON_ERROR_NEXT_PATH:
            return self._failure_state.covers(state.error_paths)
        return False

    def _surface(self, negate: bool = False) -> PredicateSurface:
        state = self._require_active()
        short_circuited = self._is_short_circuited()
        if short_circuited:
            surface = SHORT_CIRCUITED_SURFACE
        else:
            surface = _surface_pool.acquire()
            surface._init(self, state, negate)
        # the first surface owns returning this validator to the pool
        if self._root_surface is None:
            self._root_surface = surface
        if short_circuited:
            self._reset(surface)
        return surface

    def _surface_done(self, surface: PredicateSurface, success: bool | None, message: str | None = None) -> None:
        if surface is SHORT_CIRCUITED_SURFACE:
            return
        state = self._state
        if message is not None and not success and state.mode is not Mode.ON_ERROR_THROW:
            if not self._is_short_circuited():
                for path in state.error_paths:
                    state.result.add_failure(path, message)
                    self._failure_state.add(path)
        if success is not None:
            self._sticky.notify(success)
        self._reset(surface)
        surface._reset()
        _surface_pool.release(surface)

    def _reset(self, surface: PredicateSurface) -> None:
        self._fulfilled = self._permanently_fulfilled
        # only the root surface may release the validator, otherwise the first
        # member of a combinator would recycle the validator its siblings use
        if surface is self._root_surface:
            self._release()

    def _finish_step(self) -> None:
        surface = self._surface()
        if surface is not SHORT_CIRCUITED_SURFACE:
            self._surface_done(surface, None)

    def _create_child(
        self,
        value: Any,
        path: str | None = None,
        local_path: str | None = None,
        error_paths: Tuple[str, ...] | None = None,
        fulfilled: bool = False,
    ) -> Validator:
        child_state = self._state.clone_with(_state_pool.acquire(), value, path, local_path, error_paths)
        return Validator._instance(child_state, self._failure_state, self._sticky, fulfilled)

    def _spawn(
        self,
        value: Any,
        path: str | None = None,
        local_path: str | None = None,
        error_paths: Tuple[str, ...] | None = None,
    ) -> Validator:
        # a child of a short-circuited node stays fulfilled for good
        child = self._create_child(value, path, local_path, error_paths, self._is_short_circuited())
        self._finish_step()
        return child

    @property
    def is_(self) -> PredicateSurface:
        """The predicates for the value, e.g. ``test(name).is_.a_string()``."""
        return self._surface(False)

    @property
    def does(self) -> PredicateSurface:
        """Alias of ``is_`` reading better for some predicates: ``name.does.match(...)``."""
        return self._surface(False)

    @property
    def is_not(self) -> PredicateSurface:
        """The negated predicates for the value, e.g. ``test(name).is_not.empty()``."""
        return self._surface(True)

    @property
    def does_not(self) -> PredicateSurface:
        """Alias of ``is_not``."""
        return self._surface(True)

    @property
    def optional(self) -> Validator:
        """Skip the following predicates of this chain when the value is None.

        Children created from an optional, None-valued node are skipped too.

        Example:
            ```python
            # only tested when person["age"] is not None
            test(person).prop("age").optional.is_.a_number("${PATH} must be a number")
            ```
        """
        state = self._require_active()
        if state.value is None:
            self._fulfilled = True
        return self

    def conditionally(self, predicate: Any) -> Validator:
        """Skip the following predicates of this chain unless ``predicate`` holds.

        The predicate receives a throwaway validator for the same value whose
        failures are never recorded.

        Example:
            ```python
            test(person).conditionally(lambda p: p.prop("name").is_.equal_to("Eric")) \\
                .prop("age").is_.greater_than(50, "Erics must be older than 50")
            ```

        Args:
            predicate: A function receiving the probe validator, or a boolean

        Returns:
            This validator
        """
        state = self._require_active()
        if self._is_short_circuited():
            return self
        if callable(predicate):
            probe_state = _state_pool.acquire()._init(
                Mode.ON_ERROR_BREAK,
                state.value,
                state.path,
                state.local_path,
                state.error_base_path,
                "",
                _NOOP_RESULT,
                state.error_paths if state.redirected else None,
            )
            probe = Validator._instance(probe_state, FailureState(), StickyStack())
            generation = probe._generation
            try:
                success = predicate(probe)
            finally:
                probe._release_if_unconsumed(generation)
        else:
            success = predicate
        if not success:
            self._fulfilled = True
        return self

    def each(self, predicate: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test the predicate against each element of the value.

        Element paths are ``[i]`` for sequences, ``[key]`` for mappings and
        ``[element]`` for sets. In ``ON_ERROR_NEXT_PATH`` mode every element is
        tested; otherwise testing stops at the first failing element.

        Example:
            ```python
            numbers = [1, 2, "three", 4]
            test(numbers).each(lambda number: number.is_.a_number(),
                               'The element must be a number but was "${VALUE}"')
            ```

        Args:
            predicate: A function receiving a validator for the element, or
                a boolean
            message: Failure message, filed against the element's path
            message_args: Values for the message placeholders

        Returns:
            True if every element fulfills the predicate

        Raises:
            UsageError: If the value is not an iterable collection
        """
        surface = self._surface()
        if surface is SHORT_CIRCUITED_SURFACE:
            return True
        state = self._state
        value = state.value
        if value is None:
            # nothing to iterate over, which does not fulfill the predicate
            return surface._handle("each", False, message, message_args)
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            surface._abort()
            raise UsageError(
                f"Validator usage error: the value must be an iterable collection to use each(), "
                f"got {type(value).__name__}",
                context={"path": state.path},
            )

        collect_all = state.mode is Mode.ON_ERROR_NEXT_PATH
        success = True
        sticky = self._sticky
        # element outcomes must not decide an enclosing combinator
        sticky.push(None)
        try:
            for index_path, element in _iterate(value):
                child = self._create_child(element, join_paths(state.path, index_path), index_path)
                if not child.does.fulfill(predicate, message, message_args):
                    success = False
                    if not collect_all:
                        break
        except BaseException:
            surface._abort()
            raise
        finally:
            sticky.pop()
        self._surface_done(surface, success)
        return success

    def prop(self, path: str) -> Validator:
        """Navigate to a (nested) property of the value.

        Example:
            ```python
            test(person).prop("address.zip").is_.a_string("${PATH} must be a string")
            ```

        Args:
            path: The property path, e.g. ``name``, ``address.zip`` or ``tags[0]``

        Returns:
            A new validator for the property value
        """
        state = self._require_active()
        if not isinstance(path, str):
            raise UsageError(f"Validator usage error: the path must be a string, got {type(path).__name__}")
        value = None if self._is_short_circuited() else get_path_value(state.value, path)
        return self._spawn(value, join_paths(state.path, path), path)

    def transform(self, transformer: Callable[[Any], Any]) -> Validator:
        """Test a transformation of the value under the same path.

        Example:
            ```python
            test(name).transform(str.strip).is_not.empty("Name cannot be blank")
            ```

        Args:
            transformer: A function mapping the value to the value to test

        Returns:
            A new validator for the transformed value
        """
        state = self._require_active()
        if not callable(transformer):
            raise UsageError("Validator usage error: the argument passed to transform() must be callable")
        if self._is_short_circuited():
            value = None
        else:
            try:
                value = transformer(state.value)
            except BaseException:
                self._finish_step()
                raise
        return self._spawn(value)

    def error_context(self, *paths: str) -> Validator:
        """File failures of the following predicates against other path(s).

        Useful for rules involving several properties where every involved
        property should show the error.

        Example:
            ```python
            test(person).error_context("phone", "email").fulfill_one_of(lambda p: [
                p.prop("phone").is_not.nil(),
                p.prop("email").is_not.nil(),
            ], "Either phone or email is required")
            ```

        Args:
            *paths: Attribution paths, relative to the test function call's
                error base path

        Returns:
            A new validator for the same value
        """
        state = self._require_active()
        if not paths or not all(isinstance(path, str) for path in paths):
            raise UsageError("Validator usage error: error_context() requires one or more string paths")
        error_paths = tuple(join_paths(state.error_base_path, path) for path in paths)
        return self._spawn(state.value, error_paths=error_paths)

    @property
    def value(self) -> Any:
        """The value this validator is testing."""
        value = self._require_active().value
        self._finish_step()
        return value

    @property
    def path(self) -> str:
        """The full structural path of the value this validator is testing."""
        path = self._require_active().path
        self._finish_step()
        return path

    def fulfill(self, predicate: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Alias for ``does.fulfill``."""
        return self.does.fulfill(predicate, message, message_args)

    def fulfill_one_of(self, predicates: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Alias for ``does.fulfill_one_of``."""
        return self.does.fulfill_one_of(predicates, message, message_args)

    def fulfill_all_of(self, predicates: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Alias for ``does.fulfill_all_of``."""
        return self.does.fulfill_all_of(predicates, message, message_args)

    @classmethod
    def create(cls, error_prefix: str | None = None, mode: Mode | str | None = None) -> TestFunction:
        """Create a test function.

        Every predicate returns a boolean. When a message is passed and the
        predicate is not fulfilled, the failure is raised or recorded
        depending on the mode.

        Example:
            ```python
            test = Validator.create("Validation error:")
            test(name).is_not.nil("Name cannot be None")
            test(person).prop("name").is_.a_string('The property "${PATH}": "${VALUE}" is not a string')
            test(name).is_.equal_to("Eric", 'The name "${0}" is not equal to ${1}', [name, "Eric"])
            ```

        Args:
            error_prefix: Prepended to every failure message; defaults to the
                configured ``error_prefix``
            mode: The failure mode; defaults to the configured ``mode``

        Returns:
            The test function
        """
        settings = get_settings()
        if error_prefix is None:
            error_prefix = settings.error_prefix
        if mode is None:
            mode = settings.mode
        return TestFunction(mode, error_prefix)

    @classmethod
    def create_on_error_throw_validator(cls, error_prefix: str | None = None) -> TestFunction:
        return cls.create(error_prefix, Mode.ON_ERROR_THROW)

    @classmethod
    def create_on_error_break_validator(cls, error_prefix: str | None = None) -> TestFunction:
        return cls.create(error_prefix, Mode.ON_ERROR_BREAK)

    @classmethod
    def create_on_error_next_path_validator(cls, error_prefix: str | None = None) -> TestFunction:
        return cls.create(error_prefix, Mode.ON_ERROR_NEXT_PATH)

    @classmethod
    def create_on_error_throw_rule_set(cls, error_prefix: str = "") -> RuleSet:
        from .rule_set import RuleSet

        return RuleSet(error_prefix, Mode.ON_ERROR_THROW)

    @classmethod
    def create_on_error_break_rule_set(cls, error_prefix: str = "") -> RuleSet:
        from .rule_set import RuleSet

        return RuleSet(error_prefix, Mode.ON_ERROR_BREAK)

    @classmethod
    def create_on_error_next_path_rule_set(cls, error_prefix: str = "") -> RuleSet:
        from .rule_set import RuleSet

        return RuleSet(error_prefix, Mode.ON_ERROR_NEXT_PATH)


class TestFunction:
    """Callable returned by ``Validator.create``.

    Calling it with a value returns the root validator for that value.
    Every call shares the same ``result``.

    Args:
        mode: The failure mode
        error_prefix: Prepended to every failure message
        result: The result to record into; a new one by default
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        mode: Mode | str = Mode.ON_ERROR_THROW,
        error_prefix: str = "",
        result: ValidationResult | None = None,
    ):
        self._mode = Mode.coerce(mode)
        if error_prefix is not None and not isinstance(error_prefix, str):
            raise UsageError(f"error_prefix must be a string, got {type(error_prefix).__name__}")
        self._error_prefix = error_prefix or ""
        self._result = result if result is not None else ValidationResult()

    def __repr__(self) -> str:
        return f"TestFunction(mode={self._mode.value}, error_prefix={self._error_prefix!r})"

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def error_prefix(self) -> str:
        return self._error_prefix

    @property
    def result(self) -> ValidationResult:
        """The result shared by every call of this test function."""
        return self._result

    def __call__(self, value: Any = None, error_base_path: str = "") -> Validator:
        """Start validating a value.

        Args:
            value: The value to validate
            error_base_path: Prefixed to every attribution path, so independent
                values can be validated one after another and still be told
                apart in the result

        Returns:
            The root validator for the value
        """
        if not isinstance(error_base_path, str):
            raise UsageError(f"error_base_path must be a string, got {type(error_base_path).__name__}")
        state = _state_pool.acquire()._init(
            self._mode, value, "", "", error_base_path, self._error_prefix, self._result
        )
        return Validator._instance(state, FailureState(), StickyStack())


def _iterate(value: Iterable[Any]) -> Iterator[Tuple[str, Any]]:
    if isinstance(value, Mapping):
        for key, element in value.items():
            yield f"[{key}]", element
    elif isinstance(value, Set):
        for element in value:
            yield f"[{element}]", element
    else:
        for i, element in enumerate(value):
            yield f"[{i}]", element


_settings = get_settings()
POOL_MAX_SIZE = _settings.pool_max_size

_validator_pool: ObjectPool[Validator] = ObjectPool(
    lambda name: Validator(name, _CONSTRUCTOR_KEY), POOL_MAX_SIZE, "ValidatorPool"
)
_surface_pool: ObjectPool[PredicateSurface] = ObjectPool(PredicateSurface, POOL_MAX_SIZE, "PredicateSurfacePool")
_state_pool: ObjectPool[NodeState] = ObjectPool(NodeState, POOL_MAX_SIZE, "NodeStatePool")

if _settings.trace:
    enable_trace()
