"""Predicate surfaces returned by the ``is_``/``does``/``is_not``/``does_not`` verbs.

A surface is bound to one validator node for exactly one predicate call.
Every predicate computes a boolean, applies the verb's negation and routes
the outcome through ``_handle``, the single failure funnel, which resolves
the message, raises in ``ON_ERROR_THROW`` mode and hands the outcome back to
the validator for recording and pool bookkeeping.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Set
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from .exceptions import UsageError, ValidationError
from .messages import resolve_message
from .modes import Mode
from .trace import get_tracer
from .type_predicates import (
    is_array,
    is_boolean,
    is_empty,
    is_equal,
    is_float_string,
    is_function,
    is_identical,
    is_integer,
    is_integer_string,
    is_nil,
    is_number,
    is_object,
    is_string,
)

if TYPE_CHECKING:
    from .state import NodeState
    from .validator import Validator


class PredicateSurface:
    """Predicate logic for the value of one validation node.

    Every predicate accepts an optional failure ``message`` and
    ``message_args`` for its placeholders, and returns the (possibly
    negated) result as a ``bool``.
    """

    def __init__(self, name: str = ""):
        self._name = name
        self._validator: Validator | None = None
        self._state: NodeState | None = None
        self._negate = False

    def _init(self, validator: Validator, state: NodeState, negate: bool) -> None:
        self._validator = validator
        self._state = state
        self._negate = negate

    def _reset(self) -> None:
        self._validator = None
        self._state = None
        self._negate = False

    @property
    def _value(self) -> Any:
        if self._state is None:
            raise UsageError(
                "This predicate has already been evaluated; "
                "get a new one from the validator's verbs"
            )
        return self._state.value

    def _bound_validator(self) -> Validator:
        if self._validator is None:
            raise UsageError(
                "This predicate has already been evaluated; "
                "get a new one from the validator's verbs"
            )
        return self._validator

    def identical_to(self, other: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is identical to ``other``.

        Scalars (strings, numbers, booleans, None) compare by type and value,
        anything else by identity.
        """
        return self._handle("identical_to", is_identical(self._value, other), message, message_args, (other,))

    def equal_to(self, other: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is deeply equal to ``other``.

        Mappings, arrays and sets compare element by element; scalars compare
        by type and value, so ``1`` is not equal to ``True``.
        """
        return self._handle("equal_to", is_equal(self._value, other), message, message_args, (other,))

    def nil(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is None."""
        return self._handle("nil", is_nil(self._value), message, message_args)

    def an_array(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is a list or a tuple."""
        return self._handle("an_array", is_array(self._value), message, message_args)

    def a_boolean(self, message: str | None = None, message_args: Any = None) -> bool:
        return self._handle("a_boolean", is_boolean(self._value), message, message_args)

    def a_function(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is callable."""
        return self._handle("a_function", is_function(self._value), message, message_args)

    def a_float_string(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is a string representation of a float, e.g. ``"-1.5"``."""
        return self._handle("a_float_string", is_float_string(self._value), message, message_args)

    def an_integer(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is an ``int`` (booleans excluded)."""
        return self._handle("an_integer", is_integer(self._value), message, message_args)

    def an_integer_string(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is a string representation of an integer, e.g. ``"-15"``."""
        return self._handle("an_integer_string", is_integer_string(self._value), message, message_args)

    def a_number(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is a real number (booleans excluded)."""
        return self._handle("a_number", is_number(self._value), message, message_args)

    def an_object(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is a mapping or a plain object.

        Lists and tuples are **not** considered objects in this context.
        """
        return self._handle("an_object", is_object(self._value), message, message_args)

    def a_string(self, message: str | None = None, message_args: Any = None) -> bool:
        return self._handle("a_string", is_string(self._value), message, message_args)

    def empty(self, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is considered empty.

        Strings and collections are empty when their length is 0, plain
        objects when they have no attributes. None and other scalars are
        considered empty.
        """
        return self._handle("empty", is_empty(self._value), message, message_args)

    def less_than(self, number: Any, message: str | None = None, message_args: Any = None) -> bool:
        value = self._value
        self._require_number("number", number)
        return self._handle("less_than", is_number(value) and value < number, message, message_args, (number,))

    def less_than_or_equal_to(self, number: Any, message: str | None = None, message_args: Any = None) -> bool:
        value = self._value
        self._require_number("number", number)
        return self._handle(
            "less_than_or_equal_to", is_number(value) and value <= number, message, message_args, (number,)
        )

    def greater_than(self, number: Any, message: str | None = None, message_args: Any = None) -> bool:
        value = self._value
        self._require_number("number", number)
        return self._handle("greater_than", is_number(value) and value > number, message, message_args, (number,))

    def greater_than_or_equal_to(self, number: Any, message: str | None = None, message_args: Any = None) -> bool:
        value = self._value
        self._require_number("number", number)
        return self._handle(
            "greater_than_or_equal_to", is_number(value) and value >= number, message, message_args, (number,)
        )

    def in_range(self, start: Any, end: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is in the range ``[start, end]`` (both inclusive)."""
        value = self._value
        if not is_number(start) or not is_number(end):
            self._usage_error(
                f'The arguments "start" and "end" must both be numbers but were: start={start!r}, end={end!r}'
            )
        success = is_number(value) and start <= value <= end
        return self._handle("in_range", success, message, message_args, (start, end))

    def in_(self, collection: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value is one of the values in ``collection``.

        Lists and tuples are searched with ``identical_to`` semantics; sets
        and mappings use membership (mapping keys).
        """
        value = self._value
        if is_array(collection):
            success = any(is_identical(value, candidate) for candidate in collection)
        elif isinstance(collection, (Set, Mapping)):
            try:
                success = value in collection
            except TypeError:
                # unhashable values are never members
                success = False
        else:
            self._usage_error(
                f'The argument "collection" must be a list, tuple, set or mapping '
                f"but was: {type(collection).__name__}"
            )
        return self._handle("in", success, message, message_args, (collection,))

    def start_with(self, prefix: Any, message: str | None = None, message_args: Any = None) -> bool:
        value = self._value
        if not is_string(prefix):
            self._usage_error(f'The argument "prefix" must be a string but was: {type(prefix).__name__}')
        success = is_string(value) and value.startswith(prefix)
        return self._handle("start_with", success, message, message_args, (prefix,))

    def end_with(self, suffix: Any, message: str | None = None, message_args: Any = None) -> bool:
        value = self._value
        if not is_string(suffix):
            self._usage_error(f'The argument "suffix" must be a string but was: {type(suffix).__name__}')
        success = is_string(value) and value.endswith(suffix)
        return self._handle("end_with", success, message, message_args, (suffix,))

    def match(self, pattern: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test if the value matches ``pattern`` anywhere (``re.search`` semantics).

        Args:
            pattern: A compiled ``re.Pattern`` or a pattern string
        """
        value = self._value
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        elif not isinstance(pattern, re.Pattern):
            self._usage_error(f'The argument "pattern" must be a str or re.Pattern but was: {pattern!r}')
        success = is_string(value) and pattern.search(value) is not None
        return self._handle("match", success, message, message_args, (pattern.pattern,))

    def fulfill(self, predicate: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test if a predicate is fulfilled.

        Example:
            ```python
            test = Validator.create("Validation error:")
            # user defined predicate
            test(name).fulfill(lambda name: name.is_.a_string() and len(name.value) > 1,
                               "Name must be a string and must have length > 1")
            # a precomputed boolean
            test(name).fulfill(len(name) > 1, "Name must have length > 1")
            ```

        Inner predicates should not carry a message of their own when the
        outer call has one, or they would throw/record first depending on
        the mode.

        Args:
            predicate: A function receiving the validator and returning a
                truthy/falsy result, or an already evaluated result
            message: Failure message
            message_args: Values for the message placeholders

        Returns:
            The result of the predicate
        """
        validator = self._bound_validator()
        sticky = validator._sticky
        self._trace_begin("fulfill")
        # predicates of the callback must not decide an enclosing combinator
        sticky.push(None)
        try:
            success = predicate(validator) if callable(predicate) else predicate
        except BaseException:
            self._abort()
            raise
        finally:
            sticky.pop()
            self._trace_end()
        return self._handle("fulfill<end>", bool(success), message, message_args)

    def fulfill_one_of(self, predicates: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test if at least one of the predicates is fulfilled.

        As soon as a predicate yields True every later predicate call made
        through this validator (or its children) is skipped, so the list can
        be written as plain, eagerly evaluated predicate calls.

        Example:
            ```python
            test(name).fulfill_one_of(lambda name: [
                name.is_.nil(),
                name.does.match(r"^\\w+$"),
            ], "Name must be None or a single word")
            ```

        Inner predicates should not carry messages: a failing inner message
        would throw or record even though another predicate passes.

        Args:
            predicates: A function receiving the validator and returning a
                list of results, or such a list. Callable items are invoked
                lazily with the validator.
            message: Failure message
            message_args: Values for the message placeholders

        Returns:
            True if any predicate is fulfilled
        """
        validator = self._bound_validator()
        sticky = validator._sticky
        self._trace_begin("fulfill_one_of")
        sticky.push(True)
        try:
            success = False
            for item in self._predicate_items(predicates, validator):
                if self._evaluate_item(item, validator):
                    success = True
                    break
        except BaseException:
            self._abort()
            raise
        finally:
            sticky.pop()
            self._trace_end()
        return self._handle("fulfill_one_of<end>", success, message, message_args)

    def fulfill_all_of(self, predicates: Any, message: str | None = None, message_args: Any = None) -> bool:
        """Test if all the predicates are fulfilled.

        In ``ON_ERROR_THROW`` and ``ON_ERROR_BREAK`` mode evaluation stops at
        the first unfulfilled predicate. In ``ON_ERROR_NEXT_PATH`` mode every
        predicate is evaluated so failures on independent paths are all
        recorded.

        Example:
            ```python
            test(person).fulfill_all_of(lambda person: [
                person.is_.an_object("person must be an object"),
                person.prop("name").is_.a_string('"${PATH}" must be a string'),
                person.prop("age").optional.is_.a_number('"${PATH}" must be a number'),
            ])
            ```

        Args:
            predicates: A function receiving the validator and returning a
                list of results, or such a list. Callable items are invoked
                lazily with the validator.
            message: Failure message
            message_args: Values for the message placeholders

        Returns:
            True if every predicate is fulfilled
        """
        validator = self._bound_validator()
        sticky = validator._sticky
        collect_all = self._state.mode is Mode.ON_ERROR_NEXT_PATH
        self._trace_begin("fulfill_all_of")
        sticky.push(None if collect_all else False)
        try:
            success = True
            for item in self._predicate_items(predicates, validator):
                if not self._evaluate_item(item, validator):
                    success = False
                    if not collect_all:
                        break
        except BaseException:
            self._abort()
            raise
        finally:
            sticky.pop()
            self._trace_end()
        return self._handle("fulfill_all_of<end>", success, message, message_args)

    @staticmethod
    def _predicate_items(predicates: Any, validator: Validator) -> Sequence[Any]:
        items = predicates(validator) if callable(predicates) else predicates
        if not isinstance(items, (list, tuple)):
            raise UsageError(
                'The argument "predicates" must be a list or a function returning a list, '
                f"got: {type(items).__name__}"
            )
        return items

    @staticmethod
    def _evaluate_item(item: Any, validator: Validator) -> bool:
        if callable(item):
            item = item(validator)
        return bool(item)

    def _handle(
        self,
        name: str,
        success: bool,
        message: str | None,
        message_args: Any,
        method_args: Iterable[Any] = (),
    ) -> bool:
        validator = self._bound_validator()
        state = self._state
        if self._negate:
            success = not success
        success = bool(success)

        tracer = get_tracer()
        if tracer is not None:
            tracer.log(name, success, state.primary_error_path, state.value, tuple(method_args), self._negate)

        full_message = None
        try:
            if not success and message:
                full_message = resolve_message(
                    state.full_error_message(message),
                    state.value,
                    state.error_paths,
                    state.local_path,
                    message_args,
                )
                if state.mode is Mode.ON_ERROR_THROW:
                    raise ValidationError(full_message, path="|".join(state.error_paths))
        finally:
            # should be the last thing we do
            validator._surface_done(self, success, full_message)
        return success

    def _abort(self) -> None:
        """Release this surface without evaluating it."""
        if self._validator is not None:
            self._validator._surface_done(self, None)

    def _usage_error(self, message: str) -> None:
        self._abort()
        raise UsageError(f"Predicate usage error: {message}")

    def _require_number(self, name: str, value: Any) -> None:
        if not is_number(value):
            self._usage_error(f'The argument "{name}" must be a number but was: {value!r}')

    def _trace_begin(self, name: str) -> None:
        tracer = get_tracer()
        if tracer is not None:
            state = self._state
            tracer.log(f"{name}<start>", None, state.primary_error_path, state.value, (), self._negate)
            tracer.begin()

    def _trace_end(self) -> None:
        tracer = get_tracer()
        if tracer is not None:
            tracer.end()


def _fulfilled(self, *args: Any, **kwargs: Any) -> bool:
    return True


class ShortCircuitedPredicateSurface(PredicateSurface):
    """Null-object surface handed out while a node is short-circuited.

    Every predicate is vacuously fulfilled without evaluating its arguments;
    combinator callbacks are never invoked.
    """

    identical_to = _fulfilled
    equal_to = _fulfilled
    nil = _fulfilled
    an_array = _fulfilled
    a_boolean = _fulfilled
    a_function = _fulfilled
    a_float_string = _fulfilled
    an_integer = _fulfilled
    an_integer_string = _fulfilled
    a_number = _fulfilled
    an_object = _fulfilled
    a_string = _fulfilled
    empty = _fulfilled
    less_than = _fulfilled
    less_than_or_equal_to = _fulfilled
    greater_than = _fulfilled
    greater_than_or_equal_to = _fulfilled
    in_range = _fulfilled
    in_ = _fulfilled
    start_with = _fulfilled
    end_with = _fulfilled
    match = _fulfilled
    fulfill = _fulfilled
    fulfill_one_of = _fulfilled
    fulfill_all_of = _fulfilled


SHORT_CIRCUITED_SURFACE = ShortCircuitedPredicateSurface("ShortCircuited")
