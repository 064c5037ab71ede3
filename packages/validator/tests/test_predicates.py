"""Tests for the reusable transforms and composite predicates."""

import pytest

from dataknobs_validator import ValidationError, string_trim, string_trimmed_not_empty


class TestStringTrim:
    """Test string_trim."""

    def test_trims_strings(self):
        assert string_trim("  a b  ") == "a b"

    def test_passes_other_values(self):
        value = [" a "]
        assert string_trim(value) is value
        assert string_trim(None) is None


class TestStringTrimmedNotEmpty:
    """Test string_trimmed_not_empty."""

    def test_with_fulfill(self, throw_test):
        assert throw_test(" a ").fulfill(string_trimmed_not_empty) is True
        assert throw_test("   ").fulfill(string_trimmed_not_empty) is False
        assert throw_test(5).fulfill(string_trimmed_not_empty) is False

    def test_as_lazy_list_item(self, next_path_test):
        """Test the predicate as a member of fulfill_all_of."""
        next_path_test({"name": "  "}).prop("name").fulfill_all_of(lambda name: [
            string_trimmed_not_empty,
            name.does.match(r"\w"),
        ], "${PATH} must be a non empty word")

        assert next_path_test.result.to_dict() == {"name": ["name must be a non empty word"]}

    def test_outer_message_raised_in_throw_mode(self, throw_test):
        with pytest.raises(ValidationError) as exc_info:
            throw_test(None, "nickname").fulfill(string_trimmed_not_empty, "${PATH} must be a non empty string")

        assert str(exc_info.value) == "nickname must be a non empty string"
        assert exc_info.value.path == "nickname"
