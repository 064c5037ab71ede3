"""Tests for the validation result."""

import pytest

from dataknobs_validator import NoopValidationResult, UsageError, ValidationResult


class TestValidationResult:
    """Test ValidationResult bookkeeping."""

    def test_empty_result_is_valid(self):
        result = ValidationResult()

        assert result.is_valid()
        assert bool(result) is True
        assert result.error_count() == 0
        assert result.get_error() is None
        assert result.get_errors("name") == []
        assert list(result.error_paths()) == []

    def test_add_failure(self):
        """Test that failures accumulate per path in insertion order."""
        result = ValidationResult()
        result.add_failure("name", "first")
        result.add_failure("name", "second")
        result.add_failure("", "root")

        assert not result.is_valid()
        assert bool(result) is False
        assert result.get_error("name") == "first"
        assert result.get_errors("name") == ["first", "second"]
        assert result.get_error() == "root"
        assert result.get_all_errors() == ["first", "second", "root"]
        assert list(result.error_paths()) == ["name", ""]
        assert result.error_count() == 3

    def test_is_path_valid(self):
        result = ValidationResult()
        result.add_failure("age", "too young")

        assert result.is_path_valid("name")
        assert not result.is_path_valid("age")

    def test_empty_message_is_usage_error(self):
        with pytest.raises(UsageError):
            ValidationResult().add_failure("name", "")

    def test_reset(self):
        result = ValidationResult()
        result.add_failure("name", "first")
        result.reset()

        assert result.is_valid()
        assert result.to_dict() == {}

    def test_to_dict_is_a_copy(self):
        """Test that mutating the exported dict leaves the result untouched."""
        result = ValidationResult()
        result.add_failure("name", "first")

        exported = result.to_dict()
        exported["name"].append("changed")
        exported["other"] = ["x"]

        assert result.to_dict() == {"name": ["first"]}

    def test_get_errors_is_a_copy(self):
        result = ValidationResult()
        result.add_failure("name", "first")

        result.get_errors("name").append("changed")

        assert result.get_errors("name") == ["first"]


class TestNoopValidationResult:
    """Test the result sink that ignores every failure."""

    def test_ignores_failures(self):
        result = NoopValidationResult()
        result.add_failure("name", "ignored")
        result.reset()

        assert result.is_valid()
        assert result.error_count() == 0
