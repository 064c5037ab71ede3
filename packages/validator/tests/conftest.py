"""Pytest configuration and fixtures for validator package tests."""

import pytest

from dataknobs_validator import Validator, set_pool_max_size
from dataknobs_validator.settings import reset_settings
from dataknobs_validator.trace import disable_trace


@pytest.fixture(autouse=True)
def clean_validator_state():
    """Leave tracing off, the settings unloaded and the pools at default capacity."""
    reset_settings()
    yield
    disable_trace()
    reset_settings()
    set_pool_max_size(10)


@pytest.fixture
def throw_test():
    """Test function raising on the first failure."""
    return Validator.create_on_error_throw_validator()


@pytest.fixture
def break_test():
    """Test function recording the first failure only."""
    return Validator.create_on_error_break_validator()


@pytest.fixture
def next_path_test():
    """Test function recording one failure per path."""
    return Validator.create_on_error_next_path_validator()


@pytest.fixture
def person():
    """A valid person."""
    return {
        "name": "John",
        "age": 23,
        "email": None,
        "address": {"street": "Main Street 1", "zip": "8000"},
        "tags": ["a", "b"],
    }
