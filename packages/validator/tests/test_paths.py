"""Tests for the property path helpers."""

import pytest

from dataknobs_validator.paths import (
    get_parent_path,
    get_path_value,
    is_nested_path,
    join_paths,
    split_path,
)


class TestJoinPaths:
    """Test join_paths."""

    @pytest.mark.parametrize(
        "segments,expected",
        [
            (("a", "b"), "a.b"),
            (("", "a"), "a"),
            (("a", ""), "a"),
            (("a", "[0]"), "a[0]"),
            (("", "[0]"), "[0]"),
            (("person", "addresses", "[0]", "zip"), "person.addresses[0].zip"),
            ((), ""),
        ],
    )
    def test_join(self, segments, expected):
        assert join_paths(*segments) == expected


class TestGetPathValue:
    """Test resolving paths against values."""

    def test_split(self):
        assert split_path("a.b[0].c") == [("a", False), ("b", False), ("0", True), ("c", False)]

    def test_nested_mappings_and_indexes(self):
        obj = {"a": {"b": [{"c": 1}, {"c": 2}]}}

        assert get_path_value(obj, "a.b[1].c") == 2
        assert get_path_value(obj, "a.b[-1].c") == 2
        assert get_path_value(obj, "") is obj

    def test_whole_path_key_wins(self):
        """Test that a key equal to the whole path is preferred."""
        obj = {"a.b": "flat", "a": {"b": "nested"}}
        assert get_path_value(obj, "a.b") == "flat"

    def test_missing_steps_resolve_to_none(self):
        obj = {"a": [1]}

        assert get_path_value(obj, "a[5]") is None
        assert get_path_value(obj, "b.c") is None
        assert get_path_value(None, "a") is None
        assert get_path_value("text", "[0]") is None

    def test_int_mapping_keys(self):
        assert get_path_value({1: "one"}, "[1]") == "one"

    def test_attributes(self):
        class Address:
            zip = "8000"

        class Person:
            address = Address()

        assert get_path_value(Person(), "address.zip") == "8000"
        assert get_path_value(Person(), "address.street") is None


class TestNestedPaths:
    """Test the structural path prefix check."""

    @pytest.mark.parametrize(
        "path,parent,expected",
        [
            ("name", "name", True),
            ("name.first", "name", True),
            ("name[0]", "name", True),
            ("nameSuffix", "name", False),
            ("anything", "", True),
            ("", "name", False),
            ("a", "a.b", False),
        ],
    )
    def test_is_nested_path(self, path, parent, expected):
        assert is_nested_path(path, parent) is expected

    @pytest.mark.parametrize(
        "full_path,current_path,expected",
        [
            ("person.name", "name", "person"),
            ("tags[1]", "[1]", "tags"),
            ("name", "name", ""),
            ("contact.phone", "other", "contact"),
            ("tags[1]", "other", "tags"),
        ],
    )
    def test_get_parent_path(self, full_path, current_path, expected):
        assert get_parent_path(full_path, current_path) == expected
