"""Tests for message placeholder substitution."""

from dataknobs_validator.messages import format_message_arg, normalize_message_args, resolve_message


class TestResolveMessage:
    """Test resolve_message."""

    def test_plain_message_unchanged(self):
        assert resolve_message("nothing to see", 1, ["a"]) == "nothing to see"

    def test_value_and_path(self):
        assert resolve_message('"${PATH}" is ${VALUE}', 7, ["age"], "age") == '"age" is 7'

    def test_positional_args(self):
        assert resolve_message("${0} and ${1}", message_args=["a", 2]) == "a and 2"

    def test_single_arg_is_wrapped(self):
        assert resolve_message("expected ${0}", message_args="a string") == "expected a string"

    def test_list_arg_renders_json_like(self):
        assert resolve_message("one of ${0}", message_args=[["a", 1]]) == 'one of ["a", 1]'

    def test_missing_positional_left_untouched(self):
        """Test that out-of-range placeholders stay in the message."""
        assert resolve_message("${0} ${1}", message_args=["a"]) == "a ${1}"

    def test_unknown_placeholder_left_untouched(self):
        assert resolve_message("${UNKNOWN} ${PATH}", 1, ["x"]) == "${UNKNOWN} x"

    def test_escape(self):
        """Test that a backslash escapes a placeholder and is dropped."""
        assert resolve_message("\\${PATH} is ${PATH}", 1, ["x"]) == "${PATH} is x"

    def test_indexed_paths(self):
        message = resolve_message("${PATH0}, ${PATH1}, ${PATH2}", None, ["a", "b"])
        assert message == "a, b, ${PATH2}"

    def test_current_and_parent_path(self):
        message = resolve_message("${CURRENT_PATH} in ${PARENT_PATH}", None, ["person.address.zip"], "address.zip")
        assert message == "address.zip in person"

    def test_parent_path_of_redirected_path(self):
        """Test that a redirected path drops its last segment."""
        assert resolve_message("${PARENT_PATH}", None, ["contact.phone"], "name") == "contact"

    def test_none_value(self):
        assert resolve_message("was ${VALUE}", None) == "was None"


class TestMessageArgs:
    """Test argument normalization and rendering."""

    def test_normalize(self):
        assert normalize_message_args(None) == []
        assert normalize_message_args("a") == ["a"]
        assert normalize_message_args(("a", "b")) == ["a", "b"]

    def test_format(self):
        assert format_message_arg(1.5) == "1.5"
        assert format_message_arg(("a",)) == '["a"]'
        assert format_message_arg({"x"}) == '["x"]'
        assert format_message_arg({"a": 1}) == "{'a': 1}"
