"""
Tests for Template Interpolation.

These tests verify:
- Plain and json tokens
- Nested paths and whitespace inside tokens
- Unresolvable tokens left verbatim
- Rendering of non-string values
"""

import pytest

from inflow.templating import interpolate, interpolate_fields, resolve_path, to_text

CONTEXT = {
    "user": {"name": "Ana", "age": 31, "tags": ["a", "b"]},
    "items": [1, 2],
    "httpResponse": {"status": 200, "data": {"title": "Hello", "done": False}},
    "flag": True,
    "nothing": None,
}


class TestInterpolate:
    """Tests for interpolate()."""

    def test_plain_token(self):
        assert interpolate("Hello {{user.name}}", CONTEXT) == "Hello Ana"

    def test_whitespace_inside_token(self):
        assert interpolate("Hello {{ user.name }}", CONTEXT) == "Hello Ana"

    def test_json_token(self):
        assert interpolate("{{json items}}", CONTEXT) == "[1,2]"

    def test_json_token_with_spaces(self):
        assert interpolate("{{ json items }}", CONTEXT) == "[1,2]"

    def test_json_token_object(self):
        result = interpolate("{{json httpResponse.data}}", CONTEXT)
        assert result == '{"title":"Hello","done":false}'

    def test_json_token_string_is_quoted(self):
        assert interpolate("{{json user.name}}", CONTEXT) == '"Ana"'

    def test_number(self):
        assert interpolate("age={{user.age}}", CONTEXT) == "age=31"

    def test_deep_path(self):
        assert interpolate("{{httpResponse.data.title}}", CONTEXT) == "Hello"

    def test_multiple_tokens(self):
        text = "{{user.name}} is {{user.age}}, status {{httpResponse.status}}"
        assert interpolate(text, CONTEXT) == "Ana is 31, status 200"

    def test_repeated_token(self):
        assert interpolate("{{user.name}}/{{user.name}}", CONTEXT) == "Ana/Ana"

    def test_missing_path_left_verbatim(self):
        assert interpolate("Hi {{user.email}}", CONTEXT) == "Hi {{user.email}}"

    def test_missing_root_left_verbatim(self):
        assert interpolate("{{ json nope.x }}", CONTEXT) == "{{ json nope.x }}"

    def test_path_through_scalar(self):
        """Walking into a scalar does not resolve."""
        assert interpolate("{{user.name.first}}", CONTEXT) == "{{user.name.first}}"

    def test_list_index(self):
        assert interpolate("{{items.0}}", CONTEXT) == "1"
        assert interpolate("{{user.tags.1}}", CONTEXT) == "b"

    def test_list_index_into_json_array_response(self):
        """An HTTP node returning a JSON array can be indexed."""
        context = {"httpResponse": {"data": [{"title": "T"}, {"title": "U"}]}}
        assert interpolate("{{httpResponse.data.0.title}}", context) == "T"
        assert interpolate("{{json httpResponse.data.1}}", context) == '{"title":"U"}'

    @pytest.mark.parametrize("path", ["items.2", "items.-1", "items.first", "items. 0x"])
    def test_list_index_out_of_range_or_invalid(self, path):
        token = "{{" + path + "}}"
        assert interpolate(token, CONTEXT) == token

    def test_mixed_resolved_and_missing(self):
        assert interpolate("{{user.name}} {{ghost}}", CONTEXT) == "Ana {{ghost}}"

    def test_no_tokens_unchanged(self):
        text = "plain text with {braces} and }} stray"
        assert interpolate(text, CONTEXT) == text

    def test_empty_context(self):
        assert interpolate("{{a}}", {}) == "{{a}}"

    def test_container_in_plain_token_renders_as_json(self):
        assert interpolate("{{user.tags}}", CONTEXT) == '["a","b"]'

    def test_boolean_and_null_plain(self):
        assert interpolate("{{flag}} {{nothing}}", CONTEXT) == "true null"

    def test_null_value_is_resolved(self):
        """A present key holding null resolves; it is not treated as missing."""
        assert interpolate("{{json nothing}}", CONTEXT) == "null"

    def test_non_ascii_kept(self):
        assert interpolate("{{json name}}", {"name": "Zoë"}) == '"Zoë"'

    def test_substitution_is_not_reinterpreted(self):
        """A substituted value containing a token is not expanded again."""
        context = {"a": "{{b}}", "b": "x"}
        assert interpolate("{{a}}", context) == "{{b}}"

    def test_idempotent_without_tokens(self):
        once = interpolate("Hello {{user.name}}", CONTEXT)
        assert interpolate(once, CONTEXT) == once


class TestResolvePath:
    """Tests for resolve_path()."""

    def test_resolves(self):
        assert resolve_path(CONTEXT, "user.name") == "Ana"

    def test_strips_whitespace(self):
        assert resolve_path(CONTEXT, "  user.age ") == 31

    def test_indexes_lists(self):
        assert resolve_path(CONTEXT, "user.tags.0") == "a"

    def test_superscript_digit_is_not_an_index(self):
        assert interpolate("{{items.²}}", CONTEXT) == "{{items.²}}"


class TestToText:
    """Tests for to_text()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("abc", "abc"),
            (3, "3"),
            (2.5, "2.5"),
            (False, "false"),
            ({"a": 1}, '{"a":1}'),
        ],
    )
    def test_values(self, value, expected):
        assert to_text(value) == expected


class TestInterpolateFields:
    """Tests for interpolate_fields()."""

    def test_only_named_fields(self):
        data = {"endpoint": "https://x/{{user.name}}", "method": "{{user.name}}"}
        result = interpolate_fields(data, CONTEXT, ("endpoint",))
        assert result == {"endpoint": "https://x/Ana", "method": "{{user.name}}"}

    def test_does_not_mutate_input(self):
        data = {"body": "{{user.age}}"}
        interpolate_fields(data, CONTEXT, ("body",))
        assert data == {"body": "{{user.age}}"}

    def test_non_string_and_absent_fields_skipped(self):
        data = {"body": None, "count": 3}
        result = interpolate_fields(data, CONTEXT, ("body", "count", "missing"))
        assert result == {"body": None, "count": 3}
