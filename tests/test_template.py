"""Tests for {{name}} substitution."""

from grpcscript.template import substitute


class TestSubstitute:

    def test_replaces_known_names(self):
        assert substitute("Bearer {{token}}", {"token": "abc"}) == "Bearer abc"

    def test_replaces_every_occurrence(self):
        text = '{"a": "{{id}}", "b": "{{id}}"}'
        assert substitute(text, {"id": "7"}) == '{"a": "7", "b": "7"}'

    def test_unknown_names_are_left_alone(self):
        assert substitute("{{missing}} {{id}}", {"id": "1"}) == "{{missing}} 1"

    def test_empty_or_missing_variables(self):
        assert substitute("{{id}}", {}) == "{{id}}"
        assert substitute("{{id}}", None) == "{{id}}"

    def test_no_whitespace_inside_braces(self):
        assert substitute("{{ id }}", {"id": "1"}) == "{{ id }}"

    def test_values_are_not_expanded_again(self):
        variables = {"a": "{{b}}", "b": "boom"}
        assert substitute("{{a}}", variables) == "{{b}}"

    def test_idempotent_once_resolved(self):
        variables = {"id": "42"}
        once = substitute("id={{id}}", variables)
        assert substitute(once, variables) == once

    def test_names_with_regex_characters(self):
        assert substitute("{{a.b}} {{a+b}}", {"a.b": "dot", "a+b": "plus"}) == "dot plus"

    def test_non_string_values(self):
        assert substitute("{{n}}", {"n": 5}) == "5"
