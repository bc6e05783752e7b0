"""Tests for template binding."""
import pytest

from logctl.errors import ValidationError
from logctl.template import bind, placeholders


class TestPlaceholders:
    def test_first_occurrence_order(self):
        assert placeholders("{b} {a} {b} {c}") == ["b", "a", "c"]

    def test_no_placeholders(self):
        assert placeholders("plain text") == []

    def test_dotted_names(self):
        assert placeholders("{module.name} {user-id}") == ["module.name", "user-id"]


class TestNamedBinding:
    def test_greeting(self):
        bound = bind("{greeting}, {user}!", {"greeting": "Hello", "user": "World"})
        assert bound.message == "Hello, World!"
        assert list(bound.parameters) == ["greeting", "user"]

    def test_missing_key_renders_empty(self):
        bound = bind("[{present}][{missing}]", {"present": 1})
        assert bound.message == "[1][]"
        assert bound.parameters["missing"] is None

    def test_extra_keys_not_bound(self):
        bound = bind("{a}", {"a": 1, "b": 2})
        assert dict(bound.parameters) == {"a": 1}

    def test_none_parameters(self):
        bound = bind("nothing {here}", None)
        assert bound.message == "nothing "

    def test_parameters_are_read_only(self):
        bound = bind("{a}", {"a": 1})
        with pytest.raises(TypeError):
            bound.parameters["a"] = 2


class TestPositionalBinding:
    def test_mixed_values(self):
        bound = bind("{hello}-{world} number {num} at {time}!", ["Hello", "World", 1, 1.2])
        assert bound.message == "Hello-World number 1 at 1.2!"
        assert dict(bound.parameters) == {"hello": "Hello", "world": "World", "num": 1, "time": 1.2}

    def test_repeated_placeholder_uses_one_value(self):
        bound = bind("{x} and {x} again, then {y}", ["a", "b"])
        assert bound.message == "a and a again, then b"

    def test_extra_values_ignored(self):
        assert bind("{a}", ["x", "y", "z"]).message == "x"

    def test_too_few_values(self):
        with pytest.raises(ValidationError) as exc:
            bind("{a} {b} {c}", ["x", "y"])
        assert exc.value.parameter == "c"

    def test_tuple_accepted_as_sequence(self):
        assert bind("{a}/{b}", ("x", 2)).message == "x/2"

    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_nested_list_rejected_anywhere(self, position):
        values = ["a", "b", "c"]
        values[position] = ["nested"]
        with pytest.raises(ValidationError) as exc:
            bind("{a} {b} {c}", values)
        assert exc.value.parameter == str(position)

    @pytest.mark.parametrize("nested", [("t",), {"k": "v"}, {1, 2}, b"bytes"])
    def test_other_containers_rejected(self, nested):
        with pytest.raises(ValidationError):
            bind("{a}", [nested])

    def test_nested_rejected_even_past_placeholder_count(self):
        with pytest.raises(ValidationError):
            bind("{a}", ["ok", [1, 2]])

    def test_scalar_parameters_rejected(self):
        with pytest.raises(ValidationError):
            bind("{a}", 5)

    def test_string_parameters_rejected(self):
        with pytest.raises(ValidationError):
            bind("{a}", "abc")


class TestSegments:
    def test_literal_and_value_spans(self):
        bound = bind("Installed {module} v{version}.", ["PSReadLine", 2])
        assert [(s.text, s.name) for s in bound.segments] == [
            ("Installed ", None),
            ("PSReadLine", "module"),
            (" v", None),
            ("2", "version"),
            (".", None),
        ]
        assert bound.segments[3].value == 2
