"""Tests for the runtime helpers used by compiled expressions."""

from types import SimpleNamespace

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from hcompile.runtime import (
    RUNTIME_NAMESPACE,
    Unsafe,
    escape,
    if_check,
    if_defined,
    is_nonempty,
    is_unsafe,
    lookup,
    loop,
    render_body,
    unsafe,
)


class TestEscape:
    def test_all_special_characters(self) -> None:
        assert escape("<b>&\"'") == "&lt;b&gt;&amp;&quot;&#39;"

    def test_plain_text_unchanged(self) -> None:
        assert escape("hello world") == "hello world"

    @given(st.text(max_size=200))
    @settings(max_examples=200)
    def test_no_special_characters_survive(self, text: str) -> None:
        out = escape(text)
        assert not any(ch in out for ch in "<>\"'")
        assert out.replace("&amp;", "").count("&") == sum(text.count(ch) for ch in "<>\"'")


class TestUnsafe:
    def test_wraps_text(self) -> None:
        value = unsafe("<b>")
        assert isinstance(value, Unsafe)
        assert is_unsafe(value)
        assert value == "<b>"

    def test_idempotent(self) -> None:
        value = unsafe("<b>")
        assert unsafe(value) is value

    def test_converts_to_text(self) -> None:
        assert unsafe(3) == "3"

    def test_plain_string_is_not_unsafe(self) -> None:
        assert not is_unsafe("<b>")

    def test_repr(self) -> None:
        assert repr(unsafe("x")) == "unsafe('x')"


class TestRenderBody:
    def test_none(self) -> None:
        assert render_body(None) == ""

    def test_escapes(self) -> None:
        assert render_body("<i>") == "&lt;i&gt;"

    def test_unsafe_passthrough(self) -> None:
        assert render_body(unsafe("<i>")) == "<i>"

    def test_non_string_scalar(self) -> None:
        assert render_body(3) == "3"
        assert render_body(False) == "False"

    def test_iterables_concatenate(self) -> None:
        assert render_body(["a", unsafe("<br>"), "<", None, ["b"]]) == "a<br>&lt;b"

    def test_generator(self) -> None:
        assert render_body(str(n) for n in range(3)) == "012"


class TestIfDefined:
    def test_none(self) -> None:
        assert if_defined(None) == ""
        assert if_defined(None, lambda v: "never") == ""

    def test_escapes(self) -> None:
        assert if_defined("a&b") == "a&amp;b"

    def test_render_receives_escaped_text(self) -> None:
        assert if_defined('"x"', lambda v: f"[{v}]") == "[&quot;x&quot;]"

    def test_falsy_values_render(self) -> None:
        assert if_defined(0) == "0"
        assert if_defined("") == ""


class _Text:
    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text


class _Broken:
    def __str__(self) -> str:
        raise RuntimeError("boom")


class TestIfCheck:
    def test_truthy_and_falsy(self) -> None:
        assert if_check(1, lambda: "yes", lambda: "no") == "yes"
        assert if_check([], lambda: "yes", lambda: "no") == "no"

    def test_missing_falsy(self) -> None:
        assert if_check(None, lambda: "yes") == ""

    def test_empty_unsafe_is_falsy(self) -> None:
        assert if_check(unsafe(""), lambda: "yes", lambda: "no") == "no"

    def test_object_judged_by_text(self) -> None:
        assert if_check(_Text(""), lambda: "yes", lambda: "no") == "no"
        assert if_check(_Text("x"), lambda: "yes", lambda: "no") == "yes"

    def test_failed_conversion_keeps_object(self) -> None:
        assert if_check(_Broken(), lambda: "yes", lambda: "no") == "yes"

    def test_plain_object_is_truthy(self) -> None:
        assert if_check(object(), lambda: "yes") == "yes"

    def test_body_result_none_becomes_empty(self) -> None:
        assert if_check(True, lambda: None) == ""


class TestLoop:
    def test_concatenates(self) -> None:
        assert loop([1, 2, 3], lambda x: f"<{x}>") == "<1><2><3>"

    def test_empty_callback(self) -> None:
        assert loop([], lambda x: "x", lambda: "none") == "none"
        assert loop([], lambda x: "x") == ""

    def test_none_and_scalars_are_empty(self) -> None:
        assert loop(None, lambda x: "x", lambda: "none") == "none"
        assert loop(5, lambda x: "x", lambda: "none") == "none"

    def test_string_iterates_characters(self) -> None:
        assert loop("ab", lambda c: c.upper()) == "AB"

    def test_mapping_iterates_keys(self) -> None:
        assert loop({"a": 1, "b": 2}, lambda k: k) == "ab"

    def test_empty_output_with_elements_is_not_empty(self) -> None:
        """``empty`` only runs when there are no elements, not when they render nothing."""
        assert loop([1], lambda x: "x") == "x"


class TestIsNonempty:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [([], False), ([0], True), ("", False), ("a", True), (None, False), (5, False), ({}, False)],
    )
    def test_values(self, value: object, expected: bool) -> None:
        assert is_nonempty(value) is expected

    def test_iterators(self) -> None:
        assert is_nonempty(iter([])) is False
        assert is_nonempty(x for x in [1]) is True


class TestLookup:
    def test_mapping(self) -> None:
        assert lookup({"a": {"b": 1}}, "a", "b") == 1

    def test_missing_step(self) -> None:
        assert lookup({"a": None}, "a", "b") is None
        assert lookup({}, "a", "b", "c") is None
        assert lookup(None, "a") is None

    def test_no_path(self) -> None:
        root = {"a": 1}
        assert lookup(root) is root

    def test_sequence_index(self) -> None:
        assert lookup({"rows": ["x", "y"]}, "rows", "1") == "y"
        assert lookup({"rows": ["x"]}, "rows", "5") is None

    def test_non_digit_on_sequence_uses_attribute(self) -> None:
        rows = SimpleNamespace(total=2)
        assert lookup({"rows": rows}, "rows", "total") == 2
        assert lookup(["x"], "nope") is None

    def test_methods_are_missing(self) -> None:
        """Bound methods never leak into output."""
        assert lookup(["x"], "count") is None
        assert lookup({"s": "abc"}, "s", "upper") is None

    def test_raising_property_is_missing(self) -> None:
        class Account:
            @property
            def name(self) -> str:
                raise ValueError("not loaded")

        assert lookup({"user": Account()}, "user", "name") is None
        assert lookup(Account(), "name", "first") is None

    def test_attribute(self) -> None:
        assert lookup(SimpleNamespace(user=SimpleNamespace(name="Ann")), "user", "name") == "Ann"

    def test_private_attributes_are_hidden(self) -> None:
        assert lookup(SimpleNamespace(_secret=1), "_secret") is None
        assert lookup(object(), "__class__") is None

    def test_private_mapping_keys_are_visible(self) -> None:
        assert lookup({"_": 1}, "_") == 1


class TestNamespace:
    def test_helper_names(self) -> None:
        assert set(RUNTIME_NAMESPACE) == {
            "render_body",
            "if_defined",
            "if_check",
            "loop",
            "is_nonempty",
            "lookup",
            "unsafe",
        }
