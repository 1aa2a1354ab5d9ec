"""Tests for the type-scope engine."""

import textwrap

import pytest

from hcompile.errors import TemplateSemanticError, TemplateStructureError
from hcompile.scope import MAX_DEPTH, TypeScope


def dedent(text: str) -> str:
    return textwrap.dedent(text).strip("\n")


class TestRecording:
    """Path recording and rendering."""

    def test_empty_scope_is_any(self) -> None:
        assert TypeScope().generate_type() == "Any"

    def test_first_reference_order(self) -> None:
        scope = TypeScope()
        for path in ("zeta", "alpha", "user.name", "mid", "user.age"):
            scope.record(path)
        assert scope.generate_type() == dedent(
            """
            {
                "zeta": NotRequired[Any],
                "alpha": NotRequired[Any],
                "user": NotRequired[{
                    "name": NotRequired[Any],
                    "age": NotRequired[Any],
                }],
                "mid": NotRequired[Any],
            }
            """
        )

    def test_record_returns_leaf(self) -> None:
        scope = TypeScope()
        leaf = scope.record("a.b")
        assert scope.record("a.b") is leaf
        assert leaf.fields == {}

    @pytest.mark.parametrize("order", [(False, True, False), (True, False, False), (False, False, True)])
    def test_required_wins(self, order: tuple[bool, ...]) -> None:
        scope = TypeScope()
        for required in order:
            scope.record("a.b", required)
        assert scope.any_required
        assert scope.generate_type() == dedent(
            """
            {
                "a": Required[{
                    "b": Required[Any],
                }],
            }
            """
        )

    def test_keys_are_json_strings(self) -> None:
        scope = TypeScope()
        scope.record("$id")
        assert '"$id": NotRequired[Any],' in scope.generate_type()


class TestBindings:
    """Loop bindings alias the iterated element type."""

    def test_loop_shadowing(self) -> None:
        scope = TypeScope()
        scope.nest_iterable("items", "x")
        scope.record("x.label")
        scope.pop()
        assert scope.generate_type() == dedent(
            """
            {
                "items": NotRequired[{
                    __iter__: Iterator[{
                        "label": NotRequired[Any],
                    }],
                }],
            }
            """
        )

    def test_restores_shadowed_field_in_place(self) -> None:
        scope = TypeScope()
        scope.record("x")
        scope.nest_iterable("items", "x")
        assert scope.is_local("x")
        scope.record("x.label")
        scope.pop()

        assert not scope.is_local("x")
        scope.record("x")
        assert scope.generate_type() == dedent(
            """
            {
                "x": NotRequired[Any],
                "items": NotRequired[{
                    __iter__: Iterator[{
                        "label": NotRequired[Any],
                    }],
                }],
            }
            """
        )

    def test_binding_removed_after_close(self) -> None:
        scope = TypeScope()
        scope.nest_iterable("items", "x")
        scope.pop()
        assert not scope.is_local("x")
        assert '"x"' not in scope.generate_type()

    def test_nested_bindings_over_same_element(self) -> None:
        scope = TypeScope()
        scope.nest_iterable("items", "a")
        scope.nest_iterable("items", "b")
        scope.pop()
        assert scope.is_local("a")
        assert not scope.is_local("b")
        scope.pop()
        assert not scope.is_local("a")

    def test_element_created_once(self) -> None:
        scope = TypeScope()
        first = scope.nest_iterable("items", "")
        scope.pop()
        assert scope.nest_iterable("items", "x") is first

    def test_local_required_does_not_require_context(self) -> None:
        scope = TypeScope()
        scope.nest_iterable("items", "x")
        scope.record("x.id", required=True)
        scope.pop()
        assert not scope.any_required
        assert '"id": Required[Any],' in scope.generate_type()
        assert '"items": NotRequired[' in scope.generate_type()

    def test_dotted_binding(self) -> None:
        with pytest.raises(TemplateSemanticError, match="can't contain '.'"):
            TypeScope().nest_iterable("items", "a.b")


class TestFrames:
    """Stack discipline for loops, conditionals and else."""

    def test_depth(self) -> None:
        scope = TypeScope()
        scope.nest_empty()
        scope.nest_iterable("a", "x")
        assert scope.depth == 2
        scope.pop()
        scope.pop()
        assert scope.depth == 0
        scope.finish()

    def test_pop_empty(self) -> None:
        with pytest.raises(TemplateStructureError, match="close without"):
            TypeScope().pop()

    def test_else_empty(self) -> None:
        with pytest.raises(TemplateStructureError, match="else without"):
            TypeScope().enter_else()

    def test_duplicate_else(self) -> None:
        scope = TypeScope()
        scope.nest_empty()
        scope.enter_else()
        with pytest.raises(TemplateStructureError, match="more than one else"):
            scope.enter_else()

    def test_else_ends_binding(self) -> None:
        scope = TypeScope()
        scope.nest_iterable("items", "x")
        scope.enter_else()
        assert not scope.is_local("x")
        scope.record("x")
        scope.pop()
        assert '"x": NotRequired[Any],' in scope.generate_type()

    def test_finish_with_open_frames(self) -> None:
        scope = TypeScope()
        scope.nest_empty()
        with pytest.raises(TemplateStructureError, match="1 loop/conditional block"):
            scope.finish()

    def test_nesting_limit(self) -> None:
        scope = TypeScope()
        for _ in range(MAX_DEPTH):
            scope.nest_empty()
        with pytest.raises(TemplateStructureError, match=f"deeper than {MAX_DEPTH}"):
            scope.nest_iterable("items", "x")
        assert not scope.is_local("x")
        assert scope.depth == MAX_DEPTH
