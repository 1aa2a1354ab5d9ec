"""Tests for the cursor-based template scanner."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from hcompile.errors import CompileError, TagDirectiveError, TemplateSyntaxError
from hcompile.parts import (
    AttrRenderPart,
    ClosePart,
    CommentPart,
    ConditionalPart,
    HtmlPart,
    LoopPart,
    RawPart,
)
from hcompile.scanner import Scanner, ScanKind, TagDef
from hcompile.tags import NamespacedTagResolver


def scan_parts(source: str, **kwargs) -> list:
    scanner = Scanner(source, **kwargs)
    list(scanner.scan())
    return scanner.parts()


class TestUnits:
    """Each consume_top_level call consumes exactly one unit."""

    def test_unit_kinds(self) -> None:
        scanner = Scanner("<!doctype html><p>Hi</p>")
        assert list(scanner.scan()) == [
            ScanKind.COMMENT,
            ScanKind.TAG,
            ScanKind.TEXT,
            ScanKind.TAG,
        ]

    def test_end(self) -> None:
        scanner = Scanner("")
        assert scanner.consume_top_level() is ScanKind.END
        assert scanner.parts() == []

    def test_lone_angle_bracket_is_text(self) -> None:
        scanner = Scanner("a < b")
        assert list(scanner.scan()) == [ScanKind.TEXT]
        assert scanner.parts() == [RawPart("a < b")]

    def test_non_ascii_after_angle_bracket_is_text(self) -> None:
        scanner = Scanner("a <é b")
        assert list(scanner.scan()) == [ScanKind.TEXT]
        assert scanner.parts() == [RawPart("a <é b")]

    def test_comment_ends_at_first_gt(self) -> None:
        """A '>' inside a comment ends it early; the rest is text."""
        scanner = Scanner("<!-- a > b -->")
        assert list(scanner.scan()) == [ScanKind.COMMENT, ScanKind.TEXT]
        assert scanner.parts() == [RawPart("<!-- a > b -->")]

    def test_unclosed_comment_runs_to_end(self) -> None:
        assert scan_parts("<!-- {{x}}") == [RawPart("<!-- "), CommentPart("x")]


class TestTags:
    """Tag reconstruction."""

    def test_attribute_expression(self) -> None:
        assert scan_parts('<a href="{{url}}">Hi</a>') == [
            RawPart("<a"),
            AttrRenderPart(attr="href", path="url"),
            RawPart(">Hi</a>"),
        ]

    def test_unquoted_brace_value(self) -> None:
        assert scan_parts("<a href={{url}}>") == [
            RawPart("<a"),
            AttrRenderPart(attr="href", path="url"),
            RawPart(">"),
        ]

    def test_bare_value_is_quoted(self) -> None:
        assert scan_parts("<input disabled value=x>") == [
            RawPart('<input disabled value="x">')
        ]

    def test_self_closing(self) -> None:
        assert scan_parts("<br/>") == [RawPart("<br />")]
        assert scan_parts('<img src="a.png" />') == [RawPart('<img src="a.png" />')]

    def test_closing_tag(self) -> None:
        assert scan_parts("</div >") == [RawPart("</div>")]

    def test_body_interpolation(self) -> None:
        assert scan_parts("<p>{{name}}</p>") == [
            RawPart("<p>"),
            HtmlPart("name"),
            RawPart("</p>"),
        ]

    def test_comment_interpolation(self) -> None:
        assert scan_parts("<!-- {{note}} -->") == [
            RawPart("<!-- "),
            CommentPart("note"),
            RawPart(" -->"),
        ]


class TestErrors:
    """Scanner-level errors carry a source location."""

    def test_malformed_terminator(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="malformed tag terminator") as exc_info:
            scan_parts("<a /x>")
        assert exc_info.value.location.lineno == 1
        assert exc_info.value.location.col_offset == 4

    def test_unterminated_tag_at_end(self) -> None:
        with pytest.raises(TemplateSyntaxError):
            scan_parts("<a href")

    def test_unterminated_expression_location(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="unterminated") as exc_info:
            scan_parts("<p>\n  {{name</p>", source_file="card.html")
        location = exc_info.value.location
        assert (location.lineno, location.col_offset) == (2, 3)
        assert str(exc_info.value).startswith("card.html:2:3 ")


class TestTagResolver:
    """Tags are offered to the resolver before literal reconstruction."""

    def test_default_resolver_is_literal(self) -> None:
        assert scan_parts('<hc:if i="a">') == [RawPart('<hc:if i="a">')]

    def test_namespaced_loop(self) -> None:
        parts = scan_parts(
            '<hc:loop iter="items" v="x">{{x}}</hc:loop>',
            tag_resolver=NamespacedTagResolver(),
        )
        assert parts == [LoopPart("items", "x"), HtmlPart("x"), ClosePart()]

    def test_namespaced_self_closing(self) -> None:
        parts = scan_parts("<hc:if i=ok/>", tag_resolver=NamespacedTagResolver())
        assert parts == [ConditionalPart("ok"), ClosePart()]

    def test_resolver_sees_tag(self) -> None:
        seen: list[TagDef] = []

        class Recorder:
            def resolve(self, tag):
                seen.append(tag)
                return None

        scan_parts("<x-card a b=1/>", tag_resolver=Recorder())
        assert seen == [TagDef("x-card", {"a": True, "b": "1"}, self_closing=True)]

    def test_resolver_error_propagates(self) -> None:
        with pytest.raises(TagDirectiveError):
            scan_parts("<hc:nope>", tag_resolver=NamespacedTagResolver())


class TestProperties:
    """Scanning arbitrary input either succeeds or raises a CompileError."""

    @given(st.text(alphabet='<>/!ab ="{}~|:?\n', max_size=60))
    @settings(max_examples=300)
    def test_only_compile_errors(self, source: str) -> None:
        try:
            parts = scan_parts(source)
        except CompileError:
            return
        assert all(not (isinstance(p, RawPart) and not p.text) for p in parts)

    @given(st.text(alphabet=st.characters(blacklist_characters="<{"), max_size=80))
    @settings(max_examples=100)
    def test_plain_text_passes_through(self, source: str) -> None:
        parts = scan_parts(source)
        assert "".join(p.text for p in parts) == source
