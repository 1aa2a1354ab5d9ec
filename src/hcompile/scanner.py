"""Cursor-based scanner for HTML-flavored template source.

The scanner walks the source once, left to right. Each call to
``consume_top_level`` consumes exactly one unit (a text run, a comment or
doctype, or a tag) and immediately converts it into parts.

Only enough HTML is understood to find tag boundaries and attributes:
- Text runs extend up to the next ``<`` followed by ``/``, a word character
  or ``!``.
- ``<!...`` (comments, doctypes) ends at the first ``>``. A ``>`` inside a
  comment ends it early; this is a known limitation.
- Tags are ``<name attr attr=value ...>``, ``</name>`` or ``<name/>``.

Thread Safety:
Scanner instances are single-use. Create one per source string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from functools import partial
from typing import TYPE_CHECKING

from hcompile.attributes import AttrValue, render_attr_key_value
from hcompile.errors import TemplateSyntaxError
from hcompile.location import SourceLocation
from hcompile.parts import (
    Part,
    RawPart,
    coalesce_parts,
    resolve_inline_directive,
    split_for_parts,
)

if TYPE_CHECKING:
    from hcompile.tags.protocol import TagResolver


_INTERESTING_RE = re.compile(r"<[/\w!]", re.ASCII)
_TAG_NAME_RE = re.compile(r"[^\s>]*")
_ATTR_RE = re.compile(r"\s*([^\s/>=]*)(=?)")
_TAG_SUFFIX_RE = re.compile(r"\s*/?>")

# Attribute value forms, tried by first character
_BRACE_VALUE_RE = re.compile(r"(\{\{.*?\}\})")
_QUOTED_VALUE_RE = re.compile(r'"(.*?)"')
_BARE_VALUE_RE = re.compile(r"([^\s/>]*)")


class ScanKind(Enum):
    """What a single ``consume_top_level`` call consumed."""

    END = auto()
    TEXT = auto()
    COMMENT = auto()
    TAG = auto()


@dataclass(slots=True)
class TagDef:
    """A parsed tag, handed to the tag resolver and then discarded.

    Attributes:
        name: Tag name as written (e.g., "div", "hc:loop")
        attrs: Attributes in source order; True for bare presence flags
        is_close: ``</name>`` form
        self_closing: ``<name/>`` or ``<name ... />`` form
    """

    name: str
    attrs: dict[str, AttrValue] = field(default_factory=dict)
    is_close: bool = False
    self_closing: bool = False


class Scanner:
    """Single-pass template scanner.

    Usage:
            >>> scanner = Scanner('<a href="{{url}}">Hi</a>')
            >>> list(scanner.scan())
            [<ScanKind.TAG: 4>, <ScanKind.TEXT: 2>, <ScanKind.TAG: 4>]
            >>> scanner.parts()
            [RawPart(text='<a'), AttrRenderPart(attr='href', path='url'), RawPart(text='>Hi</a>')]

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_pos",
        "_source_file",
        "_tag_resolver",
        "_directive_resolver",
        "_output",
    )

    def __init__(
        self,
        source: str,
        *,
        tag_resolver: TagResolver | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize scanner with source text.

        Args:
            source: Template source
            tag_resolver: Strategy for structured directive tags. None
                recognizes no tags; every tag is re-emitted literally.
            source_file: Optional template path for error messages
        """
        if tag_resolver is None:
            from hcompile.tags.protocol import NullTagResolver

            tag_resolver = NullTagResolver()

        self._source = source
        self._source_len = len(source)
        self._pos = 0
        self._source_file = source_file
        self._tag_resolver = tag_resolver
        self._directive_resolver = resolve_inline_directive
        self._output: list[Part] = []

    def scan(self) -> Iterator[ScanKind]:
        """Consume the whole source.

        Yields:
            The kind of each consumed unit, excluding the final END.
        """
        while (kind := self.consume_top_level()) is not ScanKind.END:
            yield kind

    def parts(self) -> list[Part]:
        """Return the coalesced parts produced so far."""
        return coalesce_parts(self._output)

    def consume_top_level(self) -> ScanKind:
        """Consume one text run, comment/doctype, or tag.

        Returns:
            The kind consumed, or ScanKind.END when the source is exhausted.
        """
        if self._pos >= self._source_len:
            return ScanKind.END

        match = _INTERESTING_RE.search(self._source, self._pos)

        # Nothing interesting left: the rest is text
        if match is None:
            self._create_text(self._pos, self._source_len)
            self._pos = self._source_len
            return ScanKind.TEXT

        if match.start() > self._pos:
            self._create_text(self._pos, match.start())
            self._pos = match.start()
            return ScanKind.TEXT

        if self._source[self._pos + 1] == "!":
            self._consume_comment()
            return ScanKind.COMMENT

        self._consume_tag()
        return ScanKind.TAG

    # =========================================================================
    # Unit consumers
    # =========================================================================

    def _consume_comment(self) -> None:
        """Consume ``<!...>`` up to the first ``>`` (or the end of source)."""
        start = self._pos
        end = self._source.find(">", start)
        end = self._source_len if end == -1 else end + 1
        self._create_comment(start, end)
        self._pos = end

    def _consume_tag(self) -> None:
        """Consume a tag at the cursor, including all attributes."""
        source = self._source
        start = self._pos
        is_close = source[start + 1] == "/"
        self._pos += 2 if is_close else 1

        name = _TAG_NAME_RE.match(source, self._pos).group(0)
        after_name = self._pos + len(name)
        if name.endswith("/") and source[after_name : after_name + 1] == ">":
            # "<tag/>"
            self._create_tag(TagDef(name[:-1], is_close=is_close, self_closing=True))
            self._pos = after_name + 1
            return
        self._pos = after_name

        attrs: dict[str, AttrValue] = {}
        while True:
            attr = _ATTR_RE.match(source, self._pos)
            if not attr.group(0):
                break
            self._pos = attr.end()

            key, equals = attr.group(1), attr.group(2)
            if not equals:
                if key:
                    attrs[key] = True
                continue
            attrs[key] = self._eat_attribute_value()

        suffix = _TAG_SUFFIX_RE.match(source, self._pos)
        if suffix is None:
            found = source[self._pos : self._pos + 12]
            raise TemplateSyntaxError(
                f"malformed tag terminator in <{'/' if is_close else ''}{name}>: "
                f"expected '>' or '/>', found {found!r}",
                self._location(self._pos),
            )

        self._create_tag(
            TagDef(
                name,
                attrs,
                is_close=is_close,
                self_closing="/" in suffix.group(0),
            )
        )
        self._pos = suffix.end()

    def _eat_attribute_value(self) -> str:
        """Consume the value after ``=``: ``{{expr}}``, ``"quoted"`` or bare."""
        if self._source.startswith("{{", self._pos):
            pattern = _BRACE_VALUE_RE
        elif self._source.startswith('"', self._pos):
            pattern = _QUOTED_VALUE_RE
        else:
            pattern = _BARE_VALUE_RE

        match = pattern.match(self._source, self._pos)
        if match is None:
            return ""
        self._pos = match.end()
        return match.group(1)

    # =========================================================================
    # Part creation
    # =========================================================================

    def _create_text(self, start: int, end: int) -> None:
        self._output.extend(
            split_for_parts(
                self._source[start:end],
                "text",
                self._directive_resolver,
                locate=partial(self._relative_location, start),
            )
        )

    def _create_comment(self, start: int, end: int) -> None:
        self._output.extend(
            split_for_parts(
                self._source[start:end],
                "comment",
                self._directive_resolver,
                locate=partial(self._relative_location, start),
            )
        )

    def _create_tag(self, tag: TagDef) -> None:
        resolved = self._tag_resolver.resolve(tag)
        if resolved is not None:
            self._output.extend(resolved)
            return

        # Not a directive tag: rebuild it literally
        self._output.append(RawPart(f"<{'/' if tag.is_close else ''}{tag.name}"))
        for key, value in tag.attrs.items():
            self._output.extend(render_attr_key_value(key, value))
        self._output.append(RawPart(" />" if tag.self_closing else ">"))

    def _location(self, offset: int) -> SourceLocation:
        return SourceLocation.from_offset(self._source, offset, self._source_file)

    def _relative_location(self, base: int, offset: int) -> SourceLocation:
        return self._location(base + offset)
