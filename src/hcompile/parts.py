"""Typed parts: the linear intermediate form between scanner and code generator.

A template compiles to a flat sequence of parts. Literal markup becomes
``RawPart``; every ``{{...}}`` becomes either an interpolation part or a
control part (conditional, loop, else, close). Control parts are balanced
by the code generator, not here.

Part Hierarchy:
Part (base)
├── RawPart              # literal text
├── HtmlPart             # {{path}} in body text, escaped
├── CommentPart          # {{path}} inside <!...>, escaped
├── AttrPart             # composite attribute value: a="x-{{y}}"
├── AttrRenderPart       # attribute dropped when value is None: a="{{y}}"
├── AttrBooleanPart      # attribute name only when truthy: ?a="{{y}}"
├── ConditionalPart      # {{~path}} / {{~!path}}
├── LoopPart             # {{>path binding}}
├── ElsePart             # {{|}}
└── ClosePart            # {{<}}

Thread Safety:
All parts are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from hcompile.errors import TemplateSemanticError, TemplateSyntaxError, UnknownDirectiveError

if TYPE_CHECKING:
    from hcompile.location import SourceLocation


@dataclass(frozen=True, slots=True)
class Part:
    """Base class for all parts."""


@dataclass(frozen=True, slots=True)
class RawPart(Part):
    text: str


@dataclass(frozen=True, slots=True)
class HtmlPart(Part):
    path: str


@dataclass(frozen=True, slots=True)
class CommentPart(Part):
    path: str


@dataclass(frozen=True, slots=True)
class AttrPart(Part):
    """Composite attribute value.

    ``segments`` always has odd length: literals at even indices,
    expression paths at odd indices.
    """

    segments: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AttrRenderPart(Part):
    attr: str
    path: str


@dataclass(frozen=True, slots=True)
class AttrBooleanPart(Part):
    attr: str
    path: str


@dataclass(frozen=True, slots=True)
class ConditionalPart(Part):
    """Opens a conditional body.

    Attributes:
        path: Property path to test
        invert: Render the body when the value is falsy instead
        iter_check: Test "iterable with at least one element" rather
            than plain truthiness
    """

    path: str
    invert: bool = False
    iter_check: bool = False


@dataclass(frozen=True, slots=True)
class LoopPart(Part):
    path: str
    binding: str = "_"


@dataclass(frozen=True, slots=True)
class ElsePart(Part):
    pass


@dataclass(frozen=True, slots=True)
class ClosePart(Part):
    pass


# Loop binding when none is given
DEFAULT_BINDING = "_"

# Parts that open a body closed by ClosePart
BLOCK_PARTS = (ConditionalPart, LoopPart)

DirectiveResolver = Callable[[str], Sequence[Part]]
Locator = Callable[[int], "SourceLocation"]

_PART_RE = re.compile(r"\{\{(.*?)\}\}")
_IDENT_LEAD_RE = re.compile(r"[0-9A-Za-z_]")


def odd_split(raw: str) -> list[str]:
    """Split a string containing ``{{...}}`` expressions into an odd-length list.

    Literals sit at even indices, stripped expression text at odd indices.
    An unterminated ``{{`` is left in the trailing literal.

    Examples:
        >>> odd_split("{{foo}}")
        ['', 'foo', '']
        >>> odd_split("Hello {{attr}}")
        ['Hello ', 'attr', '']
        >>> odd_split("What {{is}} up {{name}}")
        ['What ', 'is', ' up ', 'name', '']
    """
    out: list[str] = []
    index = 0
    for match in _PART_RE.finditer(raw):
        out.append(raw[index : match.start()])
        out.append(match.group(1).strip())
        index = match.end()
    out.append(raw[index:])
    return out


def resolve_inline_directive(expression: str) -> list[Part]:
    """Map an inline directive expression to control parts.

    Grammar (``expression`` is already stripped):
        ``~path``            conditional, ``~!path`` inverted
        ``>path [binding]``  loop, binding defaults to ``_``
        ``|``                else
        ``<``                close

    Returns:
        The parts for the directive, or an empty list when the leading
        character is not a directive.
    """
    lead = expression[:1]

    if lead == "~":
        rest = expression[1:]
        invert = rest.startswith("!")
        if invert:
            rest = rest[1:]
        return [ConditionalPart(path=rest.strip(), invert=invert)]

    if lead == ">":
        words = expression[1:].split()
        if len(words) > 2:
            msg = f"unexpected tokens in loop directive: {{{{{expression}}}}}"
            raise TemplateSemanticError(msg)
        path = words[0] if words else ""
        binding = words[1] if len(words) == 2 else DEFAULT_BINDING
        return [LoopPart(path=path, binding=binding)]

    if lead == "|":
        return [ElsePart()]

    if lead == "<":
        return [ClosePart()]

    return []


def split_for_parts(
    raw: str,
    context: Literal["text", "comment"],
    resolver: DirectiveResolver = resolve_inline_directive,
    *,
    locate: Locator | None = None,
) -> list[Part]:
    """Split body text or comment text into parts.

    Literal runs become RawPart. An expression starting with an identifier
    character becomes HtmlPart (or CommentPart inside comments); anything
    else is handed to ``resolver``.

    Args:
        raw: Text run or whole comment
        context: "text" for body text, "comment" inside ``<!...>``
        resolver: Directive resolver; must return at least one part
        locate: Maps an offset within ``raw`` to a source location

    Raises:
        UnknownDirectiveError: Resolver returned no parts
        TemplateSyntaxError: A ``{{`` is never closed

    """

    def where(offset: int) -> SourceLocation | None:
        return locate(offset) if locate is not None else None

    out: list[Part] = []
    index = 0

    for match in _PART_RE.finditer(raw):
        if match.start() != index:
            out.append(RawPart(raw[index : match.start()]))
        index = match.end()

        expression = match.group(1).strip()

        if _IDENT_LEAD_RE.match(expression):
            out.append(HtmlPart(expression) if context == "text" else CommentPart(expression))
            continue

        resolved = resolver(expression)
        if not resolved:
            raise UnknownDirectiveError(expression, where(match.start()))
        out.extend(resolved)

    tail = raw[index:]
    unterminated = tail.find("{{")
    if unterminated != -1:
        snippet = tail[unterminated : unterminated + 24]
        raise TemplateSyntaxError(
            f"unterminated expression: {snippet!r}", where(index + unterminated)
        )
    if tail:
        out.append(RawPart(tail))
    return out


def coalesce_parts(parts: Sequence[Part]) -> list[Part]:
    """Merge adjacent RawParts and drop empty ones; leave other parts alone.

    Idempotent: ``coalesce_parts(coalesce_parts(p)) == coalesce_parts(p)``.
    """
    out: list[Part] = []
    pending: list[str] = []

    for part in parts:
        if isinstance(part, RawPart):
            if part.text:
                pending.append(part.text)
            continue
        if pending:
            out.append(RawPart("".join(pending)))
            pending = []
        out.append(part)

    if pending:
        out.append(RawPart("".join(pending)))
    return out
