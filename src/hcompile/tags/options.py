"""Typed attribute options for directive tags.

A tag handler declares the attributes it accepts as a frozen dataclass.
``from_tag`` validates a parsed tag against it: unknown attributes, bare
presence flags, and missing required attributes are configuration errors
naming the tag and the attribute.

Values may be written bare, quoted, or in brace form; all three yield the
same path:

    <hc:loop iter=items>  <hc:loop iter="items">  <hc:loop iter={{items}}>

Thread Safety:
All options classes are frozen dataclasses (immutable).

"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, fields
from typing import TYPE_CHECKING, Any, Self

from hcompile.errors import TagDirectiveError
from hcompile.parts import odd_split

if TYPE_CHECKING:
    from hcompile.scanner import TagDef


@dataclass(frozen=True, slots=True)
class TagOptions:
    """Base class for typed tag options. Field names are attribute names."""

    @classmethod
    def from_tag(cls, tag: TagDef) -> Self:
        """Validate and collect the attributes of ``tag``.

        Raises:
            TagDirectiveError: Unknown, valueless or missing attribute
        """
        declared = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}

        for key, value in tag.attrs.items():
            if key not in declared:
                raise TagDirectiveError(tag.name, "attribute is not allowed", key)
            if value is True:
                raise TagDirectiveError(tag.name, "attribute needs a value", key)
            kwargs[key] = unwrap_value(tag.name, key, value)

        for name, f in declared.items():
            if name not in kwargs and f.default is MISSING:
                raise TagDirectiveError(tag.name, "attribute is required", name)

        return cls(**kwargs)


def unwrap_value(tag_name: str, key: str, value: str) -> str:
    """Reduce an attribute value to a bare path, accepting ``{{path}}``."""
    if "{{" not in value:
        return value.strip()

    split = odd_split(value)
    if len(split) != 3 or split[0].strip() or split[2].strip():
        raise TagDirectiveError(tag_name, f"expected a single path, got {value!r}", key)
    return split[1]


@dataclass(frozen=True, slots=True)
class LoopOptions(TagOptions):
    """``<hc:loop iter="path" v="binding">``"""

    iter: str
    v: str = "_"


@dataclass(frozen=True, slots=True)
class ConditionalOptions(TagOptions):
    """``<hc:if i="path">`` (truthiness) or ``<hc:if iter="path">`` (non-empty)."""

    i: str | None = None
    iter: str | None = None


@dataclass(frozen=True, slots=True)
class EmptyOptions(TagOptions):
    """Tags that take no attributes."""
