"""Protocols for structured directive tags.

Directives can be written as inline markers (``{{>items x}}``) or as tags
in a reserved namespace (``<hc:loop iter="items" v="x">``). Every parsed
tag is offered to a TagResolver before it is re-emitted as markup; the
resolver either claims it by returning parts or declines with None.

Two levels of extension:
- TagResolver: the strategy the scanner calls for every tag.
- TagHandler: one named directive tag, looked up by NamespacedTagResolver
  in a TagRegistry.

Thread Safety:
Resolvers and handlers must be stateless. Multiple threads may call the
same instance concurrently.

Example:
    >>> class UpperOnly:
    ...     def resolve(self, tag):
    ...         if tag.name.isupper():
    ...             return [RawPart(f"<!-- {tag.name} -->")]
    ...         return None
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

if TYPE_CHECKING:
    from hcompile.parts import Part
    from hcompile.scanner import TagDef


@runtime_checkable
class TagResolver(Protocol):
    """Strategy turning parsed tags into control parts."""

    def resolve(self, tag: TagDef) -> Sequence[Part] | None:
        """Claim a tag.

        Args:
            tag: The parsed tag (name, attributes, close/self-closing flags)

        Returns:
            Parts replacing the tag, or None to re-emit it literally.

        Raises:
            TagDirectiveError: The tag is claimed but misconfigured
        """
        ...


@runtime_checkable
class TagHandler(Protocol):
    """Protocol for one directive tag.

    Attributes:
        names: Local tag names (without namespace prefix) this handler
            responds to, e.g. ("loop",)
    """

    names: ClassVar[tuple[str, ...]]

    def resolve(self, tag: TagDef) -> Sequence[Part]:
        """Build the parts for an opening, closing or self-closing tag."""
        ...


class NullTagResolver:
    """Resolver that recognizes nothing: every tag is emitted as markup."""

    __slots__ = ()

    def resolve(self, tag: TagDef) -> Sequence[Part] | None:
        return None
