"""Conditional tag.

Two forms, exactly one attribute each:

<hc:if i="user.admin">...</hc:if>     truthiness of a value
<hc:if iter="results">...</hc:if>     iterable with at least one element

A leading ``!`` on the path inverts the check: ``<hc:if i="!user">``.

Thread Safety:
Stateless handler. Safe for concurrent use across threads.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

from hcompile.errors import TagDirectiveError
from hcompile.parts import ClosePart, ConditionalPart, Part
from hcompile.tags.options import ConditionalOptions

if TYPE_CHECKING:
    from hcompile.scanner import TagDef


class ConditionalTag:
    """Handler for ``if``."""

    names: ClassVar[tuple[str, ...]] = ("if",)

    def resolve(self, tag: TagDef) -> Sequence[Part]:
        if tag.is_close:
            if tag.attrs:
                raise TagDirectiveError(
                    tag.name, "closing tag takes no attributes", next(iter(tag.attrs))
                )
            return [ClosePart()]

        options = ConditionalOptions.from_tag(tag)
        if (options.i is None) == (options.iter is None):
            raise TagDirectiveError(tag.name, "needs exactly one of 'i' or 'iter'")

        iter_check = options.iter is not None
        path = options.iter if iter_check else options.i
        invert = path.startswith("!")
        if invert:
            path = path[1:].strip()

        parts: list[Part] = [ConditionalPart(path=path, invert=invert, iter_check=iter_check)]
        if tag.self_closing:
            parts.append(ClosePart())
        return parts

    def __repr__(self) -> str:
        return "ConditionalTag()"
