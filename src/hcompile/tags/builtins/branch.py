"""Else tag: ``<hc:else/>`` inside a loop or conditional body.

Thread Safety:
Stateless handler. Safe for concurrent use across threads.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

from hcompile.errors import TagDirectiveError
from hcompile.parts import ElsePart, Part
from hcompile.tags.options import EmptyOptions

if TYPE_CHECKING:
    from hcompile.scanner import TagDef


class ElseTag:
    """Handler for ``else``. Must be written self-closing."""

    names: ClassVar[tuple[str, ...]] = ("else",)

    def resolve(self, tag: TagDef) -> Sequence[Part]:
        if tag.is_close or not tag.self_closing:
            raise TagDirectiveError(tag.name, "must be self-closing, e.g. <hc:else/>")
        EmptyOptions.from_tag(tag)
        return [ElsePart()]

    def __repr__(self) -> str:
        return "ElseTag()"
