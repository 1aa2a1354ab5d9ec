"""Loop tag.

Example:
<hc:loop iter="items" v="item">
  <li>{{item.label}}</li>
<hc:else/>
  <li>Nothing here</li>
</hc:loop>

Equivalent to ``{{>items item}}...{{|}}...{{<}}``. A missing or empty ``v``
binds ``_``, as in the inline form.

Thread Safety:
Stateless handler. Safe for concurrent use across threads.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

from hcompile.errors import TagDirectiveError
from hcompile.parts import DEFAULT_BINDING, ClosePart, LoopPart, Part
from hcompile.tags.options import LoopOptions

if TYPE_CHECKING:
    from hcompile.scanner import TagDef


class LoopTag:
    """Handler for ``loop``: opens a loop over ``iter`` binding ``v``."""

    names: ClassVar[tuple[str, ...]] = ("loop",)

    def resolve(self, tag: TagDef) -> Sequence[Part]:
        if tag.is_close:
            if tag.attrs:
                raise TagDirectiveError(
                    tag.name, "closing tag takes no attributes", next(iter(tag.attrs))
                )
            return [ClosePart()]

        options = LoopOptions.from_tag(tag)
        parts: list[Part] = [LoopPart(path=options.iter, binding=options.v or DEFAULT_BINDING)]
        if tag.self_closing:
            parts.append(ClosePart())
        return parts

    def __repr__(self) -> str:
        return "LoopTag()"
