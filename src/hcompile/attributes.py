"""Attribute rendering rules for literal tag reconstruction.

When a tag is not claimed by the tag resolver it is re-emitted as markup,
attribute by attribute. Each ``key=value`` pair becomes a short run of
parts according to the rules below, checked in order:

1. ``?key="{{path}}"``  boolean attribute, emitted as `` key`` when truthy.
   Any other value falls back to the bare name, emitted unconditionally.
2. ``:key``             shorthand for ``key="{{key}}"`` (omitted when None).
3. ``key``              presence flag, emitted literally.
4. ``key="text"``       no expressions, emitted literally.
5. ``key="{{path}}"``   whole value is one expression: omitted when None.
6. ``key="a{{b}}c"``    composite value, emitted as `` key=`` + AttrPart.

"""

from __future__ import annotations

from hcompile.errors import TemplateSemanticError
from hcompile.parts import AttrBooleanPart, AttrPart, AttrRenderPart, Part, RawPart, odd_split

AttrValue = str | bool


def render_attr_key_value(key: str, value: AttrValue) -> list[Part]:
    """Render one attribute of a reconstructed tag.

    Args:
        key: Attribute name as written, including any ``?``/``:`` prefix
        value: Attribute value, or True for a bare presence flag

    Returns:
        Parts producing the attribute, including its leading space.

    Raises:
        TemplateSemanticError: ``:`` shorthand without a name
    """
    if key.startswith("?"):
        name = key[1:]
        if value is True:
            return []
        split = odd_split(value)
        if len(split) != 3 or split[0] or split[2]:
            # Permissive fallback: not a single bare expression, keep the name.
            return [RawPart(f" {name}")]
        return [AttrBooleanPart(attr=name, path=split[1])]

    if key.startswith(":"):
        name = key[1:]
        if not name:
            raise TemplateSemanticError("':' attribute shorthand needs a name")
        return [AttrRenderPart(attr=name, path=name)]

    if value is True:
        return [RawPart(f" {key}")]

    split = odd_split(value)
    if len(split) == 1:
        return [RawPart(f' {key}="{split[0]}"')]
    if len(split) == 3 and not split[0] and not split[2]:
        return [AttrRenderPart(attr=key, path=split[1])]

    return [RawPart(f" {key}="), AttrPart(segments=tuple(split))]
