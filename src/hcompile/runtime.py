"""Runtime helpers referenced by compiled template expressions.

A compiled expression names these helpers directly (``render_body``,
``if_defined``, ...) and reads context values through ``lookup``. Evaluate
it with ``RUNTIME_NAMESPACE`` as globals, or import the helpers into a
generated module as the ``hcompile`` command does.

Escaping:
Every interpolated value is escaped unless it is wrapped with ``unsafe``.
Rendering a template returns an ``Unsafe`` string, so templates nest into
each other without being escaped twice.

Thread Safety:
All helpers are pure functions. Safe for concurrent use.

"""

from __future__ import annotations

import html
import numbers
from collections.abc import Callable, Iterable, Mapping, Sequence, Sized
from contextlib import suppress
from typing import Any


class Unsafe(str):
    """Text that is already safe HTML and must not be escaped again."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"unsafe({str.__repr__(self)})"


def unsafe(raw: object) -> Unsafe:
    """Mark ``raw`` (converted to text) as pre-escaped HTML."""
    if isinstance(raw, Unsafe):
        return raw
    return Unsafe(raw)


def is_unsafe(value: object) -> bool:
    return isinstance(value, Unsafe)


def escape(text: str) -> str:
    """Escape the five HTML special characters.

    Unlike ``html.escape``, single quotes become ``&#39;``.

    Example:
        >>> escape("<b>&\\"'")
        '&lt;b&gt;&amp;&quot;&#39;'
    """
    return html.escape(text, quote=False).replace('"', "&quot;").replace("'", "&#39;")


def lookup(root: Any, *path: str) -> Any:
    """Walk ``path`` from ``root``, returning None as soon as a step is missing.

    Each step tries, in order: mapping key, sequence index (decimal
    segments only), public attribute. Attributes starting with ``_`` are
    never read. An attribute that raises or is callable counts as missing.

    Example:
        >>> lookup({"user": {"tags": ["a", "b"]}}, "user", "tags", "1")
        'b'
        >>> lookup({"user": None}, "user", "name") is None
        True
    """
    value = root
    for segment in path:
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(segment)
        elif isinstance(value, Sequence) and segment.isdecimal():
            index = int(segment)
            value = value[index] if index < len(value) else None
        elif segment.startswith("_"):
            return None
        else:
            try:
                value = getattr(value, segment, None)
            except Exception:
                return None
            if callable(value):
                return None
    return value


def render_body(raw: Any) -> str:
    """Render a value in element body position.

    None renders nothing, unsafe text passes through, other iterables
    (except strings and bytes) render each element and concatenate.
    """
    if raw is None:
        return ""
    if isinstance(raw, Unsafe):
        return str(raw)
    if isinstance(raw, Iterable) and not isinstance(raw, (str, bytes)):
        return "".join(render_body(each) for each in raw)
    return escape(str(raw))


def if_defined(raw: Any, render: Callable[[str], str] | None = None) -> str:
    """Escape ``raw`` unless it is None; pass the result through ``render``."""
    if raw is None:
        return ""
    out = escape(str(raw))
    return out if render is None else render(out)


def _checkable(raw: Any) -> Any:
    # Objects that only describe themselves through __str__ (a rendered
    # fragment, a lazy value) are judged by their text.
    kind = type(raw)
    if raw is None or isinstance(raw, (str, bytes, numbers.Number, Sized)):
        return raw
    if kind.__str__ is object.__str__ or hasattr(kind, "__bool__"):
        return raw
    with suppress(Exception):
        return str(raw)
    return raw


def if_check(
    raw: Any,
    truthy: Callable[[], str],
    falsy: Callable[[], str] | None = None,
) -> str:
    """Render ``truthy()`` when ``raw`` is truthy, else ``falsy()`` if given."""
    if _checkable(raw):
        return truthy() or ""
    if falsy is None:
        return ""
    return falsy() or ""


def loop(
    raw: Any,
    each: Callable[[Any], str],
    empty: Callable[[], str] | None = None,
) -> str:
    """Render ``each(item)`` for every element of ``raw`` and concatenate.

    None and non-iterable values count as empty. ``empty()`` renders only
    when there were no elements and it was supplied.
    """
    out: list[str] = []
    if raw is not None and isinstance(raw, Iterable):
        out.extend(each(item) for item in raw)

    if not out and empty is not None:
        return empty()
    return "".join(out)


def is_nonempty(raw: Any) -> bool:
    """True when ``raw`` is iterable and yields at least one element.

    One-shot iterators lose their first element; pass collections.
    """
    if raw is None or not isinstance(raw, Iterable):
        return False
    if isinstance(raw, Sized):
        return len(raw) > 0
    sentinel = object()
    return next(iter(raw), sentinel) is not sentinel


# Names a compiled expression may reference
RUNTIME_NAMESPACE: Mapping[str, Callable[..., Any]] = {
    "render_body": render_body,
    "if_defined": if_defined,
    "if_check": if_check,
    "loop": loop,
    "is_nonempty": is_nonempty,
    "lookup": lookup,
    "unsafe": unsafe,
}


__all__ = [
    "RUNTIME_NAMESPACE",
    "Unsafe",
    "escape",
    "if_check",
    "if_defined",
    "is_nonempty",
    "is_unsafe",
    "lookup",
    "loop",
    "render_body",
    "unsafe",
]
