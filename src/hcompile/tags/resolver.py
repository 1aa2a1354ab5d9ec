"""Namespaced tag resolver.

Claims every tag whose name starts with the namespace prefix (``hc:`` by
default) and dispatches it to the handler registered for the local name.
The namespace is closed: an unregistered name under the prefix is an
error rather than literal markup.

Example:
    >>> resolver = NamespacedTagResolver()
    >>> resolver.resolve(TagDef("hc:loop", {"iter": "items", "v": "x"}))
    [LoopPart(path='items', binding='x')]
    >>> resolver.resolve(TagDef("div")) is None
    True
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from hcompile.errors import TagDirectiveError
from hcompile.tags.registry import create_default_registry

if TYPE_CHECKING:
    from hcompile.parts import Part
    from hcompile.scanner import TagDef
    from hcompile.tags.registry import TagRegistry

DEFAULT_PREFIX = "hc:"


class NamespacedTagResolver:
    """Resolve ``<prefix:name>`` tags through a TagRegistry.

    Thread Safety:
        Immutable after creation. Safe to share across threads.
    """

    __slots__ = ("_registry", "_prefix")

    def __init__(
        self,
        registry: TagRegistry | None = None,
        *,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        """Initialize resolver.

        Args:
            registry: Handlers by local name (built-in loop/if/else if None)
            prefix: Namespace prefix, including its separator
        """
        if not prefix:
            raise ValueError("tag namespace prefix must not be empty")
        self._registry = registry if registry is not None else create_default_registry()
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def resolve(self, tag: TagDef) -> Sequence[Part] | None:
        if not tag.name.startswith(self._prefix):
            return None

        local = tag.name[len(self._prefix) :]
        handler = self._registry.get(local)
        if handler is None:
            known = ", ".join(sorted(self._prefix + n for n in self._registry.names))
            raise TagDirectiveError(tag.name, f"unknown directive tag (known: {known})")
        return list(handler.resolve(tag))
