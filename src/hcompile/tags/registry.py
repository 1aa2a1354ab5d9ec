"""Tag registry for directive tag handler lookup and registration.

Thread Safety:
TagRegistry is immutable after creation. Safe to share.
Use TagRegistryBuilder for mutable construction.

Example:
    >>> builder = TagRegistryBuilder()
    >>> builder.register(LoopTag())
    >>> registry = builder.build()
    >>> registry.get("loop")
    LoopTag()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hcompile.tags.protocol import TagHandler


class TagRegistry:
    """Immutable mapping of local tag names to handlers."""

    __slots__ = ("_by_name",)

    def __init__(self, by_name: dict[str, TagHandler]) -> None:
        """Initialize registry with a pre-built mapping.

        Use TagRegistryBuilder to create instances.
        """
        self._by_name = by_name

    def get(self, name: str) -> TagHandler | None:
        """Get handler for a local tag name (e.g., "loop"), or None."""
        return self._by_name.get(name)

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._by_name.keys())


class TagRegistryBuilder:
    """Mutable builder for TagRegistry."""

    __slots__ = ("_by_name",)

    def __init__(self) -> None:
        self._by_name: dict[str, TagHandler] = {}

    def register(self, handler: TagHandler) -> TagRegistryBuilder:
        """Register a tag handler.

        Args:
            handler: Handler implementing TagHandler protocol

        Returns:
            Self for chaining

        Raises:
            TypeError: Handler has no ``names`` attribute
            ValueError: A name is already registered
        """
        if not hasattr(handler, "names"):
            msg = f"Handler {type(handler).__name__} missing 'names' attribute"
            raise TypeError(msg)

        for name in handler.names:
            if name in self._by_name:
                existing = self._by_name[name]
                msg = f"Tag '{name}' already registered by {type(existing).__name__}"
                raise ValueError(msg)
            self._by_name[name] = handler

        return self

    def register_all(self, handlers: list[TagHandler]) -> TagRegistryBuilder:
        for handler in handlers:
            self.register(handler)
        return self

    def build(self) -> TagRegistry:
        """Build immutable registry from registered handlers."""
        return TagRegistry(dict(self._by_name))


def _build_default_registry() -> TagRegistry:
    """Build the default registry (internal, not cached)."""
    return create_registry_with_defaults().build()


# Module-level cached default registry (handlers are stateless)
_DEFAULT_REGISTRY: TagRegistry | None = None


def create_default_registry() -> TagRegistry:
    """Return the registry of built-in tags: loop, if, else."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = _build_default_registry()
    return _DEFAULT_REGISTRY


def create_registry_with_defaults() -> TagRegistryBuilder:
    """Create a builder pre-populated with the built-in tags.

    Use this to extend the default set with custom tags:

        >>> builder = create_registry_with_defaults()
        >>> builder.register(MyIncludeTag())
        >>> resolver = NamespacedTagResolver(builder.build())
    """
    from hcompile.tags.builtins import ConditionalTag, ElseTag, LoopTag

    return TagRegistryBuilder().register_all([LoopTag(), ConditionalTag(), ElseTag()])
