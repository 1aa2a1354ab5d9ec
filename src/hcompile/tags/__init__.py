"""Structured directive tags for hcompile.

Directives can be written as tags in a reserved namespace instead of inline
markers:

    <hc:loop iter="items" v="item">...<hc:else/>...</hc:loop>
    <hc:if i="user">...</hc:if>
    <hc:if iter="results">...</hc:if>

Custom Tags:
    >>> from hcompile.tags import NamespacedTagResolver, create_registry_with_defaults
    >>> builder = create_registry_with_defaults()
    >>> builder.register(MyTag())
    >>> resolver = NamespacedTagResolver(builder.build(), prefix="my:")

Disable structured tags entirely with ``NullTagResolver()``.
"""

from hcompile.tags.builtins import ConditionalTag, ElseTag, LoopTag
from hcompile.tags.options import ConditionalOptions, LoopOptions, TagOptions
from hcompile.tags.protocol import NullTagResolver, TagHandler, TagResolver
from hcompile.tags.registry import (
    TagRegistry,
    TagRegistryBuilder,
    create_default_registry,
    create_registry_with_defaults,
)
from hcompile.tags.resolver import DEFAULT_PREFIX, NamespacedTagResolver

__all__ = [
    "DEFAULT_PREFIX",
    "ConditionalOptions",
    "ConditionalTag",
    "ElseTag",
    "LoopOptions",
    "LoopTag",
    "NamespacedTagResolver",
    "NullTagResolver",
    "TagHandler",
    "TagOptions",
    "TagRegistry",
    "TagRegistryBuilder",
    "TagResolver",
    "create_default_registry",
    "create_registry_with_defaults",
]
