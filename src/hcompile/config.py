"""ContextVar-based compile configuration for hcompile.

Provides thread-local configuration using Python's ContextVars (PEP 567).
``compile_template`` reads the active config when none is passed explicitly.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so concurrent compilations never observe each other's settings.

Usage:
    from hcompile import compile_template
    from hcompile.config import CompileConfig, compile_config_context
    from hcompile.tags import NullTagResolver

    # Per call
    compiled = compile_template(src, config=CompileConfig(context_name="ctx"))

    # Or for a block of calls
    with compile_config_context(CompileConfig(tag_resolver=NullTagResolver())):
        compiled = compile_template(src)

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hcompile.tags.protocol import TagResolver


@dataclass(frozen=True, slots=True)
class CompileConfig:
    """Immutable compile configuration.

    Attributes:
        context_name: Name of the parameter generated code reads the context
            from. Loop bindings may not reuse it.
        tag_resolver: Strategy turning structured tags into control parts.
            None selects the built-in ``hc:`` resolver.
        source_file: Template path, used only in error locations.

    """

    context_name: str = "context"
    tag_resolver: TagResolver | None = None
    source_file: str | None = None

    @classmethod
    def from_dict(cls, config_dict: dict) -> "CompileConfig":
        """Create CompileConfig from dictionary.

        Only includes keys that are valid CompileConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> config = CompileConfig.from_dict({
            ...     "context_name": "ctx",
            ...     "unknown_key": "ignored",
            ... })
            >>> config.context_name
            'ctx'

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: CompileConfig = CompileConfig()

_compile_config: ContextVar[CompileConfig] = ContextVar(
    "compile_config",
    default=_DEFAULT_CONFIG,
)


def get_compile_config() -> CompileConfig:
    """Get current compile configuration (thread-local)."""
    return _compile_config.get()


def set_compile_config(config: CompileConfig) -> None:
    """Set compile configuration for current context.

    Thread Safety:
        Only affects the current thread's context. Other threads are unaffected.

    """
    _compile_config.set(config)


def reset_compile_config() -> None:
    """Reset to default configuration."""
    _compile_config.set(_DEFAULT_CONFIG)


@contextmanager
def compile_config_context(config: CompileConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with compile_config_context(CompileConfig(context_name="ctx")):
        ...     get_compile_config().context_name
        'ctx'

    """
    previous = _compile_config.get()
    _compile_config.set(config)
    try:
        yield
    finally:
        _compile_config.set(previous)


__all__ = [
    "CompileConfig",
    "compile_config_context",
    "get_compile_config",
    "reset_compile_config",
    "set_compile_config",
]
