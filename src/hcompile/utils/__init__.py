"""Utility modules for hcompile.

Provides:
- logger: get_logger for logging
- stringbuilder: StringBuilder for expression assembly
"""

from hcompile.utils.logger import get_logger
from hcompile.utils.stringbuilder import StringBuilder

__all__ = [
    "StringBuilder",
    "get_logger",
]
