"""Built-in directive tags: loop, if, else."""

from hcompile.tags.builtins.branch import ElseTag
from hcompile.tags.builtins.conditional import ConditionalTag
from hcompile.tags.builtins.loop import LoopTag

__all__ = [
    "ConditionalTag",
    "ElseTag",
    "LoopTag",
]
