"""StringBuilder for O(n) expression assembly.

The code generator emits many small fragments (literals, helper calls,
lambda openers and closers). Appending them to a list and joining once is
O(n) total, where repeated concatenation would be O(n²).

Thread Safety:
StringBuilder instances are local to each compile call.
No shared mutable state.

"""

from __future__ import annotations


class StringBuilder:
    """Efficient string accumulator.

    Usage:
            >>> sb = StringBuilder()
            >>> sb.append("''.join((")
            >>> sb.append("'Hi', ")
            >>> sb.append("))")
            >>> sb.build()
            "''.join(('Hi', ))"

    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        self._parts: list[str] = []

    def append(self, s: str) -> StringBuilder:
        """Append a fragment (empty fragments are skipped).

        Returns:
            self for method chaining
        """
        if s:
            self._parts.append(s)
        return self

    def build(self) -> str:
        """Join all fragments into the final string."""
        return "".join(self._parts)
