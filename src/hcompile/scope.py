"""Type-scope engine: infers the context shape a template needs.

Every property path the template reads is recorded into a tree of
TypeNodes while the code generator walks the parts. Loops alias their
binding to the element subtree of the iterated path, so ``x.label`` inside
``{{>items x}}`` lands under ``items``'s element type rather than under a
top-level ``x``.

Rules:
- A field is optional until any reference marks it required; required
  always wins regardless of order.
- Fields render in first-reference order, never sorted.
- A node that is iterated exposes ``__iter__`` over its element subtree.
- A node with no fields that is never iterated renders as ``Any``.
- At most MAX_DEPTH loops and conditionals may be open at once.

Thread Safety:
TypeScope instances are single-use and local to one compilation.

"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto

from hcompile.errors import TemplateSemanticError, TemplateStructureError

_INDENT = "    "

# Each open block adds three levels of brackets to the generated expression;
# CPython rejects source nested deeper than 200.
MAX_DEPTH = 50


@dataclass(slots=True, eq=False)
class TypeNode:
    """One node of the inferred context shape.

    Attributes:
        fields: Child nodes by path segment, in first-reference order
        required: Referenced at least once as required
        element: Element type when the node is iterated, else None
        local: Number of live loop bindings aliasing this node
    """

    fields: dict[str, TypeNode] = field(default_factory=dict)
    required: bool = False
    element: TypeNode | None = None
    local: int = 0


class FrameKind(Enum):
    """Cleanup action run when a frame is closed."""

    NOOP = auto()
    RESTORE = auto()


@dataclass(slots=True)
class ScopeFrame:
    """Bookkeeping for one open loop or conditional.

    A RESTORE frame undoes a binding alias on close: ``binding`` is put back
    to ``previous`` (or removed when there was none).
    """

    kind: FrameKind
    binding: str = ""
    alias: TypeNode | None = None
    previous: TypeNode | None = None
    has_else: bool = False


class TypeScope:
    """Records property paths and loop bindings; renders the type description.

    Usage:
            >>> scope = TypeScope()
            >>> _ = scope.nest_iterable("items", "x")
            >>> _ = scope.record("x.label")
            >>> scope.pop()
            >>> print(scope.generate_type())
            {
                "items": NotRequired[{
                    __iter__: Iterator[{
                        "label": NotRequired[Any],
                    }],
                }],
            }

    """

    __slots__ = ("_root", "_stack")

    def __init__(self) -> None:
        self._root = TypeNode()
        self._stack: list[ScopeFrame] = []

    @property
    def any_required(self) -> bool:
        """True when at least one path was recorded as required."""
        return self._root.required

    @property
    def depth(self) -> int:
        """Number of open frames."""
        return len(self._stack)

    def is_local(self, name: str) -> bool:
        """Whether a bare identifier currently resolves to a loop binding."""
        node = self._root.fields.get(name)
        return node is not None and node.local > 0

    def record(self, path: str, required: bool = False) -> TypeNode:
        """Record a reference to a dot-separated path.

        Args:
            path: Property path, e.g. "user.name"; a leading segment naming
                a live loop binding walks into the aliased element type
            required: Promote every node along the path to required. The
                root itself is only promoted for context paths, not for
                paths through a loop binding.

        Returns:
            The node for the last segment.
        """
        node = self._root
        if required and not self.is_local(path.partition(".")[0]):
            node.required = True

        for segment in path.split("."):
            child = node.fields.get(segment)
            if child is None:
                child = TypeNode()
                node.fields[segment] = child
            node = child
            if required:
                node.required = True

        return node

    def nest_iterable(self, path: str, binding: str) -> TypeNode:
        """Open a loop (or iterable check) over ``path``.

        Records ``path``, creates its element subtree on first use, and when
        ``binding`` is non-empty aliases it to that subtree until the frame
        is closed, shadowing any top-level field of the same name.

        Returns:
            The element subtree.

        Raises:
            TemplateSemanticError: ``binding`` contains a dot
            TemplateStructureError: MAX_DEPTH blocks are already open
        """
        if "." in binding:
            raise TemplateSemanticError(f"loop binding {binding!r} can't contain '.'")

        node = self.record(path)
        if node.element is None:
            node.element = TypeNode()
        element = node.element

        if not binding:
            self._push(ScopeFrame(FrameKind.NOOP))
            return element

        previous = self._root.fields.get(binding)
        self._push(
            ScopeFrame(FrameKind.RESTORE, binding=binding, alias=element, previous=previous)
        )
        self._root.fields[binding] = element
        element.local += 1
        return element

    def nest_empty(self) -> None:
        """Open a conditional body (no binding)."""
        self._push(ScopeFrame(FrameKind.NOOP))

    def enter_else(self) -> None:
        """Switch the innermost frame to its else body.

        The loop binding (if any) goes out of scope; the frame stays open
        until the matching close.

        Raises:
            TemplateStructureError: No open frame, or it already has an else
        """
        if not self._stack:
            raise TemplateStructureError("else without an open loop or conditional")
        frame = self._stack[-1]
        if frame.has_else:
            raise TemplateStructureError("more than one else in the same block")
        self._cleanup(frame)
        self._stack[-1] = ScopeFrame(FrameKind.NOOP, has_else=True)

    def pop(self) -> None:
        """Close the innermost frame.

        Raises:
            TemplateStructureError: No open frame
        """
        if not self._stack:
            raise TemplateStructureError("close without an open loop or conditional")
        self._cleanup(self._stack.pop())

    def finish(self) -> None:
        """Check that every frame was closed.

        Raises:
            TemplateStructureError: Frames remain open
        """
        if self._stack:
            raise TemplateStructureError(
                f"{len(self._stack)} loop/conditional block(s) left open at end of template"
            )

    def generate_type(self) -> str:
        """Render the recorded shape as a structural type description."""
        return _render_node(self._root, "")

    def _push(self, frame: ScopeFrame) -> None:
        if len(self._stack) >= MAX_DEPTH:
            raise TemplateStructureError(
                f"loops and conditionals nested deeper than {MAX_DEPTH} levels"
            )
        self._stack.append(frame)

    def _cleanup(self, frame: ScopeFrame) -> None:
        if frame.kind is FrameKind.NOOP:
            return

        fields = self._root.fields
        if fields.get(frame.binding) is not frame.alias:
            raise TemplateStructureError(f"scope for binding {frame.binding!r} was clobbered")
        frame.alias.local -= 1

        if frame.previous is not None:
            fields[frame.binding] = frame.previous
        else:
            del fields[frame.binding]


def _render_node(node: TypeNode, indent: str) -> str:
    inner = indent + _INDENT
    lines: list[str] = []

    for key, child in node.fields.items():
        qualifier = "Required" if child.required else "NotRequired"
        lines.append(f"{inner}{json.dumps(key)}: {qualifier}[{_render_node(child, inner)}],\n")

    if node.element is not None:
        lines.append(f"{inner}__iter__: Iterator[{_render_node(node.element, inner)}],\n")

    if not lines:
        return "Any"
    return "{\n" + "".join(lines) + indent + "}"
