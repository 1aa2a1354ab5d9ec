"""Code generator: folds parts into one Python expression plus a type description.

The generator drives the scanner to the end of the source, then walks the
coalesced parts left to right. Each part appends a fragment of expression
text and updates the TypeScope in lockstep, so a path is always resolved
against the loop bindings open at that point.

Expression shape:
    ''.join(('<p>', render_body(lookup(context, 'name')), '</p>', ))

Loop and conditional bodies become nested ``''.join(...)`` calls inside
lambdas handed to the runtime helpers:

    {{~show}}A{{|}}B{{<}}
    -> if_check(lookup(context, 'show'), lambda: ''.join(('A', )),
                lambda: ''.join(('B', ))),

Generated loop variables are ``_`` plus an encoding of the binding name;
the context parameter and runtime helpers never start with ``_``, so they
cannot collide.

Thread Safety:
CodeGenerator instances are single-use and local to one compilation.
``compile_template`` is safe to call concurrently.

"""

from __future__ import annotations

import keyword
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from hcompile.config import CompileConfig, get_compile_config
from hcompile.errors import TemplateSemanticError
from hcompile.parts import (
    AttrBooleanPart,
    AttrPart,
    AttrRenderPart,
    ClosePart,
    CommentPart,
    ConditionalPart,
    ElsePart,
    HtmlPart,
    LoopPart,
    Part,
    RawPart,
)
from hcompile.runtime import RUNTIME_NAMESPACE
from hcompile.scanner import Scanner
from hcompile.scope import TypeScope
from hcompile.utils.logger import get_logger
from hcompile.utils.stringbuilder import StringBuilder

logger = get_logger(__name__)

_PATH_LEAD_RE = re.compile(r"[A-Za-z$_]")
_PATH_RE = re.compile(r"[A-Za-z$_][\w$]*(?:\.[\w$]+)*", re.ASCII)
_BINDING_RE = re.compile(r"[A-Za-z$_][\w$]*", re.ASCII)

_BODY_OPEN = "''.join(("
_BODY_CLOSE = "))"


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """Result of compiling one template.

    Attributes:
        expression: Python expression rendering the template; reads the
            context from ``context_name`` and the runtime helpers by name
        type_description: Structural description of the context it reads
        any_required: Whether any context path is required
        context_name: Name the expression reads the context from
    """

    expression: str
    type_description: str
    any_required: bool
    context_name: str = "context"

    def to_function(self) -> Callable[..., str]:
        """Build a ``render(context=None) -> str`` callable.

        Example:
            >>> render = compile_template("Hi {{name}}").to_function()
            >>> render({"name": "<Ann>"})
            'Hi &lt;Ann&gt;'
        """
        source = f"lambda {self.context_name}=None: {self.expression}"
        code = compile(source, "<hcompile>", "eval")
        return eval(code, {"__builtins__": {}, **RUNTIME_NAMESPACE})  # noqa: S307


def local_variable(binding: str) -> str:
    """Python variable name for a loop binding.

    Underscores are doubled before ``$`` becomes ``_d``, so distinct
    bindings never map to the same variable.

    Example:
        >>> local_variable("item"), local_variable("$x"), local_variable("_")
        ('_item', '__dx', '___')
    """
    return "_" + binding.replace("_", "__").replace("$", "_d")


def check_context_name(name: str) -> str:
    """Validate the context parameter name.

    Raises:
        ValueError: Not a plain identifier, a keyword, starts with ``_``,
            or shadows a runtime helper
    """
    if not name.isidentifier() or keyword.iskeyword(name) or name.startswith("_"):
        raise ValueError(f"context name {name!r} must be an identifier not starting with '_'")
    if name in RUNTIME_NAMESPACE:
        raise ValueError(f"context name {name!r} shadows the runtime helper of that name")
    return name


class CodeGenerator:
    """Folds a part sequence into expression text and a TypeScope.

    Usage:
            >>> gen = CodeGenerator()
            >>> gen.fold([RawPart("Hi "), HtmlPart("name")])
            >>> gen.expression
            "''.join(('Hi ', render_body(lookup(context, 'name')), ))"

    """

    __slots__ = ("_context_name", "_scope", "_out", "_expression")

    def __init__(self, context_name: str = "context") -> None:
        self._context_name = check_context_name(context_name)
        self._scope = TypeScope()
        self._out = StringBuilder()
        self._expression: str | None = None

    @property
    def scope(self) -> TypeScope:
        return self._scope

    @property
    def expression(self) -> str:
        if self._expression is None:
            raise RuntimeError("fold() has not been called")
        return self._expression

    def fold(self, parts: Sequence[Part]) -> None:
        """Emit every part and close the root expression.

        Raises:
            TemplateSemanticError: Invalid path or binding
            TemplateStructureError: Unbalanced else/close, or blocks left open
        """
        self._out.append(_BODY_OPEN)
        for part in parts:
            self._emit(part)
        self._scope.finish()
        self._out.append(_BODY_CLOSE)
        self._expression = self._out.build()

    # =========================================================================
    # Part emission
    # =========================================================================

    def _emit(self, part: Part) -> None:
        """Append the fragment for one part."""
        match part:
            case RawPart():
                self._piece(repr(part.text))
            case HtmlPart():
                self._piece(f"render_body({self._reference(part.path)})")
            case CommentPart():
                self._piece(f"if_defined({self._reference(part.path)})")
            case AttrBooleanPart():
                self._emit_attr_boolean(part)
            case AttrRenderPart():
                self._emit_attr_render(part)
            case AttrPart():
                self._emit_attr(part)
            case ConditionalPart():
                self._emit_conditional(part)
            case LoopPart():
                self._emit_loop(part)
            case ElsePart():
                self._scope.enter_else()
                self._out.append(f"{_BODY_CLOSE}, lambda: {_BODY_OPEN}")
            case ClosePart():
                self._scope.pop()
                self._out.append(f"{_BODY_CLOSE}), ")
            case _:
                raise TypeError(f"cannot generate code for {type(part).__name__}")

    def _emit_attr_boolean(self, part: AttrBooleanPart) -> None:
        value = self._reference(part.path)
        self._piece(f"if_check({value}, lambda: {' ' + part.attr!r})")

    def _emit_attr_render(self, part: AttrRenderPart) -> None:
        value = self._reference(part.path)
        prefix = f' {part.attr}="'
        self._piece(f"if_defined({value}, lambda v: {prefix!r} + v + '\"')")

    def _emit_attr(self, part: AttrPart) -> None:
        segments = list(part.segments)
        segments[0] = '"' + segments[0]
        segments[-1] = segments[-1] + '"'

        for index, segment in enumerate(segments):
            if index % 2 == 0:
                if segment:
                    self._piece(repr(segment))
                continue
            # A composite value always renders, so everything it reads is required
            self._piece(f"if_defined({self._reference(segment, required=True)})")

    def _emit_conditional(self, part: ConditionalPart) -> None:
        value = self._reference(part.path)
        if part.iter_check:
            value = f"is_nonempty({value})"
            self._scope.nest_iterable(part.path, "")
        else:
            self._scope.nest_empty()
        if part.invert:
            value = f"not {value}"
        self._out.append(f"if_check({value}, lambda: {_BODY_OPEN}")

    def _emit_loop(self, part: LoopPart) -> None:
        # The iterable resolves in the enclosing scope, before the binding exists
        value = self._reference(part.path)
        variable = self._check_binding(part.binding)
        self._scope.nest_iterable(part.path, part.binding)
        self._out.append(f"loop({value}, lambda {variable}: {_BODY_OPEN}")

    # =========================================================================
    # Paths and bindings
    # =========================================================================

    def _piece(self, fragment: str) -> None:
        self._out.append(fragment)
        self._out.append(", ")

    def _reference(self, path: str, *, required: bool = False) -> str:
        """Validate and record ``path``; return the expression reading it."""
        check_path(path)
        head, *rest = path.split(".")

        if self._scope.is_local(head):
            root = local_variable(head)
        else:
            root = self._context_name
            rest = [head, *rest]

        self._scope.record(path, required)

        if not rest:
            return root
        return f"lookup({root}, {', '.join(repr(segment) for segment in rest)})"

    def _check_binding(self, binding: str) -> str:
        if "." in binding:
            raise TemplateSemanticError(f"loop binding {binding!r} can't contain '.'")
        if not _BINDING_RE.fullmatch(binding):
            raise TemplateSemanticError(
                f"invalid loop binding {binding!r}: must start with a letter, '$' or '_' "
                "and contain only word characters and '$'"
            )
        if binding == self._context_name:
            raise TemplateSemanticError(
                f"loop binding {binding!r} collides with the context name"
            )
        variable = local_variable(binding)
        if not variable.isidentifier():
            raise TemplateSemanticError(f"loop binding {binding!r} is not a valid identifier")
        return variable


def check_path(path: str) -> str:
    """Validate a property path such as ``user.name`` or ``rows.0.$id``.

    Raises:
        TemplateSemanticError: Empty path, bad first character, a character
            outside word characters, ``.`` and ``$``, or an empty segment
    """
    if not _PATH_LEAD_RE.match(path):
        raise TemplateSemanticError(
            f"invalid path {path!r}: must start with a letter, '$' or '_'"
        )
    if not _PATH_RE.fullmatch(path):
        raise TemplateSemanticError(
            f"invalid path {path!r}: only word characters, '.' and '$' are allowed "
            "and segments can't be empty"
        )
    return path


def compile_template(
    source: str,
    *,
    config: CompileConfig | None = None,
) -> CompiledTemplate:
    """Compile template source into an expression and a type description.

    Args:
        source: Template source
        config: Compile options (uses the current context config if None)

    Structured ``<hc:...>`` tags are resolved by default. Pass a config with
    ``tag_resolver=NullTagResolver()`` to keep such markup as literal text.

    Returns:
        CompiledTemplate with the expression and type description

    Raises:
        CompileError: The source can't be compiled (see hcompile.errors)
        TagDirectiveError: A structured directive tag is misused

    Example:
        >>> compiled = compile_template("{{>items x}}{{x.label}}{{<}}")
        >>> compiled.expression
        "''.join((loop(lookup(context, 'items'), lambda _x: ''.join((render_body(lookup(_x, 'label')), ))), ))"

    """
    if config is None:
        config = get_compile_config()

    tag_resolver = config.tag_resolver
    if tag_resolver is None:
        from hcompile.tags.resolver import NamespacedTagResolver

        tag_resolver = NamespacedTagResolver()

    scanner = Scanner(source, tag_resolver=tag_resolver, source_file=config.source_file)
    for _ in scanner.scan():
        pass
    parts = scanner.parts()

    generator = CodeGenerator(config.context_name)
    generator.fold(parts)

    compiled = CompiledTemplate(
        expression=generator.expression,
        type_description=generator.scope.generate_type(),
        any_required=generator.scope.any_required,
        context_name=config.context_name,
    )
    logger.debug(
        "Compiled %s: %d parts, %d chars, any_required=%s",
        config.source_file or "<string>",
        len(parts),
        len(compiled.expression),
        compiled.any_required,
    )
    return compiled


__all__ = [
    "CodeGenerator",
    "CompiledTemplate",
    "check_context_name",
    "check_path",
    "compile_template",
    "local_variable",
]
