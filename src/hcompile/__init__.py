"""
hcompile: HTML Template Compiler for Python

Compiles HTML-flavored templates into a single Python expression plus a
structural description of the context the template reads. No runtime
dependencies.

Quick Start:
    >>> from hcompile import compile_template
    >>> compiled = compile_template('<a href="{{url}}">{{~show}}Hi {{name}}{{|}}Nothing{{<}}</a>')
    >>> render = compiled.to_function()
    >>> render({"url": "/me", "show": True, "name": "Ann"})
    '<a href="/me">Hi Ann</a>'
    >>> print(compiled.type_description)
    {
        "url": NotRequired[Any],
        "show": NotRequired[Any],
        "name": NotRequired[Any],
    }

Template Syntax:
    {{path}}                 escaped value (None renders nothing)
    {{~path}} ... {{<}}      conditional; {{~!path}} inverts
    {{>path item}} ... {{<}} loop, binding defaults to "_"
    {{|}}                    else branch of a loop or conditional
    attr="{{path}}"          attribute omitted when the value is None
    ?attr="{{path}}"         attribute name emitted when truthy
    :attr                    shorthand for attr="{{attr}}"

Structured Tags:
    <hc:loop iter="items" v="item">...<hc:else/>...</hc:loop>
    <hc:if i="user">...</hc:if>

Command Line:
    hcompile templates/ -o templates.py
"""

from hcompile.codegen import CodeGenerator, CompiledTemplate, compile_template
from hcompile.config import (
    CompileConfig,
    compile_config_context,
    get_compile_config,
    reset_compile_config,
    set_compile_config,
)
from hcompile.errors import (
    CompileError,
    DuplicateTemplateError,
    HCompileError,
    TagDirectiveError,
    TemplateSemanticError,
    TemplateStructureError,
    TemplateSyntaxError,
    UnknownDirectiveError,
)
from hcompile.location import SourceLocation
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
from hcompile.runtime import Unsafe, escape, is_unsafe, unsafe
from hcompile.scanner import Scanner, ScanKind, TagDef
from hcompile.scope import TypeNode, TypeScope
from hcompile.tags import NamespacedTagResolver, NullTagResolver, TagResolver

__version__ = "0.1.0"


def render(source: str, context: object = None, *, config: CompileConfig | None = None) -> str:
    """Compile ``source`` and render it once with ``context``.

    Convenience for one-off rendering; compile once with
    ``compile_template`` and reuse ``to_function()`` for repeated use.

    Example:
        >>> render("{{>items}}<li>{{_}}</li>{{<}}", {"items": ["a", "<b>"]})
        '<li>a</li><li>&lt;b&gt;</li>'
    """
    return compile_template(source, config=config).to_function()(context)


__all__ = [
    "AttrBooleanPart",
    "AttrPart",
    "AttrRenderPart",
    "ClosePart",
    "CodeGenerator",
    "CommentPart",
    "CompileConfig",
    "CompileError",
    "CompiledTemplate",
    "ConditionalPart",
    "DuplicateTemplateError",
    "ElsePart",
    "HCompileError",
    "HtmlPart",
    "LoopPart",
    "NamespacedTagResolver",
    "NullTagResolver",
    "Part",
    "RawPart",
    "ScanKind",
    "Scanner",
    "SourceLocation",
    "TagDef",
    "TagDirectiveError",
    "TagResolver",
    "TemplateSemanticError",
    "TemplateStructureError",
    "TemplateSyntaxError",
    "TypeNode",
    "TypeScope",
    "UnknownDirectiveError",
    "Unsafe",
    "__version__",
    "compile_config_context",
    "compile_template",
    "escape",
    "get_compile_config",
    "is_unsafe",
    "render",
    "reset_compile_config",
    "set_compile_config",
    "unsafe",
]
