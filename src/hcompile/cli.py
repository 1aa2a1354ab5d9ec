"""Command-line entry point: compile a directory of templates into a Python module.

Usage:
    hcompile [DIR] [-o OUT] [--context-name NAME] [-v]

Every ``*.html`` file in DIR (default: the current directory) becomes one
function in the generated module:

    def template_user_card(context=None):
        \"\"\"Render user-card.html.

        Context:
            {...}
        \"\"\"
        return unsafe(...)

Files are processed in name order, so the output is stable. The context
parameter defaults to None only when the template reads nothing as
required.

"""

from __future__ import annotations

import argparse
import logging
import re
import sys
import textwrap
from collections.abc import Sequence
from pathlib import Path

from hcompile.codegen import CompiledTemplate, compile_template
from hcompile.config import CompileConfig
from hcompile.errors import DuplicateTemplateError, HCompileError
from hcompile.utils.logger import get_logger
from hcompile.utils.stringbuilder import StringBuilder

logger = get_logger(__name__)

_NON_WORD_RE = re.compile(r"[^0-9A-Za-z]+")
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_HEADER = """\
# Generated by hcompile from {directory}. Do not edit.

from hcompile.runtime import (
    if_check,
    if_defined,
    is_nonempty,
    lookup,
    loop,
    render_body,
    unsafe,
)
"""


def function_name(stem: str) -> str:
    """Generated function name for a template file stem.

    Example:
        >>> function_name("user-card")
        'template_user_card'
        >>> function_name("navBar")
        'template_nav_bar'

    Raises:
        ValueError: The stem has no letters or digits
    """
    words = _NON_WORD_RE.split(_CAMEL_RE.sub("_", stem))
    words = [word.lower() for word in words if word]
    if not words:
        raise ValueError(f"can't derive a function name from {stem!r}")
    return "template_" + "_".join(words)


def render_function(name: str, filename: str, compiled: CompiledTemplate) -> str:
    """Source of one generated template function."""
    # A backslash or quote in the file name must not end or alter the docstring
    filename = filename.replace("\\", "\\\\").replace('"', '\\"')
    default = "" if compiled.any_required else "=None"
    context_doc = textwrap.indent(compiled.type_description, " " * 8)
    return (
        f"\n\ndef {name}({compiled.context_name}{default}):\n"
        f'    """Render {filename}.\n'
        "\n"
        "    Context:\n"
        f"{context_doc}\n"
        '    """\n'
        f"    return unsafe({compiled.expression})\n"
    )


def discover_templates(directory: Path) -> list[Path]:
    """``*.html`` files directly inside ``directory``, sorted by name."""
    return sorted(path for path in directory.glob("*.html") if path.is_file())


def build_module(directory: Path, *, context_name: str = "context") -> str:
    """Compile every template in ``directory`` into module source.

    Raises:
        DuplicateTemplateError: Two files map to the same function name
        HCompileError: A template fails to compile
        OSError: The directory or a template can't be read
    """
    if not directory.is_dir():
        raise NotADirectoryError(f"not a directory: {directory}")

    out = StringBuilder()
    out.append(_HEADER.format(directory=directory.as_posix()))

    seen: dict[str, Path] = {}
    for path in discover_templates(directory):
        name = function_name(path.stem)
        if name in seen:
            raise DuplicateTemplateError(name, seen[name].name, path.name)
        seen[name] = path

        logger.info("Compiling %s -> %s", path.name, name)
        config = CompileConfig(context_name=context_name, source_file=path.name)
        try:
            compiled = compile_template(path.read_text(encoding="utf-8"), config=config)
        except HCompileError:
            logger.error("Failed to compile %s", path.name)
            raise
        out.append(render_function(name, path.name, compiled))

    if not seen:
        logger.warning("No *.html templates found in %s", directory)
    return out.build()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hcompile",
        description="Compile a directory of HTML templates into a Python module",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        type=Path,
        help="Directory holding *.html templates (default: current directory)",
    )
    parser.add_argument(
        "-o", "--output", type=Path, help="Write the module here instead of stdout"
    )
    parser.add_argument(
        "--context-name",
        default="context",
        help="Parameter name of the generated functions (default: context)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    try:
        module = build_module(args.directory, context_name=args.context_name)
        if args.output is None:
            sys.stdout.write(module)
        else:
            args.output.write_text(module, encoding="utf-8")
    except (HCompileError, OSError, ValueError) as exc:
        print(f"hcompile: error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
