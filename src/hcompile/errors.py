"""Exception classes for hcompile.

Every compilation failure is fatal: the compiler never returns partial
output. Errors are grouped by the stage that detects them so callers can
tell a lexical problem from a structural or semantic one.

Hierarchy:
HCompileError
├── CompileError (optional source location)
│   ├── TemplateSyntaxError      # malformed tag terminator, unterminated {{
│   ├── TemplateStructureError   # unmatched close/else, unclosed block
│   ├── TemplateSemanticError    # bad path/binding, reserved name collision
│   └── UnknownDirectiveError    # {{?...}} with an unrecognized lead char
├── TagDirectiveError            # misconfigured structured tag (hc:loop, ...)
└── DuplicateTemplateError       # two template files map to one function name
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hcompile.location import SourceLocation


class HCompileError(Exception):
    """Base exception for all hcompile errors.

    Subclass this for specific error categories.
    """

    pass


class CompileError(HCompileError):
    """Error while compiling a template.

    Carries an optional source location, rendered as a ``file:line:col``
    prefix on the message.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
    ) -> None:
        """Initialize compile error with optional location.

        Args:
            message: Error description, naming the offending token
            location: Where the error was detected (optional)
        """
        self.message = message
        self.location = location

        prefix = f"{location} " if location is not None else ""
        super().__init__(f"{prefix}{message}")


class TemplateSyntaxError(CompileError):
    """Lexical error: the scanner could not make sense of the source."""


class TemplateStructureError(CompileError):
    """Unbalanced control flow: close/else without an open block, or a block left open."""


class TemplateSemanticError(CompileError):
    """Well-formed syntax with an invalid meaning (bad path, bad binding, reserved name)."""


class UnknownDirectiveError(CompileError):
    """An inline ``{{...}}`` expression starts with a character no directive handles."""

    def __init__(
        self,
        expression: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.expression = expression
        super().__init__(f"unrecognized directive: {{{{{expression}}}}}", location)


class TagDirectiveError(HCompileError):
    """Error when a structured directive tag is misconfigured.

    Raised for unknown names in the reserved namespace, missing or
    disallowed attributes, and misuse of closing/self-closing forms.
    """

    def __init__(
        self,
        tag_name: str,
        message: str,
        attribute: str | None = None,
    ) -> None:
        """Initialize tag directive error.

        Args:
            tag_name: Name of the offending tag (e.g., "hc:loop")
            message: Description of the problem
            attribute: Offending attribute name, if any
        """
        self.tag_name = tag_name
        self.attribute = attribute

        where = f" attribute '{attribute}'" if attribute is not None else ""
        super().__init__(f"Tag '<{tag_name}>'{where}: {message}")


class DuplicateTemplateError(HCompileError):
    """Two template files would generate the same function name."""

    def __init__(self, name: str, first: str, second: str) -> None:
        self.name = name
        self.first = first
        self.second = second
        super().__init__(f"duplicate template name {name!r}: {first} and {second}")
