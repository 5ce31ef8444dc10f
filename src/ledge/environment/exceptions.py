"""Exceptions for the Ledge template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Reference not resolvable by the loader
├── TemplateSyntaxError       # Compile-time error (lexer, tags, expressions)
└── TemplateRuntimeError      # Render-time error with template context

Every compile-time error carries an `ErrorCode` plus the filename, line and
column of the offending token or expression. A compile-time error aborts
compilation of the whole template; no partial output is ever produced.

Missing variables are not errors: `Context.resolve()` returns `UNDEFINED`
and the value renders as an empty string.

Example:
    ```
    E_MAX_ARGUMENTS: Maximum of 2 arguments are allowed for slot tag
      --> components/card.edge:4:6
       |
    >  4 | @slot('header', scope, extra)
       |       ^
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ledge.environment import terminal


class ErrorCode(Enum):
    """Searchable error codes for template errors."""

    # Compile time
    UNALLOWED_EXPRESSION = "E_UNALLOWED_EXPRESSION"
    MAX_ARGUMENTS = "E_MAX_ARGUMENTS"
    UNCLOSED_TAG = "E_UNCLOSED_TAG"
    UNEXPECTED_END = "E_UNEXPECTED_END"
    UNKNOWN_TAG = "E_UNKNOWN_TAG"
    SYNTAX_ERROR = "E_SYNTAX_ERROR"

    # Loading
    TEMPLATE_NOT_FOUND = "E_TEMPLATE_NOT_FOUND"

    # Render time
    RUNTIME_ERROR = "E_RUNTIME_ERROR"
    INCLUDE_DEPTH = "E_INCLUDE_DEPTH"


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source lines around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for the caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
        if self.column is not None:
            caret = " " * self.column + "^"
            parts.append(f"{terminal.dim_text('   |')} {terminal.colorize(caret, 'bright_red')}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None


class TemplateNotFoundError(TemplateError):
    """Template reference could not be resolved by the loader.

    Example:
        >>> env.get_template("users::missing")
        TemplateNotFoundError: Template 'users::missing' not found ...
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Compile-time error in template source.

    Raised by the lexer, by tag compilers and by expression validation.
    The message is formatted lazily so that the environment can attach
    the template source after the fact (errors raised while compiling a
    merged layout tree do not know which file's text they came from).

    Attributes:
        message: Error description
        code: ErrorCode identifying the failure kind
        filename: Template file the error belongs to
        lineno: 1-based line number
        col_offset: 0-based column
        source: Template source, for the snippet (optional)
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.SYNTAX_ERROR,
        filename: str | None = None,
        lineno: int | None = None,
        col_offset: int | None = None,
        source: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.filename = filename
        self.lineno = lineno
        self.col_offset = col_offset
        self.source = source

    @property
    def line(self) -> int | None:
        return self.lineno

    @property
    def column(self) -> int | None:
        return self.col_offset

    def __str__(self) -> str:
        location = self.filename or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"

        text = f"{self.code.value}: {self.message}\n  --> {terminal.location(location)}"
        if self.source and self.lineno:
            snippet = build_source_snippet(self.source, self.lineno, column=self.col_offset)
            text += "\n" + snippet.format()
        return text


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Output Format:
            ```
            Runtime Error: 'NoneType' object is not callable
              Location: pages/home.edge:15
               |
            > 15 | {{ user.greet() }}
               |
            ```

    Attributes:
        message: Error description
        template_name: Name of the template being rendered
        lineno: Last line marker reached before the error
        suggestion: Actionable fix suggestion
        source_snippet: Source lines around `lineno`
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {terminal.location(loc)}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.suggestion:
            parts.append(f"\n  {terminal.hint('Suggestion:')} {self.suggestion}")

        return "\n".join(parts)
