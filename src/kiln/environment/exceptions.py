"""Exceptions for the kiln template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError      # Source path cannot be read
├── TemplateSyntaxError        # Strict-mode directive diagnostics
├── IncludeCycleError          # Cyclic or too-deep include chain
├── CacheWriteError            # Compiled artifact cannot be persisted
└── TemplateRuntimeError       # Render-time error with location
    └── TemplateExecutionError # Generated code failed to compile or run
        └── UndefinedError     # Strict dotted lookup found nothing

Execution errors point at the compiled artifact, since that is the code
that actually ran:

    ```
    KL-RUN-002: NameError: name 'usr' is not defined
      Location: /tmp/cache/_srv_views_page.html.3f9a0c1d2b4e5f60.py:7
       |
      6 | _write('<h1>')
    > 7 | _echo(usr)
      8 | _write('</h1>')
       |
      Hint: Check the expression in the template that produced this line
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from kiln.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for kiln errors.

    Format: KL-{CATEGORY}-{NUMBER}
    Categories: TPL (template loading/compiling), CCH (cache), RUN (runtime)
    """

    # Template loading and compiling (KL-TPL-xxx)
    TEMPLATE_NOT_FOUND = "KL-TPL-001"
    SYNTAX_ERROR = "KL-TPL-002"
    INCLUDE_CYCLE = "KL-TPL-003"
    INCLUDE_DEPTH = "KL-TPL-004"

    # Cache store (KL-CCH-xxx)
    CACHE_WRITE = "KL-CCH-001"

    # Runtime (KL-RUN-xxx)
    RUNTIME_ERROR = "KL-RUN-001"
    EXECUTION_ERROR = "KL-RUN-002"
    UNDEFINED_ATTRIBUTE = "KL-RUN-003"

    @property
    def category(self) -> str:
        """Error category (e.g., 'template', 'cache', 'runtime')."""
        prefix = self.value.split("-")[1]
        return {
            "TPL": "template",
            "CCH": "cache",
            "RUN": "runtime",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Lines of source around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
) -> SourceSnippet:
    """Build a SourceSnippet from source text.

    Args:
        source: Full source text (template or compiled artifact).
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line)


def line_of(text: str, offset: int) -> int:
    """1-based line number of a character offset in text."""
    return text.count("\n", 0, offset) + 1


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TemplateError(Exception):
    """Base exception for all kiln errors.

        >>> try:
        ...     env.render("page.html", user=user)
        ... except TemplateError as e:
        ...     log.error(e.format_compact())

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a short terminal diagnostic without traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = terminal.format_error_header(self.code.value, header)
        return header


class TemplateNotFoundError(TemplateError):
    """Template source could not be read.

    Example:
            >>> env.render("missing.html")
        TemplateNotFoundError: Template 'missing.html' not found
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Malformed directive found while compiling in strict mode.

    The default (lenient) compiler never raises this: unmatched markers are
    dropped or left as text. ``lineno`` refers to the text the failing pass
    was working on, which includes inlined files.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
        header = f"Syntax Error: {self.message}\n  --> {location}"
        if self.source and self.lineno:
            snippet = build_source_snippet(self.source, self.lineno, context_lines=0)
            return f"{header}\n{snippet.format()}"
        return header


class IncludeCycleError(TemplateError):
    """Include chain revisits a template or grows past the depth limit.

    Attributes:
        template_name: The include that would have closed the cycle.
        include_stack: Templates being included, outermost first.
    """

    code: ErrorCode | None = ErrorCode.INCLUDE_CYCLE

    def __init__(
        self,
        template_name: str,
        include_stack: list[str],
        *,
        max_depth: int | None = None,
    ):
        self.template_name = template_name
        self.include_stack = list(include_stack)
        self.max_depth = max_depth
        if max_depth is not None:
            self.code = ErrorCode.INCLUDE_DEPTH
            message = (
                f"Maximum include depth exceeded ({max_depth}) "
                f"when including '{template_name}'"
            )
        else:
            chain = " → ".join([*self.include_stack, template_name])
            message = f"Include cycle detected: {chain}"
        super().__init__(message)


class CacheWriteError(TemplateError):
    """Compiled artifact could not be written to the cache directory."""

    code: ErrorCode | None = ErrorCode.CACHE_WRITE

    def __init__(self, path: Any, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write compiled template to {path}: {reason}")


class TemplateRuntimeError(TemplateError):
    """Render-time error with location context.

    Output Format:
            ```
            Runtime Error: ZeroDivisionError: division by zero
              Location: /tmp/cache/page.html.0123456789abcdef.py:4
               |
            > 4 | _echo(total / count)
               |
              Suggestion: Check the expression in the template that produced this line
            ```

    Attributes:
        message: Error description
        template_name: Name (path) of the template being rendered
        filename: Compiled artifact the failing code came from
        lineno: Line number in the compiled artifact
        suggestion: Actionable fix suggestion
        source_snippet: Artifact lines around ``lineno``
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        filename: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.filename = filename
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        super().__init__(self._format_message())

    def _location(self) -> str | None:
        loc = self.filename or self.template_name
        if loc is None and self.lineno is None:
            return None
        loc = loc or "<template>"
        if self.lineno:
            loc += f":{self.lineno}"
        return loc

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]
        loc = self._location()
        if loc:
            parts.append(f"  Location: {terminal.location(loc)}")
        if self.template_name and self.filename:
            parts.append(f"  Template: {self.template_name}")
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.suggestion:
            parts.append(f"\n  {terminal.hint('Suggestion:')} {self.suggestion}")
        return "\n".join(parts)

    def format_compact(self) -> str:
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message)
        ]
        loc = self._location()
        if loc:
            parts.append(f"  Location: {terminal.location(loc)}")
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class TemplateExecutionError(TemplateRuntimeError):
    """Compiled template code raised while being compiled or executed.

    Raw-code fragments run unescaped, so a typo in ``{{@ ... }}`` surfaces
    here as a wrapped SyntaxError. The original exception is chained as
    ``__cause__``.
    """

    code: ErrorCode | None = ErrorCode.EXECUTION_ERROR


class UndefinedError(TemplateExecutionError):
    """Dotted lookup found neither an attribute nor a key (strict mode only).

    Example:
            >>> env = Environment(cache_dir=tmp, strict=True)
            >>> env.render("page.html", user={"name": "Ada"})  # {{ user.email }}
        UndefinedError: 'dict' object has no attribute or key 'email'
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_ATTRIBUTE

    def __init__(self, attribute: str, owner_type: str, **kwargs: Any):
        self.attribute = attribute
        self.owner_type = owner_type
        kwargs.setdefault(
            "suggestion",
            f"Pass a value with '{attribute}', or disable strict mode to render it as empty",
        )
        super().__init__(
            f"'{owner_type}' object has no attribute or key '{attribute}'",
            **kwargs,
        )

    def located(
        self,
        *,
        template_name: str | None,
        filename: str | None,
        lineno: int | None,
        source_snippet: SourceSnippet | None,
    ) -> UndefinedError:
        """Copy of this error carrying the artifact location."""
        return UndefinedError(
            self.attribute,
            self.owner_type,
            template_name=template_name,
            filename=filename,
            lineno=lineno,
            source_snippet=source_snippet,
        )
