"""Raw-code and interpolation translation (passes 4 and 5).

Pass 4 turns ``{{@ EXPR }}`` into a statement carrying EXPR verbatim.
Pass 5 turns ``{{ EXPR }}`` into ``_echo(EXPR)``, with dotted access in
EXPR rewritten so that ``user.name`` works for objects and dicts alike:

    ```
    {{ user.profile.name }}
    →  _echo(_getattr(_getattr(user, 'profile'), 'name'))
    ```

The rewrite works on the parsed expression (``ast``), so every segment of
a chain is handled in one traversal and string literals containing dots
are left alone. Expressions that don't parse are emitted unchanged and
fail when the artifact is executed.

Both passes mark their statements with STMT_OPEN/STMT_CLOSE; the codegen
step turns the marked text into a Python module.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
import re
from typing import TYPE_CHECKING

from kiln.environment.exceptions import TemplateSyntaxError, line_of
from kiln.utils.constants import (
    CODE_RE,
    ECHO_NAME,
    ECHO_RE,
    GETATTR_NAME,
    OPEN_DELIMITER,
    STMT_CLOSE,
    STMT_OPEN,
    STMT_RE,
)

if TYPE_CHECKING:
    from kiln.compile_context import CompileContext


class DotAccessRewriter(ast.NodeTransformer):
    """Replace attribute loads with ``_getattr(obj, 'name')`` calls."""

    def visit_Attribute(self, node: ast.Attribute) -> ast.AST:
        self.generic_visit(node)
        if not isinstance(node.ctx, ast.Load):
            return node
        call = ast.Call(
            func=ast.Name(id=GETATTR_NAME, ctx=ast.Load()),
            args=[node.value, ast.Constant(value=node.attr)],
            keywords=[],
        )
        return ast.copy_location(call, node)


def rewrite_dot_access(expr: str) -> str:
    """Rewrite ``a.b.c`` member access in an expression.

    Example:
        >>> rewrite_dot_access("user.name")
        "_getattr(user, 'name')"
        >>> rewrite_dot_access("'a.b' + x")
        "'a.b' + x"
    """
    try:
        # Parenthesized so multi-line expressions parse like they would inline
        tree = ast.parse(f"(\n{expr}\n)", mode="eval")
    except SyntaxError:
        return expr
    tree = ast.fix_missing_locations(DotAccessRewriter().visit(tree))
    return ast.unparse(tree)


def statement(code: str) -> str:
    return f"{STMT_OPEN}{code}{STMT_CLOSE}"


class CodeCompilationMixin:
    """Mixin for translating raw-code fragments and interpolations."""

    def _compile_code(self, text: str, ctx: CompileContext) -> str:
        """Pass 4: ``{{@ EXPR }}`` → statement with EXPR verbatim."""
        return CODE_RE.sub(lambda m: statement(m.group(1)), text)

    def _compile_echo(self, text: str, ctx: CompileContext) -> str:
        """Pass 5: ``{{ EXPR }}`` → ``_echo(EXPR)`` with dot access rewritten."""

        def echo(match: re.Match[str]) -> str:
            return statement(f"{ECHO_NAME}({rewrite_dot_access(match.group(1))})")

        text = ECHO_RE.sub(echo, text)
        if ctx.strict:
            offset = _find_in_literals(text, OPEN_DELIMITER)
            if offset is not None:
                raise TemplateSyntaxError(
                    "Unterminated '{{' delimiter",
                    lineno=line_of(text, offset),
                    name=ctx.template_name,
                    source=text,
                )
        return text


def _find_in_literals(text: str, needle: str) -> int | None:
    """Offset of ``needle`` in text outside statement markers, or None."""
    pos = 0
    for match in STMT_RE.finditer(text):
        found = text.find(needle, pos, match.start())
        if found != -1:
            return found
        pos = match.end()
    found = text.find(needle, pos)
    return found if found != -1 else None
