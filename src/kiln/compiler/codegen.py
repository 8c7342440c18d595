"""Artifact assembly: marked template text → Python module source.

After passes 4 and 5, the text is literal output interleaved with
statements wrapped in STMT_OPEN/STMT_CLOSE. Literal spans become
``_write('...')`` calls; statements are emitted verbatim.

Python needs indentation where a template only has delimiters, so raw
code follows a few rules (the same ones bottle-style templates use):

    - a fragment whose last line ends with ``:`` opens a suite
    - ``{{@ end }}`` (also ``endfor``, ``endif``, ...) closes it
    - ``elif``/``else``/``except``/``finally`` close and reopen a suite

    ```
    <ul>{{@ for item in items: }}<li>{{ item.title }}</li>{{@ end }}</ul>
    ```
    becomes
    ```
    _write('<ul>')
    for item in items:
        pass
        _write('<li>')
        _echo(_getattr(item, 'title'))
        _write('</li>')
    _write('</ul>')
    ```

An ``end`` with no open suite is emitted as written, and fails when the
artifact runs, like any other malformed raw code.
"""

from __future__ import annotations

import io
import re
import textwrap
import tokenize

from kiln.utils.constants import (
    STMT_RE,
    SUITE_CONTINUE_KEYWORDS,
    SUITE_END_RE,
    WRITE_NAME,
)

_INDENT = "    "
_FIRST_WORD_RE = re.compile(r"[A-Za-z_]\w*")
_NON_CODE_TOKENS = frozenset(
    {tokenize.COMMENT, tokenize.NL, tokenize.NEWLINE, tokenize.ENDMARKER, tokenize.INDENT, tokenize.DEDENT},
)


class CodeBuilder:
    """Indentation-aware line emitter for generated artifacts."""

    __slots__ = ("_indent", "_lines")

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._indent = 0

    @property
    def depth(self) -> int:
        return self._indent

    def comment(self, text: str) -> None:
        self._line(f"# {text}")

    def literal(self, text: str) -> None:
        if text:
            self._line(f"{WRITE_NAME}({text!r})")

    def statement(self, code: str) -> None:
        lines = _normalize(code)
        if not lines:
            return
        head = lines[0].strip()
        if self._indent and len(lines) == 1 and SUITE_END_RE.fullmatch(head):
            self._indent -= 1
            return
        word = _FIRST_WORD_RE.match(head)
        if self._indent and word and word.group(0) in SUITE_CONTINUE_KEYWORDS:
            self._indent -= 1
        for line in lines:
            self._line(line)
        if _opens_suite(lines[-1]):
            self._indent += 1
            # Keeps suites valid when the template puts nothing in them
            self._line("pass")

    def source(self) -> str:
        return "\n".join(self._lines) + "\n"

    def _line(self, code: str) -> None:
        self._lines.append(_INDENT * self._indent + code if code.strip() else "")


def _normalize(code: str) -> list[str]:
    """Split a raw-code fragment into lines with template indentation removed.

    The first line of a fragment starts right after ``{{@``, so it carries
    no indentation; any further lines are dedented on their own and, under
    a line ending with ``:``, indented one level.
    """
    lines = code.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        return []
    if len(lines) > 1 and not lines[0][:1].isspace():
        rest = textwrap.dedent("\n".join(lines[1:])).splitlines()
        if _opens_suite(lines[0]):
            rest = [_INDENT + line if line.strip() else line for line in rest]
        return [lines[0], *rest]
    return textwrap.dedent("\n".join(lines)).splitlines()


def _opens_suite(line: str) -> bool:
    """True if the line's last code token is a colon; comments don't count."""
    significant = ""
    try:
        for token in tokenize.generate_tokens(io.StringIO(line.strip()).readline):
            if token.type not in _NON_CODE_TOKENS:
                significant = token.string
    except (tokenize.TokenError, SyntaxError):
        # Unbalanced brackets or strings; the artifact fails to compile anyway
        return line.rstrip().endswith(":")
    return significant == ":"


def assemble(text: str, name: str | None = None) -> str:
    """Build the artifact module source from marked text.

    Args:
        text: Output of pass 5
        name: Template path, recorded in the header comment
    """
    builder = CodeBuilder()
    builder.comment(f"Compiled by kiln from {name or '<string>'!r}")
    builder.comment("Rebuilt automatically when the source is newer; do not edit.")
    for index, part in enumerate(STMT_RE.split(text)):
        if index % 2:
            builder.statement(part)
        else:
            builder.literal(part)
    return builder.source()
