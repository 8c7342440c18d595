"""Block inheritance (passes 2 and 3) for the kiln compiler.

Pass 2 pulls ``{{@ setblock NAME }} ... {{@ endsetblock }}`` declarations
out of the text and records them in the compile's BlockRegistry. Pass 3
replaces ``{{@ block NAME }}`` references with the recorded content.

Declarations are applied in source order. A declaration that contains
``{{@ parent }}`` chains onto what the name held before; one without it
replaces it:

    ```
    {{@ setblock title }}Docs{{@ endsetblock }}
    {{@ setblock title }}{{@ parent }} | API{{@ endsetblock }}
    <title>{{@ block title }}</title>          →  <title>Docs | API</title>
    ```

Declarations don't nest: the first ``endsetblock`` closes the nearest
``setblock`` before it.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from kiln.environment.exceptions import TemplateSyntaxError, line_of
from kiln.utils.constants import BLOCK_REF_RE, PARENT_RE, SETBLOCK_MARKER_RE, SETBLOCK_RE

if TYPE_CHECKING:
    from kiln.compile_context import CompileContext

logger = logging.getLogger(__name__)


def block_ref_pattern(name: str) -> re.Pattern[str]:
    """Pattern matching ``{{@ block NAME }}``; the keyword ignores case, NAME does not."""
    return re.compile(r"\{\{@\s*(?i:block)\s+" + re.escape(name) + r"\s*\}\}")


class BlockCompilationMixin:
    """Mixin for extracting block declarations and substituting references."""

    def _compile_setblocks(self, text: str, ctx: CompileContext) -> str:
        """Record every setblock declaration and remove it from the text."""
        registry = ctx.registry

        def declare(match: re.Match[str]) -> str:
            name, body = match.group(1), match.group(2)
            current = registry.get(name)
            if current is None:
                current = ""
                registry.set(name, current)
            if PARENT_RE.search(body):
                # Callable replacement: block content is literal, not a template
                registry.set(name, PARENT_RE.sub(lambda _: current, body))
            else:
                registry.set(name, body)
            logger.debug("Declared block %r in %s", name, ctx.template_name or "<string>")
            return ""

        text = SETBLOCK_RE.sub(declare, text)
        if ctx.strict:
            leftover = SETBLOCK_MARKER_RE.search(text)
            if leftover:
                raise TemplateSyntaxError(
                    "Unmatched setblock/endsetblock directive",
                    lineno=line_of(text, leftover.start()),
                    name=ctx.template_name,
                    source=text,
                )
        return text

    def _compile_block_refs(self, text: str, ctx: CompileContext) -> str:
        """Substitute block references; unknown names resolve to empty text."""
        for name, content in ctx.registry:
            text = block_ref_pattern(name).sub(lambda _, content=content: content, text)
        if ctx.strict:
            unknown = BLOCK_REF_RE.search(text)
            if unknown:
                raise TemplateSyntaxError(
                    f"Unknown block '{unknown.group(1)}'",
                    lineno=line_of(text, unknown.start()),
                    name=ctx.template_name,
                    source=text,
                )
        return BLOCK_REF_RE.sub("", text)
