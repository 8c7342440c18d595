"""Include/extend resolution (pass 1) for the kiln compiler.

``{{@ include 'path' }}`` and ``{{@ extend 'path' }}`` are the same
operation: the directive is replaced by the referenced template's text,
after include resolution has been applied to that text too. Nothing else
runs on the included text here; its blocks, code and interpolations are
handled by the later passes over the combined text. That is what lets a
child template ``extend`` a layout and then fill the layout's
``{{@ block ... }}`` slots with its own ``setblock`` declarations.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from kiln.utils.constants import INCLUDE_RE

if TYPE_CHECKING:
    from kiln.compile_context import CompileContext
    from kiln.environment.loaders import FileSystemLoader

logger = logging.getLogger(__name__)


class IncludeCompilationMixin:
    """Mixin for resolving include/extend directives.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _loader: FileSystemLoader

    def _compile_includes(self, source: str, ctx: CompileContext) -> str:
        """Replace every include/extend directive with the included text.

        Recursion goes through this same method, so includes nested in
        included files are resolved as well. Each level gets a child
        context; a path already on the include stack raises
        IncludeCycleError instead of recursing forever.
        """

        def include(match: re.Match[str]) -> str:
            name = match.group(2).strip()
            path = self._resolve_include(name, ctx)
            key = str(path) if path is not None else name
            ctx.check_include(key)
            logger.debug(
                "Including %s from %s (depth %d)",
                key,
                ctx.template_name or "<string>",
                ctx.include_depth + 1,
            )
            included, _ = self._loader.get_source(path if path is not None else name)
            return self._compile_includes(included, ctx.child_context(key))

        text = INCLUDE_RE.sub(include, source)
        # Strip markers that only formed once included text was spliced in
        return INCLUDE_RE.sub("", text)

    def _resolve_include(self, name: str, ctx: CompileContext) -> Path | None:
        """Find an included file.

        Tries the loader first (name as given, then search paths), then the
        directory of the including template.
        """
        path = self._loader.find(name)
        if path is None and ctx.include_stack and not Path(name).is_absolute():
            sibling = Path(ctx.include_stack[-1]).parent / name
            if sibling.is_file():
                path = sibling.resolve()
        return path
