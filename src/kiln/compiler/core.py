"""kiln Compiler Core — main Compiler class.

The Compiler rewrites template source into Python module source through
five ordered text passes. Each pass's output is the next pass's input, and
later passes rely on earlier directives being gone:

    1. includes   ``{{@ include/extend 'path' }}``  → included text
    2. setblocks  ``{{@ setblock N }}..{{@ endsetblock }}`` → registry, removed
    3. blocks     ``{{@ block N }}``                 → registry content
    4. code       ``{{@ EXPR }}``                    → statement
    5. echo       ``{{ EXPR }}``                     → ``_echo(EXPR)``

then ``codegen.assemble()`` turns the result into the artifact:

    ```python
    # Compiled by kiln from '/srv/app/templates/page.html'
    # Rebuilt automatically when the source is newer; do not edit.
    _write('<h1>')
    _echo(_getattr(page, 'title'))
    _write('</h1>\\n')
    ```

Block State:
    Each top-level ``compile()`` gets a fresh BlockRegistry (via
    CompileContext) unless the caller passes one in, so block content never
    leaks between unrelated templates.

"""

from __future__ import annotations

import logging
from pathlib import Path

from kiln.compile_context import CompileContext
from kiln.compiler.blocks import BlockCompilationMixin
from kiln.compiler.code import CodeCompilationMixin
from kiln.compiler.codegen import assemble
from kiln.compiler.includes import IncludeCompilationMixin
from kiln.environment.exceptions import TemplateSyntaxError, line_of
from kiln.environment.loaders import FileSystemLoader
from kiln.environment.registry import BlockRegistry
from kiln.utils.constants import DEFAULT_MAX_INCLUDE_DEPTH, STMT_CLOSE, STMT_OPEN

logger = logging.getLogger(__name__)

_MARKERS = {ord(STMT_OPEN): None, ord(STMT_CLOSE): None}


class Compiler(
    IncludeCompilationMixin,
    BlockCompilationMixin,
    CodeCompilationMixin,
):
    """Compile kiln templates to Python module source.

    Attributes:
        _loader: Resolves and reads template files (also for includes)
        _max_include_depth: Include nesting limit
        _strict: Raise TemplateSyntaxError on malformed directives

    Example:
            >>> compiler = Compiler(FileSystemLoader("templates/"))
            >>> code = compiler.compile("page.html")
            >>> namespace = build_namespace(buffer)
            >>> exec(code, namespace)

    """

    __slots__ = ("_loader", "_max_include_depth", "_strict")

    def __init__(
        self,
        loader: FileSystemLoader | None = None,
        *,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
        strict: bool = False,
    ):
        self._loader = loader if loader is not None else FileSystemLoader()
        self._max_include_depth = max_include_depth
        self._strict = strict

    @property
    def loader(self) -> FileSystemLoader:
        return self._loader

    def compile(self, path: str | Path, registry: BlockRegistry | None = None) -> str:
        """Compile a template file to Python source.

        Args:
            path: Template path (as given, or relative to a search path)
            registry: Block registry to use; a fresh one by default

        Raises:
            TemplateNotFoundError: If the template (or an include) can't be read
            IncludeCycleError: On cyclic or too-deep includes
            TemplateSyntaxError: On malformed directives, in strict mode
        """
        source, filename = self._loader.get_source(path)
        ctx = self._new_context(filename, registry)
        ctx.include_stack.append(filename)
        logger.debug("Compiling %s", filename)
        return self._run_passes(source, ctx)

    def compile_string(
        self,
        source: str,
        name: str | None = None,
        registry: BlockRegistry | None = None,
    ) -> str:
        """Compile in-memory template text. Includes inside it still read files."""
        ctx = self._new_context(name, registry)
        ctx.include_stack.append(name or "<string>")
        return self._run_passes(source, ctx)

    def _new_context(self, name: str | None, registry: BlockRegistry | None) -> CompileContext:
        return CompileContext(
            template_name=name,
            registry=registry if registry is not None else BlockRegistry(),
            max_include_depth=self._max_include_depth,
            strict=self._strict,
        )

    def _run_passes(self, source: str, ctx: CompileContext) -> str:
        text = self._compile_includes(source, ctx)
        text = self._strip_markers(text, ctx)
        text = self._compile_setblocks(text, ctx)
        text = self._compile_block_refs(text, ctx)
        text = self._compile_code(text, ctx)
        text = self._compile_echo(text, ctx)
        return assemble(text, ctx.template_name)

    def _strip_markers(self, text: str, ctx: CompileContext) -> str:
        """Remove statement-marker code points that appear in template text."""
        for marker in (STMT_OPEN, STMT_CLOSE):
            offset = text.find(marker)
            if offset == -1:
                continue
            if ctx.strict:
                raise TemplateSyntaxError(
                    f"Reserved character U+{ord(marker):04X} in template text",
                    lineno=line_of(text, offset),
                    name=ctx.template_name,
                )
            logger.debug("Dropping reserved U+%04X from %s", ord(marker), ctx.template_name)
        return text.translate(_MARKERS)
