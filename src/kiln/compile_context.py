"""kiln CompileContext — per-compile state threaded through the passes.

One CompileContext is created for each top-level ``Compiler.compile()``
call and passed explicitly down the include recursion. It carries:

    - the BlockRegistry that ``setblock`` declarations write into
    - the include stack, for cycle detection and error messages
    - the include depth limit and the strict-mode flag

Nothing here is module-level, so compiles in different threads never share
blocks.

"""

from __future__ import annotations

from dataclasses import dataclass, field

from kiln.environment.exceptions import IncludeCycleError
from kiln.environment.registry import BlockRegistry
from kiln.utils.constants import DEFAULT_MAX_INCLUDE_DEPTH


@dataclass
class CompileContext:
    """State for one compile tree.

    Attributes:
        template_name: Template currently being read (for error messages)
        registry: Blocks declared so far in this compile tree
        include_stack: Resolved paths of the templates being included,
            outermost first; the current template is last
        max_include_depth: Maximum include nesting before giving up
        strict: Raise TemplateSyntaxError on malformed directives
    """

    template_name: str | None = None
    registry: BlockRegistry = field(default_factory=BlockRegistry)
    include_stack: list[str] = field(default_factory=list)
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    strict: bool = False

    @property
    def include_depth(self) -> int:
        return max(len(self.include_stack) - 1, 0)

    def check_include(self, template_name: str) -> None:
        """Refuse an include that repeats a path on the stack or is too deep.

        Raises:
            IncludeCycleError: On a cycle (A → B → A) or when the depth
                limit would be exceeded
        """
        if template_name in self.include_stack:
            raise IncludeCycleError(template_name, self.include_stack)
        if self.include_depth >= self.max_include_depth:
            raise IncludeCycleError(
                template_name, self.include_stack, max_depth=self.max_include_depth
            )

    def child_context(self, template_name: str) -> CompileContext:
        """Context for an included template.

        Shares the registry (blocks are compile-tree-wide) and extends a
        copy of the include stack, so sibling includes don't see each other.
        """
        return CompileContext(
            template_name=template_name,
            registry=self.registry,
            include_stack=[*self.include_stack, template_name],
            max_include_depth=self.max_include_depth,
            strict=self.strict,
        )
