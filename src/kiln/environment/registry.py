"""Block registry for template inheritance.

Maps block names to their latest resolved content. One registry lives for
one top-level compile: ``Compiler.compile()`` creates it and threads it
through the passes via ``CompileContext``, so unrelated templates never see
each other's blocks.
"""

from __future__ import annotations

from collections.abc import Iterator


class BlockRegistry:
    """Dict-like store of block name → content, in declaration order.

    Supports:
        - registry.set('content', '<p>Hi</p>')
        - registry.get('content')
        - 'content' in registry
        - for name, content in registry: ...

    There is no removal: a later ``setblock`` for the same name overwrites
    or chains onto the stored content.
    """

    __slots__ = ("_blocks",)

    def __init__(self, blocks: dict[str, str] | None = None):
        self._blocks: dict[str, str] = dict(blocks) if blocks else {}

    def get(self, name: str, default: str | None = None) -> str | None:
        return self._blocks.get(name, default)

    def set(self, name: str, content: str) -> None:
        self._blocks[name] = content

    def has(self, name: str) -> bool:
        return name in self._blocks

    def __contains__(self, name: object) -> bool:
        return name in self._blocks

    def __getitem__(self, name: str) -> str:
        return self._blocks[name]

    def __iter__(self) -> Iterator[tuple[str, str]]:
        # Snapshot so substitution can't observe concurrent declarations
        return iter(list(self._blocks.items()))

    def __len__(self) -> int:
        return len(self._blocks)

    def names(self) -> list[str]:
        return list(self._blocks)

    def copy(self) -> dict[str, str]:
        """Return a copy of the underlying dict."""
        return self._blocks.copy()

    def __repr__(self) -> str:
        return f"BlockRegistry({self.names()!r})"
