"""Tests for BlockRegistry and CompileContext."""

from __future__ import annotations

import pytest

from kiln import BlockRegistry, CompileContext, ErrorCode, IncludeCycleError


class TestBlockRegistry:
    """Dict-like block storage."""

    def test_get_unknown(self) -> None:
        registry = BlockRegistry()
        assert registry.get("nope") is None
        assert registry.get("nope", "") == ""
        assert not registry.has("nope")

    def test_set_and_get(self) -> None:
        registry = BlockRegistry()
        registry.set("title", "Docs")
        assert registry.get("title") == "Docs"
        assert registry["title"] == "Docs"
        assert "title" in registry
        assert len(registry) == 1

    def test_set_overwrites(self) -> None:
        registry = BlockRegistry({"title": "a"})
        registry.set("title", "b")
        assert registry["title"] == "b"
        assert len(registry) == 1

    def test_iteration_in_declaration_order(self) -> None:
        registry = BlockRegistry()
        for name in ("b", "a", "c"):
            registry.set(name, name.upper())
        assert list(registry) == [("b", "B"), ("a", "A"), ("c", "C")]
        assert registry.names() == ["b", "a", "c"]

    def test_iteration_is_a_snapshot(self) -> None:
        registry = BlockRegistry({"a": "1"})
        for name, _ in registry:
            registry.set(name + "x", "2")
        assert registry.names() == ["a", "ax"]

    def test_copy_is_independent(self) -> None:
        registry = BlockRegistry({"a": "1"})
        snapshot = registry.copy()
        registry.set("b", "2")
        assert snapshot == {"a": "1"}

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            BlockRegistry()["nope"]

    def test_repr(self) -> None:
        assert repr(BlockRegistry({"a": "1"})) == "BlockRegistry(['a'])"


class TestCompileContext:
    """Include stack bookkeeping."""

    def test_defaults(self) -> None:
        ctx = CompileContext()
        assert isinstance(ctx.registry, BlockRegistry)
        assert ctx.include_depth == 0
        assert ctx.strict is False

    def test_child_shares_registry(self) -> None:
        ctx = CompileContext("a.html", include_stack=["a.html"])
        child = ctx.child_context("b.html")
        child.registry.set("x", "1")
        assert ctx.registry.get("x") == "1"
        assert child.include_stack == ["a.html", "b.html"]
        assert child.include_depth == 1
        assert child.template_name == "b.html"

    def test_siblings_do_not_share_stack(self) -> None:
        ctx = CompileContext("a.html", include_stack=["a.html"])
        ctx.child_context("b.html")
        assert ctx.include_stack == ["a.html"]

    def test_cycle(self) -> None:
        ctx = CompileContext("b.html", include_stack=["a.html", "b.html"])
        with pytest.raises(IncludeCycleError) as exc_info:
            ctx.check_include("a.html")
        assert exc_info.value.include_stack == ["a.html", "b.html"]

    def test_depth_limit(self) -> None:
        ctx = CompileContext(include_stack=["a", "b", "c"], max_include_depth=2)
        with pytest.raises(IncludeCycleError) as exc_info:
            ctx.check_include("d")
        assert exc_info.value.code is ErrorCode.INCLUDE_DEPTH
        assert exc_info.value.max_depth == 2

    def test_allowed_include(self) -> None:
        ctx = CompileContext(include_stack=["a"], max_include_depth=2)
        ctx.check_include("b")
