"""kiln Environment — compiles, caches and renders templates.

    ```
    render(path, context)
      → loader.find(path)                  resolve the source file
      → cache.artifact_path_for(source)    deterministic artifact location
      → cache.is_stale(...)                missing / disabled / older than source
          → compiler.compile(path)         five passes + codegen   (miss)
          → cache.write(artifact, code)
      → Template(artifact code).render(context)
    ```

Freshness only looks at the template's own mtime; editing an included file
does not invalidate the templates that include it. Call ``clear_cache()``
after changing shared layouts or partials.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from kiln.cache_store import CacheStore
from kiln.compiler import Compiler
from kiln.environment.loaders import FileSystemLoader
from kiln.template import Template
from kiln.utils.constants import DEFAULT_MAX_INCLUDE_DEPTH

logger = logging.getLogger(__name__)


class Environment:
    """Central configuration and entry point for rendering templates.

    Args:
        cache_dir: Directory for compiled artifacts (created if missing)
        cache_enabled: Reuse fresh artifacts; when False every render recompiles
        search_paths: Directories tried for relative template paths, after
            the path as given
        strict: Raise on malformed directives and on dotted lookups that
            find nothing, instead of rendering them as empty
        max_include_depth: Include nesting limit
        encoding: Template file encoding

    Example:
            >>> env = Environment(cache_dir="/tmp/kiln-cache", search_paths=["templates/"])
            >>> env.render("page.html", {"page": page}, user=user)
            '<html>...'

    Trust:
        Raw code (``{{@ ... }}``) and interpolations run as ordinary Python
        with full privileges. Never point an Environment at templates from
        untrusted sources.
    """

    __slots__ = ("_cache", "_cache_enabled", "_compiler", "_loader", "_stats", "_strict")

    def __init__(
        self,
        cache_dir: str | Path,
        cache_enabled: bool = True,
        *,
        search_paths: str | Path | list[str | Path] | None = None,
        strict: bool = False,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
        encoding: str = "utf-8",
    ):
        self._loader = FileSystemLoader(search_paths, encoding=encoding)
        self._compiler = Compiler(
            self._loader,
            max_include_depth=max_include_depth,
            strict=strict,
        )
        self._cache = CacheStore(cache_dir)
        self._cache_enabled = cache_enabled
        self._strict = strict
        self._stats = {"hits": 0, "misses": 0}

    @property
    def cache_dir(self) -> Path:
        return self._cache.directory

    @property
    def cache_enabled(self) -> bool:
        return self._cache_enabled

    @cache_enabled.setter
    def cache_enabled(self, value: bool) -> None:
        self._cache_enabled = value

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def loader(self) -> FileSystemLoader:
        return self._loader

    @property
    def compiler(self) -> Compiler:
        return self._compiler

    @property
    def cache(self) -> CacheStore:
        return self._cache

    def compile(self, path: str | Path) -> Path:
        """Make sure a fresh artifact exists for ``path`` and return its path.

        Raises:
            TemplateNotFoundError: If the template can't be read
            CacheWriteError: If the artifact can't be written
        """
        source = self._loader.find(path)
        source_key: str | Path = source if source is not None else path
        artifact = self._cache.artifact_path_for(source_key)
        self._cache.ensure_directory()

        if not self._cache.is_stale(source_key, artifact, self._cache_enabled):
            self._stats["hits"] += 1
            logger.debug("Cache hit for %s", source_key)
            return artifact

        self._stats["misses"] += 1
        logger.debug("Cache miss for %s; compiling", source_key)
        code = self._compiler.compile(source_key)
        return self._cache.write(artifact, code)

    def get_template(self, path: str | Path) -> Template:
        """Compile ``path`` if needed and load the artifact as a Template."""
        artifact = self.compile(path)
        try:
            code = self._cache.read(artifact)
        except OSError as exc:
            # Removed by a concurrent clear_cache(); render from memory this time
            logger.warning("Could not read artifact %s (%s); recompiling in memory", artifact, exc)
            code = self._compiler.compile(self._loader.find(path) or path)
        return Template(code, name=str(path), filename=str(artifact), strict=self._strict)

    def render(self, path: str | Path, context: dict[str, Any] | None = None, /, **kwargs: Any) -> str:
        """Render a template file with a data context.

        Raises:
            TemplateNotFoundError: If the template can't be read
            CacheWriteError: If the artifact can't be written
            TemplateExecutionError: If the compiled template raises
        """
        return self.get_template(path).render(context or {}, **kwargs)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile template text without touching the cache."""
        code = self._compiler.compile_string(source, name)
        return Template(code, name=name, strict=self._strict)

    def clear_cache(self) -> int:
        """Delete all compiled artifacts; the next render of each template recompiles."""
        removed = self._cache.clear()
        logger.debug("Cleared template cache (%d artifacts)", removed)
        return removed

    def cache_info(self) -> dict[str, Any]:
        """Hit/miss counters for this Environment plus on-disk cache stats.

        Every miss is one compile. Example:
            >>> env.cache_info()
            {'hits': 3, 'misses': 1, 'file_count': 1, 'total_bytes': 412, ...}
        """
        return {
            **self._stats,
            **self._cache.stats(),
            "cache_dir": str(self._cache.directory),
            "cache_enabled": self._cache_enabled,
        }
