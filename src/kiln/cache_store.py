"""On-disk cache of compiled templates.

Each template source maps to one artifact file (generated Python source) in
a flat cache directory. An artifact is fresh while its mtime is at least the
source's mtime; anything else triggers a rebuild.

Layout:
    ```
    cache_dir/
    ├── _srv_app_templates_base.html.9b1f0c4e7a2d3e11.py
    └── _srv_app_templates_page.html.40c2aa7e0f9b6d52.py
    ```

The readable stem is the source path with separators flattened to ``_``;
the 16-hex-digit SHA-256 digest of the exact path keeps distinct sources
apart even when their stems collide (``a_b/c`` vs ``a/b_c``) or differ only
by case on a case-insensitive filesystem.

Thread-Safety:
    ``write()`` goes through a temporary file and ``os.replace()``, so a
    concurrent reader sees either the old or the new artifact, never a
    partial one. Two processes rebuilding the same artifact both write
    equivalent content; the last one wins.

"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import suppress
from hashlib import sha256
from pathlib import Path

from kiln.environment.exceptions import CacheWriteError
from kiln.utils.constants import (
    ARTIFACT_DIGEST_LENGTH,
    ARTIFACT_MODE,
    ARTIFACT_STEM_MAX,
    ARTIFACT_SUFFIX,
    DIRECTORY_MODE,
    MISSING_MTIME,
)

logger = logging.getLogger(__name__)

_FLATTENED = str.maketrans({"/": "_", "\\": "_", ":": "_"})


def mtime(path: str | Path) -> float:
    """Modification time of ``path``, or ``MISSING_MTIME`` if it can't be read."""
    try:
        return os.stat(path).st_mtime
    except (OSError, ValueError):
        return MISSING_MTIME


def _set_mode(path: Path, mode: int) -> None:
    try:
        os.chmod(path, mode)
    except OSError as exc:
        logger.debug("Could not set mode %o on %s: %s", mode, path, exc)


class CacheStore:
    """Flat directory of compiled template artifacts.

    Attributes:
        directory: The cache directory (created on first use)

    Example:
            >>> store = CacheStore("/tmp/kiln-cache")
            >>> artifact = store.artifact_path_for("templates/page.html")
            >>> if store.is_stale("templates/page.html", artifact, cache_enabled=True):
            ...     store.write(artifact, compiler.compile("templates/page.html"))
    """

    __slots__ = ("_directory",)

    def __init__(self, directory: str | Path):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def ensure_directory(self) -> Path:
        """Create the cache directory if needed and try to make it world-writable.

        Idempotent. Failing to change permissions is logged and ignored.
        """
        directory = self._directory
        if not directory.is_dir():
            directory.mkdir(parents=True, exist_ok=True)
            logger.debug("Created cache directory %s", directory)
        _set_mode(directory, DIRECTORY_MODE)
        return directory

    def artifact_path_for(self, source: str | Path) -> Path:
        """Deterministic artifact path for a template source path.

        The source is resolved to an absolute path when it exists, so
        ``page.html`` and ``./page.html`` share one artifact.
        """
        path = Path(source)
        key = str(path.resolve()) if path.exists() else str(source)
        digest = sha256(key.encode("utf-8", "surrogatepass")).hexdigest()
        stem = key.translate(_FLATTENED)[-ARTIFACT_STEM_MAX:]
        name = f"{stem}.{digest[:ARTIFACT_DIGEST_LENGTH]}{ARTIFACT_SUFFIX}"
        return self._directory / name

    def is_stale(
        self,
        source: str | Path,
        artifact: str | Path,
        cache_enabled: bool = True,
    ) -> bool:
        """True if the artifact must be rebuilt.

        Stale when the source is missing, caching is disabled, the artifact
        is missing, or the artifact is strictly older than the source.
        """
        if not os.path.exists(source) or not cache_enabled:
            return True
        if not os.path.exists(artifact):
            return True
        return mtime(artifact) < mtime(source)

    def write(self, artifact: str | Path, text: str) -> Path:
        """Persist artifact text atomically.

        Raises:
            CacheWriteError: If the file cannot be written
        """
        artifact = Path(artifact)
        try:
            self.ensure_directory()
            fd, tmp_name = tempfile.mkstemp(
                dir=artifact.parent, prefix=".kiln-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp_name, artifact)
            except BaseException:
                with suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise CacheWriteError(artifact, exc.strerror or str(exc)) from exc
        _set_mode(artifact, ARTIFACT_MODE)
        logger.debug("Wrote artifact %s (%d chars)", artifact, len(text))
        return artifact

    def read(self, artifact: str | Path) -> str:
        return Path(artifact).read_text(encoding="utf-8")

    def clear(self) -> int:
        """Delete every artifact in the cache directory.

        Returns:
            Number of artifacts removed
        """
        directory = self.ensure_directory()
        removed = 0
        for path in directory.glob(f"*{ARTIFACT_SUFFIX}"):
            with suppress(FileNotFoundError):
                path.unlink()
                removed += 1
        logger.debug("Cleared %d artifacts from %s", removed, directory)
        return removed

    def stats(self) -> dict[str, int]:
        """Artifact count and total size in bytes."""
        file_count = 0
        total_bytes = 0
        if self._directory.is_dir():
            for path in self._directory.glob(f"*{ARTIFACT_SUFFIX}"):
                file_count += 1
                with suppress(FileNotFoundError):
                    total_bytes += path.stat().st_size
        return {"file_count": file_count, "total_bytes": total_bytes}
