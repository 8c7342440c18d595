"""Template source loading for kiln.

Templates are identified by file path. ``FileSystemLoader`` turns the path
written in ``env.render(...)`` or in an ``{{@ include '...' }}`` directive
into a readable file:

1. The path as given (absolute, or relative to the working directory).
2. Each configured search path joined with the name, in order.

First match wins:
    ```python
    loader = FileSystemLoader(["themes/custom/", "themes/default/"])
    loader.get_source("partials/nav.html")
    # themes/custom/partials/nav.html if present, else themes/default/...
    ```
"""

from __future__ import annotations

import logging
from difflib import get_close_matches
from pathlib import Path

from kiln.environment.exceptions import TemplateNotFoundError

logger = logging.getLogger(__name__)


class FileSystemLoader:
    """Resolve and read template files.

    Attributes:
        _paths: Directories tried after the name itself
        _encoding: File encoding (default: utf-8)

    Example:
            >>> loader = FileSystemLoader("templates/")
            >>> source, filename = loader.get_source("pages/about.html")
            >>> print(filename)
            '/srv/app/templates/pages/about.html'

    Raises:
        TemplateNotFoundError: If the template cannot be found or read
    """

    __slots__ = ("_encoding", "_paths")

    def __init__(
        self,
        paths: str | Path | list[str | Path] | None = None,
        encoding: str = "utf-8",
    ):
        if paths is None:
            paths = []
        elif isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding

    @property
    def search_paths(self) -> list[Path]:
        return list(self._paths)

    def find(self, name: str | Path) -> Path | None:
        """Return the absolute, symlink-resolved path for ``name``, or None."""
        candidate = Path(name)
        if candidate.is_file():
            return candidate.resolve()
        if not candidate.is_absolute():
            for base in self._paths:
                path = base / candidate
                if path.is_file():
                    return path.resolve()
        return None

    def get_source(self, name: str | Path) -> tuple[str, str]:
        """Load template source, returning ``(source, filename)``."""
        path = self.find(name)
        if path is None:
            raise TemplateNotFoundError(self._not_found_message(str(name)))
        try:
            source = path.read_text(self._encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateNotFoundError(f"Template '{name}' could not be read: {exc}") from exc
        logger.debug("Loaded template source %s (%d chars)", path, len(source))
        return source, str(path)

    def _not_found_message(self, name: str) -> str:
        msg = f"Template '{name}' not found"
        if self._paths:
            msg += f" in: {', '.join(str(p) for p in self._paths)}"
        # Suggest a sibling with a similar name (typos in include paths)
        requested = Path(name)
        for base in [Path(), *self._paths]:
            directory = (base / requested).parent
            if not directory.is_dir():
                continue
            siblings = sorted(p.name for p in directory.iterdir() if p.is_file())
            matches = get_close_matches(requested.name, siblings, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{requested.with_name(matches[0])}'?"
                break
        return msg
