"""kiln Template — a compiled artifact ready for rendering.

The Template compiles artifact source to a code object once and runs it
per ``render()`` in a fresh namespace:

    ```
    Template
    ├── _code: code object     # compile(artifact_source, filename, "exec")
    ├── _source: str           # artifact source, for error snippets
    └── _name, _filename       # template path, artifact path
    ```

Context Binding:
The data context is merged into the namespace after the helpers, and a key
that would shadow a helper (``_write``, ``echo``, ``print``, ...) is
skipped, so templates always write to their own buffer.

Error Enhancement:
Anything raised while compiling or running the artifact becomes a
TemplateExecutionError that points at the artifact line:

    ```
    Runtime Error: NameError: name 'usr' is not defined
      Location: /tmp/cache/_srv_page.html.0123456789abcdef.py:5
    ```

"""

from __future__ import annotations

import io
import logging
import traceback
from typing import Any

from kiln.environment.exceptions import (
    SourceSnippet,
    TemplateError,
    TemplateExecutionError,
    UndefinedError,
    build_source_snippet,
)
from kiln.template.helpers import build_namespace

logger = logging.getLogger(__name__)

_SUGGESTION = "Check the raw code or expression in the template that produced this line"


class Template:
    """Compiled template ready for rendering.

    Attributes:
        name: Template path (for error messages)
        filename: Artifact path the code was compiled from
        source: Artifact source text

    Example:
            >>> t = env.get_template("greeting.html")   # Hello, {{ user.name }}!
            >>> t.render(user={"name": "World"})
            'Hello, World!'
            >>> t.render({"user": {"name": "World"}})  # dict context also works
            'Hello, World!'

    Raises:
        TemplateExecutionError: If the artifact is not valid Python
    """

    __slots__ = ("_code", "_filename", "_name", "_source", "_strict")

    def __init__(
        self,
        source: str,
        name: str | None = None,
        filename: str | None = None,
        *,
        strict: bool = False,
    ):
        self._source = source
        self._name = name
        self._filename = filename or f"<kiln:{name or 'string'}>"
        self._strict = strict
        try:
            self._code = compile(source, self._filename, "exec")
        except SyntaxError as exc:
            raise self._execution_error(exc) from exc

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def source(self) -> str:
        return self._source

    def render(self, *args: Any, **kwargs: Any) -> str:
        """Execute the template with the given context and return its output.

        Args:
            *args: Single dict of context variables
            **kwargs: Context variables as keyword arguments

        Raises:
            TemplateExecutionError: If the template code raises
        """
        context = dict(*args, **kwargs)
        buffer = io.StringIO()
        namespace = build_namespace(buffer, strict=self._strict)
        for key, value in context.items():
            if key in namespace:
                logger.debug("Context key %r shadows a template helper; skipped", key)
                continue
            namespace[key] = value

        try:
            exec(self._code, namespace)
        except UndefinedError as exc:
            if exc.lineno is not None:
                raise
            lineno = self._artifact_lineno(exc)
            raise exc.located(
                template_name=self._name,
                filename=self._filename,
                lineno=lineno,
                source_snippet=self._snippet(lineno),
            ) from None
        except TemplateError:
            raise
        except Exception as exc:
            raise self._execution_error(exc) from exc
        return buffer.getvalue()

    def _artifact_lineno(self, exc: BaseException) -> int | None:
        """Innermost artifact line involved in an exception."""
        if isinstance(exc, SyntaxError) and exc.filename == self._filename:
            return exc.lineno
        for frame in reversed(traceback.extract_tb(exc.__traceback__)):
            if frame.filename == self._filename:
                return frame.lineno
        return None

    def _snippet(self, lineno: int | None) -> SourceSnippet | None:
        if not lineno:
            return None
        return build_source_snippet(self._source, lineno)

    def _execution_error(self, exc: BaseException) -> TemplateExecutionError:
        detail = exc.msg if isinstance(exc, SyntaxError) else str(exc)
        lineno = self._artifact_lineno(exc)
        return TemplateExecutionError(
            f"{type(exc).__name__}: {detail}",
            template_name=self._name,
            filename=self._filename,
            lineno=lineno,
            suggestion=_SUGGESTION,
            source_snippet=self._snippet(lineno),
        )

    def __repr__(self) -> str:
        return f"<Template {self._name or '<string>'!r}>"
