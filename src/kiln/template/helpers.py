"""Runtime helpers injected into the namespace of compiled templates.

Generated code only ever calls three names: ``_write`` for literal text,
``_echo`` for interpolations and ``_getattr`` for dotted access. Raw code
may also use ``echo(value)`` and ``print(...)``, both of which write to the
render's output buffer.

Thread-Safety:
A namespace is built per render and bound to that render's buffer; the
lookup helpers are stateless.

"""

from __future__ import annotations

import builtins
import functools
import io
from collections.abc import Mapping
from typing import Any

from kiln.environment.exceptions import UndefinedError
from kiln.utils.constants import ECHO_NAME, GETATTR_NAME, WRITE_NAME

_MISSING = object()


def str_safe(value: Any) -> str:
    """Convert a value for output; None renders as nothing."""
    if value is None:
        return ""
    return str(value)


def _resolve(obj: Any, name: str) -> Any:
    # Mappings: key first so data named "items"/"keys" beats the dict method
    if isinstance(obj, Mapping):
        try:
            return obj[name]
        except KeyError:
            return getattr(obj, name, _MISSING)
    try:
        return getattr(obj, name)
    except AttributeError:
        pass
    try:
        return obj[name]
    except (KeyError, IndexError, TypeError):
        return _MISSING


def getattr_lenient(obj: Any, name: str) -> Any:
    """Attribute-or-key lookup; a miss yields None (renders as empty).

    Example:
        >>> getattr_lenient({"name": "Ada"}, "name")
        'Ada'
        >>> getattr_lenient(None, "name") is None
        True
    """
    value = _resolve(obj, name)
    return None if value is _MISSING else value


def getattr_strict(obj: Any, name: str) -> Any:
    """Attribute-or-key lookup that raises UndefinedError on a miss."""
    value = _resolve(obj, name)
    if value is _MISSING:
        raise UndefinedError(name, type(obj).__name__)
    return value


def build_namespace(buffer: io.StringIO, *, strict: bool = False) -> dict[str, Any]:
    """Fresh globals for one execution of a compiled template.

    Builtins are left unrestricted: templates are trusted code.
    """
    write = buffer.write

    def echo(value: Any) -> None:
        write(str_safe(value))

    return {
        "__name__": "__kiln_template__",
        "__builtins__": builtins.__dict__,
        WRITE_NAME: write,
        ECHO_NAME: echo,
        GETATTR_NAME: getattr_strict if strict else getattr_lenient,
        "echo": echo,
        "print": functools.partial(print, file=buffer),
    }
