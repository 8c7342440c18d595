"""kiln Template package — compiled templates and their runtime helpers."""

from kiln.template.core import Template
from kiln.template.helpers import build_namespace, getattr_lenient, getattr_strict, str_safe

__all__ = [
    "Template",
    "build_namespace",
    "getattr_lenient",
    "getattr_strict",
    "str_safe",
]
