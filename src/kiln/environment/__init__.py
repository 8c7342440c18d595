"""kiln environment — configuration, loading, block registry and errors."""

from kiln.environment.core import Environment
from kiln.environment.exceptions import (
    CacheWriteError,
    ErrorCode,
    IncludeCycleError,
    SourceSnippet,
    TemplateError,
    TemplateExecutionError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
)
from kiln.environment.loaders import FileSystemLoader
from kiln.environment.registry import BlockRegistry

__all__ = [
    "BlockRegistry",
    "CacheWriteError",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "IncludeCycleError",
    "SourceSnippet",
    "TemplateError",
    "TemplateExecutionError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedError",
    "build_source_snippet",
]
