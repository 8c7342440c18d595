"""kiln — a small template compiler with an on-disk artifact cache.

Templates mix literal text with a handful of directives and compile to
plain Python modules, which are cached next to each other in one directory
and rebuilt when their source changes.

Quickstart:
    >>> from kiln import Environment
    >>> env = Environment(cache_dir="/tmp/kiln-cache", search_paths=["templates/"])
    >>> env.render("hello.html", name="World")     # Hello, {{ name }}!
    'Hello, World!'

Directives:
    {{@ include 'partials/nav.html' }}             inline another template
    {{@ extend 'layout.html' }}                    same, used for layouts
    {{@ setblock content }}...{{@ endsetblock }}   declare/override a block
    {{@ parent }}                                  previous content of the block
    {{@ block content }}                           insert a block
    {{@ for post in posts: }}...{{@ end }}         raw Python
    {{ post.title }}                               output a value

Architecture:
Template Source → includes → setblocks → blocks → raw code → echo → codegen
→ artifact (.py in cache_dir) → compile() + exec() → output string

Pipeline stages:
1. **Compiler**: five ordered text passes, then assembly into Python source
2. **CacheStore**: artifact naming, mtime freshness, atomic writes
3. **Template**: compiles the artifact and executes it against the context
4. **Environment**: ties the three together behind ``render()``

Trust:
Raw code and interpolations execute with full interpreter privileges.
Only render templates you control.

"""

# Environment first: its submodules are imported by everything below
from kiln.environment import (
    BlockRegistry,
    CacheWriteError,
    Environment,
    ErrorCode,
    FileSystemLoader,
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

# isort: split
from kiln.cache_store import CacheStore
from kiln.compile_context import CompileContext
from kiln.compiler import Compiler
from kiln.template import Template

__version__ = "0.1.0"

__all__ = [
    "BlockRegistry",
    "CacheStore",
    "CacheWriteError",
    "CompileContext",
    "Compiler",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "IncludeCycleError",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateExecutionError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedError",
    "__version__",
    "build_source_snippet",
]
