"""Shared constants for kiln.

Directive grammar, statement markers, and cache layout in one place so the
compiler passes and the cache store agree on them.

Directive Grammar:
    ```
    {{@ include 'path' }}  {{@ extend 'path' }}     include/extend
    {{@ setblock NAME }} ... {{@ endsetblock }}     block declaration
    {{@ parent }}                                   parent placeholder
    {{@ block NAME }}                               block reference
    {{@ EXPR }}                                     raw code
    {{ EXPR }}                                      interpolation
    ```

Keywords are case-insensitive and whitespace-flexible.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Directive patterns (one per compiler pass)
# ---------------------------------------------------------------------------

# Pass 1: quotes are optional; the closing quote must match the opening one
INCLUDE_RE = re.compile(
    r"\{\{@\s*(?:include|extend)\b\s*(['\"]?)(.*?)\1\s*\}\}",
    re.IGNORECASE,
)

# Pass 2: non-greedy, so the first end marker closes the nearest start marker
SETBLOCK_RE = re.compile(
    r"\{\{@\s*setblock\s+([^}]+?)\s*\}\}(.*?)\{\{@\s*endsetblock\s*;?\s*\}\}",
    re.IGNORECASE | re.DOTALL,
)
PARENT_RE = re.compile(r"\{\{@\s*parent\s*\}\}", re.IGNORECASE)

# Leftover declaration markers (strict mode diagnostics only)
SETBLOCK_MARKER_RE = re.compile(r"\{\{@\s*(?:end)?setblock\b", re.IGNORECASE)

# Pass 3
BLOCK_REF_RE = re.compile(r"\{\{@\s*block\b\s*([^}]*?)\s*\}\}", re.IGNORECASE)

# Pass 4: leading newlines stay in the capture so multi-line code can be dedented
CODE_RE = re.compile(r"\{\{@[ \t]*(.+?)\s*\}\}", re.IGNORECASE | re.DOTALL)

# Pass 5
ECHO_RE = re.compile(r"\{\{\s*(.+?)\s*\}\}", re.DOTALL)

# Unterminated interpolation (strict mode diagnostics only)
OPEN_DELIMITER = "{{"

# ---------------------------------------------------------------------------
# Statement markers
# ---------------------------------------------------------------------------
# Passes 4 and 5 wrap generated statements in private-use code points; the
# assembler turns everything outside them into literal writes.

STMT_OPEN = "\ue000"
STMT_CLOSE = "\ue001"
STMT_RE = re.compile(f"{STMT_OPEN}(.*?){STMT_CLOSE}", re.DOTALL)

# Raw-code suite handling
SUITE_END_RE = re.compile(r"end(?:for|if|while|with|try|def|class)?;?")
SUITE_CONTINUE_KEYWORDS: frozenset[str] = frozenset({"elif", "else", "except", "finally"})

# ---------------------------------------------------------------------------
# Names available to generated code
# ---------------------------------------------------------------------------

WRITE_NAME = "_write"
ECHO_NAME = "_echo"
GETATTR_NAME = "_getattr"

# ---------------------------------------------------------------------------
# Cache layout
# ---------------------------------------------------------------------------

ARTIFACT_SUFFIX = ".py"
ARTIFACT_DIGEST_LENGTH = 16
# Keep artifact file names under common filesystem limits (255 bytes)
ARTIFACT_STEM_MAX = 160
DIRECTORY_MODE = 0o777
ARTIFACT_MODE = 0o666
MISSING_MTIME = -1.0

# 50 is deep enough for any real layout chain while catching runaway recursion
DEFAULT_MAX_INCLUDE_DEPTH = 50
