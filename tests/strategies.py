"""Shared hypothesis strategies for kiln property-based testing.

Provides reusable strategies for:

- **Text**: literal template text that contains no directive delimiters
- **Names**: identifiers usable as block names and context variables
- **Paths**: template paths for artifact naming properties

These are building blocks -- individual test modules compose them into
property-specific strategies.
"""

from __future__ import annotations

import keyword

from hypothesis import strategies as st

# ---------------------------------------------------------------------------
# Text strategies
# ---------------------------------------------------------------------------

# Plain text without braces or the reserved statement markers.
# Rendering it must reproduce it exactly.
plain_text = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs",),  # no surrogates
        blacklist_characters="{}\x00\ue000\ue001",
    ),
    min_size=0,
    max_size=200,
)

# Identifiers that are valid Python names and don't shadow template helpers
identifier = st.from_regex(r"[a-z][a-z0-9_]{0,12}", fullmatch=True).filter(
    lambda name: not keyword.iskeyword(name) and name not in {"echo", "print"}
)

# Block names as written after ``setblock``
block_name = st.from_regex(r"[A-Za-z][A-Za-z0-9_-]{0,15}", fullmatch=True)

# Block content: plain text only, so it survives later passes unchanged
block_content = st.text(
    alphabet=st.characters(
        whitelist_categories=("Lu", "Ll", "Nd", "Zs"),
        whitelist_characters="<>/.,-!?",
    ),
    max_size=40,
)

# ---------------------------------------------------------------------------
# Path strategies
# ---------------------------------------------------------------------------

_segment = st.from_regex(r"[A-Za-z0-9_.-]{1,12}", fullmatch=True).filter(
    lambda s: s not in {".", ".."}
)

# Relative template paths like ``pages/about.html``; never created on disk
template_path = st.lists(_segment, min_size=1, max_size=4).map("/".join)
