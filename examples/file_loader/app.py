"""File-based templates -- the most common real-world pattern.

Loads templates from disk through a search path, demonstrates layout
inheritance (extend/setblock/block/parent) and includes, and caches the
compiled artifacts in a temporary directory.

Run:
    python app.py
"""

import tempfile
from pathlib import Path

from kiln import Environment

templates_dir = Path(__file__).parent / "templates"
env = Environment(
    cache_dir=tempfile.mkdtemp(prefix="kiln-file-loader-"),
    search_paths=[templates_dir],
)

nav_items = [
    {"url": "/", "label": "Home"},
    {"url": "/about", "label": "About"},
]

home_output = env.render(
    "home.html",
    site_name="My Site",
    nav_items=nav_items,
    title="Welcome",
    message="This is a kiln-powered site with template inheritance.",
)

about_output = env.render(
    "about.html",
    site_name="My Site",
    nav_items=nav_items,
    title="About Us",
    description="Templates compile to plain Python modules.",
)


def main() -> None:
    print("=== Home Page ===")
    print(home_output)
    print()
    print("=== About Page ===")
    print(about_output)
    print()
    print(env.cache_info())


if __name__ == "__main__":
    main()
