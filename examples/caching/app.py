"""Artifact caching -- compile once, re-render from the cache.

Each template compiles to a Python module in ``cache_dir``. Later renders
reuse it until the template file gets a newer mtime; ``clear_cache()``
forces every template to be rebuilt.

Run:
    python app.py
"""

import os
import shutil
import tempfile
import time
from pathlib import Path

from kiln import Environment

work_dir = Path(tempfile.mkdtemp(prefix="kiln-caching-"))
shutil.copytree(Path(__file__).parent / "templates", work_dir / "templates")
template_path = work_dir / "templates" / "dashboard.html"

env = Environment(cache_dir=work_dir / "cache", search_paths=[work_dir / "templates"])
stats = {"users": 1200, "revenue": "$45K"}

# First render compiles and writes the artifact
first_output = env.render("dashboard.html", title="Dashboard", stats=stats)
info_after_first = env.cache_info()

# Second render reuses it
second_output = env.render("dashboard.html", title="Dashboard", stats=stats)
info_after_second = env.cache_info()

# Editing the template (newer mtime) triggers a rebuild
template_path.write_text(template_path.read_text().replace("<h1>", "<h1 class='v2'>"))
future = time.time() + 60
os.utime(template_path, (future, future))
edited_output = env.render("dashboard.html", title="Dashboard", stats=stats)
info_after_edit = env.cache_info()

artifact_path = env.compile("dashboard.html")
removed = env.clear_cache()


def main() -> None:
    print("=== First render ===")
    print(first_output)
    print(f"cache: {info_after_first}")
    print(f"\nsecond render: {info_after_second['hits']} hit(s)")
    print(f"after edit: {info_after_edit['misses']} compile(s)")
    print(f"\nartifact: {artifact_path}")
    print(f"cleared {removed} artifact(s)")


if __name__ == "__main__":
    main()
