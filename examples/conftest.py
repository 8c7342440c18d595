"""Fixtures for the kiln example apps.

``example_app`` runs the ``app.py`` next to the requesting test and returns
it as a module. The apps build their cache and template copies with
``tempfile``; the fixture points ``tempfile`` at the test's ``tmp_path`` so
every run compiles into an empty cache directory of its own and nothing is
left behind in the system temp directory.
"""

import importlib.util
import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Execute the sibling app.py with its kiln cache under ``tmp_path``."""
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    app_path = Path(request.path).parent / "app.py"
    spec = importlib.util.spec_from_file_location(f"kiln_example_{app_path.parent.name}", app_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    assert module.env.cache_dir.is_relative_to(tmp_path)
    return module
