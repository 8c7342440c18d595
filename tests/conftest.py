"""Pytest configuration and fixtures for kiln tests."""

from pathlib import Path

import pytest

from kiln import Environment


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Directory for test template sources."""
    path = tmp_path / "templates"
    path.mkdir()
    return path


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Cache directory path (not created; the store creates it on first use)."""
    return tmp_path / "cache"


@pytest.fixture
def write_template(template_dir: Path):
    """Write a template file under ``template_dir`` and return its path."""

    def write(name: str, source: str) -> Path:
        path = template_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    return write


@pytest.fixture
def env(cache_dir: Path, template_dir: Path) -> Environment:
    """Create a caching kiln Environment that searches ``template_dir``."""
    return Environment(cache_dir, search_paths=[template_dir])


@pytest.fixture
def env_strict(cache_dir: Path, template_dir: Path) -> Environment:
    """Create a kiln Environment with strict mode enabled."""
    return Environment(cache_dir, search_paths=[template_dir], strict=True)


@pytest.fixture
def env_with_layout(env: Environment, write_template) -> Environment:
    """Environment with a small layout/page inheritance tree on disk."""
    write_template(
        "layout.html",
        "<html><head><title>{{@ block title }}</title></head>"
        "<body>{{@ include 'nav.html' }}{{@ block content }}</body></html>",
    )
    write_template("nav.html", "<nav>{{ site }}</nav>")
    write_template(
        "page.html",
        "{{@ extend 'layout.html' }}"
        "{{@ setblock title }}Docs{{@ endsetblock }}"
        "{{@ setblock content }}<h1>{{ page.title }}</h1>{{@ endsetblock }}",
    )
    return env

