"""Tests for the caching example."""


class TestCachingApp:
    """Verify artifact reuse and invalidation."""

    def test_first_render(self, example_app) -> None:
        assert "<h1>Dashboard</h1>" in example_app.first_output
        assert "<li>users: 1200</li>" in example_app.first_output
        assert "<li>revenue: $45K</li>" in example_app.first_output

    def test_first_render_compiles(self, example_app) -> None:
        assert example_app.info_after_first["misses"] == 1
        assert example_app.info_after_first["file_count"] == 1

    def test_second_render_hits_cache(self, example_app) -> None:
        assert example_app.second_output == example_app.first_output
        assert example_app.info_after_second["hits"] == 1
        assert example_app.info_after_second["misses"] == 1

    def test_edit_recompiles(self, example_app) -> None:
        assert "<h1 class='v2'>Dashboard</h1>" in example_app.edited_output
        assert example_app.info_after_edit["misses"] == 2

    def test_artifact_is_python(self, example_app) -> None:
        assert example_app.artifact_path.suffix == ".py"
        assert "dashboard.html" in example_app.artifact_path.name

    def test_clear_cache(self, example_app) -> None:
        assert example_app.removed == 1
        assert not example_app.artifact_path.exists()
