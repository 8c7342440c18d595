"""kiln test suite."""
