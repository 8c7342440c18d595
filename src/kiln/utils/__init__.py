"""Shared utilities for kiln."""
