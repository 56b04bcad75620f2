"""Shared pytest fixtures for stubkit tests."""

from __future__ import annotations

# The plugin's fixtures, available even when the pytest11 entry point is not installed
from stubkit.testing.fixtures import sandbox, stub_policy  # noqa: F401
