"""
Pytest fixtures for stubkit.

Registered as a pytest plugin via the pyproject.toml entry point::

    [project.entry-points."pytest11"]
    "stubkit.testing.fixtures" = "stubkit.testing.fixtures"

Projects that do not install the entry point can import the fixtures into
their conftest.py instead.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import pytest

from stubkit.core.config import StubPolicy, load_policy
from stubkit.core.sandbox import Sandbox

if TYPE_CHECKING:
    from collections.abc import Generator


@contextmanager
def sandbox_scope(policy: StubPolicy | None = None) -> Iterator[Sandbox]:
    """Yield a sandbox and restore it on exit, even when the body fails."""
    sandbox = Sandbox(policy=policy)
    try:
        yield sandbox
    finally:
        sandbox.restore()


@pytest.fixture(scope="session")
def stub_policy(pytestconfig: pytest.Config) -> StubPolicy:
    """Stub policy from the ``[tool.stubkit]`` section of the rootdir's pyproject.toml."""
    return load_policy(pytestconfig.rootpath / "pyproject.toml")


@pytest.fixture()
def sandbox(stub_policy: StubPolicy) -> Generator[Sandbox, None, None]:
    """A sandbox restored after the test.

    Yields:
        Sandbox using the project's stub policy
    """
    with sandbox_scope(stub_policy) as scoped:
        yield scoped
