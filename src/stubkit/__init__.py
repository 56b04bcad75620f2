"""
stubkit - stubs, spies and sandboxes for Python tests.

Build a test double from a contract, an existing instance or a callable;
every member you touch is a spy you can inspect and reconfigure, and one
sandbox restores everything at teardown.
"""

from __future__ import annotations

from ._version import get_version
from .core import MethodSpy, PolicyError, Sandbox, Spy, SpyCall, SpyState, StubkitError, StubPolicy
from .stubs import (
    CallableStub,
    Stub,
    bound,
    from_stub,
    spy_method,
    stub_callable,
    stub_interface,
    stub_method,
    stub_object,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "CallableStub",
    "MethodSpy",
    "PolicyError",
    "Sandbox",
    "Spy",
    "SpyCall",
    "SpyState",
    "Stub",
    "StubPolicy",
    "StubkitError",
    "bound",
    "from_stub",
    "spy_method",
    "stub_callable",
    "stub_interface",
    "stub_method",
    "stub_object",
]
