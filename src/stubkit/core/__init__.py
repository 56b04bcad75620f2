"""
Core collaborators: the spy primitive, the sandbox, configuration and errors.
"""

from __future__ import annotations

from .config import StubPolicy, get_policy, load_policy, set_policy
from .errors import PolicyError, StubkitError
from .sandbox import Sandbox
from .spy import MethodSpy, Spy, SpyCall, SpyState

__all__ = [
    "MethodSpy",
    "PolicyError",
    "Sandbox",
    "Spy",
    "SpyCall",
    "SpyState",
    "StubPolicy",
    "StubkitError",
    "get_policy",
    "load_policy",
    "set_policy",
]
