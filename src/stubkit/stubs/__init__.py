"""
Stub construction: member interception, override normalization, builders
and method spies.
"""

from __future__ import annotations

from .builders import from_stub, stub_callable, stub_interface, stub_object
from .members import CallableStub, MemberTable, Stub, table_of
from .methods import spy_method, stub_method
from .overrides import Bound, OverrideEntry, OverrideKind, bound, normalize

__all__ = [
    "Bound",
    "CallableStub",
    "MemberTable",
    "OverrideEntry",
    "OverrideKind",
    "Stub",
    "bound",
    "from_stub",
    "normalize",
    "spy_method",
    "stub_callable",
    "stub_interface",
    "stub_method",
    "stub_object",
    "table_of",
]
