"""
Override normalization.

Overrides are the caller-supplied values that pre-seed stub members. They are
classified once, when the stub is built:

- FUNCTION: callables, wrapped into a spy unless they already are a double
- NESTED: plain objects, stubbed recursively while the nesting budget lasts
- DATA: everything else, stored verbatim
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum, StrEnum
from types import ModuleType, SimpleNamespace
from typing import Any
from unittest.mock import NonCallableMock

from .members import Stub


class OverrideKind(StrEnum):
    """How an override becomes a stub member."""

    FUNCTION = "function"
    DATA = "data"
    NESTED = "nested"


@dataclass(frozen=True)
class Bound:
    """A function override that receives the stub's receiver first.

    Created with ``bound()``.
    """

    func: Callable[..., Any]


def bound(func: Callable[..., Any]) -> Bound:
    """
    Mark a function override as a method.

    The function is called with the stub's receiver as its first argument:
    the original instance for ``stub_object``, the stub itself for
    ``stub_interface`` and ``stub_callable``.

    Example::

        stub = stub_object(sandbox, account, {
            "describe": bound(lambda self: f"overridden:{self.balance}"),
        })
    """
    return Bound(func)


@dataclass(frozen=True)
class OverrideEntry:
    """
    A classified override.

    Attributes:
        name: Member name
        kind: How the value becomes a member
        value: The caller's value, untouched
    """

    name: str
    kind: OverrideKind
    value: Any


def is_double(value: Any) -> bool:
    """Check if a value is already a test double (a spy or any mock)."""
    return isinstance(value, NonCallableMock)


def is_plain_object(value: Any) -> bool:
    """
    Check if a value is a plain object that may be stubbed recursively.

    Plain objects are ``SimpleNamespace`` instances and non-callable
    instances with a ``__dict__`` whose class lives outside the standard
    library. Enum members, exceptions, modules, stubs and doubles are not.
    """
    if isinstance(value, SimpleNamespace):
        return True
    if callable(value) or is_double(value):
        return False
    if isinstance(value, (ModuleType, Stub, Enum, BaseException)):
        return False
    if not hasattr(value, "__dict__"):
        return False
    root = type(value).__module__.partition(".")[0]
    return root not in sys.stdlib_module_names


def classify(value: Any, *, depth: int) -> OverrideKind:
    """
    Classify one override value.

    Args:
        value: The override
        depth: Remaining nesting budget; plain objects are DATA at 0

    Returns:
        The override kind
    """
    if isinstance(value, Bound):
        return OverrideKind.FUNCTION
    if is_double(value):
        return OverrideKind.FUNCTION if callable(value) else OverrideKind.DATA
    if callable(value) and not isinstance(value, type):
        return OverrideKind.FUNCTION
    if depth > 0 and is_plain_object(value):
        return OverrideKind.NESTED
    return OverrideKind.DATA


def normalize(overrides: Mapping[str, Any] | None, *, depth: int) -> dict[str, OverrideEntry]:
    """
    Classify every override in one pass.

    Args:
        overrides: Member name to value, or None
        depth: Remaining nesting budget for plain-object values

    Returns:
        Entries keyed by member name, in the caller's order
    """
    if not overrides:
        return {}
    return {
        name: OverrideEntry(name, classify(value, depth=depth), value)
        for name, value in overrides.items()
    }
