"""
Stub builders.

- ``stub_interface``: no instance, every member materialized on first read
- ``stub_object``: spies every function member of an existing instance
- ``stub_callable``: a spy that also carries named members
- ``from_stub``: the stub itself, typed as the original
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeVar, overload

from stubkit.core.config import StubPolicy, is_dunder
from stubkit.core.sandbox import Sandbox
from stubkit.core.spy import Spy

from .members import CallableStub, MemberTable, Stub, seed_member
from .overrides import Bound, OverrideEntry, OverrideKind, classify, is_double, normalize

logger = logging.getLogger(__name__)

T = TypeVar("T")


def stub_interface(
    sandbox: Sandbox,
    overrides: Mapping[str, Any] | None = None,
    *,
    contract: type | None = None,
) -> Stub:
    """
    Build a stub with no backing instance.

    Overrides are seeded; every other member becomes a spy returning None
    the first time it is read.

    Args:
        sandbox: Sandbox owning the stub's spies
        overrides: Member name to function, data or plain object
        contract: The type being stood in for; only used for the repr

    Returns:
        The stub

    Example::

        fs = stub_interface(sandbox, {"read_text": lambda path: f"data from {path}"})
        assert fs.read_text("foo") == "data from foo"
        fs.write_text("foo", "bar")
        assert fs.write_text.called_once
    """
    label = contract.__name__ if contract is not None else "interface"
    stub = Stub(MemberTable(sandbox, label=label))
    depth = sandbox.policy.nested_depth
    _seed_overrides(sandbox, stub, normalize(overrides, depth=depth), stub, label, depth)
    return stub


def stub_object(
    sandbox: Sandbox,
    instance: Any,
    overrides: Mapping[str, Any] | None = None,
) -> Stub:
    """
    Build a stub from an existing instance.

    Every function member of the instance (inherited and underscore members
    included) is replaced by a spy that calls the original on the instance.
    Plain-object members are stubbed the same way, ``nested_depth`` levels
    deep; other data members are copied by reference. Overrides take the
    place of the member they name. Names the instance does not have are
    still materialized on first read.

    Args:
        sandbox: Sandbox owning the stub's spies
        instance: Object to stand in for
        overrides: Member name to replacement

    Returns:
        The stub
    """
    return _build_object(sandbox, instance, overrides, depth=sandbox.policy.nested_depth)


def stub_callable(
    sandbox: Sandbox,
    overrides: Mapping[str, Any] | None = None,
    fake: Callable[..., Any] | None = None,
) -> CallableStub:
    """
    Build a callable stub.

    Calling the stub runs ``fake`` (or returns None) and is tracked by the
    stub itself; named members resolve like ``stub_interface`` members, each
    with its own history.

    Args:
        sandbox: Sandbox owning the stub and its members
        overrides: Named members
        fake: Invocation behaviour

    Returns:
        The callable stub
    """
    label = getattr(fake, "__name__", None) or "callable"
    stub = sandbox.register(
        CallableStub(table=MemberTable(sandbox, label=label), fake=fake, name=label)
    )
    depth = sandbox.policy.nested_depth
    _seed_overrides(sandbox, stub, normalize(overrides, depth=depth), stub, label, depth)
    return stub


@overload
def from_stub(stub: Any, contract: type[T]) -> T: ...


@overload
def from_stub(stub: T, contract: None = None) -> T: ...


def from_stub(stub: Any, contract: type[T] | None = None) -> Any:
    """
    Hand a stub to code that expects the original type.

    Returns ``stub`` itself; ``contract`` only informs the type checker.
    """
    return stub


# =============================================================================
# Internals
# =============================================================================


def _build_object(
    sandbox: Sandbox,
    instance: Any,
    overrides: Mapping[str, Any] | None,
    *,
    depth: int,
) -> Stub:
    label = type(instance).__name__
    stub = Stub(MemberTable(sandbox, label=label))
    entries = normalize(overrides, depth=depth)

    for name, value in _iter_members(instance, sandbox.policy):
        if name in entries:
            continue
        member = OverrideEntry(name, classify(value, depth=depth), value)
        seed_member(stub, name, _materialize(sandbox, member, instance, label, depth))

    _seed_overrides(sandbox, stub, entries, instance, label, depth)

    logger.debug("Stubbed %s instance with %d overrides", label, len(entries))
    return stub


def _seed_overrides(
    sandbox: Sandbox,
    stub: Stub | CallableStub,
    entries: Mapping[str, OverrideEntry],
    receiver: Any,
    label: str,
    depth: int,
) -> None:
    for entry in entries.values():
        # Spies handed in as overrides are restored along with the rest
        if isinstance(entry.value, Spy):
            sandbox.register(entry.value)
        seed_member(stub, entry.name, _materialize(sandbox, entry, receiver, label, depth))


def _iter_members(instance: Any, policy: StubPolicy) -> Iterator[tuple[str, Any]]:
    """Yield the non-dunder members of an instance and its classes."""
    for name in dir(instance):
        if is_dunder(name):
            continue
        if name.startswith("_") and not policy.include_private:
            continue
        try:
            value = getattr(instance, name)
        except AttributeError:
            continue
        yield name, value


def _materialize(
    sandbox: Sandbox, entry: OverrideEntry, receiver: Any, label: str, depth: int
) -> Any:
    """Turn a classified member into the value the stub stores."""
    value = entry.value
    if entry.kind is OverrideKind.NESTED:
        return _build_object(sandbox, value, None, depth=depth - 1)
    if entry.kind is OverrideKind.DATA or is_double(value):
        return value

    name = f"{label}.{entry.name}"
    if isinstance(value, Bound):
        return sandbox.spy(fake=functools.partial(value.func, receiver), name=name)
    spy = sandbox.spy(fake=value, name=name)
    _carry_attributes(value, spy)
    return spy


def _carry_attributes(func: Any, spy: Spy) -> None:
    """Copy a function's own attributes onto the spy standing in for it."""
    attributes = getattr(func, "__dict__", None)
    if not isinstance(attributes, dict):
        return
    for key, value in attributes.items():
        if is_dunder(key) or hasattr(type(spy), key):
            continue
        setattr(spy, key, value)
