"""
Member interception.

Every member read on a stub goes through ``MemberTable.resolve``:

1. an explicit (seeded) member wins;
2. identity-sensitive names that were not seeded are absent;
3. a spy materialized by an earlier read is returned;
4. otherwise a new spy is created, cached and returned.

``Stub`` and ``CallableStub`` forward attribute access to their table.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from stubkit.core.config import is_dunder
from stubkit.core.sandbox import Sandbox
from stubkit.core.spy import Spy

logger = logging.getLogger(__name__)

# Dunders the stub classes need for themselves
RESERVED_MEMBERS = frozenset(
    {
        "__class__",
        "__delattr__",
        "__dict__",
        "__getattr__",
        "__getattribute__",
        "__init__",
        "__new__",
        "__setattr__",
    }
)
CALLABLE_RESERVED_MEMBERS = RESERVED_MEMBERS | {"__call__", "__get__"}

_TABLE = "_stubkit_table"
_SPY_PREFIXES = ("_mock_", "_spec_", "_spy_")


class MemberTable:
    """The materialized members of one stub.

    Args:
        sandbox: Sandbox that owns every spy this table creates
        label: Name used in reprs and spy names
    """

    def __init__(self, sandbox: Sandbox, *, label: str) -> None:
        self.sandbox = sandbox
        self.policy = sandbox.policy
        self.label = label
        self._seeded: dict[str, Any] = {}
        self._materialized: dict[str, Spy] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._seeded or name in self._materialized

    def __repr__(self) -> str:
        return (
            f"MemberTable({self.label!r}, seeded={sorted(self._seeded)}, "
            f"materialized={sorted(self._materialized)})"
        )

    def resolve(self, name: str) -> Any:
        """
        Resolve a member read.

        Raises:
            AttributeError: If ``name`` is identity-sensitive and not seeded
        """
        if name in self._seeded:
            return self._seeded[name]
        if self.policy.is_identity_sensitive(name):
            raise AttributeError(f"{self.label} stub has no member {name!r}")

        spy = self._materialized.get(name)
        if spy is None:
            spy = self.sandbox.spy(name=f"{self.label}.{name}")
            self._materialized[name] = spy
            logger.debug("Materialized %s.%s", self.label, name)
        return spy

    def seed(self, name: str, value: Any) -> None:
        """Store an explicit member, replacing any materialized spy."""
        self._seeded[name] = value
        self._materialized.pop(name, None)

    def discard(self, name: str) -> bool:
        """Forget a member. Returns False if there was nothing to forget."""
        if name not in self:
            return False
        self._seeded.pop(name, None)
        self._materialized.pop(name, None)
        return True

    def names(self) -> list[str]:
        """Names of every seeded or materialized member."""
        return sorted(self._seeded.keys() | self._materialized.keys())

    def seeded(self) -> dict[str, Any]:
        return dict(self._seeded)

    def materialized(self) -> dict[str, Spy]:
        return dict(self._materialized)


def table_of(stub: Any) -> MemberTable:
    """
    Get the member table behind a stub.

    Raises:
        TypeError: If ``stub`` is not a stub
    """
    try:
        return object.__getattribute__(stub, _TABLE)
    except AttributeError:
        raise TypeError(f"{type(stub).__name__} object is not a stub") from None


def seed_member(stub: Stub | CallableStub, name: str, value: Any) -> None:
    """
    Seed an explicit member on a stub.

    Dunder members are also set on the stub's own class, where Python's
    protocol lookup (``await``, ``len()``, ``with``...) finds them. Like any
    other member they are called without the stub as first argument.

    Raises:
        TypeError: If ``name`` is a dunder the stub class needs itself
    """
    reserved = CALLABLE_RESERVED_MEMBERS if isinstance(stub, Spy) else RESERVED_MEMBERS
    if name in reserved:
        raise TypeError(f"{name} cannot be overridden on a stub")
    table_of(stub).seed(name, value)
    if is_dunder(name):
        if callable(value) and hasattr(type(value), "__get__"):
            value = staticmethod(value)
        setattr(type(stub), name, value)


class Stub:
    """A test double whose members are resolved through a ``MemberTable``.

    Stubs are built by ``stub_interface`` and ``stub_object``. Apart from
    dunders the class defines no attributes of its own, so every member
    name reaches the table.
    """

    def __new__(cls, *args: Any, **kwargs: Any) -> Stub:
        # Each stub gets its own class so explicit dunder members can live on it
        subclass = type(cls.__name__, (cls,), {"__doc__": cls.__doc__})
        return object.__new__(subclass)

    def __init__(self, table: MemberTable) -> None:
        object.__setattr__(self, _TABLE, table)

    def __getattr__(self, name: str) -> Any:
        try:
            table = object.__getattribute__(self, _TABLE)
        except AttributeError:
            # Not initialized yet, as during unpickling
            raise AttributeError(name) from None
        return table.resolve(name)

    def __setattr__(self, name: str, value: Any) -> None:
        seed_member(self, name, value)

    def __delattr__(self, name: str) -> None:
        if not table_of(self).discard(name):
            raise AttributeError(name)
        if is_dunder(name) and name in vars(type(self)):
            delattr(type(self), name)

    def __dir__(self) -> list[str]:
        return sorted(set(object.__dir__(self)) - {_TABLE} | set(table_of(self).names()))

    def __repr__(self) -> str:
        return f"<Stub of {table_of(self).label} at {id(self):#x}>"

    # A copy of a stub is the stub: its members and their histories are shared state
    def __copy__(self) -> Stub:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Stub:
        return self


class CallableStub(Spy):
    """A spy that also carries named members.

    Calling the stub is tracked by the stub itself; each named member is a
    separate entry of its ``MemberTable`` with its own history. Names of the
    spy API (``called``, ``returns``, ``call_count``...) belong to the spy.

    Args:
        table: Member table for the named members
        fake: Invocation behaviour
        name: Name used in the spy's repr
    """

    def __init__(
        self,
        *,
        table: MemberTable,
        fake: Callable[..., Any] | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(fake=fake, name=name)
        self.__dict__[_TABLE] = table

    def __getattr__(self, name: str) -> Any:
        table = self.__dict__.get(_TABLE)
        if table is None or name.startswith(_SPY_PREFIXES):
            return super().__getattr__(name)
        return table.resolve(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if _spy_owns(self, name):
            super().__setattr__(name, value)
        else:
            seed_member(self, name, value)

    def __delattr__(self, name: str) -> None:
        table = self.__dict__.get(_TABLE)
        if table is not None and name in table:
            table.discard(name)
            if is_dunder(name) and name in vars(type(self)):
                delattr(type(self), name)
            return
        super().__delattr__(name)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(table_of(self).names()))

    def __copy__(self) -> CallableStub:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> CallableStub:
        return self


def _spy_owns(stub: CallableStub, name: str) -> bool:
    """Check if an assignment on a callable stub configures the spy itself."""
    if stub.__dict__.get(_TABLE) is None:
        return True
    if is_dunder(name):
        return False
    if name.startswith(_SPY_PREFIXES) or name in stub.__dict__:
        return True
    return hasattr(type(stub), name)
