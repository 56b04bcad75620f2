"""
Method spies: replace or observe one named member in place.

The member is addressed by name on whatever object holds it, so a class's
underscore methods can be stubbed even though callers only ever reach them
through public methods.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

from stubkit.core.sandbox import Sandbox
from stubkit.core.spy import MethodSpy, Spy

logger = logging.getLogger(__name__)


def stub_method(sandbox: Sandbox, owner: Any, name: str) -> Spy:
    """
    Replace ``owner.name`` with a spy returning None.

    Configure the result through the spy (``returns``, ``resolves``...). The
    original comes back when the sandbox is restored.

    Args:
        sandbox: Sandbox that restores the member
        owner: Class, instance or module holding the member
        name: Member name, taken verbatim

    Returns:
        The installed spy

    Raises:
        AttributeError: If ``owner`` has no member ``name``
        TypeError: If the member is already replaced by an installed spy

    Example::

        stub_method(sandbox, Foo, "_load").returns("45678")
        assert Foo().test() == "45678"
    """
    return _install(sandbox, owner, name, call_through=False)


def spy_method(sandbox: Sandbox, owner: Any, name: str) -> Spy:
    """
    Replace ``owner.name`` with a spy that calls the original.

    Args:
        sandbox: Sandbox that restores the member
        owner: Class, instance or module holding the member
        name: Member name, taken verbatim

    Returns:
        The installed spy

    Raises:
        AttributeError: If ``owner`` has no member ``name``
        TypeError: If the member is already replaced by an installed spy
    """
    return _install(sandbox, owner, name, call_through=True)


def _install(sandbox: Sandbox, owner: Any, name: str, *, call_through: bool) -> Spy:
    label = f"{getattr(owner, '__name__', type(owner).__name__)}.{name}"

    current = getattr(owner, "__dict__", {}).get(name)
    if isinstance(current, (classmethod, staticmethod)):
        current = current.__func__
    if isinstance(current, Spy) and current.installed:
        raise TypeError(f"Attempted to wrap {label} which is already wrapped")

    if isinstance(owner, type):
        original = inspect.getattr_static(owner, name)
        if isinstance(original, (classmethod, staticmethod)):
            spy = Spy(name=label, wraps=original.__func__ if call_through else None)
            installed = type(original)(spy)
            logger.debug("Installing %s spy on %s", type(original).__name__, label)
            return sandbox.replace(owner, name, spy, installed=installed)
        if inspect.isfunction(original):
            method_spy = MethodSpy(name=label, wraps=original if call_through else None)
            return sandbox.replace(owner, name, method_spy)

    original = getattr(owner, name)
    spy = Spy(name=label, wraps=original if call_through else None)
    return sandbox.replace(owner, name, spy)
