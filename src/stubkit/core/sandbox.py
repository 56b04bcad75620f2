"""
Sandbox: the owning scope for a group of spies.

Every spy a stub needs is created through a sandbox, and every member a
spy replaces in place is patched through it, so one ``restore()`` puts
everything back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import ExitStack
from types import TracebackType
from typing import Any, TypeVar
from unittest import mock

from .config import StubPolicy, get_policy
from .spy import Spy

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Spy)


class Sandbox:
    """Creates spies, patches members, and restores all of them at once.

    Args:
        policy: Stub policy used by stubs built through this sandbox.
            Defaults to the process-wide policy.

    Example::

        with Sandbox() as sandbox:
            fs = stub_interface(sandbox)
            fs.read_text("a.txt")
            assert fs.read_text.called_once
    """

    def __init__(self, policy: StubPolicy | None = None) -> None:
        self.policy = policy if policy is not None else get_policy()
        self._spies: list[Spy] = []

    def __enter__(self) -> Sandbox:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()

    @property
    def spies(self) -> list[Spy]:
        """Active spies, in creation order."""
        return list(self._spies)

    def spy(
        self,
        *,
        fake: Callable[..., Any] | None = None,
        name: str | None = None,
        wraps: Callable[..., Any] | None = None,
    ) -> Spy:
        """Create a spy owned by this sandbox."""
        return self.register(Spy(fake=fake, name=name, wraps=wraps))

    def register(self, spy: S) -> S:
        """Take ownership of a spy built elsewhere. Registering twice is a no-op."""
        if not self.owns(spy):
            self._spies.append(spy)
        return spy

    def owns(self, spy: Spy) -> bool:
        return any(owned is spy for owned in self._spies)

    def replace(self, owner: Any, name: str, spy: S, *, installed: Any = None) -> S:
        """
        Patch ``owner.name`` for the lifetime of ``spy``.

        Args:
            owner: Class, instance or module holding the member
            name: Attribute name, taken verbatim
            spy: Spy that restores the member when it is restored
            installed: Object actually set on the owner when it is not the
                spy itself (a ``classmethod`` wrapping it, for example)

        Returns:
            The spy, now registered with this sandbox

        Raises:
            AttributeError: If ``owner`` has no attribute ``name``
        """
        patcher = mock.patch.object(owner, name, spy if installed is None else installed)
        patcher.start()
        spy._track_patch(patcher)
        logger.debug("Patched %r.%s with %r", owner, name, spy)
        return self.register(spy)

    def reset_history(self) -> None:
        """Forget the recorded calls of every owned spy."""
        for spy in self._spies:
            spy.reset_history()

    def restore(self) -> None:
        """
        Restore every owned spy, most recent first.

        Every spy is restored even if one of them fails; the failure is
        re-raised once all of them ran. Calling this again is a no-op.
        """
        spies, self._spies = self._spies, []
        if not spies:
            return
        with ExitStack() as stack:
            for spy in spies:
                stack.callback(spy.restore)
        logger.debug("Sandbox restored %d spies", len(spies))
