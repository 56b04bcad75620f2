"""
The spy primitive.

``Spy`` is a ``unittest.mock.Mock`` that adds the behaviour-configuration
verbs tests reach for (``returns``, ``resolves``, ``throws``...), a per-call
outcome history and an active/restored lifecycle. It never fabricates child
attributes: reading an unknown attribute of a spy raises ``AttributeError``.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any
from unittest.mock import DEFAULT, Mock, call

if TYPE_CHECKING:
    from unittest.mock import _patch

logger = logging.getLogger(__name__)


class SpyState(StrEnum):
    """Lifecycle of a spy."""

    ACTIVE = "active"
    RESTORED = "restored"


@dataclass(frozen=True)
class SpyCall:
    """
    One recorded invocation.

    Attributes:
        args: Positional arguments, receiver included for bound method spies
        kwargs: Keyword arguments
        result: Value returned (None when the call raised)
        exception: Exception raised by the fake, if any
    """

    args: tuple[Any, ...]
    kwargs: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    exception: BaseException | None = None

    @property
    def threw(self) -> bool:
        return self.exception is not None


async def _settle(value: Any) -> Any:
    return value


async def _fail(error: BaseException | type[BaseException]) -> Any:
    raise error


class Spy(Mock):
    """A tracking wrapper around an optional fake implementation.

    Without a fake a spy returns None. With ``wraps`` it calls through to the
    wrapped callable until another behaviour is configured.

    Args:
        fake: Callable run on every invocation; its result is returned
        name: Name used in the spy's repr
        wraps: Callable to call through to
    """

    def __init__(
        self,
        *,
        fake: Callable[..., Any] | None = None,
        name: str | None = None,
        wraps: Callable[..., Any] | None = None,
        **kwargs: Any,
    ) -> None:
        if wraps is None:
            kwargs.setdefault("return_value", None)
        super().__init__(spec=[], name=name, wraps=wraps, **kwargs)
        self._spy_fake = fake
        self._spy_calls: list[SpyCall] = []
        self._spy_state = SpyState.ACTIVE
        self._spy_patcher: _patch[Any] | None = None

    def __call__(self, /, *args: Any, **kwargs: Any) -> Any:
        try:
            result = super().__call__(*args, **kwargs)
        except BaseException as exc:
            self._spy_calls.append(SpyCall(args, kwargs, exception=exc))
            raise
        self._spy_calls.append(SpyCall(args, kwargs, result=result))
        return result

    def _execute_mock_call(self, /, *args: Any, **kwargs: Any) -> Any:
        # The fake is called as is, whatever it is or returns
        if self._spy_fake is not None and self.side_effect is None:
            return self._spy_fake(*args, **kwargs)
        return super()._execute_mock_call(*args, **kwargs)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    @property
    def called_once(self) -> bool:
        return self.call_count == 1

    @property
    def calls(self) -> list[SpyCall]:
        """Recorded invocations in call order."""
        return list(self._spy_calls)

    @property
    def state(self) -> SpyState:
        return self._spy_state

    @property
    def is_active(self) -> bool:
        return self._spy_state is SpyState.ACTIVE

    @property
    def installed(self) -> bool:
        """Whether this spy currently replaces a member in place."""
        return self._spy_patcher is not None

    def called_with(self, *args: Any, **kwargs: Any) -> bool:
        """Check if any recorded call used exactly these arguments."""
        return call(*args, **kwargs) in self.call_args_list

    # -------------------------------------------------------------------------
    # Behaviour
    # -------------------------------------------------------------------------

    def returns(self, value: Any) -> Spy:
        """Return ``value`` from every subsequent call."""
        self.side_effect = None
        self._spy_fake = None
        self.return_value = value
        return self

    def resolves(self, value: Any) -> Spy:
        """Return a fresh coroutine resolving to ``value`` from every call."""
        return self.calls_fake(lambda *args, **kwargs: _settle(value))

    def rejects(self, error: BaseException | type[BaseException]) -> Spy:
        """Return a fresh coroutine raising ``error`` from every call."""
        return self.calls_fake(lambda *args, **kwargs: _fail(error))

    def throws(self, error: BaseException | type[BaseException]) -> Spy:
        """Raise ``error`` from every subsequent call."""
        self._spy_fake = None
        self.side_effect = error
        return self

    def calls_fake(self, fake: Callable[..., Any]) -> Spy:
        """Run ``fake`` on every subsequent call and return its result."""
        self.side_effect = None
        self._spy_fake = fake
        return self

    def calls_through(self) -> Spy:
        """Drop configured behaviour, calling the wrapped callable again."""
        self.side_effect = None
        self._spy_fake = None
        self.return_value = DEFAULT if self._mock_wraps is not None else None
        return self

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reset_history(self) -> None:
        """Forget recorded calls, keeping configured behaviour."""
        self.reset_mock()
        self._spy_calls.clear()

    def restore(self) -> None:
        """Put back the member this spy replaced, if any. Safe to repeat."""
        if self._spy_state is SpyState.RESTORED:
            return
        if self._spy_patcher is not None:
            self._spy_patcher.stop()
            self._spy_patcher = None
        self._spy_state = SpyState.RESTORED
        logger.debug("Restored %r", self)

    def _track_patch(self, patcher: _patch[Any]) -> None:
        self._spy_patcher = patcher


class MethodSpy(Spy):
    """Spy installed on a class in place of a plain function.

    Looked up through an instance it binds like the function did, so the
    instance is recorded as the first argument of every call.
    """

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return types.MethodType(self, obj)
