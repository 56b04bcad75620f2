"""Tests for the spy primitive."""

from __future__ import annotations

from unittest.mock import DEFAULT

import pytest

from stubkit.core.sandbox import Sandbox
from stubkit.core.spy import MethodSpy, Spy, SpyState


class TestRecording:
    """Tests for call recording."""

    def test_default_returns_none(self):
        spy = Spy()

        assert spy("x") is None
        assert spy.called_once
        assert spy.called_with("x")
        assert not spy.called_with("y")

    def test_records_outcomes_in_order(self):
        spy = Spy(fake=lambda n, **kwargs: n * 2)

        spy(1)
        spy(2, flag=True)

        assert spy.call_count == 2
        assert not spy.called_once
        assert [c.result for c in spy.calls] == [2, 4]
        assert spy.calls[1].args == (2,)
        assert spy.calls[1].kwargs == {"flag": True}

    def test_fake_error_propagates_unmodified(self):
        error = ValueError("boom")
        spy = Spy().throws(error)

        with pytest.raises(ValueError) as excinfo:
            spy("arg")

        assert excinfo.value is error
        assert spy.call_count == 1
        assert spy.calls[0].threw
        assert spy.calls[0].exception is error

    def test_unknown_attributes_are_absent(self):
        spy = Spy()

        assert not hasattr(spy, "then")
        with pytest.raises(AttributeError):
            spy.anything  # noqa: B018

    def test_attributes_can_be_set(self):
        spy = Spy()
        spy.label = "carried"

        assert spy.label == "carried"


class TestBehaviour:
    """Tests for behaviour configuration."""

    def test_returns_replaces_fake(self):
        spy = Spy(fake=lambda: "fake")

        assert spy() == "fake"
        assert spy.returns("fixed") is spy
        assert spy() == "fixed"

    def test_calls_fake(self):
        spy = Spy().calls_fake(lambda a, b: a + b)

        assert spy(2, 3) == 5

    @pytest.mark.asyncio
    async def test_resolves_returns_fresh_coroutines(self):
        spy = Spy().resolves(42)

        first = spy()
        second = spy()

        assert first is not second
        assert await first == 42
        assert await second == 42

    @pytest.mark.asyncio
    async def test_rejects(self):
        spy = Spy().rejects(KeyError("missing"))

        with pytest.raises(KeyError):
            await spy()

    def test_wrapping_spy_calls_through(self):
        spy = Spy(wraps=lambda a: a + 1)

        assert spy(1) == 2
        spy.returns(0)
        assert spy(1) == 0
        spy.calls_through()
        assert spy(1) == 2
        assert spy.call_count == 3

    def test_calls_through_without_wrapped_returns_none(self):
        spy = Spy().returns("x").calls_through()

        assert spy() is None

    def test_exception_class_fake_is_called(self):
        spy = Spy(fake=ValueError)

        result = spy("bad")

        assert isinstance(result, ValueError)
        assert result.args == ("bad",)
        assert not spy.calls[0].threw

    def test_fake_result_is_returned_verbatim(self):
        spy = Spy(fake=lambda: DEFAULT)

        assert spy() is DEFAULT

    def test_calls_fake_with_exception_class(self):
        spy = Spy().calls_fake(KeyError)

        assert isinstance(spy("k"), KeyError)

    def test_throws_replaces_fake(self):
        spy = Spy(fake=lambda: "fake").throws(RuntimeError)

        with pytest.raises(RuntimeError):
            spy()

    def test_calls_fake_replaces_throws(self):
        spy = Spy().throws(RuntimeError).calls_fake(lambda: "fake")

        assert spy() == "fake"


class TestLifecycle:
    """Tests for restore and history reset."""

    def test_restore_is_idempotent(self):
        spy = Spy()

        spy.restore()
        spy.restore()

        assert spy.state is SpyState.RESTORED
        assert not spy.is_active

    def test_new_spy_is_active(self):
        assert Spy().state is SpyState.ACTIVE

    def test_installed_while_patched(self):
        class Target:
            value = 1

        sandbox = Sandbox()
        spy = Spy()
        assert not spy.installed

        sandbox.replace(Target, "value", spy)
        assert spy.installed

        spy.restore()
        assert not spy.installed
        assert Target.value == 1

    def test_reset_history_keeps_behaviour(self):
        spy = Spy().returns(1)
        spy()

        spy.reset_history()

        assert spy.call_count == 0
        assert spy.calls == []
        assert spy() == 1


class TestMethodSpy:
    """Tests for spies installed on classes."""

    def test_binds_the_instance(self):
        class Greeter:
            pass

        spy = MethodSpy(fake=lambda self, name: f"hi {name}")
        Greeter.greet = spy
        greeter = Greeter()

        assert greeter.greet("bob") == "hi bob"
        assert spy.called_with(greeter, "bob")

    def test_class_access_returns_the_spy(self):
        class Greeter:
            pass

        spy = MethodSpy()
        Greeter.greet = spy

        assert Greeter.greet is spy
