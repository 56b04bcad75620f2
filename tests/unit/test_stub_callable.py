"""Tests for stub_callable."""

from __future__ import annotations

import copy

import pytest

from stubkit import CallableStub, Sandbox, Spy, bound, stub_callable
from stubkit.stubs.members import table_of


class TestStubCallable:
    """Tests for callable stubs with named members."""

    def test_callable_with_members(self, sandbox: Sandbox):
        stub = stub_callable(sandbox, {"foo": lambda: "ret2", "bar": True}, lambda: "ret1")

        assert stub() == "ret1"
        assert stub.foo() == "ret2"
        assert stub.called_once
        assert stub.foo.called_once
        assert stub.bar is True

    def test_exception_class_as_fake(self, sandbox: Sandbox):
        stub = stub_callable(sandbox, None, ValueError)

        result = stub("x")

        assert isinstance(result, ValueError)
        assert stub.called_with("x")

    def test_no_members_or_fake(self, sandbox: Sandbox):
        stub = stub_callable(sandbox)

        assert stub() is None
        assert stub.called_once

    def test_histories_are_independent(self, sandbox: Sandbox):
        stub = stub_callable(sandbox, fake=lambda: "call")

        stub()
        stub()
        stub.member()

        assert stub.call_count == 2
        assert stub.member.call_count == 1
        assert [c.result for c in stub.calls] == ["call", "call"]

    def test_owned_by_sandbox(self, sandbox: Sandbox):
        stub = stub_callable(sandbox)

        assert isinstance(stub, CallableStub)
        assert isinstance(stub, Spy)
        assert stub in sandbox.spies

    def test_members_materialize_once(self, sandbox: Sandbox):
        stub = stub_callable(sandbox)

        assert stub.member is stub.member
        assert stub.member in sandbox.spies

    def test_spy_api_shadows_members(self, sandbox: Sandbox):
        stub = stub_callable(sandbox, {"foo": lambda: 1})

        stub.returns("configured")

        assert stub() == "configured"
        assert stub.foo() == 1
        assert stub.return_value == "configured"

    def test_assignment_seeds_member(self, sandbox: Sandbox):
        stub = stub_callable(sandbox)

        stub.limit = 10

        assert stub.limit == 10
        assert table_of(stub).seeded() == {"limit": 10}

    def test_spy_attributes_stay_on_the_spy(self, sandbox: Sandbox):
        stub = stub_callable(sandbox)

        stub.return_value = "direct"

        assert stub() == "direct"
        assert "return_value" not in table_of(stub)

    def test_delete_member(self, sandbox: Sandbox):
        stub = stub_callable(sandbox)
        first = stub.member

        del stub.member

        assert stub.member is not first

    def test_dir_lists_members(self, sandbox: Sandbox):
        stub = stub_callable(sandbox, {"foo": 1})

        assert "foo" in dir(stub)

    def test_identity_sensitive_members_are_absent(self, sandbox: Sandbox):
        stub = stub_callable(sandbox)

        assert not hasattr(stub, "then")
        assert not hasattr(stub, "_is_coroutine")

    def test_bound_receives_the_stub(self, sandbox: Sandbox):
        stub = stub_callable(sandbox, {"me": bound(lambda self: self)})

        assert stub.me() is stub

    def test_reset_history(self, sandbox: Sandbox):
        stub = stub_callable(sandbox, {"foo": lambda: 1})
        stub()
        stub.foo()

        sandbox.reset_history()

        assert stub.call_count == 0
        assert stub.foo.call_count == 0
        assert stub.calls == []

    @pytest.mark.parametrize("name", ["__call__", "__get__", "__getattr__"])
    def test_reserved_members(self, sandbox: Sandbox, name):
        with pytest.raises(TypeError, match="cannot be overridden"):
            stub_callable(sandbox, {name: lambda: None})

    def test_copy_is_the_stub(self, sandbox: Sandbox):
        stub = stub_callable(sandbox, {"foo": 1})

        assert copy.copy(stub) is stub
        assert copy.deepcopy([stub])[0] is stub

    def test_spy_override_registered_once(self, sandbox: Sandbox):
        member = Spy()
        sandbox.register(member)

        stub_callable(sandbox, {"member": member})

        assert sum(owned is member for owned in sandbox.spies) == 1

    def test_label_from_fake(self, sandbox: Sandbox):
        def read_config():
            return {}

        stub = stub_callable(sandbox, fake=read_config)

        assert "read_config" in repr(stub)
        assert table_of(stub).label == "read_config"
