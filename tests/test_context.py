import pytest

from toggle.context import (
    MissingContextError,
    RequestContext,
    bind_request_context,
    current_request_context,
)


def test_empty_context_raises_on_require():
    ctx = RequestContext()
    with pytest.raises(MissingContextError):
        ctx.require_tenant_id()
    with pytest.raises(MissingContextError):
        ctx.require_user_id()
    with pytest.raises(MissingContextError):
        ctx.require_project_id()


def test_empty_context_defaults():
    ctx = RequestContext()
    assert ctx.role == ""
    assert ctx.auth0_id == ""


def test_with_auth_sets_everything():
    ctx = RequestContext().with_auth("u1", "t1", "admin", "a1")
    assert ctx.require_user_id() == "u1"
    assert ctx.require_tenant_id() == "t1"
    assert ctx.role == "admin"
    assert ctx.auth0_id == "a1"


def test_with_tenant_overrides_tenant_and_role_only():
    base = RequestContext().with_auth("u1", "t1", "owner", "a1")
    switched = base.with_tenant("t2", "member")
    assert switched.require_tenant_id() == "t2"
    assert switched.role == "member"
    assert switched.require_user_id() == "u1"
    assert switched.auth0_id == "a1"
    assert base.require_tenant_id() == "t1"


def test_empty_tenant_is_still_present():
    ctx = RequestContext().with_auth("u1", "", "", "a1")
    assert ctx.require_tenant_id() == ""


def test_with_sdk_auth():
    ctx = RequestContext().with_sdk_auth("p1", "t1")
    assert ctx.require_project_id() == "p1"
    assert ctx.require_tenant_id() == "t1"
    with pytest.raises(MissingContextError):
        ctx.require_user_id()


def test_bind_as_context_manager_restores():
    ctx = RequestContext().with_sdk_auth("p1", "t1")
    with bind_request_context(ctx) as bound:
        assert bound is ctx
        assert current_request_context() is ctx
    assert current_request_context() == RequestContext()


def test_bind_and_reset():
    ctx = RequestContext().with_tenant("t9", "member")
    binding = bind_request_context(ctx)
    assert current_request_context().require_tenant_id() == "t9"
    binding.reset()
    binding.reset()
    assert current_request_context().tenant_id is None