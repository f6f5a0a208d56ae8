"""Per-request authentication and tenancy context."""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace


class MissingContextError(LookupError):
    """A required value is absent from the request context."""


@dataclass(frozen=True)
class RequestContext:
    """Immutable set of values established by authentication middleware."""

    tenant_id: str | None = None
    role: str = ""
    user_id: str | None = None
    auth0_id: str = ""
    project_id: str | None = None

    def with_tenant(self, tenant_id: str, role: str) -> RequestContext:
        """Return a copy with tenant and role set."""
        return replace(self, tenant_id=tenant_id, role=role)

    def with_auth(
        self, user_id: str, tenant_id: str, role: str, auth0_id: str
    ) -> RequestContext:
        """Return a copy with all user authentication values set."""
        return replace(
            self, user_id=user_id, tenant_id=tenant_id, role=role, auth0_id=auth0_id
        )

    def with_sdk_auth(self, project_id: str, tenant_id: str) -> RequestContext:
        """Return a copy with SDK project and tenant set."""
        return replace(self, project_id=project_id, tenant_id=tenant_id)

    def require_tenant_id(self) -> str:
        if self.tenant_id is None:
            raise MissingContextError(
                "tenant context not found - middleware not configured correctly"
            )
        return self.tenant_id

    def require_user_id(self) -> str:
        if self.user_id is None:
            raise MissingContextError(
                "user context not found - middleware not configured correctly"
            )
        return self.user_id

    def require_project_id(self) -> str:
        if self.project_id is None:
            raise MissingContextError(
                "project context not found - SDK middleware not configured correctly"
            )
        return self.project_id


_current: ContextVar[RequestContext] = ContextVar("toggle_request_context")


def current_request_context() -> RequestContext:
    """The context bound to the running request, or an empty one."""
    return _current.get(RequestContext())


class _Binding:
    """Binding of a context; undone by ``reset`` or on leaving a with block."""

    def __init__(self, ctx: RequestContext) -> None:
        self.context = ctx
        self._token: Token[RequestContext] | None = _current.set(ctx)

    def reset(self) -> None:
        if self._token is not None:
            _current.reset(self._token)
            self._token = None

    def __enter__(self) -> RequestContext:
        return self.context

    def __exit__(self, *exc_info: object) -> None:
        self.reset()


def bind_request_context(ctx: RequestContext) -> _Binding:
    """Make ``ctx`` the current request context immediately."""
    return _Binding(ctx)