"""Request hooks that authenticate SDK calls and select the active tenant."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from flask import after_this_request, g, jsonify, request

from toggle.context import RequestContext, bind_request_context, current_request_context
from toggle.errors import NoRowsError

Hook = Callable[[], Any]

_BEARER_PREFIX = "Bearer "


def _error(status: int, message: str) -> tuple[Any, int]:
    return jsonify({"error": message}), status


def _bind_for_request(ctx: RequestContext) -> None:
    """Make ``ctx`` current until the response is produced.

    Only the first binding of a request is undone, which restores the value
    that was current before the request began.
    """
    binding = bind_request_context(ctx)
    if "_toggle_context_binding" in g:
        return
    g._toggle_context_binding = binding

    @after_this_request
    def _restore(response: Any) -> Any:
        binding.reset()
        return response


def api_key_middleware(project_repo: Any, logger: logging.Logger) -> Hook:
    """A ``before_request`` hook that authenticates by project API key.

    On success the project and its tenant become part of the request context.
    """

    def hook() -> Any:
        path = request.path
        auth_header = request.headers.get("Authorization", "")
        if not auth_header:
            logger.debug("SDK request missing authorization header path=%s", path)
            return _error(401, "missing authorization header")

        bearer_value = auth_header.removeprefix(_BEARER_PREFIX)
        if bearer_value == auth_header or not bearer_value:
            logger.debug("invalid authorization header format path=%s", path)
            return _error(401, "invalid authorization format")

        try:
            project = project_repo.get_by_api_key(bearer_value)
        except NoRowsError:
            logger.warning("invalid API key path=%s", path)
            return _error(401, "invalid API key")
        except Exception as exc:
            logger.error("failed to validate API key error=%s", exc)
            return _error(500, "authentication failed")

        _bind_for_request(
            current_request_context().with_sdk_auth(project.id, project.tenant_id)
        )
        logger.debug(
            "SDK request authenticated project_id=%s tenant_id=%s",
            project.id,
            project.tenant_id,
        )
        return None

    return hook


def tenant_middleware(tenant_repo: Any, logger: logging.Logger) -> Hook:
    """A ``before_request`` hook that switches to the tenant in X-Tenant-ID.

    It must run after user authentication; the tenant and role it sets
    replace those chosen by authentication.
    """

    def hook() -> Any:
        user_id = current_request_context().require_user_id()

        tenant_id = request.headers.get("X-Tenant-ID", "")
        if not tenant_id:
            return _error(400, "X-Tenant-ID header required")

        try:
            role = tenant_repo.get_membership(user_id, tenant_id)
        except Exception as exc:
            logger.error(
                "tenant middleware: failed to verify tenant access "
                "user_id=%s tenant_id=%s error=%s",
                user_id,
                tenant_id,
                exc,
            )
            return _error(500, "Failed to verify tenant access")

        if not role:
            logger.warning(
                "tenant middleware: user denied access to tenant user_id=%s tenant_id=%s",
                user_id,
                tenant_id,
            )
            return _error(403, "Access denied to this tenant")

        _bind_for_request(current_request_context().with_tenant(tenant_id, role))
        logger.debug(
            "tenant middleware: tenant context set user_id=%s tenant_id=%s role=%s",
            user_id,
            tenant_id,
            role,
        )
        return None

    return hook