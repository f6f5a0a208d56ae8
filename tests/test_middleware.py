import logging
from types import SimpleNamespace

import pytest
from flask import Flask, jsonify

from toggle.context import (
    MissingContextError,
    RequestContext,
    bind_request_context,
    current_request_context,
)
from toggle.errors import NoRowsError
from toggle.middleware import api_key_middleware, tenant_middleware

LOGGER = logging.getLogger("test.middleware")

API_KEY = "token"


class FakeTenantRepo:
    def __init__(self, memberships=None, error=None):
        self.memberships = memberships or {}
        self.error = error

    def get_membership(self, user_id, tenant_id):
        if self.error:
            raise self.error
        return self.memberships.get((user_id, tenant_id), "")


class FakeProjectRepo:
    def __init__(self, projects=None, error=None):
        self.projects = projects or {}
        self.error = error
        self.keys_seen = []

    def get_by_api_key(self, key):
        self.keys_seen.append(key)
        if self.error:
            raise self.error
        if key not in self.projects:
            raise NoRowsError()
        return self.projects[key]


def _tenant_client(repo):
    app = Flask(__name__)
    app.testing = True
    app.before_request(tenant_middleware(repo, LOGGER))

    @app.get("/test")
    def view():
        ctx = current_request_context()
        return jsonify(tenant_id=ctx.require_tenant_id(), role=ctx.role)

    return app.test_client()


def _auth(user_id, tenant_id="", role=""):
    return RequestContext().with_auth(user_id, tenant_id, role, "auth0|" + user_id)


def test_tenant_valid_tenant_id_success():
    client = _tenant_client(FakeTenantRepo({("user-1", "tenant-a"): "admin"}))
    with bind_request_context(_auth("user-1")):
        resp = client.get("/test", headers={"X-Tenant-ID": "tenant-a"})
    assert resp.status_code == 200
    assert resp.get_json() == {"tenant_id": "tenant-a", "role": "admin"}


def test_tenant_missing_header_returns_400():
    client = _tenant_client(FakeTenantRepo())
    with bind_request_context(_auth("user-1")):
        resp = client.get("/test")
    assert resp.status_code == 400
    assert "X-Tenant-ID header required" in resp.get_data(as_text=True)


def test_tenant_unauthorized_tenant_returns_403():
    repo = FakeTenantRepo(
        {("user-1", "tenant-a"): "owner", ("user-2", "tenant-b"): "owner"}
    )
    client = _tenant_client(repo)
    with bind_request_context(_auth("user-1")):
        resp = client.get("/test", headers={"X-Tenant-ID": "tenant-b"})
    assert resp.status_code == 403
    assert "Access denied" in resp.get_data(as_text=True)


def test_tenant_switching_overrides_auth_context():
    repo = FakeTenantRepo(
        {("user-1", "tenant-a"): "owner", ("user-1", "tenant-b"): "member"}
    )
    client = _tenant_client(repo)
    with bind_request_context(_auth("user-1", "tenant-a", "owner")):
        resp = client.get("/test", headers={"X-Tenant-ID": "tenant-b"})
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "tenant-b" in body
    assert "member" in body
    assert "tenant-a" not in body


def test_tenant_multiple_roles_returns_correct_role():
    repo = FakeTenantRepo(
        {("user-1", "owner-tenant"): "owner", ("user-1", "member-tenant"): "member"}
    )
    client = _tenant_client(repo)
    with bind_request_context(_auth("user-1")):
        first = client.get("/test", headers={"X-Tenant-ID": "owner-tenant"})
        second = client.get("/test", headers={"X-Tenant-ID": "member-tenant"})
    assert first.status_code == 200
    assert first.get_json()["role"] == "owner"
    assert second.status_code == 200
    assert "member" in second.get_data(as_text=True)
    assert "owner" not in second.get_data(as_text=True)


def test_tenant_invalid_tenant_id_returns_403():
    client = _tenant_client(FakeTenantRepo())
    with bind_request_context(_auth("user-1")):
        resp = client.get(
            "/test", headers={"X-Tenant-ID": "00000000-0000-0000-0000-000000000000"}
        )
    assert resp.status_code == 403
    assert "Access denied" in resp.get_data(as_text=True)


def test_tenant_repository_error_returns_500():
    client = _tenant_client(FakeTenantRepo(error=RuntimeError("db down")))
    with bind_request_context(_auth("user-1")):
        resp = client.get("/test", headers={"X-Tenant-ID": "tenant-a"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to verify tenant access"}


def test_tenant_context_restored_after_request():
    client = _tenant_client(FakeTenantRepo({("user-1", "tenant-a"): "admin"}))
    auth = _auth("user-1", "tenant-z", "viewer")
    with bind_request_context(auth):
        client.get("/test", headers={"X-Tenant-ID": "tenant-a"})
        assert current_request_context() == auth


def test_tenant_without_user_context_raises():
    client = _tenant_client(FakeTenantRepo())
    with pytest.raises(MissingContextError):
        client.get("/test", headers={"X-Tenant-ID": "tenant-a"})


def _sdk_client(repo):
    app = Flask(__name__)
    app.testing = True
    app.before_request(api_key_middleware(repo, LOGGER))

    @app.get("/sdk")
    def view():
        ctx = current_request_context()
        return jsonify(
            project_id=ctx.require_project_id(), tenant_id=ctx.require_tenant_id()
        )

    return app.test_client()


def _project_repo():
    project = SimpleNamespace(id="proj-1", tenant_id="tenant-1")
    return FakeProjectRepo({API_KEY: project})


def test_api_key_success_sets_project_and_tenant():
    repo = _project_repo()
    resp = _sdk_client(repo).get("/sdk", headers={"Authorization": "Bearer token"})
    assert resp.status_code == 200
    assert resp.get_json() == {"project_id": "proj-1", "tenant_id": "tenant-1"}
    assert repo.keys_seen == [API_KEY]


def test_api_key_missing_header():
    resp = _sdk_client(_project_repo()).get("/sdk")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "missing authorization header"}


@pytest.mark.parametrize("header", ["Basic token", "Bearer "])
def test_api_key_invalid_format(header):
    repo = _project_repo()
    resp = _sdk_client(repo).get("/sdk", headers={"Authorization": header})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "invalid authorization format"}
    assert repo.keys_seen == []


def test_api_key_unknown_key():
    resp = _sdk_client(_project_repo()).get(
        "/sdk", headers={"Authorization": "Bearer secret"}
    )
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "invalid API key"}


def test_api_key_repository_error():
    repo = FakeProjectRepo(error=RuntimeError("db down"))
    resp = _sdk_client(repo).get("/sdk", headers={"Authorization": "Bearer token"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "authentication failed"}


def test_api_key_context_not_leaked():
    _sdk_client(_project_repo()).get("/sdk", headers={"Authorization": "Bearer token"})
    assert current_request_context() == RequestContext()