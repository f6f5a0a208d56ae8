"""Tenant ownership checks."""

from __future__ import annotations

from typing import Any

from toggle.errors import InvalidTenantError, ProjectNotInTenantError

_PROJECT_OWNED = (
    "SELECT EXISTS(SELECT 1 FROM projects WHERE id = ? AND tenant_id = ?)"
)
_TENANT_EXISTS = "SELECT EXISTS(SELECT 1 FROM tenants WHERE id = ?)"


class TenantValidator:
    """Checks tenant ownership against a DB-API connection."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def _exists(self, query: str, params: tuple[str, ...]) -> bool:
        cursor = self.db.cursor()
        try:
            cursor.execute(query, params)
            row = cursor.fetchone()
        finally:
            cursor.close()
        return bool(row and row[0])

    def validate_project_ownership(self, project_id: str, tenant_id: str) -> None:
        """Raise ProjectNotInTenantError unless the project belongs to the tenant.

        The same error is raised whether the project is missing or owned by
        another tenant, so its existence is not revealed.
        """
        if not self._exists(_PROJECT_OWNED, (project_id, tenant_id)):
            raise ProjectNotInTenantError()

    def validate_tenant_exists(self, tenant_id: str) -> None:
        """Raise InvalidTenantError unless the tenant exists."""
        if not self._exists(_TENANT_EXISTS, (tenant_id,)):
            raise InvalidTenantError()