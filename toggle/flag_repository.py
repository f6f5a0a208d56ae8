"""Tenant-scoped storage of flags over a DB-API connection."""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import datetime, timezone
from typing import Any

from toggle.errors import NoRowsError
from toggle.flag_model import Flag
from toggle.transaction import executor, get_tx

_SELECT = """
    SELECT f.id, f.name, f.description, f.enabled, f.rules, f.rule_logic, f.project_id,
           f.created_at, f.updated_at
    FROM flags f
    INNER JOIN projects p ON f.project_id = p.id
"""
_GET = _SELECT + " WHERE f.id = ? AND p.tenant_id = ?"
_LIST = _SELECT + " WHERE p.tenant_id = ? ORDER BY f.created_at DESC"
_LIST_BY_PROJECT = (
    _SELECT + " WHERE f.project_id = ? AND p.tenant_id = ? ORDER BY f.created_at DESC"
)
_INSERT = """
    INSERT INTO flags (id, name, description, enabled, rules, rule_logic, project_id,
                       created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""
_UPDATE = """
    UPDATE flags
    SET name = ?, description = ?, enabled = ?, rules = ?, rule_logic = ?, updated_at = ?
    WHERE id = ?
      AND project_id IN (SELECT id FROM projects WHERE tenant_id = ?)
"""
_DELETE = """
    DELETE FROM flags
    WHERE id = ?
      AND project_id IN (SELECT id FROM projects WHERE tenant_id = ?)
"""


def _dump_rules(flag: Flag) -> str:
    return json.dumps([rule.to_dict() for rule in flag.rules])


def _load_rules(raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        return json.loads(raw)
    return raw


def _row_to_flag(row: tuple[Any, ...]) -> Flag:
    fid, name, description, enabled, rules, rule_logic, project_id, created, updated = row
    return Flag.from_dict(
        {
            "id": fid,
            "name": name,
            "description": description,
            "enabled": bool(enabled),
            "rules": _load_rules(rules),
            "rule_logic": rule_logic,
            "project_id": project_id,
            "created_at": created,
            "updated_at": updated,
        }
    )


class FlagRepository:
    """Reads and writes flags, always constrained to a tenant's projects.

    Statements run on the transaction bound by the unit of work when there is
    one, otherwise on ``db``, which is then committed after each write.
    """

    def __init__(self, db: Any) -> None:
        self.db = db

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        with closing(executor(self.db).cursor()) as cursor:
            yield cursor

    def _finish_write(self) -> None:
        if get_tx() is None:
            self.db.commit()

    def create(self, flag: Flag) -> None:
        """Insert ``flag``, filling in its id and timestamps."""
        flag_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        with self._cursor() as cursor:
            cursor.execute(
                _INSERT,
                (
                    flag_id,
                    flag.name,
                    flag.description,
                    flag.enabled,
                    _dump_rules(flag),
                    flag.rule_logic,
                    flag.project_id,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        self._finish_write()
        flag.id = flag_id
        flag.created_at = now
        flag.updated_at = now

    def get_by_id(self, flag_id: str, tenant_id: str) -> Flag:
        """The flag with ``flag_id`` in the tenant; NoRowsError if absent."""
        with self._cursor() as cursor:
            cursor.execute(_GET, (flag_id, tenant_id))
            row = cursor.fetchone()
        if row is None:
            raise NoRowsError()
        return _row_to_flag(row)

    def _fetch(self, query: str, params: tuple[str, ...]) -> list[Flag]:
        with self._cursor() as cursor:
            cursor.execute(query, params)
            rows = cursor.fetchall()
        return [_row_to_flag(row) for row in rows]

    def list(self, tenant_id: str) -> list[Flag]:
        """All of the tenant's flags, newest first."""
        return self._fetch(_LIST, (tenant_id,))

    def list_by_project(self, project_id: str, tenant_id: str) -> list[Flag]:
        """The flags of one of the tenant's projects, newest first."""
        return self._fetch(_LIST_BY_PROJECT, (project_id, tenant_id))

    def update(self, flag: Flag, tenant_id: str) -> None:
        """Save ``flag``; NoRowsError if it is not the tenant's."""
        now = datetime.now(timezone.utc)
        with self._cursor() as cursor:
            cursor.execute(
                _UPDATE,
                (
                    flag.name,
                    flag.description,
                    flag.enabled,
                    _dump_rules(flag),
                    flag.rule_logic,
                    now.isoformat(),
                    flag.id,
                    tenant_id,
                ),
            )
            affected = cursor.rowcount
        self._finish_write()
        if affected == 0:
            raise NoRowsError()
        flag.updated_at = now

    def delete(self, flag_id: str, tenant_id: str) -> None:
        """Remove the flag; NoRowsError if it is not the tenant's."""
        with self._cursor() as cursor:
            cursor.execute(_DELETE, (flag_id, tenant_id))
            affected = cursor.rowcount
        self._finish_write()
        if affected == 0:
            raise NoRowsError()