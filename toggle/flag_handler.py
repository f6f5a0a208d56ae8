"""HTTP endpoints for managing flags."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request

from toggle.context import current_request_context
from toggle.errors import InvalidInputError, is_not_found_error
from toggle.flag_model import Flag
from toggle.flag_service import CreateRequest, InvalidFlagDataError, UpdateRequest


def _error(status: int, message: str) -> tuple[Any, int]:
    return jsonify({"error": message}), status


def _caused_by(exc: BaseException | None, kind: type[BaseException]) -> bool:
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, kind):
            return True
        seen.add(id(exc))
        exc = exc.__cause__
    return False


def _body() -> Any:
    return request.get_json(force=True, silent=True)


class FlagHandler:
    """Flask views over a flag service, scoped to the request's tenant."""

    def __init__(self, service: Any) -> None:
        self.service = service

    def register_routes(self, app: Any) -> None:
        """Attach the flag routes to a Flask app or blueprint."""
        app.add_url_rule("/flags", "create_flag", self.create, methods=["POST"])
        app.add_url_rule("/flags", "list_flags", self.list, methods=["GET"])
        app.add_url_rule("/flags/<flag_id>", "get_flag", self.get, methods=["GET"])
        app.add_url_rule("/flags/<flag_id>", "update_flag", self.update, methods=["PUT"])
        app.add_url_rule(
            "/flags/<flag_id>/toggle", "toggle_flag", self.toggle, methods=["PATCH"]
        )
        app.add_url_rule(
            "/flags/<flag_id>", "delete_flag", self.delete, methods=["DELETE"]
        )

    def create(self) -> Any:
        try:
            req = CreateRequest.from_json(_body())
        except InvalidInputError as exc:
            return _error(400, str(exc))

        tenant_id = current_request_context().require_tenant_id()

        flag = Flag(
            project_id=req.project_id,
            name=req.name,
            description=req.description,
            enabled=False,
            rules=list(req.rules) if req.rules is not None else [],
            rule_logic=req.rule_logic or "AND",
        )

        try:
            self.service.create(flag, tenant_id)
        except Exception as exc:
            if _caused_by(exc, InvalidFlagDataError):
                return _error(400, str(exc))
            if is_not_found_error(exc):
                return _error(404, "project not found")
            return _error(500, "failed to create flag")

        return jsonify(flag.to_dict()), 201

    def list(self) -> Any:
        tenant_id = current_request_context().require_tenant_id()
        try:
            flags = self.service.list(tenant_id)
        except Exception:
            return _error(500, "failed to list flags")
        return jsonify([flag.to_dict() for flag in flags]), 200

    def _fetch(self, flag_id: str, tenant_id: str) -> Flag | tuple[Any, int]:
        try:
            return self.service.get_by_id(flag_id, tenant_id)
        except Exception as exc:
            if is_not_found_error(exc):
                return _error(404, "flag not found")
            return _error(500, "failed to get flag")

    def get(self, flag_id: str) -> Any:
        tenant_id = current_request_context().require_tenant_id()
        found = self._fetch(flag_id, tenant_id)
        if not isinstance(found, Flag):
            return found
        return jsonify(found.to_dict()), 200

    def update(self, flag_id: str) -> Any:
        tenant_id = current_request_context().require_tenant_id()
        try:
            req = UpdateRequest.from_json(_body())
        except InvalidInputError as exc:
            return _error(400, str(exc))

        found = self._fetch(flag_id, tenant_id)
        if not isinstance(found, Flag):
            return found
        flag = found

        if req.name is not None:
            flag.name = req.name
        if req.description is not None:
            flag.description = req.description
        if req.enabled is not None:
            flag.enabled = req.enabled
        if req.rules is not None:
            flag.rules = req.rules
        if req.rule_logic is not None:
            flag.rule_logic = req.rule_logic

        try:
            self.service.update(flag, tenant_id)
        except Exception as exc:
            if _caused_by(exc, InvalidFlagDataError):
                return _error(400, str(exc))
            if is_not_found_error(exc):
                return _error(404, "flag not found")
            return _error(500, "failed to update flag")

        return jsonify(flag.to_dict()), 200

    def toggle(self, flag_id: str) -> Any:
        tenant_id = current_request_context().require_tenant_id()
        found = self._fetch(flag_id, tenant_id)
        if not isinstance(found, Flag):
            return found
        flag = found
        flag.enabled = not flag.enabled

        try:
            self.service.update(flag, tenant_id)
        except Exception:
            return _error(500, "failed to toggle flag")

        return jsonify(flag.to_dict()), 200

    def delete(self, flag_id: str) -> Any:
        tenant_id = current_request_context().require_tenant_id()
        try:
            self.service.delete(flag_id, tenant_id)
        except Exception as exc:
            if is_not_found_error(exc):
                return _error(404, "flag not found")
            return _error(500, "failed to delete flag")
        return "", 204