"""HTTP endpoints used by SDKs to evaluate flags."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request

from toggle.context import current_request_context
from toggle.errors import InvalidInputError
from toggle.evaluation_types import EvaluationRequest, SingleEvaluationRequest


def _error(status: int, message: str) -> tuple[Any, int]:
    return jsonify({"error": message}), status


def _body() -> Any:
    return request.get_json(force=True, silent=True)


class EvaluationHandler:
    """Flask views over an evaluation service, scoped by SDK authentication."""

    def __init__(self, service: Any) -> None:
        self.service = service

    def register_routes(self, app: Any) -> None:
        """Attach the evaluation routes to a Flask app or blueprint."""
        app.add_url_rule(
            "/evaluate", "evaluate_all", self.evaluate_all, methods=["POST"]
        )
        app.add_url_rule(
            "/flags/<flag_id>/evaluate",
            "evaluate_flag",
            self.evaluate_single,
            methods=["POST"],
        )

    def evaluate_all(self) -> Any:
        try:
            req = EvaluationRequest.from_json(_body())
        except InvalidInputError as exc:
            return _error(400, str(exc))

        ctx = current_request_context()
        project_id = ctx.require_project_id()
        tenant_id = ctx.require_tenant_id()

        try:
            result = self.service.evaluate_all(project_id, tenant_id, req.context)
        except Exception:
            return _error(500, "evaluation failed")
        return jsonify(result.to_dict()), 200

    def evaluate_single(self, flag_id: str) -> Any:
        try:
            req = SingleEvaluationRequest.from_json(_body())
        except InvalidInputError as exc:
            return _error(400, str(exc))

        tenant_id = current_request_context().require_tenant_id()

        try:
            result = self.service.evaluate_single(flag_id, tenant_id, req.context)
        except Exception:
            return _error(404, "flag not found")
        return jsonify(result.to_dict()), 200