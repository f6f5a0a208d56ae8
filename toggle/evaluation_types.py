"""Request and response bodies for flag evaluation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from toggle.errors import InvalidInputError


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidInputError(f"{what} must be a JSON object")
    return data


@dataclass
class EvaluationContext:
    """The user and attributes a flag is evaluated for."""

    user_id: str
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> EvaluationContext:
        body = _require_mapping(data, "context")
        user_id = body.get("user_id")
        if user_id is not None and not isinstance(user_id, str):
            raise InvalidInputError("user_id must be a string")
        if not user_id:
            raise InvalidInputError("user_id is required")
        attributes = body.get("attributes")
        if attributes is None:
            attributes = {}
        elif not isinstance(attributes, Mapping):
            raise InvalidInputError("attributes must be an object")
        return cls(user_id=user_id, attributes=dict(attributes))


def _context_from(data: Any) -> EvaluationContext:
    body = _require_mapping(data, "request body")
    if body.get("context") is None:
        raise InvalidInputError("context is required")
    return EvaluationContext.from_json(body["context"])


@dataclass
class EvaluationRequest:
    """Bulk evaluation request sent by an SDK."""

    context: EvaluationContext

    @classmethod
    def from_json(cls, data: Any) -> EvaluationRequest:
        return cls(context=_context_from(data))


@dataclass
class EvaluationResponse:
    """The state of every flag for one user, keyed by flag id."""

    flags: dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"flags": dict(self.flags)}


@dataclass
class SingleEvaluationRequest:
    """Request to evaluate one flag."""

    context: EvaluationContext

    @classmethod
    def from_json(cls, data: Any) -> SingleEvaluationRequest:
        return cls(context=_context_from(data))


@dataclass
class SingleEvaluationResponse:
    """The result of evaluating one flag."""

    enabled: bool
    flag_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "flag_id": self.flag_id}