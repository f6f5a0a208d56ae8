"""Feature flag and targeting rule records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        return datetime.fromisoformat(text)
    raise TypeError(f"cannot read a timestamp from {type(value).__name__}")


def _format_time(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string")
    return value


@dataclass
class Rule:
    """A single targeting condition with its rollout percentage."""

    id: str = ""
    attribute: str = ""
    operator: str = ""
    value: Any = None
    rollout: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "attribute": self.attribute,
            "operator": self.operator,
            "value": self.value,
            "rollout": self.rollout,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Rule:
        if not isinstance(data, Mapping):
            raise TypeError("rule must be an object")
        rollout = data.get("rollout")
        if rollout is None:
            rollout = 0
        elif isinstance(rollout, float) and rollout.is_integer():
            rollout = int(rollout)
        elif isinstance(rollout, bool) or not isinstance(rollout, int):
            raise TypeError("rollout must be an integer")
        return cls(
            id=_string(data, "id"),
            attribute=_string(data, "attribute"),
            operator=_string(data, "operator"),
            value=data.get("value"),
            rollout=rollout,
        )


@dataclass
class Flag:
    """A feature flag belonging to a project."""

    id: str = ""
    project_id: str = ""
    name: str = ""
    description: str = ""
    enabled: bool = False
    rules: list[Rule] = field(default_factory=list)
    rule_logic: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "description": self.description,
            "enabled": self.enabled,
            "rules": [rule.to_dict() for rule in self.rules],
            "rule_logic": self.rule_logic,
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Flag:
        if not isinstance(data, Mapping):
            raise TypeError("flag must be an object")
        enabled = data.get("enabled")
        if enabled is None:
            enabled = False
        elif not isinstance(enabled, bool):
            raise TypeError("enabled must be a boolean")
        raw_rules = data.get("rules")
        if raw_rules is None:
            raw_rules = []
        elif not isinstance(raw_rules, list):
            raise TypeError("rules must be a list")
        return cls(
            id=_string(data, "id"),
            project_id=_string(data, "project_id"),
            name=_string(data, "name"),
            description=_string(data, "description"),
            enabled=enabled,
            rules=[Rule.from_dict(item) for item in raw_rules],
            rule_logic=_string(data, "rule_logic"),
            created_at=_parse_time(data.get("created_at")),
            updated_at=_parse_time(data.get("updated_at")),
        )