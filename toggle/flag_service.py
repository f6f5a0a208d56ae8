"""Business rules for managing flags."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from toggle.errors import (
    InvalidInputError,
    NoRowsError,
    NotFoundError,
    ProjectNotInTenantError,
    ToggleError,
)
from toggle.flag_model import Flag, Rule


class FlagNotFoundError(ToggleError):
    """A flag was not found."""

    default_message = "flag not found"


class InvalidFlagDataError(ToggleError):
    """Flag data failed validation."""

    default_message = "invalid flag data"


def _require_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidInputError("request body must be a JSON object")
    return data


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidInputError(f"{key} must be a string")
    return value


def _required_str(data: Mapping[str, Any], key: str) -> str:
    value = _optional_str(data, key)
    if not value:
        raise InvalidInputError(f"{key} is required")
    return value


def _rules(data: Mapping[str, Any]) -> list[Rule] | None:
    raw = data.get("rules")
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise InvalidInputError("rules must be a list")
    try:
        return [Rule.from_dict(item) for item in raw]
    except TypeError as exc:
        raise InvalidInputError(str(exc)) from exc


@dataclass
class CreateRequest:
    """Body of a flag creation request."""

    project_id: str
    name: str
    description: str = ""
    rules: list[Rule] | None = None
    rule_logic: str = ""

    @classmethod
    def from_json(cls, data: Any) -> CreateRequest:
        body = _require_mapping(data)
        return cls(
            project_id=_required_str(body, "project_id"),
            name=_required_str(body, "name"),
            description=_optional_str(body, "description") or "",
            rules=_rules(body),
            rule_logic=_optional_str(body, "rule_logic") or "",
        )


@dataclass
class UpdateRequest:
    """Body of a flag update request; absent fields stay unchanged."""

    name: str | None = None
    description: str | None = None
    enabled: bool | None = None
    rules: list[Rule] | None = None
    rule_logic: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> UpdateRequest:
        body = _require_mapping(data)
        enabled = body.get("enabled")
        if enabled is not None and not isinstance(enabled, bool):
            raise InvalidInputError("enabled must be a boolean")
        return cls(
            name=_optional_str(body, "name"),
            description=_optional_str(body, "description"),
            enabled=enabled,
            rules=_rules(body),
            rule_logic=_optional_str(body, "rule_logic"),
        )


@dataclass
class FlagService:
    """Validates flag operations and delegates storage to a repository."""

    repo: Any
    validator: Any
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("toggle.flags")
    )

    def validate_flag(self, flag: Flag | None) -> None:
        """Raise InvalidFlagDataError if ``flag`` is missing or unnamed."""
        if flag is None:
            raise InvalidFlagDataError()
        if not flag.name:
            raise InvalidFlagDataError("invalid flag data: name is required")

    def create(self, flag: Flag | None, tenant_id: str) -> None:
        try:
            self.validate_flag(flag)
        except InvalidFlagDataError as exc:
            name = flag.name if flag is not None else None
            self.logger.warning("flag validation failed name=%s error=%s", name, exc)
            raise
        try:
            self.validator.validate_project_ownership(flag.project_id, tenant_id)
        except Exception as exc:
            self.logger.warning(
                "project ownership validation failed project_id=%s tenant_id=%s error=%s",
                flag.project_id,
                tenant_id,
                exc,
            )
            raise ProjectNotInTenantError() from exc
        try:
            self.repo.create(flag)
        except Exception as exc:
            self.logger.error(
                "failed to create flag name=%s project_id=%s error=%s",
                flag.name,
                flag.project_id,
                exc,
            )
            raise ToggleError(f"failed to create flag: {exc}") from exc
        self.logger.info(
            "flag created id=%s name=%s project_id=%s tenant_id=%s",
            flag.id,
            flag.name,
            flag.project_id,
            tenant_id,
        )

    def get_by_id(self, flag_id: str, tenant_id: str) -> Flag:
        if not flag_id:
            raise InvalidFlagDataError()
        try:
            return self.repo.get_by_id(flag_id, tenant_id)
        except NoRowsError as exc:
            self.logger.debug(
                "flag not found or forbidden id=%s tenant_id=%s", flag_id, tenant_id
            )
            raise NotFoundError() from exc
        except Exception as exc:
            self.logger.error(
                "failed to get flag id=%s tenant_id=%s error=%s", flag_id, tenant_id, exc
            )
            raise ToggleError(f"failed to get flag: {exc}") from exc

    def list(self, tenant_id: str) -> list[Flag]:
        try:
            flags = self.repo.list(tenant_id)
        except Exception as exc:
            self.logger.error("failed to list flags tenant_id=%s error=%s", tenant_id, exc)
            raise ToggleError(f"failed to list flags: {exc}") from exc
        return [] if flags is None else flags

    def update(self, flag: Flag | None, tenant_id: str) -> None:
        try:
            self.validate_flag(flag)
        except InvalidFlagDataError as exc:
            flag_id = flag.id if flag is not None else None
            self.logger.warning(
                "flag validation failed on update id=%s error=%s", flag_id, exc
            )
            raise
        if not flag.id:
            raise InvalidFlagDataError()
        if flag.project_id:
            try:
                self.validator.validate_project_ownership(flag.project_id, tenant_id)
            except Exception as exc:
                self.logger.warning(
                    "project ownership validation failed on update "
                    "flag_id=%s project_id=%s tenant_id=%s",
                    flag.id,
                    flag.project_id,
                    tenant_id,
                )
                raise ProjectNotInTenantError() from exc
        try:
            self.repo.update(flag, tenant_id)
        except NoRowsError as exc:
            self.logger.debug(
                "flag not found or forbidden on update id=%s tenant_id=%s",
                flag.id,
                tenant_id,
            )
            raise NotFoundError() from exc
        except Exception as exc:
            self.logger.error(
                "failed to update flag id=%s tenant_id=%s error=%s", flag.id, tenant_id, exc
            )
            raise ToggleError(f"failed to update flag: {exc}") from exc
        self.logger.info(
            "flag updated id=%s name=%s tenant_id=%s", flag.id, flag.name, tenant_id
        )

    def delete(self, flag_id: str, tenant_id: str) -> None:
        if not flag_id:
            raise InvalidFlagDataError()
        try:
            self.repo.delete(flag_id, tenant_id)
        except NoRowsError as exc:
            self.logger.debug(
                "flag not found or forbidden on delete id=%s tenant_id=%s",
                flag_id,
                tenant_id,
            )
            raise NotFoundError() from exc
        except Exception as exc:
            self.logger.error(
                "failed to delete flag id=%s tenant_id=%s error=%s", flag_id, tenant_id, exc
            )
            raise ToggleError(f"failed to delete flag: {exc}") from exc
        self.logger.info("flag deleted id=%s tenant_id=%s", flag_id, tenant_id)