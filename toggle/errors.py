"""Domain errors shared across the application."""

from __future__ import annotations


class ToggleError(Exception):
    """Base class for domain errors."""

    default_message = "toggle error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class NotFoundError(ToggleError):
    """A resource was not found, or the caller may not see it."""

    default_message = "resource not found"


class InvalidInputError(ToggleError):
    """Input data was invalid."""

    default_message = "invalid input"


class UnauthorizedError(ToggleError):
    """Access was not authorised."""

    default_message = "unauthorized"


class InvalidTenantError(ToggleError):
    """A resource does not belong to the given tenant."""

    default_message = "resource does not belong to tenant"


class ProjectNotInTenantError(ToggleError):
    """A project does not belong to the given tenant."""

    default_message = "project does not belong to tenant"


class NoRowsError(ToggleError):
    """A query matched no rows."""

    default_message = "sql: no rows in result set"


_NOT_FOUND_TYPES = (NotFoundError, InvalidTenantError, ProjectNotInTenantError)


def is_not_found_error(err: BaseException | None) -> bool:
    """Whether ``err`` (or an error it was raised from) maps to a 404."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, _NOT_FOUND_TYPES):
            return True
        seen.add(id(err))
        err = err.__cause__
    return False