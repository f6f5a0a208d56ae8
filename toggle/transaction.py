"""Unit of work over a DB-API connection."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager, suppress
from contextvars import ContextVar
from typing import Any, TypeVar

T = TypeVar("T")

_tx: ContextVar[Any] = ContextVar("toggle_transaction", default=None)


class TransactionError(Exception):
    """A transaction could not be completed."""


def get_tx() -> Any:
    """The transaction bound to the current context, or None."""
    return _tx.get()


@contextmanager
def inject_tx(tx: Any) -> Iterator[Any]:
    """Bind ``tx`` as the current transaction for the duration of the block."""
    token = _tx.set(tx)
    try:
        yield tx
    finally:
        _tx.reset(token)


def executor(db: Any) -> Any:
    """The current transaction if one is bound, otherwise ``db``."""
    tx = get_tx()
    return db if tx is None else tx


class UnitOfWork:
    """Runs callables inside a database transaction."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def run_in_transaction(self, fn: Callable[[], T]) -> T:
        """Call ``fn`` with the transaction bound; commit on success.

        Any exception from ``fn`` rolls back and propagates unchanged.
        A failed commit raises TransactionError.
        """
        committed = False
        try:
            with inject_tx(self.db):
                result = fn()
            try:
                self.db.commit()
            except Exception as exc:
                raise TransactionError(f"commit transaction: {exc}") from exc
            committed = True
            return result
        finally:
            if not committed:
                with suppress(Exception):
                    self.db.rollback()