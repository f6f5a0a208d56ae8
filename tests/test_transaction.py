import sqlite3

import pytest

from toggle.transaction import (
    TransactionError,
    UnitOfWork,
    executor,
    get_tx,
    inject_tx,
)


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    connection.execute("CREATE TABLE items (name TEXT)")
    connection.commit()
    yield connection
    connection.close()


def _count(connection):
    return connection.execute("SELECT COUNT(*) FROM items").fetchone()[0]


class _FailingConnection:
    def __init__(self, rollback_fails=False):
        self.rolled_back = False
        self.rollback_fails = rollback_fails

    def commit(self):
        raise RuntimeError("disk full")

    def rollback(self):
        self.rolled_back = True
        if self.rollback_fails:
            raise RuntimeError("rollback failed")


def test_commit_on_success(conn):
    uow = UnitOfWork(conn)

    def work():
        get_tx().execute("INSERT INTO items VALUES ('a')")
        return "done"

    assert uow.run_in_transaction(work) == "done"
    assert conn.in_transaction is False
    assert _count(conn) == 1


def test_rollback_on_error(conn):
    uow = UnitOfWork(conn)

    def work():
        get_tx().execute("INSERT INTO items VALUES ('a')")
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        uow.run_in_transaction(work)
    assert _count(conn) == 0


def test_tx_bound_only_inside(conn):
    uow = UnitOfWork(conn)
    seen = uow.run_in_transaction(get_tx)
    assert seen is conn
    assert get_tx() is None


def test_commit_failure_wrapped():
    fake = _FailingConnection()
    with pytest.raises(TransactionError) as info:
        UnitOfWork(fake).run_in_transaction(lambda: None)
    assert str(info.value).startswith("commit transaction:")
    assert isinstance(info.value.__cause__, RuntimeError)
    assert fake.rolled_back is True


def test_rollback_failure_does_not_mask_error():
    fake = _FailingConnection(rollback_fails=True)

    def work():
        raise KeyError("k")

    with pytest.raises(KeyError):
        UnitOfWork(fake).run_in_transaction(work)
    assert fake.rolled_back is True


def test_executor_prefers_injected_tx():
    db = object()
    tx = object()
    assert executor(db) is db
    with inject_tx(tx) as bound:
        assert bound is tx
        assert executor(db) is tx
    assert executor(db) is db