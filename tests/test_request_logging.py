import logging

from flask import Flask

from toggle.request_logging import install_request_logger

LOGGER_NAME = "test.requests"


def _app():
    app = Flask(__name__)
    app.testing = True
    install_request_logger(app, logging.getLogger(LOGGER_NAME))

    @app.get("/ping")
    def ping():
        return "pong"

    return app


def _records(caplog):
    return [r for r in caplog.records if r.name == LOGGER_NAME]


def test_logs_successful_request(caplog):
    client = _app().test_client()
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        resp = client.get("/ping")
    assert resp.get_data(as_text=True) == "pong"
    records = _records(caplog)
    assert len(records) == 1
    record = records[0]
    assert record.method == "GET"
    assert record.path == "/ping"
    assert record.status == resp.status_code
    assert record.duration >= 0
    assert record.getMessage().startswith("Request ")


def test_logs_unknown_route_status(caplog):
    client = _app().test_client()
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        resp = client.post("/missing")
    records = _records(caplog)
    assert len(records) == 1
    assert records[0].status == resp.status_code
    assert records[0].method == "POST"
    assert records[0].path == "/missing"


def test_logs_request_aborted_by_later_hook(caplog):
    app = _app()

    @app.before_request
    def deny():
        return "denied", 403

    client = app.test_client()
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        resp = client.get("/ping")
    records = _records(caplog)
    assert resp.status_code == 403
    assert [r.status for r in records] == [403]


def test_one_record_per_request(caplog):
    client = _app().test_client()
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        client.get("/ping")
        client.get("/ping")
        client.get("/ping")
    assert len(_records(caplog)) == 3