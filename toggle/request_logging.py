"""Per-request access logging for Flask applications."""

from __future__ import annotations

import logging
import time
from typing import Any

from flask import g, request


def install_request_logger(app: Any, logger: logging.Logger) -> None:
    """Log method, path, status and duration of every request on ``app``.

    The values are also attached to each record as attributes of the same
    names. Install it before other hooks so the timer starts first.
    """

    @app.before_request
    def _start_timer() -> None:
        g._toggle_request_start = time.perf_counter()

    @app.after_request
    def _log_request(response: Any) -> Any:
        start = g.get("_toggle_request_start")
        duration = 0.0 if start is None else time.perf_counter() - start
        method = request.method
        path = request.path
        status = response.status_code
        logger.info(
            "Request method=%s path=%s status=%d duration=%.6f",
            method,
            path,
            status,
            duration,
            extra={
                "method": method,
                "path": path,
                "status": status,
                "duration": duration,
            },
        )
        return response