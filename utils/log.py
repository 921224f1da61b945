"""
Logging setup and HTTP request logging.

- configure_logging(app): root handler with either a plain or a JSON
  formatter (LOG_FORMAT), level from LOG_LEVEL, SQL records (logger
  "bookstore.sql") at DEBUG when LOG_SQL is on
- init_request_logging(app): one "bookstore.http" record per request with
  method, path, status, duration and the authenticated user, if any
"""
from __future__ import annotations

import json
import logging
import time

from flask import g, request

http_logger = logging.getLogger("bookstore.http")

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class StructuredLogFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        # Decimal, date and datetime parameters are logged as strings
        return json.dumps(log_data, default=str)


def configure_logging(app) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    handler = logging.StreamHandler()
    if app.config.get("LOG_FORMAT", "plain") == "json":
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    root = logging.getLogger("bookstore")
    root.handlers = [handler]
    root.setLevel(level)
    root.propagate = False

    sql_level = logging.DEBUG if app.config.get("LOG_SQL") else max(level, logging.INFO)
    logging.getLogger("bookstore.sql").setLevel(sql_level)


def init_request_logging(app) -> None:
    @app.before_request
    def _start_timer():
        g.request_started_at = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.get("request_started_at")
        duration_ms = round((time.perf_counter() - started) * 1000, 2) if started else None
        user = g.get("current_user")
        extra_data = {
            "method": request.method,
            "path": request.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
            "remote_addr": request.remote_addr,
            "user_agent": request.headers.get("User-Agent"),
        }
        if user is not None:
            extra_data["user_id"] = user.id
            extra_data["user_email"] = user.email

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        http_logger.log(
            level,
            "%s %s %s (%s ms)",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
            extra={"extra_data": extra_data},
        )
        return response
