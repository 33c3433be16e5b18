import logging
import sys
from typing import Final
from collections.abc import Mapping
from logging import LoggerAdapter, LogRecord
from typing_extensions import override
from fastapi import Request

_LOG_FORMAT: Final[str] = (
    "%(asctime)s %(levelname)s %(name)s :: %(message)s "
    "[req=%(request_id)s route=%(route)s]"
)

# Servers log through our handler; alembic and SQLAlchemy follow their own level.
_SERVER_LOGGERS: Final[tuple[str, ...]] = ("uvicorn", "uvicorn.error", "uvicorn.access")
_SQL_LOGGER: Final[str] = "sqlalchemy.engine"
_MIGRATION_LOGGER: Final[str] = "alembic"


class RequestLogFilter(logging.Filter):
    """
    Ensures every record has request_id and route keys.
    """

    @override
    def filter(self, record: LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        if not hasattr(record, "route"):
            record.route = "-"
        return True


def resolve_level(level: int | str) -> int:
    """Turn a configured level ("info", "WARNING", 10) into a logging level."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"unknown log level: {level!r}")
    return resolved


def setup_logging(level: int | str = logging.INFO, log_sql: bool = False) -> None:
    """
    Configure root/uvicorn loggers (request_id/route).

    SQL statements are echoed at INFO only when ``log_sql`` is set; otherwise the
    engine logger stays at WARNING so bound author values are not written out.
    """
    level = resolve_level(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.NOTSET)
    handler.addFilter(RequestLogFilter())
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    for name in _SERVER_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.setLevel(level)
        lg.addHandler(handler)
        lg.propagate = False

    logging.getLogger(_SQL_LOGGER).setLevel(logging.INFO if log_sql else logging.WARNING)
    logging.getLogger(_MIGRATION_LOGGER).setLevel(level)


def _route_of(request: Request) -> str:
    # Path template ("/authors/{author_id}") once routing matched, raw path before.
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    return f"{request.method} {path}"


def get_logger(
    name: str,
    request: Request | None = None
) -> LoggerAdapter[logging.Logger]:
    """
    Attach request context (request_id, route).
    Usage: logger = get_logger(__name__, request)
    """
    extra: Mapping[str, str] = {}
    if request is not None:
        extra = {
            "request_id": getattr(request.state, "correlation_id", "-"),
            "route": _route_of(request),
        }
    return LoggerAdapter(logging.getLogger(name), extra)
