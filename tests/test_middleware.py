from __future__ import annotations

import logging
import uuid
from fastapi import status
from typing import TYPE_CHECKING
from unittest.mock import Mock

import pytest

from app.core.logging import RequestLogFilter, get_logger, resolve_level, setup_logging

if TYPE_CHECKING:
    from fastapi.testclient import TestClient


class TestCorrelationIdMiddleware:
    """Test correlation id middleware functionality."""

    def test_correlation_id_echoed(
        self, test_client: TestClient, headers_with_correlation: dict[str, str]
    ) -> None:
        response = test_client.get("/authors", headers=headers_with_correlation)
        assert response.headers["X-Request-ID"] == headers_with_correlation["X-Request-ID"]

    def test_correlation_id_generated(self, test_client: TestClient) -> None:
        response = test_client.get("/authors")
        generated = response.headers["X-Request-ID"]
        assert uuid.UUID(generated)

    def test_correlation_id_on_errors(self, test_client: TestClient) -> None:
        response = test_client.get("/authors/abc", headers={"X-Request-ID": "req-42"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.headers["X-Request-ID"] == "req-42"

    def test_correlation_id_on_success(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/authors", json={"name": "n", "bio": "b"}, headers={"X-Request-ID": "req-7"}
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.headers["X-Request-ID"] == "req-7"


class TestLogging:
    """Test logging helpers."""

    def test_filter_adds_defaults(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert RequestLogFilter().filter(record) is True
        assert record.request_id == "-"
        assert record.route == "-"

    def test_filter_keeps_existing_request_id(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        record.request_id = "abc"

        RequestLogFilter().filter(record)

        assert record.request_id == "abc"

    def test_get_logger_with_matched_route(self) -> None:
        request = Mock()
        request.state.correlation_id = "corr-1"
        request.method = "PATCH"
        request.scope = {"route": Mock(path="/authors/{author_id}")}

        logger = get_logger("test", request)

        assert logger.extra == {"request_id": "corr-1", "route": "PATCH /authors/{author_id}"}

    def test_get_logger_before_routing_uses_raw_path(self) -> None:
        request = Mock()
        request.state.correlation_id = "corr-2"
        request.method = "GET"
        request.scope = {}
        request.url.path = "/authors/7"

        assert get_logger("test", request).extra["route"] == "GET /authors/7"

    def test_get_logger_without_request(self) -> None:
        assert get_logger("test").extra == {}

    @pytest.mark.parametrize(
        "configured, expected",
        [("info", logging.INFO), (" WARNING ", logging.WARNING), (logging.DEBUG, logging.DEBUG)],
    )
    def test_resolve_level(self, configured, expected) -> None:
        assert resolve_level(configured) == expected

    def test_resolve_level_rejects_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="verbose"):
            resolve_level("verbose")

    def test_setup_logging_installs_single_handler(self) -> None:
        setup_logging("warning")
        setup_logging(logging.WARNING)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert any(isinstance(f, RequestLogFilter) for f in root.handlers[0].filters)
        assert logging.getLogger("uvicorn.access").handlers == root.handlers

    def test_setup_logging_sql_echo(self) -> None:
        setup_logging(logging.WARNING, log_sql=True)
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO

        setup_logging(logging.DEBUG)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("alembic").level == logging.DEBUG

        setup_logging(logging.WARNING)

    def test_request_line_carries_route(
        self, test_client: TestClient, sample_author: dict, caplog
    ) -> None:
        with caplog.at_level(logging.INFO, logger="app.api.routes.authors"):
            test_client.get("/authors", headers={"X-Request-ID": "req-9"})

        records = [r for r in caplog.records if r.getMessage() == "Listing authors"]
        assert records
        assert records[0].request_id == "req-9"
        assert records[0].route == "GET /authors"
