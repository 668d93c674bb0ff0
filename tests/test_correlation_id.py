# tests/test_correlation_id.py
"""
Tests for correlation ID middleware and context management.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from twr_engine.main import app
from twr_engine.middleware import CORRELATION_ID_HEADER, REQUEST_ID_HEADER
from twr_engine.utils.context import clear_correlation_id, get_correlation_id, set_correlation_id


class TestCorrelationIdContext:
    """Tests for correlation ID context functions."""

    def test_get_returns_none_when_not_set(self):
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_set_and_get_correlation_id(self):
        set_correlation_id("test-correlation-123")
        assert get_correlation_id() == "test-correlation-123"
        clear_correlation_id()

    def test_clear_correlation_id(self):
        set_correlation_id("test-correlation-456")
        clear_correlation_id()
        assert get_correlation_id() is None


class TestCorrelationIdMiddleware:
    """Tests for correlation ID middleware."""

    @pytest.fixture
    def client(self) -> TestClient:
        with TestClient(app) as test_client:
            yield test_client

    def test_echoes_correlation_id_header(self, client):
        response = client.get("/health", headers={CORRELATION_ID_HEADER: "trace-abc"})
        assert response.headers[CORRELATION_ID_HEADER] == "trace-abc"

    def test_falls_back_to_request_id(self, client):
        response = client.get("/health", headers={REQUEST_ID_HEADER: "req-789"})
        assert response.headers[CORRELATION_ID_HEADER] == "req-789"

    def test_correlation_id_wins_over_request_id(self, client):
        response = client.get(
            "/health",
            headers={CORRELATION_ID_HEADER: "corr-1", REQUEST_ID_HEADER: "req-1"},
        )
        assert response.headers[CORRELATION_ID_HEADER] == "corr-1"

    def test_generates_uuid_when_absent(self, client):
        response = client.get("/health")
        generated = response.headers[CORRELATION_ID_HEADER]
        assert str(uuid.UUID(generated)) == generated

    def test_unique_per_request(self, client):
        first = client.get("/health").headers[CORRELATION_ID_HEADER]
        second = client.get("/health").headers[CORRELATION_ID_HEADER]
        assert first != second

    def test_header_on_error_responses(self, client):
        response = client.get("/does-not-exist", headers={CORRELATION_ID_HEADER: "err-1"})
        assert response.status_code == 404
        assert response.headers[CORRELATION_ID_HEADER] == "err-1"


class TestHealth:
    """Tests for GET /health."""

    def test_health(self):
        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
