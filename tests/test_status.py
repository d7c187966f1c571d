"""Unit tests for the /, /status and /health endpoints."""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from docgraph.main import app

client = TestClient(app)


class TestStatusEndpoint:
    """Test cases for the /status endpoint."""

    def test_status_endpoint_basic(self):
        """Test that /status endpoint returns correct structure."""
        response = client.get("/status")

        assert response.status_code == 200
        data = response.json()

        assert "status" in data
        assert "build" in data
        assert "sha" in data
        assert "env" in data
        assert data["status"] == "ok"

    def test_status_endpoint_with_environment_variables(self):
        """Test /status endpoint with CI-injected environment variables."""
        test_env_vars = {
            "BUILD_NUMBER": "123",
            "GIT_SHA": "abc123def456",
            "ENVIRONMENT": "production",
        }

        with patch.dict(os.environ, test_env_vars):
            response = client.get("/status")

            assert response.status_code == 200
            data = response.json()

            assert data["build"] == "123"
            assert data["sha"] == "abc123def456"
            assert data["env"] == "production"

    def test_status_endpoint_with_github_sha(self):
        """Test /status endpoint with GITHUB_SHA environment variable."""
        test_env_vars = {
            "BUILD_NUMBER": "456",
            "GITHUB_SHA": "github123sha456",
            "ENV": "staging",
        }

        with patch.dict(os.environ, test_env_vars):
            os.environ.pop("GIT_SHA", None)
            os.environ.pop("ENVIRONMENT", None)
            response = client.get("/status")

            assert response.status_code == 200
            data = response.json()

            assert data["build"] == "456"
            assert data["sha"] == "github123sha456"
            assert data["env"] == "staging"

    def test_status_endpoint_local_development(self):
        """Test /status endpoint in local development (no CI env vars)."""
        with patch.dict(os.environ, {}, clear=True):
            response = client.get("/status")

            assert response.status_code == 200
            data = response.json()

            assert data["build"] == "local-dev"
            assert data["env"] == "development"
            # SHA should be either a git hash or "local-dev"
            assert data["sha"] == "local-dev" or len(data["sha"]) >= 8

    def test_status_endpoint_priority_order(self):
        """Test that GIT_SHA takes priority over GITHUB_SHA and ENVIRONMENT over ENV."""
        test_env_vars = {
            "GIT_SHA": "priority_sha",
            "GITHUB_SHA": "fallback_sha",
            "ENVIRONMENT": "priority_env",
            "ENV": "fallback_env",
        }

        with patch.dict(os.environ, test_env_vars):
            data = client.get("/status").json()

            assert data["sha"] == "priority_sha"
            assert data["env"] == "priority_env"


class TestRootEndpoint:
    """Test cases for the / endpoint."""

    def test_root_reports_operational(self):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "operational"
        assert data["docs"] == "/docs"


class TestHealthEndpoints:
    """Test cases for the store health checks."""

    def teardown_method(self):
        for name in ("database", "graph_store"):
            if hasattr(app.state, name):
                delattr(app.state, name)

    def test_db_health_without_database(self):
        """Missing database handle reports 503."""
        response = client.get("/health/db")

        assert response.status_code == 503
        assert response.json()["db"] == "unavailable"

    def test_db_health_ok(self):
        app.state.database = SimpleNamespace(ping=AsyncMock(return_value=(True, "Database connection healthy")))

        response = client.get("/health/db")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "db": "available", "message": "Database connection healthy"}

    def test_db_health_failure(self):
        app.state.database = SimpleNamespace(ping=AsyncMock(return_value=(False, "Database query failed: boom")))

        response = client.get("/health/db")

        assert response.status_code == 503
        assert response.json()["message"] == "Database query failed: boom"

    def test_graph_health_ok(self):
        app.state.graph_store = SimpleNamespace(
            verify_connectivity=AsyncMock(return_value=(True, "Neo4j connection healthy"))
        )

        response = client.get("/health/graph")

        assert response.status_code == 200
        assert response.json()["graph"] == "available"

    def test_graph_health_failure(self):
        app.state.graph_store = SimpleNamespace(
            verify_connectivity=AsyncMock(return_value=(False, "Neo4j connectivity check failed: refused"))
        )

        response = client.get("/health/graph")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
