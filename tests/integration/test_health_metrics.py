"""Integration tests for /health, /healthz and /metrics endpoints."""

import pytest
from fastapi.testclient import TestClient

from backend.app.config import Settings
from backend.app.ingestion.service import IngestionService
from backend.app.main import create_app
from tests.helpers import RecordingProcessor


@pytest.fixture
def service(fast_settings: Settings) -> IngestionService:
    """Service with a manual dispatcher (no worker until lifespan starts)."""
    return IngestionService(fast_settings, RecordingProcessor(), auto_start=False)


@pytest.fixture
def client(service: IngestionService) -> TestClient:
    """Test client without lifespan: the dispatcher worker is not started."""
    return TestClient(create_app(service))


class TestHealthEndpoint:
    """Test /health and /healthz endpoints."""

    def test_health_always_ok(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_healthz_returns_503_when_dispatcher_stopped(self, client: TestClient) -> None:
        """Without lifespan the worker never started."""
        response = client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["dispatcher"] == "stopped"

    def test_healthz_returns_200_with_running_dispatcher(self, service: IngestionService) -> None:
        """Lifespan starts the worker and stops it on exit."""
        with TestClient(create_app(service)) as client:
            response = client.get("/healthz")

            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "ok"
            assert data["components"]["dispatcher"] == "running"
            assert set(data["components"]["queue"]) == {"HIGH", "MEDIUM", "LOW"}

        assert not service.dispatcher.is_running

    def test_healthz_reports_queue_depth(
        self, client: TestClient, service: IngestionService
    ) -> None:
        service.submit([1, 2, 3, 4], "LOW")
        service.submit([5], "HIGH")

        data = client.get("/healthz").json()

        assert data["components"]["queue"] == {"HIGH": 1, "MEDIUM": 0, "LOW": 2}
        assert data["components"]["ingestions"] == 2
        assert data["components"]["busy"] is False


class TestMetricsEndpoint:
    """Test /metrics endpoint."""

    def test_metrics_returns_prometheus_format(self, client: TestClient) -> None:
        """Test /metrics returns Prometheus text format."""
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "# HELP" in response.text

    @pytest.mark.asyncio
    async def test_metrics_include_dispatch_metrics(self, service: IngestionService) -> None:
        """Dispatching a chunk shows up in the scrape."""
        service.submit([1, 2, 3], "MEDIUM")
        await service.dispatcher.dispatch_once()

        client = TestClient(create_app(service))
        text = client.get("/metrics").text

        assert 'chunks_dispatched_total{priority="MEDIUM"}' in text
        assert "unit_latency_ms" in text
        assert "scheduler_queue_depth" in text
        assert "dispatch_loop_errors_total" in text


class TestRootEndpoint:
    """Test root endpoint."""

    def test_root_returns_api_info(self, client: TestClient) -> None:
        """Test root endpoint returns API information."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Welcome to the Data Ingestion API"
        assert data["endpoints"]["status"] == "/status/{ingestion_id} (GET)"

    def test_cors_allows_ui_origin(self, client: TestClient) -> None:
        response = client.options(
            "/ingest",
            headers={
                "Origin": "http://localhost:8501",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:8501"
