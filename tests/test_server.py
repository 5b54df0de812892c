"""Tests for FastAPI server module"""
from unittest.mock import patch
from fastapi.testclient import TestClient

from app.server import MetricsServer
from config import Config
from metrics.engine import MetricsEngine
from metrics.registry import ComplexMetricRegistry


class TestMetricsServer:
    """Test FastAPI server functionality"""

    def setup_method(self):
        """Setup test fixtures"""
        self.config = Config(enable_request_logging=False, bucket_start=0.5, bucket_factor=2, bucket_count=3)
        self.engine = MetricsEngine()
        self.registry = ComplexMetricRegistry(self.engine)
        self.server = MetricsServer(self.config, engine=self.engine, registry=self.registry)
        self.client = TestClient(self.server.get_app())

    def test_metrics_endpoint(self):
        """Test metrics endpoint serves the translated snapshot"""
        jobs = self.registry.register_complex_map("jobs", "Background jobs", [1])
        jobs.add("cron", "nightly", 1)

        response = self.client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/plain; version=0.0.4; charset=utf-8"
        assert "# HELP jobs_counter Background jobs\n# TYPE jobs_counter counter\n" in response.text
        assert 'jobs_counter{item="nightly",name="cron"} 1\n' in response.text

    def test_requests_are_instrumented(self):
        """Test completed requests show up in the HTTP complex metric"""
        self.client.get("/health")
        self.client.get("/health")

        text = self.client.get("/metrics").text

        assert 'metrics_http_counter{item="/health",name="GET"} 2\n' in text
        assert 'metrics_http_gauge{item="/health",name="GET"} 0\n' in text
        assert 'metrics_http_histogram_count{item="/health",name="GET"} 2\n' in text
        assert 'metrics_http_histogram_bucket{item="/health",name="GET",le="0.5"}' in text
        assert 'metrics_http_histogram_bucket{item="/health",name="GET",le="2"}' in text
        # The scrape itself is still in flight while the snapshot is taken.
        assert 'metrics_http_gauge{item="/metrics",name="GET"} 1\n' in text

    def test_http_metric_name_configurable(self):
        config = Config(http_metric_name="exporter_http", enable_request_logging=False)
        server = MetricsServer(config, engine=self.engine, registry=self.registry)
        client = TestClient(server.get_app())

        client.get("/health")

        assert 'exporter_http_counter{item="/health",name="GET"} 1\n' in client.get("/metrics").text

    def test_health_endpoint(self):
        """Test health endpoint reports series count and uptime"""
        self.server.start_time = 1234567890

        with patch('time.time', return_value=1234567890 + 10):
            response = self.client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["uptime_seconds"] == 10
        # Only the in-flight gauge of this request exists while it is served.
        assert data["series"] == 1

    def test_request_logging_enabled(self):
        config = Config(enable_request_logging=True)
        server = MetricsServer(config, engine=MetricsEngine())
        client = TestClient(server.get_app())

        response = client.get("/health")

        assert response.status_code == 200
        assert "X-Process-Time" in response.headers

    def test_unknown_route(self):
        response = self.client.get("/missing")
        assert response.status_code == 404
        assert 'metrics_http_counter{item="/missing",name="GET"} 1\n' in self.client.get("/metrics").text
