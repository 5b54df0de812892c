"""FastAPI server setup and routes"""
import time
from typing import Optional
from fastapi import FastAPI, Response
from config import Config
from metrics.engine import MetricsEngine, default_engine
from metrics.registry import ComplexMetricRegistry, default_registry
from metrics.exporters.prometheus import CONTENT_TYPE, PrometheusExporter
from logging_config import get_logger
from app.middleware import RequestLoggingMiddleware, RequestMetricsMiddleware


logger = get_logger(__name__)


class MetricsServer:
    """FastAPI server exposing the metrics engine for scraping"""

    def __init__(self, config: Config, engine: Optional[MetricsEngine] = None,
                 registry: Optional[ComplexMetricRegistry] = None):
        self.config = config
        self.engine = engine or default_engine
        if registry is None:
            registry = default_registry if self.engine is default_engine else ComplexMetricRegistry(self.engine)
        self.registry = registry

        self.app = FastAPI(
            title="Labeled Metrics Exporter",
            version=config.service_version,
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )
        self.exporter = PrometheusExporter(self.engine)
        self.http_metric = self.registry.register_complex_map(
            config.http_metric_name,
            "HTTP requests served by the metrics exporter",
            config.latency_buckets(),
        )
        self.start_time = time.time()

        self._setup_middleware()
        self._setup_routes()

    def _setup_middleware(self):
        """Setup middleware"""
        # Last added is executed first
        self.app.add_middleware(RequestMetricsMiddleware, metric=self.http_metric)
        if self.config.enable_request_logging:
            self.app.add_middleware(RequestLoggingMiddleware)

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get('/metrics', response_class=Response)
        def get_metrics():
            """Serve metrics in Prometheus format"""
            return Response(self.exporter.export_metrics(), media_type=CONTENT_TYPE)

        @self.app.get('/health')
        def health_check():
            """Health check endpoint"""
            return {
                "status": "healthy",
                "series": self.engine.series_count(),
                "uptime_seconds": round(time.time() - self.start_time, 1),
            }

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app
