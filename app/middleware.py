"""HTTP middleware for the labeled metrics exporter"""
import time
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from metrics.registry import ComplexMetric
from logging_config import get_logger


logger = get_logger(__name__)


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Records every request in a complex metric keyed by (method, path).

    The gauge tracks in-flight requests, the counter completed requests and
    the histogram request durations in seconds.
    """

    def __init__(self, app, metric: ComplexMetric):
        super().__init__(app)
        self.metric = metric

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        method = request.method
        path = request.url.path
        start_time = time.perf_counter()

        self.metric.add(method, path, gauge_delta=1)
        try:
            return await call_next(request)
        finally:
            self.metric.add(
                method,
                path,
                counter_delta=1,
                gauge_delta=-1,
                duration=time.perf_counter() - start_time,
            )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log HTTP requests"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "HTTP request failed",
                method=request.method,
                url=str(request.url),
                error=str(e),
                process_time_seconds=round(process_time, 3),
                client_ip=request.client.host if request.client else None,
                event_type="http_request_error",
                exc_info=True
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            "HTTP request completed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            process_time_seconds=round(process_time, 3),
            client_ip=request.client.host if request.client else None,
            event_type="http_request_complete"
        )
        response.headers["X-Process-Time"] = str(round(process_time, 3))
        return response
