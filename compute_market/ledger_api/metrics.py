"""
Metrics collection for the ledger API.

HTTP traffic and ledger outcomes are exported in Prometheus format at
``/metrics``.
"""

import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, Info, generate_latest

from compute_market import config
from compute_market.ledger import Result

logger = logging.getLogger(__name__)

REQUEST_COUNT = Counter(
    "compute_market_http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "compute_market_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)

ACTIVE_REQUESTS = Gauge(
    "compute_market_http_requests_active",
    "Number of in-flight HTTP requests",
)

LEDGER_OPERATIONS = Counter(
    "compute_market_ledger_operations_total",
    "Ledger operations by outcome",
    ["operation", "outcome"],
)

UNITS_ALLOCATED = Counter(
    "compute_market_units_allocated_total",
    "Compute units allocated to jobs",
)

EARNINGS_WITHDRAWN = Counter(
    "compute_market_earnings_withdrawn_total",
    "Earnings paid out to providers",
)

API_INFO = Info(
    "compute_market_api",
    "Information about the ledger API",
)


async def metrics_middleware(request: Request, call_next: Callable) -> Response:
    """Record count and latency of every request except the scrape itself."""
    if request.url.path == "/metrics":
        return await call_next(request)

    method = request.method

    ACTIVE_REQUESTS.inc()
    start_time = time.time()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
    except Exception:
        logger.exception("Exception during request processing")
        raise
    finally:
        endpoint = _route_template(request)
        REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(time.time() - start_time)
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=status_code).inc()
        ACTIVE_REQUESTS.dec()

    return response


def _route_template(request: Request) -> str:
    """Matched route template, e.g. ``/jobs/{job_id}``."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


async def metrics_endpoint(request: Request) -> Response:
    """Expose Prometheus metrics in text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def setup_metrics(app: FastAPI) -> None:
    """
    Set up metrics collection and exposure for a FastAPI app.

    Args:
        app: The FastAPI application
    """
    API_INFO.info({
        "version": app.version,
        "title": app.title,
        "environment": config.ENVIRONMENT,
    })
    app.middleware("http")(metrics_middleware)
    app.add_route("/metrics", metrics_endpoint)
    logger.info("Prometheus metrics configured and exposed at /metrics")


def record_operation(operation: str, result: Result) -> None:
    """
    Count a ledger operation by outcome.

    Args:
        operation: Ledger method name, e.g. ``request_compute``
        result: The operation's result; errors are labelled by kind
    """
    outcome = "ok" if result.is_ok else result.error.kind
    LEDGER_OPERATIONS.labels(operation=operation, outcome=outcome).inc()


def record_allocation(resources: int) -> None:
    if resources > 0:
        UNITS_ALLOCATED.inc(resources)


def record_withdrawal(amount: int) -> None:
    if amount > 0:
        EARNINGS_WITHDRAWN.inc(amount)
