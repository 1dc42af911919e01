"""
Prometheus metrics for the ordering flow.

Request traffic is labelled by the acting side (distributor, retailer or
anonymous) and blueprint; order submissions are labelled by who placed them
and, for failures, by error kind and the commit stage that failed.

The /metrics endpoint should be restricted to internal network or monitoring systems only.
"""
from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY
from typing import Optional
import time
import os

from orderhub.exceptions import OrderHubError

metrics_bp = Blueprint('metrics', __name__)

# Check if running in multi-process mode (Gunicorn)
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY

_registry = registry if not MULTIPROCESS_MODE else None

# Failures raised before anything was written carry no persistence stage
PRECHECK_STAGE = 'precheck'

orderhub_requests_total = Counter(
    'orderhub_requests_total',
    'HTTP requests by acting side',
    ['role', 'blueprint', 'method', 'http_status'],
    registry=_registry
)

orderhub_request_duration_seconds = Histogram(
    'orderhub_request_duration_seconds',
    'HTTP request latency in seconds by blueprint',
    ['blueprint', 'method'],
    registry=_registry,
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

order_draft_updates_total = Counter(
    'order_draft_updates_total',
    'Changes saved to session order drafts',
    ['placed_by', 'action'],
    registry=_registry
)

orders_committed_total = Counter(
    'orders_committed_total',
    'Orders committed successfully',
    ['placed_by'],
    registry=_registry
)

order_commit_failures_total = Counter(
    'order_commit_failures_total',
    'Order submissions that failed',
    ['placed_by', 'kind', 'stage'],
    registry=_registry
)

order_value = Histogram(
    'order_value',
    'Stored total of committed orders',
    ['placed_by'],
    registry=_registry,
    buckets=(10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000)
)


def record_order_committed(placed_by: str, total) -> None:
    orders_committed_total.labels(placed_by=placed_by).inc()
    order_value.labels(placed_by=placed_by).observe(float(total or 0))


def record_order_failure(placed_by: str, error: OrderHubError) -> str:
    """Count a failed submission and return the stage label it was filed under."""
    stage = getattr(error, 'stage', None) or PRECHECK_STAGE
    order_commit_failures_total.labels(placed_by=placed_by, kind=type(error).__name__, stage=stage).inc()
    return stage


def record_draft_update(placed_by: str, action: Optional[str]) -> None:
    order_draft_updates_total.labels(placed_by=placed_by, action=action or 'unknown').inc()


def _acting_role() -> str:
    user = g.get('user')
    return user.role if user is not None else 'anonymous'


def setup_metrics_instrumentation(app):
    """
    Setup before_request and after_request hooks for automatic metrics collection.

    This should be called from app factory after app creation.
    """

    @app.before_request
    def before_request_metrics():
        g._prometheus_metrics_start_time = time.time()

    @app.after_request
    def after_request_metrics(response):
        try:
            if hasattr(g, '_prometheus_metrics_start_time'):
                duration = time.time() - g._prometheus_metrics_start_time
                blueprint = request.blueprint or 'app'

                orderhub_request_duration_seconds.labels(
                    blueprint=blueprint,
                    method=request.method
                ).observe(duration)

                orderhub_requests_total.labels(
                    role=_acting_role(),
                    blueprint=blueprint,
                    method=request.method,
                    http_status=response.status_code
                ).inc()
        except Exception as e:
            # Don't break request flow if metrics fail
            app.logger.warning(f"Failed to record metrics: {e}")

        return response


@metrics_bp.route('/metrics')
def metrics():
    """
    Prometheus metrics endpoint.

    Not authenticated; restrict by network rules in production.
    """
    data = generate_latest(registry)
    return Response(data, mimetype=CONTENT_TYPE_LATEST)
