"""Prometheus metrics for monitoring health score distribution and upstream reliability"""

from prometheus_client import Counter, Histogram

from contract_health.domain.models import HealthResult

# Health computation metrics
health_computation_counter = Counter(
    "contract_health_computations_total",
    "Total contract health computations",
    ["grade"],  # excellent | good | warning | critical
)

health_score_histogram = Histogram(
    "contract_health_score",
    "Overall contract health scores",
    buckets=[10, 20, 30, 40, 50, 65, 75, 85, 95, 100],
)

insufficient_data_counter = Counter(
    "contract_health_insufficient_data_total",
    "Health computations where at least one pillar had no applicable data",
)

invalid_input_counter = Counter(
    "contract_health_invalid_input_total",
    "Health requests rejected for malformed input",
)

# Upstream contracts API
contract_source_failures_counter = Counter(
    "contract_source_failures_total",
    "Failed contracts API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_health(result: HealthResult) -> None:
    """Record score distribution and data completeness for one computation"""
    health_computation_counter.labels(grade=result.grade.value).inc()
    health_score_histogram.observe(result.overall)

    if result.insufficient_data:
        insufficient_data_counter.inc()
