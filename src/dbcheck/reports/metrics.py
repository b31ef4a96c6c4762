# src/dbcheck/reports/metrics.py
"""
Prometheus exposition of PolicyResults.

Each result becomes one gauge in a private registry: labelled results set the
gauge for their single label set, plain results set the bare gauge.
"""

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from dbcheck.core.models import PolicyResult


def build_registry(results: dict[str, PolicyResult]) -> CollectorRegistry:
    registry = CollectorRegistry()
    for result in results.values():
        help_text = result.description or result.name
        if result.labels:
            gauge = Gauge(result.name, help_text, list(result.labels), registry=registry)
            gauge.labels(**result.labels).set(result.value)
        else:
            Gauge(result.name, help_text, registry=registry).set(result.value)
    return registry


def render_metrics(results: dict[str, PolicyResult]) -> str:
    return generate_latest(build_registry(results)).decode("utf-8")
