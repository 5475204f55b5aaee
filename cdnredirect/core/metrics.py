from __future__ import annotations

"""Prometheus metrics for URI conversions and signing."""

from prometheus_client import Counter, Histogram

conversions_total = Counter(
    "cdn_uri_conversions_total",
    "Value-to-URI conversions by outcome",
    labelnames=("result",),
)
sign_latency = Histogram(
    "cdn_sign_seconds",
    "Latency for signed URL generation",
    labelnames=("result",),
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)


def inc_conversion(result: str) -> None:
    conversions_total.labels(result=result).inc()


def observe_sign_seconds(result: str, seconds: float) -> None:
    sign_latency.labels(result=result).observe(seconds)


__all__ = ["inc_conversion", "observe_sign_seconds"]
