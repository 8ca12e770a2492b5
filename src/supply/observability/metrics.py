"""Prometheus metrics for pipeline walks.

Counters live in the default registry so any exporter the host already runs
picks them up.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Walk metrics
# ---------------------------------------------------------------------------

WALKS_TOTAL = Counter(
    "supply_walks_total",
    "Total pipeline walks finished",
    ["outcome"],
)

WALK_DURATION = Histogram(
    "supply_walk_duration_seconds",
    "Time from dispatch to completion of a walk",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)

# ---------------------------------------------------------------------------
# Layer metrics
# ---------------------------------------------------------------------------

LAYERS_INVOKED = Counter(
    "supply_layers_invoked_total",
    "Total layer invocations",
    ["mode"],
)

LAYER_ERRORS = Counter(
    "supply_layer_errors_total",
    "Total walks terminated by a layer error",
)


def record_walk(outcome: str, seconds: float) -> None:
    WALKS_TOTAL.labels(outcome=outcome).inc()
    WALK_DURATION.observe(seconds)


def record_layer(mode: str) -> None:
    LAYERS_INVOKED.labels(mode=mode).inc()


def record_layer_error() -> None:
    LAYER_ERRORS.inc()
