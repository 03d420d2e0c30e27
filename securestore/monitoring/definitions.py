"""Prometheus metric definitions."""

from prometheus_client import Counter, Gauge, Histogram

# ============================================================
# FACADE METRICS
# ============================================================

SECURE_STORE_OPERATIONS = Counter(
    "secure_store_operations_total",
    "Secure store operations",
    ["operation", "backend", "status"],
)

SECURE_STORE_LATENCY = Histogram(
    "secure_store_operation_latency_seconds",
    "Time spent in the active backend per operation",
    ["operation", "backend"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# ============================================================
# PLUGIN METRICS
# ============================================================

BACKENDS_DISCOVERED = Gauge(
    "secure_store_backends_discovered", "Backends available after discovery"
)

BACKEND_LOAD_FAILURES = Counter(
    "secure_store_backend_load_failures_total",
    "Plugins excluded during discovery",
    ["plugin"],
)

BACKEND_INITIALIZATIONS = Counter(
    "secure_store_backend_initializations_total",
    "Active backend initializations",
    ["backend", "status"],
)
