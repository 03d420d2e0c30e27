"""Metrics recorder - stateless functions to record metrics."""

import time
from contextlib import contextmanager
from typing import Generator, Optional

from securestore.monitoring.definitions import (
    BACKEND_INITIALIZATIONS,
    BACKEND_LOAD_FAILURES,
    BACKENDS_DISCOVERED,
    SECURE_STORE_LATENCY,
    SECURE_STORE_OPERATIONS,
)


@contextmanager
def track_time() -> Generator[dict, None, None]:
    """
    Context manager to track execution time.

    Usage:
        with track_time() as t:
            backend.get_secret(namespace, name)
        print(t["duration"])  # seconds
    """
    result = {"duration": 0.0}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["duration"] = time.perf_counter() - start


class Metrics:
    """
    Stateless metrics recorder.

    Usage:
        from securestore.monitoring import Metrics, track_time

        with track_time() as t:
            backend.store_secret(...)
        Metrics.operation("put", "file", "success", latency=t["duration"])
    """

    @staticmethod
    def operation(
        operation: str, backend: str, status: str, latency: Optional[float] = None
    ) -> None:
        """Record one facade operation (status: success, not_found or error)."""
        SECURE_STORE_OPERATIONS.labels(
            operation=operation, backend=backend, status=status
        ).inc()
        if latency:
            SECURE_STORE_LATENCY.labels(operation=operation, backend=backend).observe(
                latency
            )

    @staticmethod
    def backends_discovered(count: int) -> None:
        """Record how many backends discovery produced."""
        BACKENDS_DISCOVERED.set(count)

    @staticmethod
    def backend_load_failure(plugin: str) -> None:
        """Record a plugin excluded during discovery."""
        BACKEND_LOAD_FAILURES.labels(plugin=plugin).inc()

    @staticmethod
    def backend_initialized(backend: str, success: bool = True) -> None:
        """Record an active backend initialization attempt."""
        status = "success" if success else "error"
        BACKEND_INITIALIZATIONS.labels(backend=backend, status=status).inc()
