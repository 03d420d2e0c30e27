"""Monitoring module - Prometheus metrics for the secure store."""

from securestore.monitoring.recorders import Metrics, track_time

__all__ = [
    "Metrics",
    "track_time",
]
