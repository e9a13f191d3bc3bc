"""
Observability utilities for the config version webhook.

This module provides metrics, health checks, tracing and structured
logging capabilities for production monitoring and troubleshooting.
"""

from .health import HealthChecker
from .logging import setup_structured_logging
from .metrics import MetricsServer, get_metrics_registry, metrics_collector
from .tracing import get_tracer, setup_tracing, shutdown_tracing

__all__ = [
    "MetricsServer",
    "get_metrics_registry",
    "metrics_collector",
    "HealthChecker",
    "setup_structured_logging",
    "get_tracer",
    "setup_tracing",
    "shutdown_tracing",
]
