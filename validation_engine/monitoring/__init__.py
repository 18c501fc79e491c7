"""Logging and metrics for the validation engine."""

from validation_engine.monitoring.logging import (
    generate_request_id,
    get_logger,
    setup_structured_logging,
)
from validation_engine.monitoring.metrics import EngineMetrics

__all__ = [
    "EngineMetrics",
    "generate_request_id",
    "get_logger",
    "setup_structured_logging",
]
