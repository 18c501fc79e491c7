"""Business data model for the validation engine."""

from validation_engine.business.models import (
    ErrorDetail,
    ExecutionResponse,
    PreviewInfo,
    ProcessorMetadata,
    ProcessorOptions,
    RegistryStatistics,
    ResultMetadata,
    ValidationOptions,
    ValidationPeriod,
    ValidationResult,
    ValidationStats,
)

__all__ = [
    "ErrorDetail",
    "ExecutionResponse",
    "PreviewInfo",
    "ProcessorMetadata",
    "ProcessorOptions",
    "RegistryStatistics",
    "ResultMetadata",
    "ValidationOptions",
    "ValidationPeriod",
    "ValidationResult",
    "ValidationStats",
]
