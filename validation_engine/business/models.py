"""
Validation Engine Data Models

Pydantic models describing processors, per-invocation options, validation results
and the registry-level execution envelope. Field names are snake_case in Python
and serialize to camelCase for the request channel, so the front-end receives
``recordCount``, ``errorDetails``, ``validationId`` and so on.

Models:
    ProcessorMetadata: immutable processor descriptor
    ValidationPeriod: optional year/month filter
    ProcessorOptions: typed bag of processor-specific options
    ValidationOptions: per-invocation configuration passed to every hook
    ErrorDetail / ValidationStats / ResultMetadata: parts of a result
    ValidationResult: business outcome of one processor execution
    ExecutionResponse: registry envelope around one execution
    PreviewInfo: read-only cost/shape estimate
    RegistryStatistics: aggregate counts over registered processors
"""

from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class EngineModel(BaseModel):
    """
    Base class for all engine data models.

    Accepts both snake_case field names and camelCase aliases on input and
    rejects unknown fields.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible mapping with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# PROCESSOR DESCRIPTION
# ============================================================================

class ProcessorMetadata(EngineModel):
    """
    Immutable descriptor of a validation processor.

    ``id`` is the registry key; ``sequence`` orders execution (lower first,
    ties keep registration order). A processor without ``ou`` applies to every
    organizational unit.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    category: str = "General"
    required: bool = False
    sequence: int = 0
    estimated_duration: float = Field(default=1.0, ge=0, description="Estimated duration in seconds")
    tags: FrozenSet[str] = frozenset()
    version: str = "1.0.0"
    ou: Optional[str] = None


# ============================================================================
# OPTIONS
# ============================================================================

class ValidationPeriod(EngineModel):
    """Year/month filter applied by processors that support period scoping."""

    model_config = ConfigDict(frozen=True)

    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)


class ProcessorOptions(EngineModel):
    """
    Processor-specific options.

    Recognized keys:
        account_prefix: account prefix searched by the A3 accounts processor
        warning_threshold: unique-match count above which a soft warning is raised
        sample_size: number of sample records included in results
    Anything else belongs in ``extra``.
    """

    account_prefix: Optional[str] = Field(default=None, min_length=1)
    warning_threshold: Optional[int] = Field(default=None, ge=0)
    sample_size: Optional[int] = Field(default=None, ge=0)
    extra: Dict[str, Any] = Field(default_factory=dict)


class ValidationOptions(EngineModel):
    """Per-invocation configuration passed by value into every lifecycle hook."""

    skip: bool = False
    detailed: bool = False
    max_errors: Optional[int] = Field(default=None, ge=1)
    stop_on_first_error: bool = False
    ou: Optional[str] = None
    period: Optional[ValidationPeriod] = None
    custom: ProcessorOptions = Field(default_factory=ProcessorOptions)


# ============================================================================
# RESULTS
# ============================================================================

class ErrorDetail(EngineModel):
    """Grouped finding with a handful of sample records."""

    type: str
    message: str
    count: int = Field(..., ge=0)
    sample_records: List[Dict[str, Any]] = Field(default_factory=list)


class ValidationStats(EngineModel):
    """Wall-clock timing and volume of one validation run."""

    start_time: datetime
    end_time: datetime
    duration: float = Field(..., ge=0, description="Duration in milliseconds")
    records_checked: int = 0
    issues_found: int = 0


class ResultMetadata(EngineModel):
    """
    Result metadata.

    Recognized keys are typed fields; processor-specific values go to ``extra``.
    """

    validation_type: str
    timestamp: datetime
    ou: Optional[str] = None
    period: Optional[ValidationPeriod] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


class ValidationResult(EngineModel):
    """
    Business outcome of one processor execution.

    A result with errors can never be successful. Informational processors keep
    ``success`` true by reporting their findings through ``info`` and
    ``warnings`` instead of ``errors``.
    """

    success: bool
    record_count: int = 0
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    info: List[str] = Field(default_factory=list)
    error_details: List[ErrorDetail] = Field(default_factory=list)
    stats: Optional[ValidationStats] = None
    metadata: Optional[ResultMetadata] = None

    @model_validator(mode="after")
    def check_errors_imply_failure(self) -> "ValidationResult":
        if self.errors and self.success:
            raise ValueError("A validation result with errors cannot be successful")
        return self


class ExecutionResponse(EngineModel):
    """
    Registry envelope around one execution.

    ``success`` reports whether the execution ran to completion without a
    fault; whether the check itself passed is ``result.success``.
    """

    success: bool
    validation_id: str
    result: Optional[ValidationResult] = None
    error: Optional[str] = None
    duration: float = Field(default=0.0, ge=0, description="Duration in milliseconds")


class PreviewInfo(EngineModel):
    """Read-only estimate of what a validation will check."""

    description: str
    records_to_check: int = 0
    estimated_duration: float = 1.0


class RegistryStatistics(EngineModel):
    """Aggregate counts over the currently registered processors."""

    total_processors: int
    by_category: Dict[str, int] = Field(default_factory=dict)
    required_count: int = 0
    by_ou: Dict[str, int] = Field(default_factory=dict)


__all__ = [
    "EngineModel",
    "ProcessorMetadata",
    "ValidationPeriod",
    "ProcessorOptions",
    "ValidationOptions",
    "ErrorDetail",
    "ValidationStats",
    "ResultMetadata",
    "ValidationResult",
    "ExecutionResponse",
    "PreviewInfo",
    "RegistryStatistics",
]
