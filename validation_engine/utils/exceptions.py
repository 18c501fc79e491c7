"""
Validation Engine Exception Hierarchy

This module defines the error taxonomy used across the validation engine. Every
fault raised by the engine derives from EngineError and carries a machine-readable
code, a category and a free-form details mapping so that the error normalization
stage and the channel router can reshape it without inspecting its type.

Error Categories:
    GATE: request rejected by a middleware gate (authentication, rate limit,
        schema validation) before reaching business logic
    SECURITY: request rejected because it carried unrecoverable malicious content
    EXECUTION: processor missing or a lifecycle hook failed
    INFRASTRUCTURE: data store unavailable or a query failed
    ROUTING: unknown or duplicate request channel
    CONFIGURATION: invalid engine configuration

Business failures (a check ran and found violations) are never exceptions; they
are reported through ValidationResult.success and ValidationResult.errors.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


DEFAULT_ERROR_CODE = "INTERNAL_ERROR"


class ErrorCategory(Enum):
    """Error category classification for engine faults."""
    GATE = "gate"
    SECURITY = "security"
    EXECUTION = "execution"
    INFRASTRUCTURE = "infrastructure"
    ROUTING = "routing"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class EngineError(Exception):
    """
    Base exception class for all validation engine faults.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code for client handling
        category: Error category for classification
        details: Additional error context
        timestamp: ISO 8601 timestamp of when the error was raised
    """

    default_code: str = DEFAULT_ERROR_CODE
    default_category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        category: Optional[ErrorCategory] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.category = category or self.default_category
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format for transport responses.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error": True,
            "message": self.message,
            "code": self.code,
            "category": self.category.value,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# ============================================================================
# GATE AND SECURITY REJECTIONS
# ============================================================================

class GateRejectionError(EngineError):
    """Base class for rejections raised by middleware gates."""
    default_code = "GATE_REJECTED"
    default_category = ErrorCategory.GATE


class AuthenticationRequiredError(GateRejectionError):
    """Raised when an unauthenticated caller invokes a protected channel."""
    default_code = "AUTH_REQUIRED"

    def __init__(self, message: str = "Authentication required for this operation", **kwargs) -> None:
        super().__init__(message, **kwargs)


class RateLimitExceededError(GateRejectionError):
    """Raised when a caller exceeds the request budget for a channel window."""
    default_code = "RATE_LIMITED"

    def __init__(self, channel: str, limit: int, window_ms: float) -> None:
        super().__init__(
            f"Rate limit exceeded for {channel}. Please wait and try again.",
            details={"channel": channel, "limit": limit, "window_ms": window_ms},
        )
        self.channel = channel
        self.limit = limit
        self.window_ms = window_ms


class SchemaValidationError(GateRejectionError):
    """Raised when a request record is missing required fields."""
    default_code = "MISSING_FIELDS"

    def __init__(self, missing_fields: List[str]) -> None:
        super().__init__(
            f"Missing required fields: {', '.join(missing_fields)}",
            details={"missing_fields": list(missing_fields)},
        )
        self.missing_fields = list(missing_fields)


class InvalidRequestError(GateRejectionError):
    """Raised when a request record cannot be parsed into its typed model."""
    default_code = "INVALID_REQUEST"


class SecurityViolationError(EngineError):
    """Raised when request input carries content that cannot be safely cleaned."""
    default_code = "MALICIOUS_CONTENT"
    default_category = ErrorCategory.SECURITY

    def __init__(self, message: str = "Potentially malicious content detected", **kwargs) -> None:
        super().__init__(message, **kwargs)


# ============================================================================
# EXECUTION AND INFRASTRUCTURE FAULTS
# ============================================================================

class ProcessorNotFoundError(EngineError):
    """Raised when a validation id does not resolve to a registered processor."""
    default_code = "PROCESSOR_NOT_FOUND"
    default_category = ErrorCategory.EXECUTION

    def __init__(self, validation_id: str) -> None:
        super().__init__(
            f"Validation processor '{validation_id}' not found",
            details={"validation_id": validation_id},
        )
        self.validation_id = validation_id


class ProcessorLifecycleError(EngineError):
    """Raised by a processor hook that cannot proceed (e.g. aborted setup)."""
    default_code = "PROCESSOR_LIFECYCLE_ERROR"
    default_category = ErrorCategory.EXECUTION


class DataStoreError(EngineError):
    """Base class for data store faults."""
    default_code = "DATABASE_ERROR"
    default_category = ErrorCategory.INFRASTRUCTURE


class DataStoreUnavailableError(DataStoreError):
    """Raised when no data store handle is available or the store is closed."""
    default_code = "DATABASE_UNAVAILABLE"

    def __init__(self, message: str = "Database client not available", **kwargs) -> None:
        super().__init__(message, **kwargs)


class DataStoreQueryError(DataStoreError):
    """Raised when the data store rejects or fails a statement."""
    default_code = "QUERY_FAILED"


# ============================================================================
# ROUTING, CONFIGURATION AND NORMALIZED FAULTS
# ============================================================================

class ChannelNotFoundError(EngineError):
    """Raised when no handler is registered for a request channel."""
    default_code = "CHANNEL_NOT_FOUND"
    default_category = ErrorCategory.ROUTING

    def __init__(self, channel: str) -> None:
        super().__init__(
            f"No handler registered for channel: {channel}",
            details={"channel": channel},
        )
        self.channel = channel


class ChannelAlreadyRegisteredError(EngineError):
    """Raised when a second handler is registered for the same channel."""
    default_code = "CHANNEL_ALREADY_REGISTERED"
    default_category = ErrorCategory.ROUTING

    def __init__(self, channel: str) -> None:
        super().__init__(
            f"Handler for channel '{channel}' already registered",
            details={"channel": channel},
        )
        self.channel = channel


class ConfigurationError(EngineError):
    """Raised when engine configuration is invalid."""
    default_code = "CONFIGURATION_ERROR"
    default_category = ErrorCategory.CONFIGURATION


class NormalizedError(EngineError):
    """
    Uniform fault shape produced by the error normalization stage.

    Carries the code and message of the original fault (code defaulted to
    INTERNAL_ERROR when the original had none) and keeps the original fault
    on ``original`` for logging.
    """

    def __init__(
        self,
        code: str,
        message: str,
        original: Optional[BaseException] = None,
        category: Optional[ErrorCategory] = None,
    ) -> None:
        super().__init__(message, code=code, category=category)
        self.original = original

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @classmethod
    def from_exception(cls, error: BaseException) -> "NormalizedError":
        """
        Build a normalized fault from any exception.

        Args:
            error: Fault escaping the downstream pipeline

        Returns:
            NormalizedError carrying a code and a human message
        """
        if isinstance(error, NormalizedError):
            return error

        code = getattr(error, "code", None)
        if not isinstance(code, str) or not code:
            code = DEFAULT_ERROR_CODE

        message = getattr(error, "message", None) or str(error) or "An unexpected error occurred"
        category = getattr(error, "category", None)
        if not isinstance(category, ErrorCategory):
            category = ErrorCategory.UNKNOWN

        return cls(code=code, message=message, original=error, category=category)


__all__ = [
    "DEFAULT_ERROR_CODE",
    "ErrorCategory",
    "EngineError",
    "GateRejectionError",
    "AuthenticationRequiredError",
    "RateLimitExceededError",
    "SchemaValidationError",
    "InvalidRequestError",
    "SecurityViolationError",
    "ProcessorNotFoundError",
    "ProcessorLifecycleError",
    "DataStoreError",
    "DataStoreUnavailableError",
    "DataStoreQueryError",
    "ChannelNotFoundError",
    "ChannelAlreadyRegisteredError",
    "ConfigurationError",
    "NormalizedError",
]
