"""Shared utilities: the engine error taxonomy and input sanitization."""

from validation_engine.utils.exceptions import (
    DEFAULT_ERROR_CODE,
    AuthenticationRequiredError,
    ChannelAlreadyRegisteredError,
    ChannelNotFoundError,
    ConfigurationError,
    DataStoreError,
    DataStoreQueryError,
    DataStoreUnavailableError,
    EngineError,
    ErrorCategory,
    GateRejectionError,
    InvalidRequestError,
    NormalizedError,
    ProcessorLifecycleError,
    ProcessorNotFoundError,
    RateLimitExceededError,
    SchemaValidationError,
    SecurityViolationError,
)
from validation_engine.utils.sanitizers import (
    is_blocked_key,
    sanitize_arguments,
    sanitize_string,
    sanitize_value,
)

__all__ = [
    "DEFAULT_ERROR_CODE",
    "AuthenticationRequiredError",
    "ChannelAlreadyRegisteredError",
    "ChannelNotFoundError",
    "ConfigurationError",
    "DataStoreError",
    "DataStoreQueryError",
    "DataStoreUnavailableError",
    "EngineError",
    "ErrorCategory",
    "GateRejectionError",
    "InvalidRequestError",
    "NormalizedError",
    "ProcessorLifecycleError",
    "ProcessorNotFoundError",
    "RateLimitExceededError",
    "SchemaValidationError",
    "SecurityViolationError",
    "is_blocked_key",
    "sanitize_arguments",
    "sanitize_string",
    "sanitize_value",
]
