"""Request middleware chain and its stages."""

from validation_engine.middleware.chain import (
    CallerIdentity,
    MiddlewareStage,
    NextHandler,
    RequestContext,
    TerminalHandler,
    compose,
)
from validation_engine.middleware.stages import (
    AuthenticationStage,
    ErrorNormalizationStage,
    LoggingStage,
    PerformanceStage,
    RateLimitStage,
    SanitizationStage,
    SchemaValidationStage,
    monotonic_ms,
)

__all__ = [
    "AuthenticationStage",
    "CallerIdentity",
    "ErrorNormalizationStage",
    "LoggingStage",
    "MiddlewareStage",
    "NextHandler",
    "PerformanceStage",
    "RateLimitStage",
    "RequestContext",
    "SanitizationStage",
    "SchemaValidationStage",
    "TerminalHandler",
    "compose",
    "monotonic_ms",
]
