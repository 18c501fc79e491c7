"""
Request Middleware Stages

Cross-cutting stages composed around every channel handler:

- LoggingStage: binds request correlation context and logs entry, exit and faults
- AuthenticationStage: rejects callers without an authenticated session
- RateLimitStage: fixed-window request budget per (sender, channel)
- SanitizationStage: recursive input cleaning, rejects script elements
- PerformanceStage: times the call and flags slow ones
- SchemaValidationStage: required-field check on the request record
- ErrorNormalizationStage: reshapes downstream faults into NormalizedError

Gate stages raise before calling the continuation; observing stages never
change the result of the call.
"""

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

import structlog

from validation_engine.middleware.chain import MiddlewareStage, NextHandler, RequestContext
from validation_engine.monitoring.metrics import EngineMetrics
from validation_engine.utils.exceptions import (
    AuthenticationRequiredError,
    NormalizedError,
    RateLimitExceededError,
    SchemaValidationError,
)
from validation_engine.utils.sanitizers import sanitize_arguments

if TYPE_CHECKING:
    from validation_engine.auth.session import Authenticator

logger = structlog.get_logger("middleware.stages")

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000


# ============================================================================
# OBSERVING STAGES
# ============================================================================

class LoggingStage(MiddlewareStage):
    """Logs every channel call with its duration and outcome."""

    def __init__(self, clock: Clock = monotonic_ms):
        self._clock = clock

    async def handle(self, context: RequestContext, call_next: NextHandler) -> Any:
        with structlog.contextvars.bound_contextvars(
            request_id=context.request_id,
            channel=context.channel,
            sender_id=context.caller.sender_id,
        ):
            start = self._clock()
            logger.debug("Channel request", arg_count=len(context.args))
            try:
                result = await call_next()
            except Exception as error:
                logger.error(
                    "Channel request failed",
                    duration_ms=round(self._clock() - start, 2),
                    error=str(error),
                    error_type=type(error).__name__,
                )
                raise

            logger.debug(
                "Channel response",
                duration_ms=round(self._clock() - start, 2),
                success=True,
            )
            return result


class PerformanceStage(MiddlewareStage):
    """
    Times the continuation and emits a warning for slow calls.

    Args:
        threshold_ms: Duration above which a call is reported as slow
        clock: Millisecond clock, injectable for tests
        metrics: Optional metrics collector
    """

    def __init__(
        self,
        threshold_ms: float = 1000,
        clock: Clock = monotonic_ms,
        metrics: Optional[EngineMetrics] = None,
    ):
        self.threshold_ms = threshold_ms
        self._clock = clock
        self._metrics = metrics

    async def handle(self, context: RequestContext, call_next: NextHandler) -> Any:
        start = self._clock()
        try:
            return await call_next()
        finally:
            duration_ms = self._clock() - start
            if self._metrics is not None:
                self._metrics.channel_duration.labels(channel=context.channel).observe(duration_ms / 1000)

            if duration_ms > self.threshold_ms:
                logger.warning(
                    "Slow channel operation detected",
                    channel=context.channel,
                    duration_ms=round(duration_ms, 2),
                    threshold_ms=self.threshold_ms,
                )
                if self._metrics is not None:
                    self._metrics.slow_calls.labels(channel=context.channel).inc()


# ============================================================================
# GATE STAGES
# ============================================================================

class AuthenticationStage(MiddlewareStage):
    """Rejects callers the authenticator does not recognize."""

    def __init__(self, authenticator: "Authenticator"):
        self._authenticator = authenticator

    async def handle(self, context: RequestContext, call_next: NextHandler) -> Any:
        if not self._authenticator.is_authenticated(context.caller):
            logger.warning(
                "Unauthenticated channel request rejected",
                channel=context.channel,
                sender_id=context.caller.sender_id,
            )
            raise AuthenticationRequiredError()
        return await call_next()


@dataclass
class _Window:
    count: int
    reset_time: float


class RateLimitStage(MiddlewareStage):
    """
    Fixed-window rate limiter keyed by (sender id, channel).

    The window check, the budget check and the increment run without any await
    in between, so concurrent requests cannot interleave inside them.

    Args:
        max_requests: Calls allowed per key within one window
        window_ms: Window length in milliseconds
        clock: Millisecond clock, injectable for tests
        metrics: Optional metrics collector
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_ms: float = 1000,
        clock: Clock = monotonic_ms,
        metrics: Optional[EngineMetrics] = None,
    ):
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock
        self._metrics = metrics
        self._windows: Dict[Tuple[str, str], _Window] = {}

    async def handle(self, context: RequestContext, call_next: NextHandler) -> Any:
        self.acquire(context.caller.sender_id, context.channel)
        return await call_next()

    def acquire(self, sender_id: str, channel: str) -> None:
        """
        Consume one request from the budget of (sender_id, channel).

        Raises:
            RateLimitExceededError: When the budget of the current window is spent
        """
        now = self._clock()
        key = (sender_id, channel)

        window = self._windows.get(key)
        if window is None or now > window.reset_time:
            window = _Window(count=0, reset_time=now + self.window_ms)
            self._windows[key] = window

        if window.count >= self.max_requests:
            logger.warning(
                "Rate limit exceeded",
                sender_id=sender_id,
                channel=channel,
                limit=self.max_requests,
                window_ms=self.window_ms,
            )
            if self._metrics is not None:
                self._metrics.rate_limit_rejections.labels(channel=channel).inc()
            raise RateLimitExceededError(channel, self.max_requests, self.window_ms)

        window.count += 1

    def get_count(self, sender_id: str, channel: str) -> int:
        """Requests counted in the current window for (sender_id, channel)."""
        window = self._windows.get((sender_id, channel))
        return window.count if window else 0

    def reset(self) -> None:
        self._windows.clear()


class SanitizationStage(MiddlewareStage):
    """Sanitizes the shared argument list in place before proceeding."""

    async def handle(self, context: RequestContext, call_next: NextHandler) -> Any:
        sanitize_arguments(context.args)
        return await call_next()


class SchemaValidationStage(MiddlewareStage):
    """
    Requires fields on the first positional argument.

    A field is missing when it is absent or None; every missing field is named
    in a single SchemaValidationError.
    """

    def __init__(self, required_fields: Sequence[str]):
        self.required_fields = tuple(required_fields)

    async def handle(self, context: RequestContext, call_next: NextHandler) -> Any:
        request = context.args[0] if context.args else None
        if not isinstance(request, Mapping):
            request = {}

        missing = [name for name in self.required_fields if request.get(name) is None]
        if missing:
            logger.info("Request rejected for missing fields", channel=context.channel, missing_fields=missing)
            raise SchemaValidationError(missing)

        return await call_next()


# ============================================================================
# ERROR NORMALIZATION
# ============================================================================

class ErrorNormalizationStage(MiddlewareStage):
    """
    Converts any fault raised further down the chain into a NormalizedError.

    Sits last before the handler, so faults from earlier gates propagate
    untouched.
    """

    async def handle(self, context: RequestContext, call_next: NextHandler) -> Any:
        try:
            return await call_next()
        except Exception as error:
            normalized = NormalizedError.from_exception(error)
            logger.error(
                "Channel handler error",
                channel=context.channel,
                code=normalized.code,
                error=normalized.message,
            )
            if normalized is error:
                raise
            raise normalized from error


__all__ = [
    "AuthenticationStage",
    "ErrorNormalizationStage",
    "LoggingStage",
    "PerformanceStage",
    "RateLimitStage",
    "SanitizationStage",
    "SchemaValidationStage",
    "monotonic_ms",
]
