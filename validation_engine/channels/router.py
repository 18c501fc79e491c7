"""
Request Channel Router

Maps channel names to handlers and runs every request through its middleware
pipeline (global stages first, then channel-specific stages, then the handler).
The router is the outermost boundary of the engine: any fault escaping a
pipeline is converted into ChannelResult(success=False) carrying the fault's
message and code, so the front-end never observes a raw exception.

Handlers are coroutine functions called as ``handler(caller, *args)`` with the
argument list as left by the pipeline (after sanitization).
"""

import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import structlog
from pydantic import Field

from validation_engine.business.models import EngineModel
from validation_engine.middleware.chain import (
    CallerIdentity,
    MiddlewareStage,
    RequestContext,
    TerminalHandler,
    compose,
)
from validation_engine.monitoring.metrics import EngineMetrics
from validation_engine.utils.exceptions import (
    DEFAULT_ERROR_CODE,
    ChannelAlreadyRegisteredError,
    ChannelNotFoundError,
)

logger = structlog.get_logger("channels.router")

ChannelHandler = Callable[..., Awaitable[Any]]


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChannelResult(EngineModel):
    """Uniform response returned for every channel call."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    code: Optional[str] = None
    timestamp: int = Field(default_factory=_now_ms, description="Epoch milliseconds")


class _Registration:
    __slots__ = ("channel", "handler", "stages")

    def __init__(self, channel: str, handler: ChannelHandler, stages: Sequence[MiddlewareStage]):
        self.channel = channel
        self.handler = handler
        self.stages = tuple(stages)


class ChannelRouter:
    """
    Channel registry and dispatcher.

    Args:
        metrics: Optional metrics collector for per-channel call outcomes
    """

    def __init__(self, metrics: Optional[EngineMetrics] = None):
        self._registrations: Dict[str, _Registration] = {}
        self._global_stages: List[MiddlewareStage] = []
        self._pipelines: Dict[str, TerminalHandler] = {}
        self._metrics = metrics
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def use(self, stage: MiddlewareStage) -> None:
        """Append a stage that runs for every channel."""
        self._global_stages.append(stage)
        self._pipelines.clear()

    def register(
        self,
        channel: str,
        handler: ChannelHandler,
        stages: Sequence[MiddlewareStage] = (),
    ) -> None:
        """
        Register a handler with optional channel-specific stages.

        Raises:
            ChannelAlreadyRegisteredError: When the channel already has a handler
        """
        if channel in self._registrations:
            raise ChannelAlreadyRegisteredError(channel)

        self._registrations[channel] = _Registration(channel, handler, stages)
        logger.debug("Channel handler registered", channel=channel, stages=len(stages))

    def register_module(
        self,
        handlers: Dict[str, ChannelHandler],
        prefix: Optional[str] = None,
        stages: Optional[Dict[str, Sequence[MiddlewareStage]]] = None,
    ) -> None:
        """Register a mapping of handlers, optionally namespaced as ``prefix:channel``."""
        stages = stages or {}
        for channel, handler in handlers.items():
            full_channel = f"{prefix}:{channel}" if prefix else channel
            self.register(full_channel, handler, stages.get(channel, ()))

    def unregister(self, channel: str) -> bool:
        self._pipelines.pop(channel, None)
        return self._registrations.pop(channel, None) is not None

    def clear(self) -> None:
        """Drop every handler and global stage."""
        self._registrations.clear()
        self._global_stages.clear()
        self._pipelines.clear()
        self._initialized = False

    def registered_channels(self) -> List[str]:
        return list(self._registrations)

    def initialize(self) -> None:
        """Compose the pipeline of every registered channel."""
        for channel in self._registrations:
            self._pipeline(channel)
        self._initialized = True
        logger.info("Channel router initialized", channels=len(self._registrations))

    def _pipeline(self, channel: str) -> TerminalHandler:
        pipeline = self._pipelines.get(channel)
        if pipeline is not None:
            return pipeline

        registration = self._registrations.get(channel)
        if registration is None:
            raise ChannelNotFoundError(channel)

        async def terminal(context: RequestContext) -> Any:
            return await registration.handler(context.caller, *context.args)

        pipeline = compose([*self._global_stages, *registration.stages], terminal)
        self._pipelines[channel] = pipeline
        return pipeline

    async def handle_request(self, caller: CallerIdentity, channel: str, *args: Any) -> ChannelResult:
        """
        Dispatch one request through its pipeline.

        Returns:
            ChannelResult; faults become success=False with message and code
        """
        start = time.perf_counter()
        context = RequestContext(caller=caller, channel=channel, args=list(args))

        try:
            result = self._wrap_result(await self._pipeline(channel)(context))
        except Exception as error:
            code = getattr(error, "code", None)
            if not isinstance(code, str) or not code:
                code = DEFAULT_ERROR_CODE
            message = getattr(error, "message", None) or str(error) or "Unknown error occurred"

            logger.error(
                "Channel request failed",
                channel=channel,
                request_id=context.request_id,
                code=code,
                error=message,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            result = ChannelResult(success=False, error=message, code=code)
        else:
            logger.debug(
                "Channel request completed",
                channel=channel,
                request_id=context.request_id,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )

        if self._metrics is not None:
            self._metrics.channel_calls.labels(
                channel=channel, outcome="ok" if result.success else "error"
            ).inc()
        return result

    @staticmethod
    def _wrap_result(result: Any) -> ChannelResult:
        if isinstance(result, ChannelResult):
            return result
        return ChannelResult(success=True, data=result)


__all__ = [
    "ChannelHandler",
    "ChannelResult",
    "ChannelRouter",
]
