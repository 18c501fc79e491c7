"""
Request Middleware Chain

A stage is an object with a single capability, ``handle(context, call_next)``.
compose() folds an ordered list of stages around a terminal handler into one
effective handler. Each stage either awaits ``call_next()`` (optionally after
inspecting or mutating ``context.args``, or while timing the call) or raises to
short-circuit, which unwinds every earlier stage and never reaches later stages
or the terminal handler.

Stages share nothing except the RequestContext of the current call; private
state such as rate-limit counters lives on the stage instance.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from validation_engine.monitoring.logging import generate_request_id

NextHandler = Callable[[], Awaitable[Any]]
TerminalHandler = Callable[["RequestContext"], Awaitable[Any]]


@dataclass(frozen=True)
class CallerIdentity:
    """Identity of the front-end process issuing a request."""

    sender_id: str
    user_id: Optional[str] = None


@dataclass
class RequestContext:
    """
    Per-call state passed through every stage.

    ``args`` is the mutable positional argument list; sanitization replaces its
    contents in place and the terminal handler reads it after every stage ran.
    """

    caller: CallerIdentity
    channel: str
    args: List[Any] = field(default_factory=list)
    request_id: str = field(default_factory=generate_request_id)


class MiddlewareStage(ABC):
    """Unit of cross-cutting behavior in the request chain."""

    @abstractmethod
    async def handle(self, context: RequestContext, call_next: NextHandler) -> Any:
        """Call ``call_next`` to proceed or raise to reject the request."""


def compose(stages: Sequence[MiddlewareStage], terminal: TerminalHandler) -> TerminalHandler:
    """
    Compose stages around a terminal handler.

    Args:
        stages: Stages in execution order, outermost first
        terminal: Handler invoked once every stage has called through

    Returns:
        Coroutine function taking a RequestContext
    """
    stages = tuple(stages)

    async def dispatch(index: int, context: RequestContext) -> Any:
        if index >= len(stages):
            return await terminal(context)
        return await stages[index].handle(context, lambda: dispatch(index + 1, context))

    async def handler(context: RequestContext) -> Any:
        return await dispatch(0, context)

    return handler


__all__ = [
    "CallerIdentity",
    "MiddlewareStage",
    "NextHandler",
    "RequestContext",
    "TerminalHandler",
    "compose",
]
