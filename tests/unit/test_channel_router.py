"""
Unit tests for the channel router.

Covers handler registration, pipeline dispatch with global and
channel-specific stages, result wrapping and conversion of escaping faults into
failed ChannelResults.
"""

import pytest

from validation_engine.channels.router import ChannelResult, ChannelRouter
from validation_engine.middleware.chain import CallerIdentity, MiddlewareStage
from validation_engine.monitoring.metrics import EngineMetrics
from validation_engine.utils.exceptions import (
    ChannelAlreadyRegisteredError,
    RateLimitExceededError,
)

pytestmark = pytest.mark.unit

CALLER = CallerIdentity(sender_id="window-1", user_id="user-1")


class TagStage(MiddlewareStage):

    def __init__(self, name, calls):
        self.name = name
        self.calls = calls

    async def handle(self, context, call_next):
        self.calls.append(self.name)
        return await call_next(context)


async def echo(caller, *args):
    return {"sender": caller.sender_id, "args": list(args)}


class TestRegistration:

    def test_duplicate_channel_is_rejected(self):
        router = ChannelRouter()
        router.register("validation:run", echo)

        with pytest.raises(ChannelAlreadyRegisteredError) as exc_info:
            router.register("validation:run", echo)

        assert exc_info.value.code == "CHANNEL_ALREADY_REGISTERED"

    def test_register_module_applies_prefix(self):
        router = ChannelRouter()

        router.register_module({"run": echo, "stats": echo}, prefix="validation")

        assert sorted(router.registered_channels()) == ["validation:run", "validation:stats"]

    def test_unregister_and_clear(self):
        router = ChannelRouter()
        router.register("a", echo)
        router.register("b", echo)

        assert router.unregister("a") is True
        assert router.unregister("a") is False

        router.clear()
        assert router.registered_channels() == []
        assert router.initialized is False

    def test_initialize_marks_router_ready(self):
        router = ChannelRouter()
        router.register("a", echo)

        router.initialize()

        assert router.initialized is True


class TestHandleRequest:

    @pytest.mark.asyncio
    async def test_plain_return_value_is_wrapped(self):
        router = ChannelRouter()
        router.register("echo", echo)

        result = await router.handle_request(CALLER, "echo", {"ou": "OU1"}, 3)

        assert isinstance(result, ChannelResult)
        assert result.success is True
        assert result.data == {"sender": "window-1", "args": [{"ou": "OU1"}, 3]}
        assert result.timestamp > 0

    @pytest.mark.asyncio
    async def test_channel_result_passes_through(self):
        async def failing_handler(caller):
            return ChannelResult(success=False, error="Validation failed", code="EXECUTION_FAILED")

        router = ChannelRouter()
        router.register("run", failing_handler)

        result = await router.handle_request(CALLER, "run")

        assert result.success is False
        assert result.code == "EXECUTION_FAILED"

    @pytest.mark.asyncio
    async def test_unknown_channel_returns_failure(self):
        result = await ChannelRouter().handle_request(CALLER, "nope")

        assert result.success is False
        assert result.code == "CHANNEL_NOT_FOUND"
        assert result.error == "No handler registered for channel: nope"

    @pytest.mark.asyncio
    async def test_engine_fault_keeps_code_and_message(self):
        async def limited(caller):
            raise RateLimitExceededError("run", 10, 1000)

        router = ChannelRouter()
        router.register("run", limited)

        result = await router.handle_request(CALLER, "run")

        assert result.success is False
        assert result.code == "RATE_LIMITED"
        assert result.error == "Rate limit exceeded for run. Please wait and try again."

    @pytest.mark.asyncio
    async def test_plain_fault_gets_default_code(self):
        async def broken(caller):
            raise ValueError("boom")

        router = ChannelRouter()
        router.register("run", broken)

        result = await router.handle_request(CALLER, "run")

        assert result.success is False
        assert result.code == "INTERNAL_ERROR"
        assert result.error == "boom"

    @pytest.mark.asyncio
    async def test_empty_fault_message_falls_back(self):
        async def broken(caller):
            raise RuntimeError()

        router = ChannelRouter()
        router.register("run", broken)

        result = await router.handle_request(CALLER, "run")

        assert result.error == "Unknown error occurred"

    @pytest.mark.asyncio
    async def test_global_stages_run_before_channel_stages(self):
        calls = []
        router = ChannelRouter()
        router.use(TagStage("global", calls))
        router.register("echo", echo, stages=[TagStage("channel", calls)])

        await router.handle_request(CALLER, "echo")

        assert calls == ["global", "channel"]

    @pytest.mark.asyncio
    async def test_stage_added_after_first_call_is_applied(self):
        calls = []
        router = ChannelRouter()
        router.register("echo", echo)
        await router.handle_request(CALLER, "echo")

        router.use(TagStage("late", calls))
        await router.handle_request(CALLER, "echo")

        assert calls == ["late"]

    @pytest.mark.asyncio
    async def test_outcomes_are_counted(self):
        metrics = EngineMetrics()
        router = ChannelRouter(metrics=metrics)
        router.register("echo", echo)

        await router.handle_request(CALLER, "echo")
        await router.handle_request(CALLER, "missing")

        assert metrics.sample("validation_channel_calls_total", channel="echo", outcome="ok") == 1.0
        assert metrics.sample("validation_channel_calls_total", channel="missing", outcome="error") == 1.0
