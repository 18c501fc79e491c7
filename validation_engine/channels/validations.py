"""
Validation Channel Handlers

Handlers for the ``validation:*`` request channels. Each handler parses its first
argument into a typed request model (camelCase keys from the front-end, unknown
keys ignored), calls the processor registry and returns JSON-ready payloads.

Channels:
    validation:run       {validationName, ou?, period?, options?} -> ExecutionResponse
    validation:get-all   {ou?} -> processor metadata sorted by sequence
    validation:run-all   {ou, period?, options?} -> ExecutionResponse list
    validation:preview   {validationName, ou?, options?} -> PreviewInfo
    validation:stats     -> RegistryStatistics
"""

from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

import structlog
from pydantic import ConfigDict, ValidationError

from validation_engine.business.models import EngineModel, ValidationOptions, ValidationPeriod
from validation_engine.channels.router import ChannelHandler, ChannelResult
from validation_engine.middleware.chain import CallerIdentity
from validation_engine.processors.registry import ValidationRegistry
from validation_engine.utils.exceptions import InvalidRequestError

logger = structlog.get_logger("channels.validations")

VALIDATION_RUN = "validation:run"
VALIDATION_GET_ALL = "validation:get-all"
VALIDATION_RUN_ALL = "validation:run-all"
VALIDATION_PREVIEW = "validation:preview"
VALIDATION_STATS = "validation:stats"

# Field names as sent by the front-end, checked by the schema validation stage.
REQUIRED_FIELDS: Dict[str, Tuple[str, ...]] = {
    VALIDATION_RUN: ("validationName",),
    VALIDATION_RUN_ALL: ("ou",),
    VALIDATION_PREVIEW: ("validationName",),
}

EXECUTION_FAILED = "EXECUTION_FAILED"


# ============================================================================
# REQUEST MODELS
# ============================================================================

class ChannelRequest(EngineModel):
    model_config = ConfigDict(extra="ignore")

    ou: Optional[str] = None
    period: Optional[ValidationPeriod] = None
    options: Optional[ValidationOptions] = None

    def to_options(self) -> ValidationOptions:
        """Merge top-level ``ou``/``period`` over the nested options."""
        options = self.options or ValidationOptions()
        update: Dict[str, Any] = {}
        if self.ou is not None:
            update["ou"] = self.ou
        if self.period is not None:
            update["period"] = self.period
        return options.model_copy(update=update) if update else options


class RunValidationRequest(ChannelRequest):
    validation_name: str


class GetAllValidationsRequest(ChannelRequest):
    pass


class RunAllValidationsRequest(ChannelRequest):
    ou: str


class PreviewValidationRequest(ChannelRequest):
    validation_name: str


RequestT = TypeVar("RequestT", bound=ChannelRequest)


def parse_request(model: Type[RequestT], request: Any) -> RequestT:
    """
    Parse a raw request record into ``model``.

    Raises:
        InvalidRequestError: When the record does not fit the model
    """
    if request is None:
        request = {}
    if not isinstance(request, Mapping):
        raise InvalidRequestError("Request must be an object")

    try:
        return model.model_validate(dict(request))
    except ValidationError as error:
        fields = sorted({".".join(str(part) for part in e["loc"]) for e in error.errors()})
        raise InvalidRequestError(
            f"Invalid request fields: {', '.join(fields)}",
            details={"errors": error.errors(include_url=False, include_context=False)},
        ) from error


# ============================================================================
# HANDLERS
# ============================================================================

class ValidationChannelHandlers:
    """Channel handlers bound to one processor registry."""

    def __init__(self, registry: ValidationRegistry):
        self.registry = registry

    async def run_validation(self, caller: CallerIdentity, request: Any = None) -> ChannelResult:
        parsed = parse_request(RunValidationRequest, request)
        logger.info("Running validation", validation_id=parsed.validation_name, ou=parsed.ou)

        response = await self.registry.execute_validation(parsed.validation_name, parsed.to_options())
        return ChannelResult(
            success=response.success,
            data=response.to_payload(),
            error=response.error,
            code=None if response.success else EXECUTION_FAILED,
        )

    async def get_all_validations(self, caller: CallerIdentity, request: Any = None) -> list:
        parsed = parse_request(GetAllValidationsRequest, request)
        metadata = self.registry.get_all_metadata()
        if parsed.ou:
            metadata = [m for m in metadata if not m.ou or m.ou == parsed.ou]
        return [m.to_payload() for m in metadata]

    async def run_all_validations(self, caller: CallerIdentity, request: Any = None) -> list:
        parsed = parse_request(RunAllValidationsRequest, request)
        logger.info("Running all validations", ou=parsed.ou)

        responses = await self.registry.execute_all_for_ou(parsed.ou, parsed.to_options())
        return [response.to_payload() for response in responses]

    async def preview_validation(self, caller: CallerIdentity, request: Any = None) -> dict:
        parsed = parse_request(PreviewValidationRequest, request)
        preview = await self.registry.preview_validation(parsed.validation_name, parsed.to_options())
        return preview.to_payload()

    async def get_validation_stats(self, caller: CallerIdentity, request: Any = None) -> dict:
        return self.registry.get_statistics().to_payload()


def create_validation_handlers(registry: ValidationRegistry) -> Dict[str, ChannelHandler]:
    """Build the channel-to-handler mapping for ``registry``."""
    handlers = ValidationChannelHandlers(registry)
    return {
        VALIDATION_RUN: handlers.run_validation,
        VALIDATION_GET_ALL: handlers.get_all_validations,
        VALIDATION_RUN_ALL: handlers.run_all_validations,
        VALIDATION_PREVIEW: handlers.preview_validation,
        VALIDATION_STATS: handlers.get_validation_stats,
    }


__all__ = [
    "REQUIRED_FIELDS",
    "VALIDATION_GET_ALL",
    "VALIDATION_PREVIEW",
    "VALIDATION_RUN",
    "VALIDATION_RUN_ALL",
    "VALIDATION_STATS",
    "ValidationChannelHandlers",
    "create_validation_handlers",
    "parse_request",
]
