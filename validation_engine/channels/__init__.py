"""Request channels: the router and the validation channel handlers."""

from validation_engine.channels.router import ChannelHandler, ChannelResult, ChannelRouter
from validation_engine.channels.validations import (
    REQUIRED_FIELDS,
    VALIDATION_GET_ALL,
    VALIDATION_PREVIEW,
    VALIDATION_RUN,
    VALIDATION_RUN_ALL,
    VALIDATION_STATS,
    ValidationChannelHandlers,
    create_validation_handlers,
)

__all__ = [
    "ChannelHandler",
    "ChannelResult",
    "ChannelRouter",
    "REQUIRED_FIELDS",
    "VALIDATION_GET_ALL",
    "VALIDATION_PREVIEW",
    "VALIDATION_RUN",
    "VALIDATION_RUN_ALL",
    "VALIDATION_STATS",
    "ValidationChannelHandlers",
    "create_validation_handlers",
]
