"""
Validation Processor Contract

Capability every validation processor exposes to the registry. Only ``metadata``
and ``validate`` are mandatory; the registry discovers the optional lifecycle
hooks with ``isinstance`` checks against the protocols below and skips the
ones a processor does not provide.

Hook semantics:
    pre_validation(options): setup; raising aborts before validate runs
    validate(options): returns a ValidationResult; business violations are
        reported through the result, only infrastructure failures raise
    post_validation(result, options): side effects only, never changes the
        execution response
    preview(options): read-only estimate, must not run the check
    cleanup(): idempotent resource release
    set_database(store): receives the data store pushed by the registry
"""

from typing import Optional, Protocol, runtime_checkable

from validation_engine.business.models import (
    PreviewInfo,
    ProcessorMetadata,
    ValidationOptions,
    ValidationResult,
)
from validation_engine.data.store import DataStore


@runtime_checkable
class ValidationProcessor(Protocol):
    """Mandatory processor capability."""

    metadata: ProcessorMetadata

    async def validate(self, options: ValidationOptions) -> ValidationResult:
        ...


@runtime_checkable
class SupportsPreValidation(Protocol):
    async def pre_validation(self, options: ValidationOptions) -> None:
        ...


@runtime_checkable
class SupportsPostValidation(Protocol):
    async def post_validation(self, result: ValidationResult, options: ValidationOptions) -> None:
        ...


@runtime_checkable
class SupportsPreview(Protocol):
    async def preview(self, options: ValidationOptions) -> PreviewInfo:
        ...


@runtime_checkable
class SupportsCleanup(Protocol):
    async def cleanup(self) -> None:
        ...


@runtime_checkable
class SupportsDatabase(Protocol):
    def set_database(self, store: Optional[DataStore]) -> None:
        ...


__all__ = [
    "ValidationProcessor",
    "SupportsPreValidation",
    "SupportsPostValidation",
    "SupportsPreview",
    "SupportsCleanup",
    "SupportsDatabase",
]
