"""
Validation Processors Package

Processor contract, shared base class, the bundled processors and the registry
that drives their lifecycle.
"""

from validation_engine.processors.a3_accounts import A3AccountValidation
from validation_engine.processors.base import BaseValidationProcessor
from validation_engine.processors.contract import (
    SupportsCleanup,
    SupportsDatabase,
    SupportsPostValidation,
    SupportsPreValidation,
    SupportsPreview,
    ValidationProcessor,
)
from validation_engine.processors.duplicate_records import DuplicateRecordsValidation
from validation_engine.processors.registry import (
    DEFAULT_PROCESSORS,
    ProcessorFactory,
    ValidationRegistry,
)
from validation_engine.processors.staging_data import StagingDataValidation

__all__ = [
    "A3AccountValidation",
    "BaseValidationProcessor",
    "DEFAULT_PROCESSORS",
    "DuplicateRecordsValidation",
    "ProcessorFactory",
    "StagingDataValidation",
    "SupportsCleanup",
    "SupportsDatabase",
    "SupportsPostValidation",
    "SupportsPreValidation",
    "SupportsPreview",
    "ValidationProcessor",
    "ValidationRegistry",
]
