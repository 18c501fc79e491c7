"""
Validation Processor Registry

Owns the set of registered validation processors, resolves lookups and drives
execution through the processor lifecycle (pre_validation -> validate ->
post_validation).

The registry is an explicit object owned by the engine context rather than a
module-level singleton. It moves from uninitialized to initialized on first use
of any lookup or execution operation, registering processors from an ordered list
of factories; cleanup() tears every processor down and returns it to the
uninitialized state, so the next use initializes it again.

Execution faults (unknown id, a failing pre_validation or validate hook) are
captured into ExecutionResponse(success=False) and never raised to the caller.
"""

import asyncio
import time
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import structlog

from validation_engine.business.models import (
    ExecutionResponse,
    PreviewInfo,
    ProcessorMetadata,
    RegistryStatistics,
    ValidationOptions,
    ValidationResult,
)
from validation_engine.data.store import DataStore
from validation_engine.monitoring.metrics import EngineMetrics
from validation_engine.processors.a3_accounts import A3AccountValidation
from validation_engine.processors.contract import (
    SupportsCleanup,
    SupportsDatabase,
    SupportsPostValidation,
    SupportsPreValidation,
    SupportsPreview,
    ValidationProcessor,
)
from validation_engine.processors.duplicate_records import DuplicateRecordsValidation
from validation_engine.processors.staging_data import StagingDataValidation
from validation_engine.utils.exceptions import ProcessorLifecycleError, ProcessorNotFoundError

logger = structlog.get_logger("processors.registry")

ProcessorFactory = Callable[[], ValidationProcessor]

# Registration order matters: it breaks sequence ties.
DEFAULT_PROCESSORS: Sequence[ProcessorFactory] = (
    StagingDataValidation,
    DuplicateRecordsValidation,
    A3AccountValidation,
)

UNIVERSAL_OU = "all"


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class ValidationRegistry:
    """
    Registry of validation processors.

    Args:
        factories: Ordered processor factories registered by initialize()
        store: Optional data store pushed into every registered processor
        metrics: Optional metrics collector for execution outcomes
    """

    def __init__(
        self,
        factories: Iterable[ProcessorFactory] = DEFAULT_PROCESSORS,
        store: Optional[DataStore] = None,
        metrics: Optional[EngineMetrics] = None,
    ):
        self._factories = list(factories)
        self._processors: Dict[str, ValidationProcessor] = {}
        self._store = store
        self._metrics = metrics
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Lifecycle and registration
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Register every processor factory; later calls are no-ops.

        Every factory runs before anything is registered, so a failing factory
        leaves the registry empty and uninitialized.
        """
        if self._initialized:
            return

        logger.info("Initializing validation registry", factories=len(self._factories))
        processors = [factory() for factory in self._factories]
        for processor in processors:
            self.register(processor)

        self._initialized = True
        logger.info("Validation registry initialized", processors=len(self._processors))

    def set_database(self, store: Optional[DataStore]) -> None:
        """Store the data store handle and push it into every registered processor."""
        self._store = store
        for processor in self._processors.values():
            if isinstance(processor, SupportsDatabase):
                processor.set_database(store)
        logger.info("Data store configured for validation processors", processors=len(self._processors))

    def register(self, processor: ValidationProcessor) -> None:
        """Insert a processor, replacing any processor with the same id."""
        processor_id = processor.metadata.id

        if processor_id in self._processors:
            logger.warning("Processor already registered, replacing", processor_id=processor_id)

        if self._store is not None and isinstance(processor, SupportsDatabase):
            processor.set_database(self._store)

        self._processors[processor_id] = processor
        logger.debug(
            "Registered validation processor",
            processor_id=processor_id,
            name=processor.metadata.name,
        )

    async def unregister(self, processor_id: str) -> bool:
        """
        Remove a processor, running its cleanup hook on a best-effort basis.

        Returns:
            True when a processor was removed
        """
        processor = self._processors.pop(processor_id, None)
        if processor is None:
            return False

        if isinstance(processor, SupportsCleanup):
            try:
                await processor.cleanup()
            except Exception:
                logger.exception("Processor cleanup failed", processor_id=processor_id)

        logger.info("Unregistered validation processor", processor_id=processor_id)
        return True

    async def cleanup(self) -> None:
        """Clean up every processor in parallel, then reset to uninitialized."""
        logger.info("Cleaning up validation processors", processors=len(self._processors))

        processors = [p for p in self._processors.values() if isinstance(p, SupportsCleanup)]
        outcomes = await asyncio.gather(
            *(processor.cleanup() for processor in processors),
            return_exceptions=True,
        )
        for processor, outcome in zip(processors, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Processor cleanup failed",
                    processor_id=processor.metadata.id,
                    error=str(outcome),
                )

        self._processors.clear()
        self._initialized = False
        logger.info("Validation registry cleanup complete")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_processor(self, processor_id: str) -> Optional[ValidationProcessor]:
        self.initialize()
        return self._processors.get(processor_id)

    def get_all_processors(self) -> List[ValidationProcessor]:
        self.initialize()
        return list(self._processors.values())

    def get_all_metadata(self) -> List[ProcessorMetadata]:
        """Metadata of every processor, sorted by ascending sequence."""
        return [p.metadata for p in self._sorted(self.get_all_processors())]

    def get_by_category(self, category: str) -> List[ValidationProcessor]:
        return [p for p in self.get_all_processors() if p.metadata.category == category]

    def get_required_processors(self) -> List[ValidationProcessor]:
        return [p for p in self.get_all_processors() if p.metadata.required]

    def get_by_ou(self, ou: str) -> List[ValidationProcessor]:
        """Processors scoped to ``ou`` plus universal processors (no ``ou``)."""
        return [
            p for p in self.get_all_processors()
            if not p.metadata.ou or p.metadata.ou == ou
        ]

    def search_by_tags(self, tags: Iterable[str]) -> List[ValidationProcessor]:
        """Processors carrying at least one of ``tags``."""
        wanted = set(tags)
        return [p for p in self.get_all_processors() if wanted & set(p.metadata.tags)]

    @staticmethod
    def _sorted(processors: List[ValidationProcessor]) -> List[ValidationProcessor]:
        return sorted(processors, key=lambda p: p.metadata.sequence)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute_validation(
        self,
        validation_id: str,
        options: Optional[ValidationOptions] = None,
    ) -> ExecutionResponse:
        """
        Run one processor through its lifecycle.

        Args:
            validation_id: Processor id
            options: Validation options, copied into every hook

        Returns:
            ExecutionResponse; success is False for any execution fault
        """
        options = options or ValidationOptions()
        start = time.perf_counter()
        log = logger.bind(validation_id=validation_id)
        log.info("Executing validation")

        try:
            processor = self.get_processor(validation_id)
            if processor is None:
                raise ProcessorNotFoundError(validation_id)

            if isinstance(processor, SupportsPreValidation):
                await processor.pre_validation(options.model_copy(deep=True))

            result = await processor.validate(options.model_copy(deep=True))
            if not isinstance(result, ValidationResult):
                raise ProcessorLifecycleError(
                    f"Processor '{validation_id}' returned {type(result).__name__} instead of a ValidationResult"
                )
        except ProcessorNotFoundError as error:
            log.warning("Validation processor not found")
            self._record_execution(validation_id, "error")
            return ExecutionResponse(
                success=False,
                validation_id=validation_id,
                error=error.message,
                duration=_elapsed_ms(start),
            )
        except Exception as error:
            log.error("Validation execution error", error=str(error), exc_info=True)
            self._record_execution(validation_id, "error")
            return ExecutionResponse(
                success=False,
                validation_id=validation_id,
                error=str(error) or "Validation execution failed",
                duration=_elapsed_ms(start),
            )

        if isinstance(processor, SupportsPostValidation):
            try:
                await processor.post_validation(result.model_copy(deep=True), options.model_copy(deep=True))
            except Exception:
                log.exception("Post-validation hook failed")

        self._record_execution(validation_id, "passed" if result.success else "failed")
        return ExecutionResponse(
            success=True,
            validation_id=validation_id,
            result=result,
            duration=_elapsed_ms(start),
        )

    async def execute_multiple(
        self,
        validation_ids: Sequence[str],
        options: Optional[ValidationOptions] = None,
    ) -> List[ExecutionResponse]:
        """
        Run processors one after another in the given order.

        With ``stop_on_first_error`` the loop halts after the first response that
        either faulted or carries a failed result.
        """
        options = options or ValidationOptions()
        responses: List[ExecutionResponse] = []

        for validation_id in validation_ids:
            response = await self.execute_validation(validation_id, options)
            responses.append(response)

            failed = not response.success or response.result is None or not response.result.success
            if options.stop_on_first_error and failed:
                logger.info("Stopping execution due to failure", validation_id=validation_id)
                break

        return responses

    async def execute_all_for_ou(
        self,
        ou: str,
        options: Optional[ValidationOptions] = None,
    ) -> List[ExecutionResponse]:
        """Run every processor applicable to ``ou`` in ascending sequence order."""
        options = (options or ValidationOptions()).model_copy(update={"ou": ou})
        validation_ids = [p.metadata.id for p in self._sorted(self.get_by_ou(ou))]
        return await self.execute_multiple(validation_ids, options)

    async def preview_validation(
        self,
        validation_id: str,
        options: Optional[ValidationOptions] = None,
    ) -> PreviewInfo:
        """
        Read-only estimate of a validation.

        Raises:
            ProcessorNotFoundError: When the id is not registered
        """
        options = options or ValidationOptions()
        processor = self.get_processor(validation_id)
        if processor is None:
            raise ProcessorNotFoundError(validation_id)

        if isinstance(processor, SupportsPreview):
            return await processor.preview(options.model_copy(deep=True))

        return PreviewInfo(
            description=processor.metadata.description,
            records_to_check=0,
            estimated_duration=processor.metadata.estimated_duration or 1,
        )

    def get_statistics(self) -> RegistryStatistics:
        """Counts by category and OU plus the number of required processors."""
        processors = self.get_all_processors()
        by_category: Dict[str, int] = {}
        by_ou: Dict[str, int] = {}

        for processor in processors:
            category = processor.metadata.category
            by_category[category] = by_category.get(category, 0) + 1
            ou = processor.metadata.ou or UNIVERSAL_OU
            by_ou[ou] = by_ou.get(ou, 0) + 1

        return RegistryStatistics(
            total_processors=len(processors),
            by_category=by_category,
            required_count=len(self.get_required_processors()),
            by_ou=by_ou,
        )

    def _record_execution(self, validation_id: str, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.validation_executions.labels(
                validation_id=validation_id, outcome=outcome
            ).inc()


__all__ = [
    "DEFAULT_PROCESSORS",
    "ProcessorFactory",
    "ValidationRegistry",
]
