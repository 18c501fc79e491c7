"""
Base Validation Processor

Shared scaffolding for validation processors: idempotent initialization, data
store injection, default lifecycle hooks, query helpers and result formatting.
Concrete processors declare ``metadata`` and implement ``validate``; everything
else has a default that can be overridden.

Each instance owns its own ``initialized`` flag and data store reference; nothing
is shared between processor instances.

Example:
    class BalanceCheck(BaseValidationProcessor):
        metadata = ProcessorMetadata(id="balance_check", name="Balance Check")

        async def validate(self, options):
            start_time = self.now()
            where, params = self.scope_filter(options)
            total = await self.query_scalar(
                f"SELECT SUM(amount) FROM {STAGING_TABLE} {where}", params
            )
            errors = [] if abs(total or 0) < 0.01 else [f"Balance is {total}"]
            return self.format_result(not errors, 0, errors=errors, start_time=start_time)
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from validation_engine.business.models import (
    ErrorDetail,
    PreviewInfo,
    ProcessorMetadata,
    ResultMetadata,
    ValidationOptions,
    ValidationResult,
    ValidationStats,
)
from validation_engine.data.store import DataStore, Row, Statement
from validation_engine.utils.exceptions import DataStoreUnavailableError

logger = structlog.get_logger("processors.base")


class BaseValidationProcessor(ABC):
    """
    Base class for validation processors.

    Attributes:
        metadata: Static processor descriptor, declared by subclasses
    """

    metadata: ProcessorMetadata

    def __init__(self, store: Optional[DataStore] = None):
        self._store = store
        self._initialized = False
        self.log = logger.bind(processor_id=self.metadata.id)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def store(self) -> Optional[DataStore]:
        return self._store

    def set_database(self, store: Optional[DataStore]) -> None:
        """Receive the data store handle pushed by the registry."""
        self._store = store

    async def initialize(self) -> None:
        """One-time initialization; later calls are no-ops."""
        if self._initialized:
            return
        self.log.debug("Initializing validation processor", name=self.metadata.name)
        self._initialized = True

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    async def pre_validation(self, options: ValidationOptions) -> None:
        """
        Initialize and check the data store is available.

        Raises:
            DataStoreUnavailableError: When no data store was injected
        """
        await self.initialize()

        if options.skip:
            self.log.info("Validation skipped")
            return

        if self._store is None:
            raise DataStoreUnavailableError()

    @abstractmethod
    async def validate(self, options: ValidationOptions) -> ValidationResult:
        """Run the check and report findings through the returned result."""

    async def post_validation(self, result: ValidationResult, options: ValidationOptions) -> None:
        self.log.info(
            "Validation completed",
            success=result.success,
            errors=len(result.errors),
            warnings=len(result.warnings),
            record_count=result.record_count,
        )

    async def preview(self, options: ValidationOptions) -> PreviewInfo:
        return PreviewInfo(
            description=self.metadata.description,
            records_to_check=0,
            estimated_duration=self.metadata.estimated_duration or 1,
        )

    async def cleanup(self) -> None:
        self.log.debug("Cleaning up validation processor")
        self._initialized = False

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    async def query(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        """
        Execute a parameterized query and return its rows.

        Raises:
            DataStoreUnavailableError: When no data store was injected
        """
        if self._store is None:
            raise DataStoreUnavailableError()

        try:
            result = await self._store.execute(Statement(sql=sql, args=tuple(params)))
        except Exception as error:
            self.log.error("Query error", error=str(error))
            raise

        return list(result.rows)

    async def query_scalar(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Return the first column of the first row, or None for no rows."""
        rows = await self.query(sql, params)
        if not rows:
            return None
        return next(iter(rows[0].values()), None)

    async def count_records(
        self,
        table: str,
        where_clause: Optional[str] = None,
        params: Sequence[Any] = (),
    ) -> int:
        """Count rows in ``table``, optionally filtered; 0 when nothing matches."""
        sql = f"SELECT COUNT(*) AS count FROM {table}"
        if where_clause:
            sql = f"{sql} WHERE {where_clause}"
        count = await self.query_scalar(sql, params)
        return int(count or 0)

    @staticmethod
    def scope_conditions(options: ValidationOptions) -> Tuple[List[str], List[Any]]:
        """Return the OU/period conditions and parameters for ``options``."""
        conditions: List[str] = []
        params: List[Any] = []
        if options.ou:
            conditions.append("ou = ?")
            params.append(options.ou)
        if options.period and options.period.year:
            conditions.append("year = ?")
            params.append(options.period.year)
        if options.period and options.period.month:
            conditions.append("month = ?")
            params.append(options.period.month)
        return conditions, params

    @classmethod
    def scope_filter(
        cls,
        options: ValidationOptions,
        conditions: Optional[List[str]] = None,
        params: Optional[List[Any]] = None,
    ) -> Tuple[str, List[Any]]:
        """
        Build a WHERE clause from the OU and period in ``options``.

        Args:
            options: Validation options carrying ``ou`` and ``period``
            conditions: Processor-specific conditions placed before the scope
            params: Parameters for ``conditions``

        Returns:
            Tuple of (``WHERE ...`` clause or empty string, parameter list)
        """
        scope, scope_params = cls.scope_conditions(options)
        conditions = list(conditions or []) + scope
        params = list(params or []) + scope_params

        where_clause = "WHERE " + " AND ".join(conditions) if conditions else ""
        return where_clause, params

    # ------------------------------------------------------------------
    # Result formatting
    # ------------------------------------------------------------------

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    def build_stats(
        self,
        start_time: datetime,
        records_checked: int = 0,
        issues_found: int = 0,
    ) -> ValidationStats:
        """Stamp wall-clock timing from a caller-supplied start time."""
        end_time = self.now()
        return ValidationStats(
            start_time=start_time,
            end_time=end_time,
            duration=(end_time - start_time).total_seconds() * 1000,
            records_checked=records_checked,
            issues_found=issues_found,
        )

    def build_metadata(self, options: Optional[ValidationOptions] = None, **extra: Any) -> ResultMetadata:
        return ResultMetadata(
            validation_type=self.metadata.id,
            timestamp=self.now(),
            ou=options.ou if options else None,
            period=options.period if options else None,
            extra=extra,
        )

    def format_result(
        self,
        success: bool,
        record_count: int,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
        info: Optional[List[str]] = None,
        start_time: Optional[datetime] = None,
        error_details: Optional[List[ErrorDetail]] = None,
        options: Optional[ValidationOptions] = None,
        issues_found: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> ValidationResult:
        """
        Assemble a ValidationResult with timing stats and metadata.

        ``issues_found`` defaults to the number of errors plus warnings.
        """
        errors = errors or []
        warnings = warnings or []
        if issues_found is None:
            issues_found = len(errors) + len(warnings)

        return ValidationResult(
            success=success,
            record_count=record_count,
            errors=errors,
            warnings=warnings,
            info=info or [],
            error_details=error_details or [],
            stats=self.build_stats(start_time or self.now(), record_count, issues_found),
            metadata=self.build_metadata(options, **(extra or {})),
        )

    def skipped_result(self, options: ValidationOptions) -> ValidationResult:
        return self.format_result(
            True, 0, warnings=["Validation was skipped"], options=options, issues_found=0
        )


__all__ = ["BaseValidationProcessor"]
