"""
Staging Data Check

Diagnostic processor that verifies the staging table holds data for the
requested scope. Runs first (sequence -1) so a missing import is reported before
the heavier checks.
"""

from validation_engine.business.models import ProcessorMetadata, ValidationOptions, ValidationResult
from validation_engine.data.store import STAGING_TABLE
from validation_engine.processors.base import BaseValidationProcessor

LOW_VOLUME_THRESHOLD = 10


class StagingDataValidation(BaseValidationProcessor):
    """Fails on an empty staging table and warns on a suspiciously small one."""

    metadata = ProcessorMetadata(
        id="staging_data",
        name="Staging Data Check",
        description="Simple diagnostic check. Verifies there is data in the staging table.",
        category="Testing",
        required=False,
        sequence=-1,
        estimated_duration=1,
        tags=frozenset({"test", "diagnostic", "quick"}),
        version="1.0.0",
    )

    async def validate(self, options: ValidationOptions) -> ValidationResult:
        if options.skip:
            return self.skipped_result(options)

        start_time = self.now()
        conditions, params = self.scope_conditions(options)
        count = await self.count_records(STAGING_TABLE, " AND ".join(conditions), params)
        self.log.info("Counted staging records", count=count)

        errors = []
        warnings = []
        info = []
        if count == 0:
            errors.append("No data found in staging table. Please import data first.")
        elif count < LOW_VOLUME_THRESHOLD:
            warnings.append(f"Only {count} records found. This seems low for a typical import.")
        else:
            info.append(f"Found {count} records in staging table.")

        return self.format_result(
            not errors,
            count,
            errors=errors,
            warnings=warnings,
            info=info,
            start_time=start_time,
            options=options,
        )
