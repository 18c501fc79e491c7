"""
Duplicate Records Validation

Flags staging rows that share the natural key (account, department, period).
Every duplicated key becomes one error line; a single warning summarizes how many
excess records the duplicates account for.
"""

from validation_engine.business.models import (
    ErrorDetail,
    ProcessorMetadata,
    ValidationOptions,
    ValidationResult,
)
from validation_engine.data.store import STAGING_TABLE
from validation_engine.processors.base import BaseValidationProcessor

DEFAULT_SAMPLE_SIZE = 5


class DuplicateRecordsValidation(BaseValidationProcessor):
    """Duplicate detection over account + department + period_combo."""

    metadata = ProcessorMetadata(
        id="duplicate_records",
        name="Duplicate Records Check",
        description=(
            "Checks for duplicate records in the staging table based on "
            "account, department, and period."
        ),
        category="Data Quality",
        required=True,
        sequence=1,
        estimated_duration=2,
        tags=frozenset({"data-quality", "duplicates", "integrity"}),
        version="1.0.0",
    )

    async def validate(self, options: ValidationOptions) -> ValidationResult:
        if options.skip:
            return self.skipped_result(options)

        self.log.info("Checking for duplicate records")
        start_time = self.now()
        where_clause, params = self.scope_filter(options)

        total_count = await self.query_scalar(
            f"SELECT COUNT(*) FROM {STAGING_TABLE} {where_clause}", params
        ) or 0

        limit_clause = ""
        query_params = list(params)
        if options.max_errors:
            limit_clause = "LIMIT ?"
            query_params.append(options.max_errors)

        duplicates = await self.query(
            f"""
            SELECT account, department, period_combo, COUNT(*) AS count
            FROM {STAGING_TABLE}
            {where_clause}
            GROUP BY account, department, period_combo
            HAVING COUNT(*) > 1
            ORDER BY count DESC, account, department, period_combo
            {limit_clause}
            """,
            query_params,
        )

        errors = [
            f'Duplicate: Account "{dup["account"]}", Department "{dup["department"]}", '
            f'Period "{dup["period_combo"]}" appears {dup["count"]} times'
            for dup in duplicates
        ]
        warnings = []
        info = []
        error_details = []

        if duplicates:
            excess_records = sum(dup["count"] - 1 for dup in duplicates)
            warnings.append(
                f"Found {len(duplicates)} unique duplicate combinations "
                f"affecting {excess_records} excess records"
            )
            sample_size = options.custom.sample_size
            if sample_size is None:
                sample_size = DEFAULT_SAMPLE_SIZE
            error_details.append(ErrorDetail(
                type="DUPLICATE_RECORDS",
                message="Records with same account, department, and period",
                count=len(duplicates),
                sample_records=[dict(dup) for dup in duplicates[:sample_size]],
            ))
        else:
            info.append("No duplicate records found")

        return self.format_result(
            not errors,
            int(total_count),
            errors=errors,
            warnings=warnings,
            info=info,
            start_time=start_time,
            error_details=error_details,
            options=options,
            issues_found=len(duplicates),
        )
