"""
A3 Account Validation

Informational check reporting staging accounts that start with a given prefix
("A3" by default) within the selected OU and period. Findings never fail the
check: they are listed under ``info``, and a warning is added only when the
number of unique matching accounts exceeds a soft threshold.
"""

from validation_engine.business.models import (
    ErrorDetail,
    PreviewInfo,
    ProcessorMetadata,
    ValidationOptions,
    ValidationResult,
)
from validation_engine.data.store import STAGING_TABLE
from validation_engine.processors.base import BaseValidationProcessor
from validation_engine.utils.exceptions import DataStoreError

DEFAULT_ACCOUNT_PREFIX = "A3"
DEFAULT_WARNING_THRESHOLD = 10
DEFAULT_SAMPLE_SIZE = 5
DETAIL_SAMPLE_SIZE = 10


class A3AccountValidation(BaseValidationProcessor):
    """Soft-threshold report of accounts matching a prefix."""

    metadata = ProcessorMetadata(
        id="a3_accounts",
        name="A3 Account Check",
        description='Checks for accounts starting with "A3" in the staging table for the selected OU.',
        category="Data Quality",
        required=False,
        sequence=10,
        estimated_duration=1,
        tags=frozenset({"account-check", "A3"}),
        version="1.0.0",
    )

    async def validate(self, options: ValidationOptions) -> ValidationResult:
        if options.skip:
            return self.skipped_result(options)

        prefix = options.custom.account_prefix or DEFAULT_ACCOUNT_PREFIX
        threshold = options.custom.warning_threshold
        if threshold is None:
            threshold = DEFAULT_WARNING_THRESHOLD
        sample_size = options.custom.sample_size
        if sample_size is None:
            sample_size = DEFAULT_SAMPLE_SIZE

        self.log.info("Checking for prefixed accounts", account_prefix=prefix)
        start_time = self.now()

        where_clause, params = self.scope_filter(
            options, conditions=["account LIKE ?"], params=[f"{prefix}%"]
        )

        if options.ou:
            total_count = await self.count_records(STAGING_TABLE, "ou = ?", [options.ou])
        else:
            total_count = await self.count_records(STAGING_TABLE)

        limit_clause = ""
        query_params = list(params)
        if options.max_errors:
            limit_clause = "LIMIT ?"
            query_params.append(options.max_errors)

        matches = await self.query(
            f"""
            SELECT account, department, ou, period_combo, SUM(amount) AS amount
            FROM {STAGING_TABLE}
            {where_clause}
            GROUP BY account, department, ou, period_combo
            ORDER BY account, department
            {limit_clause}
            """,
            query_params,
        )

        unique_accounts = await self.query_scalar(
            f"SELECT COUNT(DISTINCT account) FROM {STAGING_TABLE} {where_clause}", params
        ) or 0

        warnings = []
        info = []
        error_details = []
        scope_label = options.ou or "all OUs"

        if matches:
            info.append(f'Found {unique_accounts} unique account(s) starting with "{prefix}"')
            info.append(f"Total of {len(matches)} account/department combinations")

            for record in matches[:sample_size]:
                amount = float(record["amount"] or 0)
                info.append(
                    f"  - Account: {record['account']}, Dept: {record['department']}, "
                    f"OU: {record['ou']}, Amount: {amount:.2f}"
                )
            if len(matches) > sample_size:
                info.append(f"  ... and {len(matches) - sample_size} more")

            if unique_accounts > threshold:
                warnings.append(
                    f'High number of "{prefix}" accounts detected: '
                    f"{unique_accounts} unique accounts found"
                )

            error_details.append(ErrorDetail(
                type="A3_ACCOUNTS_FOUND",
                message=f'Accounts starting with "{prefix}" in {scope_label}',
                count=len(matches),
                sample_records=[dict(record) for record in matches[:DETAIL_SAMPLE_SIZE]],
            ))
        else:
            info.append(f'No accounts starting with "{prefix}" found in the staging table')
            if options.ou:
                info.append(f"Checked OU: {options.ou}")

        return self.format_result(
            True,
            total_count,
            warnings=warnings,
            info=info,
            start_time=start_time,
            error_details=error_details,
            options=options,
            issues_found=0,
            extra={
                "account_prefix": prefix,
                "accounts_found": unique_accounts,
                "records_found": len(matches),
            },
        )

    async def preview(self, options: ValidationOptions) -> PreviewInfo:
        prefix = options.custom.account_prefix or DEFAULT_ACCOUNT_PREFIX
        try:
            if options.ou:
                record_count = await self.count_records(STAGING_TABLE, "ou = ?", [options.ou])
            else:
                record_count = await self.count_records(STAGING_TABLE)
        except DataStoreError as error:
            self.log.warning("Preview count unavailable", error=str(error))
            return await super().preview(options)

        return PreviewInfo(
            description=(
                f'Will check {record_count} records for accounts starting with "{prefix}" '
                f"in {options.ou or 'all OUs'}"
            ),
            records_to_check=record_count,
            estimated_duration=self.metadata.estimated_duration or 1,
        )
