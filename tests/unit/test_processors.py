"""
Unit tests for the bundled processors against seeded in-memory SQLite stores.
"""

import pytest

from validation_engine.business.models import ProcessorOptions, ValidationOptions
from validation_engine.processors.a3_accounts import A3AccountValidation
from validation_engine.processors.duplicate_records import DuplicateRecordsValidation
from validation_engine.processors.staging_data import StagingDataValidation
from validation_engine.utils.exceptions import DataStoreQueryError

from tests.fixtures import StubDataStore, a3_rows, create_seeded_store

pytestmark = pytest.mark.unit


class TestDuplicateRecordsValidation:

    @pytest.mark.asyncio
    async def test_reports_each_duplicate_key(self, duplicate_store):
        result = await DuplicateRecordsValidation(store=duplicate_store).validate(ValidationOptions())

        assert result.success is False
        assert result.record_count == 5
        assert result.errors == [
            'Duplicate: Account "A1", Department "D1", Period "2024-01" appears 2 times'
        ]
        assert result.warnings == ["Found 1 unique duplicate combinations affecting 1 excess records"]
        assert result.stats.issues_found == 1
        assert result.error_details[0].type == "DUPLICATE_RECORDS"
        assert result.error_details[0].sample_records[0]["count"] == 2

    @pytest.mark.asyncio
    async def test_clean_data_passes(self, clean_store):
        result = await DuplicateRecordsValidation(store=clean_store).validate(ValidationOptions())

        assert result.success is True
        assert result.record_count == 12
        assert result.errors == []
        assert result.info == ["No duplicate records found"]

    @pytest.mark.asyncio
    async def test_scoped_to_ou(self, duplicate_store):
        result = await DuplicateRecordsValidation(store=duplicate_store).validate(
            ValidationOptions(ou="OU2")
        )

        assert result.success is True
        assert result.record_count == 1
        assert result.metadata.ou == "OU2"

    @pytest.mark.asyncio
    async def test_max_errors_limits_duplicate_groups(self):
        store = StubDataStore(
            responder=lambda statement: [] if "GROUP BY" in statement.sql else [{"count": 0}]
        )

        await DuplicateRecordsValidation(store=store).validate(ValidationOptions(max_errors=3))

        duplicate_query = store.statements[1]
        assert "LIMIT ?" in duplicate_query.sql
        assert duplicate_query.args[-1] == 3

    @pytest.mark.asyncio
    async def test_infrastructure_fault_is_raised(self):
        store = StubDataStore(error=DataStoreQueryError("Query failed: disk I/O error"))

        with pytest.raises(DataStoreQueryError):
            await DuplicateRecordsValidation(store=store).validate(ValidationOptions())

    @pytest.mark.asyncio
    async def test_skip_returns_skipped_result(self, stub_store):
        result = await DuplicateRecordsValidation(store=stub_store).validate(ValidationOptions(skip=True))

        assert result.success is True
        assert result.warnings == ["Validation was skipped"]
        assert stub_store.statements == []


class TestA3AccountValidation:

    @pytest.mark.asyncio
    async def test_findings_are_informational(self, duplicate_store):
        result = await A3AccountValidation(store=duplicate_store).validate(ValidationOptions(ou="OU1"))

        assert result.success is True
        assert result.errors == []
        assert result.warnings == []
        assert result.record_count == 4
        assert result.info[0] == 'Found 1 unique account(s) starting with "A3"'
        assert result.metadata.extra["accounts_found"] == 1
        assert result.error_details[0].type == "A3_ACCOUNTS_FOUND"

    @pytest.mark.asyncio
    async def test_warns_past_threshold(self):
        store = await create_seeded_store(a3_rows(11))
        try:
            result = await A3AccountValidation(store=store).validate(ValidationOptions())
        finally:
            await store.close()

        assert result.success is True
        assert result.warnings == ['High number of "A3" accounts detected: 11 unique accounts found']
        assert "  ... and 6 more" in result.info

    @pytest.mark.asyncio
    async def test_threshold_is_not_exceeded_at_ten(self):
        store = await create_seeded_store(a3_rows(10))
        try:
            result = await A3AccountValidation(store=store).validate(ValidationOptions())
        finally:
            await store.close()

        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_custom_prefix_and_threshold(self, duplicate_store):
        options = ValidationOptions(custom=ProcessorOptions(account_prefix="B", warning_threshold=0))

        result = await A3AccountValidation(store=duplicate_store).validate(options)

        assert result.info[0] == 'Found 1 unique account(s) starting with "B"'
        assert result.warnings == ['High number of "B" accounts detected: 1 unique accounts found']
        assert result.metadata.extra["account_prefix"] == "B"

    @pytest.mark.asyncio
    async def test_no_matches(self, clean_store):
        result = await A3AccountValidation(store=clean_store).validate(ValidationOptions(ou="OU1"))

        assert result.success is True
        assert result.info == [
            'No accounts starting with "A3" found in the staging table',
            "Checked OU: OU1",
        ]

    @pytest.mark.asyncio
    async def test_preview_counts_rows_in_scope(self, duplicate_store):
        preview = await A3AccountValidation(store=duplicate_store).preview(ValidationOptions(ou="OU1"))

        assert preview.records_to_check == 4
        assert "OU1" in preview.description

    @pytest.mark.asyncio
    async def test_preview_falls_back_when_store_fails(self):
        store = StubDataStore(error=DataStoreQueryError("Query failed"))

        preview = await A3AccountValidation(store=store).preview(ValidationOptions())

        assert preview.records_to_check == 0
        assert preview.description == A3AccountValidation.metadata.description


class TestStagingDataValidation:

    @pytest.mark.asyncio
    async def test_empty_staging_table_fails(self, empty_store):
        result = await StagingDataValidation(store=empty_store).validate(ValidationOptions())

        assert result.success is False
        assert result.errors == ["No data found in staging table. Please import data first."]

    @pytest.mark.asyncio
    async def test_low_volume_warns(self, duplicate_store):
        result = await StagingDataValidation(store=duplicate_store).validate(ValidationOptions())

        assert result.success is True
        assert result.record_count == 5
        assert result.warnings == ["Only 5 records found. This seems low for a typical import."]

    @pytest.mark.asyncio
    async def test_normal_volume_is_informational(self, clean_store):
        result = await StagingDataValidation(store=clean_store).validate(ValidationOptions())

        assert result.success is True
        assert result.info == ["Found 12 records in staging table."]

    @pytest.mark.asyncio
    async def test_scope_applies_to_count(self, duplicate_store):
        result = await StagingDataValidation(store=duplicate_store).validate(ValidationOptions(ou="OU9"))

        assert result.success is False
        assert result.record_count == 0
