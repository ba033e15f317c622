"""
test_export_formatter.py — Unit tests for the flat export records.

Tests cover:
  - Labor category rows carry exactly the published column set, in order
  - Both pricing models appear side by side in one row
  - Summary, ODC, escalation and project bundles use camelCase keys
  - Project bundle is JSON-serialisable
"""

import json
from datetime import date, datetime, timezone

from govrate.models.pricing_schema import FinalRateMetadata, FinalRateSource, OtherDirectCostInput
from govrate.services.export_formatter import (
    LABOR_CATEGORY_COLUMNS,
    escalation_records,
    labor_category_record,
    other_direct_cost_record,
    project_export,
    summary_record,
)


class TestLaborCategoryRecord:

    def test_columns_are_stable(self, aggregator, senior_engineer, pricing, system_settings):
        result = aggregator.calculate_labor_category(senior_engineer, pricing, system_settings)
        row = labor_category_record(result)
        assert tuple(row) == LABOR_CATEGORY_COLUMNS
        assert all(row[c] is not None for c in LABOR_CATEGORY_COLUMNS)
        assert LABOR_CATEGORY_COLUMNS[-6:] == (
            "annualSalary", "finalRateReason", "finalRateTimestamp", "finalRateActor",
            "projectRoleTypicalHours", "projectRoleTypicalClearance",
        )
        assert row["annualSalary"] == 150_000
        assert row["projectRoleName"] == "Technical Lead"
        assert row["projectRoleTypicalHours"] == 2080
        assert row["projectRoleTypicalClearance"] == "Secret"

    def test_final_rate_metadata_columns(self, aggregator, senior_engineer, pricing, system_settings):
        stamped = senior_engineer.model_copy(update={
            "final_rate_metadata": FinalRateMetadata(
                source=FinalRateSource.MANUAL,
                reason="Negotiated with CO",
                timestamp=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
                actor="pricing.lead",
            ),
        })
        row = labor_category_record(aggregator.calculate_labor_category(stamped, pricing, system_settings))
        assert row["finalRateReason"] == "Negotiated with CO"
        assert row["finalRateTimestamp"] == "2024-03-01T12:00:00+00:00"
        assert row["finalRateActor"] == "pricing.lead"

    def test_row_is_stable_after_input_edit(self, aggregator, senior_engineer, pricing, system_settings):
        result = aggregator.calculate_labor_category(senior_engineer, pricing, system_settings)
        senior_engineer.base_rate = 999.0
        row = labor_category_record(result)
        assert row["baseRate"] == 100.0
        assert row["burdenedRate"] == result.burdened_rate

    def test_reference_and_billed_side_by_side(self, aggregator, senior_engineer, pricing, system_settings):
        result = aggregator.calculate_labor_category(senior_engineer, pricing, system_settings)
        row = labor_category_record(result)
        assert row["burdenedRate"] == result.burdened_rate
        assert row["referenceTotalCost"] == result.reference_total_cost
        assert row["totalCost"] == result.total_cost
        assert row["finalRate"] == 170.0
        assert row["lcatCode"] == "SSE-3"
        assert row["clearanceLevel"] == "Secret"
        assert row["finalRateSource"] == "manual"
        assert row["settingsVersion"] == 3

    def test_missing_links_export_empty(self, aggregator, analyst, pricing, system_settings):
        row = labor_category_record(aggregator.calculate_labor_category(analyst, pricing, system_settings))
        assert row["lcatRate"] == 0.0
        assert row["companyRoleName"] == ""
        assert row["lcatVehicle"] == ""
        assert row["projectRoleTypicalHours"] == ""
        assert row["finalRateReason"] == ""


class TestOtherRecords:

    def test_summary_keys(self, aggregator, analyst, system_settings):
        record = summary_record(aggregator.summarize([analyst], 0.3, 0.1, 0.08, system_settings))
        assert record["totalCategories"] == 1
        assert "averageActualProfitPercentage" in record
        assert "total_categories" not in record

    def test_escalation_rows(self, escalation_projector):
        p = escalation_projector.project(100.0, 0.02, date(2024, 1, 1), date(2025, 1, 1))
        rows = escalation_records(p)
        assert [r["year"] for r in rows] == [2024, 2025]
        assert set(rows[0]) == {"year", "rate", "escalationAmount"}

    def test_project_bundle(self, aggregator, pricing, senior_engineer, analyst, system_settings):
        project = aggregator.calculate_project([senior_engineer, analyst], pricing, system_settings)
        bundle = project_export(project)
        assert set(bundle) == {
            "projectInfo", "settings", "laborCategories", "otherDirectCosts",
            "summary", "totals", "validationWarnings",
        }
        assert bundle["projectInfo"]["periodOfPerformance"]["startDate"] == "2024-01-01"
        assert bundle["settings"] == {"overheadRate": 0.30, "gaRate": 0.10, "feeRate": 0.08}
        assert len(bundle["laborCategories"]) == 2
        assert bundle["totals"]["totalCost"] == project.totals.total_cost
        json.dumps(bundle)

    def test_project_bundle_with_odcs(self, aggregator, pricing, analyst, system_settings):
        odc = OtherDirectCostInput(description="Site visit", amount=1000.0,
                                   category="Travel", taxable=True, tax_rate=0.06)
        project = aggregator.calculate_project([analyst], pricing, system_settings, odcs=[odc])
        bundle = project_export(project)
        assert len(bundle["otherDirectCosts"]) == 1
        row = bundle["otherDirectCosts"][0]
        assert row == other_direct_cost_record(project.other_direct_costs[0])
        assert abs(row["taxAmount"] - 60.0) < 0.01
        assert abs(row["totalAmount"] - 1060.0) < 0.01
