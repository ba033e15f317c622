"""
Flat, camelCase records for spreadsheet and report generators.

Column names here are a stable contract with downstream renderers; add new
columns at the end rather than renaming existing ones. No file I/O happens in
this module.
"""
from typing import Any, Dict, List

from govrate.models.pricing_schema import (
    EscalationProjection,
    LaborCategoryResult,
    LaborCategorySummary,
    OtherDirectCostResult,
    ProjectCalculation,
)

LABOR_CATEGORY_COLUMNS: tuple[str, ...] = (
    "id",
    "title",
    "baseRate",
    "hours",
    "ftePercentage",
    "capacity",
    "effectiveHours",
    "clearanceLevel",
    "location",
    "clearancePremium",
    "clearanceAdjustedRate",
    "overheadRate",
    "gaRate",
    "feeRate",
    "overheadAmount",
    "gaAmount",
    "feeAmount",
    "burdenedRate",
    "referenceTotalCost",
    "lcatVehicle",
    "lcatCode",
    "lcatName",
    "lcatRate",
    "projectRoleName",
    "companyRoleName",
    "companyRoleRate",
    "finalRate",
    "finalRateSource",
    "wrapRate",
    "minimumProfitRate",
    "wrapAmount",
    "minimumProfitAmount",
    "minimumAnnualRevenue",
    "companyMinimumRate",
    "totalCost",
    "actualCost",
    "actualProfit",
    "actualProfitPercentage",
    "finalRateDiscount",
    "referenceVariance",
    "settingsVersion",
    "annualSalary",
    "finalRateReason",
    "finalRateTimestamp",
    "finalRateActor",
    "projectRoleTypicalHours",
    "projectRoleTypicalClearance",
)


def labor_category_record(result: LaborCategoryResult) -> Dict[str, Any]:
    """One row per labor category with every input and derived field."""
    category = result.category
    lcat = category.lcat
    project_role = category.project_role
    metadata = category.final_rate_metadata
    row: Dict[str, Any] = {
        "id": category.id,
        "title": category.title,
        "baseRate": category.base_rate,
        "hours": category.hours,
        "ftePercentage": category.fte_percentage,
        "capacity": category.capacity,
        "clearanceLevel": category.clearance_level,
        "location": category.location,
        "lcatVehicle": lcat.vehicle if lcat else "",
        "lcatCode": lcat.code if lcat else "",
        "lcatName": lcat.name if lcat else "",
        "lcatRate": category.lcat_rate,
        "projectRoleName": (project_role.name or "") if project_role else "",
        "companyRoleName": category.company_role.name if category.company_role else "",
        "companyRoleRate": category.company_role_rate,
        "finalRate": category.final_rate,
        "finalRateSource": metadata.source.value,
        "finalRateReason": metadata.reason or "",
        "finalRateTimestamp": metadata.timestamp.isoformat() if metadata.timestamp else "",
        "finalRateActor": metadata.actor or "",
        "projectRoleTypicalHours": (
            project_role.typical_hours if project_role and project_role.typical_hours is not None else ""
        ),
        "projectRoleTypicalClearance": (project_role.typical_clearance or "") if project_role else "",
        "settingsVersion": result.settings_version,
    }
    row.update(result.cascade.model_dump(by_alias=True))
    row.update(result.margin.model_dump(by_alias=True))
    return {column: row.get(column) for column in LABOR_CATEGORY_COLUMNS}


def summary_record(summary: LaborCategorySummary) -> Dict[str, Any]:
    return summary.model_dump(by_alias=True)


def other_direct_cost_record(odc: OtherDirectCostResult) -> Dict[str, Any]:
    return odc.model_dump(by_alias=True)


def escalation_records(projection: EscalationProjection) -> List[Dict[str, Any]]:
    """One row per projected year."""
    return [point.model_dump(by_alias=True) for point in projection.yearly_rates]


def project_export(project: ProjectCalculation) -> Dict[str, Any]:
    """
    Everything a workbook generator needs for one project.

    Sections: projectInfo, settings, laborCategories, otherDirectCosts,
    summary, totals, validationWarnings.
    """
    pricing = project.settings
    return {
        "projectInfo": {
            "projectId": project.project_id,
            "calculatedAt": project.calculated_at.isoformat(),
            "contractType": pricing.contract_type,
            "contractVehicle": pricing.contract_vehicle,
            "periodOfPerformance": {
                "startDate": pricing.period_start.isoformat() if pricing.period_start else None,
                "endDate": pricing.period_end.isoformat() if pricing.period_end else None,
            },
            "settingsVersion": project.settings_version,
        },
        "settings": {
            "overheadRate": pricing.overhead_rate,
            "gaRate": pricing.ga_rate,
            "feeRate": pricing.fee_rate,
        },
        "laborCategories": [labor_category_record(r) for r in project.labor_categories],
        "otherDirectCosts": [other_direct_cost_record(o) for o in project.other_direct_costs],
        "summary": summary_record(project.summary),
        "totals": project.totals.model_dump(by_alias=True),
        "validationWarnings": [
            w.model_dump(by_alias=True, mode="json") for w in project.validation_warnings
        ],
    }
