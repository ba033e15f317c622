"""
rate_validator.py — Rate ceilings, rate rules and input checks.

Covers:
  - Burden ceilings: contract vehicle maxima, or generic ceilings when no vehicle
  - Company-role rate rules (min / max / typical) with specificity resolution
  - Escalation bounds per rule
  - Labor category and project-settings input checks, with info findings
    where a category departs from its project role's typical profile
  - Per-field override / dismiss state owned by the caller

Findings are data, never exceptions. A fresh list is produced on every call;
overriding a field only changes how the next pass classifies it.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from govrate.config import (
    CLEARANCE_PREMIUMS,
    CONTRACT_TYPES,
    GENERIC_MAX_FEE_RATE,
    GENERIC_MAX_GA_RATE,
    GENERIC_MAX_OVERHEAD_RATE,
    LOCATION_TYPES,
    MAX_BASE_RATE,
    MAX_FTE_PERCENTAGE,
    MAX_HOURS,
    MIN_BASE_RATE,
    MIN_FTE_PERCENTAGE,
    MIN_HOURS,
    ODC_CATEGORIES,
    TYPICAL_RATE_TOLERANCE,
)
from govrate.models.pricing_schema import (
    ContractVehicle,
    LaborCategoryInput,
    OtherDirectCostInput,
    OverridePermissions,
    PricingSettings,
    Severity,
    ValidationError,
    ValidationReport,
)
from govrate.services.perf_monitor import timed, tracker
from govrate.services.reference_catalog import ReferenceCatalog

logger = logging.getLogger("govrate.validation")

CONTRACT_LIMIT_REASON = "Contract vehicle limit exceeded"
GENERAL_LIMIT_REASON = "General rate limit exceeded"
RATE_RULE_REASON = "Rate below company minimum"
INPUT_RANGE_REASON = "Input outside standard range"

_BURDEN_FIELDS = (
    ("overheadRate", "Overhead", "max_overhead_rate", GENERIC_MAX_OVERHEAD_RATE),
    ("gaRate", "G&A", "max_ga_rate", GENERIC_MAX_GA_RATE),
    ("feeRate", "Fee", "max_fee_rate", GENERIC_MAX_FEE_RATE),
)


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


# ── Override ledger ──────────────────────────────────────────────────────────

class FieldOverrideState(str, Enum):
    OVERRIDDEN = "overridden"
    DISMISSED = "dismissed"


class OverrideLedger:
    """
    Per-session override state keyed by field name.

    Owned by the caller and passed into each validation call. A field with no
    entry is validated normally; OVERRIDDEN downgrades its overridable findings
    to warnings; DISMISSED puts it back to normal classification.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[FieldOverrideState, Optional[str]]] = {}

    def override(self, field: str, reason: Optional[str] = None) -> None:
        self._entries[field] = (FieldOverrideState.OVERRIDDEN, reason)
        logger.info("field overridden", extra={"field": field})

    def dismiss(self, field: str) -> None:
        self._entries[field] = (FieldOverrideState.DISMISSED, None)

    def state(self, field: str) -> Optional[FieldOverrideState]:
        entry = self._entries.get(field)
        return entry[0] if entry else None

    def is_overridden(self, field: str) -> bool:
        return self.state(field) is FieldOverrideState.OVERRIDDEN

    def reason(self, field: str) -> Optional[str]:
        entry = self._entries.get(field)
        return entry[1] if entry else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# ── Validator ────────────────────────────────────────────────────────────────

class RateValidator:
    """Validation against a read-only ReferenceCatalog."""

    def __init__(self, catalog: Optional[ReferenceCatalog] = None) -> None:
        self.catalog = catalog or ReferenceCatalog()

    # ------------------------------------------------------------------
    # Finding construction
    # ------------------------------------------------------------------

    @staticmethod
    def _error(field: str, message: str, value=None) -> ValidationError:
        return ValidationError(field=field, message=message, value=value,
                               severity=Severity.ERROR, can_override=False)

    @staticmethod
    def _warning(field: str, message: str, value=None) -> ValidationError:
        return ValidationError(field=field, message=message, value=value,
                               severity=Severity.WARNING, can_override=False)

    @staticmethod
    def _info(field: str, message: str, value=None) -> ValidationError:
        return ValidationError(field=field, message=message, value=value,
                               severity=Severity.INFO, can_override=False)

    @staticmethod
    def _overridable(
        field: str,
        message: str,
        value,
        permitted: bool,
        reason: str,
        overrides: Optional[OverrideLedger],
        downgrade: bool = True,
    ) -> ValidationError:
        """
        Classify a violation the caller may override.

        A ledger override downgrades the finding to a warning but leaves
        ``can_override`` to the permission. Otherwise the permission either
        downgrades the finding to a warning or, with ``downgrade=False``, keeps
        it an error that is marked overridable.
        """
        if overrides is not None and overrides.is_overridden(field):
            return ValidationError(
                field=field, message=message, value=value,
                severity=Severity.WARNING, can_override=permitted,
                override_reason=overrides.reason(field) or reason,
            )
        if permitted:
            return ValidationError(
                field=field, message=message, value=value,
                severity=Severity.WARNING if downgrade else Severity.ERROR,
                can_override=True, override_reason=reason,
            )
        return ValidationError(field=field, message=message, value=value,
                               severity=Severity.ERROR, can_override=False)

    @staticmethod
    def _report(
        findings: Sequence[ValidationError],
        permissions: Optional[OverridePermissions] = None,
    ) -> ValidationReport:
        errors = [f for f in findings if f.severity is Severity.ERROR]
        warnings = [f for f in findings if f.severity is not Severity.ERROR]
        can_proceed = not errors or bool(
            permissions
            and permissions.can_override_validation
            and all(e.can_override for e in errors)
        )
        if errors:
            tracker.record_findings(Severity.ERROR.value, len(errors))
        if warnings:
            tracker.record_findings(Severity.WARNING.value, len(warnings))
        return ValidationReport(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            can_proceed=can_proceed,
        )

    # ------------------------------------------------------------------
    # Ceilings
    # ------------------------------------------------------------------

    def validate_against_ceilings(
        self,
        overhead_rate: float,
        ga_rate: float,
        fee_rate: float,
        vehicle: Union[ContractVehicle, str, None] = None,
        permissions: Optional[OverridePermissions] = None,
        overrides: Optional[OverrideLedger] = None,
        field_prefix: str = "",
    ) -> List[ValidationError]:
        """
        Check burden rates against the vehicle's ceilings, or the generic
        ceilings (100 % / 50 % / 20 %) when no vehicle is given.

        Negative rates are always errors, even for a field marked overridden.
        """
        permissions = permissions or OverridePermissions()
        rates = {"overheadRate": overhead_rate, "gaRate": ga_rate, "feeRate": fee_rate}
        findings: List[ValidationError] = []

        if isinstance(vehicle, str):
            resolved = self.catalog.get_vehicle(vehicle)
            if resolved is None:
                findings.append(self._error(
                    f"{field_prefix}contractVehicle",
                    f"Contract vehicle {vehicle} not found",
                    vehicle,
                ))
                return findings
            vehicle = resolved

        for key, label, ceiling_attr, generic_max in _BURDEN_FIELDS:
            field = f"{field_prefix}{key}"
            value = rates[key]
            if value < 0:
                findings.append(self._error(field, f"{label} rate cannot be negative", value))
                continue

            if vehicle is not None:
                ceiling = getattr(vehicle, ceiling_attr)
                if value > ceiling:
                    findings.append(self._overridable(
                        field,
                        f"{label} rate {_pct(value)} exceeds {vehicle.name} "
                        f"maximum of {_pct(ceiling)}",
                        value,
                        permitted=permissions.can_override_contract_limits,
                        reason=permissions.reason or CONTRACT_LIMIT_REASON,
                        overrides=overrides,
                    ))
            elif value > generic_max:
                findings.append(self._overridable(
                    field,
                    f"{label} rate {_pct(value)} exceeds the general maximum of "
                    f"{_pct(generic_max)}",
                    value,
                    permitted=permissions.can_override_rates,
                    reason=permissions.reason or GENERAL_LIMIT_REASON,
                    overrides=overrides,
                ))

        if findings:
            logger.debug("ceiling check produced %d finding(s) (vehicle=%s)",
                         len(findings), vehicle.name if vehicle else None)
        return findings

    # ------------------------------------------------------------------
    # Rate rules
    # ------------------------------------------------------------------

    def validate_rate(
        self,
        rate: float,
        company_role_id: Optional[str] = None,
        contract_vehicle_id: Optional[str] = None,
        project_id: Optional[str] = None,
        overrides: Optional[OverrideLedger] = None,
        permissions: Optional[OverridePermissions] = None,
        field: str = "rate",
    ) -> ValidationReport:
        """
        Check an hourly rate against the most specific rule for the company role.

        Below the rule minimum is an error (overridable with can_override_rates);
        above the maximum, or more than 10 % under the typical rate, is a warning.
        """
        permissions = permissions or OverridePermissions()
        findings = self._rate_findings(
            rate, company_role_id, contract_vehicle_id, project_id,
            overrides, permissions, field,
        )
        return self._report(findings, permissions)

    def _rate_findings(
        self,
        rate: float,
        company_role_id: Optional[str],
        contract_vehicle_id: Optional[str],
        project_id: Optional[str],
        overrides: Optional[OverrideLedger],
        permissions: OverridePermissions,
        field: str,
    ) -> List[ValidationError]:
        findings: List[ValidationError] = []
        if not company_role_id:
            return findings

        if self.catalog.get_company_role(company_role_id) is None and not any(
            r.company_role_id == company_role_id for r in self.catalog.rules
        ):
            findings.append(self._error(field, f"Company role {company_role_id} not found", rate))
            return findings

        rule = self.catalog.resolve_rule(company_role_id, contract_vehicle_id, project_id)
        if rule is None:
            findings.append(self._error(
                field,
                f"No active rate validation rule for company role {company_role_id}",
                rate,
            ))
            return findings

        if rate < rule.min_rate:
            findings.append(self._overridable(
                field,
                f"Rate ${rate:.2f} is below the minimum of ${rule.min_rate:.2f}",
                rate,
                permitted=permissions.can_override_rates,
                reason=permissions.reason or RATE_RULE_REASON,
                overrides=overrides,
                downgrade=False,
            ))
        if rate > rule.max_rate:
            findings.append(self._warning(
                field,
                f"Rate ${rate:.2f} is above the maximum of ${rule.max_rate:.2f}",
                rate,
            ))
        if rate < rule.typical_rate * TYPICAL_RATE_TOLERANCE:
            findings.append(self._warning(
                field,
                f"Rate ${rate:.2f} is more than 10% below the typical rate of "
                f"${rule.typical_rate:.2f}",
                rate,
            ))

        return findings

    def validate_escalation(
        self,
        escalation_rate: float,
        company_role_id: str,
        contract_vehicle_id: Optional[str] = None,
        project_id: Optional[str] = None,
        field: str = "escalationRate",
    ) -> ValidationReport:
        findings: List[ValidationError] = []
        rule = self.catalog.resolve_rule(company_role_id, contract_vehicle_id, project_id)
        if rule is None:
            findings.append(self._error(
                field,
                f"No active rate validation rule for company role {company_role_id}",
                escalation_rate,
            ))
        elif not rule.min_escalation_rate <= escalation_rate <= rule.max_escalation_rate:
            findings.append(self._warning(
                field,
                f"Escalation rate {_pct(escalation_rate)} is outside the allowed range "
                f"{_pct(rule.min_escalation_rate)} to {_pct(rule.max_escalation_rate)}",
                escalation_rate,
            ))
        return self._report(findings)

    # ------------------------------------------------------------------
    # Input checks
    # ------------------------------------------------------------------

    def validate_labor_category(
        self,
        category: LaborCategoryInput,
        index: int = 0,
        permissions: Optional[OverridePermissions] = None,
        overrides: Optional[OverrideLedger] = None,
    ) -> List[ValidationError]:
        permissions = permissions or OverridePermissions()
        prefix = f"laborCategories[{index}]."
        findings: List[ValidationError] = []

        if not category.title.strip():
            findings.append(self._error(f"{prefix}title", "Title is required", category.title))

        if not MIN_BASE_RATE <= category.base_rate <= MAX_BASE_RATE:
            findings.append(self._overridable(
                f"{prefix}baseRate",
                f"Base rate must be between ${MIN_BASE_RATE:.0f} and ${MAX_BASE_RATE:.0f}",
                category.base_rate,
                permitted=permissions.can_override_validation,
                reason=permissions.reason or INPUT_RANGE_REASON,
                overrides=overrides,
            ))

        if not MIN_HOURS <= category.hours <= MAX_HOURS:
            findings.append(self._overridable(
                f"{prefix}hours",
                f"Hours must be between {MIN_HOURS:.0f} and {MAX_HOURS:,.0f}",
                category.hours,
                permitted=permissions.can_override_validation,
                reason=permissions.reason or INPUT_RANGE_REASON,
                overrides=overrides,
            ))

        if not MIN_FTE_PERCENTAGE <= category.fte_percentage <= MAX_FTE_PERCENTAGE:
            findings.append(self._error(
                f"{prefix}ftePercentage",
                f"FTE percentage must be between {MIN_FTE_PERCENTAGE}% and {MAX_FTE_PERCENTAGE:.0f}%",
                category.fte_percentage,
            ))

        if category.capacity < 0:
            findings.append(self._error(
                f"{prefix}capacity", "Capacity cannot be negative", category.capacity
            ))

        if category.clearance_level not in CLEARANCE_PREMIUMS:
            findings.append(self._error(
                f"{prefix}clearanceLevel",
                f"Invalid clearance level: {category.clearance_level}",
                category.clearance_level,
            ))

        if category.location not in LOCATION_TYPES:
            findings.append(self._error(
                f"{prefix}location",
                f"Invalid location: {category.location}",
                category.location,
            ))

        findings.extend(self._project_role_findings(category, prefix))

        return findings

    def _project_role_findings(
        self, category: LaborCategoryInput, prefix: str
    ) -> List[ValidationError]:
        """
        Info findings where the category departs from its project role's typical
        hours or clearance. Values missing on the link fall back to the catalog.
        """
        link = category.project_role
        if link is None:
            return []
        role = self.catalog.get_project_role(link.id)
        name = link.name or (role.name if role else None) or link.id or "project role"
        typical_hours = link.typical_hours
        typical_clearance = link.typical_clearance
        if role is not None:
            if typical_hours is None:
                typical_hours = role.typical_hours
            if typical_clearance is None:
                typical_clearance = role.typical_clearance

        findings: List[ValidationError] = []
        if typical_hours is not None and category.hours != typical_hours:
            findings.append(self._info(
                f"{prefix}hours",
                f"Hours {category.hours:,.0f} differ from {name} typical hours of {typical_hours:,.0f}",
                category.hours,
            ))
        if typical_clearance and category.clearance_level != typical_clearance:
            findings.append(self._info(
                f"{prefix}clearanceLevel",
                f"Clearance {category.clearance_level} differs from {name} typical clearance "
                f"{typical_clearance}",
                category.clearance_level,
            ))
        return findings

    def validate_other_direct_cost(
        self, odc: OtherDirectCostInput, index: int = 0
    ) -> List[ValidationError]:
        prefix = f"otherDirectCosts[{index}]."
        findings: List[ValidationError] = []
        if not odc.description.strip():
            findings.append(self._error(f"{prefix}description", "Description is required",
                                        odc.description))
        if odc.amount < 0:
            findings.append(self._error(f"{prefix}amount", "Amount must be non-negative", odc.amount))
        if not 0 <= odc.tax_rate <= 1:
            findings.append(self._error(f"{prefix}taxRate",
                                        "Tax rate must be between 0% and 100%", odc.tax_rate))
        if odc.category not in ODC_CATEGORIES:
            findings.append(self._error(f"{prefix}category", "Invalid category", odc.category))
        return findings

    def validate_settings(
        self,
        settings: PricingSettings,
        permissions: Optional[OverridePermissions] = None,
        overrides: Optional[OverrideLedger] = None,
    ) -> List[ValidationError]:
        findings = self.validate_against_ceilings(
            settings.overhead_rate,
            settings.ga_rate,
            settings.fee_rate,
            vehicle=settings.contract_vehicle,
            permissions=permissions,
            overrides=overrides,
        )

        if settings.contract_type not in CONTRACT_TYPES:
            findings.append(self._error(
                "contractType",
                f"Contract type must be one of {', '.join(CONTRACT_TYPES)}",
                settings.contract_type,
            ))

        start, end = settings.period_start, settings.period_end
        if start is None or end is None:
            findings.append(self._error("periodOfPerformance", "Period of performance is required"))
        elif start >= end:
            findings.append(self._error(
                "periodOfPerformance",
                "Period of performance start must be before its end",
                {"start": start.isoformat(), "end": end.isoformat()},
            ))

        if settings.contract_vehicle and start is not None:
            vehicle = self.catalog.get_vehicle(settings.contract_vehicle)
            if vehicle is not None and not vehicle.is_active_on(start):
                findings.append(self._warning(
                    "contractVehicle",
                    f"{vehicle.name} is not active on {start.isoformat()}",
                    settings.contract_vehicle,
                ))

        return findings

    @timed
    def validate_project(
        self,
        settings: PricingSettings,
        categories: Sequence[LaborCategoryInput],
        permissions: Optional[OverridePermissions] = None,
        overrides: Optional[OverrideLedger] = None,
        odcs: Sequence[OtherDirectCostInput] = (),
    ) -> ValidationReport:
        """
        Full pre-calculation gate: settings, every category's inputs and, where
        the category links a company role with a rule, its base rate; then
        each other direct cost.
        """
        permissions = permissions or OverridePermissions()
        findings = self.validate_settings(settings, permissions, overrides)

        for index, category in enumerate(categories):
            findings.extend(self.validate_labor_category(category, index, permissions, overrides))

            role_id = category.company_role.id if category.company_role else None
            if not role_id:
                continue
            field = f"laborCategories[{index}].baseRate"
            if self.catalog.resolve_rule(role_id, settings.contract_vehicle, settings.project_id) is None:
                findings.append(self._info(
                    field,
                    f"No rate validation rule for company role {role_id}",
                    category.base_rate,
                ))
                continue
            findings.extend(self._rate_findings(
                category.base_rate, role_id, settings.contract_vehicle,
                settings.project_id, overrides, permissions, field,
            ))

        for index, odc in enumerate(odcs):
            findings.extend(self.validate_other_direct_cost(odc, index))

        report = self._report(findings, permissions)
        logger.debug(
            "project validation: %d error(s), %d warning(s), can_proceed=%s",
            len(report.errors), len(report.warnings), report.can_proceed,
        )
        return report
