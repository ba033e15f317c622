"""
Pricing records shared by every engine.

Attributes are snake_case in Python; every record serialises with camelCase
aliases (``model_dump(by_alias=True)``) so downstream spreadsheet/report
generators see stable field names such as ``baseRate`` and ``burdenedRate``.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─── Enumerations ───────────────────────────────────────────────────────────

class ClearanceLevel(str, Enum):
    NONE = "None"
    PUBLIC_TRUST = "Public Trust"
    SECRET = "Secret"
    TOP_SECRET = "Top Secret"


class LocationType(str, Enum):
    REMOTE = "Remote"
    ON_SITE = "On-site"
    HYBRID = "Hybrid"


class FinalRateSource(str, Enum):
    CATALOG = "catalog"
    COMPANY = "company"
    MANUAL = "manual"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class UserRole(str, Enum):
    VIEWER = "viewer"
    ANALYST = "analyst"
    MANAGER = "manager"
    ADMIN = "admin"


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _FrozenRecord(_Record):
    model_config = ConfigDict(frozen=True)


# ─── Reference data ─────────────────────────────────────────────────────────

class ContractVehicle(_FrozenRecord):
    """A contracting mechanism (e.g. a GSA schedule) that caps burden rates."""
    id: str = ""
    name: str = Field(..., description="e.g., GSA MAS, VA SPRUCE")
    code: str = Field("", description="e.g., GSA_MAS, VA_SPRUCE")
    description: str = ""
    escalation_rate: float = Field(0.0, description="Annual escalation as a fraction (0.02 = 2%)")
    max_overhead_rate: float
    max_ga_rate: float
    max_fee_rate: float
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    compliance_tags: List[str] = Field(default_factory=list)
    is_active: bool = True

    def is_active_on(self, on: date) -> bool:
        if not self.is_active:
            return False
        if self.start_date and on < self.start_date:
            return False
        if self.end_date and on > self.end_date:
            return False
        return True


class CompanyRole(_FrozenRecord):
    id: str
    name: str
    practice_area: str = ""
    pay_band: float = Field(..., description="Annual pay-band salary in dollars")
    rate_increase: float = Field(0.0, description="Annual pay increase as a fraction")
    is_active: bool = True


class ProjectRole(_FrozenRecord):
    id: str
    name: str
    typical_hours: float = 2080.0
    typical_clearance: str = ClearanceLevel.NONE.value
    typical_location: str = LocationType.REMOTE.value


class RateValidationRule(_FrozenRecord):
    id: str = ""
    company_role_id: str
    contract_vehicle_id: Optional[str] = None
    project_id: Optional[str] = None
    min_rate: float
    max_rate: float
    typical_rate: float
    min_escalation_rate: float = 0.0
    max_escalation_rate: float = 0.10
    is_active: bool = True


# ─── Labor category input ───────────────────────────────────────────────────

class FinalRateMetadata(_Record):
    source: FinalRateSource = FinalRateSource.MANUAL
    reason: Optional[str] = None
    timestamp: Optional[datetime] = None
    actor: Optional[str] = None


class LcatLink(_Record):
    """Linkage to a catalog labor category and its vehicle-specific rate."""
    vehicle: str = ""
    code: str = ""
    name: str = ""
    lcat_rate: float = 0.0


class ProjectRoleLink(_Record):
    id: Optional[str] = None
    name: Optional[str] = None
    typical_hours: Optional[float] = None
    typical_clearance: Optional[str] = None


class CompanyRoleRef(_Record):
    id: str = ""
    name: str = ""
    rate: float = Field(0.0, description="Annual pay-band salary")


class LaborCategoryInput(_Record):
    """
    One priced seat type. Range checks live in the validator, so construction
    accepts out-of-range numbers and unknown clearance/location strings.
    """
    id: Optional[str] = None
    title: str = ""
    base_rate: float = 0.0
    hours: float = 0.0
    fte_percentage: float = 100.0
    capacity: float = 1.0
    clearance_level: str = ClearanceLevel.NONE.value
    location: str = LocationType.REMOTE.value
    lcat: Optional[LcatLink] = None
    project_role: Optional[ProjectRoleLink] = None
    company_role: Optional[CompanyRoleRef] = None
    final_rate: float = 0.0
    final_rate_metadata: FinalRateMetadata = Field(default_factory=FinalRateMetadata)

    @field_validator("clearance_level", "location", mode="before")
    @classmethod
    def _enum_to_value(cls, v: Any) -> Any:
        return v.value if isinstance(v, Enum) else v

    @property
    def lcat_rate(self) -> float:
        return self.lcat.lcat_rate if self.lcat else 0.0

    @property
    def company_role_rate(self) -> float:
        return self.company_role.rate if self.company_role else 0.0


class PricingSettings(_Record):
    """Per-project burden envelope supplied by the project layer."""
    overhead_rate: float = 0.0
    ga_rate: float = 0.0
    fee_rate: float = 0.0
    contract_type: str = "T&M"
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    contract_vehicle: Optional[str] = Field(None, description="Vehicle id, name or code")
    project_id: Optional[str] = None


class OtherDirectCostInput(_Record):
    id: Optional[str] = None
    description: str = ""
    amount: float = 0.0
    category: str = "Other"
    taxable: bool = False
    tax_rate: float = 0.0


class OtherDirectCostResult(_FrozenRecord):
    id: Optional[str] = None
    description: str
    amount: float
    category: str
    taxable: bool
    tax_rate: float
    tax_amount: float
    total_amount: float


# ─── Calculation results ────────────────────────────────────────────────────

class CascadeBreakdown(_FrozenRecord):
    """Government reference pricing: base rate through the burden cascade."""
    effective_hours: float
    clearance_premium: float
    clearance_adjusted_rate: float
    overhead_rate: float
    ga_rate: float
    fee_rate: float
    overhead_amount: float
    ga_amount: float
    fee_amount: float
    burdened_rate: float
    reference_total_cost: float


class MarginBreakdown(_FrozenRecord):
    """Company pricing: wrap/profit floor and actuals at the negotiated final rate."""
    annual_salary: float
    wrap_rate: float
    minimum_profit_rate: float
    wrap_amount: float
    minimum_profit_amount: float
    minimum_annual_revenue: float
    company_minimum_rate: float
    total_cost: float
    actual_cost: float
    actual_profit: float
    actual_profit_percentage: float
    final_rate_discount: float
    reference_total_cost: float
    reference_variance: float


class LaborCategoryResult(_FrozenRecord):
    """
    Snapshot of one category priced both ways. ``category`` is a copy of the
    input taken at calculation time. The cascade and margin halves are computed
    independently; nothing here is persisted as authoritative.
    """
    category: LaborCategoryInput
    cascade: CascadeBreakdown
    margin: MarginBreakdown
    settings_version: int = 0

    @property
    def title(self) -> str:
        return self.category.title

    @property
    def final_rate(self) -> float:
        return self.category.final_rate

    @property
    def effective_hours(self) -> float:
        return self.cascade.effective_hours

    @property
    def burdened_rate(self) -> float:
        return self.cascade.burdened_rate

    @property
    def reference_total_cost(self) -> float:
        return self.cascade.reference_total_cost

    @property
    def total_cost(self) -> float:
        return self.margin.total_cost

    @property
    def actual_cost(self) -> float:
        return self.margin.actual_cost

    @property
    def actual_profit(self) -> float:
        return self.margin.actual_profit

    @property
    def company_minimum_rate(self) -> float:
        return self.margin.company_minimum_rate

    @property
    def final_rate_discount(self) -> float:
        return self.margin.final_rate_discount


class LaborCategorySummary(_FrozenRecord):
    total_categories: int = 0
    total_hours: float = 0.0
    total_effective_hours: float = 0.0
    total_base_cost: float = 0.0
    total_burdened_cost: float = 0.0
    average_base_rate: float = 0.0
    average_burdened_rate: float = 0.0
    total_cost: float = 0.0
    total_actual_cost: float = 0.0
    total_actual_profit: float = 0.0
    average_actual_profit_percentage: float = 0.0


class EscalationPoint(_FrozenRecord):
    year: int
    rate: float
    escalation_amount: float


class EscalationProjection(_FrozenRecord):
    base_rate: float
    escalation_rate: float
    start_date: date
    end_date: date
    yearly_rates: List[EscalationPoint]
    total_escalation: float
    final_rate: float


# ─── Validation ─────────────────────────────────────────────────────────────

class ValidationError(_FrozenRecord):
    """One validation finding. A fresh list is produced on every pass."""
    field: str
    message: str
    value: Any = None
    severity: Severity
    can_override: bool = False
    override_reason: Optional[str] = None


class ValidationReport(_FrozenRecord):
    is_valid: bool
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationError] = Field(default_factory=list)
    can_proceed: bool = True


class OverridePermissions(_Record):
    user_role: UserRole = UserRole.VIEWER
    can_override_rates: bool = False
    can_override_contract_limits: bool = False
    can_override_validation: bool = False
    reason: Optional[str] = None

    @classmethod
    def for_role(cls, role: UserRole | str, reason: Optional[str] = None) -> "OverridePermissions":
        """Fixed role mapping: admin ⊇ manager ⊇ analyst/viewer; only admin lifts vehicle ceilings."""
        role = UserRole(role)
        elevated = role in (UserRole.ADMIN, UserRole.MANAGER)
        return cls(
            user_role=role,
            can_override_rates=elevated,
            can_override_contract_limits=role is UserRole.ADMIN,
            can_override_validation=elevated,
            reason=reason or None,
        )


# ─── System settings ────────────────────────────────────────────────────────

class SystemSettings(_FrozenRecord):
    """Process-wide percentages read by the margin model."""
    wrap_rate: float = Field(..., description="Wrap rate, percent of annual salary")
    minimum_profit_rate: float = Field(..., description="Minimum profit, percent of salary + wrap")
    version: int = 1
    updated_at: datetime = Field(default_factory=_utcnow)
    updated_by: Optional[str] = None


# ─── Project calculation ────────────────────────────────────────────────────

class ProjectTotals(_FrozenRecord):
    labor_cost: float = 0.0
    labor_reference_cost: float = 0.0
    odc_cost: float = 0.0
    total_cost: float = 0.0


class ProjectCalculation(_FrozenRecord):
    project_id: str = ""
    settings: PricingSettings
    settings_version: int
    labor_categories: List[LaborCategoryResult]
    other_direct_costs: List[OtherDirectCostResult] = Field(default_factory=list)
    summary: LaborCategorySummary
    totals: ProjectTotals
    validation_warnings: List[ValidationError] = Field(default_factory=list)
    calculated_at: datetime = Field(default_factory=_utcnow)


# ─── Scenarios ──────────────────────────────────────────────────────────────

class Scenario(_Record):
    name: str
    pricing: PricingSettings
    categories: List[LaborCategoryInput] = Field(default_factory=list)
    odcs: List[OtherDirectCostInput] = Field(default_factory=list)


class ScenarioVariance(_FrozenRecord):
    scenario_name: str
    labor_variance: float
    labor_variance_percent: float
    odc_variance: float
    total_variance: float
    total_variance_percent: float
    settings: PricingSettings
    totals: ProjectTotals


class ScenarioComparison(_FrozenRecord):
    baseline_name: str
    baseline: ProjectCalculation
    comparisons: List[ScenarioVariance]
    compared_at: datetime = Field(default_factory=_utcnow)
