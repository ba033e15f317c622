"""
conftest.py — Shared pytest fixtures for the GovRate pricing engine test suite.

No database or external service fixtures are defined here.  All tests in this
suite are pure unit tests that exercise the calculation and validation classes
in isolation.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``govrate.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
from datetime import date

import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any govrate imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Stateless engines
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def cascade_calculator():
    """RateCascadeCalculator (stateless, pure-math)."""
    from govrate.services.rate_cascade_engine import RateCascadeCalculator
    return RateCascadeCalculator()


@pytest.fixture(scope="session")
def margin_model():
    """MarginModel (stateless; percentages are always passed in)."""
    from govrate.services.margin_engine import MarginModel
    return MarginModel()


@pytest.fixture(scope="session")
def escalation_projector():
    from govrate.services.escalation_engine import EscalationProjector
    return EscalationProjector()


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def catalog():
    """
    ReferenceCatalog with one catalog vehicle, two company roles and a layered
    set of rate rules for the senior engineer role:

      role only               : min 80,  max 150, typical 110
      role + GSA_MAS          : min 85,  max 120, typical 100
      role + project P-1      : min 70,  max 140, typical 90
      role + GSA_MAS + P-1    : min 90,  max 125, typical 105
      inactive role + VA      : never applies
    """
    from govrate.services.reference_catalog import ReferenceCatalog
    return ReferenceCatalog(
        vehicles=[
            {
                "id": "veh-gsa",
                "name": "GSA MAS",
                "code": "GSA_MAS",
                "escalationRate": 0.025,
                "maxOverheadRate": 0.40,
                "maxGaRate": 0.15,
                "maxFeeRate": 0.10,
                "startDate": "2020-01-01",
                "endDate": "2030-12-31",
            },
        ],
        company_roles=[
            {"id": "cr-sse", "name": "Senior Software Engineer", "payBand": 150_000, "rateIncrease": 0.03},
            {"id": "cr-ba", "name": "Business Analyst", "payBand": 95_000, "rateIncrease": 0.02},
        ],
        project_roles=[
            {"id": "pr-dev", "name": "Developer", "typicalHours": 1920},
        ],
        rules=[
            {"id": "r1", "companyRoleId": "cr-sse", "minRate": 80, "maxRate": 150, "typicalRate": 110},
            {"id": "r2", "companyRoleId": "cr-sse", "contractVehicleId": "veh-gsa",
             "minRate": 85, "maxRate": 120, "typicalRate": 100},
            {"id": "r3", "companyRoleId": "cr-sse", "projectId": "P-1",
             "minRate": 70, "maxRate": 140, "typicalRate": 90},
            {"id": "r4", "companyRoleId": "cr-sse", "contractVehicleId": "veh-gsa", "projectId": "P-1",
             "minRate": 90, "maxRate": 125, "typicalRate": 105},
            {"id": "r5", "companyRoleId": "cr-sse", "contractVehicleId": "VA_SPRUCE",
             "minRate": 1, "maxRate": 2, "typicalRate": 1, "isActive": False},
        ],
    )


@pytest.fixture(scope="session")
def validator(catalog):
    from govrate.services.rate_validator import RateValidator
    return RateValidator(catalog)


@pytest.fixture(scope="session")
def aggregator(validator):
    from govrate.services.summary_engine import SummaryAggregator
    return SummaryAggregator(validator=validator)


@pytest.fixture
def settings_store():
    """Fresh SystemSettingsStore at the defaults (wrap 87.5 %, min profit 7.53 %)."""
    from govrate.services.system_settings import SystemSettingsStore
    from govrate.models.pricing_schema import SystemSettings
    return SystemSettingsStore(SystemSettings(wrap_rate=87.5, minimum_profit_rate=7.53))


@pytest.fixture(scope="session")
def system_settings():
    from govrate.models.pricing_schema import SystemSettings
    return SystemSettings(wrap_rate=87.5, minimum_profit_rate=7.53, version=3)


# ---------------------------------------------------------------------------
# Permissions
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def viewer():
    from govrate.models.pricing_schema import OverridePermissions
    return OverridePermissions.for_role("viewer")


@pytest.fixture(scope="session")
def manager():
    from govrate.models.pricing_schema import OverridePermissions
    return OverridePermissions.for_role("manager")


@pytest.fixture(scope="session")
def admin():
    from govrate.models.pricing_schema import OverridePermissions
    return OverridePermissions.for_role("admin")


# ---------------------------------------------------------------------------
# Shared sample project data
# ---------------------------------------------------------------------------

@pytest.fixture
def pricing():
    """
    Burden envelope inside every GSA MAS ceiling:
    overhead 30 %, G&A 10 %, fee 8 %, T&M, 2024-01-01 → 2026-12-31.
    """
    from govrate.models.pricing_schema import PricingSettings
    return PricingSettings(
        overhead_rate=0.30,
        ga_rate=0.10,
        fee_rate=0.08,
        contract_type="T&M",
        period_start=date(2024, 1, 1),
        period_end=date(2026, 12, 31),
        contract_vehicle="GSA MAS",
    )


@pytest.fixture
def senior_engineer():
    """
    Secret-cleared senior engineer: base $100/hr, 2080 hrs at 50 % FTE,
    capacity 2, LCAT rate $180, company role pay band $150,000, final $170.
    Linked to a Technical Lead project role whose typical profile it matches.
    """
    from govrate.models.pricing_schema import LaborCategoryInput
    return LaborCategoryInput.model_validate({
        "id": "lc-1",
        "title": "Senior Software Engineer",
        "baseRate": 100.0,
        "hours": 2080,
        "ftePercentage": 50,
        "capacity": 2,
        "clearanceLevel": "Secret",
        "location": "Remote",
        "lcat": {"vehicle": "GSA MAS", "code": "SSE-3", "name": "Software Engineer III", "lcatRate": 180.0},
        "projectRole": {"id": "pr-lead", "name": "Technical Lead", "typicalHours": 2080, "typicalClearance": "Secret"},
        "companyRole": {"id": "cr-sse", "name": "Senior Software Engineer", "rate": 150_000},
        "finalRate": 170.0,
    })


@pytest.fixture
def analyst():
    """Uncleared analyst: base $60/hr, 1000 hrs, 100 % FTE, no LCAT or company role."""
    from govrate.models.pricing_schema import LaborCategoryInput
    return LaborCategoryInput(title="Business Analyst", base_rate=60.0, hours=1000, final_rate=75.0)
