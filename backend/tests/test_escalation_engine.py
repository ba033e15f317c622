"""
test_escalation_engine.py — Unit tests for EscalationProjector.

Tests cover:
  - Year-over-year compounding over calendar years
  - Reversed date range returns only the base point
  - Date / datetime / ISO-string inputs
  - Vehicle and company-role projections
"""

from datetime import date, datetime

from govrate.models.pricing_schema import CompanyRole, ContractVehicle


class TestProjection:

    def test_two_percent_over_two_years(self, escalation_projector):
        """
        100 at 2 %, 2024 → 2026:
          2024: 100.00 (+0)
          2025: 102.00 (+2.00)
          2026: 104.04 (+2.04)
        total escalation = 4.04
        """
        p = escalation_projector.project(100.0, 0.02, date(2024, 1, 1), date(2026, 1, 1))
        years = [(pt.year, round(pt.rate, 6), round(pt.escalation_amount, 6)) for pt in p.yearly_rates]
        assert years == [(2024, 100.0, 0.0), (2025, 102.0, 2.0), (2026, 104.04, 2.04)]
        assert abs(p.total_escalation - 4.04) < 1e-9
        assert abs(p.final_rate - 104.04) < 1e-9

    def test_compounds_on_previous_year(self, escalation_projector):
        """Year 3 at 10 % is 133.1, not the simple-interest 130."""
        p = escalation_projector.project(100.0, 0.10, date(2024, 1, 1), date(2027, 1, 1))
        assert abs(p.final_rate - 133.1) < 1e-9

    def test_only_calendar_years_matter(self, escalation_projector):
        p = escalation_projector.project(80.0, 0.03, date(2024, 12, 31), date(2025, 1, 1))
        assert [pt.year for pt in p.yearly_rates] == [2024, 2025]

    def test_same_year_is_single_point(self, escalation_projector):
        p = escalation_projector.project(80.0, 0.03, date(2025, 1, 1), date(2025, 12, 31))
        assert len(p.yearly_rates) == 1
        assert p.total_escalation == 0

    def test_end_before_start_returns_base_point(self, escalation_projector):
        p = escalation_projector.project(100.0, 0.02, date(2026, 1, 1), date(2024, 1, 1))
        assert len(p.yearly_rates) == 1
        assert p.yearly_rates[0].rate == 100.0
        assert p.final_rate == 100.0
        assert p.total_escalation == 0

    def test_accepts_strings_and_datetimes(self, escalation_projector):
        p = escalation_projector.project(100.0, 0.02, "2024-03-15", datetime(2025, 6, 1, 12, 0))
        assert p.start_date == date(2024, 3, 15)
        assert p.end_date == date(2025, 6, 1)
        assert len(p.yearly_rates) == 2


class TestProjectionSources:

    def test_vehicle_escalation_rate(self, escalation_projector):
        vehicle = ContractVehicle(
            name="VA SPRUCE", escalation_rate=0.03,
            max_overhead_rate=0.35, max_ga_rate=0.12, max_fee_rate=0.08,
        )
        p = escalation_projector.project_for_vehicle(100.0, vehicle, date(2024, 1, 1), date(2025, 1, 1))
        assert p.escalation_rate == 0.03
        assert abs(p.final_rate - 103.0) < 1e-9

    def test_company_role_escalates_hourly_pay(self, escalation_projector):
        """104,000 / 2080 = 50/hr; +4 % → 52.00 the next year."""
        role = CompanyRole(id="cr-x", name="Engineer", pay_band=104_000, rate_increase=0.04)
        p = escalation_projector.project_for_company_role(role, date(2024, 1, 1), date(2025, 1, 1))
        assert p.base_rate == 50.0
        assert abs(p.final_rate - 52.0) < 1e-9
