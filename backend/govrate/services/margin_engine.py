"""
margin_engine.py — Company minimum-rate floor and actuals at the negotiated rate.

Covers:
  - Wrap (employer-side loading) as a percentage of the pay-band salary
  - Minimum profit layered on salary + wrap
  - Company minimum hourly rate over effective hours
  - Billed total, actual cost, actual profit and profit percentage at the final rate
  - Discount of the final rate against the catalog (LCAT) rate

The billed total uses the negotiated final rate, never the burdened reference
rate. Undefined ratios (zero hours, zero cost, no catalog rate) come back as 0.
"""

import logging

from govrate.config import STANDARD_HOURS_PER_YEAR
from govrate.models.pricing_schema import MarginBreakdown, SystemSettings

logger = logging.getLogger("govrate.margin")


def annual_to_hourly(annual_salary: float, hours_per_year: float = STANDARD_HOURS_PER_YEAR) -> float:
    """Convert an annual salary to an hourly rate (2080 hrs/yr by default)."""
    return annual_salary / hours_per_year if hours_per_year > 0 else 0.0


def hourly_to_annual(hourly_rate: float, hours_per_year: float = STANDARD_HOURS_PER_YEAR) -> float:
    return hourly_rate * hours_per_year


class MarginModel:
    """
    Stateless margin calculator.

    Wrap and minimum-profit percentages are always passed in by the caller
    (from the current SystemSettings snapshot); nothing is cached here.
    """

    def wrap_amount(self, annual_salary: float, wrap_rate_pct: float) -> float:
        return annual_salary * wrap_rate_pct / 100.0

    def minimum_profit_amount(
        self, annual_salary: float, wrap_amount: float, minimum_profit_rate_pct: float
    ) -> float:
        return (annual_salary + wrap_amount) * minimum_profit_rate_pct / 100.0

    def margin(
        self,
        company_role_rate: float,
        effective_hours: float,
        capacity: float,
        final_rate: float,
        lcat_rate: float,
        wrap_rate_pct: float,
        minimum_profit_rate_pct: float,
        reference_total_cost: float = 0.0,
    ) -> MarginBreakdown:
        """
        Compute the company floor and actuals for one labor category.

        ``company_role_rate`` is the company role's annual pay-band salary.
        ``reference_total_cost`` is only carried through for the
        billed-vs-reference variance shown next to the two pricing models.
        """
        annual_salary = company_role_rate
        wrap = self.wrap_amount(annual_salary, wrap_rate_pct)
        min_profit = self.minimum_profit_amount(annual_salary, wrap, minimum_profit_rate_pct)
        min_revenue = annual_salary + wrap + min_profit

        company_minimum_rate = min_revenue / effective_hours if effective_hours > 0 else 0.0

        total_cost = final_rate * effective_hours * capacity
        actual_cost = (annual_salary + wrap) * capacity
        actual_profit = total_cost - actual_cost
        actual_profit_pct = (actual_profit / actual_cost) * 100.0 if actual_cost != 0 else 0.0

        final_rate_discount = (
            (lcat_rate - final_rate) / lcat_rate * 100.0 if lcat_rate > 0 else 0.0
        )

        return MarginBreakdown(
            annual_salary=annual_salary,
            wrap_rate=wrap_rate_pct,
            minimum_profit_rate=minimum_profit_rate_pct,
            wrap_amount=wrap,
            minimum_profit_amount=min_profit,
            minimum_annual_revenue=min_revenue,
            company_minimum_rate=company_minimum_rate,
            total_cost=total_cost,
            actual_cost=actual_cost,
            actual_profit=actual_profit,
            actual_profit_percentage=actual_profit_pct,
            final_rate_discount=final_rate_discount,
            reference_total_cost=reference_total_cost,
            reference_variance=total_cost - reference_total_cost,
        )

    def margin_for_settings(
        self,
        company_role_rate: float,
        effective_hours: float,
        capacity: float,
        final_rate: float,
        lcat_rate: float,
        settings: SystemSettings,
        reference_total_cost: float = 0.0,
    ) -> MarginBreakdown:
        """Same as ``margin`` with the percentages read from a settings snapshot."""
        logger.debug(
            "margin using settings v%d (wrap=%.2f%%, min profit=%.2f%%)",
            settings.version, settings.wrap_rate, settings.minimum_profit_rate,
        )
        return self.margin(
            company_role_rate=company_role_rate,
            effective_hours=effective_hours,
            capacity=capacity,
            final_rate=final_rate,
            lcat_rate=lcat_rate,
            wrap_rate_pct=settings.wrap_rate,
            minimum_profit_rate_pct=settings.minimum_profit_rate,
            reference_total_cost=reference_total_cost,
        )
