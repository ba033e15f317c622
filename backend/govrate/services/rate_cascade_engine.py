"""
rate_cascade_engine.py — Government reference (burdened) rate cascade.

Covers:
  - Effective hours from FTE percentage
  - Fixed clearance premium table (None / Public Trust / Secret / Top Secret)
  - Compounding burden cascade: clearance-adjusted rate → overhead → G&A → fee
  - Per-layer dollar amounts and the reference total cost

Each layer's base is the cumulative total of every prior layer, never the
original base rate. No input is rejected here; negative or zero values simply
propagate and the validator is the only gate.
"""

import logging
from enum import Enum
from typing import Union

from govrate.config import CLEARANCE_PREMIUMS
from govrate.models.pricing_schema import CascadeBreakdown, ClearanceLevel

logger = logging.getLogger("govrate.cascade")


def _level_key(clearance_level: Union[ClearanceLevel, str, None]) -> str:
    if isinstance(clearance_level, Enum):
        return clearance_level.value
    return clearance_level or ClearanceLevel.NONE.value


class RateCascadeCalculator:
    """Stateless burdened-rate calculator. All rates are fractions (0.40 = 40 %)."""

    def clearance_premium(self, clearance_level: Union[ClearanceLevel, str, None]) -> float:
        """Premium fraction for a clearance level; unrecognised levels carry no premium."""
        return CLEARANCE_PREMIUMS.get(_level_key(clearance_level), 0.0)

    def effective_hours(self, hours: float, fte_percentage: float) -> float:
        return hours * (fte_percentage / 100.0)

    def clearance_adjusted_rate(
        self, base_rate: float, clearance_level: Union[ClearanceLevel, str, None]
    ) -> float:
        return base_rate * (1.0 + self.clearance_premium(clearance_level))

    def burdened_rate(
        self,
        base_rate: float,
        clearance_level: Union[ClearanceLevel, str, None],
        overhead_rate: float,
        ga_rate: float,
        fee_rate: float,
    ) -> float:
        """Hourly rate after clearance, overhead, G&A and fee compound in that order."""
        return (
            self.clearance_adjusted_rate(base_rate, clearance_level)
            * (1.0 + overhead_rate)
            * (1.0 + ga_rate)
            * (1.0 + fee_rate)
        )

    def cascade(
        self,
        base_rate: float,
        clearance_level: Union[ClearanceLevel, str, None],
        hours: float,
        fte_percentage: float,
        overhead_rate: float,
        ga_rate: float,
        fee_rate: float,
    ) -> CascadeBreakdown:
        """
        Run the full cascade for one labor category.

        The three dollar amounts plus ``clearance_adjusted_rate × effective_hours``
        reconstruct ``reference_total_cost``.
        """
        effective_hours = self.effective_hours(hours, fte_percentage)
        premium = self.clearance_premium(clearance_level)
        adjusted = base_rate * (1.0 + premium)

        after_overhead = adjusted * (1.0 + overhead_rate)
        after_ga = after_overhead * (1.0 + ga_rate)

        overhead_amount = adjusted * overhead_rate * effective_hours
        ga_amount = after_overhead * ga_rate * effective_hours
        fee_amount = after_ga * fee_rate * effective_hours

        burdened = after_ga * (1.0 + fee_rate)
        reference_total_cost = burdened * effective_hours

        logger.debug(
            "cascade computed: base=%.4f premium=%.2f burdened=%.4f hours=%.2f",
            base_rate, premium, burdened, effective_hours,
        )

        return CascadeBreakdown(
            effective_hours=effective_hours,
            clearance_premium=premium,
            clearance_adjusted_rate=adjusted,
            overhead_rate=overhead_rate,
            ga_rate=ga_rate,
            fee_rate=fee_rate,
            overhead_amount=overhead_amount,
            ga_amount=ga_amount,
            fee_amount=fee_amount,
            burdened_rate=burdened,
            reference_total_cost=reference_total_cost,
        )
