"""
escalation_engine.py — Multi-year rate escalation.

Covers:
  - Year-over-year compounding of a base rate across a period of performance
  - Vehicle-driven projections (contract vehicle escalation rate)
  - Company-role pay projections (annual rate increase on the hourly equivalent)

Only calendar years matter: a range from 2024-07-01 to 2026-01-01 yields the
points 2024, 2025 and 2026. An end year before the start year yields just the
year-0 point.
"""

import logging
from datetime import date, datetime
from typing import List, Union

from govrate.config import STANDARD_HOURS_PER_YEAR
from govrate.models.pricing_schema import (
    CompanyRole,
    ContractVehicle,
    EscalationPoint,
    EscalationProjection,
)
from govrate.services.margin_engine import annual_to_hourly

logger = logging.getLogger("govrate.escalation")

DateLike = Union[date, datetime, str]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


class EscalationProjector:
    """Projects rates forward at a compounding annual escalation fraction (0.02 = 2 %)."""

    def project(
        self,
        base_rate: float,
        annual_escalation_rate: float,
        start_date: DateLike,
        end_date: DateLike,
    ) -> EscalationProjection:
        start = _as_date(start_date)
        end = _as_date(end_date)
        years = end.year - start.year

        points: List[EscalationPoint] = [
            EscalationPoint(year=start.year, rate=base_rate, escalation_amount=0.0)
        ]
        current = base_rate
        for offset in range(1, years + 1):
            escalation_amount = current * annual_escalation_rate
            current = current * (1.0 + annual_escalation_rate)
            points.append(
                EscalationPoint(
                    year=start.year + offset,
                    rate=current,
                    escalation_amount=escalation_amount,
                )
            )

        if years < 0:
            logger.debug("end year %d precedes start year %d; returning base point only",
                         end.year, start.year)

        return EscalationProjection(
            base_rate=base_rate,
            escalation_rate=annual_escalation_rate,
            start_date=start,
            end_date=end,
            yearly_rates=points,
            total_escalation=current - base_rate,
            final_rate=current,
        )

    def project_for_vehicle(
        self,
        base_rate: float,
        vehicle: ContractVehicle,
        start_date: DateLike,
        end_date: DateLike,
    ) -> EscalationProjection:
        """Escalate at the contract vehicle's permitted annual rate."""
        return self.project(base_rate, vehicle.escalation_rate, start_date, end_date)

    def project_for_company_role(
        self,
        role: CompanyRole,
        start_date: DateLike,
        end_date: DateLike,
        hours_per_year: float = STANDARD_HOURS_PER_YEAR,
    ) -> EscalationProjection:
        """Escalate the role's hourly pay equivalent at its annual rate increase."""
        hourly = annual_to_hourly(role.pay_band, hours_per_year)
        return self.project(hourly, role.rate_increase, start_date, end_date)
