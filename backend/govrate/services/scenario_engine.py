"""
What-if comparison of burden envelopes.

The first scenario is the baseline; every other scenario is priced with the
same engine and reported as a variance against it.
"""
import logging
from typing import List, Optional, Sequence

from govrate.config import (
    SCENARIO_FEE_STEP,
    SCENARIO_GA_STEP,
    SCENARIO_MAX_FEE,
    SCENARIO_MAX_GA,
    SCENARIO_MAX_OVERHEAD,
    SCENARIO_OVERHEAD_STEP,
)
from govrate.models.pricing_schema import (
    OverridePermissions,
    PricingSettings,
    ProjectTotals,
    Scenario,
    ScenarioComparison,
    ScenarioVariance,
    SystemSettings,
)
from govrate.services.perf_monitor import timed
from govrate.services.summary_engine import SummaryAggregator
from govrate.services.system_settings import default_store

logger = logging.getLogger("govrate.scenarios")


def _variance_pct(variance: float, baseline: float) -> float:
    return variance / baseline * 100.0 if baseline > 0 else 0.0


def _reference_total(totals: ProjectTotals) -> float:
    return totals.labor_reference_cost + totals.odc_cost


@timed
def compare_scenarios(
    scenarios: Sequence[Scenario],
    settings: Optional[SystemSettings] = None,
    permissions: Optional[OverridePermissions] = None,
    aggregator: Optional[SummaryAggregator] = None,
) -> ScenarioComparison:
    """
    Price each scenario and compare it with the first one.

    Variances are on the burdened reference cost (plus ODCs), which is what a
    change of burden envelope moves; billed totals follow the negotiated final
    rates and are reported per scenario in ``totals``. Every scenario is
    priced against the same SystemSettings snapshot.
    Raises ValueError for fewer than two scenarios, and PricingValidationError
    when any scenario fails validation.
    """
    if len(scenarios) < 2:
        raise ValueError("At least 2 scenarios required for comparison")

    aggregator = aggregator or SummaryAggregator()
    settings = settings or default_store.get_settings()

    priced = [
        aggregator.calculate_project(
            s.categories, s.pricing, settings, odcs=s.odcs, permissions=permissions
        )
        for s in scenarios
    ]
    baseline = priced[0].totals
    baseline_total = _reference_total(baseline)

    comparisons: List[ScenarioVariance] = []
    for scenario, result in zip(scenarios[1:], priced[1:]):
        labor_variance = result.totals.labor_reference_cost - baseline.labor_reference_cost
        total_variance = _reference_total(result.totals) - baseline_total
        comparisons.append(ScenarioVariance(
            scenario_name=scenario.name,
            labor_variance=labor_variance,
            labor_variance_percent=_variance_pct(labor_variance, baseline.labor_reference_cost),
            odc_variance=result.totals.odc_cost - baseline.odc_cost,
            total_variance=total_variance,
            total_variance_percent=_variance_pct(total_variance, baseline_total),
            settings=scenario.pricing.model_copy(deep=True),
            totals=result.totals,
        ))

    logger.debug("compared %d scenario(s) against %s", len(comparisons), scenarios[0].name)
    return ScenarioComparison(
        baseline_name=scenarios[0].name,
        baseline=priced[0],
        comparisons=comparisons,
    )


def generate_common_scenarios(pricing: PricingSettings) -> List[PricingSettings]:
    """
    Standard what-if envelopes around the current one:
    Conservative, Aggressive, No Fee and Minimal Overhead (in that order).
    Scenario names are available from ``COMMON_SCENARIO_NAMES``.
    """
    conservative = pricing.model_copy(update={
        "overhead_rate": max(0.0, pricing.overhead_rate - SCENARIO_OVERHEAD_STEP),
        "ga_rate": max(0.0, pricing.ga_rate - SCENARIO_GA_STEP),
        "fee_rate": max(0.0, pricing.fee_rate - SCENARIO_FEE_STEP),
    })
    aggressive = pricing.model_copy(update={
        "overhead_rate": min(SCENARIO_MAX_OVERHEAD, pricing.overhead_rate + SCENARIO_OVERHEAD_STEP),
        "ga_rate": min(SCENARIO_MAX_GA, pricing.ga_rate + SCENARIO_GA_STEP),
        "fee_rate": min(SCENARIO_MAX_FEE, pricing.fee_rate + SCENARIO_FEE_STEP),
    })
    no_fee = pricing.model_copy(update={"fee_rate": 0.0})
    minimal_overhead = pricing.model_copy(update={"overhead_rate": 0.15, "ga_rate": 0.10})
    return [conservative, aggressive, no_fee, minimal_overhead]


COMMON_SCENARIO_NAMES = ("Conservative", "Aggressive", "No Fee", "Minimal Overhead")


def common_scenarios(base: Scenario) -> List[Scenario]:
    """The base scenario followed by the common variants, ready for compare_scenarios."""
    variants = generate_common_scenarios(base.pricing)
    return [base] + [
        base.model_copy(update={"name": name, "pricing": pricing})
        for name, pricing in zip(COMMON_SCENARIO_NAMES, variants)
    ]
