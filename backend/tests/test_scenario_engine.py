"""
test_scenario_engine.py — Unit tests for scenario generation and comparison.

Tests cover:
  - Common envelopes: Conservative / Aggressive / No Fee / Minimal Overhead
  - Floors at zero and caps on the aggressive envelope
  - Variance math against the first (baseline) scenario
  - Fewer than two scenarios rejected
"""

import pytest

from govrate.models.pricing_schema import OtherDirectCostInput, PricingSettings, Scenario
from govrate.services.scenario_engine import (
    COMMON_SCENARIO_NAMES,
    common_scenarios,
    compare_scenarios,
    generate_common_scenarios,
)


class TestGenerateCommonScenarios:

    def test_offsets_from_current_envelope(self, pricing):
        conservative, aggressive, no_fee, minimal = generate_common_scenarios(pricing)
        assert abs(conservative.overhead_rate - 0.25) < 1e-9
        assert abs(conservative.ga_rate - 0.08) < 1e-9
        assert abs(conservative.fee_rate - 0.07) < 1e-9
        assert abs(aggressive.overhead_rate - 0.35) < 1e-9
        assert abs(aggressive.ga_rate - 0.12) < 1e-9
        assert abs(aggressive.fee_rate - 0.09) < 1e-9
        assert no_fee.fee_rate == 0 and no_fee.overhead_rate == pricing.overhead_rate
        assert (minimal.overhead_rate, minimal.ga_rate) == (0.15, 0.10)
        assert minimal.fee_rate == pricing.fee_rate

    def test_conservative_floors_at_zero(self):
        low = PricingSettings(overhead_rate=0.02, ga_rate=0.01, fee_rate=0.0)
        conservative = generate_common_scenarios(low)[0]
        assert (conservative.overhead_rate, conservative.ga_rate, conservative.fee_rate) == (0, 0, 0)

    def test_aggressive_is_capped(self):
        high = PricingSettings(overhead_rate=1.98, ga_rate=1.99, fee_rate=0.995)
        aggressive = generate_common_scenarios(high)[1]
        assert (aggressive.overhead_rate, aggressive.ga_rate, aggressive.fee_rate) == (2.0, 2.0, 1.0)

    def test_other_settings_carried(self, pricing):
        for variant in generate_common_scenarios(pricing):
            assert variant.contract_vehicle == pricing.contract_vehicle
            assert variant.period_start == pricing.period_start


class TestCompareScenarios:

    @pytest.fixture
    def baseline(self, pricing, analyst):
        odc = OtherDirectCostInput(description="Flights", amount=500, category="Travel")
        return Scenario(name="Current", pricing=pricing, categories=[analyst], odcs=[odc])

    def test_no_fee_variance(self, baseline, aggregator, system_settings):
        """
        analyst reference cost: 60 × 1.3 × 1.1 × 1.08 × 1000 = 92,664
        without fee:            60 × 1.3 × 1.1 × 1000        = 85,800
        labor variance = −6,864  (−8/108 = −7.407 %)
        """
        no_fee = baseline.model_copy(update={
            "name": "No Fee",
            "pricing": baseline.pricing.model_copy(update={"fee_rate": 0.0}),
        })
        comparison = compare_scenarios([baseline, no_fee], system_settings, aggregator=aggregator)
        assert comparison.baseline_name == "Current"
        [variance] = comparison.comparisons
        assert variance.scenario_name == "No Fee"
        assert abs(variance.labor_variance - (-6_864)) < 1e-6
        assert abs(variance.labor_variance_percent - (-800 / 108)) < 1e-9
        assert variance.odc_variance == 0
        assert abs(variance.total_variance - (-6_864)) < 1e-6
        assert abs(variance.total_variance_percent - (-6_864 / 93_164 * 100)) < 1e-9

    def test_billed_totals_reported_per_scenario(self, baseline, aggregator, system_settings):
        """Billed labor follows the final rate, so it matches across envelopes."""
        comparison = compare_scenarios(common_scenarios(baseline), system_settings, aggregator=aggregator)
        assert [c.scenario_name for c in comparison.comparisons] == list(COMMON_SCENARIO_NAMES)
        for c in comparison.comparisons:
            assert c.totals.labor_cost == comparison.baseline.totals.labor_cost

    def test_aggressive_costs_more(self, baseline, aggregator, system_settings):
        comparison = compare_scenarios(common_scenarios(baseline), system_settings, aggregator=aggregator)
        by_name = {c.scenario_name: c for c in comparison.comparisons}
        assert by_name["Aggressive"].labor_variance > 0
        assert by_name["Conservative"].labor_variance < 0

    @pytest.mark.parametrize("count", [0, 1])
    def test_needs_two_scenarios(self, baseline, count):
        with pytest.raises(ValueError):
            compare_scenarios([baseline] * count)
