"""
summary_engine.py — Per-category pricing, project roll-up and the validation gate.

Covers:
  - One labor category priced both ways (burdened reference + negotiated final rate)
  - Summary across categories (counts, totals, simple-mean averages)
  - Other direct costs with optional tax
  - Full project calculation gated by RateValidator.validate_project

System settings are read once per call and passed down explicitly; the result
carries the settings version it was computed with.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from govrate.models.pricing_schema import (
    LaborCategoryInput,
    LaborCategoryResult,
    LaborCategorySummary,
    OtherDirectCostInput,
    OtherDirectCostResult,
    OverridePermissions,
    PricingSettings,
    ProjectCalculation,
    ProjectTotals,
    SystemSettings,
    ValidationReport,
)
from govrate.services.margin_engine import MarginModel
from govrate.services.perf_monitor import timed
from govrate.services.rate_cascade_engine import RateCascadeCalculator
from govrate.services.rate_validator import OverrideLedger, RateValidator
from govrate.services.system_settings import default_store

logger = logging.getLogger("govrate.summary")


class PricingValidationError(Exception):
    """Raised when a project cannot be calculated because validation refused it."""

    def __init__(self, report: ValidationReport) -> None:
        self.report = report
        messages = "; ".join(e.message for e in report.errors) or "validation failed"
        super().__init__(f"Project validation failed: {messages}")


class SummaryAggregator:
    """Joins the cascade and margin models and rolls results up per project."""

    def __init__(
        self,
        validator: Optional[RateValidator] = None,
        cascade: Optional[RateCascadeCalculator] = None,
        margin: Optional[MarginModel] = None,
    ) -> None:
        self.validator = validator or RateValidator()
        self.cascade = cascade or RateCascadeCalculator()
        self.margin = margin or MarginModel()

    # ------------------------------------------------------------------
    # Single category
    # ------------------------------------------------------------------

    def calculate_labor_category(
        self,
        category: LaborCategoryInput,
        pricing: PricingSettings,
        settings: Optional[SystemSettings] = None,
    ) -> LaborCategoryResult:
        settings = settings or default_store.get_settings()
        cascade = self.cascade.cascade(
            base_rate=category.base_rate,
            clearance_level=category.clearance_level,
            hours=category.hours,
            fte_percentage=category.fte_percentage,
            overhead_rate=pricing.overhead_rate,
            ga_rate=pricing.ga_rate,
            fee_rate=pricing.fee_rate,
        )
        margin = self.margin.margin_for_settings(
            company_role_rate=category.company_role_rate,
            effective_hours=cascade.effective_hours,
            capacity=category.capacity,
            final_rate=category.final_rate,
            lcat_rate=category.lcat_rate,
            settings=settings,
            reference_total_cost=cascade.reference_total_cost,
        )
        logger.debug(
            "category priced: burdened=%.2f final=%.2f",
            cascade.burdened_rate, category.final_rate,
            extra={"category_title": category.title, "settings_version": settings.version},
        )
        return LaborCategoryResult(
            category=category.model_copy(deep=True),
            cascade=cascade,
            margin=margin,
            settings_version=settings.version,
        )

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    @timed
    def summarize(
        self,
        categories: Sequence[LaborCategoryInput],
        overhead_rate: float,
        ga_rate: float,
        fee_rate: float,
        settings: Optional[SystemSettings] = None,
    ) -> LaborCategorySummary:
        """Price every category with one burden envelope and reduce the results."""
        settings = settings or default_store.get_settings()
        pricing = PricingSettings(overhead_rate=overhead_rate, ga_rate=ga_rate, fee_rate=fee_rate)
        results = [self.calculate_labor_category(c, pricing, settings) for c in categories]
        return self.summarize_results(results)

    def summarize_results(self, results: Sequence[LaborCategoryResult]) -> LaborCategorySummary:
        """
        Reduce precomputed results.

        Averages are simple means across categories (not hour-weighted).
        Profit percentage here is profit / (cost + profit), i.e. a margin on the
        billed amount, unlike the per-category markup on cost.
        """
        n = len(results)
        if n == 0:
            return LaborCategorySummary()

        total_hours = sum(r.category.hours for r in results)
        total_effective_hours = sum(r.effective_hours for r in results)
        total_base_cost = sum(r.category.base_rate * r.category.hours for r in results)
        total_burdened_cost = sum(r.reference_total_cost for r in results)
        total_cost = sum(r.total_cost for r in results)
        total_actual_cost = sum(r.actual_cost for r in results)
        total_actual_profit = sum(r.actual_profit for r in results)

        denominator = total_actual_cost + total_actual_profit
        avg_profit_pct = total_actual_profit / denominator * 100.0 if denominator != 0 else 0.0

        return LaborCategorySummary(
            total_categories=n,
            total_hours=total_hours,
            total_effective_hours=total_effective_hours,
            total_base_cost=total_base_cost,
            total_burdened_cost=total_burdened_cost,
            average_base_rate=sum(r.category.base_rate for r in results) / n,
            average_burdened_rate=sum(r.burdened_rate for r in results) / n,
            total_cost=total_cost,
            total_actual_cost=total_actual_cost,
            total_actual_profit=total_actual_profit,
            average_actual_profit_percentage=avg_profit_pct,
        )

    # ------------------------------------------------------------------
    # Other direct costs
    # ------------------------------------------------------------------

    def calculate_other_direct_cost(self, odc: OtherDirectCostInput) -> OtherDirectCostResult:
        tax_amount = odc.amount * odc.tax_rate if odc.taxable else 0.0
        return OtherDirectCostResult(
            id=odc.id,
            description=odc.description,
            amount=odc.amount,
            category=odc.category,
            taxable=odc.taxable,
            tax_rate=odc.tax_rate,
            tax_amount=tax_amount,
            total_amount=odc.amount + tax_amount,
        )

    # ------------------------------------------------------------------
    # Project
    # ------------------------------------------------------------------

    @timed
    def calculate_project(
        self,
        categories: Sequence[LaborCategoryInput],
        pricing: PricingSettings,
        settings: Optional[SystemSettings] = None,
        odcs: Iterable[OtherDirectCostInput] = (),
        permissions: Optional[OverridePermissions] = None,
        overrides: Optional[OverrideLedger] = None,
        validator: Optional[RateValidator] = None,
    ) -> ProjectCalculation:
        """
        Validate, then price every category and ODC.

        Raises PricingValidationError when the validation report says the
        project cannot proceed. Findings that were allowed through are
        returned on the result as ``validation_warnings``.
        """
        validator = validator or self.validator
        settings = settings or default_store.get_settings()
        odcs = list(odcs)

        report = validator.validate_project(pricing, categories, permissions, overrides, odcs)
        if not report.can_proceed:
            logger.warning(
                "project %s blocked by %d validation error(s)",
                pricing.project_id or "<unsaved>", len(report.errors),
            )
            raise PricingValidationError(report)

        allowed = list(report.errors) + list(report.warnings)
        for finding in allowed:
            logger.warning(
                "validation finding: %s", finding.message,
                extra={"field": finding.field, "severity": finding.severity.value},
            )

        results: List[LaborCategoryResult] = [
            self.calculate_labor_category(c, pricing, settings) for c in categories
        ]
        summary = self.summarize_results(results)
        odc_results = [self.calculate_other_direct_cost(o) for o in odcs]
        odc_cost = sum(o.total_amount for o in odc_results)

        totals = ProjectTotals(
            labor_cost=summary.total_cost,
            labor_reference_cost=summary.total_burdened_cost,
            odc_cost=odc_cost,
            total_cost=summary.total_cost + odc_cost,
        )
        logger.info(
            "project %s calculated: %d categories, total $%.2f",
            pricing.project_id or "<unsaved>", summary.total_categories, totals.total_cost,
            extra={"settings_version": settings.version},
        )
        return ProjectCalculation(
            project_id=pricing.project_id or "",
            settings=pricing.model_copy(deep=True),
            settings_version=settings.version,
            labor_categories=results,
            other_direct_costs=odc_results,
            summary=summary,
            totals=totals,
            validation_warnings=allowed,
        )
