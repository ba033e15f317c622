"""
Command-line pricing of a project file.

    govrate price project.json --role manager --override overheadRate="CO approval"
    govrate compare project.json

The project file is camelCase JSON with ``settings`` and ``laborCategories``,
and optionally ``otherDirectCosts``, ``systemSettings`` and ``catalog``
(``vehicles``, ``companyRoles``, ``projectRoles``, ``rules``). Results are
printed to stdout as JSON; logs go to stderr.
"""
import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional, Sequence

from govrate.config import LOG_JSON, LOG_LEVEL
from govrate.models.pricing_schema import (
    LaborCategoryInput,
    OtherDirectCostInput,
    OverridePermissions,
    PricingSettings,
    Scenario,
    SystemSettings,
    UserRole,
)
from govrate.services.export_formatter import project_export
from govrate.services.logging_config import setup_logging
from govrate.services.rate_validator import OverrideLedger, RateValidator
from govrate.services.reference_catalog import ReferenceCatalog
from govrate.services.scenario_engine import common_scenarios, compare_scenarios
from govrate.services.summary_engine import PricingValidationError, SummaryAggregator
from govrate.services.system_settings import default_store

logger = logging.getLogger("govrate.cli")


def load_project(path: str) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def build_catalog(data: Dict[str, Any]) -> ReferenceCatalog:
    catalog = data.get("catalog") or {}
    return ReferenceCatalog(
        vehicles=catalog.get("vehicles"),
        company_roles=catalog.get("companyRoles"),
        project_roles=catalog.get("projectRoles"),
        rules=catalog.get("rules"),
    )


def build_ledger(entries: Sequence[str]) -> OverrideLedger:
    """``FIELD`` or ``FIELD=REASON`` per entry."""
    ledger = OverrideLedger()
    for entry in entries:
        field, _, reason = entry.partition("=")
        ledger.override(field.strip(), reason.strip() or None)
    return ledger


def _inputs(data: Dict[str, Any]):
    pricing = PricingSettings.model_validate(data.get("settings") or {})
    categories = [LaborCategoryInput.model_validate(c) for c in data.get("laborCategories", [])]
    odcs = [OtherDirectCostInput.model_validate(o) for o in data.get("otherDirectCosts", [])]
    raw_settings = data.get("systemSettings")
    settings = (
        SystemSettings.model_validate(raw_settings) if raw_settings
        else default_store.get_settings()
    )
    return pricing, categories, odcs, settings


def _refused(exc: PricingValidationError) -> Dict[str, Any]:
    return {
        "error": str(exc),
        "errors": [e.model_dump(by_alias=True, mode="json") for e in exc.report.errors],
    }


def run_price(data: Dict[str, Any], permissions: OverridePermissions, ledger: OverrideLedger):
    pricing, categories, odcs, settings = _inputs(data)
    aggregator = SummaryAggregator(validator=RateValidator(build_catalog(data)))
    project = aggregator.calculate_project(
        categories, pricing, settings, odcs=odcs, permissions=permissions, overrides=ledger,
    )
    return project_export(project)


def run_compare(data: Dict[str, Any], permissions: OverridePermissions):
    pricing, categories, odcs, settings = _inputs(data)
    aggregator = SummaryAggregator(validator=RateValidator(build_catalog(data)))
    base = Scenario(name="Current", pricing=pricing, categories=categories, odcs=odcs)
    comparison = compare_scenarios(
        common_scenarios(base), settings, permissions=permissions, aggregator=aggregator,
    )
    return {
        "baselineName": comparison.baseline_name,
        "baselineTotals": comparison.baseline.totals.model_dump(by_alias=True),
        "comparisons": [c.model_dump(by_alias=True, mode="json") for c in comparison.comparisons],
    }


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="govrate", description="Government contract labor-rate pricing")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    parser.add_argument("--text-logs", action="store_true", help="Plain text instead of JSON log lines")
    sub = parser.add_subparsers(dest="command", required=True)

    price = sub.add_parser("price", help="Validate and price a project file")
    price.add_argument("project", help="Path to project JSON")
    price.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.VIEWER.value)
    price.add_argument("--reason", help="Override reason recorded on allowed findings")
    price.add_argument("--override", action="append", default=[], metavar="FIELD[=REASON]",
                       help="Mark a field overridden (repeatable)")

    compare = sub.add_parser("compare", help="Compare the project against the common what-if envelopes")
    compare.add_argument("project", help="Path to project JSON")
    compare.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.VIEWER.value)
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, json_output=LOG_JSON and not args.text_logs, stream=sys.stderr)

    data = load_project(args.project)
    permissions = OverridePermissions.for_role(args.role, getattr(args, "reason", None))
    try:
        if args.command == "price":
            result = run_price(data, permissions, build_ledger(args.override))
        else:
            result = run_compare(data, permissions)
    except PricingValidationError as exc:
        logger.error("%s", exc)
        print(json.dumps(_refused(exc), indent=2))
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
