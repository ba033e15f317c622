"""
Pricing engine configuration — single source of truth for premiums, ceilings,
input ranges and system-settings defaults.

Import from here in all services rather than hardcoding values.
"""
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


# ── Clearance premiums ─────────────────────────────────────────────────────────
# Fixed table, not configurable per project or tenant.
CLEARANCE_PREMIUMS: dict[str, float] = {
    "None":         0.00,
    "Public Trust": 0.05,
    "Secret":       0.10,
    "Top Secret":   0.20,
}

LOCATION_TYPES: tuple[str, ...] = ("Remote", "On-site", "Hybrid")

CONTRACT_TYPES: tuple[str, ...] = ("FFP", "T&M", "CPFF")

ODC_CATEGORIES: tuple[str, ...] = ("Travel", "Equipment", "Software", "Other")


# ── Generic burden ceilings (no contract vehicle selected) ─────────────────────
GENERIC_MAX_OVERHEAD_RATE: float = 1.00   # 100 %
GENERIC_MAX_GA_RATE: float = 0.50         # 50 %
GENERIC_MAX_FEE_RATE: float = 0.20        # 20 %


# ── Built-in contract vehicle ceilings ─────────────────────────────────────────
# Used when a vehicle is referenced by name and the catalog has no record for it.
#   format: name -> (max_overhead, max_ga, max_fee)
BUILTIN_VEHICLE_CEILINGS: dict[str, tuple[float, float, float]] = {
    "GSA MAS":         (0.40, 0.15, 0.10),
    "VA SPRUCE":       (0.35, 0.12, 0.08),
    "OPM (GSA)":       (0.38, 0.14, 0.09),
    "HHS SWIFT (GSA)": (0.42, 0.16, 0.11),
    "8(a)":            (0.35, 0.12, 0.08),
    "SBIR":            (0.25, 0.10, 0.05),
    "IDIQ":            (0.50, 0.20, 0.15),
}


# ── Labor category input ranges ────────────────────────────────────────────────
MIN_BASE_RATE: float = 1.0
MAX_BASE_RATE: float = 1000.0
MIN_HOURS: float = 1.0
MAX_HOURS: float = 10_000.0
MIN_FTE_PERCENTAGE: float = 0.01
MAX_FTE_PERCENTAGE: float = 100.0

# A rate this far below the rule's typical rate is flagged (10 %)
TYPICAL_RATE_TOLERANCE: float = 0.90


# ── Salary conversion ──────────────────────────────────────────────────────────
STANDARD_HOURS_PER_YEAR: int = 2080       # 40 hrs × 52 weeks


# ── System settings ────────────────────────────────────────────────────────────
DEFAULT_WRAP_RATE_PCT: float = float(os.getenv("GOVRATE_DEFAULT_WRAP_RATE", "87.5"))
DEFAULT_MIN_PROFIT_RATE_PCT: float = float(os.getenv("GOVRATE_DEFAULT_MIN_PROFIT_RATE", "7.53"))

WRAP_RATE_BOUNDS: tuple[float, float] = (0.0, 1000.0)
MIN_PROFIT_RATE_BOUNDS: tuple[float, float] = (0.0, 100.0)


# ── Scenario generation offsets (absolute rate points) ─────────────────────────
SCENARIO_OVERHEAD_STEP: float = 0.05
SCENARIO_GA_STEP: float = 0.02
SCENARIO_FEE_STEP: float = 0.01
SCENARIO_MAX_OVERHEAD: float = 2.0
SCENARIO_MAX_GA: float = 2.0
SCENARIO_MAX_FEE: float = 1.0


# ── Logging ────────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LOG_FORMAT", "json").lower() != "text"
