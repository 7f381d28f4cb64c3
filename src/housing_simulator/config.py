"""Application-wide constants and configuration defaults.

All tuneable defaults live here so there is a single place to adjust them.
Rates are expressed in percent (e.g. 2.5 = 2.5 % per month) unless the name
says ``RATIO`` (a plain fraction such as 0.40).
"""
from __future__ import annotations

from decimal import Decimal
from typing import Literal

# ── Type aliases ──────────────────────────────────────────────────────────────

SearchPass = Literal["earliest", "fixed_term"]
Winner = Literal["bank", "cooperative"]

# ── Bank loan policy ──────────────────────────────────────────────────────────

BANK_TERMS: tuple[int, ...] = (12, 18, 24, 36, 48, 60, 72, 84, 96, 108, 120)

BANK_MIN_EQUITY_RATIO = Decimal("0.30")   # down payment never below 30 % of price
BANK_MAX_EQUITY_RATIO = Decimal("0.50")   # ... nor above min(user cap, 50 %)

# ── Cooperative scheme policy ─────────────────────────────────────────────────

EQUITY_THRESHOLD_RATIO = Decimal("0.40")  # paid-in share required for possession
STEP_UP_RATE = Decimal("0.006")           # per block, share of financed principal
STEP_UP_PERIOD: int = 6                   # months per step-up block

STEP_DOWN_PAYMENT = Decimal("50000")

EARLIEST_PURCHASE_MONTH: int = 5
LATEST_PURCHASE_MONTH: int = 24

COOP_MIN_TERM: int = 12
COOP_MAX_TERM: int = 120
COOP_TERM_STEP: int = 6

PROVISIONAL_PRICING_MONTH: int = 12       # Pass B sizes its first guess on this month's price
RENT_REBASE_PERIOD: int = 12              # home value behind forgone rent is re-based yearly
MAX_ALTERNATIVES: int = 5

# ── Economic assumption defaults (CLI) ────────────────────────────────────────

DEFAULT_MONTHLY_HOME_INFLATION = Decimal("2.5")
DEFAULT_MONTHLY_OPPORTUNITY_RATE = Decimal("3.5")
DEFAULT_OPPORTUNITY_TAX_RATE = Decimal("17.5")
DEFAULT_BANK_MONTHLY_RATE = Decimal("3.0")
DEFAULT_ORGANIZATION_FEE_RATE = Decimal("8")
DEFAULT_RENT_AMORTIZATION_MONTHS = Decimal("240")  # 20 years of rent ≈ home value

SCHEDULE_PREVIEW_MONTHS: int = 12

# ── Numeric convenience ───────────────────────────────────────────────────────

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
ONE_DECIMAL = Decimal("0.1")
