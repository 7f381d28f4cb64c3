"""Parameter records and raw-input resolution.

Raw user input (strings with Turkish thousand separators, an annual or a
monthly inflation figure, missing values) is collected in a mutable
:class:`ScenarioInputs` and resolved into the immutable
:class:`ScenarioParams` record the optimizers consume.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from .calculator import annual_to_monthly_rate
from .config import (
    BANK_MAX_EQUITY_RATIO,
    BANK_MIN_EQUITY_RATIO,
    BANK_TERMS,
    COOP_MAX_TERM,
    COOP_MIN_TERM,
    COOP_TERM_STEP,
    DEFAULT_BANK_MONTHLY_RATE,
    DEFAULT_MONTHLY_HOME_INFLATION,
    DEFAULT_MONTHLY_OPPORTUNITY_RATE,
    DEFAULT_OPPORTUNITY_TAX_RATE,
    DEFAULT_ORGANIZATION_FEE_RATE,
    DEFAULT_RENT_AMORTIZATION_MONTHS,
    EARLIEST_PURCHASE_MONTH,
    EQUITY_THRESHOLD_RATIO,
    HUNDRED,
    LATEST_PURCHASE_MONTH,
    MAX_ALTERNATIVES,
    ONE,
    PROVISIONAL_PRICING_MONTH,
    RENT_REBASE_PERIOD,
    STEP_DOWN_PAYMENT,
    STEP_UP_PERIOD,
    STEP_UP_RATE,
    ZERO,
)

RawNumber = Union[str, int, Decimal, None]

# Thousand separators and currency markers accepted in amount fields
_AMOUNT_NOISE = re.compile(r"[.,\s_']|TL|TRY|₺", re.IGNORECASE)


@dataclass(frozen=True)
class SearchPolicy:
    """Numeric policy of both financing paths; every field has the documented default."""
    bank_terms: tuple[int, ...] = BANK_TERMS
    min_equity_ratio: Decimal = BANK_MIN_EQUITY_RATIO
    max_equity_ratio: Decimal = BANK_MAX_EQUITY_RATIO
    equity_threshold_ratio: Decimal = EQUITY_THRESHOLD_RATIO
    step_up_rate: Decimal = STEP_UP_RATE
    step_up_period: int = STEP_UP_PERIOD
    down_payment_step: Decimal = STEP_DOWN_PAYMENT
    earliest_purchase_month: int = EARLIEST_PURCHASE_MONTH
    latest_purchase_month: int = LATEST_PURCHASE_MONTH
    coop_min_term: int = COOP_MIN_TERM
    coop_max_term: int = COOP_MAX_TERM
    coop_term_step: int = COOP_TERM_STEP
    provisional_pricing_month: int = PROVISIONAL_PRICING_MONTH
    rent_rebase_period: int = RENT_REBASE_PERIOD
    max_alternatives: int = MAX_ALTERNATIVES

    def clamp_purchase_month(self, month: int) -> int:
        return max(self.earliest_purchase_month, min(self.latest_purchase_month, month))

    def coop_terms(self) -> range:
        return range(self.coop_min_term, self.coop_max_term + 1, self.coop_term_step)

    def down_payment_grid(self, max_down_payment: Decimal) -> list[Decimal]:
        """0, step, 2*step, ... up to and including *max_down_payment*."""
        if self.down_payment_step <= ZERO:
            raise ValueError("down_payment_step must be > 0")
        grid: list[Decimal] = []
        dp = ZERO
        while dp <= max_down_payment:
            grid.append(dp)
            dp += self.down_payment_step
        return grid


@dataclass(frozen=True)
class ScenarioParams:
    # Household constraints
    home_price: Decimal
    max_down_payment: Decimal
    max_monthly_payment: Decimal
    # Economic assumptions (monthly percentages)
    monthly_home_inflation_rate: Decimal
    monthly_opportunity_rate: Decimal
    opportunity_tax_rate: Decimal
    bank_monthly_rate: Decimal
    organization_fee_rate: Decimal
    # Switches
    use_step_up_installment: bool = False
    include_opportunity_cost_loss: bool = False
    # Rent
    rent_amortization_months: Decimal = DEFAULT_RENT_AMORTIZATION_MONTHS
    monthly_rent: Decimal = ZERO
    policy: SearchPolicy = field(default_factory=SearchPolicy)

    @property
    def net_opportunity_rate(self) -> Decimal:
        """After-tax monthly opportunity rate as a plain fraction."""
        return (self.monthly_opportunity_rate / HUNDRED) * (ONE - self.opportunity_tax_rate / HUNDRED)


@dataclass
class ScenarioInputs:
    """Raw inputs as typed by the user. Mandatory: the three household amounts."""
    home_price: RawNumber
    max_down_payment: RawNumber
    max_monthly_payment: RawNumber
    monthly_home_inflation_rate: RawNumber = None
    annual_home_inflation_rate: RawNumber = None
    monthly_opportunity_rate: RawNumber = None
    opportunity_tax_rate: RawNumber = None
    bank_monthly_rate: RawNumber = None
    organization_fee_rate: RawNumber = None
    use_step_up_installment: bool = False
    include_opportunity_cost_loss: bool = False
    rent_amortization_months: RawNumber = None
    policy: SearchPolicy = field(default_factory=SearchPolicy)


def parse_amount(raw: RawNumber) -> Decimal:
    """Parse a currency amount such as ``"2.000.000"`` or ``"35,000 TL"``.

    Every separator is treated as a thousand separator, so the result is a
    whole number. Empty input becomes 0 and negatives are coerced to 0.
    """
    if raw is None:
        return ZERO
    if isinstance(raw, (int, Decimal)):
        value = Decimal(raw)
    else:
        cleaned = _AMOUNT_NOISE.sub("", raw.strip())
        if cleaned in ("", "-"):
            return ZERO
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            raise ValueError(f"Invalid amount: '{raw}'") from None
    if not value.is_finite():
        raise ValueError(f"Invalid amount: '{raw}'")
    return max(ZERO, value.to_integral_value())


def parse_rate(raw: RawNumber, default: Optional[Decimal] = None) -> Decimal:
    """Parse a percentage such as ``"1,5"`` or ``"2.5"``; empty input gives *default* (or 0)."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default if default is not None else ZERO
    if isinstance(raw, (int, Decimal)):
        value = Decimal(raw)
    else:
        cleaned = raw.strip().rstrip("%").strip().replace(",", ".")
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            raise ValueError(f"Invalid rate: '{raw}'") from None
    if not value.is_finite():
        raise ValueError(f"Invalid rate: '{raw}'")
    return max(ZERO, value)


def resolve(inputs: ScenarioInputs) -> ScenarioParams:
    """Sanitize raw inputs and apply defaults.

    Resolution order for home inflation: explicit monthly rate, then the
    annual rate converted to its compound monthly equivalent, then the
    configured default.

    Raises ValueError on unparseable input, a non-positive home price or a
    rent amortization period shorter than one month.
    """
    home_price = parse_amount(inputs.home_price)
    if home_price <= ZERO:
        raise ValueError("home_price must be > 0")

    if inputs.monthly_home_inflation_rate not in (None, ""):
        monthly_inflation = parse_rate(inputs.monthly_home_inflation_rate)
    elif inputs.annual_home_inflation_rate not in (None, ""):
        monthly_inflation = annual_to_monthly_rate(parse_rate(inputs.annual_home_inflation_rate))
    else:
        monthly_inflation = DEFAULT_MONTHLY_HOME_INFLATION

    rent_months = (
        parse_amount(inputs.rent_amortization_months)
        if inputs.rent_amortization_months not in (None, "")
        else DEFAULT_RENT_AMORTIZATION_MONTHS
    )
    if rent_months < ONE:
        raise ValueError("rent_amortization_months must be >= 1")

    return ScenarioParams(
        home_price=home_price,
        max_down_payment=parse_amount(inputs.max_down_payment),
        max_monthly_payment=parse_amount(inputs.max_monthly_payment),
        monthly_home_inflation_rate=monthly_inflation,
        monthly_opportunity_rate=parse_rate(
            inputs.monthly_opportunity_rate, DEFAULT_MONTHLY_OPPORTUNITY_RATE
        ),
        opportunity_tax_rate=parse_rate(inputs.opportunity_tax_rate, DEFAULT_OPPORTUNITY_TAX_RATE),
        bank_monthly_rate=parse_rate(inputs.bank_monthly_rate, DEFAULT_BANK_MONTHLY_RATE),
        organization_fee_rate=parse_rate(inputs.organization_fee_rate, DEFAULT_ORGANIZATION_FEE_RATE),
        use_step_up_installment=inputs.use_step_up_installment,
        include_opportunity_cost_loss=inputs.include_opportunity_cost_loss,
        rent_amortization_months=rent_months,
        monthly_rent=ZERO,
        policy=inputs.policy,
    )
