"""Amortization engine: closed-form installment and growth formulas.

All monetary values use decimal.Decimal. Rates passed as ``*_percent`` are
monthly percentages (2.5 means 2.5 % per month); ``net_monthly_rate`` in
:func:`opportunity_cost_growth` is already a plain fraction.
No rounding is applied here: results keep full context precision and are
only rounded for display.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from .config import HUNDRED, ONE, SCHEDULE_PREVIEW_MONTHS, ZERO

if TYPE_CHECKING:
    from .bank import LoanOffer


@dataclass(frozen=True)
class PaymentRow:
    month: int
    installment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_balance: Decimal


def annuity_payment(
    principal: Decimal,
    monthly_rate_percent: Decimal,
    term_months: int,
) -> Decimal:
    """Return the fixed monthly installment of an amortizing loan.

    Uses the standard reducing-balance formula:
        PMT = P * r * (1 + r)^n / ((1 + r)^n - 1)

    Special case: if the rate is exactly 0, PMT = P / n.
    """
    if term_months < 1:
        raise ValueError("term_months must be >= 1")

    r = monthly_rate_percent / HUNDRED
    if r == ZERO:
        return principal / Decimal(term_months)

    factor = (ONE + r) ** term_months
    return principal * r * factor / (factor - ONE)


def opportunity_cost_growth(
    amount: Decimal,
    periods: int,
    net_monthly_rate: Decimal,
) -> Decimal:
    """Return the compound return forgone by not investing *amount* for *periods* months."""
    return amount * (ONE + net_monthly_rate) ** periods - amount


def inflate(price: Decimal, monthly_rate_percent: Decimal, months: int) -> Decimal:
    """Home price after *months* of compound monthly inflation."""
    return price * (ONE + monthly_rate_percent / HUNDRED) ** months


def annual_to_monthly_rate(annual_percent: Decimal) -> Decimal:
    """Convert an annual percentage to the equivalent compound monthly percentage."""
    base = ONE + annual_percent / HUNDRED
    if base <= ZERO:
        raise ValueError("annual rate must be greater than -100%")
    return (base ** (ONE / Decimal(12)) - ONE) * HUNDRED


def build_payment_schedule(
    offer: "LoanOffer",
    monthly_rate_percent: Decimal,
    months: int = SCHEDULE_PREVIEW_MONTHS,
) -> list[PaymentRow]:
    """Build the first *months* rows of the bank amortization schedule."""
    r = monthly_rate_percent / HUNDRED
    balance = offer.loan_amount
    rows: list[PaymentRow] = []

    for month in range(1, min(months, offer.term) + 1):
        interest = balance * r
        principal = offer.monthly_installment - interest
        balance -= principal
        rows.append(
            PaymentRow(
                month=month,
                installment=offer.monthly_installment,
                interest=interest,
                principal=principal,
                remaining_balance=balance,
            )
        )

    return rows
