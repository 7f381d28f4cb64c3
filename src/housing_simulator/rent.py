"""Forgone-rent estimator.

Under the cooperative scheme the buyer only gets the keys at the purchase
month; a bank buyer owns the home from day one and could rent it out. The
rent forfeited in the meantime is valued as ``home value / amortization
months`` per month, with the home value re-based to its inflated price once
a year.
"""
from __future__ import annotations

from decimal import Decimal

from .calculator import inflate
from .config import RENT_REBASE_PERIOD, ZERO


def forgone_rent(
    home_price: Decimal,
    purchase_month: int,
    monthly_inflation_percent: Decimal,
    amortization_months: Decimal,
    rebase_period: int = RENT_REBASE_PERIOD,
) -> Decimal:
    """Total rent lost over months 1..purchase_month inclusive.

    The home value starts at *home_price* and is re-based to
    ``home_price * (1 + i)^(month - 1)`` on months 13, 25, ... (for the
    default yearly period). A non-positive purchase month accrues nothing.
    """
    total = ZERO
    current_value = home_price

    for month in range(1, purchase_month + 1):
        if month > 1 and (month - 1) % rebase_period == 0:
            current_value = inflate(home_price, monthly_inflation_percent, month - 1)
        total += current_value / amortization_months

    return total
