"""Side-by-side comparison of the two financing paths."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .bank import BankLoanResult, compute_bank_loan
from .config import HUNDRED, ONE_DECIMAL, Winner
from .cooperative import CooperativeResult, compute_cooperative_scheme
from .params import ScenarioParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Comparison:
    winner: Winner
    bank_total_cost: Decimal
    cooperative_total_cost: Decimal
    difference: Decimal            # absolute gap between the two total costs
    percent_difference: Decimal    # gap relative to the bank cost, one decimal
    bank_interest_ratio: Decimal   # bank total interest / loan amount, in percent
    cooperative_extra_cost: Decimal
    cooperative_extra_ratio: Decimal


@dataclass(frozen=True)
class SearchResult:
    params: ScenarioParams
    bank: Optional[BankLoanResult]
    cooperative: Optional[CooperativeResult]
    comparison: Optional[Comparison]


def percent_difference(bank_cost: Decimal, cooperative_cost: Decimal) -> Decimal:
    """|bank - cooperative| / bank * 100, rounded half-up to one decimal."""
    return (abs(bank_cost - cooperative_cost) / bank_cost * HUNDRED).quantize(
        ONE_DECIMAL, rounding=ROUND_HALF_UP
    )


def compare(
    params: ScenarioParams,
    bank: Optional[BankLoanResult],
    cooperative: Optional[CooperativeResult],
) -> Optional[Comparison]:
    """Compare the two best results; None when either side has no feasible option.

    The cooperative scheme only wins when it is strictly cheaper.
    """
    if bank is None or cooperative is None:
        return None

    offer = bank.best
    strategy = cooperative.best
    gap = offer.total_cost - strategy.total_cost
    extra = strategy.total_cost - params.home_price

    return Comparison(
        winner="cooperative" if gap > 0 else "bank",
        bank_total_cost=offer.total_cost,
        cooperative_total_cost=strategy.total_cost,
        difference=abs(gap),
        percent_difference=percent_difference(offer.total_cost, strategy.total_cost),
        bank_interest_ratio=(
            offer.total_interest / offer.loan_amount * HUNDRED if offer.loan_amount else Decimal(0)
        ),
        cooperative_extra_cost=extra,
        cooperative_extra_ratio=extra / params.home_price * HUNDRED,
    )


def run_comparison(
    params: ScenarioParams,
    log: Optional[logging.Logger] = None,
) -> SearchResult:
    """Run both optimizers on one parameter record and compare their best results."""
    log = log or logger
    bank = compute_bank_loan(params, log=log)
    cooperative = compute_cooperative_scheme(params, log=log)
    comparison = compare(params, bank, cooperative)

    if comparison is None:
        log.debug("Comparison not possible: bank=%s, cooperative=%s",
                  bank is not None, cooperative is not None)
    else:
        log.debug("%s is cheaper by %.2f (%s%%)",
                  comparison.winner, comparison.difference, comparison.percent_difference)

    return SearchResult(params=params, bank=bank, cooperative=cooperative, comparison=comparison)
