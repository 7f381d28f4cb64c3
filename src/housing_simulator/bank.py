"""Bank-loan optimizer.

Enumerates the fixed term menu at a single policy-bounded down payment and
selects the cheapest term whose installment fits the monthly budget.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .calculator import annuity_payment
from .params import ScenarioParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoanOffer:
    term: int
    down_payment: Decimal
    loan_amount: Decimal
    monthly_installment: Decimal
    total_interest: Decimal
    total_cost: Decimal
    feasible: bool


@dataclass(frozen=True)
class BankLoanResult:
    best: LoanOffer
    candidates: tuple[LoanOffer, ...]   # every menu term, feasible or not, in menu order


def bank_down_payment(params: ScenarioParams) -> Decimal:
    """Down payment bounded to [min_equity, min(user cap, max_equity)] of the price."""
    policy = params.policy
    floor = params.home_price * policy.min_equity_ratio
    ceiling = params.home_price * policy.max_equity_ratio
    return max(floor, min(params.max_down_payment, ceiling))


def make_offer(params: ScenarioParams, term: int) -> LoanOffer:
    down_payment = bank_down_payment(params)
    loan_amount = params.home_price - down_payment
    installment = annuity_payment(loan_amount, params.bank_monthly_rate, term)
    total_cost = installment * Decimal(term) + down_payment

    return LoanOffer(
        term=term,
        down_payment=down_payment,
        loan_amount=loan_amount,
        monthly_installment=installment,
        total_interest=total_cost - params.home_price,
        total_cost=total_cost,
        feasible=installment <= params.max_monthly_payment,
    )


def compute_bank_loan(
    params: ScenarioParams,
    log: Optional[logging.Logger] = None,
) -> Optional[BankLoanResult]:
    """Return the cheapest feasible loan offer with all candidates attached.

    Ties are won by the first term encountered (the shortest, since the menu
    is ascending). Returns None if no term fits the monthly budget.
    """
    log = log or logger
    candidates = [make_offer(params, term) for term in params.policy.bank_terms]

    best: Optional[LoanOffer] = None
    for offer in candidates:
        if offer.feasible and (best is None or offer.total_cost < best.total_cost):
            best = offer

    if best is None:
        log.debug(
            "No bank term fits a monthly budget of %s (down payment %s)",
            params.max_monthly_payment, bank_down_payment(params),
        )
        return None

    log.debug(
        "Bank loan: %d months, installment %.2f, total cost %.2f",
        best.term, best.monthly_installment, best.total_cost,
    )
    return BankLoanResult(best=best, candidates=tuple(candidates))
