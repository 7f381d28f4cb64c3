"""Cooperative-scheme optimizer.

Two complementary searches feed one ranked pool of candidate strategies:

Pass A ("earliest")
    For every down payment on the grid, find the earliest purchase month at
    which paying the full monthly budget would reach the equity threshold,
    then spread the remaining contract over a flat installment.

Pass B ("fixed_term")
    For every (down payment, total term) pair, size a provisional plan on the
    price at ``provisional_pricing_month``, find the month the threshold is
    crossed, then re-price the contract at that (clamped) purchase month and
    re-run the plan with the real numbers.

Every accepted candidate is costed the same way (contract total, optional
opportunity-cost loss, forgone rent, rent expense) and the pool keeps the
``max_alternatives`` cheapest, ascending by total cost.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal
from typing import Optional

from .calculator import inflate, opportunity_cost_growth
from .config import HUNDRED, ZERO, SearchPass
from .params import ScenarioParams
from .rent import forgone_rent
from .staged import (
    StagedInstallment,
    flat_installment,
    installment_plan,
    iter_installments,
    threshold_crossing_month,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CooperativeStrategy:
    down_payment: Decimal
    purchase_month: int
    home_price_at_purchase: Decimal
    financed_amount: Decimal
    organization_fee: Decimal
    total_contract_value: Decimal
    first_installment: Decimal
    installment_step_up: Decimal
    remaining_term_after_purchase: int
    total_term: int
    down_payment_opportunity_cost: Decimal
    installments_opportunity_cost: Decimal
    forgone_rent: Decimal
    rent_expense: Decimal
    total_cost: Decimal
    search_pass: SearchPass

    @property
    def opportunity_cost_loss(self) -> Decimal:
        return self.down_payment_opportunity_cost + self.installments_opportunity_cost


@dataclass(frozen=True)
class CooperativeResult:
    best: CooperativeStrategy
    alternatives: tuple[CooperativeStrategy, ...]   # ascending by total cost, best first


@dataclass(frozen=True)
class ContractPricing:
    """Contract figures for a purchase at a given month."""
    home_price_at_purchase: Decimal
    financed_amount: Decimal
    organization_fee: Decimal
    total_contract_value: Decimal
    equity_threshold: Decimal


@dataclass(frozen=True)
class CostBreakdown:
    down_payment_opportunity_cost: Decimal
    installments_opportunity_cost: Decimal
    forgone_rent: Decimal
    rent_expense: Decimal


def price_contract(params: ScenarioParams, month: int) -> ContractPricing:
    """Price the contract when the home is bought *month* months from now.

    The whole inflated price is financed; the organization fee is charged on
    it and the equity threshold is a share of it.
    """
    price = inflate(params.home_price, params.monthly_home_inflation_rate, month)
    fee = price * (params.organization_fee_rate / HUNDRED)
    return ContractPricing(
        home_price_at_purchase=price,
        financed_amount=price,
        organization_fee=fee,
        total_contract_value=price + fee,
        equity_threshold=price * params.policy.equity_threshold_ratio,
    )


def cost_breakdown(
    params: ScenarioParams,
    down_payment: Decimal,
    purchase_month: int,
    plan: StagedInstallment,
    use_step_up: bool,
) -> CostBreakdown:
    """Costs on top of the contract total incurred before the purchase month.

    With opportunity costs enabled, the down payment loses compounding over
    the whole wait and each installment over the months between its payment
    and the purchase.
    """
    down_payment_loss = ZERO
    installments_loss = ZERO

    if params.include_opportunity_cost_loss:
        rate = params.net_opportunity_rate
        down_payment_loss = opportunity_cost_growth(down_payment, purchase_month, rate)
        for month, installment in iter_installments(
            plan, purchase_month, use_step_up, params.policy.step_up_period
        ):
            installments_loss += opportunity_cost_growth(installment, purchase_month - month, rate)

    rent = forgone_rent(
        params.home_price,
        purchase_month,
        params.monthly_home_inflation_rate,
        params.rent_amortization_months,
        params.policy.rent_rebase_period,
    )
    return CostBreakdown(
        down_payment_opportunity_cost=down_payment_loss,
        installments_opportunity_cost=installments_loss,
        forgone_rent=rent,
        rent_expense=params.monthly_rent * Decimal(purchase_month),
    )


def _build_strategy(
    params: ScenarioParams,
    search_pass: SearchPass,
    down_payment: Decimal,
    purchase_month: int,
    total_term: int,
    pricing: ContractPricing,
    plan: StagedInstallment,
    use_step_up: bool,
) -> CooperativeStrategy:
    costs = cost_breakdown(params, down_payment, purchase_month, plan, use_step_up)

    total_cost = pricing.total_contract_value
    total_cost += costs.down_payment_opportunity_cost
    total_cost += costs.installments_opportunity_cost
    total_cost += costs.forgone_rent
    total_cost += costs.rent_expense

    return CooperativeStrategy(
        down_payment=down_payment,
        purchase_month=purchase_month,
        home_price_at_purchase=pricing.home_price_at_purchase,
        financed_amount=pricing.financed_amount,
        organization_fee=pricing.organization_fee,
        total_contract_value=pricing.total_contract_value,
        first_installment=plan.first_installment,
        installment_step_up=plan.step_up,
        remaining_term_after_purchase=total_term - purchase_month,
        total_term=total_term,
        down_payment_opportunity_cost=costs.down_payment_opportunity_cost,
        installments_opportunity_cost=costs.installments_opportunity_cost,
        forgone_rent=costs.forgone_rent,
        rent_expense=costs.rent_expense,
        total_cost=total_cost,
        search_pass=search_pass,
    )


def _fits_budget(plan: StagedInstallment, cap: Decimal) -> bool:
    return ZERO < plan.first_installment <= cap


def earliest_purchase_strategy(
    params: ScenarioParams,
    down_payment: Decimal,
) -> Optional[CooperativeStrategy]:
    """Pass A: earliest month the full monthly budget reaches the threshold.

    Months are scanned in ascending order and the first accepted month wins.
    """
    policy = params.policy
    cap = params.max_monthly_payment

    for month in range(policy.earliest_purchase_month, policy.latest_purchase_month + 1):
        pricing = price_contract(params, month)
        paid_by_purchase = down_payment + Decimal(month) * cap
        if paid_by_purchase < pricing.equity_threshold:
            continue

        remaining_balance = pricing.total_contract_value - paid_by_purchase
        remaining_term = int((remaining_balance / cap).to_integral_value(rounding=ROUND_CEILING))
        total_term = month + remaining_term
        if total_term <= 0:
            continue

        plan = flat_installment(pricing.total_contract_value - down_payment, total_term)
        if not _fits_budget(plan, cap):
            continue

        return _build_strategy(
            params, "earliest", down_payment, month, total_term, pricing, plan, use_step_up=False
        )

    return None


def fixed_term_strategy(
    params: ScenarioParams,
    down_payment: Decimal,
    total_term: int,
) -> Optional[CooperativeStrategy]:
    """Pass B: a strategy with a fixed total term, or None if it does not fit."""
    policy = params.policy
    cap = params.max_monthly_payment
    use_step_up = params.use_step_up_installment

    # Provisional sizing on the price at the provisional pricing month
    provisional = price_contract(params, policy.provisional_pricing_month)
    plan = installment_plan(
        provisional.total_contract_value - down_payment,
        provisional.financed_amount,
        total_term,
        use_step_up,
        policy,
    )
    if not _fits_budget(plan, cap):
        return None

    crossing = threshold_crossing_month(
        down_payment, plan, provisional.equity_threshold, total_term,
        use_step_up, policy.step_up_period,
    )
    if crossing == 0:
        return None
    purchase_month = policy.clamp_purchase_month(crossing)

    # Re-price at the actual purchase month
    pricing = price_contract(params, purchase_month)
    plan = installment_plan(
        pricing.total_contract_value - down_payment,
        pricing.financed_amount,
        total_term,
        use_step_up,
        policy,
    )
    if not _fits_budget(plan, cap):
        return None

    crossing = threshold_crossing_month(
        down_payment, plan, pricing.equity_threshold, total_term,
        use_step_up, policy.step_up_period,
    )
    purchase_month = policy.clamp_purchase_month(crossing)

    return _build_strategy(
        params, "fixed_term", down_payment, purchase_month, total_term, pricing, plan, use_step_up
    )


class StrategyPool:
    """The cheapest strategies seen so far, ascending by total cost.

    Insertion is stable: among equal costs the earlier candidate ranks first.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self._items: list[CooperativeStrategy] = []

    def add(self, strategy: CooperativeStrategy) -> None:
        self._items.append(strategy)
        self._items.sort(key=lambda s: s.total_cost)
        del self._items[self.size:]

    @property
    def best(self) -> Optional[CooperativeStrategy]:
        return self._items[0] if self._items else None

    @property
    def items(self) -> tuple[CooperativeStrategy, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)


def compute_cooperative_scheme(
    params: ScenarioParams,
    log: Optional[logging.Logger] = None,
) -> Optional[CooperativeResult]:
    """Search both passes and return the cheapest strategy with its alternatives.

    Returns None if no strategy satisfies the budget and threshold rules.
    """
    log = log or logger
    policy = params.policy
    log.debug("Cooperative search started: %s", params)

    if params.max_monthly_payment <= ZERO:
        log.debug("No cooperative strategy: monthly budget is zero")
        return None

    pool = StrategyPool(policy.max_alternatives)
    down_payments = policy.down_payment_grid(params.max_down_payment)

    for down_payment in down_payments:
        strategy = earliest_purchase_strategy(params, down_payment)
        if strategy is not None:
            _log_strategy(log, strategy)
            pool.add(strategy)

    for down_payment in down_payments:
        for total_term in policy.coop_terms():
            strategy = fixed_term_strategy(params, down_payment, total_term)
            if strategy is not None:
                _log_strategy(log, strategy)
                pool.add(strategy)

    best = pool.best
    if best is None:
        log.debug("No cooperative strategy satisfies the constraints")
        return None

    return CooperativeResult(best=best, alternatives=pool.items)


def _log_strategy(log: logging.Logger, strategy: CooperativeStrategy) -> None:
    log.debug(
        "Strategy found (%s) - down payment: %s, purchase: month %d, term: %d, cost: %.2f",
        strategy.search_pass,
        strategy.down_payment,
        strategy.purchase_month,
        strategy.total_term,
        strategy.total_cost,
    )
