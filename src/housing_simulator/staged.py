"""Staged-payment engine for the cooperative scheme.

A cooperative contract is repaid either with a flat installment or with a
"step-up" plan: the installment rises by a fixed amount at the start of
every block of ``step_up_period`` months. The step-up amount is a fixed
share (``step_up_rate``) of the financed principal, and the first
installment is solved from the linear balance

    total_owed = first * total_coefficient + step_up * step_coefficient

where, with the term split into blocks (the last one possibly short),
``total_coefficient`` is the sum of block lengths and
``step_coefficient`` the sum of block length times block index (0-based).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Iterator

from .config import HUNDRED, SCHEDULE_PREVIEW_MONTHS, STEP_UP_PERIOD, ZERO
from .params import SearchPolicy

if TYPE_CHECKING:
    from .cooperative import CooperativeStrategy


@dataclass(frozen=True)
class StagedInstallment:
    first_installment: Decimal
    step_up: Decimal


@dataclass(frozen=True)
class StagedPaymentRow:
    month: int
    installment: Decimal
    cumulative_paid: Decimal
    paid_ratio: Decimal          # cumulative_paid / financed amount, in percent
    threshold_reached: bool


def block_coefficients(term: int, period: int = STEP_UP_PERIOD) -> tuple[int, int]:
    """Return (total_coefficient, step_coefficient) for a term split into blocks."""
    total_coefficient = 0
    step_coefficient = 0
    block_count = -(-term // period)  # ceil

    for block in range(block_count):
        start = block * period
        end = min((block + 1) * period, term)
        length = end - start
        total_coefficient += length
        step_coefficient += length * block

    return total_coefficient, step_coefficient


def flat_installment(total_owed: Decimal, term: int) -> StagedInstallment:
    return StagedInstallment(first_installment=total_owed / Decimal(term), step_up=ZERO)


def step_up_installment(
    total_owed: Decimal,
    financed_principal: Decimal,
    term: int,
    policy: SearchPolicy = SearchPolicy(),
) -> StagedInstallment:
    step_up = financed_principal * policy.step_up_rate
    total_coefficient, step_coefficient = block_coefficients(term, policy.step_up_period)
    first = (total_owed - step_up * Decimal(step_coefficient)) / Decimal(total_coefficient)
    return StagedInstallment(first_installment=first, step_up=step_up)


def installment_plan(
    total_owed: Decimal,
    financed_principal: Decimal,
    term: int,
    use_step_up: bool,
    policy: SearchPolicy = SearchPolicy(),
) -> StagedInstallment:
    """Flat plan, or the step-up plan when *use_step_up* is set."""
    if use_step_up:
        return step_up_installment(total_owed, financed_principal, term, policy)
    return flat_installment(total_owed, term)


def iter_installments(
    plan: StagedInstallment,
    months: int,
    use_step_up: bool,
    period: int = STEP_UP_PERIOD,
) -> Iterator[tuple[int, Decimal]]:
    """Yield (month, installment) for months 1..*months*.

    The step-up is applied on the first month of each new block
    (month > 1 and (month - 1) % period == 0), before that month is paid.
    """
    installment = plan.first_installment
    for month in range(1, months + 1):
        if use_step_up and month > 1 and (month - 1) % period == 0:
            installment += plan.step_up
        yield month, installment


def threshold_crossing_month(
    down_payment: Decimal,
    plan: StagedInstallment,
    threshold: Decimal,
    term: int,
    use_step_up: bool,
    period: int = STEP_UP_PERIOD,
) -> int:
    """First month in which down payment + installments reach *threshold*; 0 if never."""
    paid = down_payment
    for month, installment in iter_installments(plan, term, use_step_up, period):
        paid += installment
        if paid >= threshold:
            return month
    return 0


def build_staged_schedule(
    strategy: "CooperativeStrategy",
    use_step_up: bool,
    policy: SearchPolicy = SearchPolicy(),
    months: int = SCHEDULE_PREVIEW_MONTHS,
) -> list[StagedPaymentRow]:
    """First payments of a cooperative strategy, up to its purchase month."""
    plan = StagedInstallment(strategy.first_installment, strategy.installment_step_up)
    threshold = strategy.financed_amount * policy.equity_threshold_ratio
    stepped = use_step_up and strategy.installment_step_up > ZERO
    paid = strategy.down_payment
    rows: list[StagedPaymentRow] = []

    for month, installment in iter_installments(
        plan, min(months, strategy.purchase_month), stepped, policy.step_up_period
    ):
        paid += installment
        rows.append(
            StagedPaymentRow(
                month=month,
                installment=installment,
                cumulative_paid=paid,
                paid_ratio=paid / strategy.financed_amount * HUNDRED,
                threshold_reached=paid >= threshold,
            )
        )

    return rows
