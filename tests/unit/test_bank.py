"""Unit tests for bank.py — term menu search under equity and budget limits."""
from decimal import Decimal

import pytest

from housing_simulator.bank import bank_down_payment, compute_bank_loan, make_offer
from housing_simulator.params import ScenarioParams, SearchPolicy

ZERO = Decimal("0")


def _params(**kwargs) -> ScenarioParams:
    defaults = dict(
        home_price=Decimal("2000000"),
        max_down_payment=Decimal("800000"),
        max_monthly_payment=Decimal("40000"),
        monthly_home_inflation_rate=Decimal("1.5"),
        monthly_opportunity_rate=Decimal("3"),
        opportunity_tax_rate=Decimal("15"),
        bank_monthly_rate=Decimal("3"),
        organization_fee_rate=Decimal("5"),
        rent_amortization_months=Decimal("300"),
    )
    defaults.update(kwargs)
    return ScenarioParams(**defaults)


class TestDownPayment:
    def test_user_cap_inside_bounds(self):
        assert bank_down_payment(_params()) == Decimal("800000")

    def test_floor_at_thirty_percent(self):
        assert bank_down_payment(_params(max_down_payment=Decimal("100000"))) == Decimal("600000")

    def test_ceiling_at_fifty_percent(self):
        assert bank_down_payment(_params(max_down_payment=Decimal("5000000"))) == Decimal("1000000")


class TestComputeBankLoan:
    def test_returns_result(self):
        result = compute_bank_loan(_params())
        assert result is not None
        assert result.best.feasible

    def test_all_offers_within_equity_bounds(self):
        result = compute_bank_loan(_params())
        for offer in result.candidates:
            assert Decimal("600000") <= offer.down_payment <= Decimal("1000000")

    def test_candidates_cover_menu_in_order(self):
        result = compute_bank_loan(_params())
        assert [offer.term for offer in result.candidates] == list(SearchPolicy().bank_terms)

    def test_best_is_cheapest_feasible(self):
        result = compute_bank_loan(_params())
        feasible = [offer for offer in result.candidates if offer.feasible]
        assert result.best.total_cost == min(offer.total_cost for offer in feasible)
        # 1.2M at 3 %/month: 84 months is the shortest term under 40 000
        assert result.best.term == 84

    def test_infeasible_terms_flagged(self):
        result = compute_bank_loan(_params())
        for offer in result.candidates:
            assert offer.feasible == (offer.monthly_installment <= Decimal("40000"))
        assert not next(o for o in result.candidates if o.term == 72).feasible

    def test_offer_arithmetic(self):
        offer = make_offer(_params(), 60)
        assert offer.loan_amount == Decimal("1200000")
        assert offer.total_cost == offer.monthly_installment * 60 + offer.down_payment
        assert offer.total_interest == offer.total_cost - Decimal("2000000")

    def test_none_when_budget_too_low(self):
        # interest alone on 1.2M at 3 % is 36 000 a month
        assert compute_bank_loan(_params(max_monthly_payment=Decimal("30000"))) is None

    def test_tie_goes_to_shortest_term(self):
        # zero rate and a loan divisible by every term: all totals are equal
        params = _params(
            home_price=Decimal("6048000"),
            max_down_payment=Decimal("9000000"),
            max_monthly_payment=Decimal("10000000"),
            bank_monthly_rate=ZERO,
        )
        result = compute_bank_loan(params)
        assert len({offer.total_cost for offer in result.candidates}) == 1
        assert result.best.term == 12

    def test_custom_term_menu(self):
        params = _params(policy=SearchPolicy(bank_terms=(120,)))
        result = compute_bank_loan(params)
        assert [offer.term for offer in result.candidates] == [120]
        assert result.best.term == 120


class TestMonotonicity:
    CAPS = [Decimal(c) for c in ("30000", "37500", "39000", "40000", "45000", "60000", "150000")]

    def test_more_budget_never_costs_more(self):
        costs = []
        for cap in self.CAPS:
            result = compute_bank_loan(_params(max_monthly_payment=cap))
            costs.append(result.best.total_cost if result else None)
        known = [c for c in costs if c is not None]
        assert known, "at least one cap should be feasible"
        # once feasible, stays feasible and never gets more expensive
        first = costs.index(known[0])
        assert all(c is not None for c in costs[first:])
        assert all(known[i] >= known[i + 1] for i in range(len(known) - 1))

    def test_more_budget_keeps_feasible_terms(self):
        previous: set = set()
        for cap in self.CAPS:
            result = compute_bank_loan(_params(max_monthly_payment=cap))
            feasible = {o.term for o in result.candidates if o.feasible} if result else set()
            assert previous <= feasible
            previous = feasible

    @pytest.mark.parametrize("rate", [ZERO, Decimal("1"), Decimal("4")])
    def test_unlimited_budget_picks_cheapest_term(self, rate):
        result = compute_bank_loan(_params(max_monthly_payment=Decimal("1e9"), bank_monthly_rate=rate))
        assert result.best.total_cost == min(o.total_cost for o in result.candidates)
