"""Unit tests for compare.py — winner selection and relative advantage."""
from dataclasses import replace
from decimal import Decimal

import pytest

from housing_simulator.bank import BankLoanResult, LoanOffer
from housing_simulator.compare import compare, percent_difference, run_comparison
from housing_simulator.cooperative import CooperativeResult, CooperativeStrategy
from housing_simulator.params import ScenarioParams

ZERO = Decimal("0")


def _params(**kwargs) -> ScenarioParams:
    defaults = dict(
        home_price=Decimal("1000000"),
        max_down_payment=Decimal("400000"),
        max_monthly_payment=Decimal("30000"),
        monthly_home_inflation_rate=Decimal("1"),
        monthly_opportunity_rate=Decimal("3"),
        opportunity_tax_rate=Decimal("15"),
        bank_monthly_rate=Decimal("2"),
        organization_fee_rate=Decimal("5"),
        rent_amortization_months=Decimal("250"),
    )
    defaults.update(kwargs)
    return ScenarioParams(**defaults)


def _bank(total_cost: Decimal) -> BankLoanResult:
    offer = LoanOffer(
        term=60,
        down_payment=Decimal("400000"),
        loan_amount=Decimal("600000"),
        monthly_installment=(total_cost - Decimal("400000")) / 60,
        total_interest=total_cost - Decimal("1000000"),
        total_cost=total_cost,
        feasible=True,
    )
    return BankLoanResult(best=offer, candidates=(offer,))


def _cooperative(total_cost: Decimal) -> CooperativeResult:
    strategy = CooperativeStrategy(
        down_payment=Decimal("400000"),
        purchase_month=10,
        home_price_at_purchase=Decimal("1104622"),
        financed_amount=Decimal("1104622"),
        organization_fee=Decimal("55231"),
        total_contract_value=Decimal("1159853"),
        first_installment=Decimal("12664"),
        installment_step_up=ZERO,
        remaining_term_after_purchase=50,
        total_term=60,
        down_payment_opportunity_cost=ZERO,
        installments_opportunity_cost=ZERO,
        forgone_rent=total_cost - Decimal("1159853"),
        rent_expense=ZERO,
        total_cost=total_cost,
        search_pass="earliest",
    )
    return CooperativeResult(best=strategy, alternatives=(strategy,))


class TestPercentDifference:
    @pytest.mark.parametrize("bank,coop,expected", [
        (Decimal("200"), Decimal("150"), Decimal("25.0")),
        (Decimal("150"), Decimal("200"), Decimal("33.3")),
        (Decimal("3"), Decimal("2"), Decimal("33.3")),
        (Decimal("1000"), Decimal("999.5"), Decimal("0.1")),   # 0.05 rounds half up
        (Decimal("1000"), Decimal("1000"), Decimal("0.0")),
    ])
    def test_values(self, bank, coop, expected):
        assert percent_difference(bank, coop) == expected


class TestCompare:
    def test_cooperative_wins_when_cheaper(self):
        result = compare(_params(), _bank(Decimal("1500000")), _cooperative(Decimal("1200000")))
        assert result.winner == "cooperative"
        assert result.difference == Decimal("300000")
        assert result.percent_difference == Decimal("20.0")

    def test_bank_wins_when_cheaper(self):
        result = compare(_params(), _bank(Decimal("1200000")), _cooperative(Decimal("1500000")))
        assert result.winner == "bank"
        assert result.difference == Decimal("300000")
        assert result.percent_difference == Decimal("25.0")

    def test_tie_goes_to_bank(self):
        result = compare(_params(), _bank(Decimal("1300000")), _cooperative(Decimal("1300000")))
        assert result.winner == "bank"
        assert result.difference == ZERO

    def test_ratios(self):
        result = compare(_params(), _bank(Decimal("1300000")), _cooperative(Decimal("1250000")))
        # bank interest 300 000 on 600 000; cooperative extra 250 000 on 1 000 000
        assert result.bank_interest_ratio == Decimal("50")
        assert result.cooperative_extra_cost == Decimal("250000")
        assert result.cooperative_extra_ratio == Decimal("25")

    def test_missing_side(self):
        assert compare(_params(), None, _cooperative(Decimal("1"))) is None
        assert compare(_params(), _bank(Decimal("1")), None) is None

    def test_cash_purchase_has_zero_interest_ratio(self):
        bank = _bank(Decimal("1000000"))
        offer = replace(bank.best, loan_amount=ZERO, total_interest=ZERO)
        result = compare(_params(), BankLoanResult(offer, (offer,)), _cooperative(Decimal("1100000")))
        assert result.bank_interest_ratio == ZERO


class TestRunComparison:
    def test_attaches_both_sides(self):
        params = _params()
        result = run_comparison(params)
        assert result.params is params
        if result.bank is not None and result.cooperative is not None:
            assert result.comparison is not None
        else:
            assert result.comparison is None

    def test_no_comparison_without_bank(self):
        # 2 %/month interest on the 600 000 loan alone is 12 000
        result = run_comparison(_params(max_monthly_payment=Decimal("11000")))
        assert result.bank is None
        assert result.comparison is None
