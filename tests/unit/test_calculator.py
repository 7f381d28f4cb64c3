"""Unit tests for calculator.py — annuity, opportunity cost, inflation, schedule."""
from decimal import Decimal

import pytest

from housing_simulator.bank import make_offer
from housing_simulator.calculator import (
    annual_to_monthly_rate,
    annuity_payment,
    build_payment_schedule,
    inflate,
    opportunity_cost_growth,
)
from housing_simulator.params import ScenarioParams

ZERO = Decimal("0")


class TestAnnuityPayment:
    @pytest.mark.parametrize("principal,months", [
        (Decimal("120000"), 120),
        (Decimal("2100000"), 96),
        (Decimal("1"), 1),
    ])
    def test_zero_rate_is_even_split(self, principal, months):
        assert annuity_payment(principal, ZERO, months) == principal / Decimal(months)

    def test_zero_rate_round_numbers(self):
        assert annuity_payment(Decimal("120000"), ZERO, 120) == Decimal("1000")

    def test_single_month(self):
        # 1000 * 0.01 * 1.01 / 0.01 = 1010
        assert annuity_payment(Decimal("1000"), Decimal("1"), 1) == Decimal("1010")

    def test_known_value(self):
        # P=100000, r=1 %, n=12 → 8884.88
        result = annuity_payment(Decimal("100000"), Decimal("1"), 12)
        assert result.quantize(Decimal("0.01")) == Decimal("8884.88")

    @pytest.mark.parametrize("rate", [Decimal("0.5"), Decimal("2.5"), Decimal("4")])
    @pytest.mark.parametrize("months", [1, 12, 60, 120])
    def test_total_repayment_exceeds_principal(self, rate, months):
        principal = Decimal("500000")
        assert annuity_payment(principal, rate, months) * months > principal

    def test_invalid_term(self):
        with pytest.raises(ValueError, match="term_months"):
            annuity_payment(Decimal("100000"), Decimal("2"), 0)


class TestOpportunityCostGrowth:
    @pytest.mark.parametrize("rate", [ZERO, Decimal("0.02"), Decimal("0.5")])
    def test_zero_periods_is_zero(self, rate):
        assert opportunity_cost_growth(Decimal("750000"), 0, rate) == ZERO

    def test_one_period(self):
        assert opportunity_cost_growth(Decimal("100000"), 1, Decimal("0.02")) == Decimal("2000")

    def test_compounds(self):
        # 100000 * 1.1^2 - 100000 = 21000
        assert opportunity_cost_growth(Decimal("100000"), 2, Decimal("0.1")) == Decimal("21000")

    def test_zero_amount(self):
        assert opportunity_cost_growth(ZERO, 24, Decimal("0.03")) == ZERO


class TestInflation:
    def test_inflate(self):
        assert inflate(Decimal("100"), Decimal("1"), 2) == Decimal("102.01")

    def test_inflate_zero_months(self):
        assert inflate(Decimal("3000000"), Decimal("1.5"), 0) == Decimal("3000000")

    def test_annual_zero_is_monthly_zero(self):
        assert annual_to_monthly_rate(ZERO) == ZERO

    @pytest.mark.parametrize("annual", [Decimal("12"), Decimal("45"), Decimal("80")])
    def test_monthly_rate_compounds_back_to_annual(self, annual):
        monthly = annual_to_monthly_rate(annual)
        compounded = ((1 + monthly / 100) ** 12 - 1) * 100
        assert abs(compounded - annual) < Decimal("1e-9")

    def test_monthly_below_simple_twelfth(self):
        assert annual_to_monthly_rate(Decimal("60")) < Decimal("5")


class TestPaymentSchedule:
    def _offer(self, term=24):
        params = ScenarioParams(
            home_price=Decimal("2000000"),
            max_down_payment=Decimal("800000"),
            max_monthly_payment=Decimal("100000"),
            monthly_home_inflation_rate=Decimal("1.5"),
            monthly_opportunity_rate=Decimal("3"),
            opportunity_tax_rate=Decimal("15"),
            bank_monthly_rate=Decimal("3"),
            organization_fee_rate=Decimal("5"),
        )
        return make_offer(params, term)

    def test_row_count_capped_at_twelve(self):
        assert len(build_payment_schedule(self._offer(24), Decimal("3"))) == 12

    def test_short_term_row_count(self):
        offer = self._offer(24)
        assert len(build_payment_schedule(offer, Decimal("3"), months=30)) == 24

    def test_first_row(self):
        offer = self._offer()
        row = build_payment_schedule(offer, Decimal("3"))[0]
        assert row.month == 1
        assert row.interest == offer.loan_amount * Decimal("0.03")
        assert row.principal + row.interest == offer.monthly_installment
        assert row.remaining_balance == offer.loan_amount - row.principal

    def test_balance_decreases(self):
        rows = build_payment_schedule(self._offer(), Decimal("3"))
        balances = [row.remaining_balance for row in rows]
        assert all(balances[i] > balances[i + 1] for i in range(len(balances) - 1))

    def test_full_schedule_pays_off(self):
        offer = self._offer(24)
        rows = build_payment_schedule(offer, Decimal("3"), months=24)
        assert abs(rows[-1].remaining_balance) < Decimal("1e-6")
