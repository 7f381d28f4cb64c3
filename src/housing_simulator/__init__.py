"""Bank loan vs. construction-cooperative home-financing simulator."""
import logging

from .bank import BankLoanResult, LoanOffer, compute_bank_loan
from .calculator import annual_to_monthly_rate, annuity_payment, opportunity_cost_growth
from .compare import Comparison, SearchResult, compare, run_comparison
from .cooperative import CooperativeResult, CooperativeStrategy, compute_cooperative_scheme
from .params import ScenarioInputs, ScenarioParams, SearchPolicy, resolve
from .rent import forgone_rent
from .staged import step_up_installment

# Tracing is off unless the application configures a handler
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BankLoanResult",
    "Comparison",
    "CooperativeResult",
    "CooperativeStrategy",
    "LoanOffer",
    "ScenarioInputs",
    "ScenarioParams",
    "SearchPolicy",
    "SearchResult",
    "annual_to_monthly_rate",
    "annuity_payment",
    "compare",
    "compute_bank_loan",
    "compute_cooperative_scheme",
    "forgone_rent",
    "opportunity_cost_growth",
    "resolve",
    "run_comparison",
    "step_up_installment",
]
