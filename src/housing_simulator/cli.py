"""Command-line front end — click entry point + rich result rendering.

Flow:
  1. Collect the household amounts (from options or prompts) and the
     economic assumptions (options with defaults).
  2. Resolve them into a ScenarioParams record.
  3. Run both optimizers and render the bank, cooperative and comparison
     panels (plus the first-year payment tables with --schedule).
"""
from __future__ import annotations

import logging
import sys
from decimal import Decimal
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .bank import BankLoanResult
from .calculator import build_payment_schedule
from .compare import Comparison, SearchResult, run_comparison
from .config import (
    DEFAULT_BANK_MONTHLY_RATE,
    DEFAULT_MONTHLY_OPPORTUNITY_RATE,
    DEFAULT_OPPORTUNITY_TAX_RATE,
    DEFAULT_ORGANIZATION_FEE_RATE,
    DEFAULT_RENT_AMORTIZATION_MONTHS,
    HUNDRED,
    ONE,
    ZERO,
)
from .cooperative import CooperativeResult
from .params import ScenarioInputs, ScenarioParams, parse_amount, resolve
from .staged import build_staged_schedule

console = Console()
err_console = Console(stderr=True, style="bold red")

_BAR_WIDTH = 40

# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

def _fmt_tl(value: Decimal) -> str:
    return f"{value:,.0f} TL"


def _fmt_pct(value: Decimal, places: int = 1) -> str:
    return f"%{value:.{places}f}"


def _fmt_months(n: int) -> str:
    return f"{n} months"


# ──────────────────────────────────────────────────────────────────────────────
# Result display
# ──────────────────────────────────────────────────────────────────────────────

def display_bank(result: Optional[BankLoanResult], params: ScenarioParams, schedule: bool) -> None:
    console.print()
    if result is None:
        console.print(Panel("[bold red]Bank loan[/bold red]\nNo suitable loan found.", expand=False))
        return

    offer = result.best
    console.print(Panel(f"[bold blue]Bank loan[/bold blue] — best term: {_fmt_months(offer.term)}", expand=False))

    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")
    share = offer.down_payment / params.home_price * HUNDRED
    t.add_row("Down payment", f"{_fmt_tl(offer.down_payment)} ({_fmt_pct(share, 0)})")
    t.add_row("Loan amount", _fmt_tl(offer.loan_amount))
    t.add_row("Monthly installment", _fmt_tl(offer.monthly_installment))
    t.add_row("Monthly rate", _fmt_pct(params.bank_monthly_rate, 2))
    t.add_row("Total interest", _fmt_tl(offer.total_interest))
    t.add_row("[bold]Total cost[/bold]", f"[bold]{_fmt_tl(offer.total_cost)}[/bold]")
    console.print(t)

    terms = Table(title="All terms", box=box.MINIMAL_HEAVY_HEAD)
    for col in ("Term", "Installment", "Total interest", "Total cost", "Status"):
        terms.add_column(col, justify="right")
    for candidate in result.candidates:
        if candidate.term == offer.term:
            status, style = "✓ selected", "bold green"
        elif not candidate.feasible:
            status, style = "installment too high", "dim"
        else:
            status, style = "", None
        terms.add_row(
            _fmt_months(candidate.term),
            _fmt_tl(candidate.monthly_installment),
            _fmt_tl(candidate.total_interest),
            _fmt_tl(candidate.total_cost),
            status,
            style=style,
        )
    console.print(terms)

    if schedule:
        plan = Table(title="First 12 months", box=box.MINIMAL_HEAVY_HEAD)
        for col in ("Month", "Installment", "Interest", "Principal", "Remaining"):
            plan.add_column(col, justify="right")
        for row in build_payment_schedule(offer, params.bank_monthly_rate):
            plan.add_row(
                str(row.month),
                _fmt_tl(row.installment),
                _fmt_tl(row.interest),
                _fmt_tl(row.principal),
                _fmt_tl(row.remaining_balance),
            )
        console.print(plan)


def display_cooperative(result: Optional[CooperativeResult], params: ScenarioParams, schedule: bool) -> None:
    console.print()
    if result is None:
        console.print(Panel("[bold red]Cooperative scheme[/bold red]\nNo suitable strategy found.", expand=False))
        return

    s = result.best
    console.print(Panel(
        f"[bold magenta]Cooperative scheme[/bold magenta] — purchase in month {s.purchase_month}",
        expand=False,
    ))

    increase = s.home_price_at_purchase - params.home_price
    if s.installment_step_up > ZERO:
        installment = f"{_fmt_tl(s.first_installment)} (+{_fmt_tl(s.installment_step_up)} every 6 months)"
    else:
        installment = _fmt_tl(s.first_installment)

    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")
    t.add_row("Down payment", _fmt_tl(s.down_payment))
    t.add_row(
        f"Home price (month {s.purchase_month})",
        f"{_fmt_tl(s.home_price_at_purchase)} (+{_fmt_pct((s.home_price_at_purchase / params.home_price - ONE) * HUNDRED)})",
    )
    t.add_row("First installment", installment)
    t.add_row("Total term", _fmt_months(s.total_term))
    t.add_row("Remaining after purchase", _fmt_months(s.remaining_term_after_purchase))
    t.add_row("Initial home price", _fmt_tl(params.home_price))
    t.add_row(f"Price increase ({s.purchase_month} months)", _fmt_tl(increase))
    t.add_row("Organization fee", _fmt_tl(s.organization_fee))
    t.add_row("Contract total", _fmt_tl(s.total_contract_value))
    if s.opportunity_cost_loss > ZERO:
        t.add_row("Opportunity-cost loss", _fmt_tl(s.opportunity_cost_loss))
    t.add_row(f"Forgone rent ({s.purchase_month} months)", _fmt_tl(s.forgone_rent))
    if s.rent_expense > ZERO:
        t.add_row(f"Rent expense ({s.purchase_month} months)", _fmt_tl(s.rent_expense))
    t.add_row("[bold]Total cost[/bold]", f"[bold]{_fmt_tl(s.total_cost)}[/bold]")
    console.print(t)

    if len(result.alternatives) > 1:
        alts = Table(title="Alternative strategies", box=box.MINIMAL_HEAVY_HEAD)
        for col in ("Strategy", "Down payment", "Purchase", "First installment", "Term", "Total cost"):
            alts.add_column(col, justify="right")
        for index, alt in enumerate(result.alternatives):
            label = "✓ Optimal" if index == 0 else f"{index + 1}. alternative"
            alts.add_row(
                label,
                _fmt_tl(alt.down_payment),
                f"month {alt.purchase_month}",
                _fmt_tl(alt.first_installment),
                _fmt_months(alt.total_term),
                _fmt_tl(alt.total_cost),
                style="bold green" if index == 0 else None,
            )
        console.print(alts)

    if schedule:
        threshold = s.financed_amount * params.policy.equity_threshold_ratio
        plan = Table(
            title="Payments until purchase",
            caption=f"Equity threshold: {_fmt_tl(threshold)}",
            box=box.MINIMAL_HEAVY_HEAD,
        )
        for col in ("Month", "Installment", "Paid in", "Share of financing"):
            plan.add_column(col, justify="right")
        rows = build_staged_schedule(s, params.use_step_up_installment, params.policy)
        for row in rows:
            plan.add_row(
                str(row.month),
                _fmt_tl(row.installment),
                _fmt_tl(row.cumulative_paid),
                _fmt_pct(row.paid_ratio),
                style="green" if row.threshold_reached else None,
            )
        console.print(plan)


def _bar(value: Decimal, maximum: Decimal) -> str:
    width = int(value / maximum * _BAR_WIDTH) if maximum > ZERO else 0
    return "█" * max(width, 1)


def display_comparison(result: SearchResult) -> None:
    console.print()
    comparison: Optional[Comparison] = result.comparison
    if comparison is None or result.bank is None or result.cooperative is None:
        console.print(Panel("[bold red]Comparison not possible[/bold red]", expand=False))
        return

    offer = result.bank.best
    strategy = result.cooperative.best

    name = "COOPERATIVE SCHEME" if comparison.winner == "cooperative" else "BANK LOAN"
    colour = "green" if comparison.winner == "cooperative" else "yellow"
    console.print(Panel(
        f"[bold {colour}]{name} IS CHEAPER BY {_fmt_tl(comparison.difference)} "
        f"({_fmt_pct(comparison.percent_difference)})[/bold {colour}]",
        expand=False,
    ))

    maximum = max(comparison.bank_total_cost, comparison.cooperative_total_cost)
    console.print(f"  Bank loan    [blue]{_bar(comparison.bank_total_cost, maximum)}[/blue] "
                  f"{_fmt_tl(comparison.bank_total_cost)}")
    console.print(f"  Cooperative  [magenta]{_bar(comparison.cooperative_total_cost, maximum)}[/magenta] "
                  f"{_fmt_tl(comparison.cooperative_total_cost)}")

    t = Table(box=box.SIMPLE_HEAVY, show_header=True, padding=(0, 2))
    t.add_column("Criterion", style="cyan")
    t.add_column("Bank loan", justify="right")
    t.add_column("Cooperative", justify="right")
    t.add_row("Total cost", _fmt_tl(offer.total_cost), _fmt_tl(strategy.total_cost))
    t.add_row("Down payment", _fmt_tl(offer.down_payment), _fmt_tl(strategy.down_payment))
    t.add_row("First installment", _fmt_tl(offer.monthly_installment), _fmt_tl(strategy.first_installment))
    t.add_row("Term", _fmt_months(offer.term), _fmt_months(strategy.total_term))
    t.add_row("Interest / extra cost", _fmt_tl(offer.total_interest), _fmt_tl(comparison.cooperative_extra_cost))
    t.add_row(
        "Interest / extra cost ratio",
        _fmt_pct(comparison.bank_interest_ratio),
        _fmt_pct(comparison.cooperative_extra_ratio),
    )
    t.add_row("Ownership", "immediately", f"month {strategy.purchase_month}")
    console.print(t)


def display_result(result: SearchResult, schedule: bool = False) -> None:
    display_bank(result.bank, result.params, schedule)
    display_cooperative(result.cooperative, result.params, schedule)
    display_comparison(result)


# ──────────────────────────────────────────────────────────────────────────────
# Input helpers
# ──────────────────────────────────────────────────────────────────────────────

def _prompt_amount(prompt: str) -> Decimal:
    while True:
        raw = console.input(f"[bold]{prompt}[/bold] ").strip()
        try:
            return parse_amount(raw)
        except ValueError:
            err_console.print(f"  Invalid number: '{raw}'")


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    package_logger = logging.getLogger("housing_simulator")
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(RichHandler(console=err_console, show_path=False))


# ──────────────────────────────────────────────────────────────────────────────
# Click entry point
# ──────────────────────────────────────────────────────────────────────────────

@click.command()
@click.option("--home-price", type=str, default=None, help="Home price today (e.g. 3.000.000)")
@click.option("--max-down-payment", type=str, default=None, help="Largest down payment you can make")
@click.option("--max-monthly-payment", type=str, default=None, help="Largest monthly payment you can afford")
@click.option("--monthly-inflation", type=str, default=None, help="Monthly home-price inflation in %")
@click.option("--annual-inflation", type=str, default=None,
              help="Annual home-price inflation in % (converted to monthly; ignored with --monthly-inflation)")
@click.option("--opportunity-rate", type=str, default=str(DEFAULT_MONTHLY_OPPORTUNITY_RATE), show_default=True,
              help="Monthly return on alternative investments (repo) in %")
@click.option("--opportunity-tax", type=str, default=str(DEFAULT_OPPORTUNITY_TAX_RATE), show_default=True,
              help="Withholding tax on that return in %")
@click.option("--bank-rate", type=str, default=str(DEFAULT_BANK_MONTHLY_RATE), show_default=True,
              help="Monthly bank loan rate in %")
@click.option("--org-fee", type=str, default=str(DEFAULT_ORGANIZATION_FEE_RATE), show_default=True,
              help="Cooperative organization fee in % of the financed amount")
@click.option("--rent-amortization", type=str, default=str(DEFAULT_RENT_AMORTIZATION_MONTHS), show_default=True,
              help="Months of rent equal to the home value")
@click.option("--step-up/--no-step-up", default=False, show_default=True,
              help="Cooperative installments rise every 6 months")
@click.option("--opportunity-cost/--no-opportunity-cost", default=False, show_default=True,
              help="Charge the cooperative path for the return lost on early payments")
@click.option("--schedule", is_flag=True, default=False, help="Show the first-year payment tables")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Trace the search on stderr")
def main(
    home_price: Optional[str],
    max_down_payment: Optional[str],
    max_monthly_payment: Optional[str],
    monthly_inflation: Optional[str],
    annual_inflation: Optional[str],
    opportunity_rate: str,
    opportunity_tax: str,
    bank_rate: str,
    org_fee: str,
    rent_amortization: str,
    step_up: bool,
    opportunity_cost: bool,
    schedule: bool,
    verbose: bool,
) -> None:
    """Bank loan vs. cooperative (evim) home-financing simulator."""
    console.print(Panel("[bold blue]Housing Finance Simulator[/bold blue]", expand=False))
    _configure_logging(verbose)

    inputs = ScenarioInputs(
        home_price=home_price if home_price is not None else _prompt_amount("Home price?"),
        max_down_payment=(
            max_down_payment if max_down_payment is not None else _prompt_amount("Maximum down payment?")
        ),
        max_monthly_payment=(
            max_monthly_payment if max_monthly_payment is not None else _prompt_amount("Maximum monthly payment?")
        ),
        monthly_home_inflation_rate=monthly_inflation,
        annual_home_inflation_rate=annual_inflation,
        monthly_opportunity_rate=opportunity_rate,
        opportunity_tax_rate=opportunity_tax,
        bank_monthly_rate=bank_rate,
        organization_fee_rate=org_fee,
        use_step_up_installment=step_up,
        include_opportunity_cost_loss=opportunity_cost,
        rent_amortization_months=rent_amortization,
    )

    try:
        params = resolve(inputs)
    except ValueError as exc:
        err_console.print(f"Parameter error: {exc}")
        sys.exit(1)

    console.print(
        f"  Monthly home inflation: {_fmt_pct(params.monthly_home_inflation_rate, 2)}  "
        f"Net opportunity rate: {_fmt_pct(params.net_opportunity_rate * HUNDRED, 2)}"
    )
    display_result(run_comparison(params), schedule=schedule)
