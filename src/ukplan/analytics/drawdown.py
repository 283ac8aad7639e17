"""Year-by-year retirement drawdown across wrappers, and strategy comparison.

The ``tax_optimal`` strategy spends the general investment account first so
its gains use the CGT exemption, then the tax-free ISA and cash savings,
and leaves the pension until last. The ``proportional`` strategy takes the
same share of every pot each year.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from ukplan.config.schema import Household
from ukplan.taxes.cgt import cgt_rate
from ukplan.taxes.pension_withdrawal import gross_pension_withdrawal, pension_withdrawal_tax
from ukplan.taxes.rules import TaxRuleTable, resolve_rules

logger = logging.getLogger(__name__)

DrawdownStrategy = Literal["proportional", "tax_optimal"]

DEFAULT_DRAWDOWN_END_AGE = 95
DEFAULT_DRAWDOWN_GROWTH = 0.04
# share of a GIA withdrawal treated as gain; the rest is cost basis
GIA_GAIN_FRACTION = 0.5


@dataclass(frozen=True)
class DrawdownPots:
    """Opening balances by tax wrapper."""

    pension: float = 0.0
    isa: float = 0.0
    gia: float = 0.0
    cash: float = 0.0

    @classmethod
    def from_household(cls, household: Household) -> DrawdownPots:
        """Sum every account into its wrapper; premium bonds count as cash."""
        totals = {"pension": 0.0, "isa": 0.0, "gia": 0.0, "cash": 0.0}
        for account in household.accounts:
            wrapper = "cash" if account.wrapper == "premium_bonds" else account.wrapper
            totals[wrapper] += account.current_value
        return cls(**totals)


@dataclass(frozen=True)
class DrawdownYear:
    """One year of drawdown, in whole pounds.

    Remaining balances are after the year's withdrawals and growth.
    """

    age: int
    pension_drawn: float
    isa_drawn: float
    gia_drawn: float
    cash_drawn: float
    net_income: float
    tax_paid: float
    pension_remaining: float
    isa_remaining: float
    gia_remaining: float
    cash_remaining: float


@dataclass(frozen=True)
class DrawdownPlan:
    """A drawdown projection with lifetime totals.

    Attributes:
        years: One entry per age from the start age to the end age.
        total_tax_paid: Income tax and CGT over the whole plan.
        total_net_income: Withdrawals plus state pension, after tax.
        exhaustion_age: First age at which every pot is empty while
            spending still needs funding, or None.
    """

    strategy: DrawdownStrategy
    years: list[DrawdownYear] = field(default_factory=list)
    total_tax_paid: float = 0.0
    total_net_income: float = 0.0
    exhaustion_age: int | None = None


@dataclass(frozen=True)
class DrawdownComparison:
    """Lifetime tax under each strategy."""

    optimal_tax_paid: float
    proportional_tax_paid: float

    @property
    def tax_saving(self) -> float:
        return self.proportional_tax_paid - self.optimal_tax_paid


def gia_withdrawal_tax(
    amount: float,
    other_income: float = 0.0,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """CGT on a GIA withdrawal, assuming half of it is gain.

    The annual exempt amount is used before tax. The rate is the basic CGT
    rate while ``other_income`` stays inside the basic-rate band.
    """
    if amount <= 0:
        return 0.0
    rules = resolve_rules(rules)
    taxable_gain = max(0.0, amount * GIA_GAIN_FRACTION - rules.capital_gains.annual_exempt_amount)
    return taxable_gain * cgt_rate(other_income, rules=rules)


def generate_drawdown_plan(
    pots: DrawdownPots,
    annual_need: float,
    state_pension_annual: float,
    state_pension_start_age: int,
    start_age: int,
    end_age: int = DEFAULT_DRAWDOWN_END_AGE,
    growth_rate: float = DEFAULT_DRAWDOWN_GROWTH,
    strategy: DrawdownStrategy = "tax_optimal",
    *,
    rules: TaxRuleTable | None = None,
) -> DrawdownPlan:
    """Project withdrawals from ``start_age`` to ``end_age`` inclusive.

    Each year the state pension (once started) covers part of
    ``annual_need`` and the pots fund the rest. Withdrawals are made before
    growth; pension, ISA and GIA balances then grow at ``growth_rate`` while
    cash does not. Balances never go below zero.

    Args:
        pots: Opening balances.
        annual_need: Net spending to fund each year.
        state_pension_annual: Annual state pension, taxable income.
        state_pension_start_age: Age the state pension starts.
        start_age: First drawdown age, usually the pension access age.
        end_age: Last projected age.
        growth_rate: Annual growth of invested pots.
        strategy: ``"tax_optimal"`` or ``"proportional"``.
        rules: Tax rule table; the default tax year when omitted.

    Raises:
        ValueError: If ``strategy`` is not recognised.
    """
    if strategy not in ("tax_optimal", "proportional"):
        raise ValueError(f"Unknown drawdown strategy {strategy!r}")
    rules = resolve_rules(rules)
    pension, isa, gia, cash = pots.pension, pots.isa, pots.gia, pots.cash

    years: list[DrawdownYear] = []
    total_tax = 0.0
    total_net = 0.0
    exhaustion_age: int | None = None

    for age in range(start_age, end_age + 1):
        state_pension = state_pension_annual if age >= state_pension_start_age else 0.0
        net_need = max(0.0, annual_need - state_pension)
        pension_drawn = isa_drawn = gia_drawn = cash_drawn = tax = 0.0

        if strategy == "tax_optimal":
            remaining = net_need
            if remaining > 0 and gia > 0:
                gia_drawn = min(remaining, gia)
                gia_tax = gia_withdrawal_tax(gia_drawn, state_pension, rules=rules)
                gia -= gia_drawn
                tax += gia_tax
                remaining = max(0.0, remaining - (gia_drawn - gia_tax))
            if remaining > 0 and isa > 0:
                isa_drawn = min(remaining, isa)
                isa -= isa_drawn
                remaining -= isa_drawn
            if remaining > 0 and cash > 0:
                cash_drawn = min(remaining, cash)
                cash -= cash_drawn
                remaining -= cash_drawn
            if remaining > 0 and pension > 0:
                pension_drawn = min(
                    gross_pension_withdrawal(remaining, state_pension, rules=rules), pension
                )
                pension -= pension_drawn
                tax += pension_withdrawal_tax(pension_drawn, state_pension, rules=rules)
        else:
            available = pension + isa + gia + cash
            if available > 0 and net_need > 0:
                ratio = min(1.0, net_need / available)
                pension_drawn = pension * ratio
                isa_drawn = isa * ratio
                gia_drawn = gia * ratio
                cash_drawn = cash * ratio
                pension -= pension_drawn
                isa -= isa_drawn
                gia -= gia_drawn
                cash -= cash_drawn
                tax = pension_withdrawal_tax(
                    pension_drawn, state_pension, rules=rules
                ) + gia_withdrawal_tax(gia_drawn, state_pension, rules=rules)

        drawn = pension_drawn + isa_drawn + gia_drawn + cash_drawn
        net_income = drawn + state_pension - tax

        if exhaustion_age is None and pension + isa + gia + cash <= 0 and net_need > 0:
            exhaustion_age = age
            logger.debug("Drawdown pots exhausted at age %d (%s)", age, strategy)

        growth = 1.0 + growth_rate
        pension = max(0.0, pension) * growth
        isa = max(0.0, isa) * growth
        gia = max(0.0, gia) * growth
        cash = max(0.0, cash)

        total_tax += tax
        total_net += net_income
        years.append(
            DrawdownYear(
                age=age,
                pension_drawn=float(round(pension_drawn)),
                isa_drawn=float(round(isa_drawn)),
                gia_drawn=float(round(gia_drawn)),
                cash_drawn=float(round(cash_drawn)),
                net_income=float(round(net_income)),
                tax_paid=float(round(tax)),
                pension_remaining=float(round(pension)),
                isa_remaining=float(round(isa)),
                gia_remaining=float(round(gia)),
                cash_remaining=float(round(cash)),
            )
        )

    return DrawdownPlan(
        strategy=strategy,
        years=years,
        total_tax_paid=float(round(total_tax)),
        total_net_income=float(round(total_net)),
        exhaustion_age=exhaustion_age,
    )


def compare_drawdown_strategies(
    pots: DrawdownPots,
    annual_need: float,
    state_pension_annual: float,
    state_pension_start_age: int,
    start_age: int,
    end_age: int = DEFAULT_DRAWDOWN_END_AGE,
    growth_rate: float = DEFAULT_DRAWDOWN_GROWTH,
    *,
    rules: TaxRuleTable | None = None,
) -> DrawdownComparison:
    """Lifetime tax of the tax-optimal plan against the proportional one."""
    args = (pots, annual_need, state_pension_annual, state_pension_start_age, start_age)
    optimal = generate_drawdown_plan(
        *args, end_age, growth_rate, "tax_optimal", rules=rules
    )
    proportional = generate_drawdown_plan(
        *args, end_age, growth_rate, "proportional", rules=rules
    )
    return DrawdownComparison(
        optimal_tax_paid=optimal.total_tax_paid,
        proportional_tax_paid=proportional.total_tax_paid,
    )
