"""Income tax on pension withdrawals under the 25% tax-free lump sum rule."""

from __future__ import annotations

from ukplan.taxes.income import income_tax
from ukplan.taxes.rules import TaxRuleTable, resolve_rules

PENSION_TAX_FREE_FRACTION = 0.25

_MAX_ITERATIONS = 50
_TOLERANCE = 1.0


def pension_withdrawal_tax(
    gross: float,
    other_income: float = 0.0,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Income tax due on a gross pension withdrawal.

    A quarter of every withdrawal is tax free. The rest is taxed as income
    on top of ``other_income``, so the result is the extra tax the
    withdrawal causes rather than the total liability.

    Args:
        gross: Amount taken from the pension pot.
        other_income: Other taxable income in the same year, e.g. the
            state pension.
        rules: Tax rule table; the default tax year when omitted.
    """
    if gross <= 0:
        return 0.0
    rules = resolve_rules(rules)
    taxable = gross * (1.0 - PENSION_TAX_FREE_FRACTION)
    base_tax = income_tax(other_income, rules=rules).tax if other_income > 0 else 0.0
    return income_tax(other_income + taxable, rules=rules).tax - base_tax


def net_pension_withdrawal(
    gross: float,
    other_income: float = 0.0,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Cash received from a gross pension withdrawal after income tax."""
    return gross - pension_withdrawal_tax(gross, other_income, rules=rules)


def gross_pension_withdrawal(
    target_net: float,
    other_income: float = 0.0,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Gross withdrawal needed to receive ``target_net`` after tax.

    Bisects between the net amount and twice it, which covers every
    marginal rate below 66.7% on the taxed three quarters. The result is
    rounded to whole pounds.
    """
    if target_net <= 0:
        return 0.0
    rules = resolve_rules(rules)
    lo, hi = target_net, target_net * 2.0
    for _ in range(_MAX_ITERATIONS):
        mid = (lo + hi) / 2.0
        net = net_pension_withdrawal(mid, other_income, rules=rules)
        if abs(net - target_net) < _TOLERANCE:
            return float(round(mid))
        if net < target_net:
            lo = mid
        else:
            hi = mid
    return float(round((lo + hi) / 2.0))
