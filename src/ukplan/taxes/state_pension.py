"""New state pension entitlement from National Insurance qualifying years."""

from __future__ import annotations

from ukplan.taxes.rules import TaxRuleTable, resolve_rules
from ukplan.utils.money import round_pence


def pro_rata_state_pension(
    qualifying_years: int,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Annual state pension for a given number of qualifying years.

    Nothing below the minimum qualifying years, a proportional amount up to
    the required years, and the full rate from there on.
    """
    sp = resolve_rules(rules).state_pension
    if qualifying_years < sp.minimum_qualifying_years:
        return 0.0
    proportion = min(1.0, qualifying_years / sp.qualifying_years_required)
    return round_pence(proportion * sp.full_annual_amount)
