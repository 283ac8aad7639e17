"""UK income tax, National Insurance, student loan and take-home pay."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ukplan.config.schema import PersonIncome
from ukplan.taxes.pension_methods import get_pension_method
from ukplan.taxes.rules import TaxRuleTable, resolve_rules
from ukplan.utils.money import round_pence


@dataclass(frozen=True)
class TaxBand:
    """Income tax charged in one band."""

    band: str
    rate: float
    taxable_amount: float
    tax: float


@dataclass(frozen=True)
class IncomeTaxResult:
    """Income tax liability with its per-band breakdown."""

    tax: float
    effective_rate: float
    breakdown: list[TaxBand] = field(default_factory=list)


@dataclass(frozen=True)
class NIBand:
    """National Insurance charged on one earnings band."""

    band: str
    rate: float
    earnings: float
    ni: float


@dataclass(frozen=True)
class NIResult:
    """Class 1 employee NI with its per-band breakdown."""

    ni: float
    breakdown: list[NIBand] = field(default_factory=list)


@dataclass(frozen=True)
class TakeHomeResult:
    """Annual pay packet from gross to net."""

    gross: float
    adjusted_gross: float
    income_tax: float
    ni: float
    student_loan: float
    pension_deduction: float
    take_home: float
    monthly_take_home: float


def personal_allowance(adjusted_gross: float, *, rules: TaxRuleTable | None = None) -> float:
    """Personal allowance after the high-income taper.

    £1 of allowance is lost for every £2 (at a 50% taper rate) of adjusted
    income above the taper threshold, down to zero.
    """
    it = resolve_rules(rules).income_tax
    if adjusted_gross <= it.taper_threshold:
        return it.personal_allowance
    reduction = int((adjusted_gross - it.taper_threshold) * it.taper_rate)
    return max(0.0, it.personal_allowance - reduction)


def _band_widths(rules: TaxRuleTable, extension: float) -> tuple[float, float]:
    """Basic and higher band widths in taxable-income terms.

    The basic limit is stated on gross income with the full personal
    allowance; the additional-rate threshold is stated on taxable income.
    Widths are therefore fixed regardless of taper. A basic-band extension
    moves both rate thresholds up by the same amount.
    """
    it = rules.income_tax
    standard_basic_width = it.basic_rate_upper_limit - it.personal_allowance
    basic_width = standard_basic_width + extension
    higher_width = it.higher_rate_upper_limit - standard_basic_width
    return basic_width, higher_width


def income_tax(
    gross_salary: float,
    pension_contribution: float = 0.0,
    method: str = "salary_sacrifice",
    *,
    rules: TaxRuleTable | None = None,
) -> IncomeTaxResult:
    """Compute income tax on employment income.

    Args:
        gross_salary: Annual gross pay.
        pension_contribution: Annual employee pension contribution.
        method: ``"salary_sacrifice"``, ``"net_pay"`` or ``"relief_at_source"``.
        rules: Tax rule table; the default tax year when omitted.

    Returns:
        IncomeTaxResult with the penny-rounded tax, effective rate on
        adjusted gross, and a breakdown by band.
    """
    rules = resolve_rules(rules)
    handler = get_pension_method(method)
    it = rules.income_tax

    adjusted_gross = handler.adjusted_gross_for_tax(gross_salary, pension_contribution)
    allowance = personal_allowance(adjusted_gross, rules=rules)
    extension = handler.basic_band_extension(pension_contribution, rules)
    basic_width, higher_width = _band_widths(rules, extension)

    breakdown = [
        TaxBand(
            band="Personal Allowance",
            rate=0.0,
            taxable_amount=max(0.0, min(adjusted_gross, allowance)),
            tax=0.0,
        )
    ]
    remaining = max(0.0, adjusted_gross - allowance)
    if remaining <= 0:
        return IncomeTaxResult(tax=0.0, effective_rate=0.0, breakdown=breakdown)

    total_tax = 0.0
    bands = [
        ("Basic Rate", it.basic_rate, basic_width),
        ("Higher Rate", it.higher_rate, higher_width),
        ("Additional Rate", it.additional_rate, float("inf")),
    ]
    for name, rate, width in bands:
        taxable = min(remaining, max(0.0, width))
        if taxable <= 0:
            continue
        band_tax = round_pence(taxable * rate)
        breakdown.append(TaxBand(band=name, rate=rate, taxable_amount=taxable, tax=band_tax))
        total_tax += band_tax
        remaining -= taxable

    effective_rate = total_tax / adjusted_gross if adjusted_gross > 0 else 0.0
    return IncomeTaxResult(
        tax=round_pence(total_tax),
        effective_rate=round(effective_rate, 4),
        breakdown=breakdown,
    )


def marginal_rate(
    adjusted_gross: float,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Marginal income tax rate at a given adjusted gross income.

    Inside the personal allowance taper the rate includes the allowance
    withdrawal, e.g. 60% at a 40% higher rate and 50% taper.
    """
    rules = resolve_rules(rules)
    it = rules.income_tax
    allowance = personal_allowance(adjusted_gross, rules=rules)
    taxable = adjusted_gross - allowance
    if taxable <= 0:
        return 0.0
    basic_width, higher_width = _band_widths(rules, 0.0)
    if taxable <= basic_width:
        rate = it.basic_rate
    elif taxable <= basic_width + higher_width:
        rate = it.higher_rate
    else:
        rate = it.additional_rate
    if adjusted_gross > it.taper_threshold and allowance > 0:
        rate *= 1.0 + it.taper_rate
    return rate


def national_insurance(
    gross_salary: float,
    pension_contribution: float = 0.0,
    method: str = "salary_sacrifice",
    *,
    rules: TaxRuleTable | None = None,
) -> NIResult:
    """Compute Class 1 employee National Insurance.

    Only salary sacrifice reduces NI-able earnings.
    """
    rules = resolve_rules(rules)
    handler = get_pension_method(method)
    nic = rules.national_insurance
    earnings = max(0.0, handler.adjusted_gross_for_ni(gross_salary, pension_contribution))

    breakdown = [
        NIBand(
            band="Below Primary Threshold",
            rate=0.0,
            earnings=min(earnings, nic.primary_threshold),
            ni=0.0,
        )
    ]
    total = 0.0

    main_earnings = max(0.0, min(earnings, nic.upper_earnings_limit) - nic.primary_threshold)
    if main_earnings > 0:
        main_ni = main_earnings * nic.main_rate
        breakdown.append(
            NIBand(
                band="Primary Threshold to Upper Earnings Limit",
                rate=nic.main_rate,
                earnings=main_earnings,
                ni=round_pence(main_ni),
            )
        )
        total += main_ni

    upper_earnings = max(0.0, earnings - nic.upper_earnings_limit)
    if upper_earnings > 0:
        upper_ni = upper_earnings * nic.reduced_rate
        breakdown.append(
            NIBand(
                band="Above Upper Earnings Limit",
                rate=nic.reduced_rate,
                earnings=upper_earnings,
                ni=round_pence(upper_ni),
            )
        )
        total += upper_ni

    return NIResult(ni=round_pence(total), breakdown=breakdown)


def student_loan(
    gross_salary: float,
    plan: str,
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """Annual student loan repayment: rate on income above the plan threshold."""
    rule = resolve_rules(rules).student_loan_rule(plan)
    if rule is None:
        return 0.0
    return round_pence(max(0.0, gross_salary - rule.threshold) * rule.rate)


def take_home_pay(income: PersonIncome, *, rules: TaxRuleTable | None = None) -> TakeHomeResult:
    """Take-home pay for an income profile, excluding student loan."""
    rules = resolve_rules(rules)
    method = income.pension_contribution_method
    handler = get_pension_method(method)
    gross = income.gross_salary
    contribution = income.employee_pension_contribution

    tax = income_tax(gross, contribution, method, rules=rules).tax
    ni = national_insurance(gross, contribution, method, rules=rules).ni
    take_home = handler.take_home(gross, contribution, tax, ni)

    return TakeHomeResult(
        gross=gross,
        adjusted_gross=handler.adjusted_gross_for_tax(gross, contribution),
        income_tax=tax,
        ni=ni,
        student_loan=0.0,
        pension_deduction=contribution,
        take_home=round_pence(take_home),
        monthly_take_home=round_pence(take_home / 12),
    )


def take_home_pay_with_student_loan(
    income: PersonIncome,
    plan: str,
    *,
    rules: TaxRuleTable | None = None,
) -> TakeHomeResult:
    """Take-home pay with the person's student loan repayment deducted.

    The loan is assessed on pay after salary sacrifice, and on full gross
    for the other contribution methods.
    """
    rules = resolve_rules(rules)
    base = take_home_pay(income, rules=rules)
    handler = get_pension_method(income.pension_contribution_method)
    assessed = handler.student_loan_income(
        income.gross_salary, income.employee_pension_contribution
    )
    repayment = student_loan(assessed, plan, rules=rules)
    take_home = base.take_home - repayment
    return replace(
        base,
        student_loan=repayment,
        take_home=round_pence(take_home),
        monthly_take_home=round_pence(take_home / 12),
    )
