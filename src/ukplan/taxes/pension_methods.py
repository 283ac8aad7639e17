"""Salary sacrifice, net pay and relief at source contribution methods."""

from __future__ import annotations

from typing import Literal

from ukplan.taxes.base import PensionMethod
from ukplan.taxes.rules import TaxRuleTable

PensionMethodName = Literal["salary_sacrifice", "net_pay", "relief_at_source"]


class SalarySacrifice:
    """Contractual salary is reduced; lower pay for tax, NI and student loan."""

    name = "salary_sacrifice"

    def adjusted_gross_for_tax(self, gross_salary: float, contribution: float) -> float:
        return gross_salary - contribution

    def adjusted_gross_for_ni(self, gross_salary: float, contribution: float) -> float:
        return gross_salary - contribution

    def basic_band_extension(self, contribution: float, rules: TaxRuleTable) -> float:
        return 0.0

    def student_loan_income(self, gross_salary: float, contribution: float) -> float:
        return gross_salary - contribution

    def take_home(
        self,
        gross_salary: float,
        contribution: float,
        income_tax: float,
        ni: float,
    ) -> float:
        # tax and NI were already assessed on the reduced salary
        return (gross_salary - contribution) - income_tax - ni


class NetPay:
    """Deducted before income tax, but NI is charged on full gross."""

    name = "net_pay"

    def adjusted_gross_for_tax(self, gross_salary: float, contribution: float) -> float:
        return gross_salary - contribution

    def adjusted_gross_for_ni(self, gross_salary: float, contribution: float) -> float:
        return gross_salary

    def basic_band_extension(self, contribution: float, rules: TaxRuleTable) -> float:
        return 0.0

    def student_loan_income(self, gross_salary: float, contribution: float) -> float:
        return gross_salary

    def take_home(
        self,
        gross_salary: float,
        contribution: float,
        income_tax: float,
        ni: float,
    ) -> float:
        return gross_salary - contribution - income_tax - ni


class ReliefAtSource:
    """Paid from net pay; basic-rate relief is modelled as a wider basic band."""

    name = "relief_at_source"

    def adjusted_gross_for_tax(self, gross_salary: float, contribution: float) -> float:
        return gross_salary

    def adjusted_gross_for_ni(self, gross_salary: float, contribution: float) -> float:
        return gross_salary

    def basic_band_extension(self, contribution: float, rules: TaxRuleTable) -> float:
        if contribution <= 0:
            return 0.0
        return contribution / (1.0 - rules.income_tax.basic_rate)

    def student_loan_income(self, gross_salary: float, contribution: float) -> float:
        return gross_salary

    def take_home(
        self,
        gross_salary: float,
        contribution: float,
        income_tax: float,
        ni: float,
    ) -> float:
        return gross_salary - income_tax - ni - contribution


PENSION_METHODS: dict[str, PensionMethod] = {
    "salary_sacrifice": SalarySacrifice(),
    "net_pay": NetPay(),
    "relief_at_source": ReliefAtSource(),
}


def get_pension_method(name: str) -> PensionMethod:
    """Look up the handler for a contribution method name.

    Raises:
        KeyError: If ``name`` is not a known method. Snapshot validation
            restricts method names, so this only fires on direct calls.
    """
    return PENSION_METHODS[name]
