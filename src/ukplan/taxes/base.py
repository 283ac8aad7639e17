"""Base protocol for pension contribution methods."""

from __future__ import annotations

from typing import Protocol

from ukplan.taxes.rules import TaxRuleTable


class PensionMethod(Protocol):
    """How an employee pension contribution interacts with tax and NI.

    One implementation exists per contribution method; the tax, NI and
    take-home calculations delegate every method-specific rule here.
    """

    name: str

    def adjusted_gross_for_tax(self, gross_salary: float, contribution: float) -> float:
        """Income assessed for income tax."""
        ...

    def adjusted_gross_for_ni(self, gross_salary: float, contribution: float) -> float:
        """Earnings assessed for National Insurance."""
        ...

    def basic_band_extension(self, contribution: float, rules: TaxRuleTable) -> float:
        """Amount by which the basic-rate band is extended."""
        ...

    def student_loan_income(self, gross_salary: float, contribution: float) -> float:
        """Income assessed for student loan repayment."""
        ...

    def take_home(
        self,
        gross_salary: float,
        contribution: float,
        income_tax: float,
        ni: float,
    ) -> float:
        """Annual net pay after tax, NI and the pension deduction."""
        ...
