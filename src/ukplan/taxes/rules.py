"""Versioned UK tax rule tables, one immutable table per tax year."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ukplan.io.yaml_loader import load_table_yaml
from ukplan.utils.exceptions import ConfigError

DEFAULT_TAX_YEAR = "2024/25"

StudentLoanPlan = Literal["plan1", "plan2", "plan4", "plan5", "postgrad", "none"]

_Rate = Field(ge=0, le=1)


class IncomeTaxRules(BaseModel):
    """Personal allowance, taper and income tax bands."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    personal_allowance: float = Field(gt=0)
    taper_threshold: float = Field(gt=0)
    taper_rate: float = _Rate
    basic_rate: float = _Rate
    basic_rate_upper_limit: float = Field(gt=0)
    higher_rate: float = _Rate
    higher_rate_upper_limit: float = Field(gt=0)
    additional_rate: float = _Rate

    @model_validator(mode="after")
    def _validate_bands(self) -> IncomeTaxRules:
        ordered = (
            self.personal_allowance < self.basic_rate_upper_limit < self.higher_rate_upper_limit
        )
        if not ordered:
            raise ValueError(
                "income tax thresholds must be strictly ordered: "
                "personal_allowance < basic_rate_upper_limit < higher_rate_upper_limit"
            )
        if not self.basic_rate < self.higher_rate < self.additional_rate:
            raise ValueError("income tax rates must increase band by band")
        return self


class NationalInsuranceRules(BaseModel):
    """Class 1 employee National Insurance."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    primary_threshold: float = Field(gt=0)
    upper_earnings_limit: float = Field(gt=0)
    main_rate: float = _Rate
    reduced_rate: float = _Rate

    @model_validator(mode="after")
    def _validate_thresholds(self) -> NationalInsuranceRules:
        if self.primary_threshold >= self.upper_earnings_limit:
            raise ValueError("primary_threshold must be below upper_earnings_limit")
        return self


class StudentLoanRule(BaseModel):
    """Repayment threshold and rate for one student loan plan."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    threshold: float = Field(gt=0)
    rate: float = _Rate


class CapitalGainsRules(BaseModel):
    """CGT annual exempt amount and rates."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    annual_exempt_amount: float = Field(ge=0)
    basic_rate: float = _Rate
    higher_rate: float = _Rate


class PensionRules(BaseModel):
    """Pension annual allowance and high-income taper."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    annual_allowance: float = Field(gt=0)
    taper_threshold_income: float = Field(gt=0)
    taper_adjusted_income_threshold: float = Field(gt=0)
    taper_rate: float = _Rate
    minimum_tapered_allowance: float = Field(ge=0)

    @model_validator(mode="after")
    def _validate_taper(self) -> PensionRules:
        if self.minimum_tapered_allowance >= self.annual_allowance:
            raise ValueError("minimum_tapered_allowance must be below annual_allowance")
        if self.taper_threshold_income >= self.taper_adjusted_income_threshold:
            raise ValueError(
                "taper_threshold_income must be below taper_adjusted_income_threshold"
            )
        return self


class StatePensionRules(BaseModel):
    """New state pension amount and qualifying-year rules."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    full_annual_amount: float = Field(gt=0)
    qualifying_years_required: int = Field(gt=0)
    minimum_qualifying_years: int = Field(ge=0)

    @model_validator(mode="after")
    def _validate_years(self) -> StatePensionRules:
        if self.minimum_qualifying_years >= self.qualifying_years_required:
            raise ValueError("minimum_qualifying_years must be below qualifying_years_required")
        return self


class TaxRuleTable(BaseModel):
    """Complete set of rates, thresholds and allowances for one tax year.

    Instances are frozen and safe to share between any number of
    concurrent calculations.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    tax_year: str = Field(pattern=r"^\d{4}/\d{2}$")
    income_tax: IncomeTaxRules
    national_insurance: NationalInsuranceRules
    student_loan: dict[str, StudentLoanRule]
    capital_gains: CapitalGainsRules
    isa_allowance: float = Field(gt=0)
    pension: PensionRules
    state_pension: StatePensionRules

    def student_loan_rule(self, plan: str) -> StudentLoanRule | None:
        """Return the rule for a plan, or None for ``"none"`` / unknown plans."""
        if plan == "none":
            return None
        return self.student_loan.get(plan)

    @property
    def start_year(self) -> int:
        """Calendar year in which the tax year starts (6 April)."""
        return int(self.tax_year.split("/")[0])


@lru_cache(maxsize=None)
def load_tax_rules(tax_year: str = DEFAULT_TAX_YEAR) -> TaxRuleTable:
    """Load and validate the rule table for ``tax_year`` (e.g. ``"2024/25"``).

    Raises:
        ConfigError: If no table ships for the year or the table is invalid.
    """
    data = load_table_yaml(tax_year)
    try:
        table = TaxRuleTable.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid tax rule table for {tax_year}: {exc}") from exc
    if table.tax_year != tax_year:
        raise ConfigError(f"Table for {tax_year} declares tax year {table.tax_year}")
    return table


def resolve_rules(rules: TaxRuleTable | None) -> TaxRuleTable:
    """Return ``rules`` or the default tax year's table when None."""
    return rules if rules is not None else load_tax_rules(DEFAULT_TAX_YEAR)
