"""Pydantic v2 models for the household snapshot.

These models are the validation boundary: negative amounts, unknown enum
values and malformed dates are rejected here, so the calculators and the
simulator can assume clean, non-negative inputs.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ukplan.taxes.pension_methods import PensionMethodName
from ukplan.taxes.rules import StudentLoanPlan

AccountType = Literal[
    "workplace_pension",
    "sipp",
    "stocks_and_shares_isa",
    "cash_isa",
    "lifetime_isa",
    "gia",
    "cash_savings",
    "premium_bonds",
]
TaxWrapper = Literal["pension", "isa", "gia", "cash", "premium_bonds"]
ContributionTarget = Literal["isa", "pension", "gia"]
ContributionFrequency = Literal["monthly", "annually"]
OutgoingFrequency = Literal["monthly", "termly", "annually"]
OutgoingCategory = Literal[
    "school_fees", "mortgage", "rent", "childcare", "insurance", "other"
]
TransactionType = Literal["buy", "sell", "dividend", "contribution"]

ACCOUNT_TAX_WRAPPERS: dict[str, TaxWrapper] = {
    "workplace_pension": "pension",
    "sipp": "pension",
    "stocks_and_shares_isa": "isa",
    "cash_isa": "isa",
    "lifetime_isa": "isa",
    "gia": "gia",
    "cash_savings": "cash",
    "premium_bonds": "premium_bonds",
}

OUTGOING_CATEGORY_LABELS: dict[str, str] = {
    "school_fees": "School Fees",
    "mortgage": "Mortgage",
    "rent": "Rent",
    "childcare": "Childcare",
    "insurance": "Insurance",
    "other": "Other",
}

_GrowthRate = Field(default=None, ge=-0.5, le=0.5)


def account_tax_wrapper(account_type: str) -> TaxWrapper:
    """Map an account type to its tax wrapper."""
    return ACCOUNT_TAX_WRAPPERS[account_type]


class Person(BaseModel):
    """A household member."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = ""
    relationship: Literal["self", "spouse"] = "self"
    date_of_birth: dt.date
    planned_retirement_age: int = Field(default=65, ge=18, le=120)
    pension_access_age: int = Field(default=57, ge=18, le=120)
    state_retirement_age: int = Field(default=67, ge=18, le=120)
    ni_qualifying_years: int = Field(default=0, ge=0, le=70)
    student_loan_plan: StudentLoanPlan = "none"


class PersonIncome(BaseModel):
    """Employment income profile for one person."""

    model_config = ConfigDict(extra="forbid")

    person_id: str
    gross_salary: float = Field(ge=0)
    employer_pension_contribution: float = Field(default=0.0, ge=0)
    employee_pension_contribution: float = Field(default=0.0, ge=0)
    pension_contribution_method: PensionMethodName = "salary_sacrifice"
    salary_growth_rate: float | None = _GrowthRate
    bonus_growth_rate: float | None = _GrowthRate

    @model_validator(mode="after")
    def _validate_contribution(self) -> PersonIncome:
        if self.employee_pension_contribution > self.gross_salary:
            raise ValueError("employee_pension_contribution must not exceed gross_salary")
        return self


class BonusStructure(BaseModel):
    """Annual bonus split into a cash portion and a deferred, vesting portion."""

    model_config = ConfigDict(extra="forbid")

    person_id: str
    total_bonus_annual: float = Field(default=0.0, ge=0)
    cash_bonus_annual: float = Field(default=0.0, ge=0)
    vesting_years: int = Field(default=3, ge=0, le=20)
    vesting_gap_years: int = Field(default=0, ge=0, le=20)
    estimated_annual_return: float = Field(default=0.0, ge=-0.5, le=0.5)

    @property
    def deferred_bonus_annual(self) -> float:
        """Deferred portion: total less cash, never negative."""
        return max(0.0, self.total_bonus_annual - self.cash_bonus_annual)


class Holding(BaseModel):
    """Units of one asset held in an account."""

    model_config = ConfigDict(extra="forbid")

    asset_id: str
    units: float = Field(ge=0)
    purchase_price: float = Field(default=0.0, ge=0, description="Average cost per unit")
    current_price: float = Field(ge=0)

    @property
    def current_value(self) -> float:
        return self.units * self.current_price


class Account(BaseModel):
    """A financial account owned by one person."""

    model_config = ConfigDict(extra="forbid")

    id: str
    person_id: str
    type: AccountType
    name: str = ""
    provider: str = ""
    current_value: float = Field(ge=0)
    holdings: list[Holding] = Field(default_factory=list)
    cost_basis: float | None = Field(
        default=None,
        ge=0,
        description="Account-level cost basis, used only without holdings or history",
    )

    @property
    def wrapper(self) -> TaxWrapper:
        return account_tax_wrapper(self.type)


class Transaction(BaseModel):
    """A buy, sell, dividend or contribution against one asset in one account."""

    model_config = ConfigDict(extra="forbid")

    id: str
    account_id: str
    asset_id: str
    type: TransactionType
    date: dt.date
    units: float = Field(ge=0)
    price_per_unit: float = Field(ge=0)

    @property
    def amount(self) -> float:
        return self.units * self.price_per_unit


class Contribution(BaseModel):
    """A discretionary, recurring contribution into a wrapper."""

    model_config = ConfigDict(extra="forbid")

    id: str = ""
    person_id: str
    label: str = ""
    target: ContributionTarget
    amount: float = Field(ge=0)
    frequency: ContributionFrequency = "monthly"


class CommittedOutgoing(BaseModel):
    """A committed, recurring household cost such as school fees or a mortgage."""

    model_config = ConfigDict(extra="forbid")

    id: str = ""
    category: OutgoingCategory = "other"
    label: str = ""
    amount: float = Field(ge=0, description="Per-occurrence amount")
    frequency: OutgoingFrequency = "monthly"
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    person_id: str | None = None
    inflation_rate: float | None = Field(default=None, ge=-0.5, le=1.0)

    @model_validator(mode="after")
    def _validate_dates(self) -> CommittedOutgoing:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @property
    def display_label(self) -> str:
        return self.label or OUTGOING_CATEGORY_LABELS[self.category]


class RetirementConfig(BaseModel):
    """Retirement target and scenario growth rates."""

    model_config = ConfigDict(extra="forbid")

    target_annual_income: float = Field(default=0.0, ge=0)
    withdrawal_rate: float = Field(default=0.04, ge=0, le=1)
    include_state_pension: bool = True
    scenario_rates: list[float] = Field(default_factory=lambda: [0.05, 0.07, 0.09])

    @model_validator(mode="after")
    def _validate_rates(self) -> RetirementConfig:
        for rate in self.scenario_rates:
            if not -0.5 <= rate <= 0.5:
                raise ValueError(f"scenario rate {rate} outside [-0.5, 0.5]")
        return self


class EmergencyFundConfig(BaseModel):
    """Essential and lifestyle spending assumptions."""

    model_config = ConfigDict(extra="forbid")

    monthly_essential_expenses: float = Field(default=0.0, ge=0)
    target_months: int = Field(default=6, ge=0, le=60)
    monthly_lifestyle_spending: float = Field(default=0.0, ge=0)
    lifestyle_inflation_rate: float | None = Field(default=None, ge=-0.5, le=1.0)


class Household(BaseModel):
    """Complete household snapshot consumed by the engine."""

    model_config = ConfigDict(extra="forbid")

    schema_version: int = Field(default=2, ge=1)
    persons: list[Person] = Field(default_factory=list)
    income: list[PersonIncome] = Field(default_factory=list)
    bonus_structures: list[BonusStructure] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    contributions: list[Contribution] = Field(default_factory=list)
    committed_outgoings: list[CommittedOutgoing] = Field(default_factory=list)
    retirement: RetirementConfig = Field(default_factory=RetirementConfig)
    emergency_fund: EmergencyFundConfig = Field(default_factory=EmergencyFundConfig)

    @model_validator(mode="after")
    def _validate_ids(self) -> Household:
        person_ids = [p.id for p in self.persons]
        if len(person_ids) != len(set(person_ids)):
            raise ValueError("person ids must be unique")
        account_ids = [a.id for a in self.accounts]
        if len(account_ids) != len(set(account_ids)):
            raise ValueError("account ids must be unique")
        return self

    def primary_person(self) -> Person | None:
        """The "self" person, falling back to the first listed person."""
        for person in self.persons:
            if person.relationship == "self":
                return person
        return self.persons[0] if self.persons else None

    def income_for(self, person_id: str) -> PersonIncome | None:
        return next((i for i in self.income if i.person_id == person_id), None)

    def bonus_for(self, person_id: str) -> BonusStructure | None:
        return next((b for b in self.bonus_structures if b.person_id == person_id), None)

    def accounts_for(self, person_id: str) -> list[Account]:
        return [a for a in self.accounts if a.person_id == person_id]

    def contributions_for(self, person_id: str) -> list[Contribution]:
        return [c for c in self.contributions if c.person_id == person_id]
