"""Tests for tax rule tables and household snapshot validation."""

from __future__ import annotations

import datetime as dt

import pytest
from pydantic import ValidationError

from ukplan.config.schema import (
    Account,
    BonusStructure,
    CommittedOutgoing,
    Household,
    Person,
    PersonIncome,
    RetirementConfig,
)
from ukplan.io.yaml_loader import available_tax_years, load_table_yaml
from ukplan.taxes.rules import TaxRuleTable, load_tax_rules, resolve_rules
from ukplan.utils.exceptions import ConfigError


class TestLoadTaxRules:
    def test_cached(self) -> None:
        assert load_tax_rules("2024/25") is load_tax_rules("2024/25")

    def test_default_year(self) -> None:
        assert resolve_rules(None).tax_year == "2024/25"

    def test_explicit_table_passes_through(self, rules_2025: TaxRuleTable) -> None:
        assert resolve_rules(rules_2025) is rules_2025

    def test_unknown_year(self) -> None:
        with pytest.raises(ConfigError, match="No tax rule table"):
            load_tax_rules("1999/00")

    def test_malformed_year(self) -> None:
        with pytest.raises(ConfigError):
            load_tax_rules("2024")

    def test_2024_values(self, rules_2024: TaxRuleTable) -> None:
        assert rules_2024.income_tax.personal_allowance == 12_570
        assert rules_2024.national_insurance.main_rate == 0.08
        assert rules_2024.capital_gains.annual_exempt_amount == 3_000
        assert rules_2024.isa_allowance == 20_000
        assert rules_2024.pension.annual_allowance == 60_000
        assert rules_2024.start_year == 2024

    def test_2025_student_loan_threshold(self, rules_2025: TaxRuleTable) -> None:
        rule = rules_2025.student_loan_rule("plan2")
        assert rule is not None
        assert rule.threshold == 28_470

    def test_no_student_loan(self, rules_2024: TaxRuleTable) -> None:
        assert rules_2024.student_loan_rule("none") is None

    def test_frozen(self, rules_2024: TaxRuleTable) -> None:
        with pytest.raises(ValidationError):
            rules_2024.isa_allowance = 1  # type: ignore[misc]

    def test_band_order_validated(self, rules_2024: TaxRuleTable) -> None:
        data = rules_2024.model_dump()
        data["income_tax"]["basic_rate_upper_limit"] = 200_000
        with pytest.raises(ValidationError, match="strictly ordered"):
            TaxRuleTable.model_validate(data)


def _person(**kwargs: object) -> Person:
    return Person(id="p1", date_of_birth=dt.date(1985, 1, 1), **kwargs)  # type: ignore[arg-type]


class TestHouseholdValidation:
    def test_negative_salary(self) -> None:
        with pytest.raises(ValidationError):
            PersonIncome(person_id="p1", gross_salary=-1)

    def test_employee_contribution_above_salary(self) -> None:
        with pytest.raises(ValidationError, match="must not exceed"):
            PersonIncome(person_id="p1", gross_salary=10_000, employee_pension_contribution=20_000)

    def test_unknown_account_type(self) -> None:
        with pytest.raises(ValidationError):
            Account(
                id="a1", person_id="p1", type="crypto", current_value=1  # type: ignore[arg-type]
            )

    def test_unknown_student_loan_plan(self) -> None:
        with pytest.raises(ValidationError):
            _person(student_loan_plan="plan9")

    def test_extra_field_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            _person(nickname="Al")

    def test_outgoing_dates(self) -> None:
        with pytest.raises(ValidationError, match="end_date"):
            CommittedOutgoing(
                amount=100, start_date=dt.date(2030, 1, 1), end_date=dt.date(2029, 1, 1)
            )

    def test_scenario_rate_range(self) -> None:
        with pytest.raises(ValidationError):
            RetirementConfig(scenario_rates=[0.05, 0.9])

    def test_duplicate_person_ids(self) -> None:
        with pytest.raises(ValidationError, match="unique"):
            Household(persons=[_person(), _person()])

    def test_duplicate_account_ids(self) -> None:
        account = Account(id="a1", person_id="p1", type="sipp", current_value=1)
        with pytest.raises(ValidationError, match="unique"):
            Household(accounts=[account, account])

    def test_deferred_bonus_never_negative(self) -> None:
        bonus = BonusStructure(person_id="p1", total_bonus_annual=10_000, cash_bonus_annual=15_000)
        assert bonus.deferred_bonus_annual == 0

    def test_primary_person(self) -> None:
        spouse = Person(id="p2", relationship="spouse", date_of_birth=dt.date(1990, 1, 1))
        household = Household(persons=[spouse, _person()])
        primary = household.primary_person()
        assert primary is not None
        assert primary.id == "p1"
        assert Household(persons=[spouse]).primary_person() == spouse
        assert Household().primary_person() is None

    def test_account_wrapper(self) -> None:
        account = Account(id="a", person_id="p", type="lifetime_isa", current_value=0)
        assert account.wrapper == "isa"


class TestTableFiles:
    def test_available_tax_years(self) -> None:
        assert available_tax_years() == ["2024/25", "2025/26"]

    def test_missing_table_lists_available(self) -> None:
        with pytest.raises(ConfigError, match="2024/25, 2025/26"):
            load_table_yaml("2030/31")

    def test_raw_table(self) -> None:
        assert load_table_yaml("2025/26")["tax_year"] == "2025/26"
