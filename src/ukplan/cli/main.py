"""CLI entry point for ukplan."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

import click

from ukplan.analytics.drawdown import (
    DEFAULT_DRAWDOWN_END_AGE,
    DEFAULT_DRAWDOWN_GROWTH,
    DrawdownPots,
    DrawdownStrategy,
    generate_drawdown_plan,
)
from ukplan.analytics.retirement import household_state_pension, mid_scenario_rate
from ukplan.analytics.scenarios import run_scenarios
from ukplan.config.defaults import default_household
from ukplan.config.schema import Household, PersonIncome
from ukplan.core.engine import DEFAULT_END_AGE, generate_lifetime_cash_flow
from ukplan.io.serialize import dump_cash_flow_csv, dump_results_summary, load_household
from ukplan.taxes.income import (
    income_tax,
    national_insurance,
    take_home_pay_with_student_loan,
)
from ukplan.taxes.pension_methods import PENSION_METHODS
from ukplan.taxes.rules import DEFAULT_TAX_YEAR, TaxRuleTable, load_tax_rules
from ukplan.utils.exceptions import ConfigError, SimulationError

_STUDENT_LOAN_PLANS = ["none", "plan1", "plan2", "plan4", "plan5", "postgrad"]

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to household JSON. Uses the example household if not provided.",
)
_tax_year_option = click.option(
    "--tax-year", default=DEFAULT_TAX_YEAR, show_default=True, help="Tax year, e.g. 2024/25."
)
_as_of_option = click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Anchor date for ages (YYYY-MM-DD). Defaults to today.",
)


def _load_rules(tax_year: str) -> TaxRuleTable:
    try:
        return load_tax_rules(tax_year)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _load_household(config_path: Path | None) -> Household:
    if config_path is None:
        return default_household()
    try:
        return load_household(config_path.read_text())
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.version_option(package_name="ukplan")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """ukplan: UK household tax and lifetime cash-flow planner."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s"
        )


@cli.command()
@click.option("--salary", type=float, required=True, help="Annual gross salary.")
@click.option("--pension", type=float, default=0.0, help="Annual employee pension contribution.")
@click.option(
    "--method",
    type=click.Choice(sorted(PENSION_METHODS)),
    default="salary_sacrifice",
    show_default=True,
    help="Pension contribution method.",
)
@click.option(
    "--student-loan",
    "plan",
    type=click.Choice(_STUDENT_LOAN_PLANS),
    default="none",
    show_default=True,
)
@_tax_year_option
def tax(salary: float, pension: float, method: str, plan: str, tax_year: str) -> None:
    """Show income tax, NI and take-home pay for a salary."""
    if salary < 0 or pension < 0 or pension > salary:
        raise click.BadParameter("need 0 <= pension <= salary")
    rules = _load_rules(tax_year)

    income = PersonIncome(
        person_id="cli",
        gross_salary=salary,
        employee_pension_contribution=pension,
        pension_contribution_method=method,  # type: ignore[arg-type]
    )
    tax_result = income_tax(salary, pension, method, rules=rules)
    ni_result = national_insurance(salary, pension, method, rules=rules)
    pay = take_home_pay_with_student_loan(income, plan, rules=rules)

    click.echo(f"Tax year {rules.tax_year}, {method.replace('_', ' ')}")
    click.echo(f"Gross salary:        £{pay.gross:,.2f}")
    click.echo(f"Adjusted gross:      £{pay.adjusted_gross:,.2f}")
    click.echo("\nIncome tax:")
    for band in tax_result.breakdown:
        click.echo(
            f"  {band.band:<20} {band.rate:>4.0%}  on £{band.taxable_amount:>12,.2f}"
            f"  = £{band.tax:,.2f}"
        )
    click.echo(f"  Total: £{tax_result.tax:,.2f} ({tax_result.effective_rate:.2%} effective)")
    click.echo("\nNational Insurance:")
    for ni_band in ni_result.breakdown:
        click.echo(
            f"  {ni_band.band:<42} {ni_band.rate:>3.0%}  on £{ni_band.earnings:>12,.2f}"
            f"  = £{ni_band.ni:,.2f}"
        )
    click.echo(f"  Total: £{ni_result.ni:,.2f}")
    if plan != "none":
        click.echo(f"\nStudent loan ({plan}): £{pay.student_loan:,.2f}")
    click.echo(f"\nTake-home pay:       £{pay.take_home:,.2f}")
    click.echo(f"Monthly take-home:   £{pay.monthly_take_home:,.2f}")


@cli.command()
@_config_option
@click.option("--growth", type=float, default=None, help="Annual growth rate, e.g. 0.05.")
@click.option("--end-age", type=int, default=DEFAULT_END_AGE, show_default=True)
@_as_of_option
@_tax_year_option
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to write the results summary JSON.",
)
@click.option(
    "--csv",
    "csv_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to write the yearly series as CSV.",
)
def cashflow(
    config_path: Path | None,
    growth: float | None,
    end_age: int,
    as_of: dt.datetime | None,
    tax_year: str,
    output_path: Path | None,
    csv_path: Path | None,
) -> None:
    """Project the household's lifetime cash flow."""
    household = _load_household(config_path)
    rules = _load_rules(tax_year)
    if growth is None:
        growth = mid_scenario_rate(household.retirement.scenario_rates)

    try:
        result = generate_lifetime_cash_flow(
            household,
            growth,
            end_age,
            rules=rules,
            as_of=as_of.date() if as_of else None,
        )
    except SimulationError as exc:
        raise click.ClickException(str(exc)) from exc
    if not result.data:
        click.echo("No persons in household; nothing to project.")
        return

    click.echo(f"Lifetime cash flow for {result.primary_person_name} at {growth:.1%} growth")
    click.echo(
        f"{'Age':>4} {'Year':>5} {'Employment':>11} {'Pension':>10} {'State':>9}"
        f" {'Invest':>10} {'Spending':>10} {'Surplus':>10}"
    )
    for row in result.data:
        click.echo(
            f"{row.age:>4} {row.calendar_year:>5} {row.employment_income:>11,.0f}"
            f" {row.pension_income:>10,.0f} {row.state_pension_income:>9,.0f}"
            f" {row.investment_income:>10,.0f} {row.total_expenditure:>10,.0f}"
            f" {row.surplus:>10,.0f}"
        )
    if result.events:
        click.echo("\nEvents:")
        for event in result.events:
            click.echo(f"  {event.age}: {event.label}")

    if output_path is not None:
        output_path.write_text(dump_results_summary(result))
        click.echo(f"\nResults written to {output_path}")
    if csv_path is not None:
        csv_path.write_text(dump_cash_flow_csv(result))
        click.echo(f"Series written to {csv_path}")


@cli.command()
@_config_option
@click.option(
    "--rate",
    "rates",
    type=float,
    multiple=True,
    help="Growth rate to evaluate (repeatable). Defaults to the household's scenario rates.",
)
@click.option("--end-age", type=int, default=DEFAULT_END_AGE, show_default=True)
@_as_of_option
@_tax_year_option
@click.option("--workers", type=int, default=1, show_default=True, help="Parallel workers.")
def scenarios(
    config_path: Path | None,
    rates: tuple[float, ...],
    end_age: int,
    as_of: dt.datetime | None,
    tax_year: str,
    workers: int,
) -> None:
    """Compare the lifetime projection across growth rates."""
    household = _load_household(config_path)
    rules = _load_rules(tax_year)
    try:
        summaries = run_scenarios(
            household,
            list(rates) or None,
            end_age,
            rules=rules,
            as_of=as_of.date() if as_of else None,
            max_workers=workers,
        )
    except SimulationError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"{'Growth':>7} {'Shortfall from':>15} {'Shortfall yrs':>14} {'Total surplus':>15}")
    for s in summaries:
        shortfall_age = str(s.first_shortfall_age) if s.first_shortfall_age is not None else "-"
        click.echo(
            f"{s.growth_rate:>7.1%} {shortfall_age:>15} {s.shortfall_years:>14}"
            f" {s.total_surplus:>15,.0f}"
        )


@cli.command()
@_config_option
@click.option(
    "--growth",
    type=float,
    default=DEFAULT_DRAWDOWN_GROWTH,
    show_default=True,
    help="Annual growth of invested pots.",
)
@click.option("--end-age", type=int, default=DEFAULT_DRAWDOWN_END_AGE, show_default=True)
@_tax_year_option
def drawdown(config_path: Path | None, growth: float, end_age: int, tax_year: str) -> None:
    """Compare tax-optimal and proportional drawdown of the household's pots."""
    household = _load_household(config_path)
    rules = _load_rules(tax_year)
    person = household.primary_person()
    if person is None:
        raise click.ClickException("Household has no persons to draw down for")

    pots = DrawdownPots.from_household(household)
    state_pension = household_state_pension(household, rules=rules)
    click.echo(f"{'Strategy':<12} {'Tax paid':>12} {'Net income':>14} {'Exhausted':>10}")
    strategies: tuple[DrawdownStrategy, ...] = ("tax_optimal", "proportional")
    for strategy in strategies:
        plan = generate_drawdown_plan(
            pots,
            household.retirement.target_annual_income,
            state_pension,
            person.state_retirement_age,
            person.pension_access_age,
            end_age,
            growth,
            strategy,
            rules=rules,
        )
        exhausted = str(plan.exhaustion_age) if plan.exhaustion_age is not None else "-"
        click.echo(
            f"{strategy:<12} {plan.total_tax_paid:>12,.0f} {plan.total_net_income:>14,.0f}"
            f" {exhausted:>10}"
        )


if __name__ == "__main__":
    cli()
