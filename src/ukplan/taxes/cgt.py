"""UK capital gains tax: rates, Section 104 pooling, gains and Bed & ISA."""

from __future__ import annotations

import datetime as dt
import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from ukplan.config.schema import Account, Transaction
from ukplan.taxes.pension_methods import get_pension_method
from ukplan.taxes.rules import TaxRuleTable, resolve_rules
from ukplan.utils.money import round_pence

_ACQUISITIONS = ("buy", "contribution")
_BED_AND_BREAKFAST_DAYS = 30
# (rule, min days after sale, max days after sale)
_MATCHING_WINDOWS = (
    ("same_day", 0, 0),
    ("bed_and_breakfast", 1, _BED_AND_BREAKFAST_DAYS),
)


@dataclass(frozen=True)
class Section104Pool:
    """Pooled holding of one asset in one account."""

    account_id: str
    asset_id: str
    total_units: float
    pooled_cost: float

    @property
    def average_cost(self) -> float:
        if self.total_units <= 0:
            return 0.0
        return round_pence(self.pooled_cost / self.total_units)


@dataclass(frozen=True)
class Disposal:
    """Part of a sale matched under one HMRC identification rule."""

    date: dt.date
    account_id: str
    asset_id: str
    units: float
    proceeds: float
    cost_basis: float
    gain: float
    rule: Literal["same_day", "bed_and_breakfast", "section_104"]


@dataclass(frozen=True)
class TaxYearGains:
    """Realised gains and CGT due for one tax year."""

    tax_year: str
    total_gains: float
    total_losses: float
    net_gain: float
    annual_exempt_amount: float
    taxable_gain: float
    tax_due: float
    disposals: list[Disposal] = field(default_factory=list)


@dataclass(frozen=True)
class UnrealisedGain:
    """Paper gain on a taxable holding."""

    identifier: str
    account_id: str
    asset_id: str | None
    gain: float
    cost_basis: float
    current_value: float


@dataclass(frozen=True)
class BedAndISAResult:
    """Economics of moving a GIA holding into an ISA."""

    sell_amount: float
    cgt_cost: float
    annual_tax_saved: float


def cgt_rate(
    gross_income: float,
    pension_contribution: float = 0.0,
    method: str = "salary_sacrifice",
    *,
    rules: TaxRuleTable | None = None,
) -> float:
    """CGT rate for a taxpayer: basic rate while taxable income is in the basic band."""
    rules = resolve_rules(rules)
    taxable = get_pension_method(method).adjusted_gross_for_tax(gross_income, pension_contribution)
    if taxable > rules.income_tax.basic_rate_upper_limit:
        return rules.capital_gains.higher_rate
    return rules.capital_gains.basic_rate


def tax_year_of(date: dt.date) -> str:
    """UK tax year containing ``date``; years run 6 April to 5 April."""
    start = date.year if (date.month, date.day) >= (4, 6) else date.year - 1
    return f"{start}/{str(start + 1)[2:]}"


def tax_year_bounds(tax_year: str) -> tuple[dt.date, dt.date]:
    """First and last day of a tax year such as ``"2024/25"``."""
    start = int(tax_year.split("/")[0])
    return dt.date(start, 4, 6), dt.date(start + 1, 4, 5)


def _group_transactions(
    transactions: Iterable[Transaction],
) -> dict[tuple[str, str], list[Transaction]]:
    groups: dict[tuple[str, str], list[Transaction]] = defaultdict(list)
    for tx in transactions:
        groups[(tx.account_id, tx.asset_id)].append(tx)
    for txs in groups.values():
        txs.sort(key=lambda t: t.date)
    return dict(groups)


def section_104_pools(transactions: Iterable[Transaction]) -> list[Section104Pool]:
    """Build the running pooled cost for every (account, asset) pair.

    Acquisitions add units at cost; sales remove units at the pool's
    average cost. Dividends leave the pool untouched.
    """
    pools = []
    for (account_id, asset_id), txs in _group_transactions(transactions).items():
        units = 0.0
        cost = 0.0
        for tx in txs:
            if tx.type in _ACQUISITIONS:
                units += tx.units
                cost += tx.amount
            elif tx.type == "sell" and units > 0:
                removed = min(tx.units, units)
                cost -= removed * (cost / units)
                units -= removed
        pools.append(
            Section104Pool(
                account_id=account_id,
                asset_id=asset_id,
                total_units=round(units, 8),
                pooled_cost=round_pence(cost),
            )
        )
    return pools


def gains_for_tax_year(
    transactions: Sequence[Transaction],
    tax_year: str,
    *,
    rules: TaxRuleTable | None = None,
    basic_rate_band_remaining: float | None = None,
) -> TaxYearGains:
    """Realised gains for a tax year using HMRC share identification rules.

    Sales are matched first against same-day acquisitions, then against
    acquisitions in the following 30 days, and finally against the
    Section 104 pool. Same-day matching is applied to every sale before
    any 30-day matching.

    Args:
        transactions: Full transaction history (earlier years build the pool).
        tax_year: Tax year to report, e.g. ``"2024/25"``.
        rules: Tax rule table.
        basic_rate_band_remaining: Unused basic-rate band; gains within it
            are taxed at the basic CGT rate. When None the higher rate is
            assumed throughout.
    """
    rules = resolve_rules(rules)
    cgt = rules.capital_gains
    disposals: list[Disposal] = []

    for (account_id, asset_id), txs in _group_transactions(transactions).items():
        # same-day and 30-day matching happen before pooling, so matched
        # acquisitions only enter the pool with their unmatched remainder
        unmatched = {id(tx): tx.units for tx in txs if tx.type in _ACQUISITIONS}
        to_pool = {id(tx): tx.units for tx in txs if tx.type == "sell"}

        sales = [tx for tx in txs if tx.type == "sell"]
        # each rule runs over every sale before the next rule starts
        for rule_name, first_day, last_day in _MATCHING_WINDOWS:
            for sale in sales:
                for buy in txs:
                    if to_pool[id(sale)] <= 0:
                        break
                    available = unmatched.get(id(buy), 0.0)
                    days = (buy.date - sale.date).days
                    if available <= 0 or not first_day <= days <= last_day:
                        continue
                    matched = min(to_pool[id(sale)], available)
                    unmatched[id(buy)] = available - matched
                    to_pool[id(sale)] -= matched
                    if tax_year_of(sale.date) == tax_year:
                        disposals.append(
                            Disposal(
                                date=sale.date,
                                account_id=account_id,
                                asset_id=asset_id,
                                units=matched,
                                proceeds=round_pence(matched * sale.price_per_unit),
                                cost_basis=round_pence(matched * buy.price_per_unit),
                                gain=round_pence(
                                    matched * (sale.price_per_unit - buy.price_per_unit)
                                ),
                                rule=rule_name,  # type: ignore[arg-type]
                            )
                        )

        pool_units = 0.0
        pool_cost = 0.0
        for tx in txs:
            if tx.type in _ACQUISITIONS:
                units = unmatched[id(tx)]
                pool_units += units
                pool_cost += units * tx.price_per_unit
            elif tx.type == "sell" and to_pool[id(tx)] > 0 and pool_units > 0:
                matched = min(to_pool[id(tx)], pool_units)
                matched_cost = matched * (pool_cost / pool_units)
                pool_cost -= matched_cost
                pool_units -= matched
                if tax_year_of(tx.date) == tax_year:
                    disposals.append(
                        Disposal(
                            date=tx.date,
                            account_id=account_id,
                            asset_id=asset_id,
                            units=matched,
                            proceeds=round_pence(matched * tx.price_per_unit),
                            cost_basis=round_pence(matched_cost),
                            gain=round_pence(matched * tx.price_per_unit - matched_cost),
                            rule="section_104",
                        )
                    )

    total_gains = sum(d.gain for d in disposals if d.gain > 0)
    total_losses = -sum(d.gain for d in disposals if d.gain < 0)
    net_gain = total_gains - total_losses
    taxable_gain = max(0.0, net_gain - cgt.annual_exempt_amount)

    if basic_rate_band_remaining is not None and basic_rate_band_remaining > 0:
        at_basic = min(taxable_gain, basic_rate_band_remaining)
        tax_due = at_basic * cgt.basic_rate + (taxable_gain - at_basic) * cgt.higher_rate
    else:
        tax_due = taxable_gain * cgt.higher_rate

    return TaxYearGains(
        tax_year=tax_year,
        total_gains=round_pence(total_gains),
        total_losses=round_pence(total_losses),
        net_gain=round_pence(net_gain),
        annual_exempt_amount=cgt.annual_exempt_amount,
        taxable_gain=round_pence(taxable_gain),
        tax_due=round_pence(tax_due),
        disposals=disposals,
    )


def unrealised_gains(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction] = (),
) -> list[UnrealisedGain]:
    """Unrealised gains on taxable (GIA) holdings.

    Cost basis comes from the Section 104 pool when the asset has
    transaction history, otherwise from the holding's recorded average
    purchase price. An account with no holdings at all falls back to its
    account-level ``cost_basis`` field, if set.
    """
    pools = {(p.account_id, p.asset_id): p for p in section_104_pools(transactions)}
    results = []

    for account in accounts:
        if account.wrapper != "gia":
            continue

        if not account.holdings:
            if account.cost_basis is not None:
                results.append(
                    UnrealisedGain(
                        identifier=account.id,
                        account_id=account.id,
                        asset_id=None,
                        gain=round_pence(account.current_value - account.cost_basis),
                        cost_basis=account.cost_basis,
                        current_value=account.current_value,
                    )
                )
            continue

        for holding in account.holdings:
            pool = pools.get((account.id, holding.asset_id))
            average_cost = pool.average_cost if pool is not None else holding.purchase_price
            cost_basis = round_pence(holding.units * average_cost)
            value = round_pence(holding.current_value)
            results.append(
                UnrealisedGain(
                    identifier=f"{account.id}:{holding.asset_id}",
                    account_id=account.id,
                    asset_id=holding.asset_id,
                    gain=round_pence(value - cost_basis),
                    cost_basis=cost_basis,
                    current_value=value,
                )
            )

    return results


def bed_and_isa(
    unrealised_gain: float,
    cgt_allowance_remaining: float,
    cgt_rate: float,
) -> BedAndISAResult:
    """CGT cost now, and future tax avoided, from a Bed & ISA transfer.

    Only the gain above the unused annual exempt amount is taxed.
    """
    taxable = max(0.0, unrealised_gain - cgt_allowance_remaining)
    return BedAndISAResult(
        sell_amount=unrealised_gain,
        cgt_cost=round_pence(taxable * cgt_rate),
        annual_tax_saved=round_pence(unrealised_gain * cgt_rate),
    )


def break_even_years(
    cgt_cost: float,
    transfer_value: float,
    cgt_rate: float,
    assumed_return: float,
) -> float:
    """Years of sheltered growth needed to recoup the CGT paid on a Bed & ISA.

    Rounded up to one decimal place. Returns 0 when there is no cost or the
    transfer can never recoup it.
    """
    if cgt_cost <= 0:
        return 0.0
    annual_saving = transfer_value * assumed_return * cgt_rate
    if annual_saving <= 0:
        return 0.0
    return math.ceil(round(cgt_cost / annual_saving * 10, 9)) / 10
