"""Evaluate the lifetime projection at each scenario growth rate."""

from __future__ import annotations

import concurrent.futures
import datetime as dt
import logging
import threading
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ukplan.config.schema import Household
from ukplan.core.engine import (
    DEFAULT_END_AGE,
    LifetimeCashFlowResult,
    generate_lifetime_cash_flow,
)
from ukplan.io.serialize import compute_scenario_hash
from ukplan.taxes.rules import TaxRuleTable, resolve_rules

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 128


@dataclass(frozen=True)
class ScenarioSummary:
    """Headline figures for one growth-rate scenario.

    Attributes:
        growth_rate: Annual growth applied to every pot.
        first_shortfall_age: First age with a negative surplus, or None.
        shortfall_years: Number of years with a negative surplus.
        total_surplus: Sum of every year's surplus.
        worst_surplus: Most negative (or smallest) yearly surplus.
        total_pension_drawn: Pension drawdown over the whole projection.
        total_investment_drawn: Non-pension drawdown over the whole projection.
        years: Number of simulated years.
    """

    growth_rate: float
    first_shortfall_age: int | None
    shortfall_years: int
    total_surplus: float
    worst_surplus: float
    total_pension_drawn: float
    total_investment_drawn: float
    years: int


def summarize(result: LifetimeCashFlowResult, growth_rate: float) -> ScenarioSummary:
    """Reduce a projection to its scenario summary."""
    arrays = result.to_arrays()
    surplus = arrays["surplus"]
    if surplus.size == 0:
        return ScenarioSummary(
            growth_rate=growth_rate,
            first_shortfall_age=None,
            shortfall_years=0,
            total_surplus=0.0,
            worst_surplus=0.0,
            total_pension_drawn=0.0,
            total_investment_drawn=0.0,
            years=0,
        )

    shortfall = surplus < 0
    first_shortfall_age = int(arrays["age"][np.argmax(shortfall)]) if shortfall.any() else None
    return ScenarioSummary(
        growth_rate=growth_rate,
        first_shortfall_age=first_shortfall_age,
        shortfall_years=int(shortfall.sum()),
        total_surplus=float(surplus.sum()),
        worst_surplus=float(surplus.min()),
        total_pension_drawn=float(arrays["pension_income"].sum()),
        total_investment_drawn=float(arrays["investment_income"].sum()),
        years=int(surplus.size),
    )


class ScenarioCache:
    """Memoize projections by a hash of the snapshot and parameters.

    Holds at most ``max_size`` projections, evicting the least recently
    used. Callers always receive their own copy of a cached result. Safe to
    share between threads.
    """

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._results: OrderedDict[str, LifetimeCashFlowResult] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._results)

    def get_or_compute(
        self,
        household: Household,
        growth_rate: float,
        end_age: int,
        rules: TaxRuleTable,
        as_of: dt.date,
    ) -> LifetimeCashFlowResult:
        key = compute_scenario_hash(household, growth_rate, end_age, rules.tax_year, as_of)
        with self._lock:
            cached = self._results.get(key)
            if cached is not None:
                self._results.move_to_end(key)
                self.hits += 1
                logger.debug("Scenario cache hit for %s", key[:12])
                return cached.copy()
            self.misses += 1

        result = generate_lifetime_cash_flow(
            household, growth_rate, end_age, rules=rules, as_of=as_of
        )
        with self._lock:
            self._results[key] = result.copy()
            self._results.move_to_end(key)
            while len(self._results) > self.max_size:
                self._results.popitem(last=False)
        return result

    def clear(self) -> None:
        with self._lock:
            self._results.clear()
            self.hits = 0
            self.misses = 0


def run_scenarios(
    household: Household,
    growth_rates: Sequence[float] | None = None,
    end_age: int = DEFAULT_END_AGE,
    *,
    rules: TaxRuleTable | None = None,
    as_of: dt.date | None = None,
    max_workers: int | None = 1,
    cache: ScenarioCache | None = None,
) -> list[ScenarioSummary]:
    """Project the household at every growth rate and summarize each run.

    Args:
        household: Validated household snapshot.
        growth_rates: Rates to evaluate; the household's
            ``retirement.scenario_rates`` when None.
        end_age: Last age of the primary person to simulate.
        rules: Tax rule table; the default tax year when omitted.
        as_of: Anchor date shared by every scenario; today when omitted.
        max_workers: Thread pool size. ``1`` runs sequentially and ``None``
            lets the executor choose.
        cache: Optional cache reused across calls.

    Returns:
        One ScenarioSummary per rate, in the order given.
    """
    rates = list(growth_rates if growth_rates is not None else household.retirement.scenario_rates)
    rules = resolve_rules(rules)
    as_of = as_of or dt.date.today()
    cache = cache if cache is not None else ScenarioCache()

    def _run_one(rate: float) -> ScenarioSummary:
        result = cache.get_or_compute(household, rate, end_age, rules, as_of)
        return summarize(result, rate)

    if max_workers == 1:
        return [_run_one(rate) for rate in rates]

    summaries: dict[int, ScenarioSummary] = {}
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {executor.submit(_run_one, rate): i for i, rate in enumerate(rates)}
        for future in concurrent.futures.as_completed(future_to_index):
            summaries[future_to_index[future]] = future.result()
    return [summaries[i] for i in range(len(rates))]
