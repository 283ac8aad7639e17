"""Serialization for household snapshots, projections and summaries."""

from __future__ import annotations

import csv
import datetime as dt
import hashlib
import io
import json
import logging
from dataclasses import asdict, fields
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ukplan.config.schema import Household
from ukplan.utils.exceptions import ConfigError

if TYPE_CHECKING:
    from ukplan.core.engine import LifetimeCashFlowResult

logger = logging.getLogger(__name__)


def compute_scenario_hash(
    household: Household,
    growth_rate: float,
    end_age: int,
    tax_year: str,
    as_of: dt.date,
) -> str:
    """Compute a deterministic SHA-256 hash of a projection's inputs.

    Uses canonical JSON (sorted keys, no whitespace) so the same
    logical scenario always produces the same hash.
    """
    data = {
        "household": household.model_dump(mode="json"),
        "growth_rate": growth_rate,
        "end_age": end_age,
        "tax_year": tax_year,
        "as_of": as_of.isoformat(),
    }
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()


def dump_household(household: Household) -> str:
    """Serialize a household snapshot to a JSON string."""
    return json.dumps(household.model_dump(mode="json"), indent=2)


def load_household(json_str: str) -> Household:
    """Deserialize and validate a household snapshot.

    Raises:
        ConfigError: If the JSON is malformed or fails validation.
    """
    try:
        data: dict[str, Any] = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Household snapshot is not valid JSON: {exc}") from exc
    try:
        household = Household.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid household snapshot: {exc}") from exc
    logger.debug(
        "Loaded household with %d person(s) and %d account(s)",
        len(household.persons),
        len(household.accounts),
    )
    return household


def dump_cash_flow_csv(result: LifetimeCashFlowResult) -> str:
    """Export the yearly cash-flow series as CSV, one row per year.

    Returns an empty string for an empty series.
    """
    if not result.data:
        return ""

    names = [f.name for f in fields(result.data[0])]
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(names)
    for row in result.data:
        values = asdict(row).values()
        writer.writerow([f"{v:.0f}" if isinstance(v, float) else v for v in values])
    return output.getvalue()


def dump_results_summary(result: LifetimeCashFlowResult) -> str:
    """Serialize a projection's headline figures and events to JSON."""
    data = {
        "primary_person_name": result.primary_person_name,
        "years": len(result.data),
        "start_age": result.data[0].age if result.data else None,
        "end_age": result.data[-1].age if result.data else None,
        "total_income": sum(row.total_income for row in result.data),
        "total_expenditure": sum(row.total_expenditure for row in result.data),
        "total_surplus": sum(row.surplus for row in result.data),
        "first_shortfall_age": next((row.age for row in result.data if row.surplus < 0), None),
        "events": [asdict(event) for event in result.events],
    }
    return json.dumps(data, indent=2)
