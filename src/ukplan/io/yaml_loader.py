"""Locate and read the tax-year YAML tables shipped with ukplan."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ukplan.utils.exceptions import ConfigError

TABLES_DIR = Path(__file__).resolve().parent.parent / "taxes" / "tables"


def table_path(tax_year: str) -> Path:
    """Path of the table for a ``"2024/25"``-style tax year."""
    start, _, end = tax_year.partition("/")
    return TABLES_DIR / f"uk_{start}_{end}.yaml"


def available_tax_years() -> list[str]:
    """Tax years with a shipped table, oldest first."""
    years = []
    for path in sorted(TABLES_DIR.glob("uk_*_*.yaml")):
        _, start, end = path.stem.split("_")
        years.append(f"{start}/{end}")
    return years


def load_table_yaml(tax_year: str) -> dict[str, Any]:
    """Read the raw table for ``tax_year``.

    Raises:
        ConfigError: If no table ships for the year, or the file is not a
            YAML mapping.
    """
    path = table_path(tax_year)
    if not path.is_file():
        available = ", ".join(available_tax_years())
        raise ConfigError(f"No tax rule table for tax year {tax_year!r} (available: {available})")
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Tax rule table {path.name} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Tax rule table {path.name} must be a mapping")
    return data
