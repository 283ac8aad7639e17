"""Custom exceptions for ukplan."""

from __future__ import annotations


class UkplanError(Exception):
    """Base exception for ukplan."""


class ConfigError(UkplanError):
    """Invalid configuration or household snapshot."""


class SimulationError(UkplanError):
    """Error during simulation."""
