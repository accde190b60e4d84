"""Data models for the equity tax estimator."""

from equitytax.models.enums import CompensationType
from equitytax.models.inputs import OptionsScenario, RSUScenario
from equitytax.models.reports import (
    BracketAttribution,
    CompensationResult,
    OptionsResult,
    RSUResult,
    TaxBreakdown,
    TaxComputationResult,
)
from equitytax.models.tax_bracket import TaxBracket

__all__ = [
    "BracketAttribution",
    "CompensationResult",
    "CompensationType",
    "OptionsResult",
    "OptionsScenario",
    "RSUResult",
    "RSUScenario",
    "TaxBracket",
    "TaxBreakdown",
    "TaxComputationResult",
]
