"""Tax computation engines."""

from equitytax.engines.progressive import ProgressiveTaxEngine
from equitytax.engines.valuation import CompensationValuator

__all__ = [
    "CompensationValuator",
    "ProgressiveTaxEngine",
]
