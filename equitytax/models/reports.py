"""Result models returned by the tax and valuation engines."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from equitytax.models.enums import CompensationType
from equitytax.models.tax_bracket import TaxBracket


class TaxComputationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    annual_income: Decimal
    standard_deduction: Decimal
    taxable_income: Decimal
    tax: Decimal
    effective_rate: Decimal
    bracket: TaxBracket  # marginal bracket of taxable_income


class BracketAttribution(BaseModel):
    """Portion of a taxable amount that falls inside one bracket."""

    model_config = ConfigDict(frozen=True)

    bracket: TaxBracket
    taxable_amount: Decimal
    tax: Decimal
    is_incremental: bool = False


class TaxBreakdown(BaseModel):
    """Bracket-by-bracket view of the tax on income added on top of a base."""

    model_config = ConfigDict(frozen=True)

    base_income: Decimal
    incremental_income: Decimal
    standard_deduction: Decimal
    base_taxable_income: Decimal
    new_taxable_income: Decimal
    base_attributions: list[BracketAttribution]
    new_attributions: list[BracketAttribution]
    incremental_attributions: list[BracketAttribution]
    base_tax: Decimal
    incremental_tax: Decimal
    total_tax: Decimal
    marginal_rate: Decimal


class CompensationResult(BaseModel):
    """Shared shape of an options or RSU valuation.

    ``*_local`` amounts are in the taxing currency (CNY), ``*_foreign`` in the
    currency the shares are priced in (USD).
    """

    model_config = ConfigDict(frozen=True)

    compensation_type: CompensationType
    exchange_rate: Decimal
    ordinary_income_local: Decimal
    gross_gain_foreign: Decimal
    gross_gain_local: Decimal
    ordinary_tax_rate: Decimal
    ordinary_tax_amount: Decimal
    capital_gains: Decimal
    capital_gains_tax: Decimal
    total_tax: Decimal
    net_gain_local: Decimal
    net_gain_foreign: Decimal
    effective_tax_rate: Decimal


class OptionsResult(CompensationResult):
    compensation_type: CompensationType = CompensationType.OPTIONS
    exercise_gain_foreign: Decimal
    exercise_gain_local: Decimal


class RSUResult(CompensationResult):
    compensation_type: CompensationType = CompensationType.RSU
    vested_value_foreign: Decimal
    vested_value_local: Decimal
