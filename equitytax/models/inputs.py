"""Validated scenario inputs.

These models sit in front of the valuation engine and reject negative or
non-finite numbers, which the engines themselves do not check.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class OptionsScenario(BaseModel):
    annual_income: Decimal = Field(ge=0, allow_inf_nan=False, description="Annual base salary (CNY)")
    shares: Decimal = Field(ge=0, allow_inf_nan=False, description="Number of options exercised")
    strike_price: Decimal = Field(ge=0, allow_inf_nan=False, description="Strike price per share (USD)")
    exercise_price: Decimal = Field(
        ge=0, allow_inf_nan=False, description="Market price per share at exercise (USD)"
    )
    sale_price: Decimal | None = Field(
        default=None, ge=0, allow_inf_nan=False, description="Expected sale price per share (USD)"
    )
    exchange_rate: Decimal = Field(gt=0, allow_inf_nan=False, description="CNY per USD")


class RSUScenario(BaseModel):
    annual_income: Decimal = Field(ge=0, allow_inf_nan=False, description="Annual base salary (CNY)")
    shares: Decimal = Field(ge=0, allow_inf_nan=False, description="Number of vested shares")
    vest_price: Decimal = Field(ge=0, allow_inf_nan=False, description="Market price per share at vesting (USD)")
    sale_price: Decimal | None = Field(
        default=None, ge=0, allow_inf_nan=False, description="Expected sale price per share (USD)"
    )
    exchange_rate: Decimal = Field(gt=0, allow_inf_nan=False, description="CNY per USD")
