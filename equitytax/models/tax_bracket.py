"""Progressive tax bracket model."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class TaxBracket(BaseModel):
    """One tier of a progressive schedule.

    The interval is ``(lower_bound, upper_bound]``. ``upper_bound`` is None for
    the top bracket, which has no upper bound.
    """

    model_config = ConfigDict(frozen=True)

    lower_bound: Decimal = Field(ge=0)
    upper_bound: Decimal | None = None
    rate: Decimal = Field(ge=0, le=1)
    quick_deduction: Decimal = Field(ge=0)

    @property
    def is_unbounded(self) -> bool:
        return self.upper_bound is None

    @property
    def width(self) -> Decimal | None:
        if self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound

    def contains(self, taxable_income: Decimal) -> bool:
        """True if *taxable_income* falls in this bracket (low end exclusive)."""
        if taxable_income <= self.lower_bound:
            return False
        return self.upper_bound is None or taxable_income <= self.upper_bound

    def label(self) -> str:
        if self.upper_bound is None:
            return f"{self.lower_bound:,.0f}+"
        return f"{self.lower_bound:,.0f} - {self.upper_bound:,.0f}"
