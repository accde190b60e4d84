"""Equity compensation valuation engine.

Values a stock option exercise or an RSU vest for an employee taxed on
comprehensive income:
  - The exercise spread (options) or vest value (RSU) is ordinary income,
    taxed at the marginal rate it incurs on top of the annual base salary.
  - Appreciation above the exercise/vest price realized at a later sale is a
    capital gain taxed at a flat rate. Sales at or below that price are not
    treated as losses.

Share prices are in the foreign currency (USD); tax is computed in the local
currency (CNY) after conversion at the supplied exchange rate.
"""

import logging
from decimal import Decimal

from equitytax.engines.brackets import CAPITAL_GAINS_RATE
from equitytax.engines.progressive import ZERO, ProgressiveTaxEngine
from equitytax.models.inputs import OptionsScenario, RSUScenario
from equitytax.models.reports import CompensationResult, OptionsResult, RSUResult

logger = logging.getLogger(__name__)


class CompensationValuator:
    """Computes after-tax value of option exercises and RSU vests."""

    def __init__(
        self,
        engine: ProgressiveTaxEngine | None = None,
        capital_gains_rate: Decimal = CAPITAL_GAINS_RATE,
    ) -> None:
        self.engine = engine or ProgressiveTaxEngine()
        self.capital_gains_rate = capital_gains_rate
        self.warnings: list[str] = []

    def compute_capital_gains_tax(self, capital_gains: Decimal) -> Decimal:
        return capital_gains * self.capital_gains_rate

    def valuate(self, scenario: OptionsScenario | RSUScenario) -> CompensationResult:
        """Value a validated scenario."""
        if isinstance(scenario, OptionsScenario):
            return self.valuate_options(
                annual_income=scenario.annual_income,
                shares=scenario.shares,
                strike_price=scenario.strike_price,
                exercise_price=scenario.exercise_price,
                sale_price=scenario.sale_price,
                exchange_rate=scenario.exchange_rate,
            )
        return self.valuate_rsu(
            annual_income=scenario.annual_income,
            shares=scenario.shares,
            vest_price=scenario.vest_price,
            sale_price=scenario.sale_price,
            exchange_rate=scenario.exchange_rate,
        )

    def valuate_options(
        self,
        annual_income: Decimal,
        shares: Decimal,
        strike_price: Decimal,
        exercise_price: Decimal,
        sale_price: Decimal | None,
        exchange_rate: Decimal,
    ) -> OptionsResult:
        """Value an option exercise and an optional later sale.

        Args:
            annual_income: Annual base salary (local currency).
            shares: Number of options exercised.
            strike_price: Strike price per share (foreign currency).
            exercise_price: Market price per share at exercise (foreign currency).
            sale_price: Sale price per share, or None (or zero) if the shares are held.
            exchange_rate: Local currency units per foreign unit.

        Returns:
            OptionsResult. Without a profitable sale the gross gain is the
            exercise spread; with one it is the full sale-minus-strike gain.
        """
        self.warnings = []
        if exercise_price <= strike_price:
            self._warn(
                f"Exercise price {exercise_price} is not above strike price {strike_price}; "
                "no exercise gain"
            )
        exercise_gain_foreign = max(exercise_price - strike_price, ZERO) * shares
        exercise_gain_local = exercise_gain_foreign * exchange_rate

        rate, ordinary_tax = self._ordinary_tax(annual_income, exercise_gain_local)

        capital_gains = ZERO
        capital_gains_tax = ZERO
        gross_gain_foreign = exercise_gain_foreign

        if sale_price:
            if sale_price > exercise_price:
                capital_gains = (sale_price - exercise_price) * shares * exchange_rate
                capital_gains_tax = self.compute_capital_gains_tax(capital_gains)
                gross_gain_foreign = (sale_price - strike_price) * shares
            else:
                self._warn(
                    f"Sale price {sale_price} is not above exercise price {exercise_price}; "
                    "capital loss is not modeled"
                )

        totals = self._totals(gross_gain_foreign, exchange_rate, ordinary_tax, capital_gains_tax)
        return OptionsResult(
            exchange_rate=exchange_rate,
            ordinary_income_local=exercise_gain_local,
            exercise_gain_foreign=exercise_gain_foreign,
            exercise_gain_local=exercise_gain_local,
            ordinary_tax_rate=rate,
            ordinary_tax_amount=ordinary_tax,
            capital_gains=capital_gains,
            capital_gains_tax=capital_gains_tax,
            **totals,
        )

    def valuate_rsu(
        self,
        annual_income: Decimal,
        shares: Decimal,
        vest_price: Decimal,
        sale_price: Decimal | None,
        exchange_rate: Decimal,
    ) -> RSUResult:
        """Value an RSU vest and an optional later sale.

        The vest value is ordinary income and becomes the cost basis for the
        capital gains leg. With a profitable sale the gross gain is the sale
        proceeds.
        """
        self.warnings = []
        vested_value_foreign = shares * vest_price
        vested_value_local = vested_value_foreign * exchange_rate

        rate, ordinary_tax = self._ordinary_tax(annual_income, vested_value_local)

        capital_gains = ZERO
        capital_gains_tax = ZERO
        gross_gain_foreign = vested_value_foreign

        if sale_price:
            if sale_price > vest_price:
                capital_gains = (sale_price - vest_price) * shares * exchange_rate
                capital_gains_tax = self.compute_capital_gains_tax(capital_gains)
                gross_gain_foreign = sale_price * shares
            else:
                self._warn(
                    f"Sale price {sale_price} is not above vest price {vest_price}; "
                    "capital loss is not modeled"
                )

        totals = self._totals(gross_gain_foreign, exchange_rate, ordinary_tax, capital_gains_tax)
        return RSUResult(
            exchange_rate=exchange_rate,
            ordinary_income_local=vested_value_local,
            vested_value_foreign=vested_value_foreign,
            vested_value_local=vested_value_local,
            ordinary_tax_rate=rate,
            ordinary_tax_amount=ordinary_tax,
            capital_gains=capital_gains,
            capital_gains_tax=capital_gains_tax,
            **totals,
        )

    def _ordinary_tax(self, annual_income: Decimal, income: Decimal) -> tuple[Decimal, Decimal]:
        """Marginal rate and tax on *income* stacked on the salary."""
        if income == ZERO:
            return ZERO, ZERO
        rate = self.engine.compute_marginal_rate(annual_income, income)
        return rate, income * rate

    def _totals(
        self,
        gross_gain_foreign: Decimal,
        exchange_rate: Decimal,
        ordinary_tax: Decimal,
        capital_gains_tax: Decimal,
    ) -> dict[str, Decimal]:
        gross_gain_local = gross_gain_foreign * exchange_rate
        total_tax = ordinary_tax + capital_gains_tax
        net_gain_local = gross_gain_local - total_tax
        return {
            "gross_gain_foreign": gross_gain_foreign,
            "gross_gain_local": gross_gain_local,
            "total_tax": total_tax,
            "net_gain_local": net_gain_local,
            "net_gain_foreign": net_gain_local / exchange_rate if exchange_rate != ZERO else ZERO,
            "effective_tax_rate": total_tax / gross_gain_local if gross_gain_local > ZERO else ZERO,
        }

    def _warn(self, message: str) -> None:
        logger.info(message)
        self.warnings.append(message)
