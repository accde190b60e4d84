"""Shared test fixtures for the equity tax estimator."""

from decimal import Decimal

import pytest

from equitytax.engines.progressive import ProgressiveTaxEngine
from equitytax.engines.valuation import CompensationValuator
from equitytax.models.inputs import OptionsScenario, RSUScenario


@pytest.fixture
def engine() -> ProgressiveTaxEngine:
    return ProgressiveTaxEngine()


@pytest.fixture
def valuator() -> CompensationValuator:
    return CompensationValuator()


@pytest.fixture
def sample_options_scenario() -> OptionsScenario:
    return OptionsScenario(
        annual_income=Decimal("500000"),
        shares=Decimal("1000"),
        strike_price=Decimal("10"),
        exercise_price=Decimal("50"),
        exchange_rate=Decimal("7.2"),
    )


@pytest.fixture
def sample_rsu_scenario() -> RSUScenario:
    return RSUScenario(
        annual_income=Decimal("500000"),
        shares=Decimal("400"),
        vest_price=Decimal("50"),
        exchange_rate=Decimal("7.2"),
    )
