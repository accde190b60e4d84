"""Tax bracket configuration.

China individual income tax (comprehensive income) schedule, standard
deduction and the flat capital gains rate. Never hardcode brackets in
computation functions.

Source: Individual Income Tax Law of the PRC, annual comprehensive income
rate table (in force since 2019, unchanged for 2024).
"""

from collections.abc import Sequence
from decimal import Decimal

from equitytax.exceptions import ScheduleError
from equitytax.models.tax_bracket import TaxBracket

# ---------------------------------------------------------------------------
# Annual comprehensive income brackets: (lower, upper] @ rate, quick deduction
# upper_bound None marks the top bracket.
# ---------------------------------------------------------------------------
CHINA_IIT_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(lower_bound=Decimal("0"), upper_bound=Decimal("36000"),
               rate=Decimal("0.03"), quick_deduction=Decimal("0")),
    TaxBracket(lower_bound=Decimal("36000"), upper_bound=Decimal("144000"),
               rate=Decimal("0.10"), quick_deduction=Decimal("2520")),
    TaxBracket(lower_bound=Decimal("144000"), upper_bound=Decimal("300000"),
               rate=Decimal("0.20"), quick_deduction=Decimal("16920")),
    TaxBracket(lower_bound=Decimal("300000"), upper_bound=Decimal("420000"),
               rate=Decimal("0.25"), quick_deduction=Decimal("31920")),
    TaxBracket(lower_bound=Decimal("420000"), upper_bound=Decimal("660000"),
               rate=Decimal("0.30"), quick_deduction=Decimal("52920")),
    TaxBracket(lower_bound=Decimal("660000"), upper_bound=Decimal("960000"),
               rate=Decimal("0.35"), quick_deduction=Decimal("85920")),
    TaxBracket(lower_bound=Decimal("960000"), upper_bound=None,
               rate=Decimal("0.45"), quick_deduction=Decimal("181920")),
)

# ---------------------------------------------------------------------------
# Basic deduction: 5,000 CNY/month
# ---------------------------------------------------------------------------
STANDARD_DEDUCTION = Decimal("60000")

# ---------------------------------------------------------------------------
# Property transfer income is taxed at a flat 20%
# ---------------------------------------------------------------------------
CAPITAL_GAINS_RATE = Decimal("0.20")

# CNY per USD, used as the CLI default only
DEFAULT_EXCHANGE_RATE = Decimal("7.2")


def tax_brackets() -> tuple[TaxBracket, ...]:
    """Return the ordered bracket table."""
    return CHINA_IIT_BRACKETS


def validate_schedule(brackets: Sequence[TaxBracket]) -> None:
    """Check that *brackets* form a consistent progressive schedule.

    Raises ScheduleError on the first broken invariant: brackets must start at
    zero, be contiguous with strictly increasing rates, end with the single
    unbounded bracket, and carry quick deductions that reproduce the
    piecewise tax at each lower bound.
    """
    if not brackets:
        raise ScheduleError("schedule has no brackets")
    if brackets[0].lower_bound != 0:
        raise ScheduleError(f"first bracket starts at {brackets[0].lower_bound}, not 0")
    if not brackets[-1].is_unbounded:
        raise ScheduleError("last bracket must have no upper bound")

    piecewise_tax = Decimal("0")
    for i, bracket in enumerate(brackets):
        if i < len(brackets) - 1:
            nxt = brackets[i + 1]
            if bracket.is_unbounded:
                raise ScheduleError(f"bracket {i} is unbounded but is not the last bracket")
            if bracket.upper_bound <= bracket.lower_bound:
                raise ScheduleError(f"bracket {i} is empty or inverted")
            if bracket.upper_bound != nxt.lower_bound:
                raise ScheduleError(
                    f"gap or overlap between bracket {i} and {i + 1}: "
                    f"{bracket.upper_bound} != {nxt.lower_bound}"
                )
            if nxt.rate <= bracket.rate:
                raise ScheduleError(f"rate of bracket {i + 1} does not increase")

        expected = bracket.lower_bound * bracket.rate - piecewise_tax
        if bracket.quick_deduction != expected:
            raise ScheduleError(
                f"bracket {i} quick deduction {bracket.quick_deduction} != {expected}"
            )
        if bracket.width is not None:
            piecewise_tax += bracket.width * bracket.rate
