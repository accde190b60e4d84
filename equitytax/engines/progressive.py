"""Progressive income tax engine.

Implements:
  - Tax on annual income via the quick-deduction closed form
    (taxable * rate - quick deduction)
  - Marginal rate of an income increment stacked on top of base income
  - Bracket-by-bracket attribution of the increment's tax, for display

Taxable income is annual income less the standard deduction, floored at
zero. A taxable amount exactly on a bracket boundary belongs to the lower
bracket.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal

from equitytax.engines.brackets import CHINA_IIT_BRACKETS, STANDARD_DEDUCTION, validate_schedule
from equitytax.models.reports import BracketAttribution, TaxBreakdown, TaxComputationResult
from equitytax.models.tax_bracket import TaxBracket

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class ProgressiveTaxEngine:
    """Computes progressive income tax over a fixed bracket table."""

    def __init__(
        self,
        brackets: Sequence[TaxBracket] = CHINA_IIT_BRACKETS,
        standard_deduction: Decimal = STANDARD_DEDUCTION,
    ) -> None:
        if brackets is not CHINA_IIT_BRACKETS:
            validate_schedule(brackets)
        self.brackets: tuple[TaxBracket, ...] = tuple(brackets)
        self.standard_deduction = standard_deduction

    def taxable_income(
        self, annual_income: Decimal, standard_deduction: Decimal | None = None
    ) -> Decimal:
        deduction = self.standard_deduction if standard_deduction is None else standard_deduction
        return max(annual_income - deduction, ZERO)

    def locate_bracket(self, taxable_income: Decimal) -> TaxBracket:
        """Return the marginal bracket for *taxable_income*.

        Scans ascending; the top bracket is the fallback. Zero or negative
        amounts map to the first bracket.
        """
        if taxable_income <= ZERO:
            return self.brackets[0]
        for bracket in self.brackets:
            if bracket.contains(taxable_income):
                return bracket
        return self.brackets[-1]

    def compute_tax(
        self, annual_income: Decimal, standard_deduction: Decimal | None = None
    ) -> TaxComputationResult:
        """Compute tax on *annual_income* (local currency, before deduction)."""
        deduction = self.standard_deduction if standard_deduction is None else standard_deduction
        taxable = self.taxable_income(annual_income, deduction)

        if taxable == ZERO:
            return TaxComputationResult(
                annual_income=annual_income,
                standard_deduction=deduction,
                taxable_income=ZERO,
                tax=ZERO,
                effective_rate=ZERO,
                bracket=self.brackets[0],
            )

        bracket = self.locate_bracket(taxable)
        tax = max(taxable * bracket.rate - bracket.quick_deduction, ZERO)
        effective_rate = tax / annual_income if annual_income != ZERO else ZERO

        logger.debug(
            "compute_tax income=%s taxable=%s rate=%s tax=%s",
            annual_income, taxable, bracket.rate, tax,
        )
        return TaxComputationResult(
            annual_income=annual_income,
            standard_deduction=deduction,
            taxable_income=taxable,
            tax=tax,
            effective_rate=effective_rate,
            bracket=bracket,
        )

    def compute_marginal_rate(
        self,
        base_income: Decimal,
        incremental_income: Decimal,
        standard_deduction: Decimal | None = None,
    ) -> Decimal:
        """Average rate paid on *incremental_income* stacked on *base_income*.

        The caller must not pass a zero increment: the ratio is undefined and
        Decimal raises InvalidOperation. Negative increments are not supported.
        """
        base_tax = self.compute_tax(base_income, standard_deduction).tax
        new_tax = self.compute_tax(base_income + incremental_income, standard_deduction).tax
        return (new_tax - base_tax) / incremental_income

    def allocate(self, taxable_income: Decimal) -> list[BracketAttribution]:
        """Partition *taxable_income* across the brackets, lowest first."""
        attributions: list[BracketAttribution] = []
        remaining = taxable_income

        for bracket in self.brackets:
            if remaining <= ZERO:
                break
            width = bracket.width
            amount = remaining if width is None else min(remaining, width)
            if amount > ZERO:
                attributions.append(
                    BracketAttribution(
                        bracket=bracket,
                        taxable_amount=amount,
                        tax=amount * bracket.rate,
                    )
                )
                remaining -= amount

        return attributions

    def compute_incremental_breakdown(
        self,
        base_income: Decimal,
        incremental_income: Decimal,
        standard_deduction: Decimal | None = None,
    ) -> TaxBreakdown:
        """Show how the tax on *incremental_income* spreads over the brackets.

        Both the base and the combined taxable income are partitioned; the
        per-bracket difference is the incremental amount. A bracket the base
        never reached is entirely incremental. Only brackets with a positive
        difference are reported.
        """
        deduction = self.standard_deduction if standard_deduction is None else standard_deduction
        base_taxable = self.taxable_income(base_income, deduction)
        new_taxable = self.taxable_income(base_income + incremental_income, deduction)

        base_parts = self.allocate(base_taxable)
        new_parts = self.allocate(new_taxable)

        incremental_parts: list[BracketAttribution] = []
        for i, new_part in enumerate(new_parts):
            base_amount = base_parts[i].taxable_amount if i < len(base_parts) else ZERO
            delta = new_part.taxable_amount - base_amount
            if delta > ZERO:
                incremental_parts.append(
                    BracketAttribution(
                        bracket=new_part.bracket,
                        taxable_amount=delta,
                        tax=delta * new_part.bracket.rate,
                        is_incremental=True,
                    )
                )

        base_tax = sum((p.tax for p in base_parts), ZERO)
        incremental_tax = sum((p.tax for p in incremental_parts), ZERO)
        marginal_rate = incremental_tax / incremental_income if incremental_income > ZERO else ZERO

        logger.debug(
            "breakdown base=%s increment=%s brackets=%d incremental_tax=%s",
            base_income, incremental_income, len(incremental_parts), incremental_tax,
        )
        return TaxBreakdown(
            base_income=base_income,
            incremental_income=incremental_income,
            standard_deduction=deduction,
            base_taxable_income=base_taxable,
            new_taxable_income=new_taxable,
            base_attributions=base_parts,
            new_attributions=new_parts,
            incremental_attributions=incremental_parts,
            base_tax=base_tax,
            incremental_tax=incremental_tax,
            total_tax=base_tax + incremental_tax,
            marginal_rate=marginal_rate,
        )
