"""Typer CLI interface for the equity tax estimator."""

import json
import logging
import math
from decimal import Decimal
from typing import Any

import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.table import Table

from equitytax.engines.brackets import DEFAULT_EXCHANGE_RATE, STANDARD_DEDUCTION, tax_brackets
from equitytax.engines.progressive import ProgressiveTaxEngine
from equitytax.engines.valuation import CompensationValuator
from equitytax.exceptions import DataValidationError
from equitytax.models.inputs import OptionsScenario, RSUScenario
from equitytax.models.reports import BracketAttribution, CompensationResult, TaxBreakdown

app = typer.Typer(
    name="equitytax",
    help="Equity compensation tax estimator (China IIT on USD-priced options and RSUs).",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Equity compensation tax estimator (China IIT on USD-priced options and RSUs)."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


class _DecimalEncoder(json.JSONEncoder):
    """JSON encoder that serializes Decimal as string."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


def _dec(value: float | None) -> Decimal | None:
    return Decimal(str(value)) if value is not None else None


def _pct(rate: Decimal) -> str:
    return f"{rate * 100:.2f}%"


def _check_amounts(**values: float | None) -> None:
    """Reject NaN, infinite and negative amounts, exiting with an error message."""
    for field, value in values.items():
        if value is None:
            continue
        if not math.isfinite(value):
            error = DataValidationError(field, "must be a finite number")
        elif value < 0:
            error = DataValidationError(field, "must be non-negative")
        else:
            continue
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(1)


def _build(model: type[BaseModel], **fields: Any) -> Any:
    """Validate CLI inputs, exiting with an error message on bad values."""
    try:
        return model(**fields)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = ".".join(str(p) for p in err["loc"])
        error = DataValidationError(field, err["msg"])
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(1)


def _echo_json(model: BaseModel, warnings: list[str] | None = None) -> None:
    data = model.model_dump()
    if warnings is not None:
        data["warnings"] = warnings
    typer.echo(json.dumps(data, cls=_DecimalEncoder, indent=2, default=str))


def _attribution_table(title: str, rows: list[BracketAttribution]) -> Table:
    tbl = Table(title=title, show_header=True)
    tbl.add_column("Bracket (CNY)", style="cyan")
    tbl.add_column("Rate", justify="right")
    tbl.add_column("Taxable", justify="right")
    tbl.add_column("Tax", justify="right", style="green")
    for row in rows:
        tbl.add_row(
            row.bracket.label(),
            f"{row.bracket.rate * 100:.0f}%",
            f"{row.taxable_amount:,.2f}",
            f"{row.tax:,.2f}",
        )
    return tbl


def _print_breakdown(breakdown: TaxBreakdown, console: Console) -> None:
    console.print(_attribution_table("Before", breakdown.base_attributions))
    console.print(_attribution_table("Added income", breakdown.incremental_attributions))
    typer.echo(f"  Base Tax:              CNY {breakdown.base_tax:>14,.2f}")
    typer.echo(f"  Incremental Tax:       CNY {breakdown.incremental_tax:>14,.2f}")
    typer.echo(f"  Total Tax:             CNY {breakdown.total_tax:>14,.2f}")
    typer.echo(f"  Marginal Rate:         {_pct(breakdown.marginal_rate):>18}")


def _print_compensation(
    result: CompensationResult,
    gain_label: str,
    gain_foreign: Decimal,
    gain_local: Decimal,
    warnings: list[str],
) -> None:
    typer.echo("")
    typer.echo(f"{gain_label.upper()}")
    typer.echo(f"  {gain_label + ' (USD):':<23}USD {gain_foreign:>14,.2f}")
    typer.echo(f"  {gain_label + ' (CNY):':<23}CNY {gain_local:>14,.2f}")
    typer.echo(f"  Ordinary Tax Rate:     {_pct(result.ordinary_tax_rate):>18}")
    typer.echo(f"  Ordinary Tax:          CNY {result.ordinary_tax_amount:>14,.2f}")
    typer.echo("")
    typer.echo("CAPITAL GAINS")
    typer.echo(f"  Capital Gains:         CNY {result.capital_gains:>14,.2f}")
    typer.echo(f"  Capital Gains Tax:     CNY {result.capital_gains_tax:>14,.2f}")
    typer.echo("")
    typer.echo("TOTAL")
    typer.echo(f"  Gross Gain (USD):      USD {result.gross_gain_foreign:>14,.2f}")
    typer.echo(f"  Gross Gain (CNY):      CNY {result.gross_gain_local:>14,.2f}")
    typer.echo(f"  Total Tax:             CNY {result.total_tax:>14,.2f}")
    typer.echo("  ──────────────────────────────────────────")
    typer.echo(f"  Net Gain (CNY):        CNY {result.net_gain_local:>14,.2f}")
    typer.echo(f"  Net Gain (USD):        USD {result.net_gain_foreign:>14,.2f}")
    typer.echo(f"  Effective Tax Rate:    {_pct(result.effective_tax_rate):>18}")

    if warnings:
        typer.echo("")
        typer.echo("WARNINGS:")
        for w in warnings:
            typer.echo(f"  - {w}")


@app.command()
def brackets(
    income: float | None = typer.Option(
        None,
        "--income",
        "-i",
        help="Annual income (CNY); marks the bracket it falls in",
    ),
) -> None:
    """Show the progressive tax schedule."""
    _check_amounts(income=income)
    marginal = None
    if income is not None:
        engine = ProgressiveTaxEngine()
        marginal = engine.compute_tax(_dec(income)).bracket

    tbl = Table(title="Annual Comprehensive Income Tax Brackets", show_header=True)
    tbl.add_column("Taxable Income (CNY)", style="cyan")
    tbl.add_column("Rate", justify="right")
    tbl.add_column("Quick Deduction", justify="right")
    tbl.add_column("", justify="center")
    for bracket in tax_brackets():
        marker = "<==" if bracket == marginal else ""
        tbl.add_row(
            bracket.label(),
            f"{bracket.rate * 100:.0f}%",
            f"{bracket.quick_deduction:,.0f}",
            marker,
        )
    Console().print(tbl)
    typer.echo(f"Taxable income = annual income - {STANDARD_DEDUCTION:,.0f} standard deduction.")
    typer.echo("Tax = taxable income x rate - quick deduction.")


@app.command()
def tax(
    income: float = typer.Argument(..., help="Annual income (CNY)"),
    deduction: float = typer.Option(
        float(STANDARD_DEDUCTION),
        "--deduction",
        "-d",
        help="Standard deduction (CNY)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Compute tax on an annual income."""
    _check_amounts(income=income, deduction=deduction)

    engine = ProgressiveTaxEngine()
    result = engine.compute_tax(_dec(income), _dec(deduction))

    if json_output:
        _echo_json(result)
        return

    typer.echo("")
    typer.echo("=== Income Tax ===")
    typer.echo(f"  Annual Income:         CNY {result.annual_income:>14,.2f}")
    typer.echo(f"  Standard Deduction:    CNY {result.standard_deduction:>14,.2f}")
    typer.echo(f"  Taxable Income:        CNY {result.taxable_income:>14,.2f}")
    typer.echo(f"  Bracket:               {result.bracket.label()} @ {result.bracket.rate * 100:.0f}%")
    typer.echo("  ──────────────────────────────────────────")
    typer.echo(f"  Tax:                   CNY {result.tax:>14,.2f}")
    typer.echo(f"  Effective Rate:        {_pct(result.effective_rate):>18}")


@app.command()
def breakdown(
    base_income: float = typer.Argument(..., help="Base annual income (CNY)"),
    incremental_income: float = typer.Argument(..., help="Additional income (CNY)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show bracket by bracket how tax on additional income is computed."""
    _check_amounts(base_income=base_income, incremental_income=incremental_income)

    engine = ProgressiveTaxEngine()
    result = engine.compute_incremental_breakdown(_dec(base_income), _dec(incremental_income))

    if json_output:
        _echo_json(result)
        return
    _print_breakdown(result, Console())


@app.command()
def options(
    salary: float = typer.Option(500000.0, "--salary", help="Annual base salary (CNY)"),
    shares: float = typer.Option(1000.0, "--shares", help="Number of options exercised"),
    strike: float = typer.Option(10.0, "--strike", help="Strike price per share (USD)"),
    exercise_price: float = typer.Option(
        50.0, "--exercise-price", help="Market price per share at exercise (USD)"
    ),
    sale_price: float | None = typer.Option(
        None, "--sale-price", help="Expected sale price per share (USD)"
    ),
    fx: float = typer.Option(float(DEFAULT_EXCHANGE_RATE), "--fx", help="Exchange rate (CNY per USD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Estimate tax on a stock option exercise."""
    scenario = _build(
        OptionsScenario,
        annual_income=_dec(salary),
        shares=_dec(shares),
        strike_price=_dec(strike),
        exercise_price=_dec(exercise_price),
        sale_price=_dec(sale_price),
        exchange_rate=_dec(fx),
    )
    valuator = CompensationValuator()
    result = valuator.valuate(scenario)

    if json_output:
        _echo_json(result, valuator.warnings)
        return

    typer.echo("")
    typer.echo("=== Stock Option Exercise ===")
    _print_compensation(
        result, "Exercise Gain", result.exercise_gain_foreign, result.exercise_gain_local,
        valuator.warnings,
    )
    typer.echo("")
    _print_breakdown(
        valuator.engine.compute_incremental_breakdown(scenario.annual_income, result.ordinary_income_local),
        Console(),
    )


@app.command()
def rsu(
    salary: float = typer.Option(500000.0, "--salary", help="Annual base salary (CNY)"),
    shares: float = typer.Option(400.0, "--shares", help="Number of vested shares"),
    vest_price: float = typer.Option(50.0, "--vest-price", help="Market price per share at vesting (USD)"),
    sale_price: float | None = typer.Option(
        None, "--sale-price", help="Expected sale price per share (USD)"
    ),
    fx: float = typer.Option(float(DEFAULT_EXCHANGE_RATE), "--fx", help="Exchange rate (CNY per USD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Estimate tax on an RSU vest."""
    scenario = _build(
        RSUScenario,
        annual_income=_dec(salary),
        shares=_dec(shares),
        vest_price=_dec(vest_price),
        sale_price=_dec(sale_price),
        exchange_rate=_dec(fx),
    )
    valuator = CompensationValuator()
    result = valuator.valuate(scenario)

    if json_output:
        _echo_json(result, valuator.warnings)
        return

    typer.echo("")
    typer.echo("=== RSU Vest ===")
    _print_compensation(
        result, "Vested Value", result.vested_value_foreign, result.vested_value_local,
        valuator.warnings,
    )
    typer.echo("")
    _print_breakdown(
        valuator.engine.compute_incremental_breakdown(scenario.annual_income, result.ordinary_income_local),
        Console(),
    )


if __name__ == "__main__":
    app()
