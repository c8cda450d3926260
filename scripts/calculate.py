#!/usr/bin/env python

"""Run calculations on JSON input files for local development.

The balance input is a NitrogenBalanceInput document with an extra
``deposition`` object mapping field ids to yearly deposition rates
(kg N/ha). The norm-filling input is a NormFillingInput document.

Usage:
    uv run python scripts/calculate.py balance farm.json
    uv run python scripts/calculate.py norm-filling phosphate field_applications.json
    uv run python scripts/calculate.py --help
"""

import json
import logging
from pathlib import Path

import typer
from pydantic import ValidationError

from nutrient_engine import StaticDepositionSource, calculate_nitrogen_balance, calculate_norm_filling
from nutrient_engine.common.log_utils import configure_logging
from nutrient_engine.config import BalanceConfig
from nutrient_engine.errors import StructuralDataError
from nutrient_engine.models import NitrogenBalanceInput, NormFillingInput
from nutrient_engine.numeric import to_numeric

configure_logging()
logger = logging.getLogger(__name__)

app = typer.Typer(help="Nitrogen balance and norm filling calculations")


def _read_json(path: Path) -> dict:
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
        raise typer.Exit(1)


def _write_output(result: dict, output: Path | None) -> None:
    text = json.dumps(result, indent=2)
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text)
        logger.info(f"Result written to {output}")


@app.command()
def balance(
    input_file: Path = typer.Argument(..., help="Balance input JSON file", exists=True),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write result to file"),
    decimal_places: int = typer.Option(
        0, "--decimal-places", "-d", min=0, help="Decimal places in the output"
    ),
):
    """Calculate the farm nitrogen balance."""
    data = _read_json(input_file)
    deposition = data.pop("deposition", {})

    try:
        balance_input = NitrogenBalanceInput.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid balance input: {e}")
        raise typer.Exit(1)

    logger.info(f"Fields: {len(balance_input.fields)}")
    logger.info(f"Time frame: {balance_input.time_frame.start} - {balance_input.time_frame.end}")

    try:
        result = calculate_nitrogen_balance(
            balance_input,
            StaticDepositionSource(deposition),
            config=BalanceConfig(output_decimal_places=decimal_places),
        )
    except StructuralDataError as e:
        logger.error(f"Invalid reference data: {e}")
        raise typer.Exit(1)

    _write_output(result, output)


@app.command("norm-filling")
def norm_filling(
    norm_type: str = typer.Argument(..., help="Norm type: manure, nitrogen or phosphate"),
    input_file: Path = typer.Argument(..., help="Norm filling input JSON file", exists=True),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write result to file"),
    decimal_places: int = typer.Option(
        2, "--decimal-places", "-d", min=0, help="Decimal places in the output"
    ),
):
    """Calculate how a field's applications fill a usage norm."""
    try:
        filling_input = NormFillingInput.model_validate(_read_json(input_file))
    except ValidationError as e:
        logger.error(f"Invalid norm filling input: {e}")
        raise typer.Exit(1)

    try:
        filling = calculate_norm_filling(norm_type, filling_input)
    except KeyError as e:
        logger.error(str(e))
        raise typer.Exit(1)
    except ValueError as e:
        logger.error(f"Norm filling failed: {e}")
        raise typer.Exit(1)

    _write_output(to_numeric(filling, decimal_places), output)


if __name__ == "__main__":
    app()
