"""Typer CLI for steel coil nesting."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from coilnest.application import OptimizeCuttingPlanCommand
from coilnest.application.config import (
    ConfigError,
    config_to_parameters,
    config_to_parts,
)
from coilnest.cli.commands import display_load_error, load_inputs, validate_command
from coilnest.domain import InputInvalidError
from coilnest.infrastructure import CuttingPlanFormatter

app = typer.Typer(
    name="coilnest",
    help="Nest steel parts onto coil sheets within roll weight limits.",
)

# Register validate command
app.command(name="validate")(validate_command)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def optimize(
    request_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON request file"),
    ],
    parts_file: Annotated[
        Path | None,
        typer.Option("--parts", "-p", help="CSV part list replacing the request's parts"),
    ] = None,
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the cutting plan as JSON to this file"),
    ] = None,
    algorithm: Annotated[
        str | None,
        typer.Option(
            "--algorithm",
            "-a",
            help="Heuristic tuning: standard, genetic, simulated_annealing, bz12",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", help="Worker threads for material groups"),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Seed for genetic and annealing tuning"),
    ] = None,
    show_placements: Annotated[
        bool,
        typer.Option("--show-placements", help="List every nested part position"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log the optimization progress"),
    ] = False,
) -> None:
    """Optimize a cutting plan from a request file.

    Command line options override the request's parameters.

    Exit codes:
        0 - Every part nested, every sheet within its weight window
        1 - The request or its parts are invalid
        2 - A plan was produced with warnings

    Examples:
        coilnest optimize order-42.json
        coilnest optimize order-42.json --parts parts.csv --output plan.json
        coilnest optimize order-42.json --algorithm genetic --seed 7
    """
    _configure_logging(verbose)

    try:
        request, part_records = load_inputs(request_file, parts_file)
    except ConfigError as e:
        display_load_error(e)
        raise typer.Exit(code=1)

    try:
        parameters = config_to_parameters(
            request.parameters,
            algorithm=algorithm,
            workers=workers,
            seed=seed,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    parts = config_to_parts(part_records)

    try:
        result = OptimizeCuttingPlanCommand().execute(parts, parameters)
    except InputInvalidError as e:
        typer.echo(f"Error: {e}", err=True)
        for issue in e.issues:
            typer.echo(f"  {issue.part_id}.{issue.field}: {issue.message}", err=True)
        raise typer.Exit(code=1)

    formatter = CuttingPlanFormatter(show_placements=show_placements)
    typer.echo(formatter.format(result))

    if output_file is not None:
        output_file.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        typer.echo(f"\nCutting plan written to {output_file}")

    if result.has_warnings:
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
