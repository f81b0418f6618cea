"""Shared utilities for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer
from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape

from check_image.core.params import CheckParameters
from check_image.core.result import AggregateResult, ValidationResult
from check_image.renderers.base import OutputFormat

# Shared console instances
console = Console()
err_console = Console(stderr=True)

# Exit status for configuration, precondition and execution errors
ERROR_EXIT_CODE = 2


class CLIState(BaseModel):
    """Options given to the top-level callback."""

    output: OutputFormat = Field(default=OutputFormat.TEXT, description="Output format")
    log_level: str = Field(default="info", description="Log level")

    @property
    def text_output(self) -> bool:
        return self.output is OutputFormat.TEXT


def get_state(ctx: typer.Context) -> CLIState:
    """Get the state stored by the top-level callback."""
    state = ctx.find_object(CLIState)
    return state if state is not None else CLIState()


def was_given(ctx: typer.Context, name: str) -> bool:
    """Whether option `name` was typed on the command line.

    The source enum is compared by name: typer may hand back its vendored
    click's `ParameterSource` rather than the one from `click.core`.
    """
    source = ctx.get_parameter_source(name)
    return getattr(source, "name", None) == "COMMANDLINE"


def build_parameters(ctx: typer.Context, **values: object) -> CheckParameters:
    """Create check parameters from command options.

    Options given on the command line are recorded as explicitly set so that
    configuration documents never override them.

    Args:
        ctx: Command context
        values: Option values keyed by parameter attribute name
    """
    params = CheckParameters(**values)
    for name in values:
        if was_given(ctx, name):
            params.mark_set(name)
    return params


def fail(message: str) -> NoReturn:
    """Print an error and exit with the error status."""
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(ERROR_EXIT_CODE)


def finish(aggregate: AggregateResult, state: CLIState) -> NoReturn:
    """Print the verdict in text mode and exit with the aggregate status."""
    if state.text_output:
        if aggregate.failed:
            console.print("[red]Validation failed[/red]")
        elif aggregate.state is ValidationResult.SUCCEEDED:
            console.print("[green]Validation succeeded[/green]")
    raise typer.Exit(aggregate.state.exit_code)
