"""Main CLI entry point for check-image."""

import typer

from check_image.cli import all as all_checks
from check_image.cli import checks
from check_image.cli.utils import CLIState, console
from check_image.renderers.base import OutputFormat

app = typer.Typer(
    name="check-image",
    help="Validate container images against configurable policy checks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register subcommands
app.command(name="all")(all_checks.all_cmd)
app.command(name="age")(checks.age_cmd)
app.command(name="size")(checks.size_cmd)
app.command(name="ports")(checks.ports_cmd)
app.command(name="registry")(checks.registry_cmd)
app.command(name="root-user")(checks.root_user_cmd)
app.command(name="secrets")(checks.secrets_cmd)
app.command(name="healthcheck")(checks.healthcheck_cmd)
app.command(name="labels")(checks.labels_cmd)
app.command(name="entrypoint")(checks.entrypoint_cmd)
app.command(name="platform")(checks.platform_cmd)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level (debug, info, warning, error)",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TEXT,
        "--output",
        "-o",
        case_sensitive=False,
        help="Output format (text, json)",
    ),
) -> None:
    """
    check-image: validate container images against policy checks.

    Run every check at once with [bold]all[/bold], or a single check:

    - [bold]age[/bold], [bold]size[/bold], [bold]ports[/bold], [bold]registry[/bold], [bold]root-user[/bold]
    - [bold]secrets[/bold], [bold]healthcheck[/bold], [bold]labels[/bold], [bold]entrypoint[/bold], [bold]platform[/bold]

    Exit status is 0 when validation succeeds, 1 when it fails and 2 on errors.
    """
    from check_image.utils.logging import configure_logging

    try:
        configure_logging(level=log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="'--log-level'") from e

    ctx.obj = CLIState(output=output, log_level=log_level.lower())


@app.command()
def version() -> None:
    """Show the check-image version."""
    from check_image import __version__

    console.print(f"check-image version {__version__}")


if __name__ == "__main__":
    app()
