"""Command-line options shared by the check commands."""

import typer

from check_image.core.params import DEFAULT_MAX_AGE, DEFAULT_MAX_LAYERS, DEFAULT_MAX_SIZE

IMAGE_ARGUMENT = typer.Argument(
    ...,
    help="Image reference (name[:tag], oci:<dir>, oci-archive:<tar>, docker-archive:<tar>)",
)

MAX_AGE_OPTION = typer.Option(
    DEFAULT_MAX_AGE,
    "--max-age",
    "-a",
    min=0,
    help="Maximum image age in days",
)

MAX_SIZE_OPTION = typer.Option(
    DEFAULT_MAX_SIZE,
    "--max-size",
    "-m",
    min=0,
    help="Maximum image size in megabytes",
)

MAX_LAYERS_OPTION = typer.Option(
    DEFAULT_MAX_LAYERS,
    "--max-layers",
    "-y",
    min=0,
    help="Maximum number of layers",
)

ALLOWED_PORTS_OPTION = typer.Option(
    "",
    "--allowed-ports",
    "-p",
    help="Comma-separated allowed ports, or @file",
)

REGISTRY_POLICY_OPTION = typer.Option(
    "",
    "--registry-policy",
    "-r",
    help="Registry trust policy file (JSON or YAML)",
)

SECRETS_POLICY_OPTION = typer.Option(
    "",
    "--secrets-policy",
    "-s",
    help="Secrets detection policy file (JSON or YAML)",
)

SKIP_ENV_VARS_OPTION = typer.Option(
    False,
    "--skip-env-vars",
    help="Skip the environment variable scan",
)

SKIP_FILES_OPTION = typer.Option(
    False,
    "--skip-files",
    help="Skip the layer file scan",
)

LABELS_POLICY_OPTION = typer.Option(
    "",
    "--labels-policy",
    help="Required labels policy file (JSON or YAML)",
)

ALLOW_SHELL_FORM_OPTION = typer.Option(
    False,
    "--allow-shell-form",
    help="Allow a shell-form entrypoint",
)

ALLOWED_PLATFORMS_OPTION = typer.Option(
    "",
    "--allowed-platforms",
    help="Comma-separated allowed platforms such as linux/amd64 or linux/arm64/v8, or @file",
)
