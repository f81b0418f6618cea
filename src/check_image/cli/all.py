"""CLI command running several checks in one invocation."""

from typing import Optional

import typer

from check_image.cli.options import (
    ALLOW_SHELL_FORM_OPTION,
    ALLOWED_PLATFORMS_OPTION,
    ALLOWED_PORTS_OPTION,
    IMAGE_ARGUMENT,
    LABELS_POLICY_OPTION,
    MAX_AGE_OPTION,
    MAX_LAYERS_OPTION,
    MAX_SIZE_OPTION,
    REGISTRY_POLICY_OPTION,
    SECRETS_POLICY_OPTION,
    SKIP_ENV_VARS_OPTION,
    SKIP_FILES_OPTION,
)
from check_image.cli.utils import build_parameters, console, fail, finish, get_state
from check_image.core.result import AggregateResult
from check_image.utils.errors import (
    ConfigurationError,
    PreconditionError,
    ValidationError,
    validate_image_reference,
)


def all_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration document (JSON or YAML, '-' for stdin)",
    ),
    skip: Optional[str] = typer.Option(
        None,
        "--skip",
        help="Comma-separated checks to skip",
    ),
    include: Optional[str] = typer.Option(
        None,
        "--include",
        help="Comma-separated checks to run exclusively",
    ),
    fail_fast: bool = typer.Option(
        False,
        "--fail-fast",
        help="Stop at the first failing check",
    ),
    max_age: int = MAX_AGE_OPTION,
    max_size: int = MAX_SIZE_OPTION,
    max_layers: int = MAX_LAYERS_OPTION,
    allowed_ports: str = ALLOWED_PORTS_OPTION,
    registry_policy: str = REGISTRY_POLICY_OPTION,
    secrets_policy: str = SECRETS_POLICY_OPTION,
    skip_env_vars: bool = SKIP_ENV_VARS_OPTION,
    skip_files: bool = SKIP_FILES_OPTION,
    labels_policy: str = LABELS_POLICY_OPTION,
    allow_shell_form: bool = ALLOW_SHELL_FORM_OPTION,
    allowed_platforms: str = ALLOWED_PLATFORMS_OPTION,
) -> None:
    """
    Run all checks against an image.

    A configuration document enables the checks it has a section for and
    supplies their settings; flags given on the command line take
    precedence over it.

    Example:
        check-image all nginx:latest --config checks.yaml --skip registry
    """
    from check_image.checks import build_registry
    from check_image.core.engine import run_all
    from check_image.core.image import ImageLoader
    from check_image.renderers.terminal import TerminalRenderer

    state = get_state(ctx)

    try:
        validate_image_reference(image)
    except ValidationError as e:
        fail(e.message)

    params = build_parameters(
        ctx,
        max_age=max_age,
        max_size=max_size,
        max_layers=max_layers,
        allowed_ports=allowed_ports,
        registry_policy=registry_policy,
        secrets_policy=secrets_policy,
        skip_env_vars=skip_env_vars,
        skip_files=skip_files,
        labels_policy=labels_policy,
        allow_shell_form=allow_shell_form,
        allowed_platforms=allowed_platforms,
    )
    aggregate = AggregateResult()

    with ImageLoader() as loader:
        registry = build_registry(params, loader, TerminalRenderer(console))
        try:
            run_all(
                image,
                params,
                registry,
                aggregate,
                config_path=config,
                skip=skip,
                include=include,
                fail_fast=fail_fast,
                output_format=state.output,
                console=console,
            )
        except (ConfigurationError, PreconditionError) as e:
            fail(e.message)

    finish(aggregate, state)
