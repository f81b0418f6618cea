"""CLI commands running a single check."""

from __future__ import annotations

from typing import NoReturn

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
from check_image.cli.utils import build_parameters, console, err_console, fail, finish, get_state
from check_image.core.params import CheckParameters
from check_image.core.result import AggregateResult, ValidationResult
from check_image.utils.errors import ValidationError, validate_image_reference
from check_image.utils.logging import get_logger

logger = get_logger("cli.checks")


def run_check(ctx: typer.Context, name: str, image: str, params: CheckParameters) -> NoReturn:
    """Run one check from the registry and exit with its status.

    A check that cannot run aborts the command with the error status.
    """
    from check_image.checks import build_registry
    from check_image.core.image import ImageLoader
    from check_image.renderers.json import JSONRenderer
    from check_image.renderers.terminal import TerminalRenderer

    state = get_state(ctx)

    try:
        validate_image_reference(image)
    except ValidationError as e:
        fail(e.message)

    aggregate = AggregateResult()
    renderer = TerminalRenderer(console)

    with ImageLoader() as loader:
        check = next(
            definition
            for definition in build_registry(params, loader, renderer)
            if definition.name == name
        )
        try:
            with err_console.status(f"Running {name} check..."):
                outcome = check.run(image)
        except Exception as e:
            logger.debug("Check %s raised %r", name, e)
            fail(f"{name} check failed with error: {e}")

    aggregate.raise_to(ValidationResult.SUCCEEDED if outcome.passed else ValidationResult.FAILED)

    if state.text_output:
        check.render(outcome)
    else:
        JSONRenderer(console).render(outcome)

    finish(aggregate, state)


def age_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    max_age: int = MAX_AGE_OPTION,
) -> None:
    """
    Check that an image is not older than a number of days.

    Example:
        check-image age nginx:latest --max-age 30
    """
    run_check(ctx, "age", image, build_parameters(ctx, max_age=max_age))


def size_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    max_size: int = MAX_SIZE_OPTION,
    max_layers: int = MAX_LAYERS_OPTION,
) -> None:
    """
    Check the total size and the layer count of an image.

    Example:
        check-image size nginx:latest --max-size 200 --max-layers 10
    """
    params = build_parameters(ctx, max_size=max_size, max_layers=max_layers)
    run_check(ctx, "size", image, params)


def ports_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    allowed_ports: str = ALLOWED_PORTS_OPTION,
) -> None:
    """
    Check that an image exposes only allowed ports.

    Example:
        check-image ports nginx:latest --allowed-ports 80,443
    """
    run_check(ctx, "ports", image, build_parameters(ctx, allowed_ports=allowed_ports))


def registry_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    registry_policy: str = REGISTRY_POLICY_OPTION,
) -> None:
    """
    Check that an image comes from a trusted registry.

    Example:
        check-image registry ghcr.io/org/app:1.0 --registry-policy registries.yaml
    """
    run_check(ctx, "registry", image, build_parameters(ctx, registry_policy=registry_policy))


def root_user_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
) -> None:
    """
    Check that an image is configured to run as a non-root user.

    Example:
        check-image root-user nginx:latest
    """
    run_check(ctx, "root-user", image, CheckParameters())


def secrets_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    secrets_policy: str = SECRETS_POLICY_OPTION,
    skip_env_vars: bool = SKIP_ENV_VARS_OPTION,
    skip_files: bool = SKIP_FILES_OPTION,
) -> None:
    """
    Scan environment variables and layer files for secrets.

    Example:
        check-image secrets nginx:latest --secrets-policy secrets.yaml --skip-files
    """
    params = build_parameters(
        ctx,
        secrets_policy=secrets_policy,
        skip_env_vars=skip_env_vars,
        skip_files=skip_files,
    )
    run_check(ctx, "secrets", image, params)


def healthcheck_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
) -> None:
    """
    Check that an image defines a healthcheck.

    Example:
        check-image healthcheck nginx:latest
    """
    run_check(ctx, "healthcheck", image, CheckParameters())


def labels_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    labels_policy: str = LABELS_POLICY_OPTION,
) -> None:
    """
    Check an image's labels against the required labels policy.

    Example:
        check-image labels nginx:latest --labels-policy labels.yaml
    """
    run_check(ctx, "labels", image, build_parameters(ctx, labels_policy=labels_policy))


def entrypoint_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    allow_shell_form: bool = ALLOW_SHELL_FORM_OPTION,
) -> None:
    """
    Check that an image has an exec-form entrypoint or command.

    Example:
        check-image entrypoint nginx:latest --allow-shell-form
    """
    run_check(ctx, "entrypoint", image, build_parameters(ctx, allow_shell_form=allow_shell_form))


def platform_cmd(
    ctx: typer.Context,
    image: str = IMAGE_ARGUMENT,
    allowed_platforms: str = ALLOWED_PLATFORMS_OPTION,
) -> None:
    """
    Check that an image's platform is in the allowed list.

    Example:
        check-image platform nginx:latest --allowed-platforms linux/amd64,linux/arm64
    """
    params = build_parameters(ctx, allowed_platforms=allowed_platforms)
    run_check(ctx, "platform", image, params)
