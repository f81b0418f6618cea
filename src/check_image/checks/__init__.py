"""Image checks and the ordered check registry."""

from __future__ import annotations

from functools import partial

from check_image.checks.age import run_age
from check_image.checks.base import CHECK_NAMES, CheckDefinition, CheckRegistry, RunFunc
from check_image.checks.entrypoint import run_entrypoint
from check_image.checks.healthcheck import run_healthcheck
from check_image.checks.labels import run_labels
from check_image.checks.platform import run_platform
from check_image.checks.ports import run_ports
from check_image.checks.registry import run_registry
from check_image.checks.root_user import run_root_user
from check_image.checks.secrets import run_secrets
from check_image.checks.size import run_size
from check_image.core.image import ImageLoader
from check_image.core.params import CheckParameters
from check_image.renderers.terminal import TerminalRenderer


def build_registry(
    params: CheckParameters,
    loader: ImageLoader,
    renderer: TerminalRenderer,
) -> CheckRegistry:
    """Build the check registry in catalog order.

    Run functions read ``params`` when they are called, so configuration
    merged after construction is seen by every check.

    Args:
        params: Parameters shared by all checks
        loader: Image loader shared by all checks
        renderer: Renderer providing each check's text rendering

    Returns:
        One definition per name in CHECK_NAMES
    """
    runs: dict[str, RunFunc] = {
        "age": partial(run_age, params=params, loader=loader),
        "size": partial(run_size, params=params, loader=loader),
        "ports": partial(run_ports, params=params, loader=loader),
        "registry": partial(run_registry, params=params),
        "root-user": partial(run_root_user, loader=loader),
        "secrets": partial(run_secrets, params=params, loader=loader),
        "healthcheck": partial(run_healthcheck, loader=loader),
        "labels": partial(run_labels, params=params, loader=loader),
        "entrypoint": partial(run_entrypoint, params=params, loader=loader),
        "platform": partial(run_platform, params=params, loader=loader),
    }
    return tuple(
        CheckDefinition(name=name, run=runs[name], render=renderer.for_check(name))
        for name in CHECK_NAMES
    )


__all__ = [
    "CHECK_NAMES",
    "CheckDefinition",
    "CheckRegistry",
    "RunFunc",
    "build_registry",
]
