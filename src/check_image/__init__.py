"""check-image: validate container images against configurable policy checks.

Checks cover image age, size and layer count, exposed ports, registry
trust, the configured user, embedded secrets, required labels, the
healthcheck, the entrypoint form and the platform. Any subset can run in a
single invocation that reports one aggregated verdict.

Usage:
    # Library API
    from check_image import AggregateResult, CheckParameters, ImageLoader, build_registry, run_all

    params = CheckParameters(max_age=30)
    with ImageLoader() as loader:
        registry = build_registry(params, loader, TerminalRenderer())
        aggregate = AggregateResult()
        run_all("nginx:latest", params, registry, aggregate, skip="registry,labels,platform")
        print(aggregate.state.exit_code)

CLI:
    check-image all <image> --config config.yaml
    check-image age <image> --max-age 30
    check-image secrets <image> --secrets-policy secrets.yaml
"""

__version__ = "0.1.0"

from check_image.checks import CHECK_NAMES, CheckDefinition, build_registry
from check_image.core.engine import execute_checks, run_all, summarize
from check_image.core.image import ContainerImage, ImageLoader
from check_image.core.params import CheckParameters
from check_image.core.result import AggregateResult, ValidationResult
from check_image.models.result import AllResult, CheckOutcome, Summary
from check_image.renderers import JSONRenderer, OutputFormat, TerminalRenderer

__all__ = [
    # Version
    "__version__",
    # Checks
    "CHECK_NAMES",
    "CheckDefinition",
    "build_registry",
    # Engine
    "execute_checks",
    "run_all",
    "summarize",
    "CheckParameters",
    "AggregateResult",
    "ValidationResult",
    # Images
    "ContainerImage",
    "ImageLoader",
    # Results
    "AllResult",
    "CheckOutcome",
    "Summary",
    # Renderers
    "JSONRenderer",
    "OutputFormat",
    "TerminalRenderer",
]
