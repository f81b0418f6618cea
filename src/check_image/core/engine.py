"""Multi-check orchestration: selection, execution and summary of a run."""

from __future__ import annotations

from contextlib import ExitStack

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from check_image.checks.base import CHECK_NAMES, CheckDefinition
from check_image.core.merge import apply_config
from check_image.core.params import CheckParameters
from check_image.core.preconditions import validate_preconditions
from check_image.core.result import AggregateResult, ValidationResult
from check_image.core.selection import parse_check_names, resolve_selection
from check_image.models.config import ConfigDocument
from check_image.models.result import AllResult, CheckOutcome, Summary
from check_image.renderers.base import OutputFormat
from check_image.renderers.json import JSONRenderer
from check_image.renderers.terminal import TerminalRenderer
from check_image.utils.errors import ConfigurationError
from check_image.utils.fileio import read_file_or_stdin, unmarshal_config_data
from check_image.utils.logging import get_logger, get_logger_with_context

logger = get_logger("core.engine")


def load_config_document(path: str) -> ConfigDocument:
    """Load a configuration document from a JSON/YAML file, or "-" for stdin.

    Raises:
        ConfigurationError: If the document cannot be read or parsed
    """
    try:
        data = read_file_or_stdin(path)
    except ValueError as e:
        raise ConfigurationError(f"failed to read config file: {e}", config_key="config") from e

    try:
        document = unmarshal_config_data(data, path)
    except ValueError as e:
        raise ConfigurationError(f"failed to parse config file: {e}", config_key="config") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigurationError(
            "failed to parse config file: top-level value must be a mapping",
            config_key="config",
        )

    try:
        return ConfigDocument.model_validate(document)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(
            f"failed to parse config file: {location}: {first.get('msg', '')}",
            config_key=location,
        ) from e


def execute_checks(
    selection: tuple[CheckDefinition, ...],
    image: str,
    aggregate: AggregateResult,
    fail_fast: bool = False,
    text_output: bool = True,
    console: Console | None = None,
) -> list[CheckOutcome]:
    """Run the selected checks in order.

    A check that raises produces an errored outcome and raises the aggregate
    to EXECUTION_ERROR; the run continues with the next check. Outcomes of
    checks that ran are rendered in text mode.

    Args:
        selection: Checks to run, in order
        image: Image reference passed to every check
        aggregate: Aggregate result, raised as outcomes come in
        fail_fast: Stop once the aggregate is FAILED or EXECUTION_ERROR
        text_output: Print section headers and renderings
        console: Console for section headers and separators

    Returns:
        The outcomes, in execution order
    """
    renderer = TerminalRenderer(console)
    outcomes: list[CheckOutcome] = []

    for check in selection:
        check_logger = get_logger_with_context("core.engine", check=check.name, image=image)
        if text_output:
            renderer.print_section_header(check.name)

        try:
            outcome = check.run(image)
        except Exception as e:
            check_logger.error("Check %s failed with error: %s", check.name, e)
            outcomes.append(CheckOutcome.errored(check.name, image, e))
            aggregate.raise_to(ValidationResult.EXECUTION_ERROR)
        else:
            outcomes.append(outcome)
            aggregate.raise_to(
                ValidationResult.SUCCEEDED if outcome.passed else ValidationResult.FAILED
            )
            check_logger.debug("Check %s passed=%s", check.name, outcome.passed)
            if text_output:
                try:
                    check.render(outcome)
                except Exception as e:
                    check_logger.error("Error rendering %s result: %s", check.name, e)

        if text_output:
            renderer.console.print()

        if fail_fast and aggregate.failed:
            logger.debug("Fail-fast: stopping after %s", check.name)
            break

    return outcomes


def non_running_check_names(
    skip: frozenset[str] | None = None,
    include: frozenset[str] | None = None,
) -> list[str] | None:
    """Names of checks that did not run because of the skip or include list.

    Returns:
        Catalog-ordered names, or None when there are none
    """
    if include is not None:
        names = [name for name in CHECK_NAMES if name not in include]
    elif skip is not None:
        names = [name for name in CHECK_NAMES if name in skip]
    else:
        names = []
    return names or None


def summarize(
    outcomes: list[CheckOutcome],
    skip: frozenset[str] | None = None,
    include: frozenset[str] | None = None,
) -> Summary:
    """Count outcomes by class and list the checks that did not run."""
    errored = sum(1 for outcome in outcomes if outcome.is_error)
    passed = sum(1 for outcome in outcomes if not outcome.is_error and outcome.passed)
    return Summary(
        total=len(outcomes),
        passed=passed,
        failed=len(outcomes) - passed - errored,
        errored=errored,
        skipped=non_running_check_names(skip, include),
    )


def run_all(
    image: str,
    params: CheckParameters,
    registry: tuple[CheckDefinition, ...],
    aggregate: AggregateResult,
    *,
    config_path: str | None = None,
    skip: str | None = None,
    include: str | None = None,
    fail_fast: bool = False,
    output_format: OutputFormat = OutputFormat.TEXT,
    console: Console | None = None,
) -> AllResult:
    """Run every selected check against an image and report the results.

    Args:
        image: Image reference
        params: Parameters from the command line; document values are
            merged into them
        registry: Check registry, in catalog order
        aggregate: Aggregate result, raised as checks run
        config_path: Configuration document path ("-" for stdin)
        skip: Comma-separated checks to skip
        include: Comma-separated checks to run exclusively
        fail_fast: Stop at the first failing or erroring check
        output_format: Text renders each check; JSON prints one report
        console: Console to print to

    Returns:
        The aggregate report

    Raises:
        ConfigurationError: For bad check lists or configuration documents
        PreconditionError: If a selected check lacks its required parameter
    """
    console = console or Console()
    text_output = output_format is OutputFormat.TEXT

    skip_set = parse_check_names(skip)
    include_set = parse_check_names(include)
    if skip_set is not None and include_set is not None:
        raise ConfigurationError("--skip and --include are mutually exclusive")

    config = load_config_document(config_path) if config_path else None

    with ExitStack() as stack:
        if config is not None:
            stack.enter_context(apply_config(params, config))

        selection = resolve_selection(registry, config, skip_set, include_set)
        validate_preconditions(selection, params)

        if not selection:
            result = AllResult(
                image=image,
                passed=True,
                summary=summarize([], skip_set, include_set),
            )
            if text_output:
                console.print("No checks to run")
            else:
                JSONRenderer(console).render(result)
            return result

        if text_output:
            console.print(f"Running {len(selection)} checks on image {image}")
            console.print()

        outcomes = execute_checks(
            selection,
            image,
            aggregate,
            fail_fast=fail_fast,
            text_output=text_output,
            console=console,
        )

        result = AllResult(
            image=image,
            passed=not aggregate.failed,
            checks=outcomes,
            summary=summarize(outcomes, skip_set, include_set),
        )
        if not text_output:
            JSONRenderer(console).render(result)
        return result
