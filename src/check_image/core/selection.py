"""Selecting which checks a run executes."""

from __future__ import annotations

from check_image.checks.base import CHECK_NAMES, CheckDefinition
from check_image.models.config import ConfigDocument
from check_image.utils.errors import ConfigurationError


def parse_check_names(text: str | None) -> frozenset[str] | None:
    """Parse a comma-separated list of check names.

    Whitespace around names is trimmed and blank entries are ignored.

    Args:
        text: The list as given on the command line

    Returns:
        The set of names, or None when the list is absent or blank

    Raises:
        ConfigurationError: If a name is not a known check
    """
    if text is None:
        return None

    names = [part.strip() for part in text.split(",") if part.strip()]
    if not names:
        return None

    for name in names:
        if name not in CHECK_NAMES:
            raise ConfigurationError(
                f'unknown check name "{name}", valid names are: {", ".join(CHECK_NAMES)}',
                config_key=name,
            )
    return frozenset(names)


def resolve_selection(
    registry: tuple[CheckDefinition, ...],
    config: ConfigDocument | None = None,
    skip: frozenset[str] | None = None,
    include: frozenset[str] | None = None,
) -> tuple[CheckDefinition, ...]:
    """Compute the checks to run, in registry order.

    With ``include`` exactly the included checks run and the configuration
    document plays no part. Otherwise a check is enabled when there is no
    configuration document or the document has a section for it, and it
    runs when enabled and not skipped.
    """
    if include is not None:
        return tuple(check for check in registry if check.name in include)

    selected = []
    for check in registry:
        enabled = config is None or config.has_section(check.name)
        if enabled and (skip is None or check.name not in skip):
            selected.append(check)
    return tuple(selected)
