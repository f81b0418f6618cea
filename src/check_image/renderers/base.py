"""Base renderer types."""

from collections.abc import Callable
from enum import Enum

from check_image.models.result import CheckOutcome


class OutputFormat(str, Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"


# Prints the human-readable rendering of one check outcome.
RenderFunc = Callable[[CheckOutcome], None]
