"""Core domain logic for check-image.

The run engine lives in :mod:`check_image.core.engine`; it is imported
from there rather than re-exported here, since it depends on the check
modules that depend on this package.
"""

from check_image.core.image import ContainerImage, ImageLoader
from check_image.core.params import CheckParameters
from check_image.core.result import AggregateResult, ValidationResult

__all__ = [
    "ContainerImage",
    "ImageLoader",
    "CheckParameters",
    "AggregateResult",
    "ValidationResult",
]
