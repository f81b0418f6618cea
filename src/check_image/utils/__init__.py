"""Utility functions for check-image."""

from check_image.utils.logging import configure_logging, get_logger, get_logger_with_context
from check_image.utils.errors import (
    CheckImageError,
    ConfigurationError,
    ImageNotFoundError,
    PolicyError,
    PolicyFormatError,
    PreconditionError,
    ValidationError,
    validate_image_reference,
)
from check_image.utils.fileio import load_document, read_file_or_stdin, unmarshal_config_data

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_logger_with_context",
    # Errors
    "CheckImageError",
    "ConfigurationError",
    "ImageNotFoundError",
    "PolicyError",
    "PolicyFormatError",
    "PreconditionError",
    "ValidationError",
    "validate_image_reference",
    # File input
    "load_document",
    "read_file_or_stdin",
    "unmarshal_config_data",
]
