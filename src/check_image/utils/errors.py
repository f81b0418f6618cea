"""Exceptions raised by check-image, each carrying a stable error code."""

from __future__ import annotations

from typing import Any


class CheckImageError(Exception):
    """Base exception for check-image."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ImageNotFoundError(CheckImageError):
    """Image was not found."""

    def __init__(self, reference: str):
        super().__init__(
            f"Image not found: {reference}",
            code="IMAGE_NOT_FOUND",
            details={"reference": reference},
        )


class ValidationError(CheckImageError):
    """Validation failed."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConfigurationError(CheckImageError):
    """Invalid run configuration (config document, skip/include lists)."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details)


class PreconditionError(CheckImageError):
    """A selected check is missing a resource it needs to run."""

    def __init__(self, check: str, flag: str):
        super().__init__(
            f"--{flag} is required when the {check} check is enabled",
            code="PRECONDITION_ERROR",
            details={"check": check, "flag": flag},
        )
        self.check = check
        self.flag = flag


class PolicyFormatError(CheckImageError):
    """An inline policy value has an unsupported shape or cannot be materialized."""

    def __init__(self, message: str, flag: str | None = None):
        details = {"flag": flag} if flag else {}
        super().__init__(message, code="POLICY_FORMAT_ERROR", details=details)


class PolicyError(CheckImageError):
    """A policy document could not be loaded or is invalid."""

    def __init__(self, message: str, path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(message, code="POLICY_ERROR", details=details)


REFERENCE_FORBIDDEN_CHARS = "\"'<>|"


def validate_image_reference(reference: str) -> None:
    """Reject references that are empty, option-like or hold shell metacharacters.

    Raises:
        ValidationError: If the reference cannot name an image
    """
    if not reference:
        raise ValidationError("image reference cannot be empty", field="reference")
    if reference.startswith("-"):
        raise ValidationError(f"image reference {reference!r} looks like an option", field="reference")

    bad = next((char for char in REFERENCE_FORBIDDEN_CHARS if char in reference), None)
    if bad is not None:
        raise ValidationError(f"image reference contains invalid character {bad!r}", field="reference")
