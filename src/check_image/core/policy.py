"""Loading policy documents and allow lists used by the checks."""

from __future__ import annotations

import re
from typing import TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from check_image.models.policy import LabelsPolicy, RegistryPolicy, SecretsPolicy
from check_image.models.result import InvalidLabelDetail
from check_image.utils.errors import PolicyError
from check_image.utils.fileio import load_document

T = TypeVar("T", bound=BaseModel)


def _load_policy(path: str, model: type[T], kind: str) -> T:
    try:
        data = load_document(path)
    except ValueError as e:
        raise PolicyError(f"error reading {kind} policy: {e}", path=path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PolicyError(f"{kind} policy must be a mapping", path=path)

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise PolicyError(f"invalid {kind} policy: {_first_error(e)}", path=path) from e


def _first_error(error: PydanticValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "").removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


def load_registry_policy(path: str) -> RegistryPolicy:
    """Load a registry trust policy from a JSON/YAML file (or "-" for stdin).

    Raises:
        PolicyError: If the file cannot be read or is invalid
    """
    return _load_policy(path, RegistryPolicy, "registry")


def load_labels_policy(path: str) -> LabelsPolicy:
    """Load and validate a labels policy.

    Raises:
        PolicyError: If the file cannot be read or the policy is invalid
    """
    return _load_policy(path, LabelsPolicy, "labels")


def load_secrets_policy(path: str) -> SecretsPolicy:
    """Load a secrets policy, or the default policy when no path is given.

    Raises:
        PolicyError: If the file cannot be read or is invalid
    """
    if not path:
        return SecretsPolicy()
    return _load_policy(path, SecretsPolicy, "secrets")


class AllowedPortsFile(BaseModel):
    model_config = {"populate_by_name": True}

    allowed_ports: list[int] = Field(default_factory=list, alias="allowed-ports")


class AllowedPlatformsFile(BaseModel):
    model_config = {"populate_by_name": True}

    allowed_platforms: list[str] = Field(default_factory=list, alias="allowed-platforms")


def _load_allow_file(value: str, model: type[T], kind: str) -> T:
    path = value[1:]
    try:
        data = load_document(path)
    except ValueError as e:
        raise PolicyError(f"failed to read {kind} file: {e}", path=path) from e
    try:
        return model.model_validate(data or {})
    except PydanticValidationError as e:
        raise PolicyError(f"invalid {kind} file: {_first_error(e)}", path=path) from e


def parse_allowed_ports(value: str) -> list[int]:
    """Parse ``--allowed-ports``: a comma-separated list or ``@<file>``.

    Returns:
        The allowed ports (empty when no value is given)

    Raises:
        PolicyError: If the file cannot be read
        ValueError: If a list entry is not a port number
    """
    if not value:
        return []
    if value.startswith("@"):
        return _load_allow_file(value, AllowedPortsFile, "ports").allowed_ports

    ports = []
    for part in value.split(","):
        trimmed = part.strip()
        if not trimmed:
            continue
        try:
            ports.append(int(trimmed))
        except ValueError as e:
            raise ValueError(f"invalid port {trimmed!r}") from e
    return ports


def parse_allowed_platforms(value: str) -> list[str]:
    """Parse ``--allowed-platforms``: a comma-separated list or ``@<file>``.

    Raises:
        PolicyError: If the file cannot be read
        ValueError: If no value is given
    """
    if not value:
        raise ValueError("--allowed-platforms is required")
    if value.startswith("@"):
        return _load_allow_file(value, AllowedPlatformsFile, "platforms").allowed_platforms
    return [part.strip() for part in value.split(",") if part.strip()]


class LabelValidation(BaseModel):
    """Result of validating image labels against a policy."""

    passed: bool = True
    missing_labels: list[str] = Field(default_factory=list)
    invalid_labels: list[InvalidLabelDetail] = Field(default_factory=list)


def validate_labels(labels: dict[str, str], policy: LabelsPolicy) -> LabelValidation:
    """Check image labels against the policy's required labels.

    Every requirement is evaluated; the validation passes only when all
    required labels exist and meet their value or pattern requirement.
    """
    result = LabelValidation()

    for req in policy.required_labels:
        if req.name not in labels:
            result.passed = False
            result.missing_labels.append(req.name)
            continue

        actual = labels[req.name]
        if req.value:
            if actual != req.value:
                result.passed = False
                result.invalid_labels.append(
                    InvalidLabelDetail(
                        name=req.name,
                        actual_value=actual,
                        expected_value=req.value,
                        reason=f'label "{req.name}" has value "{actual}" but expected "{req.value}"',
                    )
                )
        elif req.pattern:
            if not re.search(req.pattern, actual):
                result.passed = False
                result.invalid_labels.append(
                    InvalidLabelDetail(
                        name=req.name,
                        actual_value=actual,
                        expected_pattern=req.pattern,
                        reason=(
                            f'label "{req.name}" value "{actual}" does not match '
                            f'pattern "{req.pattern}"'
                        ),
                    )
                )

    return result

