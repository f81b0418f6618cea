"""Check outcome and aggregate report models.

All models serialize with kebab-case keys and omit unset optional fields,
matching the JSON documents emitted by ``--output json``.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, Field, model_validator


class ResultModel(BaseModel):
    """Base for serializable result models."""

    model_config = {"frozen": True, "populate_by_name": True}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with kebab-case keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AgeDetails(ResultModel):
    created_at: str = Field(alias="created-at")
    age_days: float = Field(alias="age-days")
    max_age: int = Field(alias="max-age")


class LayerSize(ResultModel):
    index: int
    bytes: int


class SizeDetails(ResultModel):
    total_bytes: int = Field(alias="total-bytes")
    total_mb: float = Field(alias="total-mb")
    max_size_mb: int = Field(alias="max-size-mb")
    layer_count: int = Field(alias="layer-count")
    max_layers: int = Field(alias="max-layers")
    layers: list[LayerSize] = Field(default_factory=list)


class PortsDetails(ResultModel):
    exposed_ports: list[int] = Field(default_factory=list, alias="exposed-ports")
    allowed_ports: list[int] | None = Field(default=None, alias="allowed-ports")
    unauthorized_ports: list[int] | None = Field(default=None, alias="unauthorized-ports")


class RegistryDetails(ResultModel):
    registry: str = ""
    skipped: bool | None = None


class RootUserDetails(ResultModel):
    user: str = ""


class EnvVarFinding(ResultModel):
    name: str
    description: str


class FileFinding(ResultModel):
    path: str
    layer_index: int = Field(alias="layer-index")
    description: str


class SecretsDetails(ResultModel):
    env_var_findings: list[EnvVarFinding] | None = Field(default=None, alias="env-var-findings")
    file_findings: list[FileFinding] | None = Field(default=None, alias="file-findings")
    total_findings: int = Field(alias="total-findings")
    env_var_count: int = Field(alias="env-var-count")
    file_count: int = Field(alias="file-count")


class HealthcheckDetails(ResultModel):
    has_healthcheck: bool = Field(alias="has-healthcheck")


class RequiredLabelCheck(ResultModel):
    name: str
    value: str | None = None
    pattern: str | None = None


class InvalidLabelDetail(ResultModel):
    name: str
    actual_value: str = Field(alias="actual-value")
    expected_value: str | None = Field(default=None, alias="expected-value")
    expected_pattern: str | None = Field(default=None, alias="expected-pattern")
    reason: str


class LabelsDetails(ResultModel):
    required_labels: list[RequiredLabelCheck] = Field(default_factory=list, alias="required-labels")
    actual_labels: dict[str, str] | None = Field(default=None, alias="actual-labels")
    missing_labels: list[str] | None = Field(default=None, alias="missing-labels")
    invalid_labels: list[InvalidLabelDetail] | None = Field(default=None, alias="invalid-labels")


class EntrypointDetails(ResultModel):
    has_entrypoint: bool = Field(alias="has-entrypoint")
    exec_form: bool | None = Field(default=None, alias="exec-form")
    shell_form_allowed: bool | None = Field(default=None, alias="shell-form-allowed")
    entrypoint: list[str] | None = None
    cmd: list[str] | None = None


class PlatformDetails(ResultModel):
    platform: str
    allowed_platforms: list[str] = Field(default_factory=list, alias="allowed-platforms")


CheckDetails = Union[
    AgeDetails,
    SizeDetails,
    PortsDetails,
    RegistryDetails,
    RootUserDetails,
    SecretsDetails,
    HealthcheckDetails,
    LabelsDetails,
    EntrypointDetails,
    PlatformDetails,
]


class CheckOutcome(ResultModel):
    """Result of running a single check against an image.

    An outcome either carries check details (the check ran and reached a
    verdict) or an error (the check could not run). Errored outcomes are
    built with :meth:`errored` and never carry details.
    """

    check: str = Field(description="Check name")
    image: str = Field(description="Image reference")
    passed: bool = Field(description="Whether the check passed")
    message: str = Field(default="", description="Human-readable verdict")
    details: CheckDetails | None = Field(default=None, description="Check-specific details")
    error: str | None = Field(default=None, description="Execution error, if the check failed to run")

    @model_validator(mode="after")
    def _check_error_shape(self) -> "CheckOutcome":
        if self.error:
            if self.passed:
                raise ValueError("an errored outcome cannot be marked as passed")
            if self.details is not None:
                raise ValueError("an errored outcome cannot carry details")
        return self

    @property
    def is_error(self) -> bool:
        """Whether the check failed to run."""
        return bool(self.error)

    @classmethod
    def errored(cls, check: str, image: str, error: BaseException | str) -> "CheckOutcome":
        """Create an outcome for a check that raised instead of producing a verdict."""
        text = str(error) or type(error).__name__
        return cls(
            check=check,
            image=image,
            passed=False,
            message=f"check failed with error: {text}",
            error=text,
        )


class Summary(ResultModel):
    """Counts for an aggregate run."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    errored: int = 0
    skipped: list[str] | None = Field(default=None, description="Checks that did not run")


class AllResult(ResultModel):
    """Aggregate report for a multi-check run."""

    image: str
    passed: bool
    checks: list[CheckOutcome] = Field(default_factory=list)
    summary: Summary = Field(default_factory=Summary)
