"""Configuration document models for the ``all`` command.

A configuration document has one optional section per check under
``checks``. A present section, even an empty one, enables its check when no
``--include`` list is given.

Example (YAML)::

    checks:
      age:
        max-age: 30
      root-user: {}
      registry:
        registry-policy:
          trusted-registries: [docker.io, ghcr.io]
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, Field, field_validator


class SectionConfig(BaseModel):
    """Base for per-check configuration sections."""

    model_config = {"populate_by_name": True, "extra": "ignore"}


class AgeCheckConfig(SectionConfig):
    max_age: int | None = Field(default=None, ge=0, alias="max-age")


class SizeCheckConfig(SectionConfig):
    max_size: int | None = Field(default=None, ge=0, alias="max-size")
    max_layers: int | None = Field(default=None, ge=0, alias="max-layers")


class PortsCheckConfig(SectionConfig):
    # A list of ports or a comma-joined string.
    allowed_ports: Any = Field(default=None, alias="allowed-ports")


class RegistryCheckConfig(SectionConfig):
    # A policy file path or an inline policy object.
    registry_policy: Any = Field(default=None, alias="registry-policy")


class RootUserCheckConfig(SectionConfig):
    pass


class SecretsCheckConfig(SectionConfig):
    secrets_policy: Any = Field(default=None, alias="secrets-policy")
    skip_env_vars: bool | None = Field(default=None, alias="skip-env-vars")
    skip_files: bool | None = Field(default=None, alias="skip-files")


class HealthcheckCheckConfig(SectionConfig):
    pass


class LabelsCheckConfig(SectionConfig):
    labels_policy: Any = Field(default=None, alias="labels-policy")


class EntrypointCheckConfig(SectionConfig):
    allow_shell_form: bool | None = Field(default=None, alias="allow-shell-form")


class PlatformCheckConfig(SectionConfig):
    allowed_platforms: Any = Field(default=None, alias="allowed-platforms")


class ChecksConfig(SectionConfig):
    """Per-check sections, keyed by check name."""

    age: AgeCheckConfig | None = None
    size: SizeCheckConfig | None = None
    ports: PortsCheckConfig | None = None
    registry: RegistryCheckConfig | None = None
    root_user: RootUserCheckConfig | None = Field(default=None, alias="root-user")
    secrets: SecretsCheckConfig | None = None
    healthcheck: HealthcheckCheckConfig | None = None
    labels: LabelsCheckConfig | None = None
    entrypoint: EntrypointCheckConfig | None = None
    platform: PlatformCheckConfig | None = None


class ConfigDocument(SectionConfig):
    """Top-level configuration document."""

    checks: ChecksConfig = Field(default_factory=ChecksConfig)

    @field_validator("checks", mode="before")
    @classmethod
    def _null_checks(cls, value: Any) -> Any:
        # "checks:" with nothing under it selects no checks
        return {} if value is None else value

    def section(self, name: str) -> SectionConfig | None:
        """Get the section for a check name ("root-user" style), or None if absent."""
        return getattr(self.checks, name.replace("-", "_"), None)

    def has_section(self, name: str) -> bool:
        """Whether the document enables the named check."""
        return self.section(name) is not None


class PolicyPath(BaseModel):
    """A policy supplied as a path to a policy file."""

    model_config = {"frozen": True}

    kind: Literal["path"] = "path"
    path: str


class InlinePolicy(BaseModel):
    """A policy supplied inline as a structured object."""

    model_config = {"frozen": True}

    kind: Literal["inline"] = "inline"
    document: dict[str, Any]


PolicySource = Union[PolicyPath, InlinePolicy]
