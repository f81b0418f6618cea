"""Policy document models for the registry, labels and secrets checks."""

import re

from pydantic import BaseModel, Field, model_validator

# Case-insensitive keywords that mark an environment variable as sensitive.
DEFAULT_ENV_PATTERNS: tuple[str, ...] = (
    "password",
    "passwd",
    "secret",
    "token",
    "key",
    "credential",
    "auth",
    "api",
)

# Variables that match the keywords above but do not hold secrets.
DEFAULT_EXCLUDED_ENV_VARS: tuple[str, ...] = (
    "PUBLIC_KEY",
    "SSH_PUBLIC_KEY",
)

# File name patterns (glob) mapped to a description of what they hold.
DEFAULT_FILE_PATTERNS: dict[str, str] = {
    # SSH keys
    "id_rsa": "SSH private key",
    "id_dsa": "SSH private key",
    "id_ecdsa": "SSH private key",
    "id_ed25519": "SSH private key",
    "*.ppk": "PuTTY private key",
    # Cloud credentials
    ".aws/credentials": "AWS credentials",
    ".kube/config": "Kubernetes config",
    # Keys
    "*.key": "private key file",
    # Password files
    "/etc/shadow": "shadow password file",
    ".pgpass": "PostgreSQL password file",
    ".my.cnf": "MySQL credentials",
    ".netrc": "authentication credentials",
    # Others
    ".npmrc": "NPM credentials",
    ".git-credentials": "Git credentials",
    "secrets.json": "secrets file",
    "secrets.yaml": "secrets file",
    "secrets.yml": "secrets file",
    "wallet.dat": "cryptocurrency wallet",
}


class RegistryPolicy(BaseModel):
    """Trusted and excluded registries."""

    model_config = {"frozen": True, "populate_by_name": True}

    trusted_registries: list[str] = Field(default_factory=list, alias="trusted-registries")
    excluded_registries: list[str] = Field(default_factory=list, alias="excluded-registries")

    def is_registry_allowed(self, registry: str) -> bool:
        """Check whether a registry is trusted.

        Exclusion always wins. A "*" entry in the trusted list trusts every
        registry that is not excluded.
        """
        if registry in self.excluded_registries:
            return False
        if "*" in self.trusted_registries:
            return True
        return registry in self.trusted_registries


class LabelRequirement(BaseModel):
    """A single required label.

    With neither value nor pattern only existence is checked. ``value``
    requires an exact (case-sensitive) match and ``pattern`` a regex match.
    """

    model_config = {"frozen": True}

    name: str = ""
    value: str | None = None
    pattern: str | None = None


class LabelsPolicy(BaseModel):
    """Required labels for an image."""

    model_config = {"frozen": True, "populate_by_name": True}

    required_labels: list[LabelRequirement] = Field(default_factory=list, alias="required-labels")

    @model_validator(mode="after")
    def _validate_requirements(self) -> "LabelsPolicy":
        if not self.required_labels:
            raise ValueError("policy must specify at least one required label")

        seen: set[str] = set()
        for index, req in enumerate(self.required_labels):
            if not req.name:
                raise ValueError(f"label requirement at index {index} is missing a name")
            if req.name in seen:
                raise ValueError(f"duplicate label name {req.name!r} in policy")
            seen.add(req.name)

            if req.value and req.pattern:
                raise ValueError(
                    f"label {req.name!r} cannot have both value and pattern requirements"
                )
            if req.pattern:
                try:
                    re.compile(req.pattern)
                except re.error as e:
                    raise ValueError(f"invalid pattern for label {req.name!r}: {e}") from e
        return self


class SecretsPolicy(BaseModel):
    """Configuration for secrets detection."""

    model_config = {"populate_by_name": True}

    check_env_vars: bool = Field(default=True, alias="check-env-vars")
    check_files: bool = Field(default=True, alias="check-files")
    excluded_paths: list[str] = Field(default_factory=list, alias="excluded-paths")
    excluded_env_vars: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_ENV_VARS),
        alias="excluded-env-vars",
    )
    custom_env_patterns: list[str] = Field(default_factory=list, alias="custom-env-patterns")
    custom_file_patterns: list[str] = Field(default_factory=list, alias="custom-file-patterns")

    @model_validator(mode="after")
    def _default_exclusions(self) -> "SecretsPolicy":
        if not self.excluded_env_vars:
            self.excluded_env_vars = list(DEFAULT_EXCLUDED_ENV_VARS)
        return self

    @property
    def env_patterns(self) -> list[str]:
        """Default plus custom environment variable patterns."""
        return [*DEFAULT_ENV_PATTERNS, *self.custom_env_patterns]

    @property
    def file_patterns(self) -> list[str]:
        """Default plus custom file patterns."""
        return [*DEFAULT_FILE_PATTERNS, *self.custom_file_patterns]
