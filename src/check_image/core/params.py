"""Mutable check parameters shared by every check in a run."""

from __future__ import annotations

from pydantic import BaseModel, Field, PrivateAttr

DEFAULT_MAX_AGE = 90
DEFAULT_MAX_SIZE = 500
DEFAULT_MAX_LAYERS = 20


class CheckParameters(BaseModel):
    """Values the checks read when they run.

    Each field maps to a command-line flag of the same name in kebab case
    (``max_age`` is ``--max-age``). The CLI records which flags were given
    explicitly so that configuration documents never override them.
    """

    model_config = {"validate_assignment": True}

    max_age: int = Field(default=DEFAULT_MAX_AGE, ge=0, description="Maximum age in days")
    max_size: int = Field(default=DEFAULT_MAX_SIZE, ge=0, description="Maximum size in megabytes")
    max_layers: int = Field(default=DEFAULT_MAX_LAYERS, ge=0, description="Maximum number of layers")
    allowed_ports: str = Field(default="", description="Comma-separated ports or @file")
    registry_policy: str = Field(default="", description="Registry policy file")
    secrets_policy: str = Field(default="", description="Secrets policy file")
    skip_env_vars: bool = Field(default=False, description="Skip environment variable scan")
    skip_files: bool = Field(default=False, description="Skip layer file scan")
    labels_policy: str = Field(default="", description="Labels policy file")
    allow_shell_form: bool = Field(default=False, description="Allow shell-form entrypoint")
    allowed_platforms: str = Field(default="", description="Comma-separated platforms or @file")

    _explicit: set[str] = PrivateAttr(default_factory=set)

    @staticmethod
    def attribute_for(flag: str) -> str:
        """Map a flag name ("max-age") to its attribute name ("max_age")."""
        return flag.lstrip("-").replace("-", "_")

    @classmethod
    def flag_names(cls) -> list[str]:
        """All parameter names in flag form."""
        return [name.replace("_", "-") for name in cls.model_fields]

    def mark_set(self, flag: str) -> None:
        """Record that a flag was given explicitly on the command line."""
        attr = self.attribute_for(flag)
        if attr not in type(self).model_fields:
            raise KeyError(f"unknown parameter: {flag}")
        self._explicit.add(attr)

    def was_set(self, flag: str) -> bool:
        """Whether a flag was given explicitly on the command line."""
        return self.attribute_for(flag) in self._explicit

    def get(self, flag: str) -> object:
        return getattr(self, self.attribute_for(flag))

    def set(self, flag: str, value: object) -> None:
        setattr(self, self.attribute_for(flag), value)
