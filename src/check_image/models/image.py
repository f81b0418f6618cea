"""Models describing an opened container image."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ImageDigest(BaseModel):
    """An ``algorithm:hex`` content digest."""

    model_config = {"frozen": True}

    algorithm: str = "sha256"
    hash: str

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hash}"

    @classmethod
    def from_string(cls, value: str) -> ImageDigest:
        algorithm, sep, hex_part = value.partition(":")
        if not sep:
            return cls(hash=value)
        return cls(algorithm=algorithm, hash=hex_part)


class LayerInfo(BaseModel):
    """One layer descriptor; ``size`` is the stored (possibly compressed) size."""

    model_config = {"frozen": True}

    digest: ImageDigest
    size: int = 0
    media_type: str = ""


class ImageMetadata(BaseModel):
    """What the checks read from an image configuration.

    ``registry``, ``repository`` and ``tag`` come from the reference; they
    are only known for daemon and registry images, except ``tag`` which file
    transports may also carry.
    """

    model_config = {"frozen": True}

    reference: str
    transport: str = "daemon-registry"
    registry: str | None = None
    repository: str | None = None
    tag: str | None = None
    digest: ImageDigest | None = None

    created: datetime | None = None
    os: str = ""
    architecture: str = ""
    variant: str = ""

    user: str = ""
    env: dict[str, str] = Field(default_factory=dict)
    exposed_ports: list[int] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    entrypoint: list[str] = Field(default_factory=list)
    cmd: list[str] = Field(default_factory=list)
    # Healthcheck "Test" array, e.g. ["CMD-SHELL", "curl -f localhost"] or ["NONE"]
    healthcheck: list[str] | None = None

    layers: list[LayerInfo] = Field(default_factory=list)

    @property
    def platform(self) -> str:
        """``os/architecture`` with ``/variant`` appended when set."""
        parts = [self.os, self.architecture]
        if self.variant:
            parts.append(self.variant)
        return "/".join(parts)
