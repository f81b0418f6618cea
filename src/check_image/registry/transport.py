"""Image reference parsing.

A reference is either a plain image name (``nginx:1.25``,
``ghcr.io/org/app@sha256:...``), resolved through the local Docker daemon
with a remote registry fallback, or a path prefixed by a transport:

    oci:/path/to/layout:tag
    oci:/path/to/layout@sha256:digest
    oci-archive:/path/to/image.tar:tag
    docker-archive:/path/to/image.tar:tag
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_REGISTRY = "index.docker.io"
DEFAULT_TAG = "latest"


class Transport(str, Enum):
    """How an image is accessed."""

    DAEMON_REGISTRY = "daemon-registry"
    OCI = "oci"
    OCI_ARCHIVE = "oci-archive"
    DOCKER_ARCHIVE = "docker-archive"


class ImageReference(BaseModel):
    """A parsed image reference with its transport."""

    model_config = {"frozen": True}

    transport: Transport = Field(description="Transport used to access the image")
    path: str = Field(description="File path, or the full reference for daemon-registry")
    tag: str | None = Field(default=None, description="Optional tag")
    digest: str | None = Field(default=None, description="Optional digest")

    @property
    def selector(self) -> str | None:
        """Digest if present, otherwise tag."""
        return self.digest or self.tag


class DockerReference(BaseModel):
    """Components of a registry image name."""

    model_config = {"frozen": True}

    registry: str = Field(default=DEFAULT_REGISTRY, description="Registry host")
    repository: str = Field(description="Repository path")
    tag: str | None = Field(default=None, description="Tag")
    digest: str | None = Field(default=None, description="Digest")

    @property
    def identifier(self) -> str:
        """Digest if present, otherwise tag (defaulting to latest)."""
        return self.digest or self.tag or DEFAULT_TAG


def parse_reference(reference: str) -> ImageReference:
    """Parse an image reference with an optional transport prefix.

    Args:
        reference: Reference as given on the command line

    Returns:
        The parsed reference

    Raises:
        ValueError: If the reference is empty
    """
    if not reference:
        raise ValueError("invalid reference format: empty reference")

    if ":" not in reference and "@" not in reference:
        reference += f":{DEFAULT_TAG}"

    prefix, _, remainder = reference.partition(":")
    try:
        transport = Transport(prefix)
    except ValueError:
        return ImageReference(transport=Transport.DAEMON_REGISTRY, path=reference)

    if transport is Transport.DAEMON_REGISTRY:
        return ImageReference(transport=Transport.DAEMON_REGISTRY, path=reference)

    if "@" in remainder:
        path, digest = remainder.split("@", 1)
        return ImageReference(transport=transport, path=path, digest=digest)

    separator = _find_path_tag_separator(remainder)
    if separator == -1:
        return ImageReference(transport=transport, path=remainder)
    return ImageReference(
        transport=transport,
        path=remainder[:separator],
        tag=remainder[separator + 1 :] or None,
    )


def _find_path_tag_separator(value: str) -> int:
    # A colon at index 1 is a Windows drive letter (C:\...), not a tag separator.
    for index, char in enumerate(value):
        if char == ":":
            if index == 1 and len(value) > 2:
                continue
            return index
    return -1


def parse_docker_reference(reference: str) -> DockerReference:
    """Split a registry image name into registry, repository, tag and digest.

    The first path component is a registry host when it contains a dot or a
    port, or is ``localhost``; otherwise the image lives on Docker Hub, where
    single-component names belong to the ``library`` namespace.

    Raises:
        ValueError: If the reference has no repository
    """
    digest = None
    if "@" in reference:
        reference, digest = reference.rsplit("@", 1)

    tag = None
    if ":" in reference:
        name, candidate = reference.rsplit(":", 1)
        if "/" not in candidate:
            reference, tag = name, candidate

    parts = reference.split("/")
    if len(parts) > 1 and ("." in parts[0] or ":" in parts[0] or parts[0] == "localhost"):
        registry = parts[0]
        repository = "/".join(parts[1:])
    else:
        registry = DEFAULT_REGISTRY
        repository = reference

    if registry == "docker.io":
        registry = DEFAULT_REGISTRY
    if not repository:
        raise ValueError(f"invalid reference format: {reference!r}")
    if registry == DEFAULT_REGISTRY and "/" not in repository:
        repository = f"library/{repository}"

    return DockerReference(registry=registry, repository=repository, tag=tag, digest=digest)


def image_registry(reference: str) -> str:
    """Get the registry host an image reference points to.

    Raises:
        ValueError: If the reference uses a file-based transport
    """
    parsed = parse_reference(reference)
    if parsed.transport is not Transport.DAEMON_REGISTRY:
        raise ValueError(f"registry not applicable for {parsed.transport.value} transport")
    return parse_docker_reference(parsed.path).registry
