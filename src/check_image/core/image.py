"""ContainerImage class for image inspection."""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from check_image.models.image import ImageDigest, ImageMetadata, LayerInfo
from check_image.registry.archive import DockerArchiveImage, OCILayoutImage, extract_oci_archive
from check_image.registry.base import ImageSource, RegistryAuth, RegistryError
from check_image.registry.docker import DockerDaemon
from check_image.registry.remote import RemoteImage
from check_image.registry.transport import ImageReference, Transport, parse_docker_reference, parse_reference
from check_image.utils.errors import ImageNotFoundError
from check_image.utils.logging import get_logger

logger = get_logger("core.image")


class ContainerImage:
    """A container image opened through one of the supported transports.

    Example:
        with ImageLoader() as loader:
            image = loader.load("oci:/srv/layouts/app:1.0")
            print(image.metadata.platform)
            for index, files in image.layer_files():
                ...
    """

    def __init__(self, reference: str, parsed: ImageReference, source: ImageSource) -> None:
        """Initialize with an opened image source.

        Args:
            reference: Image reference as given by the user
            parsed: Parsed reference
            source: Source giving access to config and layers
        """
        self._reference = reference
        self._parsed = parsed
        self._source = source
        self._metadata: ImageMetadata | None = None

    @property
    def reference(self) -> str:
        return self._reference

    @property
    def transport(self) -> Transport:
        return self._parsed.transport

    @property
    def source(self) -> ImageSource:
        return self._source

    @property
    def metadata(self) -> ImageMetadata:
        """Image metadata, read from the source on first access."""
        if self._metadata is None:
            self._metadata = build_metadata(
                self._reference,
                self._parsed,
                self._source.get_config(),
                self._source.get_layers(),
            )
        return self._metadata

    def layer_files(self) -> Iterator[tuple[int, list[str]]]:
        """Yield the zero-based index and file listing of each layer."""
        for index in range(len(self.metadata.layers)):
            yield index, self._source.list_layer_files(index)

    def close(self) -> None:
        self._source.close()


def build_metadata(
    reference: str,
    parsed: ImageReference,
    config: dict[str, Any],
    layers: list[LayerInfo],
) -> ImageMetadata:
    """Build image metadata from an OCI image configuration document.

    Args:
        reference: Image reference as given by the user
        parsed: Parsed reference
        config: Image configuration document
        layers: Layer descriptors

    Returns:
        The image metadata
    """
    container_config = config.get("config") or {}

    env = {}
    for item in container_config.get("Env") or []:
        key, _, value = item.partition("=")
        env[key] = value

    exposed_ports = []
    for port_spec in (container_config.get("ExposedPorts") or {}).keys():
        port_match = re.match(r"(\d+)", port_spec)
        if port_match:
            exposed_ports.append(int(port_match.group(1)))

    healthcheck = None
    if container_config.get("Healthcheck"):
        healthcheck = container_config["Healthcheck"].get("Test") or None

    registry = repository = tag = None
    digest = None
    if parsed.transport is Transport.DAEMON_REGISTRY:
        docker_ref = parse_docker_reference(parsed.path)
        registry, repository, tag = docker_ref.registry, docker_ref.repository, docker_ref.tag
        if docker_ref.digest:
            digest = ImageDigest.from_string(docker_ref.digest)
    else:
        tag = parsed.tag
        if parsed.digest:
            digest = ImageDigest.from_string(parsed.digest)

    return ImageMetadata(
        reference=reference,
        transport=parsed.transport.value,
        registry=registry,
        repository=repository,
        tag=tag,
        digest=digest,
        created=parse_timestamp(config.get("created")),
        architecture=config.get("architecture") or "",
        os=config.get("os") or "",
        variant=config.get("variant") or "",
        user=container_config.get("User") or "",
        env=env,
        exposed_ports=sorted(set(exposed_ports)),
        labels=container_config.get("Labels") or {},
        entrypoint=container_config.get("Entrypoint") or [],
        cmd=container_config.get("Cmd") or [],
        healthcheck=healthcheck,
        layers=layers,
    )


def parse_timestamp(timestamp: str | None) -> datetime | None:
    """Parse an image creation timestamp.

    Fractional seconds are truncated to microseconds. Missing, unparseable
    and zero (year 1) timestamps give None.
    """
    if not timestamp:
        return None

    try:
        timestamp = timestamp.replace("Z", "+00:00")
        if "." in timestamp:
            # Truncate fractional seconds to 6 digits
            head, frac_and_tz = timestamp.split(".", 1)
            tz_start = next((i for i, c in enumerate(frac_and_tz) if c in "+-"), len(frac_and_tz))
            timestamp = f"{head}.{frac_and_tz[:tz_start][:6]}{frac_and_tz[tz_start:]}"
        created = datetime.fromisoformat(timestamp)
    except (ValueError, TypeError):
        logger.debug("Unparseable creation timestamp: %r", timestamp)
        return None

    if created.year <= 1:
        return None
    return created


class ImageLoader:
    """Opens images by reference and caches them for the lifetime of a run.

    Plain references are read from the local Docker daemon when present
    there, and from the remote registry otherwise.
    """

    def __init__(self, daemon: DockerDaemon | None = None, auth: RegistryAuth | None = None) -> None:
        self._daemon = daemon or DockerDaemon()
        self._auth = auth
        self._images: dict[str, ContainerImage] = {}

    def load(self, reference: str) -> ContainerImage:
        """Open an image, reusing it when already loaded.

        Raises:
            ValueError: If the reference cannot be parsed
            ImageNotFoundError: If a layout or archive path does not exist
            RegistryError: If the image cannot be opened
        """
        if reference not in self._images:
            parsed = parse_reference(reference)
            logger.debug("Opening %s via %s transport", reference, parsed.transport.value)
            self._images[reference] = ContainerImage(reference, parsed, self._open(parsed))
        return self._images[reference]

    def _open(self, parsed: ImageReference) -> ImageSource:
        if parsed.transport is not Transport.DAEMON_REGISTRY and not Path(parsed.path).exists():
            raise ImageNotFoundError(parsed.path)

        if parsed.transport is Transport.OCI:
            if not parsed.selector:
                raise RegistryError("oci transport requires tag or digest")
            return OCILayoutImage(parsed.path, parsed.selector)

        if parsed.transport is Transport.OCI_ARCHIVE:
            if not parsed.selector:
                raise RegistryError("oci-archive transport requires tag or digest")
            temp_dir = extract_oci_archive(parsed.path)
            return OCILayoutImage(temp_dir, parsed.selector, cleanup_dir=temp_dir)

        if parsed.transport is Transport.DOCKER_ARCHIVE:
            return DockerArchiveImage(parsed.path, tag=parsed.tag)

        if self._daemon.image_exists(parsed.path):
            try:
                return self._daemon.export(parsed.path)
            except RegistryError as e:
                logger.debug("Falling back to the remote registry: %s", e)
        return RemoteImage(parsed.path, auth=self._auth)

    def close(self) -> None:
        """Release every opened image."""
        images, self._images = self._images, {}
        for image in images.values():
            image.close()

    def __enter__(self) -> "ImageLoader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
