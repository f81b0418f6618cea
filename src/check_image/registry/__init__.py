"""Container image sources."""

from check_image.registry.archive import DockerArchiveImage, OCILayoutImage, extract_oci_archive
from check_image.registry.base import (
    ImageSource,
    RegistryAuth,
    RegistryAuthError,
    RegistryError,
    RegistryNotFoundError,
)
from check_image.registry.docker import DockerDaemon
from check_image.registry.remote import RemoteImage
from check_image.registry.transport import ImageReference, Transport, image_registry, parse_reference

__all__ = [
    "ImageSource",
    "RegistryAuth",
    "RegistryAuthError",
    "RegistryError",
    "RegistryNotFoundError",
    "DockerArchiveImage",
    "OCILayoutImage",
    "extract_oci_archive",
    "DockerDaemon",
    "RemoteImage",
    "ImageReference",
    "Transport",
    "image_registry",
    "parse_reference",
]
