"""Images held by the local Docker daemon."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import docker
from docker.errors import DockerException, ImageNotFound

from check_image.registry.archive import DockerArchiveImage
from check_image.registry.base import RegistryError, RegistryNotFoundError
from check_image.utils.logging import get_logger

logger = get_logger("registry.docker")


class DockerDaemon:
    """Reads images through ``docker save``.

    An exported tarball is opened as a Docker archive, so daemon images are
    checked exactly like ``docker-archive:`` references.
    """

    def __init__(self) -> None:
        self._client: Any = None

    @property
    def client(self) -> Any:
        # Connecting is deferred so that file transports never touch the daemon.
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                raise RegistryError(f"cannot connect to the Docker daemon: {e}") from e
        return self._client

    def image_exists(self, reference: str) -> bool:
        """Whether the daemon has ``reference``; an unreachable daemon has nothing."""
        try:
            self.client.images.get(reference)
        except Exception as e:
            logger.debug("Image %s not available from the local daemon: %s", reference, e)
            return False
        return True

    def export(self, reference: str) -> DockerArchiveImage:
        """Save ``reference`` to a temporary archive owned by the returned image.

        Raises:
            RegistryNotFoundError: If the daemon does not have the image
            RegistryError: If the image cannot be retrieved or saved
        """
        try:
            image = self.client.images.get(reference)
        except RegistryError:
            raise
        except ImageNotFound as e:
            raise RegistryNotFoundError(reference) from e
        except Exception as e:
            if "no such image" in str(e).lower():
                raise RegistryNotFoundError(reference) from e
            raise RegistryError(f"error retrieving the local image: {e}") from e

        with tempfile.NamedTemporaryFile(prefix="check-image-", suffix=".tar", delete=False) as tmp:
            archive = Path(tmp.name)

        try:
            with archive.open("wb") as out:
                for chunk in image.save(named=True):
                    out.write(chunk)
        except Exception as e:
            archive.unlink(missing_ok=True)
            raise RegistryError(f"error exporting the local image: {e}") from e

        logger.debug("Exported %s from the local daemon to %s", reference, archive)
        return DockerArchiveImage(archive, owned=True)
