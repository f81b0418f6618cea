"""Credentials, errors and the protocol shared by all image sources."""

from __future__ import annotations

import os
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from check_image.models.image import LayerInfo

ENV_TOKEN = "CHECK_IMAGE_REGISTRY_TOKEN"
ENV_USERNAME = "CHECK_IMAGE_USERNAME"
ENV_PASSWORD = "CHECK_IMAGE_PASSWORD"


class RegistryAuth(BaseModel):
    """Credentials sent to a remote registry.

    A static bearer ``token`` wins over ``username``/``password``, which are
    exchanged at the registry's token endpoint.
    """

    model_config = {"frozen": True}

    username: str | None = None
    password: str | None = None
    token: str | None = None

    @classmethod
    def from_env(cls) -> RegistryAuth | None:
        """Read credentials from the CHECK_IMAGE_* environment variables."""
        if token := os.environ.get(ENV_TOKEN):
            return cls(token=token)

        username = os.environ.get(ENV_USERNAME)
        password = os.environ.get(ENV_PASSWORD)
        if not (username and password):
            return None
        return cls(username=username, password=password)


class RegistryError(Exception):
    """An image source could not be opened or read."""


class RegistryAuthError(RegistryError):
    """The registry rejected our credentials or token request."""


class RegistryNotFoundError(RegistryError):
    """An image, manifest, blob or archive does not exist."""

    def __init__(self, what: str) -> None:
        super().__init__(f"{what} not found")
        self.what = what


@runtime_checkable
class ImageSource(Protocol):
    """One opened container image.

    Sources may own temporary files (daemon exports, extracted OCI archives)
    which ``close`` removes.
    """

    def get_config(self) -> dict[str, Any]:
        """Return the image configuration document as parsed JSON."""
        ...

    def get_layers(self) -> list[LayerInfo]:
        """Return layer descriptors, lowest layer first."""
        ...

    def list_layer_files(self, index: int) -> list[str]:
        """Return the non-directory paths stored in layer ``index``."""
        ...

    def close(self) -> None:
        ...
