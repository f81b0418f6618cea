"""Images pulled from a remote OCI distribution registry."""

from __future__ import annotations

import tempfile
from typing import Any

import httpx

from check_image.models.image import LayerInfo
from check_image.registry.archive import is_index, layers_from_manifest, list_tar_files, select_platform_manifest
from check_image.registry.base import RegistryAuth, RegistryAuthError, RegistryError, RegistryNotFoundError
from check_image.registry.transport import DEFAULT_REGISTRY, DockerReference, parse_docker_reference
from check_image.utils.logging import get_logger

logger = get_logger("registry.remote")

DOCKER_HUB_URL = "https://registry-1.docker.io"

IMAGE_MEDIA_TYPES = (
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.docker.distribution.manifest.v2+json",
)
INDEX_MEDIA_TYPES = (
    "application/vnd.oci.image.index.v1+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
)


def parse_challenge(header: str) -> dict[str, str]:
    """Split a ``Bearer realm="...",service="..."`` challenge into its fields."""
    _, _, fields = header.partition(" ")
    challenge = {}
    for field in fields.split(","):
        name, sep, value = field.partition("=")
        if sep:
            challenge[name.strip().lower()] = value.strip().strip('"')
    return challenge


class RemoteImage:
    """An image read over the registry HTTP API.

    Manifests and the config blob are fetched lazily and cached. A 401 with a
    bearer challenge triggers one token request for the repository's pull
    scope, using basic credentials when configured and anonymously otherwise.
    """

    def __init__(
        self,
        reference: str,
        auth: RegistryAuth | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
    ) -> None:
        self._reference = reference
        self._parsed: DockerReference = parse_docker_reference(reference)
        self._auth = auth or RegistryAuth.from_env()
        self._timeout = timeout
        self._max_retries = max_retries
        self._token: str | None = self._auth.token if self._auth else None
        self._client: httpx.Client | None = None
        self._manifest: dict[str, Any] | None = None
        self._config: dict[str, Any] | None = None

    @property
    def registry_url(self) -> str:
        host = self._parsed.registry
        if host in (DEFAULT_REGISTRY, "registry-1.docker.io"):
            return DOCKER_HUB_URL
        scheme = "http" if host.startswith(("localhost", "127.0.0.1")) else "https"
        return f"{scheme}://{host}"

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._timeout,
                transport=httpx.HTTPTransport(retries=self._max_retries),
                follow_redirects=True,
            )
        return self._client

    def _url(self, path: str) -> str:
        return f"{self.registry_url}/v2/{self._parsed.repository}/{path}"

    def _basic_auth(self) -> tuple[str, str] | None:
        if self._auth and self._auth.username and self._auth.password:
            return (self._auth.username, self._auth.password)
        return None

    def _fetch_token(self, challenge: str) -> str:
        fields = parse_challenge(challenge)
        realm = fields.get("realm")
        if not realm:
            raise RegistryAuthError(f"bearer challenge without a realm: {challenge!r}")

        query = {"scope": f"repository:{self._parsed.repository}:pull"}
        if "service" in fields:
            query["service"] = fields["service"]

        logger.debug("Requesting a pull token from %s", realm)
        response = self.client.get(realm, params=query, auth=self._basic_auth())
        if response.status_code in (401, 403):
            raise RegistryAuthError(f"token request to {realm} was rejected")
        if response.status_code != 200:
            raise RegistryError(f"token request to {realm} returned HTTP {response.status_code}")

        body = response.json()
        return body.get("token") or body.get("access_token", "")

    def _headers(self, accept: tuple[str, ...] = ()) -> dict[str, str]:
        headers = {}
        if accept:
            headers["Accept"] = ", ".join(accept)
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(self, path: str, accept: tuple[str, ...] = ()) -> httpx.Response:
        url = self._url(path)
        try:
            response = self.client.get(url, headers=self._headers(accept))
            if response.status_code == 401:
                challenge = response.headers.get("www-authenticate", "")
                if challenge.lower().startswith("bearer"):
                    self._token = self._fetch_token(challenge)
                    response = self.client.get(url, headers=self._headers(accept))
                elif self._basic_auth():
                    response = self.client.get(url, headers=self._headers(accept), auth=self._basic_auth())
        except httpx.HTTPError as e:
            raise RegistryError(f"error retrieving the remote image: {e}") from e

        if response.status_code == 404:
            raise RegistryNotFoundError(self._reference)
        if response.status_code in (401, 403):
            raise RegistryAuthError(f"access to {self._reference} was denied")
        if response.status_code != 200:
            raise RegistryError(f"GET {url} returned HTTP {response.status_code}")
        return response

    def _get_manifest(self) -> dict[str, Any]:
        if self._manifest is None:
            response = self._get(
                f"manifests/{self._parsed.identifier}",
                accept=IMAGE_MEDIA_TYPES + INDEX_MEDIA_TYPES,
            )
            manifest = response.json()
            media_type = response.headers.get("content-type", "").split(";")[0]
            if is_index(manifest, media_type):
                digest = select_platform_manifest(manifest)["digest"]
                logger.debug("Resolved image index of %s to manifest %s", self._reference, digest)
                manifest = self._get(f"manifests/{digest}", accept=IMAGE_MEDIA_TYPES).json()
            self._manifest = manifest
        return self._manifest

    def get_config(self) -> dict[str, Any]:
        if self._config is None:
            digest = self._get_manifest().get("config", {}).get("digest")
            if not digest:
                raise RegistryError("image manifest has no config descriptor")
            self._config = self._get(f"blobs/{digest}").json()
        return self._config

    def get_layers(self) -> list[LayerInfo]:
        return layers_from_manifest(self._get_manifest())

    def list_layer_files(self, index: int) -> list[str]:
        layer = self.get_layers()[index]

        # Layers can be large; spool to disk rather than memory.
        with tempfile.TemporaryFile() as blob:
            try:
                with self.client.stream("GET", self._url(f"blobs/{layer.digest}"), headers=self._headers()) as response:
                    if response.status_code == 404:
                        raise RegistryNotFoundError(f"layer {layer.digest}")
                    if response.status_code != 200:
                        raise RegistryError(f"pulling layer {layer.digest} returned HTTP {response.status_code}")
                    for chunk in response.iter_bytes():
                        blob.write(chunk)
            except httpx.HTTPError as e:
                raise RegistryError(f"error pulling layer {layer.digest}: {e}") from e
            blob.seek(0)
            return list_tar_files(blob)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
