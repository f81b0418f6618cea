"""Unit tests for the Docker daemon and remote registry image sources."""

import io
import json
import tarfile
from unittest.mock import MagicMock

import httpx
import pytest

from check_image.core.image import ImageLoader
from check_image.registry.base import RegistryAuth, RegistryAuthError, RegistryError, RegistryNotFoundError
from check_image.registry.docker import DockerDaemon
from check_image.registry.remote import RemoteImage

MANIFEST = "application/vnd.oci.image.manifest.v1+json"
INDEX = "application/vnd.oci.image.index.v1+json"


def layer_blob(*names):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name in names:
            info = tarfile.TarInfo(name)
            info.size = 1
            tar.addfile(info, io.BytesIO(b"x"))
    return buffer.getvalue()


class FakeRegistry:
    """Serves one image from a mock transport, optionally behind a bearer token."""

    def __init__(self, image_config, require_token=False, use_index=False):
        self.require_token = require_token
        self.use_index = use_index
        self.requests = []
        self.blobs = {
            "sha256:config": json.dumps(image_config).encode(),
            "sha256:layer0": layer_blob("etc/passwd", "root/.ssh/id_rsa"),
        }
        self.manifest = {
            "schemaVersion": 2,
            "mediaType": MANIFEST,
            "config": {"digest": "sha256:config", "size": 10},
            "layers": [{"digest": "sha256:layer0", "size": 2048, "mediaType": "application/vnd.oci.image.layer.v1.tar+gzip"}],
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/token":
            return httpx.Response(200, json={"token": "t0ken"})
        if self.require_token and request.headers.get("Authorization") != "Bearer t0ken":
            return httpx.Response(
                401,
                headers={"WWW-Authenticate": 'Bearer realm="https://auth.example.com/token",service="registry"'},
            )

        if path == "/v2/org/app/manifests/1.0":
            if self.use_index:
                index = {
                    "manifests": [
                        {"digest": "sha256:arm", "platform": {"os": "linux", "architecture": "arm64"}},
                        {"digest": "sha256:amd", "platform": {"os": "linux", "architecture": "amd64"}},
                    ]
                }
                return httpx.Response(200, json=index, headers={"Content-Type": INDEX})
            return httpx.Response(200, json=self.manifest, headers={"Content-Type": MANIFEST})
        if path == "/v2/org/app/manifests/sha256:amd":
            return httpx.Response(200, json=self.manifest, headers={"Content-Type": MANIFEST})
        if path.startswith("/v2/org/app/blobs/"):
            digest = path.rsplit("/", 1)[-1]
            if digest in self.blobs:
                return httpx.Response(200, content=self.blobs[digest])
        return httpx.Response(404)


def remote_image(registry, reference="registry.example.com/org/app:1.0", auth=None):
    image = RemoteImage(reference, auth=auth)
    image._client = httpx.Client(transport=httpx.MockTransport(registry.handler))
    return image


class TestRemoteImage:
    """Tests for RemoteImage."""

    def test_registry_url(self):
        """Test registry URLs for Docker Hub, local and other registries."""
        assert RemoteImage("nginx").registry_url == "https://registry-1.docker.io"
        assert RemoteImage("localhost:5000/app").registry_url == "http://localhost:5000"
        assert RemoteImage("ghcr.io/org/app").registry_url == "https://ghcr.io"

    def test_config_and_layers(self, image_config):
        """Test reading the config and layer descriptors."""
        image = remote_image(FakeRegistry(image_config))
        assert image.get_config()["os"] == "linux"
        layers = image.get_layers()
        assert [str(layer.digest) for layer in layers] == ["sha256:layer0"]
        assert layers[0].size == 2048

    def test_layer_files(self, image_config):
        """Test listing the files of a layer blob."""
        image = remote_image(FakeRegistry(image_config))
        assert image.list_layer_files(0) == ["etc/passwd", "root/.ssh/id_rsa"]

    def test_bearer_token(self, image_config):
        """Test that a bearer token is fetched on a 401 challenge."""
        registry = FakeRegistry(image_config, require_token=True)
        image = remote_image(registry)

        assert image.get_config()["architecture"] == "amd64"
        token_request = next(r for r in registry.requests if r.url.path == "/token")
        assert token_request.url.params["scope"] == "repository:org/app:pull"

    def test_static_token(self, image_config):
        """Test that a configured token is used instead of the token endpoint."""
        registry = FakeRegistry(image_config, require_token=True)
        registry.blobs["sha256:config"] = json.dumps({"os": "linux"}).encode()
        image = remote_image(registry, auth=RegistryAuth(token="t0ken"))

        assert image.get_config() == {"os": "linux"}
        assert all(r.url.path != "/token" for r in registry.requests)

    def test_index_resolution(self, image_config):
        """Test that an image index resolves to the linux/amd64 manifest."""
        registry = FakeRegistry(image_config, use_index=True)
        image = remote_image(registry)

        assert len(image.get_layers()) == 1
        assert any(r.url.path.endswith("manifests/sha256:amd") for r in registry.requests)

    def test_not_found(self, image_config):
        """Test that an unknown tag is not found."""
        image = remote_image(FakeRegistry(image_config), reference="registry.example.com/org/app:2.0")
        with pytest.raises(RegistryNotFoundError):
            image.get_config()

    def test_auth_failure(self, image_config):
        """Test that a failing token endpoint is an authentication error."""
        registry = FakeRegistry(image_config, require_token=True)

        def handler(request):
            if request.url.path == "/token":
                return httpx.Response(401)
            return registry.handler(request)

        image = RemoteImage("registry.example.com/org/app:1.0")
        image._client = httpx.Client(transport=httpx.MockTransport(handler))
        with pytest.raises(RegistryAuthError):
            image.get_config()

    def test_close(self, image_config):
        """Test that closing releases the HTTP client."""
        image = remote_image(FakeRegistry(image_config))
        image.close()
        assert image._client is None


class TestRegistryAuth:
    """Tests for RegistryAuth."""

    def test_from_env_token(self, monkeypatch):
        """Test token auth from the environment."""
        monkeypatch.setenv("CHECK_IMAGE_REGISTRY_TOKEN", "abc")
        assert RegistryAuth.from_env() == RegistryAuth(token="abc")

    def test_from_env_basic(self, monkeypatch):
        """Test username and password auth from the environment."""
        monkeypatch.delenv("CHECK_IMAGE_REGISTRY_TOKEN", raising=False)
        monkeypatch.setenv("CHECK_IMAGE_USERNAME", "user")
        monkeypatch.setenv("CHECK_IMAGE_PASSWORD", "pass")
        assert RegistryAuth.from_env() == RegistryAuth(username="user", password="pass")

    def test_from_env_none(self, monkeypatch):
        """Test that no credentials give None."""
        for name in ("CHECK_IMAGE_REGISTRY_TOKEN", "CHECK_IMAGE_USERNAME", "CHECK_IMAGE_PASSWORD"):
            monkeypatch.delenv(name, raising=False)
        assert RegistryAuth.from_env() is None


class TestDockerDaemon:
    """Tests for DockerDaemon."""

    def test_image_exists(self):
        """Test image presence checks, with errors counting as absent."""
        daemon = DockerDaemon()
        daemon._client = MagicMock()
        assert daemon.image_exists("nginx:latest")

        daemon._client.images.get.side_effect = RuntimeError("connection refused")
        assert not daemon.image_exists("nginx:latest")

    def test_export(self, docker_archive):
        """Test exporting an image to an owned Docker archive."""
        daemon = DockerDaemon()
        daemon._client = MagicMock()
        daemon._client.images.get.return_value.save.return_value = iter([docker_archive.read_bytes()])

        image = daemon.export("example/app:1.0")
        assert image.get_config()["config"]["User"] == "app"

        image.close()
        assert not image.path.exists()

    def test_export_not_found(self):
        """Test that a missing image is not found."""
        daemon = DockerDaemon()
        daemon._client = MagicMock()
        daemon._client.images.get.side_effect = RuntimeError("No such image: app:1")
        with pytest.raises(RegistryNotFoundError):
            daemon.export("app:1")

    def test_export_failure(self):
        """Test that a failing export removes the partial archive."""
        daemon = DockerDaemon()
        daemon._client = MagicMock()
        daemon._client.images.get.return_value.save.side_effect = RuntimeError("disk full")
        with pytest.raises(RegistryError, match="error exporting the local image"):
            daemon.export("app:1")


class TestImageLoaderFallback:
    """Tests for daemon and registry selection in ImageLoader."""

    def test_prefers_daemon(self):
        """Test that images present locally are read from the daemon."""
        daemon = MagicMock(spec=DockerDaemon)
        daemon.image_exists.return_value = True
        daemon.export.return_value = MagicMock()

        with ImageLoader(daemon=daemon) as loader:
            image = loader.load("example/app:1.0")
            assert image.source is daemon.export.return_value

    def test_falls_back_to_registry(self):
        """Test that images missing locally are read from the registry."""
        daemon = MagicMock(spec=DockerDaemon)
        daemon.image_exists.return_value = False

        with ImageLoader(daemon=daemon) as loader:
            assert isinstance(loader.load("ghcr.io/org/app:1.0").source, RemoteImage)

    def test_falls_back_after_export_error(self):
        """Test that a failed export falls back to the registry."""
        daemon = MagicMock(spec=DockerDaemon)
        daemon.image_exists.return_value = True
        daemon.export.side_effect = RegistryError("daemon went away")

        with ImageLoader(daemon=daemon) as loader:
            assert isinstance(loader.load("ghcr.io/org/app:1.0").source, RemoteImage)
