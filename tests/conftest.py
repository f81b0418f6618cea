"""Shared test fixtures for check-image tests."""

import hashlib
import io
import json
import logging
import tarfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from check_image.core.image import ContainerImage
from check_image.core.params import CheckParameters
from check_image.models.image import ImageDigest, LayerInfo
from check_image.registry.base import RegistryError
from check_image.registry.transport import parse_reference


class FakeSource:
    """In-memory image source.

    ``layer_files`` holds one file listing per layer; an exception instance
    in place of a listing is raised when that layer is read.
    """

    def __init__(
        self,
        config: dict[str, Any],
        layer_sizes: list[int] | None = None,
        layer_files: list[Any] | None = None,
    ):
        self.config = config
        self.layer_sizes = layer_sizes if layer_sizes is not None else [1000]
        self.layer_files = layer_files if layer_files is not None else [[] for _ in self.layer_sizes]
        self.closed = False

    def get_config(self) -> dict[str, Any]:
        return self.config

    def get_layers(self) -> list[LayerInfo]:
        return [
            LayerInfo(digest=ImageDigest(hash=f"layer{i}"), size=size)
            for i, size in enumerate(self.layer_sizes)
        ]

    def list_layer_files(self, index: int) -> list[str]:
        files = self.layer_files[index]
        if isinstance(files, Exception):
            raise files
        return files

    def close(self) -> None:
        self.closed = True


class FakeLoader:
    """Image loader serving FakeSource images for any reference."""

    def __init__(self, source: FakeSource):
        self.source = source
        self.loaded: list[str] = []

    def load(self, reference: str) -> ContainerImage:
        self.loaded.append(reference)
        return ContainerImage(reference, parse_reference(reference), self.source)

    def close(self) -> None:
        self.source.close()


def make_image_config(**overrides: Any) -> dict[str, Any]:
    """An image configuration document for an image passing every check."""
    created = datetime.now(timezone.utc) - timedelta(days=10)
    container_config = {
        "User": "app",
        "Env": ["PATH=/usr/local/bin:/usr/bin:/bin", "APP_ENV=production"],
        "ExposedPorts": {"8080/tcp": {}},
        "Labels": {
            "org.opencontainers.image.version": "1.4.2",
            "maintainer": "platform-team",
        },
        "Entrypoint": ["/app/server"],
        "Cmd": ["--listen", ":8080"],
        "Healthcheck": {"Test": ["CMD", "/app/server", "--health"]},
    }
    container_config.update(overrides.pop("container", {}))
    config = {
        "created": created.isoformat(),
        "architecture": "amd64",
        "os": "linux",
        "config": container_config,
    }
    config.update(overrides)
    return config


def _tar_bytes(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def _add_bytes(tar: tarfile.TarFile, name: str, content: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(content)
    tar.addfile(info, io.BytesIO(content))


def build_docker_archive(
    path: Path,
    config: dict[str, Any],
    layers: list[dict[str, bytes]],
    repo_tags: list[str] | None = None,
) -> Path:
    """Write a ``docker save`` style tarball."""
    config_bytes = json.dumps(config).encode()
    config_name = hashlib.sha256(config_bytes).hexdigest() + ".json"
    layer_names = []
    with tarfile.open(path, "w") as tar:
        _add_bytes(tar, config_name, config_bytes)
        for index, files in enumerate(layers):
            name = f"layer{index}/layer.tar"
            _add_bytes(tar, name, _tar_bytes(files))
            layer_names.append(name)
        manifest = [
            {
                "Config": config_name,
                "RepoTags": repo_tags or ["example/app:1.0"],
                "Layers": layer_names,
            }
        ]
        _add_bytes(tar, "manifest.json", json.dumps(manifest).encode())
    return path


def build_oci_layout(
    root: Path,
    config: dict[str, Any],
    layers: list[dict[str, bytes]],
    tag: str = "1.0",
) -> Path:
    """Write an OCI image layout directory with one tagged manifest."""
    blobs = root / "blobs" / "sha256"
    blobs.mkdir(parents=True)

    def write_blob(content: bytes) -> str:
        digest = hashlib.sha256(content).hexdigest()
        (blobs / digest).write_bytes(content)
        return f"sha256:{digest}"

    layer_descriptors = []
    for files in layers:
        content = _tar_bytes(files)
        layer_descriptors.append(
            {
                "mediaType": "application/vnd.oci.image.layer.v1.tar",
                "digest": write_blob(content),
                "size": len(content),
            }
        )

    config_bytes = json.dumps(config).encode()
    manifest = {
        "schemaVersion": 2,
        "mediaType": "application/vnd.oci.image.manifest.v1+json",
        "config": {
            "mediaType": "application/vnd.oci.image.config.v1+json",
            "digest": write_blob(config_bytes),
            "size": len(config_bytes),
        },
        "layers": layer_descriptors,
    }
    manifest_bytes = json.dumps(manifest).encode()
    index = {
        "schemaVersion": 2,
        "manifests": [
            {
                "mediaType": "application/vnd.oci.image.manifest.v1+json",
                "digest": write_blob(manifest_bytes),
                "size": len(manifest_bytes),
                "annotations": {"org.opencontainers.image.ref.name": tag},
            }
        ],
    }
    (root / "index.json").write_text(json.dumps(index))
    (root / "oci-layout").write_text(json.dumps({"imageLayoutVersion": "1.0.0"}))
    return root


@pytest.fixture(autouse=True)
def reset_check_image_logging():
    """Undo logging configuration done by CLI invocations."""
    yield
    logger = logging.getLogger("check_image")
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def image_config() -> dict[str, Any]:
    """Configuration document of an image that passes every check."""
    return make_image_config()


@pytest.fixture
def fake_source(image_config: dict[str, Any]) -> FakeSource:
    """In-memory source for the passing image."""
    return FakeSource(
        image_config,
        layer_sizes=[2 * 1024 * 1024, 3 * 1024 * 1024],
        layer_files=[["bin/sh", "etc/hostname"], ["app/server", "app/config.toml"]],
    )


@pytest.fixture
def fake_loader(fake_source: FakeSource) -> FakeLoader:
    """Loader serving the passing image."""
    return FakeLoader(fake_source)


@pytest.fixture
def params() -> CheckParameters:
    """Default check parameters."""
    return CheckParameters()


@pytest.fixture
def clean_layers() -> list[dict[str, bytes]]:
    """Layer contents without sensitive files."""
    return [
        {"etc/hostname": b"app\n", "bin/sh": b"\x7fELF"},
        {"app/server": b"\x7fELF", "app/config.toml": b"listen = ':8080'\n"},
    ]


@pytest.fixture
def docker_archive(tmp_path: Path, image_config: dict[str, Any], clean_layers) -> Path:
    """Docker archive of the passing image."""
    return build_docker_archive(tmp_path / "image.tar", image_config, clean_layers)


@pytest.fixture
def oci_layout(tmp_path: Path, image_config: dict[str, Any], clean_layers) -> Path:
    """OCI layout of the passing image, tagged 1.0."""
    return build_oci_layout(tmp_path / "layout", image_config, clean_layers)


@pytest.fixture
def unreadable_layer() -> RegistryError:
    """Error raised by a layer that cannot be read."""
    return RegistryError("error reading layer: unexpected end of data")


@pytest.fixture
def make_config():
    """Factory for image configuration documents; see make_image_config."""
    return make_image_config


@pytest.fixture
def make_loader():
    """Factory for loaders serving an in-memory image."""

    def factory(
        config: dict[str, Any] | None = None,
        layer_sizes: list[int] | None = None,
        layer_files: list[Any] | None = None,
    ) -> FakeLoader:
        if config is None:
            config = make_image_config()
        return FakeLoader(FakeSource(config, layer_sizes, layer_files))

    return factory


@pytest.fixture
def write_archive(tmp_path: Path):
    """Factory writing Docker archives into the test directory."""

    def factory(config: dict[str, Any], layers: list[dict[str, bytes]], name: str = "image.tar") -> Path:
        return build_docker_archive(tmp_path / name, config, layers)

    return factory


@pytest.fixture
def write_layout(tmp_path: Path):
    """Factory writing OCI layouts into the test directory."""

    def factory(config: dict[str, Any], layers: list[dict[str, bytes]], name: str = "layout", tag: str = "1.0") -> Path:
        return build_oci_layout(tmp_path / name, config, layers, tag=tag)

    return factory
