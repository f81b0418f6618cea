"""Image sources backed by local files: Docker archives and OCI layouts."""

from __future__ import annotations

import json
import shutil
import tarfile
import tempfile
from pathlib import Path
from typing import IO, Any

from check_image.models.image import ImageDigest, LayerInfo
from check_image.registry.base import RegistryError, RegistryNotFoundError
from check_image.utils.logging import get_logger

logger = get_logger("registry.archive")

# Upper bound on the extracted size of an OCI archive (5 GiB).
MAX_EXTRACTED_SIZE = 5 * 1024 * 1024 * 1024

OCI_INDEX = "application/vnd.oci.image.index.v1+json"
MANIFEST_LIST = "application/vnd.docker.distribution.manifest.list.v2+json"
REF_NAME_ANNOTATION = "org.opencontainers.image.ref.name"

DEFAULT_PLATFORM = ("linux", "amd64")


def list_tar_files(fileobj: IO[bytes]) -> list[str]:
    """List non-directory entries of a (possibly compressed) layer tarball.

    Args:
        fileobj: Readable stream positioned at the start of the layer

    Returns:
        Entry paths in archive order
    """
    files = []
    try:
        with tarfile.open(fileobj=fileobj, mode="r|*") as tar:
            for member in tar:
                if member.isdir():
                    continue
                name = member.name
                if name.startswith("./"):
                    name = name[2:]
                files.append(name)
    except (tarfile.TarError, OSError, EOFError) as e:
        raise RegistryError(f"error reading layer: {e}") from e
    return files


def select_platform_manifest(index: dict[str, Any]) -> dict[str, Any]:
    """Pick the linux/amd64 entry of an image index, or its first entry."""
    manifests = index.get("manifests") or []
    if not manifests:
        raise RegistryError("image index has no manifests")
    for descriptor in manifests:
        platform = descriptor.get("platform") or {}
        if (platform.get("os"), platform.get("architecture")) == DEFAULT_PLATFORM:
            return descriptor
    return manifests[0]


def is_index(document: dict[str, Any], media_type: str = "") -> bool:
    """Whether a manifest document is an image index / manifest list."""
    media_type = media_type or document.get("mediaType", "")
    if media_type in (OCI_INDEX, MANIFEST_LIST):
        return True
    return "manifests" in document and "layers" not in document


def layers_from_manifest(manifest: dict[str, Any]) -> list[LayerInfo]:
    """Build layer descriptors from an image manifest."""
    return [
        LayerInfo(
            digest=ImageDigest.from_string(layer.get("digest", "")),
            size=layer.get("size", 0),
            media_type=layer.get("mediaType", ""),
        )
        for layer in manifest.get("layers", [])
    ]


class DockerArchiveImage:
    """An image stored in a ``docker save`` tarball.

    Example:
        image = DockerArchiveImage("/tmp/nginx.tar", tag="nginx:latest")
        config = image.get_config()
    """

    def __init__(self, path: str | Path, tag: str | None = None, owned: bool = False) -> None:
        """Initialize the archive source.

        Args:
            path: Path to the tarball
            tag: Repository tag selecting an image when the archive holds several
            owned: Remove the tarball on close (daemon exports)
        """
        self._path = Path(path)
        self._tag = tag
        self._owned = owned
        self._entry: dict[str, Any] | None = None
        self._config: dict[str, Any] | None = None
        self._layers: list[LayerInfo] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _open(self) -> tarfile.TarFile:
        try:
            return tarfile.open(self._path, "r")
        except FileNotFoundError as e:
            raise RegistryNotFoundError(str(self._path)) from e
        except (tarfile.TarError, OSError) as e:
            raise RegistryError(f"error loading docker archive from {self._path}: {e}") from e

    def _read_member(self, tar: tarfile.TarFile, name: str) -> bytes:
        try:
            extracted = tar.extractfile(name)
        except KeyError as e:
            raise RegistryError(f"docker archive is missing {name}") from e
        if extracted is None:
            raise RegistryError(f"docker archive entry {name} is not a file")
        with extracted:
            return extracted.read()

    def _manifest_entry(self, tar: tarfile.TarFile) -> dict[str, Any]:
        if self._entry is not None:
            return self._entry

        try:
            entries = json.loads(self._read_member(tar, "manifest.json"))
        except json.JSONDecodeError as e:
            raise RegistryError(f"invalid docker archive manifest: {e}") from e

        if self._tag:
            wanted = {self._tag}
            if ":" not in self._tag.rsplit("/", 1)[-1]:
                wanted.add(f"{self._tag}:latest")
            for entry in entries:
                if wanted & set(entry.get("RepoTags") or []):
                    self._entry = entry
                    return entry
            raise RegistryNotFoundError(f"{self._tag} in {self._path}")

        if len(entries) != 1:
            raise RegistryError(
                f"docker archive contains {len(entries)} images, a tag is required"
            )
        self._entry = entries[0]
        return self._entry

    def get_config(self) -> dict[str, Any]:
        if self._config is None:
            with self._open() as tar:
                entry = self._manifest_entry(tar)
                try:
                    self._config = json.loads(self._read_member(tar, entry["Config"]))
                except (KeyError, json.JSONDecodeError) as e:
                    raise RegistryError(f"invalid image config in docker archive: {e}") from e
        return self._config

    def get_layers(self) -> list[LayerInfo]:
        if self._layers is None:
            with self._open() as tar:
                entry = self._manifest_entry(tar)
                layers = []
                for name in entry.get("Layers", []):
                    try:
                        member = tar.getmember(name)
                    except KeyError as e:
                        raise RegistryError(f"docker archive is missing {name}") from e
                    digest = name.split("/")[-1] if name.startswith("blobs/") else name.split("/")[0]
                    layers.append(
                        LayerInfo(
                            digest=ImageDigest(hash=digest.removesuffix(".tar")),
                            size=member.size,
                            media_type="application/vnd.docker.image.rootfs.diff.tar",
                        )
                    )
                self._layers = layers
        return self._layers

    def list_layer_files(self, index: int) -> list[str]:
        with self._open() as tar:
            entry = self._manifest_entry(tar)
            name = entry["Layers"][index]
            extracted = tar.extractfile(name)
            if extracted is None:
                raise RegistryError(f"docker archive entry {name} is not a file")
            with extracted:
                return list_tar_files(extracted)

    def close(self) -> None:
        if self._owned:
            self._path.unlink(missing_ok=True)


class OCILayoutImage:
    """An image stored in an OCI image layout directory.

    Example:
        image = OCILayoutImage("/srv/layouts/app", "v1.2")
        layers = image.get_layers()
    """

    def __init__(self, path: str | Path, selector: str, cleanup_dir: Path | None = None) -> None:
        """Initialize the layout source.

        Args:
            path: Layout directory (holding index.json)
            selector: Tag (matched against ref.name annotations) or digest
            cleanup_dir: Directory removed on close (extracted OCI archives)
        """
        self._root = Path(path)
        self._selector = selector
        self._cleanup_dir = cleanup_dir
        self._manifest: dict[str, Any] | None = None
        self._config: dict[str, Any] | None = None

    def _blob_path(self, digest: str) -> Path:
        algorithm, _, hash_value = digest.partition(":")
        return self._root / "blobs" / algorithm / hash_value

    def _read_json_blob(self, digest: str) -> dict[str, Any]:
        try:
            return json.loads(self._blob_path(digest).read_bytes())
        except FileNotFoundError as e:
            raise RegistryNotFoundError(f"blob {digest}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise RegistryError(f"error reading blob {digest}: {e}") from e

    def _resolve_digest(self) -> str:
        if ":" in self._selector and self._selector.split(":", 1)[0].startswith("sha"):
            return self._selector

        try:
            index = json.loads((self._root / "index.json").read_bytes())
        except FileNotFoundError as e:
            raise RegistryError(f"error reading OCI layout: no index.json in {self._root}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise RegistryError(f"error reading OCI layout: {e}") from e

        for descriptor in index.get("manifests", []):
            ref_name = (descriptor.get("annotations") or {}).get(REF_NAME_ANNOTATION)
            if ref_name in (self._selector, f":{self._selector}"):
                return descriptor["digest"]
        raise RegistryError(f"error resolving tag: tag {self._selector!r} not found in layout index")

    def _get_manifest(self) -> dict[str, Any]:
        if self._manifest is None:
            manifest = self._read_json_blob(self._resolve_digest())
            if is_index(manifest):
                descriptor = select_platform_manifest(manifest)
                logger.debug("Resolved image index to manifest %s", descriptor.get("digest"))
                manifest = self._read_json_blob(descriptor["digest"])
            self._manifest = manifest
        return self._manifest

    def get_config(self) -> dict[str, Any]:
        if self._config is None:
            config_digest = self._get_manifest().get("config", {}).get("digest")
            if not config_digest:
                raise RegistryError("image manifest has no config descriptor")
            self._config = self._read_json_blob(config_digest)
        return self._config

    def get_layers(self) -> list[LayerInfo]:
        return layers_from_manifest(self._get_manifest())

    def list_layer_files(self, index: int) -> list[str]:
        layer = self.get_layers()[index]
        try:
            with self._blob_path(str(layer.digest)).open("rb") as blob:
                return list_tar_files(blob)
        except FileNotFoundError as e:
            raise RegistryNotFoundError(f"layer {layer.digest}") from e

    def close(self) -> None:
        if self._cleanup_dir is not None:
            shutil.rmtree(self._cleanup_dir, ignore_errors=True)
            self._cleanup_dir = None


def extract_oci_archive(path: str | Path) -> Path:
    """Extract an OCI archive (optionally gzipped) to a temporary directory.

    The caller owns the returned directory.

    Raises:
        RegistryError: If the archive cannot be read, is too large or holds
            entries outside the extraction directory
    """
    temp_dir = Path(tempfile.mkdtemp(prefix="oci-archive-"))
    try:
        with tarfile.open(path, "r:*") as tar:
            total = 0
            members = []
            for member in tar:
                total += member.size
                if total > MAX_EXTRACTED_SIZE:
                    raise RegistryError(
                        f"tarball exceeds maximum decompressed size of {MAX_EXTRACTED_SIZE} bytes"
                    )
                if not (member.isdir() or member.isfile()):
                    continue
                members.append(member)
            tar.extractall(temp_dir, members=members, filter="data")
    except RegistryError:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise
    except FileNotFoundError as e:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise RegistryNotFoundError(str(path)) from e
    except (tarfile.TarError, OSError) as e:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise RegistryError(f"error extracting OCI archive: {e}") from e

    logger.debug("Extracted OCI archive %s to %s", path, temp_dir)
    return temp_dir
