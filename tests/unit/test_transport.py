"""Unit tests for image reference parsing."""

import pytest

from check_image.registry.transport import (
    DEFAULT_REGISTRY,
    Transport,
    image_registry,
    parse_docker_reference,
    parse_reference,
)


class TestParseReference:
    """Tests for parse_reference."""

    def test_plain_name_gets_latest(self):
        """Test that a bare name defaults to the latest tag."""
        parsed = parse_reference("nginx")
        assert parsed.transport is Transport.DAEMON_REGISTRY
        assert parsed.path == "nginx:latest"

    def test_plain_tagged(self):
        """Test that tagged names are kept whole."""
        assert parse_reference("ghcr.io/org/app:1.0").path == "ghcr.io/org/app:1.0"

    def test_registry_with_port(self):
        """Test that a registry port is not mistaken for a transport."""
        parsed = parse_reference("localhost:5000/app:1.0")
        assert parsed.transport is Transport.DAEMON_REGISTRY
        assert parsed.path == "localhost:5000/app:1.0"

    def test_oci_tag(self):
        """Test an OCI layout with a tag."""
        parsed = parse_reference("oci:/srv/layouts/app:1.0")
        assert parsed.transport is Transport.OCI
        assert (parsed.path, parsed.tag, parsed.digest) == ("/srv/layouts/app", "1.0", None)
        assert parsed.selector == "1.0"

    def test_oci_digest(self):
        """Test an OCI layout with a digest."""
        parsed = parse_reference("oci:/srv/layouts/app@sha256:abc")
        assert (parsed.path, parsed.digest) == ("/srv/layouts/app", "sha256:abc")
        assert parsed.selector == "sha256:abc"

    def test_archive_without_tag(self):
        """Test an archive path without a tag."""
        parsed = parse_reference("docker-archive:/tmp/image.tar")
        assert parsed.transport is Transport.DOCKER_ARCHIVE
        assert parsed.path == "/tmp/image.tar"
        assert parsed.tag is None

    def test_archive_with_tag(self):
        """Test an OCI archive with a tag."""
        parsed = parse_reference("oci-archive:/tmp/image.tar:v2")
        assert parsed.transport is Transport.OCI_ARCHIVE
        assert (parsed.path, parsed.tag) == ("/tmp/image.tar", "v2")

    def test_windows_drive_letter(self):
        """Test that a drive letter colon is not a tag separator."""
        parsed = parse_reference("docker-archive:C:\\images\\app.tar:1.0")
        assert (parsed.path, parsed.tag) == ("C:\\images\\app.tar", "1.0")

    def test_empty(self):
        """Test that empty references are rejected."""
        with pytest.raises(ValueError):
            parse_reference("")


class TestParseDockerReference:
    """Tests for parse_docker_reference."""

    def test_docker_hub_official(self):
        """Test that single-component names live in the library namespace."""
        ref = parse_docker_reference("nginx:1.25")
        assert (ref.registry, ref.repository, ref.tag) == (DEFAULT_REGISTRY, "library/nginx", "1.25")

    def test_docker_io_alias(self):
        """Test that docker.io is normalized."""
        ref = parse_docker_reference("docker.io/bitnami/redis")
        assert (ref.registry, ref.repository, ref.tag) == (DEFAULT_REGISTRY, "bitnami/redis", None)
        assert ref.identifier == "latest"

    def test_custom_registry(self):
        """Test registries with a dot, a port or localhost."""
        assert parse_docker_reference("ghcr.io/org/app:1").registry == "ghcr.io"
        assert parse_docker_reference("registry:5000/app").registry == "registry:5000"
        assert parse_docker_reference("localhost/app").registry == "localhost"

    def test_digest(self):
        """Test references pinned by digest."""
        ref = parse_docker_reference("quay.io/org/app@sha256:abc")
        assert (ref.repository, ref.digest, ref.tag) == ("org/app", "sha256:abc", None)
        assert ref.identifier == "sha256:abc"


class TestImageRegistry:
    """Tests for image_registry."""

    def test_registry_host(self):
        """Test the registry of registry references."""
        assert image_registry("nginx") == DEFAULT_REGISTRY
        assert image_registry("ghcr.io/org/app:1.0") == "ghcr.io"

    def test_file_transport(self):
        """Test that file transports have no registry."""
        with pytest.raises(ValueError, match="not applicable"):
            image_registry("oci:/srv/layout:1.0")
