"""Unit tests for reading JSON/YAML documents."""

import io

import pytest

from check_image.utils import fileio
from check_image.utils.fileio import (
    has_yaml_extension,
    load_document,
    read_file,
    read_stdin,
    unmarshal_config_data,
)


def fake_stdin(monkeypatch, data: bytes):
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(data)))


class TestReadFile:
    """Tests for file reading."""

    def test_read_file(self, tmp_path):
        """Test reading a regular file."""
        path = tmp_path / "policy.json"
        path.write_bytes(b"{}")
        assert read_file(str(path)) == b"{}"

    def test_missing(self, tmp_path):
        """Test that missing files raise ValueError."""
        with pytest.raises(ValueError, match="cannot access file"):
            read_file(str(tmp_path / "missing.json"))

    def test_directory(self, tmp_path):
        """Test that directories are rejected."""
        with pytest.raises(ValueError, match="directory"):
            read_file(str(tmp_path))

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("a.yaml", True), ("a.yml", True), ("a.json", False), ("yaml", False)],
    )
    def test_yaml_extension(self, path, expected):
        """Test YAML extension detection."""
        assert has_yaml_extension(path) is expected


class TestReadStdin:
    """Tests for standard input reading."""

    def test_read(self, monkeypatch):
        """Test reading standard input."""
        fake_stdin(monkeypatch, b'{"a": 1}')
        assert read_stdin() == b'{"a": 1}'

    def test_empty(self, monkeypatch):
        """Test that empty input is an error."""
        fake_stdin(monkeypatch, b"")
        with pytest.raises(ValueError, match="stdin is empty"):
            read_stdin()

    def test_too_large(self, monkeypatch):
        """Test that input over the size limit is an error."""
        monkeypatch.setattr(fileio, "MAX_STDIN_SIZE", 8)
        fake_stdin(monkeypatch, b"0123456789")
        with pytest.raises(ValueError, match="exceeds maximum size"):
            read_stdin()


class TestUnmarshal:
    """Tests for unmarshal_config_data."""

    def test_json_file(self):
        """Test that non-YAML files are parsed as JSON."""
        assert unmarshal_config_data(b'{"max-age": 30}', "config.json") == {"max-age": 30}

    def test_json_file_rejects_yaml(self):
        """Test that YAML content in a .json file is an error."""
        with pytest.raises(ValueError, match="invalid JSON"):
            unmarshal_config_data("max-age: 30", "config.json")

    def test_yaml_file(self):
        """Test that .yaml files are parsed as YAML."""
        assert unmarshal_config_data("ports:\n  - 80\n", "config.yaml") == {"ports": [80]}

    def test_invalid_yaml(self):
        """Test that malformed YAML is an error."""
        with pytest.raises(ValueError, match="invalid YAML"):
            unmarshal_config_data("a: [1, 2", "config.yml")

    def test_stdin_json(self):
        """Test that stdin data is tried as JSON first."""
        assert unmarshal_config_data('{"a": "b"}', "-") == {"a": "b"}

    def test_stdin_yaml_fallback(self):
        """Test that stdin data falls back to YAML."""
        assert unmarshal_config_data("a: b\n", "-") == {"a": "b"}

    def test_load_document(self, tmp_path):
        """Test reading and parsing in one step."""
        path = tmp_path / "labels.yml"
        path.write_text("required-labels:\n  - name: maintainer\n")
        assert load_document(str(path)) == {"required-labels": [{"name": "maintainer"}]}
