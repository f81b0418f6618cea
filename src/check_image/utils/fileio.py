"""Reading JSON/YAML documents from files or standard input."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import yaml

STDIN_PATH = "-"

# Upper bound on data read from standard input (10 MiB).
MAX_STDIN_SIZE = 10 * 1024 * 1024


def has_yaml_extension(path: str) -> bool:
    """Check if a file path has a YAML extension (.yaml or .yml)."""
    return path.endswith(".yaml") or path.endswith(".yml")


def read_stdin() -> bytes:
    """Read all of standard input.

    Raises:
        ValueError: If stdin is empty or exceeds MAX_STDIN_SIZE
    """
    stream = getattr(sys.stdin, "buffer", None)
    if stream is not None:
        data = stream.read(MAX_STDIN_SIZE + 1)
    else:
        data = sys.stdin.read(MAX_STDIN_SIZE + 1).encode("utf-8")

    if len(data) > MAX_STDIN_SIZE:
        raise ValueError(f"stdin input exceeds maximum size of {MAX_STDIN_SIZE} bytes")
    if not data:
        raise ValueError("stdin is empty")
    return data


def read_file(path: str) -> bytes:
    """Read a regular file.

    Raises:
        ValueError: If the path is missing or is a directory
    """
    file_path = Path(path).expanduser()
    try:
        if file_path.is_dir():
            raise ValueError("path is a directory, not a file")
        return file_path.read_bytes()
    except OSError as e:
        raise ValueError(f"cannot access file: {e}") from e


def read_file_or_stdin(path: str) -> bytes:
    """Read from a file, or from standard input when path is "-"."""
    if path == STDIN_PATH:
        return read_stdin()
    return read_file(path)


def unmarshal_config_data(data: bytes | str, path: str) -> Any:
    """Parse JSON or YAML data.

    Files are parsed as YAML when they have a .yaml/.yml extension and as
    JSON otherwise. Data read from standard input is tried as JSON first,
    then as YAML.

    Args:
        data: Raw document content
        path: Source path ("-" for standard input)

    Returns:
        The parsed document (None for an empty YAML document)

    Raises:
        ValueError: If the data cannot be parsed
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8")

    if path == STDIN_PATH:
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            return _load_yaml(data)

    if has_yaml_extension(path):
        return _load_yaml(data)

    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e}") from e


def load_document(path: str) -> Any:
    """Read and parse a JSON/YAML document from a file or stdin."""
    return unmarshal_config_data(read_file_or_stdin(path), path)


def _load_yaml(data: str) -> Any:
    try:
        return yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML: {e}") from e
