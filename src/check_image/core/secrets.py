"""Detection of secrets in image environment variables and layer files."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from fnmatch import fnmatchcase

from check_image.core.image import ContainerImage
from check_image.models.policy import DEFAULT_FILE_PATTERNS, SecretsPolicy
from check_image.models.result import EnvVarFinding, FileFinding
from check_image.registry.base import RegistryError
from check_image.utils.logging import get_logger

logger = get_logger("core.secrets")


def check_environment_variables(env: dict[str, str], policy: SecretsPolicy) -> list[EnvVarFinding]:
    """Find environment variables whose names match a sensitive pattern.

    Matching is a case-insensitive substring test. Variables on the
    policy's exclusion list (case-sensitive) are skipped.
    """
    if not policy.check_env_vars:
        return []

    findings = []
    patterns = [pattern.lower() for pattern in policy.env_patterns]
    for name in env:
        if name in policy.excluded_env_vars:
            logger.debug("Skipping excluded environment variable: %s", name)
            continue
        lowered = name.lower()
        for pattern in patterns:
            if pattern in lowered:
                findings.append(EnvVarFinding(name=name, description="sensitive pattern detected"))
                logger.debug("Found sensitive environment variable: %s (matches pattern: %s)", name, pattern)
                break
    return findings


def check_files_in_layers(image: ContainerImage, policy: SecretsPolicy) -> list[FileFinding]:
    """Scan every layer for files matching a sensitive pattern.

    A path reported in a lower layer is not reported again for higher
    layers. Layers that cannot be read are logged and skipped.
    """
    if not policy.check_files:
        return []

    findings: list[FileFinding] = []
    seen: set[str] = set()
    layer_count = len(image.metadata.layers)

    for index in range(layer_count):
        logger.debug("Scanning layer %d/%d", index + 1, layer_count)
        try:
            files = image.source.list_layer_files(index)
        except RegistryError as e:
            logger.warning("Error scanning layer %d: %s", index, e)
            continue

        for finding in scan_layer(files, index, policy):
            if finding.path not in seen:
                seen.add(finding.path)
                findings.append(finding)
    return findings


def scan_layer(files: Iterable[str], layer_index: int, policy: SecretsPolicy) -> list[FileFinding]:
    """Match the file paths of one layer against the policy's file patterns."""
    findings = []
    patterns = policy.file_patterns
    for path in files:
        if is_path_excluded(path, policy.excluded_paths):
            logger.debug("Skipping excluded path: %s", path)
            continue
        description = match_file_pattern(path, patterns)
        if description is not None:
            findings.append(FileFinding(path=path, layer_index=layer_index, description=description))
            logger.debug("Found sensitive file in layer %d: %s (%s)", layer_index, path, description)
    return findings


def is_path_excluded(path: str, excluded: Iterable[str]) -> bool:
    """Whether a path matches an exclusion.

    ``dir/**`` excludes everything below ``dir``; other entries are globs
    matched against the full path and the file name.
    """
    for pattern in excluded:
        if pattern.endswith("/**"):
            prefix = pattern[: -len("/**")]
            if path == prefix or path.startswith(prefix + "/"):
                return True
        elif fnmatchcase(path, pattern) or fnmatchcase(posixpath.basename(path), pattern):
            return True
    return False


def match_file_pattern(path: str, patterns: Iterable[str]) -> str | None:
    """Get the description of the first pattern matching a path, or None."""
    basename = posixpath.basename(path)
    for pattern in patterns:
        if fnmatchcase(basename, pattern) or fnmatchcase(path, pattern):
            return describe_pattern(pattern)
        # Path-based patterns such as .aws/credentials
        if "/" in pattern and pattern in "/" + path:
            return describe_pattern(pattern)
    return None


def describe_pattern(pattern: str) -> str:
    return DEFAULT_FILE_PATTERNS.get(pattern, "sensitive file pattern")
