"""Applying a configuration document onto check parameters.

Precedence is command line, then configuration document, then built-in
default: a document value is applied only when the matching flag was not
given explicitly.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Callable
from contextlib import ExitStack
from typing import Any

from check_image.core.params import CheckParameters
from check_image.models.config import ConfigDocument, InlinePolicy, PolicyPath, PolicySource
from check_image.utils.errors import PolicyFormatError
from check_image.utils.logging import get_logger

logger = get_logger("core.merge")

Disposal = Callable[[], None]

# (section, flag) pairs for plain values.
SCALAR_FIELDS: tuple[tuple[str, str], ...] = (
    ("age", "max-age"),
    ("size", "max-size"),
    ("size", "max-layers"),
    ("secrets", "skip-env-vars"),
    ("secrets", "skip-files"),
    ("entrypoint", "allow-shell-form"),
)

# (section, flag) pairs for values given as a list or a comma-joined string.
LIST_FIELDS: tuple[tuple[str, str], ...] = (
    ("ports", "allowed-ports"),
    ("platform", "allowed-platforms"),
)

# (section, flag) pairs for policies given as a path or an inline object.
POLICY_FIELDS: tuple[tuple[str, str], ...] = (
    ("registry", "registry-policy"),
    ("secrets", "secrets-policy"),
    ("labels", "labels-policy"),
)


def format_allowed_list(value: Any) -> str:
    """Normalize an allow list to its comma-joined string form.

    A list is joined with commas, a string is returned unchanged and
    anything else is converted with ``str``.
    """
    if isinstance(value, list):
        return ",".join(str(item) for item in value)
    if isinstance(value, str):
        return value
    return str(value)


def to_policy_source(flag: str, value: Any) -> PolicySource | None:
    """Classify a policy value as a path or an inline object.

    Raises:
        PolicyFormatError: If the value is neither a string nor a mapping
    """
    if value is None:
        return None
    if isinstance(value, str):
        return PolicyPath(path=value)
    if isinstance(value, dict):
        return InlinePolicy(document=value)
    raise PolicyFormatError(
        f"{flag} must be a file path (string) or an inline policy object, got {type(value).__name__}",
        flag=flag,
    )


def _remove_file(path: str) -> Disposal:
    def dispose() -> None:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove temporary policy file %s: %s", path, e)

    return dispose


def write_inline_policy(flag: str, policy: InlinePolicy) -> tuple[str, Disposal]:
    """Write an inline policy to a new temporary JSON file.

    Returns:
        The file path and a disposal that removes the file

    Raises:
        PolicyFormatError: If the policy cannot be encoded as JSON
        OSError: If the file cannot be written
    """
    try:
        content = json.dumps(policy.document, sort_keys=True)
    except (TypeError, ValueError) as e:
        raise PolicyFormatError(f"cannot encode inline {flag}: {e}", flag=flag) from e

    fd, path = tempfile.mkstemp(prefix=f"{flag}-", suffix=".json")
    dispose = _remove_file(path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError:
        dispose()
        raise
    logger.debug("Wrote inline %s to %s", flag, path)
    return path, dispose


def resolve_inline_policy(
    flag: str,
    value: Any,
    params: CheckParameters,
) -> tuple[str | None, Disposal | None]:
    """Resolve a policy value from a configuration document to a file path.

    Args:
        flag: Parameter name ("registry-policy")
        value: Document value: None, a path string or an inline mapping
        params: Parameters, used to see whether the flag was set explicitly

    Returns:
        The path to apply (None when nothing applies) and a disposal for
        any temporary file created

    Raises:
        PolicyFormatError: If the value has an unsupported shape
        OSError: If a temporary file cannot be written
    """
    if value is None or params.was_set(flag):
        return None, None

    source = to_policy_source(flag, value)
    if isinstance(source, PolicyPath):
        return source.path, None
    if isinstance(source, InlinePolicy):
        return write_inline_policy(flag, source)
    return None, None


def apply_config(params: CheckParameters, config: ConfigDocument) -> ExitStack:
    """Apply document values onto parameters not set on the command line.

    Inline policy errors are logged and leave the parameter unchanged.

    Returns:
        An exit stack whose closing removes every temporary policy file
        created by this call
    """
    stack = ExitStack()
    try:
        for section_name, flag in SCALAR_FIELDS:
            value = _field(config, section_name, flag)
            if value is not None and not params.was_set(flag):
                params.set(flag, value)

        for section_name, flag in LIST_FIELDS:
            value = _field(config, section_name, flag)
            if value is not None and not params.was_set(flag):
                params.set(flag, format_allowed_list(value))

        for section_name, flag in POLICY_FIELDS:
            value = _field(config, section_name, flag)
            try:
                path, dispose = resolve_inline_policy(flag, value, params)
            except (PolicyFormatError, OSError) as e:
                logger.error("Failed to apply %s from config: %s", flag, e)
                continue
            if dispose is not None:
                stack.callback(dispose)
            if path is not None:
                params.set(flag, path)
    except BaseException:
        stack.close()
        raise

    return stack


def _field(config: ConfigDocument, section_name: str, flag: str) -> Any:
    section = config.section(section_name)
    if section is None:
        return None
    return getattr(section, CheckParameters.attribute_for(flag), None)
