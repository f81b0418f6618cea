"""Checks that selected checks have the resources they need."""

from __future__ import annotations

from check_image.checks.base import CheckDefinition
from check_image.core.params import CheckParameters
from check_image.utils.errors import PreconditionError

# Check name -> parameter it cannot run without.
REQUIRED_PARAMETERS: dict[str, str] = {
    "registry": "registry-policy",
    "labels": "labels-policy",
    "platform": "allowed-platforms",
}


def validate_preconditions(selection: tuple[CheckDefinition, ...], params: CheckParameters) -> None:
    """Ensure every selected check has its required parameter.

    Runs after configuration has been merged, so values supplied by the
    configuration document count.

    Raises:
        PreconditionError: For the first selected check (in order) that is
            missing its parameter
    """
    for check in selection:
        flag = REQUIRED_PARAMETERS.get(check.name)
        if flag is not None and not params.get(flag):
            raise PreconditionError(check.name, flag)
