"""Trusted registry check."""

from __future__ import annotations

from check_image.core.params import CheckParameters
from check_image.core.policy import load_registry_policy
from check_image.models.result import CheckOutcome, RegistryDetails
from check_image.registry.transport import Transport, image_registry, parse_reference
from check_image.utils.errors import PolicyError


def run_registry(reference: str, params: CheckParameters) -> CheckOutcome:
    """Fail when the image's registry is not trusted by ``registry-policy``.

    File-based transports have no registry; the check passes as skipped.

    Raises:
        PolicyError: If no policy is given or it cannot be loaded
    """
    if parse_reference(reference).transport is not Transport.DAEMON_REGISTRY:
        return CheckOutcome(
            check="registry",
            image=reference,
            passed=True,
            message="Registry validation skipped (not applicable for this transport)",
            details=RegistryDetails(skipped=True),
        )

    if not params.registry_policy:
        raise PolicyError("--registry-policy is required")

    registry = image_registry(reference)
    policy = load_registry_policy(params.registry_policy)
    passed = policy.is_registry_allowed(registry)

    return CheckOutcome(
        check="registry",
        image=reference,
        passed=passed,
        message=f"Registry {registry} is trusted" if passed else f"Registry {registry} is not trusted",
        details=RegistryDetails(registry=registry),
    )
