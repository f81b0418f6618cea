"""Exposed ports check."""

from __future__ import annotations

from check_image.core.image import ImageLoader
from check_image.core.params import CheckParameters
from check_image.core.policy import parse_allowed_ports
from check_image.models.result import CheckOutcome, PortsDetails
from check_image.utils.logging import get_logger

logger = get_logger("checks.ports")


def run_ports(reference: str, params: CheckParameters, loader: ImageLoader) -> CheckOutcome:
    """Fail when the image exposes ports outside ``allowed-ports``.

    An image exposing nothing passes; an image exposing ports with no
    allow list fails.
    """
    allowed = parse_allowed_ports(params.allowed_ports)
    logger.debug("Allowed ports: %s", allowed)

    exposed = loader.load(reference).metadata.exposed_ports

    if not exposed:
        return CheckOutcome(
            check="ports",
            image=reference,
            passed=True,
            message="No ports are exposed in this image",
            details=PortsDetails(exposed_ports=[], allowed_ports=allowed or None),
        )

    if not allowed:
        return CheckOutcome(
            check="ports",
            image=reference,
            passed=False,
            message="No allowed ports were provided",
            details=PortsDetails(exposed_ports=exposed),
        )

    unauthorized = [port for port in exposed if port not in allowed]
    if unauthorized:
        message = "Image exposes ports that are not in the allowed list"
    else:
        message = "All exposed ports are in the allowed list"

    return CheckOutcome(
        check="ports",
        image=reference,
        passed=not unauthorized,
        message=message,
        details=PortsDetails(
            exposed_ports=exposed,
            allowed_ports=allowed,
            unauthorized_ports=unauthorized or None,
        ),
    )
