"""Platform check."""

from __future__ import annotations

from check_image.core.image import ImageLoader
from check_image.core.params import CheckParameters
from check_image.core.policy import parse_allowed_platforms
from check_image.models.result import CheckOutcome, PlatformDetails
from check_image.utils.logging import get_logger

logger = get_logger("checks.platform")


def run_platform(reference: str, params: CheckParameters, loader: ImageLoader) -> CheckOutcome:
    """Fail when the image's ``os/arch[/variant]`` is not in ``allowed-platforms``.

    Raises:
        ValueError: If no allowed platforms are given
    """
    allowed = parse_allowed_platforms(params.allowed_platforms)
    platform = loader.load(reference).metadata.platform
    logger.debug("Image platform: %s", platform)

    passed = platform in allowed
    return CheckOutcome(
        check="platform",
        image=reference,
        passed=passed,
        message=(
            f"Platform {platform} is in the allowed list"
            if passed
            else f"Platform {platform} is not in the allowed list"
        ),
        details=PlatformDetails(platform=platform, allowed_platforms=allowed),
    )
