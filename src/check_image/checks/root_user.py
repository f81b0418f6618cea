"""Non-root user check."""

from __future__ import annotations

from check_image.core.image import ImageLoader
from check_image.models.result import CheckOutcome, RootUserDetails


def run_root_user(reference: str, loader: ImageLoader) -> CheckOutcome:
    """Pass when the image sets a user other than root."""
    user = loader.load(reference).metadata.user
    passed = user not in ("", "root")

    return CheckOutcome(
        check="root-user",
        image=reference,
        passed=passed,
        message=(
            "Image is configured to run as a non-root user"
            if passed
            else "Image is not configured to run as a non-root user"
        ),
        details=RootUserDetails(user=user),
    )
