"""Healthcheck presence check."""

from __future__ import annotations

from check_image.core.image import ImageLoader
from check_image.models.result import CheckOutcome, HealthcheckDetails


def run_healthcheck(reference: str, loader: ImageLoader) -> CheckOutcome:
    """Pass when the image defines a healthcheck that is not disabled (NONE)."""
    test = loader.load(reference).metadata.healthcheck
    has_healthcheck = bool(test) and test[0] != "NONE"

    return CheckOutcome(
        check="healthcheck",
        image=reference,
        passed=has_healthcheck,
        message=(
            "Image has a healthcheck defined"
            if has_healthcheck
            else "Image does not have a healthcheck defined"
        ),
        details=HealthcheckDetails(has_healthcheck=has_healthcheck),
    )
