"""Image age check."""

from __future__ import annotations

from datetime import datetime, timezone

from check_image.core.image import ImageLoader
from check_image.core.params import CheckParameters
from check_image.models.result import AgeDetails, CheckOutcome

SECONDS_PER_DAY = 24 * 60 * 60


def run_age(
    reference: str,
    params: CheckParameters,
    loader: ImageLoader,
    now: datetime | None = None,
) -> CheckOutcome:
    """Fail when the image is older than ``max-age`` days.

    Raises:
        ValueError: If the image has no creation date
    """
    created = loader.load(reference).metadata.created
    if created is None:
        raise ValueError("image creation date is not set")
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    age_days = (now - created).total_seconds() / SECONDS_PER_DAY
    passed = age_days <= params.max_age

    if passed:
        message = f"Image is less than {params.max_age} days old"
    else:
        message = f"Image is older than {params.max_age} days"

    return CheckOutcome(
        check="age",
        image=reference,
        passed=passed,
        message=message,
        details=AgeDetails(
            created_at=created.isoformat(),
            age_days=age_days,
            max_age=params.max_age,
        ),
    )
