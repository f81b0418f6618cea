"""Required labels check."""

from __future__ import annotations

from check_image.core.image import ImageLoader
from check_image.core.params import CheckParameters
from check_image.core.policy import load_labels_policy, validate_labels
from check_image.models.result import CheckOutcome, LabelsDetails, RequiredLabelCheck
from check_image.utils.errors import PolicyError
from check_image.utils.logging import get_logger

logger = get_logger("checks.labels")


def run_labels(reference: str, params: CheckParameters, loader: ImageLoader) -> CheckOutcome:
    """Fail when required labels are missing or do not meet their requirement.

    Raises:
        PolicyError: If no policy is given or it cannot be loaded
    """
    if not params.labels_policy:
        raise PolicyError("--labels-policy is required")

    policy = load_labels_policy(params.labels_policy)
    logger.debug("Loaded policy with %d required labels", len(policy.required_labels))

    labels = loader.load(reference).metadata.labels
    logger.debug("Image has %d labels", len(labels))

    validation = validate_labels(labels, policy)

    return CheckOutcome(
        check="labels",
        image=reference,
        passed=validation.passed,
        message=(
            "All required labels are present and valid"
            if validation.passed
            else "Image does not meet label requirements"
        ),
        details=LabelsDetails(
            required_labels=[
                RequiredLabelCheck(name=req.name, value=req.value or None, pattern=req.pattern or None)
                for req in policy.required_labels
            ],
            actual_labels=labels or None,
            missing_labels=validation.missing_labels or None,
            invalid_labels=validation.invalid_labels or None,
        ),
    )
