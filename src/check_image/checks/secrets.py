"""Secrets check."""

from __future__ import annotations

from check_image.core.image import ImageLoader
from check_image.core.params import CheckParameters
from check_image.core.policy import load_secrets_policy
from check_image.core.secrets import check_environment_variables, check_files_in_layers
from check_image.models.result import CheckOutcome, SecretsDetails
from check_image.utils.logging import get_logger

logger = get_logger("checks.secrets")


def run_secrets(reference: str, params: CheckParameters, loader: ImageLoader) -> CheckOutcome:
    """Fail when sensitive environment variables or files are found.

    ``skip-env-vars`` and ``skip-files`` switch off the corresponding scan
    regardless of the policy.
    """
    policy = load_secrets_policy(params.secrets_policy)
    if params.skip_env_vars:
        policy.check_env_vars = False
    if params.skip_files:
        policy.check_files = False

    image = loader.load(reference)

    logger.debug("Checking environment variables for secrets")
    env_findings = check_environment_variables(image.metadata.env, policy)

    logger.debug("Checking files in layers for secrets")
    file_findings = check_files_in_layers(image, policy)

    total = len(env_findings) + len(file_findings)
    return CheckOutcome(
        check="secrets",
        image=reference,
        passed=total == 0,
        message="No secrets detected" if total == 0 else "Secrets detected",
        details=SecretsDetails(
            env_var_findings=env_findings or None,
            file_findings=file_findings or None,
            total_findings=total,
            env_var_count=len(env_findings),
            file_count=len(file_findings),
        ),
    )
