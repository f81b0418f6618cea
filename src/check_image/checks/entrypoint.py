"""Entrypoint form check."""

from __future__ import annotations

from check_image.core.image import ImageLoader
from check_image.core.params import CheckParameters
from check_image.models.result import CheckOutcome, EntrypointDetails

SHELLS = ("/bin/sh", "/bin/bash")


def is_shell_form(command: list[str]) -> bool:
    """Whether a command runs through a shell (``/bin/sh -c ...``)."""
    return len(command) >= 2 and command[0] in SHELLS and command[1] == "-c"


def run_entrypoint(reference: str, params: CheckParameters, loader: ImageLoader) -> CheckOutcome:
    """Fail when the image has no entrypoint or cmd, or uses the shell form.

    The shell form passes when ``allow-shell-form`` is set.
    """
    metadata = loader.load(reference).metadata
    entrypoint, cmd = metadata.entrypoint, metadata.cmd

    if not entrypoint and not cmd:
        return CheckOutcome(
            check="entrypoint",
            image=reference,
            passed=False,
            message="Image has no entrypoint or cmd defined",
            details=EntrypointDetails(has_entrypoint=False),
        )

    exec_form = not (is_shell_form(entrypoint) or is_shell_form(cmd))
    if exec_form:
        passed, message = True, "Image has a valid exec-form entrypoint"
    elif params.allow_shell_form:
        passed, message = True, "Image uses shell form but it is allowed"
    else:
        passed, message = False, "Image uses shell form for entrypoint or cmd"

    return CheckOutcome(
        check="entrypoint",
        image=reference,
        passed=passed,
        message=message,
        details=EntrypointDetails(
            has_entrypoint=True,
            exec_form=exec_form,
            shell_form_allowed=True if not exec_form and params.allow_shell_form else None,
            entrypoint=entrypoint or None,
            cmd=cmd or None,
        ),
    )
