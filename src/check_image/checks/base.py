"""Check definitions."""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, Field

from check_image.models.result import CheckOutcome
from check_image.renderers.base import RenderFunc

# Catalog order; selection, execution and reporting all follow it.
CHECK_NAMES: tuple[str, ...] = (
    "age",
    "size",
    "ports",
    "registry",
    "root-user",
    "secrets",
    "healthcheck",
    "labels",
    "entrypoint",
    "platform",
)

# Runs a check against an image reference; raises when the check cannot run.
RunFunc = Callable[[str], CheckOutcome]


class CheckDefinition(BaseModel):
    """A named check with its run and render functions."""

    model_config = {"frozen": True}

    name: str = Field(description="Check name")
    run: RunFunc = Field(description="Runs the check against an image reference")
    render: RenderFunc = Field(description="Prints the text rendering of an outcome")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckDefinition):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


CheckRegistry = tuple[CheckDefinition, ...]
