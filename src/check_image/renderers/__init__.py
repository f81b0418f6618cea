"""Output renderers."""

from check_image.renderers.base import OutputFormat, RenderFunc
from check_image.renderers.json import JSONRenderer
from check_image.renderers.terminal import TerminalRenderer

__all__ = [
    "OutputFormat",
    "RenderFunc",
    "JSONRenderer",
    "TerminalRenderer",
]
