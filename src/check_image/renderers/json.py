"""JSON renderer for check-image output."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel
from rich.console import Console

from check_image.models.result import ResultModel


class JSONRenderer:
    """Writes results as indented JSON documents.

    Result models are serialized with their kebab-case aliases and without
    unset optional fields.

    Example:
        renderer = JSONRenderer(console)
        renderer.render(all_result)
    """

    def __init__(self, console: Console | None = None, indent: int = 2) -> None:
        self._console = console or Console()
        self._indent = indent

    def dumps(self, data: Any) -> str:
        """Render data to a JSON string."""
        if isinstance(data, ResultModel):
            data = data.to_dict()
        elif isinstance(data, BaseModel):
            data = data.model_dump(mode="json", by_alias=True)

        return json.dumps(data, indent=self._indent, ensure_ascii=False)

    def render(self, data: Any) -> None:
        """Print data as JSON to the console."""
        self._console.print(self.dumps(data), markup=False, highlight=False, soft_wrap=True)
