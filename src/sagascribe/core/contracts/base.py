"""Shared base for wire contracts.

The timeline API speaks camelCase JSON (``bookId``, ``characterIds``,
``isPlotPoint``); Python code uses snake_case attributes. Every contract
inherits :class:`WireModel`, which generates the camelCase aliases and accepts
either spelling on input.

Serialize for the wire with ``model.model_dump(by_alias=True)`` (FastAPI does
this automatically for ``response_model`` types).
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EntityId = Annotated[int, Field(ge=1, description="Store-assigned identifier.")]


class WireModel(BaseModel):
    """Base model with camelCase aliases and snake_case attribute access."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, object]:
        """Return the JSON-safe camelCase payload for this model."""
        return self.model_dump(mode="json", by_alias=True)


__all__ = ["WireModel", "EntityId"]
