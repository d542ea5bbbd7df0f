"""Shared base model for SmarterU domain records."""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class SmarterUModel(BaseModel):
    """Base model that re-validates every assignment."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the model."""

        return self.model_dump(mode="json", exclude_none=True)
