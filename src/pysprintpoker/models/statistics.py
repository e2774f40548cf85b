"""Derived vote statistics model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

#: Placeholder shown while a story is not ended.
UNSET = "-"


class VoteStatistics(BaseModel):
    """Minimum and maximum revealed estimates of the active story."""

    model_config = ConfigDict(frozen=True)

    min: str = UNSET
    max: str = UNSET

    @property
    def is_set(self) -> bool:
        return self.min != UNSET or self.max != UNSET
