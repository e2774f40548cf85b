"""Base model for sprint poker records.

Every record inherits from :class:`SprintPokerModel` which provides:

* ``alias_generator=to_camel`` so the backend's camelCase keys map
  automatically to snake_case fields.
* ``extra="ignore"`` so new backend fields do not break parsing.
* :meth:`SprintPokerModel.to_wire` to dump a record back to camelCase,
  leaving out locally derived fields.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SprintPokerModel(BaseModel):
    """Base for mutable session records (stories, users, votes)."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        validate_assignment=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump as the backend expects it (camelCase, no ``None`` values)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FrozenSprintPokerModel(SprintPokerModel):
    """Base for immutable records (session descriptor, cards)."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
