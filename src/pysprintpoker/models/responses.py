"""Typed backend responses.

Every backend operation answers with a status tag and, on success, the
canonical record.  Rejections are values (``KO``), not exceptions.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ResponseStatus(StrEnum):
    OK = "OK"
    KO = "KO"


class OperationResult(BaseModel, Generic[T]):
    """Outcome of a backend operation."""

    model_config = ConfigDict(frozen=True)

    status: ResponseStatus
    record: T | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == ResponseStatus.OK

    @classmethod
    def success(cls, record: T | None = None) -> OperationResult[T]:
        return cls(status=ResponseStatus.OK, record=record)

    @classmethod
    def rejected(cls, message: str = "") -> OperationResult[T]:
        return cls(status=ResponseStatus.KO, message=message)
