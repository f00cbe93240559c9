"""Schemas and helpers shared by the patient and appointment APIs."""

import math
import re
from datetime import date, time
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")


class CamelModel(BaseModel):
    """Base model exchanging camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def blank_to_none(value: Any) -> Any:
    """Treat empty or whitespace-only strings as absent."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def is_valid_date(value: str) -> bool:
    """Check a ``YYYY-MM-DD`` calendar date."""
    if not DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_valid_time(value: str) -> bool:
    """Check an ``HH:MM`` or ``HH:MM:SS`` wall-clock time."""
    if not TIME_PATTERN.match(value):
        return False
    try:
        time.fromisoformat(value)
    except ValueError:
        return False
    return True


class Pagination(BaseModel):
    """Offset/limit window applied after filtering and sorting."""

    limit: int = Field(default=50, ge=1)
    offset: int = Field(default=0, ge=0)

    def apply(self, items: list[T]) -> list[T]:
        """Slice the window out of a sorted list."""
        return items[self.offset : self.offset + self.limit]

    @property
    def page(self) -> int:
        """1-based page number the offset falls on."""
        return self.offset // self.limit + 1

    def total_pages(self, total: int) -> int:
        """Number of pages needed for ``total`` items."""
        return math.ceil(total / self.limit)


class PaginatedResponse(CamelModel, Generic[T]):
    """Paginated list envelope."""

    items: list[T]
    total: int
    page: int
    total_pages: int

    @classmethod
    def build(cls, items: list[Any], pagination: Pagination) -> "PaginatedResponse":
        """Paginate an already sorted list."""
        return cls(
            items=pagination.apply(items),
            total=len(items),
            page=pagination.page,
            total_pages=pagination.total_pages(len(items)),
        )


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
