"""Filter primitives used by :class:`~smarteru.queries.list_users.ListUsersQuery`."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import field_validator

from ..models.base import SmarterUModel

WIRE_DATE_FORMAT = "%d/%m/%Y"


class MatchType(str, Enum):
    EXACT = "EXACT"
    CONTAINS = "CONTAINS"


class MatchTag(SmarterUModel):
    match_type: MatchType
    value: str


def format_wire_date(value: Any) -> str:
    """Normalise a date, datetime or date string to ``dd/mm/yyyy``."""

    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime(WIRE_DATE_FORMAT)
    if isinstance(value, str):
        for fmt in (WIRE_DATE_FORMAT, "%Y-%m-%d"):
            try:
                return datetime.strptime(value, fmt).strftime(WIRE_DATE_FORMAT)
            except ValueError:
                continue
        raise ValueError(f"{value!r} is not a dd/mm/yyyy or yyyy-mm-dd date")
    raise ValueError(f"Unsupported date value: {type(value)!r}")


class DateRangeTag(SmarterUModel):
    """An inclusive date range; both ends are stored in wire format."""

    date_from: str
    date_to: str

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _to_wire_format(cls, value: Any) -> str:
        return format_wire_date(value)
