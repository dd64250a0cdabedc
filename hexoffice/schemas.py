"""
Pydantic schemas for the hexoffice reservation core.

All records exchanged between the stores, the grouping engine and the query
layer are defined here. There is exactly one canonical shape for a space and
one for a reservation; display aggregates are separate read-only models.

Normalization rules:
- Reservation dates are calendar dates. Any time component is truncated
  ("2024-06-01T00:00:00Z" -> "2024-06-01") before storage or comparison.
- Reservation times are 24-hour "HH:MM". Seconds are stripped
  ("09:00:00" -> "09:00").
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


DateLike = Union[str, date, datetime]
TimeLike = Union[str, time, None]

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?$")


def normalize_date(value: DateLike) -> str:
    """Return ``value`` as an ISO ``YYYY-MM-DD`` string, dropping any time part.

    Raises:
        ValueError: If the remaining text is not a valid calendar date
    """

    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    day = text.split("T", 1)[0].split(" ", 1)[0]
    try:
        return date.fromisoformat(day).isoformat()
    except ValueError as exc:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc


def normalize_time(value: TimeLike) -> Optional[str]:
    """Return ``value`` as ``HH:MM`` (seconds stripped), or None when empty."""

    if value is None:
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M")
    text = str(value).strip()
    if not text:
        return None
    match = _TIME_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return f"{hours:02d}:{minutes:02d}"


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for a normalized ``HH:MM`` string."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class SpaceType(str, Enum):
    """Every kind of cell a map can hold."""

    WORKSTATION = "workstation"
    MEETING_ROOM = "meeting_room"
    CUBICLE = "cubicle"
    INVALID_SPACE = "invalid_space"


class ReservationStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class Space(BaseModel):
    """A rectangular footprint on the map grid.

    Geometry is not rejected here: the layout functions validate every space
    list they receive, so malformed data coming back from a store fails at the
    computation that would otherwise produce wrong groups or counts.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str = Field(..., description="Opaque unique identifier")
    name: str = Field(..., description="Display name")
    type: SpaceType = Field(..., description="Space kind")
    x: int = Field(..., description="Left-most column of the footprint")
    y: int = Field(..., description="Top row of the footprint")
    width: int = Field(1, description="Number of columns spanned")
    height: int = Field(1, description="Number of rows spanned")
    capacity: int = Field(0, description="Number of people the space seats")
    map_id: Optional[str] = Field(None, description="Owning office map, if known")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Free-form host data, ignored by the engine")

    @property
    def is_meeting_room(self) -> bool:
        return self.type == SpaceType.MEETING_ROOM

    @property
    def is_reservable(self) -> bool:
        return self.type != SpaceType.INVALID_SPACE

    def contains(self, x: int, y: int) -> bool:
        """Return True when cell ``(x, y)`` lies inside this footprint."""
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Yield every ``(x, y)`` cell of the footprint, row by row."""
        for cell_y in range(self.y, self.y + self.height):
            for cell_x in range(self.x, self.x + self.width):
                yield cell_x, cell_y


class Reservation(BaseModel):
    """A booking of one space for one date and optional time window."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(..., description="Unique reservation identifier")
    # For meeting rooms this is the parent space of the room's group
    space_id: str = Field(..., description="Reserved space")
    user_id: str = Field(..., description="Who made the booking")
    user_name: str = Field("", description="Display name of the booker")
    date: str = Field(..., description="Calendar date, YYYY-MM-DD")
    start_time: Optional[str] = Field(None, description="Start of the window, HH:MM")
    end_time: Optional[str] = Field(None, description="End of the window, HH:MM")
    status: ReservationStatus = Field(ReservationStatus.ACTIVE, description="Only active bookings occupy a space")
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: DateLike) -> str:
        return normalize_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _normalize_time(cls, value: TimeLike) -> Optional[str]:
        return normalize_time(value)

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE

    def on(self, day: DateLike) -> bool:
        """Return True when this reservation falls on ``day``."""
        return self.date == normalize_date(day)


class GroupedReservationView(BaseModel):
    """One logical booking, possibly recorded as several raw reservations.

    Raw reservations merge when they resolve to the same group (or space),
    the same user name and the same time window.
    """

    key: Tuple[str, str, Optional[str], Optional[str]] = Field(
        ..., description="(resolved space id, user_name, start_time, end_time)",
    )
    space_id: str = Field(..., description="Resolved parent (or plain space) id")
    user_id: str
    user_name: str
    date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reservations: List[Reservation] = Field(
        default_factory=list, description="Original raw reservations, input order",
    )
    is_group: bool = Field(False, description="True for meeting-room groups")
    group_name: str = Field(..., description="Group display name or space name")
    group_size: int = Field(1, description="Number of member spaces")
    member_space_ids: List[str] = Field(default_factory=list)


class GroupReservationSummary(BaseModel):
    """All bookings of one meeting-room group on one date."""

    group_name: str
    group_size: int
    reservations: List[GroupedReservationView] = Field(default_factory=list)
    member_space_ids: List[str] = Field(default_factory=list)
