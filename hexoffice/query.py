"""Read-only query facade used by map and reservation screens.

The UI decides colours and labels; it only needs to know, per space or cell,
whether the logical space behind it is reserved on the selected date and which
group it belongs to. Those answers come from here. Nothing in this module
writes; bookings go through ``ReservationService``.

``OfficeView`` wraps one (spaces, reservations, date) snapshot and computes
the meeting-room groups once, so a full map render does not regroup per cell.
The module-level functions are convenience wrappers for one-off questions.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from .errors import SpaceValidationError
from .layout import (
    GroupingCache,
    MeetingRoomGroup,
    find_meeting_room_group,
    group_adjacent_meeting_rooms,
    group_display_name,
    meeting_room_group_index,
    occupancy_index,
    validate_space,
    validate_spaces,
)
from .reservations import (
    active_reservations_on,
    available_logical_space_count,
    group_raw_reservations,
    merge_reservations,
    reservations_by_space,
    reserved_logical_space_count,
    total_logical_space_count,
)
from .schemas import (
    DateLike,
    GroupedReservationView,
    GroupReservationSummary,
    Reservation,
    Space,
    SpaceType,
    normalize_date,
)

SpaceOrGroup = Union[Space, Sequence[Space]]


class CellState(str, Enum):
    """What a map cell shows on a given date."""

    EMPTY = "empty"
    INVALID = "invalid"
    AVAILABLE = "available"
    RESERVED = "reserved"


class HexCellStatus(BaseModel):
    """Semantic state of one map cell, the input to colour/title rendering."""

    x: int
    y: int
    state: CellState
    space: Optional[Space] = None
    group: List[Space] = Field(default_factory=list, description="Logical space the cell belongs to")
    title: str = Field(..., description="Hover label, e.g. 'Desk 4 (Available)'")


def _resolve_group(space_or_group: SpaceOrGroup, spaces: Optional[Sequence[Space]]) -> MeetingRoomGroup:
    if isinstance(space_or_group, Space):
        if spaces is None:
            if space_or_group.type == SpaceType.MEETING_ROOM:
                raise SpaceValidationError(
                    f"Meeting room '{space_or_group.id}' needs the map layout to resolve its group",
                    space_id=space_or_group.id,
                )
            return [validate_space(space_or_group)]
        return find_meeting_room_group(spaces, space_or_group)
    return list(validate_spaces(space_or_group))


def _status_title(name: str, state: CellState) -> str:
    if state == CellState.RESERVED:
        return f"{name} (Reserved)"
    if state == CellState.INVALID:
        return f"{name} (Unavailable)"
    return f"{name} (Available)"


def is_space_or_group_reserved(
    space_or_group: SpaceOrGroup,
    reservations: Iterable[Reservation],
    date: DateLike,
    *,
    spaces: Optional[Sequence[Space]] = None,
) -> bool:
    """True when the logical space behind ``space_or_group`` is booked on ``date``.

    Args:
        space_or_group: A single space or an already resolved group
        reservations: Raw reservations (any dates/statuses)
        date: Day to check
        spaces: Full map layout. When given, a meeting room is expanded to
            its whole group. Required for a lone meeting room; other spaces
            are checked on their own without it.

    Raises:
        SpaceValidationError: A lone meeting room was passed without ``spaces``
    """

    group = _resolve_group(space_or_group, spaces)
    member_ids = {member.id for member in group if member.type != SpaceType.INVALID_SPACE}
    return any(reservation.space_id in member_ids for reservation in active_reservations_on(reservations, date))


def space_reservations_for_display(
    space_or_group: SpaceOrGroup,
    reservations: Iterable[Reservation],
    date: DateLike,
    *,
    spaces: Optional[Sequence[Space]] = None,
) -> List[GroupedReservationView]:
    """Merged bookings of the logical space behind ``space_or_group`` on ``date``."""

    group = _resolve_group(space_or_group, spaces)
    member_ids = {member.id for member in group}
    relevant = [reservation for reservation in reservations if reservation.space_id in member_ids]
    meeting_groups = [group] if group and group[0].type == SpaceType.MEETING_ROOM else []
    return merge_reservations(relevant, group, date, groups=meeting_groups)


def hex_cell_status(
    spaces: Sequence[Space],
    reservations: Iterable[Reservation],
    date: DateLike,
    x: int,
    y: int,
) -> HexCellStatus:
    """State of cell ``(x, y)`` on ``date``."""
    return OfficeView(spaces, reservations, date).cell_status(x, y)


class OfficeView:
    """Immutable snapshot of one map on one date.

    Build a new view after any refetch of spaces or reservations; mixing a
    stale layout with fresh reservations is the caller's bug to avoid.
    """

    def __init__(
        self,
        spaces: Sequence[Space],
        reservations: Iterable[Reservation],
        date: DateLike,
        *,
        cache: Optional[GroupingCache] = None,
    ):
        self.spaces = tuple(validate_spaces(spaces))
        self.reservations = tuple(reservations)
        self.date = normalize_date(date)
        self.groups: List[MeetingRoomGroup] = group_adjacent_meeting_rooms(self.spaces, cache=cache)
        self._group_by_member = meeting_room_group_index(self.groups)
        self._cells = occupancy_index(self.spaces)
        self._reserved_ids = {
            reservation.space_id for reservation in active_reservations_on(self.reservations, self.date)
        }

    def space_at(self, x: int, y: int) -> Optional[Space]:
        return self._cells.get((x, y))

    def group_of(self, space: Space) -> MeetingRoomGroup:
        """Members of the logical space containing ``space`` (parent first)."""
        if space.type == SpaceType.MEETING_ROOM:
            group = self._group_by_member.get(space.id)
            if group is not None:
                return list(group)
        return [space]

    def parent_id(self, space: Space) -> str:
        return self.group_of(space)[0].id

    def group_name(self, space: Space) -> str:
        return group_display_name(self.group_of(space))

    def is_reserved(self, space: Space) -> bool:
        if space.type == SpaceType.INVALID_SPACE:
            return False
        return any(member.id in self._reserved_ids for member in self.group_of(space))

    def reservations_for(self, space: Space) -> List[GroupedReservationView]:
        return space_reservations_for_display(self.group_of(space), self.reservations, self.date)

    def cell_status(self, x: int, y: int) -> HexCellStatus:
        space = self.space_at(x, y)
        if space is None:
            return HexCellStatus(x=x, y=y, state=CellState.EMPTY, title="Empty space")
        if space.type == SpaceType.INVALID_SPACE:
            state = CellState.INVALID
            group = [space]
        else:
            state = CellState.RESERVED if self.is_reserved(space) else CellState.AVAILABLE
            group = self.group_of(space)
        return HexCellStatus(
            x=x,
            y=y,
            state=state,
            space=space,
            group=group,
            title=_status_title(group_display_name(group), state),
        )

    def total_count(self) -> int:
        return total_logical_space_count(self.spaces, groups=self.groups)

    def reserved_count(self) -> int:
        return reserved_logical_space_count(self.spaces, self.reservations, self.date, groups=self.groups)

    def available_count(self) -> int:
        return available_logical_space_count(self.spaces, self.reservations, self.date, groups=self.groups)

    def merged_reservations(self) -> List[GroupedReservationView]:
        return merge_reservations(self.reservations, self.spaces, self.date, groups=self.groups)

    def group_reservations(self) -> Dict[str, GroupReservationSummary]:
        return group_raw_reservations(self.reservations, self.spaces, self.date, groups=self.groups)

    def reservations_by_space(self) -> Dict[str, List[Reservation]]:
        return reservations_by_space(self.reservations, self.spaces, self.date)
