"""Reservation write path.

ReservationService sits between callers and the stores. It owns the rules the
read-only core assumes:
- start_time < end_time whenever both are given
- bookings fall between today and Config.MAX_ADVANCE_DAYS ahead
- meeting-room bookings are written against the group's parent space
- invalid_space cells are never booked
- a logical space holds at most one active booking per overlapping window
  (a booking without times covers the whole day)
- cancelled reservations are final
"""

from __future__ import annotations

from datetime import date as Date
from datetime import timedelta
from typing import Any, Callable, Iterable, List, Optional, Tuple
from uuid import uuid4

from pydantic import ValidationError

from .config import Config
from .errors import (
    ReservationConflictError,
    ReservationValidationError,
    SpaceNotFoundError,
    SpaceNotReservableError,
)
from .layout import GroupingCache, MeetingRoomGroup, find_meeting_room_group, group_display_name
from .logging_utils import log_info, log_success
from .query import OfficeView
from .schemas import (
    DateLike,
    Reservation,
    ReservationStatus,
    SpaceType,
    TimeLike,
    normalize_date,
    normalize_time,
    time_to_minutes,
)
from .stores import MapStore, ReservationStore

_DAY_MINUTES = 24 * 60

# Fields that move a booking in time; changing one re-runs the conflict check
_SCHEDULE_FIELDS = {"date", "start_time", "end_time", "status"}


def _window(start: Optional[str], end: Optional[str]) -> Tuple[int, int]:
    """Minutes covered by a booking; a missing bound extends to the day edge."""
    low = time_to_minutes(start) if start else 0
    high = time_to_minutes(end) if end else _DAY_MINUTES
    return low, high


def _check_time_range(start: Optional[str], end: Optional[str]) -> None:
    if start and end and time_to_minutes(start) >= time_to_minutes(end):
        raise ReservationValidationError(
            f"Start time must be before end time (got {start}-{end})"
        )


def _overlaps(first: Reservation, second: Tuple[int, int]) -> bool:
    low, high = _window(first.start_time, first.end_time)
    return low < second[1] and second[0] < high


class ReservationService:
    """Validates and records reservations against a map layout.

    Args:
        map_store: Source of map layouts
        reservation_store: Where reservations are read and written
        cache: GroupingCache shared across calls; a private one by default
        today: Clock for the booking window; ``date.today`` by default
    """

    def __init__(
        self,
        map_store: MapStore,
        reservation_store: ReservationStore,
        *,
        cache: Optional[GroupingCache] = None,
        today: Optional[Callable[[], Date]] = None,
    ):
        self.map_store = map_store
        self.reservation_store = reservation_store
        self.cache = cache if cache is not None else GroupingCache()
        self.today = today or Date.today

    def _check_booking_window(self, day: str) -> None:
        today = self.today()
        requested = Date.fromisoformat(day)
        if requested < today:
            raise ReservationValidationError(f"Cannot reserve dates in the past ({day})")
        latest = today + timedelta(days=Config.MAX_ADVANCE_DAYS)
        if requested > latest:
            raise ReservationValidationError(
                f"Cannot reserve more than {Config.MAX_ADVANCE_DAYS} days in advance ({day})"
            )

    async def _group_for(self, map_id: str, space_id: str) -> MeetingRoomGroup:
        """Logical space containing ``space_id`` on ``map_id`` (parent first)."""
        spaces = await self.map_store.get_spaces(map_id)
        target = next((space for space in spaces if space.id == space_id), None)
        if target is None:
            raise SpaceNotFoundError(f"Space '{space_id}' not found on map '{map_id}'")
        return find_meeting_room_group(spaces, target, cache=self.cache)

    async def _check_conflicts(
        self,
        group: MeetingRoomGroup,
        day: str,
        start: Optional[str],
        end: Optional[str],
        *,
        ignore_id: Optional[str] = None,
    ) -> None:
        member_ids = {member.id for member in group}
        existing = await self.reservation_store.get_reservations(date=day, status=ReservationStatus.ACTIVE)
        window = _window(start, end)
        conflicts = [
            reservation
            for reservation in existing
            if reservation.id != ignore_id
            and reservation.space_id in member_ids
            and _overlaps(reservation, window)
        ]
        if conflicts:
            raise ReservationConflictError(
                f"'{group_display_name(group)}' is already reserved on {day} "
                f"by {conflicts[0].user_name or conflicts[0].user_id}"
            )

    async def create_reservation(
        self,
        map_id: str,
        space_id: str,
        user_id: str,
        date: DateLike,
        *,
        user_name: Optional[str] = None,
        start_time: TimeLike = None,
        end_time: TimeLike = None,
        notes: Optional[str] = None,
    ) -> Reservation:
        """Book the logical space containing ``space_id``.

        Raises:
            ReservationValidationError: Malformed date/time, start >= end, or a
                date outside the booking window
            SpaceNotFoundError: ``space_id`` is not on the map
            SpaceNotReservableError: The space is an invalid_space cell
            ReservationConflictError: An active booking overlaps the window
        """

        try:
            day = normalize_date(date)
            start = normalize_time(start_time)
            end = normalize_time(end_time)
        except ValueError as exc:
            raise ReservationValidationError(str(exc)) from exc
        self._check_booking_window(day)
        _check_time_range(start, end)

        group = await self._group_for(map_id, space_id)
        if group[0].type == SpaceType.INVALID_SPACE:
            raise SpaceNotReservableError(f"Space '{group[0].name}' cannot be reserved")
        await self._check_conflicts(group, day, start, end)

        reservation = Reservation(
            id=str(uuid4()),
            space_id=group[0].id,
            user_id=user_id,
            user_name=user_name or user_id,
            date=day,
            start_time=start,
            end_time=end,
            notes=notes,
        )
        await self.reservation_store.save_reservation(reservation)
        log_success(
            f"Reserved '{group_display_name(group)}' for {reservation.user_name} on {day}"
        )
        return reservation

    async def update_reservation(self, map_id: str, reservation_id: str, **changes: Any) -> Reservation:
        """Apply field changes (user_name, date, start_time, end_time, status, notes).

        Moving a booking (new date or times) goes through the same booking
        window and conflict checks as ``create_reservation``.

        Raises:
            ReservationNotFoundError: Unknown id
            ReservationValidationError: Malformed values, start >= end, a
                cancelled reservation, or a date outside the booking window
            ReservationConflictError: The moved booking overlaps another one
        """

        allowed = {"user_name", "date", "start_time", "end_time", "status", "notes"}
        unknown = set(changes) - allowed
        if unknown:
            raise ReservationValidationError(
                f"Cannot update reservation field(s): {', '.join(sorted(unknown))}"
            )

        current = await self.reservation_store.get_reservation(reservation_id)
        if current.status == ReservationStatus.CANCELLED:
            raise ReservationValidationError(f"Cannot update cancelled reservation '{reservation_id}'")
        try:
            updated = Reservation.model_validate({**current.model_dump(), **changes})
        except ValidationError as exc:
            raise ReservationValidationError(str(exc)) from exc
        _check_time_range(updated.start_time, updated.end_time)

        if updated.is_active and _SCHEDULE_FIELDS & set(changes):
            if updated.date != current.date:
                self._check_booking_window(updated.date)
            group = await self._group_for(map_id, updated.space_id)
            await self._check_conflicts(
                group, updated.date, updated.start_time, updated.end_time, ignore_id=reservation_id
            )

        await self.reservation_store.save_reservation(updated)
        log_info(f"Updated reservation '{reservation_id}'")
        return updated

    async def cancel_reservation(self, reservation_id: str) -> Reservation:
        """Mark a reservation cancelled; it stops occupying its space."""
        current = await self.reservation_store.get_reservation(reservation_id)
        if current.status == ReservationStatus.CANCELLED:
            return current
        cancelled = current.model_copy(update={"status": ReservationStatus.CANCELLED})
        await self.reservation_store.save_reservation(cancelled)
        log_info(f"Cancelled reservation '{reservation_id}'")
        return cancelled

    async def delete_reservation(self, map_id: str, reservation_id: str) -> List[Reservation]:
        """Delete a booking together with its copies on the other group members.

        Older data can hold one record per meeting room of a group for the same
        logical booking. Every active record on the group with the same user
        name, date and window is removed along with ``reservation_id``.

        Returns:
            The deleted reservations

        Raises:
            ReservationNotFoundError: Unknown id
        """

        current = await self.reservation_store.get_reservation(reservation_id)
        removed = [current]
        spaces = await self.map_store.get_spaces(map_id)
        target = next((space for space in spaces if space.id == current.space_id), None)
        if target is not None and target.type == SpaceType.MEETING_ROOM:
            group = find_meeting_room_group(spaces, target, cache=self.cache)
            siblings = await self.reservation_store.get_reservations(
                date=current.date, status=ReservationStatus.ACTIVE
            )
            removed.extend(_same_booking(current, group, siblings))

        for reservation in removed:
            await self.reservation_store.delete_reservation(reservation.id)
        log_info(f"Deleted reservation '{reservation_id}' ({len(removed)} record(s))")
        return removed

    async def list_reservations(self, date: DateLike) -> List[Reservation]:
        return await self.reservation_store.get_reservations(date=date)

    async def snapshot(self, map_id: str, date: DateLike) -> OfficeView:
        """Fetch spaces and the day's reservations and wrap them in an OfficeView."""
        spaces = await self.map_store.get_spaces(map_id)
        reservations = await self.reservation_store.get_reservations(date=date)
        return OfficeView(spaces, reservations, date, cache=self.cache)


def _same_booking(
    booking: Reservation, group: MeetingRoomGroup, candidates: Iterable[Reservation]
) -> List[Reservation]:
    member_ids = {member.id for member in group}
    return [
        other
        for other in candidates
        if other.id != booking.id
        and other.space_id in member_ids
        and other.user_name == booking.user_name
        and other.start_time == booking.start_time
        and other.end_time == booking.end_time
    ]
