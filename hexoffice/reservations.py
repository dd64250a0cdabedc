"""Reservation aggregation over meeting-room groups.

Raw reservations are recorded per space. For statistics and display a
meeting-room group is one logical space, so reservations on any member are
resolved to the group's parent and bookings that describe the same logical
booking (same group, user name and time window) are merged.

Every function takes an explicit (spaces, reservations, date) snapshot and
has no side effects. Functions that need the meeting-room groups accept an
optional precomputed ``groups`` list (it must come from the same ``spaces``)
and otherwise compute it, optionally through a ``GroupingCache``.

Soft failures:
- Reservations whose ``space_id`` is not in ``spaces`` are orphans. They
  never match a space, so counts ignore them; listings skip them and report
  an OrphanReferenceWarning.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import OrphanReferenceWarning, SpaceValidationError, warn_soft
from .layout import (
    GroupingCache,
    MeetingRoomGroup,
    group_adjacent_meeting_rooms,
    group_display_name,
    meeting_room_group_index,
    validate_spaces,
)
from .logging_utils import log_debug
from .schemas import (
    DateLike,
    GroupedReservationView,
    GroupReservationSummary,
    Reservation,
    Space,
    SpaceType,
    normalize_date,
)

_UNGROUPED_TYPES = (SpaceType.MEETING_ROOM, SpaceType.INVALID_SPACE)


def _groups_for(
    spaces: Sequence[Space],
    groups: Optional[List[MeetingRoomGroup]],
    cache: Optional[GroupingCache],
) -> List[MeetingRoomGroup]:
    if groups is not None:
        return groups
    return group_adjacent_meeting_rooms(spaces, cache=cache)


def _standalone_spaces(spaces: Iterable[Space]) -> List[Space]:
    """Reservable spaces that are not meeting rooms (each is its own logical space)."""
    return [space for space in spaces if space.type not in _UNGROUPED_TYPES]


def active_reservations_on(reservations: Iterable[Reservation], date: DateLike) -> List[Reservation]:
    """Active reservations falling on ``date`` (input order kept)."""
    day = normalize_date(date)
    return [reservation for reservation in reservations if reservation.is_active and reservation.date == day]


def is_space_reserved(space_id: str, reservations: Iterable[Reservation], date: DateLike) -> bool:
    """True when ``space_id`` itself has an active reservation on ``date``."""
    return any(reservation.space_id == space_id for reservation in active_reservations_on(reservations, date))


def is_group_reserved(group: Sequence[Space], reservations: Iterable[Reservation], date: DateLike) -> bool:
    """True when any member of ``group`` has an active reservation on ``date``."""
    member_ids = {space.id for space in group}
    return any(reservation.space_id in member_ids for reservation in active_reservations_on(reservations, date))


def group_reservations(
    group: Sequence[Space], reservations: Iterable[Reservation], date: DateLike
) -> List[Reservation]:
    """Active reservations on ``date`` recorded against the group's parent."""

    if not group:
        raise SpaceValidationError("Cannot look up reservations for an empty meeting room group")
    parent_id = group[0].id
    return [reservation for reservation in active_reservations_on(reservations, date) if reservation.space_id == parent_id]


def _logical_counts(
    spaces: Sequence[Space],
    reservations: Iterable[Reservation],
    date: DateLike,
    groups: Optional[List[MeetingRoomGroup]],
    cache: Optional[GroupingCache],
) -> Tuple[int, int]:
    validated = validate_spaces(spaces)
    groups = _groups_for(validated, groups, cache)
    standalone = _standalone_spaces(validated)
    reserved_ids = {reservation.space_id for reservation in active_reservations_on(reservations, date)}
    known_ids = {space.id for space in validated}
    for space_id in sorted(reserved_ids - known_ids):
        log_debug(f"Not counting reservations on unknown space '{space_id}'")

    total = len(groups) + len(standalone)
    # A group counts once no matter how many members carry reservations
    reserved_groups = sum(1 for group in groups if any(member.id in reserved_ids for member in group))
    reserved_standalone = sum(1 for space in standalone if space.id in reserved_ids)
    return total, reserved_groups + reserved_standalone


def total_logical_space_count(
    spaces: Sequence[Space],
    *,
    groups: Optional[List[MeetingRoomGroup]] = None,
    cache: Optional[GroupingCache] = None,
) -> int:
    """Meeting-room groups plus every other reservable space (invalid cells excluded)."""

    validated = validate_spaces(spaces)
    return len(_groups_for(validated, groups, cache)) + len(_standalone_spaces(validated))


def reserved_logical_space_count(
    spaces: Sequence[Space],
    reservations: Iterable[Reservation],
    date: DateLike,
    *,
    groups: Optional[List[MeetingRoomGroup]] = None,
    cache: Optional[GroupingCache] = None,
) -> int:
    """Logical spaces with at least one active reservation on ``date``."""
    return _logical_counts(spaces, reservations, date, groups, cache)[1]


def available_logical_space_count(
    spaces: Sequence[Space],
    reservations: Iterable[Reservation],
    date: DateLike,
    *,
    groups: Optional[List[MeetingRoomGroup]] = None,
    cache: Optional[GroupingCache] = None,
) -> int:
    """Logical spaces free on ``date`` (total minus reserved)."""
    total, reserved = _logical_counts(spaces, reservations, date, groups, cache)
    return total - reserved


def _first_by_id(spaces: Iterable[Space]) -> Dict[str, Space]:
    index: Dict[str, Space] = {}
    for space in spaces:
        index.setdefault(space.id, space)
    return index


def merge_reservations(
    reservations: Iterable[Reservation],
    spaces: Sequence[Space],
    date: DateLike,
    *,
    groups: Optional[List[MeetingRoomGroup]] = None,
    cache: Optional[GroupingCache] = None,
) -> List[GroupedReservationView]:
    """Collapse the active reservations of ``date`` into logical bookings.

    Meeting-room reservations resolve to their group's parent; bookings with
    the same resolved id, user name and time window merge into one view.
    Views come back in the order their first reservation appeared.
    """

    validated = validate_spaces(spaces)
    groups = _groups_for(validated, groups, cache)
    space_by_id = _first_by_id(validated)
    group_by_member = meeting_room_group_index(groups)

    views: Dict[Tuple[str, str, Optional[str], Optional[str]], GroupedReservationView] = {}
    orphans: List[str] = []

    for reservation in active_reservations_on(reservations, date):
        space = space_by_id.get(reservation.space_id)
        if space is None:
            orphans.append(reservation.id)
            continue
        if space.type == SpaceType.INVALID_SPACE:
            log_debug(f"Ignoring reservation '{reservation.id}' on invalid space '{space.id}'")
            continue

        group = group_by_member.get(space.id) if space.type == SpaceType.MEETING_ROOM else None
        resolved_id = group[0].id if group else space.id
        key = (resolved_id, reservation.user_name, reservation.start_time, reservation.end_time)

        view = views.get(key)
        if view is None:
            view = GroupedReservationView(
                key=key,
                space_id=resolved_id,
                user_id=reservation.user_id,
                user_name=reservation.user_name,
                date=reservation.date,
                start_time=reservation.start_time,
                end_time=reservation.end_time,
                is_group=group is not None,
                group_name=group_display_name(group) if group else space.name,
                group_size=len(group) if group else 1,
                member_space_ids=[member.id for member in group] if group else [space.id],
            )
            views[key] = view
        view.reservations.append(reservation)

    if orphans:
        warn_soft(
            f"Skipped {len(orphans)} reservation(s) referencing spaces not on the map: "
            f"{', '.join(orphans)}",
            OrphanReferenceWarning,
        )
    return list(views.values())


def group_raw_reservations(
    reservations: Iterable[Reservation],
    spaces: Sequence[Space],
    date: DateLike,
    *,
    groups: Optional[List[MeetingRoomGroup]] = None,
    cache: Optional[GroupingCache] = None,
) -> Dict[str, GroupReservationSummary]:
    """Bucket the logical meeting-room bookings of ``date`` per group.

    Returns:
        Mapping of group parent id to its summary (name, size, merged
        bookings, member ids). Groups without bookings are omitted.
    """

    summaries: Dict[str, GroupReservationSummary] = {}
    for view in merge_reservations(reservations, spaces, date, groups=groups, cache=cache):
        if not view.is_group:
            continue
        summary = summaries.get(view.space_id)
        if summary is None:
            summary = GroupReservationSummary(
                group_name=view.group_name,
                group_size=view.group_size,
                member_space_ids=list(view.member_space_ids),
            )
            summaries[view.space_id] = summary
        summary.reservations.append(view)
    return summaries


def reservations_by_space(
    reservations: Iterable[Reservation],
    spaces: Sequence[Space],
    date: DateLike,
) -> Dict[str, List[Reservation]]:
    """Active reservations of ``date`` for standalone (non meeting room) spaces."""

    standalone = {space.id for space in _standalone_spaces(validate_spaces(spaces))}
    listing: Dict[str, List[Reservation]] = {}
    for reservation in active_reservations_on(reservations, date):
        if reservation.space_id in standalone:
            listing.setdefault(reservation.space_id, []).append(reservation)
    return listing
