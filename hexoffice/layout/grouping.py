"""Meeting-room connectivity grouping.

Meeting rooms are drawn cell by cell, so one physical room is often several
``meeting_room`` spaces sitting next to each other. Hex-adjacent meeting rooms
(directly or through other meeting rooms) form one group that is reserved,
counted and displayed as a single logical space.

Group identity:
- The parent of a group is its first member in BFS seed order, i.e. the
  earliest meeting room of the group in the input list. Reservations for any
  member are written against the parent's id.
- Groups are recomputed from the space list on every call. ``GroupingCache``
  may memoize them keyed by a fingerprint of the layout; reservations never
  take part in the key.
"""

from __future__ import annotations

import hashlib
from collections import OrderedDict, deque
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..config import Config
from ..errors import AmbiguousGroupingWarning, SpaceValidationError, warn_soft
from ..logging_utils import log_debug
from ..schemas import Space, SpaceType
from .hexgrid import neighbors, occupancy_index, validate_space, validate_spaces

MeetingRoomGroup = List[Space]


def _unique_meeting_rooms(spaces: Sequence[Space]) -> List[Space]:
    """Meeting rooms in input order, later duplicates of an id dropped."""

    rooms: List[Space] = []
    seen: Set[str] = set()
    for space in spaces:
        if space.type != SpaceType.MEETING_ROOM:
            continue
        if space.id in seen:
            warn_soft(
                f"Duplicate meeting room id '{space.id}' at ({space.x}, {space.y}); "
                "keeping the first occurrence",
                AmbiguousGroupingWarning,
                stacklevel=4,
            )
            continue
        seen.add(space.id)
        rooms.append(space)
    return rooms


def _compute_groups(spaces: Sequence[Space]) -> List[MeetingRoomGroup]:
    rooms = _unique_meeting_rooms(spaces)
    # Only meeting-room cells are indexed, so every other cell blocks propagation
    index = occupancy_index(rooms)
    visited: Set[str] = set()
    groups: List[MeetingRoomGroup] = []

    for seed in rooms:
        if seed.id in visited:
            continue
        visited.add(seed.id)
        group: MeetingRoomGroup = []
        queue: deque[Space] = deque([seed])

        while queue:
            current = queue.popleft()
            group.append(current)
            # Check the border of every cell, not only the top-left corner
            for cell_x, cell_y in current.cells():
                for cell in neighbors(cell_x, cell_y):
                    adjacent = index.get(cell)
                    if adjacent is None or adjacent.id in visited:
                        continue
                    visited.add(adjacent.id)
                    queue.append(adjacent)

        groups.append(group)

    log_debug(f"Grouped {len(rooms)} meeting room(s) into {len(groups)} group(s)")
    return groups


def layout_fingerprint(spaces: Iterable[Space]) -> str:
    """Stable digest of a space list, used as the grouping cache key.

    Order is part of the digest because it decides which member is the parent.
    """

    digest = hashlib.sha256()
    for space in spaces:
        digest.update(space.model_dump_json().encode("utf-8"))
        digest.update(b"\n")
    return digest.hexdigest()


class GroupingCache:
    """LRU memo of meeting-room groups keyed by ``layout_fingerprint``.

    Any change to a space (position, size, type, name, order) changes the
    fingerprint, so stale groups are never returned and nothing has to be
    cleared by hand when the map is edited.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = Config.GROUP_CACHE_SIZE if max_entries is None else max_entries
        self._entries: OrderedDict[str, List[MeetingRoomGroup]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def groups(self, spaces: Sequence[Space]) -> List[MeetingRoomGroup]:
        """Return groups for an already validated space list."""

        if self.max_entries <= 0:
            self.misses += 1
            return _compute_groups(spaces)

        key = layout_fingerprint(spaces)
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            self._entries.move_to_end(key)
        else:
            self.misses += 1
            cached = _compute_groups(spaces)
            self._entries[key] = cached
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        # Hand out copies so callers cannot edit cached groups
        return [list(group) for group in cached]

    def clear(self) -> None:
        self._entries.clear()


def group_adjacent_meeting_rooms(
    spaces: Sequence[Space], *, cache: Optional[GroupingCache] = None
) -> List[MeetingRoomGroup]:
    """Partition all meeting rooms into hex-connected groups.

    Args:
        spaces: Every space on the map (non meeting rooms are ignored)
        cache: Optional GroupingCache to reuse groups for an unchanged layout

    Returns:
        Groups in seed order; each group lists its parent first

    Raises:
        SpaceValidationError: If any space has malformed geometry
    """

    validated = validate_spaces(spaces)
    if cache is not None:
        return cache.groups(validated)
    return _compute_groups(validated)


def meeting_room_group_index(groups: Iterable[MeetingRoomGroup]) -> Dict[str, MeetingRoomGroup]:
    """Map every member id to the group containing it."""
    return {member.id: group for group in groups for member in group}


def find_meeting_room_group(
    spaces: Sequence[Space], target: Space, *, cache: Optional[GroupingCache] = None
) -> MeetingRoomGroup:
    """Return the group containing ``target`` (matched by id).

    Non meeting rooms, and meeting rooms absent from ``spaces``, form a
    singleton group of just ``target``.
    """

    validate_space(target)
    if target.type != SpaceType.MEETING_ROOM:
        return [target]
    for group in group_adjacent_meeting_rooms(spaces, cache=cache):
        if any(member.id == target.id for member in group):
            return group
    return [target]


def group_parent_id(
    spaces: Sequence[Space], space: Space, *, cache: Optional[GroupingCache] = None
) -> str:
    """Resolve ``space`` to the id every reservation for it must be written against."""
    return find_meeting_room_group(spaces, space, cache=cache)[0].id


def group_display_name(group: Sequence[Space]) -> str:
    """Human-readable group name.

    A single room keeps its own name; larger groups read
    ``"<first name alphabetically> + <N-1> more"``.
    """

    if not group:
        raise SpaceValidationError("Cannot name an empty meeting room group")
    if len(group) == 1:
        return group[0].name
    names = sorted(space.name for space in group)
    return f"{names[0]} + {len(group) - 1} more"


get_meeting_room_group_name = group_display_name
