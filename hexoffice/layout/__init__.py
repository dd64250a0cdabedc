"""Map layout geometry and meeting-room grouping."""

from .hexgrid import (
    Cell,
    footprint,
    neighbors,
    occupancy_index,
    space_at,
    validate_space,
    validate_spaces,
)
from .grouping import (
    GroupingCache,
    MeetingRoomGroup,
    find_meeting_room_group,
    get_meeting_room_group_name,
    group_adjacent_meeting_rooms,
    group_display_name,
    group_parent_id,
    layout_fingerprint,
    meeting_room_group_index,
)

__all__ = [
    "Cell",
    "footprint",
    "neighbors",
    "occupancy_index",
    "space_at",
    "validate_space",
    "validate_spaces",
    "GroupingCache",
    "MeetingRoomGroup",
    "find_meeting_room_group",
    "get_meeting_room_group_name",
    "group_adjacent_meeting_rooms",
    "group_display_name",
    "group_parent_id",
    "layout_fingerprint",
    "meeting_room_group_index",
]
