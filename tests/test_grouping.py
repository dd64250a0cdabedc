"""Tests for meeting-room connectivity grouping, parent selection and naming."""

import pytest

from hexoffice.errors import AmbiguousGroupingWarning, SpaceValidationError
from hexoffice.layout import (
    GroupingCache,
    find_meeting_room_group,
    group_adjacent_meeting_rooms,
    group_display_name,
    group_parent_id,
    layout_fingerprint,
)
from hexoffice.schemas import Space, SpaceType


def room(space_id, x, y, *, width=1, height=1, name=None):
    return Space(
        id=space_id,
        name=name or f"Room {space_id}",
        type=SpaceType.MEETING_ROOM,
        x=x,
        y=y,
        width=width,
        height=height,
    )


def desk(space_id, x, y, kind=SpaceType.WORKSTATION):
    return Space(id=space_id, name=f"Desk {space_id}", type=kind, x=x, y=y)


def member_ids(groups):
    return [sorted(space.id for space in group) for group in groups]


def test_three_rooms_across_row_parity_form_one_group():
    # (0,0)-(1,0) share an even row edge; (1,0)-(1,1) is the "bottom" neighbour
    spaces = [room("a", 0, 0), room("b", 1, 0), room("c", 1, 1)]
    groups = group_adjacent_meeting_rooms(spaces)
    assert member_ids(groups) == [["a", "b", "c"]]


def test_lone_room_is_singleton_group():
    spaces = [room("solo", 5, 5, name="Fishbowl"), desk("d1", 0, 0)]
    groups = group_adjacent_meeting_rooms(spaces)
    assert member_ids(groups) == [["solo"]]
    assert group_display_name(groups[0]) == "Fishbowl"


def test_far_apart_rooms_stay_separate():
    groups = group_adjacent_meeting_rooms([room("a", 0, 0), room("b", 10, 10)])
    assert member_ids(groups) == [["a"], ["b"]]


def test_multi_cell_room_checks_every_border_cell():
    # "b" only touches the right-most cell of "a", never its top-left corner
    spaces = [room("a", 0, 0, width=3), room("b", 2, 1)]
    assert member_ids(group_adjacent_meeting_rooms(spaces)) == [["a", "b"]]


def test_other_space_types_block_propagation():
    spaces = [room("a", 0, 0), desk("d", 1, 0), room("b", 2, 0)]
    assert member_ids(group_adjacent_meeting_rooms(spaces)) == [["a"], ["b"]]

    spaces = [room("a", 0, 0), desk("x", 1, 0, kind=SpaceType.INVALID_SPACE), room("b", 2, 0)]
    assert member_ids(group_adjacent_meeting_rooms(spaces)) == [["a"], ["b"]]


def test_groups_partition_all_meeting_rooms():
    spaces = [
        room("a", 0, 0),
        room("b", 1, 0),
        desk("d1", 3, 0),
        room("c", 5, 0),
        room("d", 5, 1),
        room("e", 8, 4, width=2, height=2),
        desk("d2", 0, 4, kind=SpaceType.CUBICLE),
        room("f", 0, 6),
    ]
    groups = group_adjacent_meeting_rooms(spaces)

    seen = [space.id for group in groups for space in group]
    expected = sorted(space.id for space in spaces if space.type == SpaceType.MEETING_ROOM)
    assert sorted(seen) == expected
    assert len(seen) == len(set(seen))


def test_grouping_is_idempotent():
    spaces = [room("a", 0, 0), room("b", 1, 0), room("c", 4, 4), room("d", 4, 5)]
    first = {frozenset(space.id for space in group) for group in group_adjacent_meeting_rooms(spaces)}
    second = {frozenset(space.id for space in group) for group in group_adjacent_meeting_rooms(spaces)}
    assert first == second


def test_distinct_rooms_at_same_position_are_both_grouped():
    spaces = [room("a", 0, 0), room("b", 0, 0)]
    with pytest.warns(AmbiguousGroupingWarning):
        groups = group_adjacent_meeting_rooms(spaces)
    seen = sorted(space.id for group in groups for space in group)
    assert seen == ["a", "b"]


def test_duplicate_ids_keep_first_occurrence():
    spaces = [room("a", 0, 0), room("a", 6, 6)]
    with pytest.warns(AmbiguousGroupingWarning):
        groups = group_adjacent_meeting_rooms(spaces)
    assert len(groups) == 1
    assert (groups[0][0].x, groups[0][0].y) == (0, 0)


def test_malformed_room_fails_fast():
    with pytest.raises(SpaceValidationError):
        group_adjacent_meeting_rooms([room("a", 0, 0), room("b", 1, 0, width=0)])


def test_find_group_for_member_and_other_types():
    a, b, c = room("a", 0, 0), room("b", 1, 0), room("c", 9, 9)
    workstation = desk("d", 4, 4)
    spaces = [a, b, c, workstation]

    assert sorted(s.id for s in find_meeting_room_group(spaces, b)) == ["a", "b"]
    assert find_meeting_room_group(spaces, c) == [c]
    assert find_meeting_room_group(spaces, workstation) == [workstation]
    # Unknown meeting room falls back to itself
    stray = room("z", 20, 20)
    assert find_meeting_room_group(spaces, stray) == [stray]


def test_parent_is_first_group_member_in_input_order():
    spaces = [desk("d", 5, 5), room("c", 1, 1), room("a", 0, 0), room("b", 1, 0)]
    for member in spaces[1:]:
        assert group_parent_id(spaces, member) == "c"
    assert group_parent_id(spaces, spaces[0]) == "d"

    groups = group_adjacent_meeting_rooms(spaces)
    assert groups[0][0].id == "c"


def test_group_display_name():
    group = [room("b", 1, 0, name="Room B"), room("a", 0, 0, name="Room A"), room("c", 1, 1, name="Room C")]
    assert group_display_name(group) == "Room A + 2 more"
    assert group_display_name(group[:1]) == "Room B"
    with pytest.raises(SpaceValidationError):
        group_display_name([])


def test_fingerprint_tracks_layout_changes():
    spaces = [room("a", 0, 0), room("b", 1, 0)]
    moved = [room("a", 0, 0), room("b", 3, 0)]
    assert layout_fingerprint(spaces) == layout_fingerprint(list(spaces))
    assert layout_fingerprint(spaces) != layout_fingerprint(moved)
    # Order decides the parent, so it is part of the key
    assert layout_fingerprint(spaces) != layout_fingerprint(list(reversed(spaces)))


def test_grouping_cache_reuses_and_invalidates_by_layout():
    cache = GroupingCache(max_entries=4)
    spaces = [room("a", 0, 0), room("b", 1, 0)]

    first = group_adjacent_meeting_rooms(spaces, cache=cache)
    second = group_adjacent_meeting_rooms(spaces, cache=cache)
    assert (cache.misses, cache.hits) == (1, 1)
    assert member_ids(first) == member_ids(second)

    # Editing the returned lists must not leak into the cache
    second[0].clear()
    assert member_ids(group_adjacent_meeting_rooms(spaces, cache=cache)) == [["a", "b"]]

    moved = [room("a", 0, 0), room("b", 4, 0)]
    assert member_ids(group_adjacent_meeting_rooms(moved, cache=cache)) == [["a"], ["b"]]
    assert cache.misses == 2
    assert len(cache) == 2


def test_grouping_cache_eviction_and_disabled():
    cache = GroupingCache(max_entries=1)
    group_adjacent_meeting_rooms([room("a", 0, 0)], cache=cache)
    group_adjacent_meeting_rooms([room("b", 0, 0)], cache=cache)
    assert len(cache) == 1

    disabled = GroupingCache(max_entries=0)
    group_adjacent_meeting_rooms([room("a", 0, 0)], cache=disabled)
    group_adjacent_meeting_rooms([room("a", 0, 0)], cache=disabled)
    assert len(disabled) == 0
    assert disabled.hits == 0
