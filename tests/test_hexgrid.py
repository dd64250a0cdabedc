"""Tests for hex adjacency, footprints and spatial lookup."""

import pytest

from hexoffice.config import Config
from hexoffice.errors import AmbiguousGroupingWarning, SpaceValidationError
from hexoffice.layout import footprint, neighbors, occupancy_index, space_at, validate_spaces
from hexoffice.schemas import Space, SpaceType


def make_space(space_id, x, y, *, width=1, height=1, kind=SpaceType.WORKSTATION, name=None):
    return Space(
        id=space_id,
        name=name or space_id,
        type=kind,
        x=x,
        y=y,
        width=width,
        height=height,
    )


def test_neighbors_even_row_offsets():
    assert neighbors(3, 2) == [(3, 1), (4, 2), (3, 3), (2, 3), (2, 2), (2, 1)]


def test_neighbors_odd_row_offsets():
    assert neighbors(3, 1) == [(3, 0), (4, 0), (4, 1), (3, 2), (4, 2), (2, 1)]


def test_neighbors_are_six_distinct_cells_excluding_origin():
    for x in range(-3, 4):
        for y in range(-3, 4):
            cells = neighbors(x, y)
            assert len(cells) == 6
            assert len(set(cells)) == 6
            assert (x, y) not in cells


def test_neighbors_adjacency_is_symmetric():
    # Includes negative rows: parity must stay consistent below zero
    for x in range(-4, 5):
        for y in range(-4, 5):
            for nx, ny in neighbors(x, y):
                assert (x, y) in neighbors(nx, ny), f"({x},{y}) -> ({nx},{ny}) not mutual"


def test_footprint_covers_every_cell():
    room = make_space("m1", 2, 3, width=2, height=2, kind=SpaceType.MEETING_ROOM)
    assert footprint(room) == [(2, 3), (3, 3), (2, 4), (3, 4)]


def test_space_at_finds_multi_cell_space():
    desk = make_space("d1", 0, 0)
    room = make_space("m1", 2, 1, width=2, height=2, kind=SpaceType.MEETING_ROOM)
    spaces = [desk, room]

    assert space_at(spaces, 0, 0) == desk
    assert space_at(spaces, 3, 2) == room
    assert space_at(spaces, 4, 2) is None
    assert space_at(spaces, -1, 0) is None


def test_space_at_returns_first_match_on_overlap():
    first = make_space("a", 1, 1)
    second = make_space("b", 1, 1)
    assert space_at([first, second], 1, 1) == first


def test_space_at_rejects_malformed_geometry():
    spaces = [make_space("d1", 0, 0), make_space("bad", 1, 0, width=0)]
    with pytest.raises(SpaceValidationError) as excinfo:
        space_at(spaces, 0, 0)
    assert excinfo.value.space_id == "bad"


def test_validate_spaces_negative_height():
    with pytest.raises(SpaceValidationError):
        validate_spaces([make_space("bad", 0, 0, height=-2)])


def test_negative_coordinates_follow_config(monkeypatch):
    spaces = [make_space("d1", -1, 0)]
    with pytest.raises(SpaceValidationError):
        validate_spaces(spaces)

    monkeypatch.setattr(Config, "ALLOW_NEGATIVE_COORDINATES", True)
    assert validate_spaces(spaces) == spaces
    # Explicit argument wins over config
    with pytest.raises(SpaceValidationError):
        validate_spaces(spaces, allow_negative=False)


def test_occupancy_index_warns_on_overlap_and_keeps_first():
    first = make_space("a", 0, 0, width=2)
    second = make_space("b", 1, 0)
    with pytest.warns(AmbiguousGroupingWarning):
        index = occupancy_index([first, second])
    assert index[(1, 0)] == first
    assert index[(0, 0)] == first
