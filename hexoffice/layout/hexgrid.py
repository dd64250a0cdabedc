"""Hexagonal grid geometry for office maps.

Maps are stored on an integer grid of cells but drawn as flat-top hexagons
where odd rows are shifted half a cell to the right. Every cell therefore has
six neighbours whose offsets depend on row parity:

    odd row  (y % 2 == 1): N, NE, E, S, SE, W
    even row (y % 2 == 0): N, E, S, SW, W, NW

Python's modulo keeps parity consistent for negative rows, so adjacency stays
symmetric across the whole plane.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import Config
from ..errors import AmbiguousGroupingWarning, SpaceValidationError, warn_soft
from ..schemas import Space

Cell = Tuple[int, int]

_ODD_ROW_OFFSETS: Tuple[Cell, ...] = (
    (0, -1),   # top
    (1, -1),   # top-right
    (1, 0),    # right
    (0, 1),    # bottom
    (1, 1),    # bottom-right
    (-1, 0),   # left
)

_EVEN_ROW_OFFSETS: Tuple[Cell, ...] = (
    (0, -1),   # top
    (1, 0),    # right
    (0, 1),    # bottom
    (-1, 1),   # bottom-left
    (-1, 0),   # left
    (-1, -1),  # top-left
)


def neighbors(x: int, y: int) -> List[Cell]:
    """Return the six cells adjacent to ``(x, y)``.

    Coordinates are not bounds-checked; callers drop cells that hold no space.
    """

    offsets = _ODD_ROW_OFFSETS if y % 2 == 1 else _EVEN_ROW_OFFSETS
    return [(x + dx, y + dy) for dx, dy in offsets]


def footprint(space: Space) -> List[Cell]:
    """Return every cell covered by ``space``."""
    return list(space.cells())


def validate_space(space: Space, *, allow_negative: Optional[bool] = None) -> Space:
    """Raise SpaceValidationError when ``space`` has unusable geometry.

    Args:
        space: Space to check
        allow_negative: Accept negative x/y. Defaults to
            ``Config.ALLOW_NEGATIVE_COORDINATES``.
    """

    if allow_negative is None:
        allow_negative = Config.ALLOW_NEGATIVE_COORDINATES
    if space.width < 1 or space.height < 1:
        raise SpaceValidationError(
            f"Space '{space.id}' ({space.name}) has non-positive size "
            f"{space.width}x{space.height}",
            space_id=space.id,
        )
    if not allow_negative and (space.x < 0 or space.y < 0):
        raise SpaceValidationError(
            f"Space '{space.id}' ({space.name}) has negative position ({space.x}, {space.y})",
            space_id=space.id,
        )
    return space


def validate_spaces(
    spaces: Iterable[Space], *, allow_negative: Optional[bool] = None
) -> List[Space]:
    """Validate every space and return them as a list (input order kept)."""
    return [validate_space(space, allow_negative=allow_negative) for space in spaces]


def occupancy_index(spaces: Sequence[Space], *, warn: bool = True) -> Dict[Cell, Space]:
    """Map each occupied cell to the space covering it.

    When footprints overlap the first space in list order keeps the cell, the
    same winner ``space_at`` returns. Overlaps are reported as an
    AmbiguousGroupingWarning when ``warn`` is set.
    """

    index: Dict[Cell, Space] = {}
    collisions: List[Tuple[Cell, str, str]] = []
    for space in spaces:
        for cell in space.cells():
            owner = index.get(cell)
            if owner is None:
                index[cell] = space
            else:
                collisions.append((cell, owner.id, space.id))

    if warn and collisions:
        cell, kept, dropped = collisions[0]
        warn_soft(
            f"{len(collisions)} overlapping cell(s) in layout; e.g. {cell} claimed by "
            f"'{kept}' and '{dropped}', keeping '{kept}'",
            AmbiguousGroupingWarning,
        )
    return index


def space_at(spaces: Sequence[Space], x: int, y: int) -> Optional[Space]:
    """Return the first space whose footprint contains ``(x, y)``, or None."""

    for space in validate_spaces(spaces):
        if space.contains(x, y):
            return space
    return None
