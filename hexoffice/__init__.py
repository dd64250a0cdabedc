"""
Hexoffice - meeting-room grouping and reservation aggregation for hex office maps.

Office maps are grids of spaces drawn as hexagons. Adjacent meeting-room
cells behave as one reservable room; this library computes those groups and
answers availability, count and listing questions about them.

Pure core: every query takes an explicit (spaces, reservations, date)
snapshot. No file I/O required. No database required.
Stores and the reservation service are injected by the host.
"""

__version__ = "0.1.0"

from .config import Config
from .errors import (
    AmbiguousGroupingWarning,
    HexOfficeError,
    OrphanReferenceWarning,
    ReservationConflictError,
    ReservationNotFoundError,
    ReservationValidationError,
    SpaceNotFoundError,
    SpaceNotReservableError,
    SpaceValidationError,
)

# Core schemas
from .schemas import (
    GroupedReservationView,
    GroupReservationSummary,
    Reservation,
    ReservationStatus,
    Space,
    SpaceType,
    normalize_date,
    normalize_time,
)

# Layout geometry and grouping
from .layout import (
    GroupingCache,
    find_meeting_room_group,
    get_meeting_room_group_name,
    group_adjacent_meeting_rooms,
    group_display_name,
    group_parent_id,
    layout_fingerprint,
    neighbors,
    space_at,
    validate_spaces,
)

# Reservation aggregation
from .reservations import (
    available_logical_space_count,
    group_raw_reservations,
    group_reservations,
    is_group_reserved,
    is_space_reserved,
    merge_reservations,
    reservations_by_space,
    reserved_logical_space_count,
    total_logical_space_count,
)

# Query facade
from .query import (
    CellState,
    HexCellStatus,
    OfficeView,
    hex_cell_status,
    is_space_or_group_reserved,
    space_reservations_for_display,
)

# Stores and write path
from .stores import InMemoryMapStore, InMemoryReservationStore, MapStore, ReservationStore
from .services import ReservationService

__all__ = [
    "Config",
    # Errors
    "HexOfficeError",
    "SpaceValidationError",
    "SpaceNotFoundError",
    "SpaceNotReservableError",
    "ReservationValidationError",
    "ReservationConflictError",
    "ReservationNotFoundError",
    "OrphanReferenceWarning",
    "AmbiguousGroupingWarning",
    # Schemas
    "Space",
    "SpaceType",
    "Reservation",
    "ReservationStatus",
    "GroupedReservationView",
    "GroupReservationSummary",
    "normalize_date",
    "normalize_time",
    # Layout
    "neighbors",
    "space_at",
    "validate_spaces",
    "group_adjacent_meeting_rooms",
    "find_meeting_room_group",
    "group_display_name",
    "get_meeting_room_group_name",
    "group_parent_id",
    "layout_fingerprint",
    "GroupingCache",
    # Aggregation
    "is_space_reserved",
    "is_group_reserved",
    "group_reservations",
    "total_logical_space_count",
    "reserved_logical_space_count",
    "available_logical_space_count",
    "merge_reservations",
    "group_raw_reservations",
    "reservations_by_space",
    # Query facade
    "CellState",
    "HexCellStatus",
    "OfficeView",
    "hex_cell_status",
    "is_space_or_group_reserved",
    "space_reservations_for_display",
    # Stores and services
    "MapStore",
    "ReservationStore",
    "InMemoryMapStore",
    "InMemoryReservationStore",
    "ReservationService",
]
