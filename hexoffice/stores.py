"""
Map and reservation store interfaces.

The grouping core only reads snapshots; these stores are where those
snapshots come from and where the write path (``ReservationService``) puts
new bookings. Hosts plug in their own backend (HTTP API, database) by
subclassing the abstract stores. In-memory implementations are included for
tests and embedded use.

Async interface rationale:
- Real backends are I/O bound (network, database)
- initialize() and close() manage connections; they are no-ops in memory

Usage pattern:
    maps = InMemoryMapStore()
    bookings = InMemoryReservationStore()
    await maps.initialize()
    await bookings.initialize()

    spaces = await maps.get_spaces(map_id)
    reservations = await bookings.get_reservations(date="2024-06-01")
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .errors import ReservationNotFoundError, SpaceNotFoundError
from .schemas import DateLike, Reservation, ReservationStatus, Space, normalize_date


class MapStore(ABC):
    """Abstract source of office map layouts."""

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections or load data. Called once before use."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections or file handles."""
        pass

    @abstractmethod
    async def get_spaces(self, map_id: str) -> List[Space]:
        """
        Return every space of a map in its stored order.

        Args:
            map_id: Office map identifier

        Returns:
            Spaces of the map, empty list for an unknown map
        """
        pass

    @abstractmethod
    async def save_space(self, map_id: str, space: Space) -> Space:
        """Insert a space or replace the one with the same id (position kept)."""
        pass

    @abstractmethod
    async def delete_space(self, map_id: str, space_id: str) -> None:
        """
        Remove a space from a map.

        Raises:
            SpaceNotFoundError: If the map has no such space
        """
        pass


class ReservationStore(ABC):
    """Abstract source of reservations."""

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def get_reservations(
        self,
        *,
        date: Optional[DateLike] = None,
        space_id: Optional[str] = None,
        status: Optional[ReservationStatus] = None,
    ) -> List[Reservation]:
        """
        Return reservations matching every given filter.

        Args:
            date: Only reservations on this day (time components ignored)
            space_id: Only reservations recorded against this space
            status: Only reservations with this status
        """
        pass

    @abstractmethod
    async def get_reservation(self, reservation_id: str) -> Reservation:
        """
        Raises:
            ReservationNotFoundError: If the id is unknown
        """
        pass

    @abstractmethod
    async def save_reservation(self, reservation: Reservation) -> Reservation:
        """Insert or replace a reservation keyed by id."""
        pass

    @abstractmethod
    async def delete_reservation(self, reservation_id: str) -> None:
        """
        Hard-delete a reservation.

        Raises:
            ReservationNotFoundError: If the id is unknown
        """
        pass


class InMemoryMapStore(MapStore):
    """Dict-backed map store. Data is lost when the process exits.

    Storage structure:
    - maps: Dict[map_id, List[Space]] - spaces per map, insertion order kept
    """

    def __init__(self, maps: Optional[Dict[str, List[Space]]] = None):
        self.maps: Dict[str, List[Space]] = {
            map_id: list(spaces) for map_id, spaces in (maps or {}).items()
        }

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        # Data is kept so callers can inspect it after close()
        pass

    async def get_spaces(self, map_id: str) -> List[Space]:
        return list(self.maps.get(map_id, []))

    async def save_space(self, map_id: str, space: Space) -> Space:
        spaces = self.maps.setdefault(map_id, [])
        stored = space if space.map_id == map_id else space.model_copy(update={"map_id": map_id})
        for position, existing in enumerate(spaces):
            if existing.id == stored.id:
                spaces[position] = stored
                return stored
        spaces.append(stored)
        return stored

    async def delete_space(self, map_id: str, space_id: str) -> None:
        spaces = self.maps.get(map_id, [])
        remaining = [space for space in spaces if space.id != space_id]
        if len(remaining) == len(spaces):
            raise SpaceNotFoundError(f"Space '{space_id}' not found on map '{map_id}'")
        self.maps[map_id] = remaining


class InMemoryReservationStore(ReservationStore):
    """Dict-backed reservation store keyed by reservation id.

    Performance characteristics:
    - Save/get/delete: O(1) dict operations
    - Filtered listing: O(n) scan
    """

    def __init__(self, reservations: Optional[List[Reservation]] = None):
        self.reservations: Dict[str, Reservation] = {
            reservation.id: reservation for reservation in (reservations or [])
        }

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get_reservations(
        self,
        *,
        date: Optional[DateLike] = None,
        space_id: Optional[str] = None,
        status: Optional[ReservationStatus] = None,
    ) -> List[Reservation]:
        day = normalize_date(date) if date is not None else None
        return [
            reservation
            for reservation in self.reservations.values()
            if (day is None or reservation.date == day)
            and (space_id is None or reservation.space_id == space_id)
            and (status is None or reservation.status == status)
        ]

    async def get_reservation(self, reservation_id: str) -> Reservation:
        reservation = self.reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(f"Reservation '{reservation_id}' not found")
        return reservation

    async def save_reservation(self, reservation: Reservation) -> Reservation:
        self.reservations[reservation.id] = reservation
        return reservation

    async def delete_reservation(self, reservation_id: str) -> None:
        if self.reservations.pop(reservation_id, None) is None:
            raise ReservationNotFoundError(f"Reservation '{reservation_id}' not found")
