"""Derived occupancy queries over a FleetStore."""

from __future__ import annotations

import logging
from collections import Counter

from dispersal.core.types import Aircraft, AircraftStatus
from dispersal.fleet.store import FleetStore

logger = logging.getLogger(__name__)


class OccupancyCalculator:
    """Read-only view of how full each position is.

    All queries tolerate stale or unknown ids: they return 0 or an empty
    list instead of raising, because display code calls them with whatever
    ids it last rendered.
    """

    def __init__(self, store: FleetStore):
        self._store = store

    def get_position_occupancy(self, position_id: str) -> int:
        return sum(
            1 for a in self._store.aircraft if a.assigned_position_id == position_id
        )

    def get_available_capacity(self, position_id: str) -> int:
        position = self._store.get_position(position_id)
        if position is None:
            return 0
        available = position.capacity - self.get_position_occupancy(position_id)
        if available < 0:
            logger.warning(
                "Position %s over capacity by %d; reporting 0 available",
                position_id, -available,
            )
            return 0
        return available

    def get_assigned_aircraft(self, position_id: str) -> list[Aircraft]:
        return [a for a in self._store.aircraft if a.assigned_position_id == position_id]

    def get_unassigned_aircraft(self) -> list[Aircraft]:
        """The eligibility pool: no position and not in maintenance."""
        return [
            a for a in self._store.aircraft
            if a.assigned_position_id is None
            and a.status is not AircraftStatus.MAINTENANCE
        ]

    def occupancy_map(self) -> dict[str, int]:
        """Occupancy of every known position, computed in one pass."""
        counts = Counter(
            a.assigned_position_id
            for a in self._store.aircraft
            if a.assigned_position_id is not None
        )
        return {p.id: counts.get(p.id, 0) for p in self._store.positions}

    def base_occupancy(self, base_id: str) -> tuple[int, int]:
        """``(occupied, capacity)`` summed over the base's positions."""
        occ = self.occupancy_map()
        positions = self._store.positions_for_base(base_id)
        return (
            sum(occ[p.id] for p in positions),
            sum(p.capacity for p in positions),
        )
