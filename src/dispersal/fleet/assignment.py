"""Manual single-aircraft assignment to capacity-bounded positions."""

from __future__ import annotations

import logging
from dataclasses import replace

from dispersal.core.types import Aircraft, AircraftStatus
from dispersal.fleet.occupancy import OccupancyCalculator
from dispersal.fleet.store import FleetStore

logger = logging.getLogger(__name__)


class AssignmentService:
    """Atomic assign / unassign / clear on the position universe.

    Failures are reported through return values; nothing here raises for
    unknown ids or full positions.
    """

    def __init__(self, store: FleetStore, occupancy: OccupancyCalculator | None = None):
        self._store = store
        self._occupancy = occupancy or OccupancyCalculator(store)

    def assign_aircraft(self, aircraft_id: str, position_id: str) -> bool:
        """Place one aircraft on one position.

        Returns False, without mutating anything, when the position does
        not exist, is already full, or the aircraft is in maintenance.
        An aircraft already holding another position is moved there, so
        it is never counted at two positions.  An unknown aircraft id
        matches nothing and is not an error.
        """
        with self._store.transaction():
            position = self._store.get_position(position_id)
            if position is None:
                logger.debug("assign %s: unknown position %s", aircraft_id, position_id)
                return False

            aircraft = self._store.get_aircraft(aircraft_id)
            if aircraft is not None and aircraft.in_maintenance:
                logger.info("assign %s rejected: aircraft in maintenance", aircraft_id)
                return False

            if aircraft is not None and aircraft.assigned_position_id == position_id:
                return True

            occupancy = self._occupancy.get_position_occupancy(position_id)
            if occupancy >= position.capacity:
                logger.info(
                    "assign %s rejected: position %s full (%d/%d)",
                    aircraft_id, position_id, occupancy, position.capacity,
                )
                return False

            if aircraft is None:
                logger.debug("assign: unknown aircraft %s, nothing written", aircraft_id)
                return True

            if aircraft.assigned_position_id is not None:
                logger.debug(
                    "Moving %s from %s to %s",
                    aircraft_id, aircraft.assigned_position_id, position_id,
                )
            self._store.publish(aircraft={
                aircraft_id: replace(
                    aircraft,
                    assigned_position_id=position_id,
                    status=AircraftStatus.ASSIGNED,
                ),
            })
        logger.debug("Assigned %s -> %s", aircraft_id, position_id)
        return True

    def unassign_aircraft(self, aircraft_id: str) -> None:
        """Release the aircraft's position.  Maintenance status is kept."""
        with self._store.transaction():
            aircraft = self._store.get_aircraft(aircraft_id)
            if aircraft is None:
                return
            self._store.publish(aircraft={aircraft_id: _released(aircraft)})
        logger.debug("Unassigned %s", aircraft_id)

    def clear_all_assignments(self) -> None:
        """Release every position assignment in one publish.

        Also repairs maintenance aircraft that somehow hold a position.
        """
        with self._store.transaction():
            updates = {a.id: _released(a) for a in self._store.aircraft}
            self._store.publish(aircraft=updates)
        logger.info("Cleared all position assignments (%d aircraft)", len(updates))


def _released(aircraft: Aircraft) -> Aircraft:
    status = (
        AircraftStatus.MAINTENANCE
        if aircraft.in_maintenance
        else AircraftStatus.UNASSIGNED
    )
    if aircraft.assigned_position_id is None and aircraft.status is status:
        return aircraft
    return replace(aircraft, assigned_position_id=None, status=status)
