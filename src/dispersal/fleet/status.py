"""Aircraft location reports, suspicion flags and situation filters."""

from __future__ import annotations

import logging
from dataclasses import replace

from dispersal.core.types import (
    Aircraft,
    AircraftStatus,
    AircraftType,
    GroundState,
    Operator,
    Situation,
    StatusUpdater,
)
from dispersal.fleet.store import FleetStore

logger = logging.getLogger(__name__)


class StatusService:
    """Updates the situation fields of aircraft.

    Neither operation touches position or dome assignments: an aircraft
    can be nominally assigned while its real location is uncertain.
    """

    def __init__(self, store: FleetStore):
        self._store = store

    def update_aircraft_location(
        self,
        aircraft_id: str,
        lat: float,
        lon: float,
        location: GroundState | str,
    ) -> None:
        """Record a confirmed location, clearing any suspicion."""
        location = GroundState(location)
        with self._store.transaction():
            aircraft = self._store.get_aircraft(aircraft_id)
            if aircraft is None:
                return
            self._store.publish(aircraft={
                aircraft_id: replace(
                    aircraft,
                    location=location,
                    location_uncertain=False,
                    uncertain_latitude=None,
                    uncertain_longitude=None,
                    suspicion_reason=None,
                    home_latitude=float(lat),
                    home_longitude=float(lon),
                    last_status_update=self._store.clock.now(),
                ),
            })
        logger.debug("Location of %s -> %s (%.4f, %.4f)", aircraft_id, location.value, lat, lon)

    def mark_aircraft_as_suspicious(
        self,
        aircraft_id: str,
        reason: str,
        operator: Operator | None = None,
    ) -> None:
        """Flag the aircraft's location as uncertain, stamped with the operator.

        *operator* overrides the session's current operator for this call.
        """
        operator = operator or self._store.current_operator
        updater = StatusUpdater(name=operator.username) if operator else None
        with self._store.transaction():
            aircraft = self._store.get_aircraft(aircraft_id)
            if aircraft is None:
                return
            self._store.publish(aircraft={
                aircraft_id: replace(
                    aircraft,
                    location_uncertain=True,
                    suspicion_reason=reason,
                    last_status_update=self._store.clock.now(),
                    last_status_updated_by=updater,
                ),
            })
        logger.info(
            "Aircraft %s marked suspicious by %s: %s",
            aircraft_id, updater.name if updater else "unknown", reason,
        )

    # ------------------------------------------------------------------
    # Situation filters
    # ------------------------------------------------------------------

    def suspicious_aircraft(self) -> list[Aircraft]:
        return [a for a in self._store.aircraft if a.location_uncertain]

    def airborne_aircraft(self) -> list[Aircraft]:
        # No dome means not parked, so it counts as airborne
        return [
            a for a in self._store.aircraft
            if not a.location_uncertain
            and (a.location is GroundState.AIR or a.assigned_dome_id is None)
        ]

    def grounded_aircraft(self) -> list[Aircraft]:
        return [
            a for a in self._store.aircraft
            if not a.location_uncertain
            and a.location is GroundState.GROUND
            and a.assigned_dome_id is not None
        ]

    def filter_aircraft(self, situation: Situation | str | None) -> list[Aircraft]:
        if situation is None:
            return []
        situation = Situation(situation)
        if situation is Situation.SUSPICIOUS:
            return self.suspicious_aircraft()
        if situation is Situation.AIR:
            return self.airborne_aircraft()
        if situation is Situation.GROUND:
            return self.grounded_aircraft()
        return self._store.aircraft

    def search_aircraft(
        self,
        query: str = "",
        aircraft_type: AircraftType | str | None = None,
        status: AircraftStatus | str | None = None,
    ) -> list[Aircraft]:
        """Palette search: substring on callsign or type, plus exact filters."""
        q = query.lower()
        type_filter = AircraftType(aircraft_type) if aircraft_type else None
        status_filter = AircraftStatus(status) if status else None
        return [
            a for a in self._store.aircraft
            if (q in a.callsign.lower() or q in a.type.value)
            and (type_filter is None or a.type is type_filter)
            and (status_filter is None or a.status is status_filter)
        ]
