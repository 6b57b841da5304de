"""Squadron / shelter / dome hierarchy — the second assignment universe.

A dome holds at most one aircraft.  Dome assignments are independent of
position assignments; nothing here reads or writes
``Aircraft.assigned_position_id``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from dispersal.core.types import Aircraft, Dome
from dispersal.fleet.store import FleetStore

logger = logging.getLogger(__name__)


@dataclass
class DomeCounts:
    total: int = 0
    occupied: int = 0

    @property
    def empty(self) -> int:
        return self.total - self.occupied

    def to_dict(self) -> dict:
        return {"total": self.total, "occupied": self.occupied, "empty": self.empty}


@dataclass
class BaseDomeSummary:
    """Dome occupancy for one base, overall and per shelter aircraft type."""

    base_id: str
    total: int = 0
    occupied: int = 0
    by_type: dict[str, DomeCounts] = field(default_factory=dict)

    @property
    def empty(self) -> int:
        return self.total - self.occupied

    def to_dict(self) -> dict:
        return {
            "base_id": self.base_id,
            "total": self.total,
            "occupied": self.occupied,
            "empty": self.empty,
            "by_type": {k: v.to_dict() for k, v in self.by_type.items()},
        }


class ShelterService:
    def __init__(self, store: FleetStore):
        self._store = store

    def is_dome_occupied(self, dome_id: str) -> bool:
        dome = self._store.get_dome(dome_id)
        return dome is not None and dome.occupied

    def domes_for_base(self, base_id: str) -> list[Dome]:
        squadron_ids = {s.id for s in self._store.squadrons if s.base_id == base_id}
        shelter_ids = {
            s.id for s in self._store.shelters if s.squadron_id in squadron_ids
        }
        return [d for d in self._store.domes if d.shelter_id in shelter_ids]

    def assign_dome(self, aircraft_id: str, dome_id: str) -> bool:
        """Park an aircraft in a dome.

        Returns False without mutating when the aircraft or dome is unknown,
        the dome holds another aircraft, or the shelter is reserved for a
        different aircraft type.  The aircraft's previous dome is released
        in the same publish.
        """
        with self._store.transaction():
            aircraft = self._store.get_aircraft(aircraft_id)
            dome = self._store.get_dome(dome_id)
            if aircraft is None or dome is None:
                return False
            if dome.aircraft_id == aircraft_id:
                return True
            if dome.occupied:
                logger.info("Dome %s already holds %s", dome_id, dome.aircraft_id)
                return False
            shelter = self._store.get_shelter(dome.shelter_id)
            if shelter is not None and shelter.aircraft_type is not aircraft.type:
                logger.info(
                    "Dome %s is reserved for %s, not %s",
                    dome_id, shelter.aircraft_type.value, aircraft.type.value,
                )
                return False

            dome_updates = {dome_id: replace(dome, aircraft_id=aircraft_id)}
            previous = self._previous_dome(aircraft)
            if previous is not None:
                dome_updates[previous.id] = replace(previous, aircraft_id=None)
            self._store.publish(
                aircraft={aircraft_id: replace(aircraft, assigned_dome_id=dome_id)},
                domes=dome_updates,
            )
        logger.debug("Aircraft %s parked in dome %s", aircraft_id, dome_id)
        return True

    def release_dome(self, aircraft_id: str) -> None:
        with self._store.transaction():
            aircraft = self._store.get_aircraft(aircraft_id)
            if aircraft is None:
                return
            previous = self._previous_dome(aircraft)
            domes = {previous.id: replace(previous, aircraft_id=None)} if previous else {}
            self._store.publish(
                aircraft={aircraft_id: replace(aircraft, assigned_dome_id=None)},
                domes=domes,
            )

    def _previous_dome(self, aircraft: Aircraft) -> Dome | None:
        if aircraft.assigned_dome_id is not None:
            dome = self._store.get_dome(aircraft.assigned_dome_id)
            if dome is not None and dome.aircraft_id == aircraft.id:
                return dome
        for dome in self._store.domes:
            if dome.aircraft_id == aircraft.id:
                return dome
        return None

    def base_dome_summary(self, base_id: str) -> BaseDomeSummary:
        summary = BaseDomeSummary(base_id=base_id)
        shelters = {s.id: s for s in self._store.shelters}
        for dome in self.domes_for_base(base_id):
            key = shelters[dome.shelter_id].aircraft_type.value
            counts = summary.by_type.setdefault(key, DomeCounts())
            counts.total += 1
            summary.total += 1
            if dome.occupied:
                counts.occupied += 1
                summary.occupied += 1
        return summary

    def reconcile_dome_links(self) -> list[str]:
        """Make ``Aircraft.assigned_dome_id`` agree with the dome table.

        The dome table is authoritative.  Returns the ids of aircraft whose
        link was repaired.  Position assignments are left alone.
        """
        with self._store.transaction():
            held = {
                d.aircraft_id: d.id for d in self._store.domes if d.aircraft_id is not None
            }
            updates: dict[str, Aircraft] = {}
            for aircraft in self._store.aircraft:
                expected = held.get(aircraft.id)
                if aircraft.assigned_dome_id != expected:
                    updates[aircraft.id] = replace(aircraft, assigned_dome_id=expected)
            if updates:
                self._store.publish(aircraft=updates)
        if updates:
            logger.info("Reconciled dome links for %d aircraft", len(updates))
        return list(updates)
