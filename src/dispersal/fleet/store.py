"""FleetStore — the explicit state container for one dashboard session.

Holds bases, positions, aircraft and the squadron/shelter/dome hierarchy.
Entities are created once at load time; afterwards only aircraft and dome
records are replaced.  Every change is built as a complete new collection
and swapped in with one assignment, so readers never observe half a batch.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager

from dispersal.core.bus import (
    AIRCRAFT_UPDATED,
    DOMES_UPDATED,
    POSITIONS_UPDATED,
    EventBus,
)
from dispersal.core.clock import Clock, SystemClock
from dispersal.core.types import (
    Aircraft,
    Base,
    Dome,
    Operator,
    Position,
    Shelter,
    Squadron,
)

logger = logging.getLogger(__name__)


def _index(items: Iterable, kind: str) -> dict:
    out: dict = {}
    for item in items:
        if item.id in out:
            logger.warning("Duplicate %s id '%s', keeping the last one", kind, item.id)
        out[item.id] = item
    return out


class FleetStore:
    """Normalized entity collections plus the session's operator and clock.

    Mutating services wrap their check-then-act sequences in
    :meth:`transaction`, which holds a re-entrant lock, and write through
    :meth:`publish`.
    """

    def __init__(
        self,
        bases: Iterable[Base] = (),
        positions: Iterable[Position] = (),
        aircraft: Iterable[Aircraft] = (),
        squadrons: Iterable[Squadron] = (),
        shelters: Iterable[Shelter] = (),
        domes: Iterable[Dome] = (),
        clock: Clock | None = None,
        bus: EventBus | None = None,
        operator: Operator | None = None,
    ):
        self._lock = threading.RLock()
        self._bases: dict[str, Base] = _index(bases, "base")
        self._positions: dict[str, Position] = _index(positions, "position")
        self._aircraft: dict[str, Aircraft] = _index(aircraft, "aircraft")
        self._squadrons: dict[str, Squadron] = _index(squadrons, "squadron")
        self._shelters: dict[str, Shelter] = _index(shelters, "shelter")
        self._domes: dict[str, Dome] = _index(domes, "dome")
        self._clock: Clock = clock or SystemClock()
        self._bus = bus or EventBus()
        self._operator = operator

    # ------------------------------------------------------------------
    # Collections (ordered as loaded)
    # ------------------------------------------------------------------

    @property
    def bases(self) -> list[Base]:
        return list(self._bases.values())

    @property
    def positions(self) -> list[Position]:
        return list(self._positions.values())

    @property
    def aircraft(self) -> list[Aircraft]:
        return list(self._aircraft.values())

    @property
    def squadrons(self) -> list[Squadron]:
        return list(self._squadrons.values())

    @property
    def shelters(self) -> list[Shelter]:
        return list(self._shelters.values())

    @property
    def domes(self) -> list[Dome]:
        return list(self._domes.values())

    # ------------------------------------------------------------------
    # Lookups: unknown ids return None
    # ------------------------------------------------------------------

    def get_base(self, base_id: str) -> Base | None:
        return self._bases.get(base_id)

    def get_position(self, position_id: str) -> Position | None:
        return self._positions.get(position_id)

    def get_aircraft(self, aircraft_id: str) -> Aircraft | None:
        return self._aircraft.get(aircraft_id)

    def get_squadron(self, squadron_id: str) -> Squadron | None:
        return self._squadrons.get(squadron_id)

    def get_shelter(self, shelter_id: str) -> Shelter | None:
        return self._shelters.get(shelter_id)

    def get_dome(self, dome_id: str) -> Dome | None:
        return self._domes.get(dome_id)

    def positions_for_base(self, base_id: str) -> list[Position]:
        return [p for p in self._positions.values() if p.base_id == base_id]

    def find_aircraft_by_callsign(self, callsign: str) -> Aircraft | None:
        for a in self._aircraft.values():
            if a.callsign == callsign:
                return a
        return None

    # ------------------------------------------------------------------
    # Session context
    # ------------------------------------------------------------------

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def current_operator(self) -> Operator | None:
        return self._operator

    @current_operator.setter
    def current_operator(self, operator: Operator | None) -> None:
        self._operator = operator

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[FleetStore]:
        """Serialize a read-check-write sequence against other writers."""
        with self._lock:
            yield self

    def publish(
        self,
        aircraft: Mapping[str, Aircraft] | None = None,
        domes: Mapping[str, Dome] | None = None,
    ) -> int:
        """Swap in replacement aircraft and/or dome records.

        Ids not already in the store are ignored.  Returns the number of
        records replaced.
        """
        aircraft = aircraft or {}
        domes = domes or {}
        with self._lock:
            new_aircraft = {k: aircraft.get(k, v) for k, v in self._aircraft.items()}
            new_domes = {k: domes.get(k, v) for k, v in self._domes.items()}
            changed_aircraft = [k for k in aircraft if k in self._aircraft]
            changed_domes = [k for k in domes if k in self._domes]
            self._aircraft = new_aircraft
            self._domes = new_domes

        if changed_aircraft:
            self._bus.publish(AIRCRAFT_UPDATED, ids=changed_aircraft)
        if changed_domes:
            self._bus.publish(DOMES_UPDATED, ids=changed_domes)
        return len(changed_aircraft) + len(changed_domes)

    def replace_aircraft(self, aircraft: Iterable[Aircraft]) -> None:
        """Replace the whole aircraft collection (bulk edit from a table view)."""
        new_aircraft = _index(aircraft, "aircraft")
        with self._lock:
            self._aircraft = new_aircraft
        self._bus.publish(AIRCRAFT_UPDATED, ids=list(new_aircraft))

    def replace_positions(self, positions: Iterable[Position]) -> None:
        new_positions = _index(positions, "position")
        with self._lock:
            self._positions = new_positions
        self._bus.publish(POSITIONS_UPDATED, ids=list(new_positions))

    def __repr__(self) -> str:
        return (
            f"FleetStore(bases={len(self._bases)}, positions={len(self._positions)}, "
            f"aircraft={len(self._aircraft)}, domes={len(self._domes)})"
        )
