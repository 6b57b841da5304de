"""Scenario helpers: random operation walks and invariant checks."""

from __future__ import annotations

import numpy as np
import pytest

from dispersal.core.types import AircraftStatus
from dispersal.distribution.config import DistributionParams, DistributionStrategy
from dispersal.distribution.manager import PlacementManager

OPERATIONS = ("assign", "unassign", "distribute", "clear", "dome", "release")


def assert_invariants(manager: PlacementManager) -> None:
    """Check the store-wide placement invariants."""
    store = manager.store
    occ = manager.occupancy_map()
    for position in store.positions:
        assert occ[position.id] <= position.capacity, position.id
        assert manager.get_available_capacity(position.id) >= 0

    for aircraft in store.aircraft:
        if aircraft.status is AircraftStatus.MAINTENANCE:
            assert aircraft.assigned_position_id is None, aircraft.id
        elif aircraft.assigned_position_id is not None:
            assert aircraft.status is AircraftStatus.ASSIGNED, aircraft.id

    pool = {a.id for a in manager.get_unassigned_aircraft()}
    for aircraft in store.aircraft:
        expected = aircraft.assigned_position_id is None and not aircraft.in_maintenance
        assert (aircraft.id in pool) == expected, aircraft.id

    holders = [d.aircraft_id for d in store.domes if d.aircraft_id is not None]
    assert len(holders) == len(set(holders))


def random_walk(manager: PlacementManager, rng: np.random.Generator, steps: int) -> list[str]:
    """Apply *steps* random operations, checking invariants after each."""
    aircraft_ids = [a.id for a in manager.store.aircraft]
    position_ids = [p.id for p in manager.store.positions] + ["no-such-position"]
    dome_ids = [d.id for d in manager.store.domes]
    strategies = list(DistributionStrategy)
    trace = []
    for _ in range(steps):
        op = OPERATIONS[rng.integers(len(OPERATIONS))]
        aircraft_id = aircraft_ids[rng.integers(len(aircraft_ids))]
        if op == "assign":
            manager.assign_aircraft(aircraft_id, position_ids[rng.integers(len(position_ids))])
        elif op == "unassign":
            manager.unassign_aircraft(aircraft_id)
        elif op == "distribute":
            manager.run_auto_distribute(
                strategies[rng.integers(len(strategies))],
                DistributionParams(max_per_position=int(rng.integers(0, 3))),
            )
        elif op == "clear":
            manager.clear_all_assignments()
        elif op == "dome" and dome_ids:
            manager.assign_dome(aircraft_id, dome_ids[rng.integers(len(dome_ids))])
        elif op == "release":
            manager.release_dome(aircraft_id)
        trace.append(op)
        assert_invariants(manager)
    return trace


@pytest.fixture
def check_invariants():
    return assert_invariants


@pytest.fixture
def walk():
    return random_walk
