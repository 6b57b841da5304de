"""Placement properties checked against hand-built and randomized scenarios."""

from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from dispersal.core.types import (
    Aircraft,
    AircraftSize,
    AircraftStatus,
    AircraftType,
    Base,
    Position,
    PositionType,
)
from dispersal.distribution.config import DistributionParams, DistributionStrategy
from dispersal.distribution.manager import PlacementManager
from dispersal.fleet.store import FleetStore


def _fleet(capacities, n_aircraft, maintenance=(), homes=None) -> PlacementManager:
    """One base at the origin, positions spaced along the longitude axis."""
    homes = homes or {}
    return PlacementManager(FleetStore(
        bases=[Base(id="B", name="Base", latitude=0.0, longitude=0.0)],
        positions=[
            Position(id=f"P{i}", base_id="B", name=f"Slot {i}", latitude=0.0,
                     longitude=float(i * 4 + 1), type=PositionType.HARDPOINT, capacity=c)
            for i, c in enumerate(capacities)
        ],
        aircraft=[
            Aircraft(
                id=f"A{i}", type=AircraftType.TRANSPORT, callsign=f"TTC-{i:03d}",
                size=AircraftSize.LARGE,
                status=AircraftStatus.MAINTENANCE if i in maintenance else AircraftStatus.UNASSIGNED,
                home_latitude=homes.get(i, (None, None))[0],
                home_longitude=homes.get(i, (None, None))[1],
            )
            for i in range(n_aircraft)
        ],
    ))


class TestCapacityInvariant:
    @pytest.mark.parametrize("seed", range(8))
    def test_random_walk_on_sample(self, sample_manager, walk, seed):
        rng = np.random.default_rng(seed)
        trace = walk(sample_manager, rng, steps=60)
        assert len(trace) == 60

    @pytest.mark.parametrize("seed", range(4))
    def test_random_walk_tight_fleet(self, walk, seed):
        manager = _fleet([1, 2, 0, 1], n_aircraft=9, maintenance={3, 7})
        walk(manager, np.random.default_rng(100 + seed), steps=80)

    def test_zero_capacity_never_used(self, check_invariants):
        manager = _fleet([0, 0], n_aircraft=3)
        for strategy in DistributionStrategy:
            result = manager.run_auto_distribute(strategy)
            assert result.placed_count == 0
        assert not manager.assign_aircraft("A0", "P0")
        check_invariants(manager)


class TestClearIdempotence:
    def test_twice_equals_once(self, sample_manager):
        sample_manager.run_auto_distribute("cluster")
        sample_manager.clear_all_assignments()
        once = list(sample_manager.store.aircraft)
        sample_manager.clear_all_assignments()
        assert sample_manager.store.aircraft == once

    def test_repairs_maintenance_with_position(self):
        manager = _fleet([2], n_aircraft=2)
        store = manager.store
        broken = replace(store.get_aircraft("A1"), status=AircraftStatus.MAINTENANCE,
                         assigned_position_id="P0")
        store.replace_aircraft([store.get_aircraft("A0"), broken])
        manager.clear_all_assignments()
        a1 = store.get_aircraft("A1")
        assert a1.assigned_position_id is None
        assert a1.status is AircraftStatus.MAINTENANCE


class TestMaintenanceExclusion:
    def test_sticky_across_operations(self, check_invariants):
        manager = _fleet([3, 3], n_aircraft=4, maintenance={0})
        assert not manager.assign_aircraft("A0", "P0")
        manager.unassign_aircraft("A0")
        for strategy in DistributionStrategy:
            manager.clear_all_assignments()
            manager.run_auto_distribute(strategy)
            assert "A0" not in {a.id for a in manager.get_unassigned_aircraft()}
            assert manager.store.get_aircraft("A0").status is AircraftStatus.MAINTENANCE
            check_invariants(manager)


class TestStrategyShapes:
    def test_spread_two_by_three(self):
        manager = _fleet([3, 3], n_aircraft=4)
        manager.run_auto_distribute(DistributionStrategy.SPREAD_EVENLY)
        assert sorted(manager.occupancy_map().values()) == [2, 2]

    def test_cluster_two_by_three(self):
        manager = _fleet([3, 3], n_aircraft=4)
        manager.run_auto_distribute(DistributionStrategy.CLUSTER)
        assert manager.occupancy_map() == {"P0": 3, "P1": 1}

    def test_nearest_of_two(self):
        # Positions sit at longitude 1 and 5
        manager = _fleet([2, 2], n_aircraft=1, homes={0: (0.0, 0.0)})
        manager.run_auto_distribute(DistributionStrategy.MINIMIZE_DISTANCE)
        assert manager.store.get_aircraft("A0").assigned_position_id == "P0"

    def test_nearest_spills_when_full(self):
        manager = _fleet([1, 2], n_aircraft=2, homes={0: (0.0, 0.0), 1: (0.0, 0.0)})
        manager.run_auto_distribute(DistributionStrategy.MINIMIZE_DISTANCE)
        assert manager.occupancy_map() == {"P0": 1, "P1": 1}

    def test_spread_fills_emptiest_first(self):
        manager = _fleet([4, 4, 4], n_aircraft=7)
        manager.assign_aircraft("A0", "P0")
        manager.assign_aircraft("A1", "P0")
        manager.run_auto_distribute(DistributionStrategy.SPREAD_EVENLY)
        occ = manager.occupancy_map()
        assert occ["P0"] == 2
        assert sorted(occ.values()) == [2, 2, 3]


class TestRerun:
    @pytest.mark.parametrize("strategy", list(DistributionStrategy))
    def test_second_run_empty(self, sample_manager, strategy):
        first = sample_manager.run_auto_distribute(strategy)
        placed = {a.id: a.assigned_position_id for a in sample_manager.store.aircraft}
        second = sample_manager.run_auto_distribute(strategy)
        assert first.placed_count == 14
        assert second.placed_count == 0
        assert {a.id: a.assigned_position_id for a in sample_manager.store.aircraft} == placed

    def test_shortfall_is_repeatable(self):
        manager = _fleet([1], n_aircraft=3)
        first = manager.run_auto_distribute(DistributionStrategy.SPREAD_EVENLY)
        second = manager.run_auto_distribute(DistributionStrategy.SPREAD_EVENLY)
        assert first.unplaced == ["A1", "A2"]
        assert second.unplaced == ["A1", "A2"]


class TestShortfall:
    @pytest.mark.parametrize("strategy", list(DistributionStrategy))
    def test_one_spare_three_eligible(self, strategy):
        manager = _fleet([1], n_aircraft=3, homes={0: (0.0, 0.0)})
        manager.run_auto_distribute(strategy)
        assert manager.get_position_occupancy("P0") == 1
        assert len(manager.get_unassigned_aircraft()) == 2

    def test_cap_smaller_than_capacity(self):
        manager = _fleet([5, 5], n_aircraft=6)
        result = manager.run_auto_distribute(
            DistributionStrategy.CLUSTER, DistributionParams(max_per_position=2),
        )
        assert result.placed_count == 4
        assert manager.occupancy_map() == {"P0": 2, "P1": 2}
