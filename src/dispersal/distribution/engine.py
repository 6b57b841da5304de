"""Batch auto-distribution of unassigned aircraft onto positions.

Three greedy strategies share one setup: the eligibility pool is every
aircraft without a position that is not in maintenance, and a working
occupancy map is seeded from the real occupancy so aircraft placed before
the run keep their slots.  The batch is computed entirely on the working
map and published to the store in one swap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

import numpy as np

from dispersal.core.types import Aircraft, AircraftStatus, Position
from dispersal.distribution.config import DistributionParams, DistributionStrategy
from dispersal.fleet.occupancy import OccupancyCalculator
from dispersal.fleet.store import FleetStore
from dispersal.utils.geo import centroid, distance_matrix

logger = logging.getLogger(__name__)


@dataclass
class DistributionResult:
    """Outcome of one auto-distribution run."""

    strategy: DistributionStrategy
    assignments: list[tuple[str, str]] = field(default_factory=list)  # (aircraft_id, position_id)
    unplaced: list[str] = field(default_factory=list)

    @property
    def placed_count(self) -> int:
        return len(self.assignments)

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "assignments": [
                {"aircraft_id": a, "position_id": p} for a, p in self.assignments
            ],
            "unplaced": list(self.unplaced),
            "placed_count": self.placed_count,
        }


class AutoDistributor:
    """Computes and applies a full batch of assignments.

    Running again with nothing unassigned is a no-op; with a shortfall the
    same aircraft fail to place each time, since order and tie-breaks only
    depend on the store's order.
    """

    def __init__(self, store: FleetStore, occupancy: OccupancyCalculator | None = None):
        self._store = store
        self._occupancy = occupancy or OccupancyCalculator(store)

    def run(
        self,
        strategy: DistributionStrategy | str,
        params: DistributionParams | None = None,
    ) -> DistributionResult:
        strategy = DistributionStrategy(strategy)
        params = params or DistributionParams()

        with self._store.transaction():
            pool = self._occupancy.get_unassigned_aircraft()
            positions = self._store.positions
            working = self._occupancy.occupancy_map()

            if strategy is DistributionStrategy.MINIMIZE_DISTANCE:
                assignments = self._nearest(pool, positions, working, params)
            else:
                assignments = self._by_occupancy(
                    pool, positions, working, params,
                    descending=strategy is DistributionStrategy.CLUSTER,
                )

            if assignments:
                self._store.publish(aircraft={
                    aid: replace(
                        self._store.get_aircraft(aid),
                        assigned_position_id=pid,
                        status=AircraftStatus.ASSIGNED,
                    )
                    for aid, pid in assignments
                })

        placed = {aid for aid, _ in assignments}
        result = DistributionResult(
            strategy=strategy,
            assignments=assignments,
            unplaced=[a.id for a in pool if a.id not in placed],
        )
        logger.info(
            "Auto-distribute (%s): %d placed, %d left unassigned",
            strategy.value, result.placed_count, len(result.unplaced),
        )
        return result

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    @staticmethod
    def _by_occupancy(
        pool: list[Aircraft],
        positions: list[Position],
        working: dict[str, int],
        params: DistributionParams,
        descending: bool,
    ) -> list[tuple[str, str]]:
        """spread-evenly (ascending) and cluster (descending).

        Each aircraft goes to the first position in occupancy order with
        room under its effective cap.  The list is re-sorted after every
        placement; the sort is stable, so ties keep their previous order.
        """
        ordered = list(positions)
        ordered.sort(key=lambda p: working[p.id], reverse=descending)
        assignments: list[tuple[str, str]] = []

        for aircraft in pool:
            for position in ordered:
                if working[position.id] < params.effective_cap(position.capacity):
                    assignments.append((aircraft.id, position.id))
                    working[position.id] += 1
                    ordered.sort(key=lambda p: working[p.id], reverse=descending)
                    break
        return assignments

    def _nearest(
        self,
        pool: list[Aircraft],
        positions: list[Position],
        working: dict[str, int],
        params: DistributionParams,
    ) -> list[tuple[str, str]]:
        """minimize-distance: repeatedly take the globally closest pair.

        An aircraft's origin is its home coordinate, or the centroid of all
        bases when it has none.  Ties go to the earlier aircraft, then the
        earlier position.
        """
        if not pool or not positions:
            return []

        default_home = centroid((b.latitude, b.longitude) for b in self._store.bases)
        candidates: list[Aircraft] = []
        homes: list[tuple[float, float]] = []
        for aircraft in pool:
            if aircraft.has_home:
                homes.append((aircraft.home_latitude, aircraft.home_longitude))
            elif default_home is not None:
                homes.append(default_home)
            else:
                logger.warning("No home for %s and no bases to fall back on", aircraft.id)
                continue
            candidates.append(aircraft)

        if not candidates:
            return []

        dist = distance_matrix(homes, [(p.latitude, p.longitude) for p in positions])
        spare = np.array(
            [params.effective_cap(p.capacity) - working[p.id] for p in positions],
        )
        remaining = np.ones(len(candidates), dtype=bool)
        assignments: list[tuple[str, str]] = []

        while remaining.any():
            open_slots = spare > 0
            if not open_slots.any():
                break
            masked = np.where(remaining[:, None] & open_slots[None, :], dist, np.inf)
            i, j = np.unravel_index(int(np.argmin(masked)), masked.shape)
            if not np.isfinite(masked[i, j]):
                break
            assignments.append((candidates[i].id, positions[j].id))
            remaining[i] = False
            spare[j] -= 1
            working[positions[j].id] += 1

        return assignments
