"""PlacementManager — top-level facade over one session's fleet state.

Ties together: store + occupancy + manual assignment + auto-distribution
+ status updates + dome hierarchy.  This is the object the CLI and the
HTTP API talk to.
"""

from __future__ import annotations

import logging
from typing import Any

from dispersal.core.types import (
    Aircraft,
    AircraftStatus,
    AircraftType,
    GroundState,
    Operator,
    Situation,
)
from dispersal.distribution.config import (
    DistributionConfig,
    DistributionParams,
    DistributionStrategy,
)
from dispersal.distribution.engine import AutoDistributor, DistributionResult
from dispersal.fleet.assignment import AssignmentService
from dispersal.fleet.occupancy import OccupancyCalculator
from dispersal.fleet.shelters import BaseDomeSummary, ShelterService
from dispersal.fleet.status import StatusService
from dispersal.fleet.store import FleetStore
from dispersal.utils.logging import bind_operator

logger = logging.getLogger(__name__)


class PlacementManager:
    """Query and mutation surface for the dashboard.

    Holds the selected strategy and its parameters so callers can run
    ``run_auto_distribute()`` without arguments, as the toolbar does.
    """

    def __init__(
        self,
        store: FleetStore,
        config: DistributionConfig | None = None,
    ):
        self._store = store
        config = config or DistributionConfig()
        self._strategy = config.strategy
        self._params = config.params

        self._occupancy = OccupancyCalculator(store)
        self._assignment = AssignmentService(store, self._occupancy)
        self._status = StatusService(store)
        self._shelters = ShelterService(store)
        self._distributor = AutoDistributor(store, self._occupancy)

    @classmethod
    def from_config(cls, cfg: Any, store: FleetStore) -> PlacementManager:
        """Build from the ``dispersal`` config section (OmegaConf or dict)."""
        section = cfg.get("distribution") if cfg is not None else None
        return cls(store, DistributionConfig.from_omegaconf(section))

    @property
    def store(self) -> FleetStore:
        return self._store

    # ------------------------------------------------------------------
    # Session settings
    # ------------------------------------------------------------------

    @property
    def strategy(self) -> DistributionStrategy:
        return self._strategy

    @strategy.setter
    def strategy(self, strategy: DistributionStrategy | str) -> None:
        self._strategy = DistributionStrategy(strategy)

    @property
    def params(self) -> DistributionParams:
        return self._params

    def set_params(self, max_per_position: int | None = None) -> DistributionParams:
        """Merge new values into the current parameters."""
        if max_per_position is not None:
            self._params = DistributionParams(max_per_position=max_per_position)
        return self._params

    def set_operator(self, operator: Operator | None) -> None:
        self._store.current_operator = operator
        bind_operator(operator.username if operator else None)

    # ------------------------------------------------------------------
    # Occupancy queries
    # ------------------------------------------------------------------

    def get_position_occupancy(self, position_id: str) -> int:
        return self._occupancy.get_position_occupancy(position_id)

    def get_available_capacity(self, position_id: str) -> int:
        return self._occupancy.get_available_capacity(position_id)

    def get_assigned_aircraft(self, position_id: str) -> list[Aircraft]:
        return self._occupancy.get_assigned_aircraft(position_id)

    def get_unassigned_aircraft(self) -> list[Aircraft]:
        return self._occupancy.get_unassigned_aircraft()

    def occupancy_map(self) -> dict[str, int]:
        return self._occupancy.occupancy_map()

    def base_occupancy(self, base_id: str) -> tuple[int, int]:
        return self._occupancy.base_occupancy(base_id)

    # ------------------------------------------------------------------
    # Position assignment
    # ------------------------------------------------------------------

    def assign_aircraft(self, aircraft_id: str, position_id: str) -> bool:
        return self._assignment.assign_aircraft(aircraft_id, position_id)

    def unassign_aircraft(self, aircraft_id: str) -> None:
        self._assignment.unassign_aircraft(aircraft_id)

    def clear_all_assignments(self) -> None:
        self._assignment.clear_all_assignments()

    def run_auto_distribute(
        self,
        strategy: DistributionStrategy | str | None = None,
        params: DistributionParams | None = None,
    ) -> DistributionResult:
        """Distribute the eligibility pool; defaults to the session settings."""
        return self._distributor.run(
            strategy if strategy is not None else self._strategy,
            params if params is not None else self._params,
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def update_aircraft_location(
        self, aircraft_id: str, lat: float, lon: float, location: GroundState | str,
    ) -> None:
        self._status.update_aircraft_location(aircraft_id, lat, lon, location)

    def mark_aircraft_as_suspicious(
        self, aircraft_id: str, reason: str, operator: Operator | None = None,
    ) -> None:
        self._status.mark_aircraft_as_suspicious(aircraft_id, reason, operator)

    def filter_aircraft(self, situation: Situation | str | None) -> list[Aircraft]:
        return self._status.filter_aircraft(situation)

    def search_aircraft(
        self,
        query: str = "",
        aircraft_type: AircraftType | str | None = None,
        status: AircraftStatus | str | None = None,
    ) -> list[Aircraft]:
        return self._status.search_aircraft(query, aircraft_type, status)

    # ------------------------------------------------------------------
    # Domes
    # ------------------------------------------------------------------

    def assign_dome(self, aircraft_id: str, dome_id: str) -> bool:
        return self._shelters.assign_dome(aircraft_id, dome_id)

    def release_dome(self, aircraft_id: str) -> None:
        self._shelters.release_dome(aircraft_id)

    def is_dome_occupied(self, dome_id: str) -> bool:
        return self._shelters.is_dome_occupied(dome_id)

    def base_dome_summary(self, base_id: str) -> BaseDomeSummary:
        return self._shelters.base_dome_summary(base_id)

    def reconcile_dome_links(self) -> list[str]:
        return self._shelters.reconcile_dome_links()

    def get_status(self) -> dict:
        """Headline counts for a status bar."""
        aircraft = self._store.aircraft
        return {
            "aircraft": len(aircraft),
            "assigned": sum(1 for a in aircraft if a.assigned_position_id is not None),
            "unassigned": len(self.get_unassigned_aircraft()),
            "maintenance": sum(1 for a in aircraft if a.in_maintenance),
            "suspicious": len(self._status.suspicious_aircraft()),
            "positions": len(self._store.positions),
            "strategy": self._strategy.value,
            "max_per_position": self._params.max_per_position,
        }
