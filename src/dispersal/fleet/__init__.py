"""Fleet state — entity store, occupancy, assignment and status updates.

The store is the single state container for a session.  The services
around it implement the position universe (capacity-bounded positions),
the dome universe (single-aircraft domes in shelters) and situation
reporting (location and suspicion flags).
"""

from dispersal.fleet.store import FleetStore
from dispersal.fleet.occupancy import OccupancyCalculator
from dispersal.fleet.assignment import AssignmentService
from dispersal.fleet.status import StatusService
from dispersal.fleet.shelters import (
    BaseDomeSummary,
    DomeCounts,
    ShelterService,
)

__all__ = [
    "AssignmentService",
    "BaseDomeSummary",
    "DomeCounts",
    "FleetStore",
    "OccupancyCalculator",
    "ShelterService",
    "StatusService",
]
