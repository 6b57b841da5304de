"""Auto-distribution — batch placement of unassigned aircraft.

Provides three greedy strategies (spread-evenly, cluster,
minimize-distance) under per-position capacity caps, and the
PlacementManager facade that exposes the full query and mutation surface.
"""

from dispersal.distribution.config import (
    DistributionConfig,
    DistributionParams,
    DistributionStrategy,
)
from dispersal.distribution.engine import (
    AutoDistributor,
    DistributionResult,
)
from dispersal.distribution.manager import PlacementManager

__all__ = [
    "AutoDistributor",
    "DistributionConfig",
    "DistributionParams",
    "DistributionResult",
    "DistributionStrategy",
    "PlacementManager",
]
