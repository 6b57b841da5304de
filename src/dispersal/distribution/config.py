"""Auto-distribution configuration."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from omegaconf import OmegaConf

logger = logging.getLogger(__name__)

# Keys older configs carry that no strategy reads
_IGNORED_KEYS = ("randomness_factor", "distance_weight")


class DistributionStrategy(enum.Enum):
    SPREAD_EVENLY = "spread-evenly"
    CLUSTER = "cluster"
    MINIMIZE_DISTANCE = "minimize-distance"


@dataclass(frozen=True)
class DistributionParams:
    """Per-run parameters.

    ``max_per_position`` of 0 caps each position at its own capacity; a
    positive value caps it at ``min(value, capacity)`` for this run only.
    """

    max_per_position: int = 0

    def __post_init__(self):
        if self.max_per_position < 0:
            raise ValueError(
                f"max_per_position must be >= 0, got {self.max_per_position}"
            )

    def effective_cap(self, capacity: int) -> int:
        if self.max_per_position > 0:
            return min(self.max_per_position, capacity)
        return capacity


@dataclass
class DistributionConfig:
    """Distribution section of the config."""

    strategy: DistributionStrategy = DistributionStrategy.SPREAD_EVENLY
    params: DistributionParams = field(default_factory=DistributionParams)

    @classmethod
    def from_omegaconf(cls, cfg: Any) -> DistributionConfig:
        """Build from OmegaConf dict or plain dict."""
        if cfg is None:
            return cls()

        if OmegaConf.is_config(cfg):
            cfg = OmegaConf.to_container(cfg, resolve=True)
        if not isinstance(cfg, dict):
            cfg = dict(cfg)

        for key in _IGNORED_KEYS:
            if cfg.get(key) is not None:
                logger.warning("Distribution option '%s' is not used and was ignored", key)

        strategy_str = cfg.get("strategy", DistributionStrategy.SPREAD_EVENLY.value)
        try:
            strategy = DistributionStrategy(strategy_str)
        except ValueError:
            logger.warning(
                "Unknown distribution strategy '%s', using spread-evenly", strategy_str,
            )
            strategy = DistributionStrategy.SPREAD_EVENLY

        return cls(
            strategy=strategy,
            params=DistributionParams(
                max_per_position=max(0, int(cfg.get("max_per_position", 0) or 0)),
            ),
        )
