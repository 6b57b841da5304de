"""Planar distance helpers.

Positions sit within a few km of each other, so distances are plain
Euclidean distances in raw latitude/longitude degrees.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
from scipy.spatial.distance import cdist


def centroid(points: Iterable[tuple[float, float]]) -> tuple[float, float] | None:
    """Arithmetic mean of (lat, lon) pairs, or ``None`` for no points."""
    arr = np.asarray(list(points), dtype=float)
    if arr.size == 0:
        return None
    lat, lon = arr.reshape(-1, 2).mean(axis=0)
    return float(lat), float(lon)


def distance_matrix(
    origins: Sequence[tuple[float, float]],
    targets: Sequence[tuple[float, float]],
) -> np.ndarray:
    """Pairwise distances, shape ``(len(origins), len(targets))``."""
    if not origins or not targets:
        return np.zeros((len(origins), len(targets)))
    return cdist(
        np.asarray(origins, dtype=float),
        np.asarray(targets, dtype=float),
        metric="euclidean",
    )
