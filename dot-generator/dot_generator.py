#!/usr/bin/env python3
"""
Dot quota calculation and uniform dot placement inside region rings.
Uses bounded rejection sampling with a deterministic centroid fallback, so
every requested dot is produced even for degenerate boundaries.
"""
import logging
import math
from typing import List, Optional, Tuple

import numpy as np
from models import Dot, DotDensityConfiguration, GenerationStatistics
from projection import IdentityProjection, Projection, planar_centroid, spherical_centroid
from ring_selector import ring_bounds

LOG = logging.getLogger(__name__)


def calculate_dot_count(population: Optional[float], dots_per_unit: float) -> int:
    """
    Number of dots a population warrants: floor(population / dots_per_unit).

    Unknown population gives 0. A result of 0 means the region is skipped.
    """
    if dots_per_unit <= 0:
        raise ValueError(f"dots_per_unit must be positive, got {dots_per_unit}")
    if population is None or not math.isfinite(population):
        return 0
    return max(0, int(math.floor(population / dots_per_unit)))


def points_in_ring(ring: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """
    Crossing-number containment test for many points against one ring.

    A horizontal ray is cast from each point; the point is inside when it
    crosses an odd number of edges. Edges run from each vertex's predecessor
    to the vertex, so open and closed rings behave the same.

    Returns:
        Boolean array, one entry per point
    """
    xs = np.asarray(xs, dtype=float)[:, None]
    ys = np.asarray(ys, dtype=float)[:, None]
    x1 = ring[:, 0][None, :]
    y1 = ring[:, 1][None, :]
    x0 = np.roll(ring[:, 0], 1)[None, :]
    y0 = np.roll(ring[:, 1], 1)[None, :]

    straddles = (y1 > ys) != (y0 > ys)
    dy = np.where(y0 == y1, 1.0, y0 - y1)
    x_cross = (x0 - x1) * (ys - y1) / dy + x1
    crossings = straddles & (xs < x_cross)
    return (np.count_nonzero(crossings, axis=1) % 2) == 1


def point_in_ring(ring: np.ndarray, x: float, y: float) -> bool:
    return bool(points_in_ring(ring, np.array([x]), np.array([y]))[0])


class DotGenerator:
    """
    Places dots uniformly inside region rings.

    Each dot is drawn by rejection sampling within the ring's bounding box,
    at most ``config.max_attempts`` candidates per dot. When the budget runs
    out the dot falls back to the ring's centroid (on the sphere for
    geographic projections, in the plane otherwise). The random source is injected
    for reproducible runs.
    """

    def __init__(
        self,
        config: Optional[DotDensityConfiguration] = None,
        projection: Optional[Projection] = None,
        rng: Optional[np.random.Generator] = None,
        stats: Optional[GenerationStatistics] = None,
    ):
        self.config = config or DotDensityConfiguration()
        self.projection = projection or IdentityProjection()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.stats = stats if stats is not None else GenerationStatistics()

    def dot_count(self, population: Optional[float]) -> int:
        return calculate_dot_count(population, self.config.dots_per_unit)

    def sample_points(self, ring: np.ndarray, count: int) -> List[Dot]:
        """
        Place ``count`` dots inside ``ring``.

        Args:
            ring: (n, 2) array of projected ring vertices
            count: Number of dots requested

        Returns:
            Exactly ``count`` (x, y) dots; none when count <= 0
        """
        dots: List[Dot] = []
        if count <= 0:
            return dots

        ring = np.asarray(ring, dtype=float)
        bounds = ring_bounds(ring)
        fallback: Optional[Dot] = None

        for _ in range(count):
            dot = self._sample_point(ring, bounds)
            if dot is None:
                if fallback is None:
                    fallback = self.fallback_point(ring)
                    LOG.debug(
                        "Rejection sampling exhausted %d attempts; using centroid %s",
                        self.config.max_attempts,
                        fallback,
                    )
                dot = fallback
                self.stats.fallback_dots += 1
            else:
                self.stats.accepted_dots += 1
            dots.append(dot)

        self.stats.dots_created += len(dots)
        return dots

    def _sample_point(
        self, ring: np.ndarray, bounds: Tuple[float, float, float, float]
    ) -> Optional[Dot]:
        """Draw candidates in batches until one lands inside the ring."""
        xmin, ymin, xmax, ymax = bounds
        remaining = self.config.max_attempts
        while remaining > 0:
            batch = min(remaining, self.config.candidate_batch_size)
            xs = xmin + self.rng.random(batch) * (xmax - xmin)
            ys = ymin + self.rng.random(batch) * (ymax - ymin)
            inside = np.flatnonzero(points_in_ring(ring, xs, ys))
            if len(inside):
                first = inside[0]
                return float(xs[first]), float(ys[first])
            remaining -= batch
        return None

    def fallback_point(self, ring: np.ndarray) -> Dot:
        """
        Deterministic stand-in for a dot that could not be sampled.

        For geographic projections the ring is inverse-projected, its
        spherical centroid taken and projected forward again. Planar
        projections use the vertex mean. It may lie outside concave or
        self-intersecting rings.
        """
        if not getattr(self.projection, "geographic", False):
            return planar_centroid(ring)

        centroid = spherical_centroid(self.projection.invert_many(ring))
        if centroid is not None:
            x, y = self.projection.forward(*centroid)
            if math.isfinite(x) and math.isfinite(y):
                return x, y
        # No spherical centroid (e.g. antipodal vertices): use the vertex mean
        return planar_centroid(ring)
