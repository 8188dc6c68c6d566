#!/usr/bin/env python3
"""
Ring selection for region geometry.
Picks one representative outer boundary per region for dot sampling.
"""

from typing import Optional, Tuple

import numpy as np
from models import Geometry, GeometryType, LinearRing


def ring_to_array(ring: LinearRing) -> Optional[np.ndarray]:
    """Convert a ring of positions to an (n, 2) float array, or None if empty."""
    if not ring:
        return None
    return np.asarray([position[:2] for position in ring], dtype=float)


def ring_bounds(ring: np.ndarray) -> Tuple[float, float, float, float]:
    """Axis-aligned bounding box of a ring as (xmin, ymin, xmax, ymax)."""
    xmin, ymin = ring.min(axis=0)
    xmax, ymax = ring.max(axis=0)
    return float(xmin), float(ymin), float(xmax), float(ymax)


def bounding_box_area(ring: np.ndarray) -> float:
    xmin, ymin, xmax, ymax = ring_bounds(ring)
    return (xmax - xmin) * (ymax - ymin)


def select_ring(geometry: Optional[Geometry]) -> Optional[np.ndarray]:
    """
    Return the representative boundary ring for a region geometry.

    Polygons give their outer ring (holes are ignored). Multi-polygons give
    the outer ring with the largest bounding-box area, which approximates
    the largest part; the first ring wins a tie. Any other geometry gives
    None and the region is skipped.

    Args:
        geometry: Tagged geometry variant, already in projected space

    Returns:
        (n, 2) array of ring vertices, or None
    """
    if geometry is None:
        return None

    if geometry.type == GeometryType.POLYGON:
        if not geometry.coordinates:
            return None
        return ring_to_array(geometry.coordinates[0])

    elif geometry.type == GeometryType.MULTI_POLYGON:
        best = None
        best_area = -np.inf
        for polygon in geometry.coordinates:
            if not polygon:
                continue
            ring = ring_to_array(polygon[0])
            if ring is None:
                continue
            area = bounding_box_area(ring)
            # Strict comparison keeps the first ring on ties
            if area > best_area:
                best_area = area
                best = ring
        return best

    return None
