#!/usr/bin/env python3
"""
Map projections for dot-density generation.

Region geometry is projected once into screen space (x right, y down) before
sampling. The inverse projection is only needed for the centroid fallback,
which is computed on the sphere and projected forward again. Planar
projections use the plain vertex mean instead.
"""

import math
from typing import Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple

import numpy as np
from models import (
    Geometry,
    GeometryType,
    MultiPolygonGeometry,
    PolygonGeometry,
    RegionFeature,
)
from pyproj import Transformer

# Web Mercator is undefined at the poles; clamp to the usual square-world limit
MAX_MERCATOR_LATITUDE = 85.0511287798066

EPSILON = 1e-6
EPSILON2 = 1e-12


class Projection(Protocol):
    """Forward and inverse mapping between lon/lat degrees and planar x/y."""

    # False when the inverse does not give lon/lat degrees
    geographic: bool

    def forward_many(self, coords: Sequence[Sequence[float]]) -> np.ndarray: ...

    def invert_many(self, coords: Sequence[Sequence[float]]) -> np.ndarray: ...

    def forward(self, lon: float, lat: float) -> Tuple[float, float]: ...

    def invert(self, x: float, y: float) -> Tuple[float, float]: ...


def _as_xy(coords) -> np.ndarray:
    arr = np.asarray(coords, dtype=float)
    if arr.size == 0:
        return np.empty((0, 2))
    return arr.reshape(len(arr), -1)[:, :2]


class IdentityProjection:
    """No-op projection for data that is already planar."""

    geographic = False

    def forward_many(self, coords) -> np.ndarray:
        return _as_xy(coords).copy()

    def invert_many(self, coords) -> np.ndarray:
        return _as_xy(coords).copy()

    def forward(self, lon: float, lat: float) -> Tuple[float, float]:
        return float(lon), float(lat)

    def invert(self, x: float, y: float) -> Tuple[float, float]:
        return float(x), float(y)


class MercatorProjection:
    """
    Web Mercator (EPSG:3857) scaled and translated into screen space.

    Screen coordinates are ``x = tx + k * X`` and ``y = ty - k * Y`` where
    (X, Y) are Web Mercator metres, so north is up on screen.
    """

    geographic = True

    def __init__(self, scale: float = 1.0, translate: Tuple[float, float] = (0.0, 0.0)):
        if scale <= 0 or not math.isfinite(scale):
            raise ValueError(f"Projection scale must be positive, got {scale}")
        self.scale = float(scale)
        self.translate = (float(translate[0]), float(translate[1]))
        self._to_mercator = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
        self._to_geographic = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)

    def _mercator(self, lonlat: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        lats = np.clip(lonlat[:, 1], -MAX_MERCATOR_LATITUDE, MAX_MERCATOR_LATITUDE)
        mx, my = self._to_mercator.transform(lonlat[:, 0], lats)
        return np.asarray(mx, dtype=float), np.asarray(my, dtype=float)

    def forward_many(self, coords) -> np.ndarray:
        lonlat = _as_xy(coords)
        if len(lonlat) == 0:
            return lonlat
        mx, my = self._mercator(lonlat)
        tx, ty = self.translate
        return np.column_stack([tx + self.scale * mx, ty - self.scale * my])

    def invert_many(self, coords) -> np.ndarray:
        xy = _as_xy(coords)
        if len(xy) == 0:
            return xy
        tx, ty = self.translate
        mx = (xy[:, 0] - tx) / self.scale
        my = (ty - xy[:, 1]) / self.scale
        lons, lats = self._to_geographic.transform(mx, my)
        return np.column_stack([np.asarray(lons, dtype=float), np.asarray(lats, dtype=float)])

    def forward(self, lon: float, lat: float) -> Tuple[float, float]:
        x, y = self.forward_many([[lon, lat]])[0]
        return float(x), float(y)

    def invert(self, x: float, y: float) -> Tuple[float, float]:
        lon, lat = self.invert_many([[x, y]])[0]
        return float(lon), float(lat)

    @classmethod
    def fit_size(
        cls, width: float, height: float, features: Iterable[RegionFeature]
    ) -> "MercatorProjection":
        """
        Fit the projected bounds of ``features`` into a width x height extent.

        Args:
            width, height: Output extent in screen units
            features: Regions with geographic (lon/lat) geometry

        Returns:
            MercatorProjection centred on the features
        """
        positions = [
            position[:2]
            for feature in features
            for position in iter_geometry_positions(feature.geometry)
        ]
        if not positions:
            raise ValueError("Cannot fit projection: no polygon coordinates found")

        unit = cls()
        mx, my = unit._mercator(_as_xy(positions))
        x0, x1 = float(mx.min()), float(mx.max())
        y0, y1 = float(my.min()), float(my.max())

        candidates = []
        if x1 > x0:
            candidates.append(width / (x1 - x0))
        if y1 > y0:
            candidates.append(height / (y1 - y0))
        scale = min(candidates) if candidates else 1.0

        translate = (
            (width - scale * (x0 + x1)) / 2,
            (height + scale * (y0 + y1)) / 2,
        )
        return cls(scale=scale, translate=translate)


def iter_geometry_positions(geometry: Optional[Geometry]) -> Iterator[List[float]]:
    """Yield every position of every ring of a polygonal geometry."""
    if geometry is None:
        return
    if geometry.type == GeometryType.POLYGON:
        polygons = [geometry.coordinates]
    elif geometry.type == GeometryType.MULTI_POLYGON:
        polygons = geometry.coordinates
    else:
        return
    for polygon in polygons:
        for ring in polygon:
            yield from ring


def project_feature(feature: RegionFeature, projection: Projection) -> RegionFeature:
    """Return a copy of ``feature`` with its polygon rings projected."""
    geometry = feature.geometry
    if geometry is None:
        return feature

    def project_polygon(polygon):
        # Empty rings keep their slot so a hole never becomes the outer ring
        return [projection.forward_many(ring).tolist() if ring else [] for ring in polygon]

    if geometry.type == GeometryType.POLYGON:
        projected = PolygonGeometry(coordinates=project_polygon(geometry.coordinates))
    elif geometry.type == GeometryType.MULTI_POLYGON:
        projected = MultiPolygonGeometry(
            coordinates=[project_polygon(polygon) for polygon in geometry.coordinates]
        )
    else:
        return feature
    return RegionFeature(name=feature.name, geometry=projected)


def planar_centroid(xy) -> Optional[Tuple[float, float]]:
    """Mean of a ring's vertices in its own plane, ignoring the closing vertex."""
    pts = _as_xy(xy)
    if len(pts) == 0:
        return None
    if len(pts) > 1 and np.array_equal(pts[0], pts[-1]):
        pts = pts[:-1]
    x, y = pts.mean(axis=0)
    return float(x), float(y)


def spherical_centroid(lonlat) -> Optional[Tuple[float, float]]:
    """
    Centroid of a closed ring on the unit sphere, in lon/lat degrees.

    Uses the area-weighted centroid of the spherical polygon. Rings with no
    area fall back to the edge-length-weighted centroid, and rings with no
    length to the mean of their vertices. The result does not depend on the
    ring's winding order.

    Returns:
        (lon, lat) or None when no centroid is defined (antipodal vertices)
    """
    pts = _as_xy(lonlat)
    if len(pts) == 0:
        return None
    # Closing vertex duplicates the first one
    if len(pts) > 1 and np.array_equal(pts[0], pts[-1]):
        pts = pts[:-1]

    lam = np.radians(pts[:, 0])
    phi = np.radians(pts[:, 1])
    cos_phi = np.cos(phi)
    xyz = np.column_stack([cos_phi * np.cos(lam), cos_phi * np.sin(lam), np.sin(phi)])

    start = xyz
    end = np.roll(xyz, -1, axis=0)
    cross = np.cross(start, end)
    m = np.linalg.norm(cross, axis=1)
    w = np.arcsin(np.clip(m, 0.0, 1.0))
    v = np.divide(-w, m, out=np.zeros_like(m), where=m > 0)

    point_vec = xyz.mean(axis=0)
    vec = (v[:, None] * cross).sum(axis=0)
    if np.linalg.norm(vec) < EPSILON2:
        vec = (w[:, None] * (start + end)).sum(axis=0)
        if w.sum() < EPSILON:
            vec = point_vec
        if np.linalg.norm(vec) < EPSILON2:
            return None

    # The area vector points at the antipode for the opposite winding
    if np.dot(vec, point_vec) < 0:
        vec = -vec

    norm = np.linalg.norm(vec)
    lon = math.degrees(math.atan2(vec[1], vec[0]))
    lat = math.degrees(math.asin(max(-1.0, min(1.0, vec[2] / norm))))
    return lon, lat
