#!/usr/bin/env python3
"""
Centralized test utilities for the dot-density pipeline.
Provides reusable geometry, population and input-file fixtures.
"""

import gzip
import json
import pathlib
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np


def square_ring(
    x0: float = 0.0, y0: float = 0.0, size: float = 100.0, closed: bool = True
) -> List[List[float]]:
    """Axis-aligned square ring with corners (x0, y0) and (x0+size, y0+size)."""
    ring = [
        [x0, y0],
        [x0, y0 + size],
        [x0 + size, y0 + size],
        [x0 + size, y0],
    ]
    if closed:
        ring.append([x0, y0])
    return ring


def rectangle_ring(x0: float, y0: float, width: float, height: float) -> List[List[float]]:
    return [
        [x0, y0],
        [x0, y0 + height],
        [x0 + width, y0 + height],
        [x0 + width, y0],
        [x0, y0],
    ]


def l_shaped_ring() -> List[List[float]]:
    """Concave L shape inside the box [0, 10] x [0, 10]; the notch is x, y > 5."""
    return [
        [0, 0],
        [10, 0],
        [10, 5],
        [5, 5],
        [5, 10],
        [0, 10],
        [0, 0],
    ]


def degenerate_ring(x: float = 5.0, y: float = 5.0, repeats: int = 4) -> List[List[float]]:
    return [[x, y] for _ in range(repeats)]


def polygon_geometry(*rings) -> Dict:
    return {"type": "Polygon", "coordinates": [list(r) for r in rings]}


def multipolygon_geometry(*outer_rings) -> Dict:
    return {"type": "MultiPolygon", "coordinates": [[list(r)] for r in outer_rings]}


def region_geojson(features: Iterable[Tuple[Optional[str], Optional[Dict]]], name_field: str = "NAMEUNIT") -> Dict:
    """Build a GeoJSON FeatureCollection from (name, geometry) pairs."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {name_field: name},
                "geometry": geometry,
            }
            for name, geometry in features
        ],
    }


def write_geojson(path: pathlib.Path, collection: Dict, compress: bool = False) -> pathlib.Path:
    payload = json.dumps(collection).encode("utf-8")
    if compress:
        payload = gzip.compress(payload)
    path.write_bytes(payload)
    return path


def write_population_tsv(
    path: pathlib.Path,
    rows: Iterable[Tuple[str, object]],
    name_field: str = "NOMBRE",
    population_field: str = "POB22",
    compress: bool = False,
) -> pathlib.Path:
    lines = [f"{name_field}\t{population_field}"]
    lines.extend(f"{name}\t{'' if pop is None else pop}" for name, pop in rows)
    payload = ("\n".join(lines) + "\n").encode("utf-8")
    if compress:
        payload = gzip.compress(payload)
    path.write_bytes(payload)
    return path


def inside_box(dots, xmin: float, ymin: float, xmax: float, ymax: float) -> bool:
    arr = np.asarray(dots, dtype=float)
    return bool(
        np.all(arr[:, 0] >= xmin)
        and np.all(arr[:, 0] <= xmax)
        and np.all(arr[:, 1] >= ymin)
        and np.all(arr[:, 1] <= ymax)
    )
