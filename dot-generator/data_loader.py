#!/usr/bin/env python3
"""
Loading of region boundaries and population tables.

Sources may be local paths or http(s) URLs, optionally gzip-compressed.
Boundaries are GeoJSON in lon/lat; populations are tab-separated values.
"""

import gzip
import io
import logging
import pathlib
from typing import List, Union

import geopandas as gpd
import pandas as pd
import requests
from models import RegionFeature
from shapely.geometry import mapping

LOG = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
REQUEST_TIMEOUT = 60

Source = Union[str, pathlib.Path]


def _is_url(source: Source) -> bool:
    return str(source).startswith(("http://", "https://"))


def read_source_bytes(source: Source) -> bytes:
    """
    Read a local file or URL, transparently decompressing gzip payloads.

    Raises:
        FileNotFoundError: local path does not exist
        requests.HTTPError: URL returned an error status
    """
    if _is_url(source):
        LOG.info("Downloading %s", source)
        resp = requests.get(str(source), timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        content = resp.content
    else:
        path = pathlib.Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        content = path.read_bytes()

    if content[:2] == GZIP_MAGIC:
        content = gzip.decompress(content)
    return content


def load_population_table(
    source: Source, name_field: str, population_field: str
) -> pd.DataFrame:
    """
    Load a tab-separated population table.

    Args:
        source: Path or URL of the TSV file (may be gzipped)
        name_field: Column holding the region name (kept as text)
        population_field: Column holding the population count

    Returns:
        DataFrame with at least the two requested columns
    """
    content = read_source_bytes(source)
    try:
        df = pd.read_csv(io.BytesIO(content), sep="\t", dtype={name_field: str})
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise RuntimeError(f"Error parsing population table {source}: {e}")

    missing_cols = [col for col in (name_field, population_field) if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns {missing_cols} in population table {source}.")

    LOG.info("Loaded %d population rows from %s", len(df), source)
    return df


def load_region_features(source: Source, name_field: str) -> List[RegionFeature]:
    """
    Load region boundaries from GeoJSON.

    Args:
        source: Path or URL of the GeoJSON file (may be gzipped)
        name_field: Feature property holding the region name

    Returns:
        RegionFeature list in file order, geometry in lon/lat
    """
    content = read_source_bytes(source)
    gdf = gpd.read_file(io.BytesIO(content))

    if name_field not in gdf.columns:
        raise ValueError(f"Missing name property {name_field!r} in {source}.")

    features: List[RegionFeature] = []
    for name, geom in zip(gdf[name_field], gdf.geometry):
        features.append(
            RegionFeature(
                name=None if pd.isna(name) else str(name),
                geometry=None if geom is None or geom.is_empty else mapping(geom),
            )
        )

    LOG.info("Loaded %d region features from %s", len(features), source)
    return features
