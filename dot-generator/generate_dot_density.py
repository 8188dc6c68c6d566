#!/usr/bin/env python3
"""
Generate a dot-density point cloud from region boundaries and population data.

Loads a GeoJSON of regions and a TSV of populations, fits a Mercator
projection to the output extent, places one dot per ``--dots-per-unit``
people inside each region and writes the dots as GeoJSON or CSV.

Usage:
    python generate_dot_density.py --geojson regions.geojson.gz \
        --population population.tsv.gz --output dots.geojson
"""

import argparse
import logging
import pathlib
from typing import List, Optional, Sequence

import geopandas as gpd
import pandas as pd
import requests
from data_loader import load_population_table, load_region_features
from dot_density_processor import DotDensityProcessor
from models import Dot, DotDensityConfiguration
from population import PopulationResolver
from projection import MercatorProjection, project_feature
from pydantic import ValidationError


def write_dots(dots: List[Dot], output_path: pathlib.Path) -> pathlib.Path:
    """Write dots as CSV (``.csv``) or GeoJSON (anything else)."""
    output_path = pathlib.Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(dots, columns=["x", "y"])
    if output_path.suffix.lower() == ".csv":
        df.to_csv(output_path, index=False)
    else:
        gdf = gpd.GeoDataFrame(geometry=gpd.points_from_xy(df["x"], df["y"]))
        gdf.to_file(output_path, driver="GeoJSON")
    return output_path


def build_parser() -> argparse.ArgumentParser:
    defaults = DotDensityConfiguration()
    parser = argparse.ArgumentParser(description="Generate dot-density points from regions and population data")
    parser.add_argument("--geojson", required=True, help="Region boundaries (GeoJSON, path or URL, optionally gzipped)")
    parser.add_argument("--population", required=True, help="Population table (TSV, path or URL, optionally gzipped)")
    parser.add_argument("--output", default="dots.geojson", help="Output file (.geojson or .csv)")
    parser.add_argument("--dots-per-unit", type=float, default=defaults.dots_per_unit, help="People represented by one dot")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible output")
    parser.add_argument("--width", type=float, default=defaults.width, help="Output extent width")
    parser.add_argument("--height", type=float, default=defaults.height, help="Output extent height")
    parser.add_argument("--max-attempts", type=int, default=defaults.max_attempts, help="Sampling attempts per dot before the centroid fallback")
    parser.add_argument("--name-field", default=defaults.feature_name_field, help="GeoJSON property with the region name")
    parser.add_argument("--population-name-field", default=defaults.population_name_field, help="TSV column with the region name")
    parser.add_argument("--population-field", default=defaults.population_field, help="TSV column with the population count")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s: %(message)s",
    )

    try:
        config = DotDensityConfiguration(
            dots_per_unit=args.dots_per_unit,
            max_attempts=args.max_attempts,
            feature_name_field=args.name_field,
            population_name_field=args.population_name_field,
            population_field=args.population_field,
            width=args.width,
            height=args.height,
            seed=args.seed,
        )
    except ValidationError as e:
        print(f"✗ Invalid configuration: {e}")
        return 1

    try:
        features = load_region_features(args.geojson, config.feature_name_field)
        table = load_population_table(
            args.population, config.population_name_field, config.population_field
        )
    except (FileNotFoundError, ValueError, RuntimeError, requests.RequestException) as e:
        print(f"✗ Failed to load input data: {e}")
        return 1

    resolver = PopulationResolver.from_dataframe(
        table, config.population_name_field, config.population_field
    )

    try:
        projection = MercatorProjection.fit_size(config.width, config.height, features)
    except ValueError as e:
        print(f"✗ {e}")
        return 1
    projected = [project_feature(feature, projection) for feature in features]

    processor = DotDensityProcessor(resolver, config=config, projection=projection)
    dots = processor.generate_dots(projected)

    output_path = write_dots(dots, pathlib.Path(args.output))
    stats = processor.stats
    print(f"✓ Generated {len(dots):,} dots (~{len(dots) * config.dots_per_unit:,.0f} population)")
    print(f"  Regions: {stats.features_processed} processed, {stats.features_skipped} skipped")
    print(f"  Fallback dots: {stats.fallback_dots} ({stats.fallback_ratio:.1%})")
    print(f"  Output: {output_path}")
    return 0


if __name__ == "__main__":
    exit(main())
