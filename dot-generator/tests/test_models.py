#!/usr/bin/env python3
"""Tests for pydantic models and configuration validation."""

import os
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import (
    DotDensityConfiguration,
    GenerationStatistics,
    GeometryType,
    MultiPolygonGeometry,
    PolygonGeometry,
    RegionFeature,
    UnsupportedGeometry,
)


class TestRegionFeature:
    def test_geometry_variants_are_tagged(self):
        polygon = RegionFeature(name="a", geometry={"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [0, 1], [0, 0]]]})
        multi = RegionFeature(name="b", geometry={"type": "MultiPolygon", "coordinates": []})
        other = RegionFeature(name="c", geometry={"type": "GeometryCollection", "geometries": []})

        assert isinstance(polygon.geometry, PolygonGeometry)
        assert polygon.geometry.type == GeometryType.POLYGON
        assert isinstance(multi.geometry, MultiPolygonGeometry)
        assert isinstance(other.geometry, UnsupportedGeometry)
        assert other.geometry.type == "GeometryCollection"

    def test_missing_geometry(self):
        assert RegionFeature(name="a").geometry is None

    def test_invalid_geometry(self):
        with pytest.raises(ValidationError):
            RegionFeature(name="a", geometry="POLYGON((0 0, 1 0, 0 1, 0 0))")

    def test_positions_need_two_ordinates(self):
        with pytest.raises(ValidationError):
            RegionFeature(name="a", geometry={"type": "Polygon", "coordinates": [[[1], [0, 1], [1, 1], [1]]]})

        feature = RegionFeature(name="b", geometry={"type": "Polygon", "coordinates": [[[0, 0, 5], [1, 0, 5], [0, 1, 5]]]})
        assert feature.geometry.coordinates[0][0] == [0.0, 0.0, 5.0]

    def test_features_are_frozen(self):
        feature = RegionFeature(name="a")
        with pytest.raises(ValidationError):
            feature.name = "b"


class TestDotDensityConfiguration:
    def test_defaults(self):
        config = DotDensityConfiguration()
        assert config.dots_per_unit == 1000
        assert config.max_attempts == 3000
        assert config.seed is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"dots_per_unit": 0},
            {"dots_per_unit": -10},
            {"max_attempts": 0},
            {"candidate_batch_size": 0},
            {"width": 0},
            {"population_field": ""},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            DotDensityConfiguration(**kwargs)


class TestGenerationStatistics:
    def test_ratios(self):
        stats = GenerationStatistics(
            dots_created=10, fallback_dots=2, represented_population=10_000,
            skipped_no_population=1, skipped_zero_quota=2, skipped_no_ring=3,
        )
        assert stats.fallback_ratio == pytest.approx(0.2)
        assert stats.average_population_per_dot == 1000
        assert stats.features_skipped == 6

    def test_empty(self):
        stats = GenerationStatistics()
        assert stats.fallback_ratio == 0.0
        assert stats.average_population_per_dot == 0.0
