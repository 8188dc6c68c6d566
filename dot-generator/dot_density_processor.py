#!/usr/bin/env python3
"""
Dot-density processing for a collection of regions.
Joins each region to its population, selects a ring, samples its dots and
concatenates everything into one point sequence.
"""

import logging
import time
from typing import Iterable, List, Optional

import numpy as np
from dot_generator import DotGenerator
from models import Dot, DotDensityConfiguration, GenerationStatistics, RegionFeature
from population import PopulationResolver
from projection import Projection
from ring_selector import select_ring

LOG = logging.getLogger(__name__)


class DotDensityProcessor:
    """Turns projected regions plus population data into dot-density points."""

    def __init__(
        self,
        population_resolver: PopulationResolver,
        config: Optional[DotDensityConfiguration] = None,
        projection: Optional[Projection] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize the processor; ``rng`` defaults to one seeded from config."""
        self.config = config or DotDensityConfiguration()
        self.population_resolver = population_resolver
        self.stats = GenerationStatistics()
        self.dot_generator = DotGenerator(
            config=self.config,
            projection=projection,
            rng=rng,
            stats=self.stats,
        )

    def create_feature_dots(self, feature: RegionFeature) -> List[Dot]:
        """
        Dots for a single region.

        Regions without population, with a zero quota, or without a usable
        ring produce no dots.
        """
        self.stats.features_processed += 1

        population = self.population_resolver.resolve(feature.name)
        if not population:
            self.stats.skipped_no_population += 1
            return []

        num_dots = self.dot_generator.dot_count(population)
        if num_dots <= 0:
            self.stats.skipped_zero_quota += 1
            return []

        ring = select_ring(feature.geometry)
        if ring is None:
            LOG.debug("No usable ring for region %r; skipping", feature.name)
            self.stats.skipped_no_ring += 1
            return []

        self.stats.represented_population += num_dots * self.config.dots_per_unit
        return self.dot_generator.sample_points(ring, num_dots)

    def generate_dots(self, features: Iterable[RegionFeature]) -> List[Dot]:
        """
        Dots for every region, in region order then dot order.

        Args:
            features: Regions with geometry already in projected space

        Returns:
            Flat list of (x, y) dots
        """
        start = time.perf_counter()
        dots: List[Dot] = []
        for feature in features:
            dots.extend(self.create_feature_dots(feature))
        self.stats.processing_time_seconds += time.perf_counter() - start

        LOG.info(
            "Generated %d dots (~%d population) from %d regions (%d skipped, %d fallback dots)",
            len(dots),
            len(dots) * self.config.dots_per_unit,
            self.stats.features_processed,
            self.stats.features_skipped,
            self.stats.fallback_dots,
        )
        return dots
