#!/usr/bin/env python3
"""
Population lookup by region name.
Builds a name -> population mapping once and resolves names by exact match.
"""

import logging
from typing import Dict, Iterable, Optional

import pandas as pd
from models import PopulationRecord

LOG = logging.getLogger(__name__)


class PopulationResolver:
    """
    Exact-match lookup of population counts by region name.

    Names are compared as-is (no case folding or trimming). When a name
    appears more than once the last record wins.
    """

    def __init__(self, records: Iterable[PopulationRecord] = ()):
        self._population_by_name: Dict[str, Optional[float]] = {}
        for record in records:
            self.add(record)

    def add(self, record: PopulationRecord) -> None:
        if record.name in self._population_by_name:
            LOG.debug(
                "Duplicate population entry for %r: %s replaces %s",
                record.name,
                record.population,
                self._population_by_name[record.name],
            )
        self._population_by_name[record.name] = record.population

    def resolve(self, name: Optional[str]) -> Optional[float]:
        """Population for ``name``, or None when unknown."""
        if name is None:
            return None
        return self._population_by_name.get(name)

    def __len__(self) -> int:
        return len(self._population_by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._population_by_name

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Optional[float]]) -> "PopulationResolver":
        return cls(
            PopulationRecord(name=name, population=population)
            for name, population in mapping.items()
        )

    @classmethod
    def from_dataframe(
        cls, df: pd.DataFrame, name_field: str, population_field: str
    ) -> "PopulationResolver":
        """
        Build a resolver from a tabular dataset.

        Args:
            df: Table with one row per region
            name_field: Column holding the region name
            population_field: Column holding the population count

        Returns:
            PopulationResolver with one entry per distinct name
        """
        required_cols = [name_field, population_field]
        missing_cols = [col for col in required_cols if col not in df.columns]
        if missing_cols:
            raise ValueError(f"Missing required columns {missing_cols} in population table.")

        populations = pd.to_numeric(df[population_field], errors="coerce")
        negative = populations < 0
        if negative.any():
            LOG.warning(
                "Ignoring %d negative population values in column %r",
                int(negative.sum()),
                population_field,
            )
            populations = populations.mask(negative)

        resolver = cls()
        for name, population in zip(df[name_field], populations):
            if pd.isna(name):
                continue
            resolver.add(
                PopulationRecord(
                    name=str(name),
                    population=None if pd.isna(population) else float(population),
                )
            )

        LOG.info("Loaded population for %d regions", len(resolver))
        return resolver
