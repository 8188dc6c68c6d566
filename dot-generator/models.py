#!/usr/bin/env python3
"""
Pydantic models for dot-density generation.
Provides data validation, type safety, and structure for region geometry,
population records and generation settings.
"""

from typing import List, Mapping, Optional, Tuple, Union, Literal
from pydantic import BaseModel, Field, field_validator, ConfigDict, conlist
from enum import Enum


# A single projected point: (x, y)
Dot = Tuple[float, float]

# x, y and optionally further ordinates that are ignored
Position = conlist(float, min_length=2)
LinearRing = List[Position]


class GeometryType(str, Enum):
    """Geometry variants the ring selector knows how to handle."""
    POLYGON = "Polygon"
    MULTI_POLYGON = "MultiPolygon"


class PolygonGeometry(BaseModel):
    """Single polygon: outer boundary first, holes after it."""
    model_config = ConfigDict(frozen=True)

    type: Literal["Polygon"] = "Polygon"
    coordinates: List[LinearRing] = Field(default_factory=list)


class MultiPolygonGeometry(BaseModel):
    """Several polygons, each with its own outer boundary."""
    model_config = ConfigDict(frozen=True)

    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: List[List[LinearRing]] = Field(default_factory=list)


class UnsupportedGeometry(BaseModel):
    """Any other geometry type (points, lines, collections)."""
    model_config = ConfigDict(frozen=True)

    type: str


Geometry = Union[PolygonGeometry, MultiPolygonGeometry, UnsupportedGeometry]


def parse_geometry(value) -> Optional[Geometry]:
    """Build the tagged geometry variant from a GeoJSON-like mapping."""
    if value is None or isinstance(value, BaseModel):
        return value
    if not isinstance(value, Mapping):
        raise ValueError(f"Geometry must be a mapping, got {type(value).__name__}")
    geometry_type = value.get("type")
    if geometry_type == GeometryType.POLYGON.value:
        return PolygonGeometry(coordinates=value.get("coordinates") or [])
    if geometry_type == GeometryType.MULTI_POLYGON.value:
        return MultiPolygonGeometry(coordinates=value.get("coordinates") or [])
    return UnsupportedGeometry(type=str(geometry_type))


class RegionFeature(BaseModel):
    """One region: a join name and its boundary geometry."""
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, description="Region name used to join population data")
    geometry: Optional[Geometry] = Field(default=None, description="Region boundary")

    @field_validator('geometry', mode='before')
    @classmethod
    def tag_geometry(cls, v):
        return parse_geometry(v)


class PopulationRecord(BaseModel):
    """Population count for a named region."""
    model_config = ConfigDict(frozen=True)

    name: str
    population: Optional[float] = Field(default=None, ge=0, description="Population count (None if unknown)")


class DotDensityConfiguration(BaseModel):
    """Configuration for dot-density generation."""
    dots_per_unit: float = Field(default=1000, gt=0, description="Population represented by one dot")
    max_attempts: int = Field(default=3000, gt=0, description="Rejection sampling attempts per dot before falling back")
    candidate_batch_size: int = Field(default=64, gt=0, description="Candidates drawn per vectorised sampling batch")
    feature_name_field: str = Field(default="NAMEUNIT", description="Feature property holding the region name")
    population_name_field: str = Field(default="NOMBRE", description="Population table column holding the region name")
    population_field: str = Field(default="POB22", description="Population table column holding the count")
    width: float = Field(default=900, description="Projected output width")
    height: float = Field(default=800, description="Projected output height")
    seed: Optional[int] = Field(default=None, description="Random seed (None for non-deterministic output)")

    @field_validator('width', 'height')
    @classmethod
    def extent_positive(cls, v):
        if v <= 0:
            raise ValueError('Output extent must be positive')
        return v

    @field_validator('feature_name_field', 'population_name_field', 'population_field')
    @classmethod
    def field_names_present(cls, v):
        if not v:
            raise ValueError('Field names must not be empty')
        return v


class GenerationStatistics(BaseModel):
    """Statistics from a dot generation run."""
    features_processed: int = Field(default=0, ge=0)
    skipped_no_population: int = Field(default=0, ge=0)
    skipped_zero_quota: int = Field(default=0, ge=0)
    skipped_no_ring: int = Field(default=0, ge=0)
    dots_created: int = Field(default=0, ge=0)
    accepted_dots: int = Field(default=0, ge=0)
    fallback_dots: int = Field(default=0, ge=0)
    represented_population: float = Field(default=0, ge=0)
    processing_time_seconds: float = Field(default=0, ge=0)

    @property
    def features_skipped(self) -> int:
        return self.skipped_no_population + self.skipped_zero_quota + self.skipped_no_ring

    @property
    def fallback_ratio(self) -> float:
        """Share of dots placed by the centroid fallback."""
        if self.dots_created == 0:
            return 0.0
        return self.fallback_dots / self.dots_created

    @property
    def average_population_per_dot(self) -> float:
        """Average population represented per dot."""
        if self.dots_created == 0:
            return 0.0
        return self.represented_population / self.dots_created
