"""
app/schemas/demand.py

Response schemas for demand query endpoints.

Field names are snake_case in Python and camelCase on the wire, matching
the persisted snapshot document.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PROJECTION_NOTE = (
    "demandQuantity represents the total demand for this crop across all "
    "districts in the state, not just this city"
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegionalSuitabilityResponse(_CamelModel):
    geography: str
    district: str
    state: str
    suitability: str


class CategoryRefResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str


class CropResponse(_CamelModel):
    crop_id: str
    crop_name: str
    scientific_name: str
    category_id: CategoryRefResponse
    demand_quantity: float = Field(..., ge=0)
    regional_suitability: list[RegionalSuitabilityResponse] = Field(default_factory=list)


class CategoryResponse(_CamelModel):
    name: str
    count: int = Field(..., ge=0)
    crops: list[CropResponse] = Field(default_factory=list)


class StateSummaryResponse(_CamelModel):
    total_categories: int = Field(..., ge=0)
    total_crops: int = Field(..., ge=0)
    total_demand: float = Field(..., ge=0)
    unit: str
    last_updated: datetime | None = None


class StateResponse(_CamelModel):
    state: str
    categories: list[CategoryResponse]
    summary: StateSummaryResponse


class ProjectionSummaryResponse(_CamelModel):
    total_states: int = Field(..., ge=0)
    total_categories: int = Field(..., ge=0)
    total_crops: int = Field(..., ge=0)
    total_demand: float = Field(..., ge=0)
    unit: str


class CityFiltersResponse(_CamelModel):
    state: str = "all"
    category: str = "all"


class CityProjectionResponse(_CamelModel):
    city: str
    filters: CityFiltersResponse
    note: str = PROJECTION_NOTE
    data: list[StateResponse]
    summary: ProjectionSummaryResponse


class CitiesResponse(_CamelModel):
    total_cities: int = Field(..., ge=0)
    cities: list[str]


class CityIndexEntryResponse(_CamelModel):
    city: str
    data: list[StateResponse]
    summary: ProjectionSummaryResponse


class CityIndexResponse(_CamelModel):
    total_cities: int = Field(..., ge=0)
    cities: list[CityIndexEntryResponse]


class HealthResponse(_CamelModel):
    status: str
    data_loaded: bool
    timestamp: datetime


class ErrorResponse(_CamelModel):
    error: str
    message: str
