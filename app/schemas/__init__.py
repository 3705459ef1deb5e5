"""
app/schemas package marker.
"""

from app.schemas.demand import (
    CitiesResponse,
    CityIndexEntryResponse,
    CityIndexResponse,
    CityProjectionResponse,
    ErrorResponse,
    HealthResponse,
    StateResponse,
)

__all__ = [
    "CitiesResponse",
    "CityIndexEntryResponse",
    "CityIndexResponse",
    "CityProjectionResponse",
    "ErrorResponse",
    "HealthResponse",
    "StateResponse",
]
