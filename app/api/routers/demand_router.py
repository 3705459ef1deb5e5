"""
app/api/routers/demand_router.py

Crop demand lookup endpoints.

All endpoints are read-only views over the published snapshot. Query
failures from the service layer map to:

    MissingQueryParameterError -> 400
    CityNotFoundError          -> 404
    SnapshotUnavailableError   -> 503
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_demand_query_service
from app.schemas.demand import (
    PROJECTION_NOTE,
    CitiesResponse,
    CityIndexEntryResponse,
    CityIndexResponse,
    CityProjectionResponse,
    ErrorResponse,
)
from app.services.demand_query_service import DemandQueryService
from demand.document import city_entry_to_dict, city_index_to_dict, projection_to_dict
from demand.errors import (
    CityNotFoundError,
    DemandQueryError,
    MissingQueryParameterError,
    SnapshotUnavailableError,
)

router = APIRouter(prefix="/api/demand", tags=["demand"])

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


def _http_error(exc: DemandQueryError) -> HTTPException:
    if isinstance(exc, MissingQueryParameterError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "City name is required",
                "message": "Please provide a valid city/district name",
            },
        )
    if isinstance(exc, CityNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "No data found",
                "message": str(exc),
                "city": exc.city,
                "suggestions": "Try checking the spelling or use a different city name",
            },
        )
    if isinstance(exc, SnapshotUnavailableError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Data not available", "message": str(exc)},
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "Internal server error", "message": str(exc)},
    )


@router.get(
    "/city/{city_name}",
    response_model=CityProjectionResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def get_city_demand(
    city_name: str,
    state: str | None = Query(default=None, description="Optional state filter"),
    category: str | None = Query(default=None, description="Optional category filter"),
    service: DemandQueryService = Depends(get_demand_query_service),
) -> CityProjectionResponse:
    """
    Crop demand for one city/district.

    ``demandQuantity`` on each crop is the state-wide total; only
    ``regionalSuitability`` is narrowed to the requested district.
    """

    try:
        projection = service.project_city(city_name, state=state, category=category)
    except DemandQueryError as exc:
        raise _http_error(exc) from exc

    return CityProjectionResponse.model_validate(
        {**projection_to_dict(projection), "note": PROJECTION_NOTE}
    )


@router.get("/cities", response_model=CitiesResponse, responses=_ERROR_RESPONSES)
def list_cities(
    service: DemandQueryService = Depends(get_demand_query_service),
) -> CitiesResponse:
    """
    Every distinct district seen in the snapshot, sorted ascending.
    """

    try:
        cities = service.list_cities()
    except DemandQueryError as exc:
        raise _http_error(exc) from exc

    return CitiesResponse(total_cities=len(cities), cities=cities)


@router.get(
    "/cities/index",
    response_model=CityIndexResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def get_city_index(
    service: DemandQueryService = Depends(get_demand_query_service),
) -> CityIndexResponse:
    """
    Full district-first index: City -> State -> Category -> Crop.
    """

    try:
        index = service.city_index()
    except DemandQueryError as exc:
        raise _http_error(exc) from exc

    return CityIndexResponse.model_validate(city_index_to_dict(index))


@router.get(
    "/cities/index/{city_name}",
    response_model=CityIndexEntryResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def get_city_index_entry(
    city_name: str,
    service: DemandQueryService = Depends(get_demand_query_service),
) -> CityIndexEntryResponse:
    try:
        entry = service.city_index_entry(city_name)
    except DemandQueryError as exc:
        raise _http_error(exc) from exc

    return CityIndexEntryResponse.model_validate(city_entry_to_dict(entry))
