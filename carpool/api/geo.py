"""
Geo API: address autocomplete, place lookup and travel time probes.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from carpool.api.dependencies import get_routing_provider
from carpool.api.schemas import ApiResponse
from carpool.models.geo import GeoCoordinate
from carpool.services.routing_provider import RoutingProvider

router = APIRouter(prefix="/api/geo", tags=["geo"])


@router.get("/autocomplete", response_model=ApiResponse)
async def autocomplete(
    q: str = Query(""),
    limit: int = Query(5, ge=1, le=20),
    provider: RoutingProvider = Depends(get_routing_provider),
) -> ApiResponse:
    if not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Query parameter "q" is required',
        )
    suggestions = await provider.autocomplete(q, limit)
    return ApiResponse(data=[s.model_dump() for s in suggestions])


@router.get("/place/{place_id}", response_model=ApiResponse)
async def place_details(
    place_id: str,
    provider: RoutingProvider = Depends(get_routing_provider),
) -> ApiResponse:
    details = await provider.place_details(place_id)
    return ApiResponse(data=details.model_dump())


@router.get("/duration", response_model=ApiResponse)
async def duration(
    o_lat: float = Query(..., alias="oLat"),
    o_lng: float = Query(..., alias="oLng"),
    d_lat: float = Query(..., alias="dLat"),
    d_lng: float = Query(..., alias="dLng"),
    provider: RoutingProvider = Depends(get_routing_provider),
) -> ApiResponse:
    minutes = await provider.route_duration_minutes(
        GeoCoordinate(lat=o_lat, lng=o_lng), GeoCoordinate(lat=d_lat, lng=d_lng)
    )
    return ApiResponse(data={"duration_minutes": minutes})


@router.get("/detour", response_model=ApiResponse)
async def detour(
    o_lat: float = Query(..., alias="oLat"),
    o_lng: float = Query(..., alias="oLng"),
    w_lat: float = Query(..., alias="wLat"),
    w_lng: float = Query(..., alias="wLng"),
    d_lat: float = Query(..., alias="dLat"),
    d_lng: float = Query(..., alias="dLng"),
    provider: RoutingProvider = Depends(get_routing_provider),
) -> ApiResponse:
    quote = await provider.detour_extra_minutes(
        GeoCoordinate(lat=o_lat, lng=o_lng),
        GeoCoordinate(lat=w_lat, lng=w_lng),
        GeoCoordinate(lat=d_lat, lng=d_lng),
    )
    return ApiResponse(data=quote.model_dump())
