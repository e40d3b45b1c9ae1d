"""
Matching API.

Thin HTTP adapter over MatchEngine: one endpoint per (role group, direction)
pair plus driver availability lookup. Core errors are turned into responses
by the handlers registered in carpool.api.errors.
"""

from fastapi import APIRouter, Depends, Path

from carpool.api.dependencies import get_match_engine
from carpool.api.schemas import ApiResponse, GoHomeMatchRequest, ToCampusMatchRequest
from carpool.models.matching import Direction, MatchResponse, RoleGroup
from carpool.services.match_engine import MatchEngine

router = APIRouter(prefix="/api/matching", tags=["matching"])

GEO_APPLIED_NOTE = "Geo-based filtering applied"

_DIRECTION_LABELS = {Direction.TO_CAMPUS: "to-campus", Direction.GO_HOME: "go-home"}
_GROUP_KEYS = {RoleGroup.DRIVER: "drivers", RoleGroup.PASSENGER: "passengers"}


def _envelope(response: MatchResponse, direction: Direction, group: RoleGroup) -> ApiResponse:
    key = _GROUP_KEYS[group]
    return ApiResponse(
        success=True,
        message=f"Found {len(response.results)} {_DIRECTION_LABELS[direction]} compatible {key}",
        data={
            key: [result.model_dump(mode="json") for result in response.results],
            "note": response.degraded_note or GEO_APPLIED_NOTE,
            "degraded": response.degraded,
        },
    )


async def _match(
    engine: MatchEngine,
    user_id: str,
    direction: Direction,
    group: RoleGroup,
    day_of_week: int,
    target_time: str,
    flexibility_mins: int,
) -> ApiResponse:
    response = await engine.find_matches(
        requester_id=user_id,
        day_of_week=day_of_week,
        direction=direction,
        target_time=target_time,
        flexibility_minutes=flexibility_mins,
        target_role_group=group,
    )
    return _envelope(response, direction, group)


@router.post("/users/{user_id}/find-optimal-drivers-to-campus", response_model=ApiResponse)
async def find_optimal_drivers_to_campus(
    body: ToCampusMatchRequest,
    user_id: str = Path(..., min_length=1),
    engine: MatchEngine = Depends(get_match_engine),
) -> ApiResponse:
    return await _match(engine, user_id, Direction.TO_CAMPUS, RoleGroup.DRIVER,
                        body.day_of_week, body.to_campus_time, body.flexibility_mins)


@router.post("/users/{user_id}/find-optimal-drivers-go-home", response_model=ApiResponse)
async def find_optimal_drivers_go_home(
    body: GoHomeMatchRequest,
    user_id: str = Path(..., min_length=1),
    engine: MatchEngine = Depends(get_match_engine),
) -> ApiResponse:
    return await _match(engine, user_id, Direction.GO_HOME, RoleGroup.DRIVER,
                        body.day_of_week, body.go_home_time, body.flexibility_mins)


@router.post("/users/{user_id}/find-optimal-passengers-to-campus", response_model=ApiResponse)
async def find_optimal_passengers_to_campus(
    body: ToCampusMatchRequest,
    user_id: str = Path(..., min_length=1),
    engine: MatchEngine = Depends(get_match_engine),
) -> ApiResponse:
    return await _match(engine, user_id, Direction.TO_CAMPUS, RoleGroup.PASSENGER,
                        body.day_of_week, body.to_campus_time, body.flexibility_mins)


@router.post("/users/{user_id}/find-optimal-passengers-go-home", response_model=ApiResponse)
async def find_optimal_passengers_go_home(
    body: GoHomeMatchRequest,
    user_id: str = Path(..., min_length=1),
    engine: MatchEngine = Depends(get_match_engine),
) -> ApiResponse:
    return await _match(engine, user_id, Direction.GO_HOME, RoleGroup.PASSENGER,
                        body.day_of_week, body.go_home_time, body.flexibility_mins)


@router.get("/drivers/{driver_id}/availability/{day_of_week}", response_model=ApiResponse)
async def get_driver_availability(
    driver_id: str = Path(..., min_length=1),
    day_of_week: int = Path(...),
    engine: MatchEngine = Depends(get_match_engine),
) -> ApiResponse:
    availability = await engine.get_availability(driver_id, day_of_week)
    return ApiResponse(success=True, data=availability.model_dump(mode="json"))
