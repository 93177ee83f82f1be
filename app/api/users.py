"""
app/api/users.py

Purpose: User HTTP endpoints

- Maps query strings and JSON bodies onto the service models
- Delegates every decision to UserService
- Errors travel as UserServiceError and are rendered by app.core.errors
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.exceptions import InvalidInputError
from app.core.logging import get_logger
from app.models.user import User, UserFilter
from app.schemas.response import UserIDResponse, UserListResponse
from app.services.user_service import UserService, get_user_service

logger = get_logger(__name__)
router = APIRouter()


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip() == "":
        return None
    return value


def _parse_datetime(name: str, value: Optional[str]) -> Optional[datetime]:
    """
    Parses an RFC 3339 timestamp from a query string.

    Raises:
        InvalidInputError: If the value is not a timestamp
    """
    value = _blank_to_none(value)
    if value is None:
        return None

    try:
        # fromisoformat only accepts a trailing "Z" from 3.11 on
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidInputError(f"{name} must be an RFC 3339 timestamp")


def _parse_number(name: str, value: Optional[str], kind: type):
    """
    Parses an int or float query value; blank means absent.

    Raises:
        InvalidInputError: If a non-blank value is not a number of that kind
    """
    value = _blank_to_none(value)
    if value is None:
        return None

    try:
        return kind(value.strip())
    except ValueError:
        expected = "an integer" if kind is int else "a number"
        raise InvalidInputError(f"{name} must be {expected}")


@router.get("/users", response_model=UserListResponse, response_model_exclude_none=True)
async def search_users(
    q: Optional[str] = Query(None, description="Full-text search over login, username, comment, description"),
    date_from: Optional[str] = Query(None, description="Registered at or after (RFC 3339)"),
    date_to: Optional[str] = Query(None, description="Registered at or before (RFC 3339)"),
    lat: Optional[str] = Query(None, description="Centre latitude"),
    lon: Optional[str] = Query(None, description="Centre longitude"),
    radius: Optional[str] = Query(None, description="Distance such as 500m or 2km"),
    social_net: Optional[str] = Query(None, description="Social network"),
    sort_by: Optional[str] = Query(None, description="login or reg_date"),
    sort_order: Optional[str] = Query(None, description="asc or desc"),
    page: Optional[str] = Query(None, description="1-based page number"),
    size: Optional[str] = Query(None, description="Page size"),
    service: UserService = Depends(get_user_service),
):
    """
    Searches users. Every parameter is optional; an empty request lists
    the first page of all users.
    """
    page_number = _parse_number("page", page, int)
    filters = UserFilter(
        search=_blank_to_none(q),
        date_from=_parse_datetime("date_from", date_from),
        date_to=_parse_datetime("date_to", date_to),
        lat=_parse_number("lat", lat, float),
        lon=_parse_number("lon", lon, float),
        distance=_blank_to_none(radius),
        social_net=_blank_to_none(social_net),
        sort_by=_blank_to_none(sort_by),
        sort_order=_blank_to_none(sort_order),
        page=page_number,
        size=_parse_number("size", size, int),
    )
    logger.debug(f"Search request: {filters}")

    users = await service.search_users(filters)
    return UserListResponse(users=users, total=len(users), page=page_number or 1)


@router.post("/users", response_model=UserIDResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user: User, service: UserService = Depends(get_user_service)):
    """Creates a user and returns its identifier."""
    created = await service.create_user(user)
    return UserIDResponse(user_id=created.id)


@router.get("/users/{user_id}", response_model=User, response_model_exclude_none=True)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return await service.get_user_by_id(user_id)


@router.put("/users/{user_id}", response_model=User, response_model_exclude_none=True)
async def replace_user(user_id: str, user: User, service: UserService = Depends(get_user_service)):
    """Replaces all fields of a user. The registration date cannot change."""
    return await service.replace_user(user_id, user)


@router.patch("/users/{user_id}", response_model=User, response_model_exclude_none=True)
async def update_user(user_id: str, user: User, service: UserService = Depends(get_user_service)):
    """Updates the fields present in the body."""
    return await service.update_user_partial(user_id, user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/users/{user_id}/map",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_user_map(
    user_id: str,
    zoom: Optional[int] = Query(None, description="Zoom level 0-19"),
    service: UserService = Depends(get_user_service),
):
    """
    Returns the OpenStreetMap tile around the user's location.
    """
    tile = await service.get_user_map(user_id, zoom)
    return Response(content=tile, media_type="image/png")
