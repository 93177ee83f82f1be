"""
app/services/user_service.py

Purpose: User data management

- Create, fetch, search, replace, partially update and delete users
- Normalize and validate input before it reaches the store
- Strip passwords from every user that leaves the service
- Serve cached map tiles for a user's stored location
"""

from contextlib import contextmanager
from typing import List, Optional
from uuid import uuid4

from app.core.config import settings
from app.core.exceptions import (
    CacheError,
    InternalError,
    InvalidInputError,
    UserServiceError,
)
from app.core.logging import get_logger, LogContext
from app.models.user import User, UserFilter
from app.db.elasticsearch import get_elasticsearch
from app.db.redis import get_redis
from app.repositories.user_repository import ElasticsearchUserRepository, UserRepository
from app.services.map_tile_service import TileProvider, get_map_tile_service
from app.services.tile_cache_service import CacheStore, TileCacheService, tile_cache_key
from app.services.user_validation import (
    clamp_page_size,
    normalize_user,
    prepare_user_for_storage,
    validate_filter,
    validate_user_id,
)
from utils.constants import (
    MSG_LOCATION_REQUIRED,
    MSG_REG_DATE_CHANGED,
    MSG_REG_DATE_PROTECTED,
    MSG_ZOOM_RANGE,
)
from utils.geo_utils import is_valid_zoom
from utils.time_utils import ensure_utc, utc_now

logger = get_logger(__name__)


@contextmanager
def repository_errors(operation: str):
    """
    Lets service errors through and turns anything else raised by the
    repository into InternalError.
    """
    try:
        yield
    except UserServiceError:
        raise
    except Exception as e:
        logger.error(f"{operation} failed: {e}", exc_info=True)
        raise InternalError("System error occurred") from e


class UserService:
    """
    Business operations over users.

    Holds only injected collaborators, so one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        repository: UserRepository,
        cache: CacheStore,
        tile_provider: TileProvider,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
        default_zoom: Optional[int] = None,
    ):
        self.repository = repository
        self.cache = cache
        self.tile_provider = tile_provider
        self.default_page_size = default_page_size or settings.DEFAULT_PAGE_SIZE
        self.max_page_size = max_page_size or settings.MAX_PAGE_SIZE
        self.default_zoom = settings.MAP_ZOOM_LEVEL if default_zoom is None else default_zoom

    async def create_user(self, user: User) -> User:
        """
        Validates and stores a new user.

        An absent id is generated; an absent registration date becomes now (UTC).

        Args:
            user: User as received

        Returns:
            The stored user without its password

        Raises:
            InvalidInputError: If any field is invalid
            AlreadyExistsError: If the id is taken
            InternalError: On hashing or store failure
        """
        now = utc_now()
        user = prepare_user_for_storage(normalize_user(user), now)

        updates = {}
        if user.id is None:
            updates["id"] = str(uuid4())
        if user.reg_date is None:
            updates["reg_date"] = now
        if updates:
            user = user.model_copy(update=updates)

        with LogContext(user_id=user.id, operation="create_user"):
            with repository_errors("create_user"):
                await self.repository.create(user)
            logger.info("User created")

        return user.redacted()

    async def get_user_by_id(self, user_id: str) -> User:
        """
        Raises:
            InvalidInputError: If the id is malformed
            ResourceNotFoundError: If there is no such user
        """
        validate_user_id(user_id)

        with repository_errors("get_user_by_id"):
            user = await self.repository.get_by_id(user_id)

        return user.redacted()

    async def search_users(self, filters: Optional[UserFilter] = None) -> List[User]:
        """
        Searches users. Page size outside (0, max] is replaced by the default.

        Returns:
            Matching users of the requested page, passwords removed
        """
        filters = filters or UserFilter()
        validate_filter(filters)
        filters = clamp_page_size(filters, self.default_page_size, self.max_page_size)

        with repository_errors("search_users"):
            users = await self.repository.search(filters)

        return [user.redacted() for user in users]

    async def replace_user(self, user_id: str, user: User) -> User:
        """
        Replaces every field of an existing user.

        The stored registration date is kept: an absent one is copied over,
        a different one is rejected.

        Raises:
            InvalidInputError: If the id or any field is invalid
            ResourceNotFoundError: If there is no such user
        """
        user = normalize_user(user.model_copy(update={"id": user_id}))
        if user.id is None:
            raise InvalidInputError("User ID is required")

        user = prepare_user_for_storage(user)

        with LogContext(user_id=user.id, operation="replace_user"):
            with repository_errors("replace_user"):
                existing = await self.repository.get_by_id(user.id)

            if user.reg_date is None:
                user = user.model_copy(update={"reg_date": existing.reg_date})
            elif existing.reg_date is not None and ensure_utc(user.reg_date) != ensure_utc(existing.reg_date):
                raise InvalidInputError(MSG_REG_DATE_CHANGED)

            with repository_errors("replace_user"):
                await self.repository.replace(user)
            logger.info("User replaced")

        return user.redacted()

    async def update_user_partial(self, user_id: str, user: User) -> User:
        """
        Updates only the fields present in `user`.

        Returns:
            The merged user as stored, password removed

        Raises:
            InvalidInputError: If reg_date is sent or any present field is invalid
            ResourceNotFoundError: If there is no such user
        """
        if user.reg_date is not None:
            raise InvalidInputError(MSG_REG_DATE_PROTECTED)

        user = normalize_user(user.model_copy(update={"id": user_id}))
        if user.id is None:
            raise InvalidInputError("User ID is required")

        user = prepare_user_for_storage(user)

        with LogContext(user_id=user.id, operation="update_user_partial"):
            with repository_errors("update_user_partial"):
                await self.repository.update_partial(user)
                updated = await self.repository.get_by_id(user.id)
            logger.info("User updated")

        return updated.redacted()

    async def delete_user(self, user_id: str) -> None:
        """
        Raises:
            InvalidInputError: If the id is malformed
            ResourceNotFoundError: If there is no such user
        """
        validate_user_id(user_id)

        with LogContext(user_id=user_id, operation="delete_user"):
            with repository_errors("delete_user"):
                await self.repository.delete(user_id)
            logger.info("User deleted")

    async def get_user_map(self, user_id: str, zoom: Optional[int] = None) -> bytes:
        """
        Returns the PNG tile around a user's stored location.

        Cache-aside: a cached tile is returned as is; on a miss (or an
        unavailable cache) the tile is downloaded and written back. A failed
        write-back is logged and does not fail the request.

        Args:
            user_id: User identifier
            zoom: Zoom level, defaults to MAP_ZOOM_LEVEL

        Returns:
            PNG bytes

        Raises:
            InvalidInputError: Malformed id, bad zoom, or user without location
            ResourceNotFoundError: If there is no such user
            InternalError: If the user store or the tile server fails
        """
        zoom = self.default_zoom if zoom is None else zoom
        if not is_valid_zoom(zoom):
            raise InvalidInputError(MSG_ZOOM_RANGE)

        validate_user_id(user_id)

        with LogContext(user_id=user_id, operation="get_user_map"):
            with repository_errors("get_user_map"):
                user = await self.repository.get_by_id(user_id)

            if user.location is None:
                raise InvalidInputError(MSG_LOCATION_REQUIRED)

            lat, lon = user.location.lat, user.location.lon
            cache_key = tile_cache_key(lat, lon, zoom)

            try:
                cached = await self.cache.get(cache_key)
            except CacheError as e:
                logger.warning(f"Tile cache read failed, treating as miss: {e}", extra={"cache_key": cache_key})
                cached = None

            if cached:
                logger.info("Map tile served from cache", extra={"cache_key": cache_key})
                return cached

            try:
                tile = await self.tile_provider.fetch_tile(lat, lon, zoom)
            except InvalidInputError:
                raise
            except Exception as e:
                logger.error(f"Tile provider failed: {e}", extra={"cache_key": cache_key})
                raise InternalError("Failed to get map tile from map service") from e

            if not tile:
                raise InternalError("Empty map data")

            try:
                await self.cache.set(cache_key, tile)
            except CacheError as e:
                logger.warning(f"Cache set failed: {e}", extra={"cache_key": cache_key})

            return tile


# Global service instance
_user_service: Optional[UserService] = None


def get_user_service() -> UserService:
    """
    Get or create the user service wired to the live Elasticsearch,
    Redis and tile server clients. Requires application startup to
    have connected the stores.
    """
    global _user_service
    if _user_service is None:
        _user_service = UserService(
            repository=ElasticsearchUserRepository(get_elasticsearch()),
            cache=TileCacheService(get_redis()),
            tile_provider=get_map_tile_service(),
        )
    return _user_service


def reset_user_service():
    """Drop the cached instance (called on shutdown)."""
    global _user_service
    _user_service = None
