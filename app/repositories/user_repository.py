"""
app/repositories/user_repository.py

Purpose: User persistence in Elasticsearch

- UserRepository protocol the service depends on
- Elasticsearch implementation (create / get / search / replace / partial update / delete)
- Maps client errors to NotFound / AlreadyExists / Internal
- Writes wait for refresh so a following read sees them
"""

import time
from typing import List, Optional, Protocol

from elasticsearch import (
    AsyncElasticsearch,
    ApiError,
    ConflictError,
    NotFoundError,
    TransportError,
)

from app.core.config import settings
from app.core.exceptions import (
    AlreadyExistsError,
    InternalError,
    ResourceNotFoundError,
    UserServiceError,
)
from app.core.logging import get_logger
from app.models.user import User, UserFilter
from app.services.query_builder import build_search_query

logger = get_logger(__name__)

REFRESH = "wait_for"


class UserRepository(Protocol):
    """Storage operations the user service relies on."""

    async def create(self, user: User) -> None: ...

    async def get_by_id(self, user_id: str) -> User: ...

    async def search(self, filters: UserFilter) -> List[User]: ...

    async def replace(self, user: User) -> None: ...

    async def update_partial(self, user: User) -> None: ...

    async def delete(self, user_id: str) -> None: ...


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _translate_error(e: Exception, operation: str, user_id: Optional[str] = None) -> UserServiceError:
    """
    Converts a client exception into the service taxonomy.
    """
    if isinstance(e, NotFoundError):
        return ResourceNotFoundError("User not found")
    if isinstance(e, ConflictError):
        return AlreadyExistsError("User already exists")

    logger.error(f"{operation} failed for user {user_id}: {e}")
    return InternalError("Database error occurred")


class ElasticsearchUserRepository:
    """
    UserRepository backed by one Elasticsearch index.
    The client is owned by app.db.elasticsearch; this class never closes it.
    """

    def __init__(self, client: AsyncElasticsearch, index: Optional[str] = None):
        self.client = client
        self.index = index or settings.ELASTICSEARCH_INDEX

    async def create(self, user: User) -> None:
        """
        Indexes a new document under user.id.

        Raises:
            AlreadyExistsError: If a document with this id exists
            InternalError: On any other store failure
        """
        operation = "repository.create"
        start = time.monotonic()

        try:
            await self.client.create(
                index=self.index,
                id=user.id,
                document=user.to_document(),
                refresh=REFRESH,
            )
        except (ApiError, TransportError) as e:
            raise _translate_error(e, operation, user.id) from e

        logger.info(
            f"{operation}: user {user.id} created",
            extra={"index": self.index, "duration_ms": _elapsed_ms(start)}
        )

    async def get_by_id(self, user_id: str) -> User:
        """
        Raises:
            ResourceNotFoundError: If no document has this id
            InternalError: On any other store failure
        """
        operation = "repository.get_by_id"
        start = time.monotonic()

        try:
            response = await self.client.get(index=self.index, id=user_id)
        except (ApiError, TransportError) as e:
            raise _translate_error(e, operation, user_id) from e

        logger.debug(
            f"{operation}: user {user_id} fetched",
            extra={"duration_ms": _elapsed_ms(start)}
        )
        return User.from_document(response["_id"], response["_source"])

    async def search(self, filters: UserFilter) -> List[User]:
        """
        Runs the compiled filter and returns the hits of the requested page.
        """
        operation = "repository.search"
        start = time.monotonic()

        search_query = build_search_query(filters, self.index)
        logger.debug(
            f"{operation}: {search_query.to_json()}",
            extra={"index": self.index}
        )

        try:
            response = await self.client.search(
                index=search_query.index,
                query=search_query.query,
                sort=search_query.sort,
                from_=search_query.from_,
                size=search_query.size,
            )
        except (ApiError, TransportError) as e:
            raise _translate_error(e, operation) from e

        try:
            users = [
                User.from_document(hit["_id"], hit["_source"])
                for hit in response["hits"]["hits"]
            ]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"{operation}: response decoding failed: {e}")
            raise InternalError("Database error occurred") from e

        logger.info(
            f"{operation}: search completed",
            extra={"result_count": len(users), "duration_ms": _elapsed_ms(start)}
        )
        return users

    async def replace(self, user: User) -> None:
        """
        Overwrites the whole document stored under user.id.
        """
        operation = "repository.replace"
        start = time.monotonic()

        try:
            await self.client.index(
                index=self.index,
                id=user.id,
                document=user.to_document(),
                refresh=REFRESH,
            )
        except (ApiError, TransportError) as e:
            raise _translate_error(e, operation, user.id) from e

        logger.info(
            f"{operation}: user {user.id} replaced",
            extra={"duration_ms": _elapsed_ms(start)}
        )

    async def update_partial(self, user: User) -> None:
        """
        Merges the present fields of user into the stored document.

        Raises:
            ResourceNotFoundError: If no document has this id
        """
        operation = "repository.update_partial"
        start = time.monotonic()

        try:
            await self.client.update(
                index=self.index,
                id=user.id,
                doc=user.to_document(),
                refresh=REFRESH,
            )
        except (ApiError, TransportError) as e:
            raise _translate_error(e, operation, user.id) from e

        logger.info(
            f"{operation}: user {user.id} updated",
            extra={"duration_ms": _elapsed_ms(start)}
        )

    async def delete(self, user_id: str) -> None:
        """
        Raises:
            ResourceNotFoundError: If no document has this id
        """
        operation = "repository.delete"
        start = time.monotonic()

        try:
            await self.client.delete(index=self.index, id=user_id, refresh=REFRESH)
        except (ApiError, TransportError) as e:
            raise _translate_error(e, operation, user_id) from e

        logger.info(
            f"{operation}: user {user_id} deleted",
            extra={"duration_ms": _elapsed_ms(start)}
        )
