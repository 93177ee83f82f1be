from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from elasticsearch import ApiError, ConflictError, ConnectionError as ESConnectionError, NotFoundError

from app.core.exceptions import AlreadyExistsError, InternalError, ResourceNotFoundError
from app.models.user import Location, User, UserFilter
from app.repositories.user_repository import ElasticsearchUserRepository

INDEX = "users-test"


def api_error(cls, status: int):
    return cls(message="error", meta=Mock(status=status), body={})


def make_repository():
    client = AsyncMock()
    return ElasticsearchUserRepository(client, index=INDEX), client


def sample_user() -> User:
    return User(
        id="user-1",
        login="john_doe",
        password="hashed",
        reg_date=datetime(2023, 1, 15, 12, 34, 56, tzinfo=timezone.utc),
        location=Location(lat=59.93428, lon=30.335098),
        social_net="telegram",
    )


@pytest.mark.asyncio
async def test_create_indexes_document_without_id():
    repository, client = make_repository()

    await repository.create(sample_user())

    client.create.assert_awaited_once()
    kwargs = client.create.await_args.kwargs
    assert kwargs["index"] == INDEX
    assert kwargs["id"] == "user-1"
    assert kwargs["refresh"] == "wait_for"
    assert "id" not in kwargs["document"]
    assert kwargs["document"]["location"] == {"lat": 59.93428, "lon": 30.335098}
    assert kwargs["document"]["reg_date"].startswith("2023-01-15T12:34:56")


@pytest.mark.asyncio
async def test_create_conflict():
    repository, client = make_repository()
    client.create.side_effect = api_error(ConflictError, 409)

    with pytest.raises(AlreadyExistsError):
        await repository.create(sample_user())


@pytest.mark.asyncio
async def test_get_by_id():
    repository, client = make_repository()
    client.get.return_value = {"_id": "user-1", "_source": {"login": "john_doe", "social_net": "vk"}}

    user = await repository.get_by_id("user-1")

    assert user.id == "user-1"
    assert user.login == "john_doe"
    assert user.social_net == "vk"


@pytest.mark.asyncio
async def test_get_missing():
    repository, client = make_repository()
    client.get.side_effect = api_error(NotFoundError, 404)

    with pytest.raises(ResourceNotFoundError) as exc_info:
        await repository.get_by_id("missing")
    assert exc_info.value.message == "User not found"


@pytest.mark.asyncio
async def test_search_passes_compiled_query():
    repository, client = make_repository()
    client.search.return_value = {
        "hits": {"hits": [
            {"_id": "a", "_source": {"login": "alice_1"}},
            {"_id": "b", "_source": {"login": "bob_22"}},
        ]}
    }

    users = await repository.search(UserFilter(social_net="vk", sort_by="login", page=2, size=5))

    assert [u.id for u in users] == ["a", "b"]
    kwargs = client.search.await_args.kwargs
    assert kwargs["index"] == INDEX
    assert kwargs["query"] == {"bool": {"must": [{"term": {"social_net": "vk"}}]}}
    assert kwargs["sort"] == [{"login.keyword": {"order": "asc"}}]
    assert kwargs["from_"] == 5
    assert kwargs["size"] == 5


@pytest.mark.asyncio
async def test_search_transport_failure():
    repository, client = make_repository()
    client.search.side_effect = ESConnectionError("connection refused")

    with pytest.raises(InternalError) as exc_info:
        await repository.search(UserFilter())
    assert exc_info.value.message == "Database error occurred"


@pytest.mark.asyncio
async def test_search_malformed_response():
    repository, client = make_repository()
    client.search.return_value = {"unexpected": True}

    with pytest.raises(InternalError):
        await repository.search(UserFilter())


@pytest.mark.asyncio
async def test_replace_uses_index():
    repository, client = make_repository()

    await repository.replace(sample_user())

    kwargs = client.index.await_args.kwargs
    assert kwargs["id"] == "user-1"
    assert kwargs["document"]["login"] == "john_doe"


@pytest.mark.asyncio
async def test_update_partial_sends_present_fields_only():
    repository, client = make_repository()

    await repository.update_partial(User(id="user-1", comment="VIP"))

    kwargs = client.update.await_args.kwargs
    assert kwargs["doc"] == {"comment": "VIP"}


@pytest.mark.asyncio
async def test_update_missing():
    repository, client = make_repository()
    client.update.side_effect = api_error(NotFoundError, 404)

    with pytest.raises(ResourceNotFoundError):
        await repository.update_partial(User(id="missing", comment="VIP"))


@pytest.mark.asyncio
async def test_delete_server_error():
    repository, client = make_repository()
    client.delete.side_effect = api_error(ApiError, 500)

    with pytest.raises(InternalError):
        await repository.delete("user-1")
