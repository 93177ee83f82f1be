from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import AlreadyExistsError, CacheError, ResourceNotFoundError
from app.main import app
from app.models.user import Location, User, UserFilter
from app.services.user_service import UserService, get_user_service


class FakeUserRepository:
    """In-memory UserRepository."""

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.searches: List[UserFilter] = []

    async def create(self, user: User) -> None:
        if user.id in self.users:
            raise AlreadyExistsError("User already exists")
        self.users[user.id] = user

    async def get_by_id(self, user_id: str) -> User:
        if user_id not in self.users:
            raise ResourceNotFoundError("User not found")
        return self.users[user_id]

    async def search(self, filters: UserFilter) -> List[User]:
        self.searches.append(filters)
        users = list(self.users.values())
        if filters.social_net:
            users = [u for u in users if u.social_net == filters.social_net]
        return users

    async def replace(self, user: User) -> None:
        self.users[user.id] = user

    async def update_partial(self, user: User) -> None:
        existing = await self.get_by_id(user.id)
        changes = {
            name: getattr(user, name)
            for name in User.model_fields
            if getattr(user, name) is not None
        }
        self.users[user.id] = existing.model_copy(update=changes)

    async def delete(self, user_id: str) -> None:
        if self.users.pop(user_id, None) is None:
            raise ResourceNotFoundError("User not found")


class FakeCacheStore:
    """Dict-backed CacheStore; `failing` makes every call raise CacheError."""

    def __init__(self, failing: bool = False):
        self.data: Dict[str, bytes] = {}
        self.failing = failing
        self.set_calls = 0

    async def get(self, key: str) -> Optional[bytes]:
        if self.failing:
            raise CacheError("Tile cache read failed")
        return self.data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self.set_calls += 1
        if self.failing:
            raise CacheError("Tile cache write failed")
        self.data[key] = value


class FakeTileProvider:
    """Returns a fixed payload and records each call."""

    def __init__(self, payload: bytes = b"\x89PNG\r\n\x1a\nfake-tile", error: Optional[Exception] = None):
        self.payload = payload
        self.error = error
        self.calls = []

    async def fetch_tile(self, lat: float, lon: float, zoom: int) -> bytes:
        self.calls.append((lat, lon, zoom))
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def repository():
    return FakeUserRepository()


@pytest.fixture
def cache():
    return FakeCacheStore()


@pytest.fixture
def tile_provider():
    return FakeTileProvider()


@pytest.fixture
def service(repository, cache, tile_provider):
    return UserService(
        repository=repository,
        cache=cache,
        tile_provider=tile_provider,
        default_page_size=50,
        max_page_size=100,
        default_zoom=13,
    )


@pytest.fixture
def stored_user(repository):
    """A user already in the store, located in Saint Petersburg."""
    user = User(
        id="user-1",
        login="john_doe",
        username="John Doe",
        password="hashed-secret",
        description="Developer",
        comment="Regular",
        reg_date=datetime(2023, 1, 15, 12, 34, 56, tzinfo=timezone.utc),
        location=Location(lat=59.934280, lon=30.335098),
        social_net="telegram",
    )
    repository.users[user.id] = user
    return user


@pytest.fixture
def client(service):
    """TestClient wired to the fake-backed service; lifespan is not run."""
    app.dependency_overrides[get_user_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
