import httpx
import pytest

from app.core.exceptions import InvalidInputError, TileProviderError
from app.services.map_tile_service import OpenStreetMapTileService

BASE_URL = "https://tiles.example.org"
USER_AGENT = "UserServiceTests/1.0"


def make_service(handler) -> OpenStreetMapTileService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenStreetMapTileService(
        base_url=BASE_URL + "/",
        user_agent=USER_AGENT,
        timeout=5,
        client=client,
    )


def test_build_url():
    service = make_service(lambda request: httpx.Response(200))
    assert service.build_url(0.0, 0.0, 1) == f"{BASE_URL}/1/1/1.png"


@pytest.mark.asyncio
async def test_fetch_tile_sends_user_agent():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["user_agent"] = request.headers.get("User-Agent")
        return httpx.Response(200, content=b"png-bytes")

    service = make_service(handler)
    tile = await service.fetch_tile(59.934280, 30.335098, 15)
    await service.close()

    assert tile == b"png-bytes"
    assert seen["url"] == f"{BASE_URL}/15/19145/9527.png"
    assert seen["user_agent"] == USER_AGENT


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [403, 404, 500, 503])
async def test_non_200_is_error(status_code):
    service = make_service(lambda request: httpx.Response(status_code))

    with pytest.raises(TileProviderError) as exc_info:
        await service.fetch_tile(0.0, 0.0, 1)
    assert str(status_code) in exc_info.value.message


@pytest.mark.asyncio
async def test_network_error_is_provider_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    service = make_service(handler)
    with pytest.raises(TileProviderError):
        await service.fetch_tile(0.0, 0.0, 1)


@pytest.mark.asyncio
async def test_timeout_is_provider_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    service = make_service(handler)
    with pytest.raises(TileProviderError):
        await service.fetch_tile(0.0, 0.0, 1)


@pytest.mark.asyncio
async def test_invalid_coordinates_not_requested():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, content=b"png")

    service = make_service(handler)
    with pytest.raises(InvalidInputError):
        await service.fetch_tile(91.0, 0.0, 1)
    assert calls == []
