"""Tests for the song.link resolver client."""

import re
from collections.abc import AsyncIterator

import httpx
import pytest
from pytest_httpx import HTTPXMock

from streamtoshelf.config.settings import SonglinkSettings
from streamtoshelf.domain.exceptions import UpstreamTimeoutError
from streamtoshelf.domain.value_objects.region import Region
from streamtoshelf.infrastructure.integrations.songlink_client import SonglinkClient

SONGLINK_URL = re.compile(r"https://api\.song\.link/v1-alpha\.1/links\?.*")
RELEASE_URL = "https://open.spotify.com/album/6dVIqQ8qmQ5GBnJ9shOYGE"


@pytest.fixture
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def songlink_client(http_client: httpx.AsyncClient) -> SonglinkClient:
    return SonglinkClient(SonglinkSettings(), client=http_client)


class TestSonglinkClient:
    @pytest.mark.asyncio
    async def test_resolves_links(
        self, songlink_client: SonglinkClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            url=SONGLINK_URL,
            json={
                "entityUniqueId": "SPOTIFY_ALBUM::6dVIqQ8qmQ5GBnJ9shOYGE",
                "pageUrl": "https://album.link/s/6dVIqQ8qmQ5GBnJ9shOYGE",
                "linksByPlatform": {
                    "itunes": {"url": "https://geo.music.apple.com/album/1097861387"},
                    "bandcamp": {"url": "https://radiohead.bandcamp.com/album/ok-computer"},
                },
                "entitiesByUniqueId": {
                    "ITUNES_ALBUM::1097861387": {
                        "title": "OK Computer",
                        "artistName": "Radiohead",
                    }
                },
            },
        )

        resolved = await songlink_client.resolve(RELEASE_URL, Region.GB)

        assert resolved is not None
        assert set(resolved.links_by_platform) == {"itunes", "bandcamp"}
        assert resolved.first_entity().title == "OK Computer"

        request = httpx_mock.get_requests()[0]
        assert request.url.params["url"] == RELEASE_URL
        assert request.url.params["userCountry"] == "GB"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 404, 429, 500])
    async def test_error_status_returns_none(
        self, songlink_client: SonglinkClient, httpx_mock: HTTPXMock, status_code: int
    ) -> None:
        httpx_mock.add_response(url=SONGLINK_URL, status_code=status_code)

        assert await songlink_client.resolve(RELEASE_URL, Region.US) is None

    @pytest.mark.asyncio
    async def test_invalid_json_returns_none(
        self, songlink_client: SonglinkClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(url=SONGLINK_URL, text="<html>oops</html>")

        assert await songlink_client.resolve(RELEASE_URL, Region.US) is None

    @pytest.mark.asyncio
    async def test_non_object_payload_returns_none(
        self, songlink_client: SonglinkClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(url=SONGLINK_URL, json=["not", "an", "object"])

        assert await songlink_client.resolve(RELEASE_URL, Region.US) is None

    @pytest.mark.asyncio
    async def test_connection_error_returns_none(
        self, songlink_client: SonglinkClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        assert await songlink_client.resolve(RELEASE_URL, Region.US) is None

    @pytest.mark.asyncio
    async def test_timeout_propagates(
        self, songlink_client: SonglinkClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("read timed out"))

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await songlink_client.resolve(RELEASE_URL, Region.US)
        assert exc_info.value.service == "songlink"
