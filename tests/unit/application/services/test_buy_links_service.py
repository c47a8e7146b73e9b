"""Tests for buy-links orchestration."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_mock import MockerFixture

from streamtoshelf.application.services.buy_links_service import (
    BuyLinksService,
    metadata_from_resolution,
)
from streamtoshelf.application.services.link_aggregator import LinkAggregator
from streamtoshelf.domain.entities import (
    ReleaseCandidate,
    ResolvedLinks,
    ResolverEntity,
    ResolverLink,
)
from streamtoshelf.domain.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    RequestCancelledError,
    UpstreamTimeoutError,
)
from streamtoshelf.domain.ports import ILinkResolver, IMetadataProvider
from streamtoshelf.domain.value_objects.platforms import Platform
from streamtoshelf.domain.value_objects.region import Region

SPOTIFY_URL = "https://open.spotify.com/album/6dVIqQ8qmQ5GBnJ9shOYGE"


def make_candidate(**overrides) -> ReleaseCandidate:
    values = {
        "id": "6dVIqQ8qmQ5GBnJ9shOYGE",
        "name": "OK Computer",
        "artist_names": ("Radiohead",),
        "image_url": "https://i.scdn.co/image/okc",
        "spotify_url": SPOTIFY_URL,
    }
    values.update(overrides)
    return ReleaseCandidate(**values)


def make_resolved(thumbnail: str | None = None) -> ResolvedLinks:
    return ResolvedLinks(
        links_by_platform={
            "spotify": ResolverLink(url=SPOTIFY_URL),
            "itunes": ResolverLink(url="https://geo.music.apple.com/album/1097861387"),
        },
        entities_by_unique_id={
            "ITUNES_ALBUM::1097861387": ResolverEntity(
                unique_id="ITUNES_ALBUM::1097861387",
                title="OK Computer",
                artist_name="Radiohead",
                thumbnail_url=thumbnail,
            )
        },
    )


@pytest.fixture
def resolver() -> MagicMock:
    mock = MagicMock(spec=ILinkResolver)
    mock.resolve = AsyncMock(return_value=make_resolved("https://is1-ssl.mzstatic.com/okc.jpg"))
    return mock


@pytest.fixture
def provider() -> MagicMock:
    mock = MagicMock(spec=IMetadataProvider)
    mock.search_albums = AsyncMock(return_value=[make_candidate()])
    return mock


@pytest.fixture
def service(resolver: MagicMock, provider: MagicMock) -> BuyLinksService:
    return BuyLinksService(resolver=resolver, aggregator=LinkAggregator(), metadata_provider=provider)


class TestMetadataFromResolution:
    def test_none_when_resolution_failed(self) -> None:
        assert metadata_from_resolution(None) is None

    def test_none_without_entities(self) -> None:
        assert metadata_from_resolution(ResolvedLinks()) is None

    def test_missing_fields_become_unknown(self) -> None:
        resolved = ResolvedLinks(
            entities_by_unique_id={"X": ResolverEntity(unique_id="X")}
        )
        metadata = metadata_from_resolution(resolved)

        assert metadata is not None
        assert metadata.title == "Unknown"
        assert metadata.artist_name == "Unknown"

    def test_missing_artist_falls_back_to_query(self) -> None:
        resolved = ResolvedLinks(
            entities_by_unique_id={"X": ResolverEntity(unique_id="X", title="Kid A")}
        )
        metadata = metadata_from_resolution(resolved, artist="Radiohead")

        assert metadata is not None
        assert metadata.artist_name == "Radiohead"


class TestResolveByUrl:
    @pytest.mark.asyncio
    async def test_resolver_artwork_is_kept(
        self, service: BuyLinksService, provider: MagicMock
    ) -> None:
        result = await service.resolve_by_url(SPOTIFY_URL, Region.US, "Radiohead", "OK Computer")

        assert result.metadata is not None
        assert result.metadata.artwork_url == "https://is1-ssl.mzstatic.com/okc.jpg"
        provider.search_albums.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_artwork_is_filled_from_search(
        self, service: BuyLinksService, resolver: MagicMock
    ) -> None:
        resolver.resolve.return_value = make_resolved(thumbnail=None)

        result = await service.resolve_by_url(SPOTIFY_URL, Region.US, "Radiohead", "OK Computer")

        assert result.metadata is not None
        assert result.metadata.title == "OK Computer"
        assert result.metadata.artwork_url == "https://i.scdn.co/image/okc"

    @pytest.mark.asyncio
    async def test_artwork_search_failure_is_absorbed(
        self,
        service: BuyLinksService,
        resolver: MagicMock,
        provider: MagicMock,
        mocker: MockerFixture,
    ) -> None:
        resolver.resolve.return_value = make_resolved(thumbnail=None)
        provider.search_albums.side_effect = ExternalServiceError("Spotify search failed", 503)
        mock_logger = mocker.patch("streamtoshelf.application.services.buy_links_service.logger")

        result = await service.resolve_by_url(SPOTIFY_URL, Region.US, "Radiohead", "OK Computer")

        assert result.metadata is not None
        assert result.metadata.artwork_url is None
        assert result.links
        mock_logger.warning.assert_called_once_with(
            "Artwork fallback search failed: %s", "Spotify search failed"
        )

    @pytest.mark.asyncio
    async def test_no_artwork_lookup_without_album(
        self, service: BuyLinksService, resolver: MagicMock, provider: MagicMock
    ) -> None:
        resolver.resolve.return_value = make_resolved(thumbnail=None)

        result = await service.resolve_by_url(SPOTIFY_URL, Region.US)

        provider.search_albums.assert_not_called()
        assert [link.platform for link in result.links] == [Platform.ITUNES]

    @pytest.mark.asyncio
    async def test_failed_resolution_uses_search_metadata(
        self, service: BuyLinksService, resolver: MagicMock
    ) -> None:
        resolver.resolve.return_value = None

        result = await service.resolve_by_url(SPOTIFY_URL, Region.FR, "Radiohead", "OK Computer")

        assert result.metadata is not None
        assert result.metadata.artist_name == "Radiohead"
        assert {link.platform for link in result.links} == {
            Platform.AMAZON_DIGITAL,
            Platform.AMAZON_PHYSICAL,
            Platform.HDTRACKS,
        }

    @pytest.mark.asyncio
    async def test_resolver_timeout_propagates(
        self, service: BuyLinksService, resolver: MagicMock
    ) -> None:
        resolver.resolve.side_effect = UpstreamTimeoutError("songlink", 10.0)

        with pytest.raises(UpstreamTimeoutError):
            await service.resolve_by_url(SPOTIFY_URL, Region.US)

    @pytest.mark.asyncio
    async def test_cancellation_during_artwork_lookup_propagates(
        self, service: BuyLinksService, resolver: MagicMock, provider: MagicMock
    ) -> None:
        resolver.resolve.return_value = make_resolved(thumbnail=None)
        provider.search_albums.side_effect = RequestCancelledError("spotify")

        with pytest.raises(RequestCancelledError):
            await service.resolve_by_url(SPOTIFY_URL, Region.US, "Radiohead", "OK Computer")


class TestResolveBySearch:
    @pytest.mark.asyncio
    async def test_first_candidate_url_is_resolved(
        self, service: BuyLinksService, resolver: MagicMock, provider: MagicMock
    ) -> None:
        result = await service.resolve_by_search("Radiohead", "OK Computer", Region.GB)

        provider.search_albums.assert_awaited_once()
        resolver.resolve.assert_awaited_once()
        assert resolver.resolve.await_args.args[:2] == (SPOTIFY_URL, Region.GB)
        assert result.artist == "Radiohead"
        assert result.album == "OK Computer"
        assert Platform.ITUNES in {link.platform for link in result.links}

    @pytest.mark.asyncio
    async def test_candidate_artwork_reused_without_second_search(
        self, service: BuyLinksService, resolver: MagicMock, provider: MagicMock
    ) -> None:
        resolver.resolve.return_value = make_resolved(thumbnail=None)

        result = await service.resolve_by_search("Radiohead", "OK Computer", Region.US)

        assert provider.search_albums.await_count == 1
        assert result.metadata is not None
        assert result.metadata.artwork_url == "https://i.scdn.co/image/okc"

    @pytest.mark.asyncio
    async def test_no_match_returns_synthesized_links_only(
        self, service: BuyLinksService, resolver: MagicMock, provider: MagicMock
    ) -> None:
        provider.search_albums.return_value = []

        result = await service.resolve_by_search("Nobody", "Nothing", Region.US)

        resolver.resolve.assert_not_called()
        assert result.metadata is None
        assert len(result.links) == 3

    @pytest.mark.asyncio
    async def test_candidates_without_url_are_skipped(
        self, service: BuyLinksService, resolver: MagicMock, provider: MagicMock
    ) -> None:
        provider.search_albums.return_value = [
            make_candidate(spotify_url=None),
            make_candidate(id="2", spotify_url="https://open.spotify.com/album/2"),
        ]

        await service.resolve_by_search("Radiohead", "OK Computer", Region.US)

        assert resolver.resolve.await_args.args[0] == "https://open.spotify.com/album/2"

    @pytest.mark.asyncio
    async def test_authentication_failure_aborts_before_aggregation(
        self, resolver: MagicMock, provider: MagicMock
    ) -> None:
        aggregator = MagicMock(spec=LinkAggregator)
        aggregator.aggregate = AsyncMock()
        provider.search_albums.side_effect = AuthenticationError()
        service = BuyLinksService(resolver, aggregator, metadata_provider=provider)

        with pytest.raises(AuthenticationError):
            await service.resolve_by_search("Radiohead", "OK Computer", Region.US)

        aggregator.aggregate.assert_not_called()
        resolver.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_error_propagates(
        self, service: BuyLinksService, provider: MagicMock
    ) -> None:
        provider.search_albums.side_effect = ExternalServiceError(
            "Spotify search failed", status_code=429, service="spotify"
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.resolve_by_search("Radiohead", "OK Computer", Region.US)
        assert exc_info.value.is_rate_limited
