"""Buy-links orchestration: provider calls + aggregation + metadata merge."""

import logging

from streamtoshelf.application.services.link_aggregator import LinkAggregator
from streamtoshelf.domain.entities import (
    UNKNOWN,
    AggregationResult,
    ReleaseCandidate,
    ResolvedEntity,
    ResolvedLinks,
)
from streamtoshelf.domain.exceptions import DomainException, RequestCancelledError
from streamtoshelf.domain.ports import ILinkResolver, IMetadataProvider
from streamtoshelf.domain.value_objects.region import Region
from streamtoshelf.infrastructure.integrations.cancellation import CancellationToken

logger = logging.getLogger(__name__)


def metadata_from_resolution(
    resolved: ResolvedLinks | None, artist: str | None = None
) -> ResolvedEntity | None:
    """Display metadata from the resolver's first entity.

    Missing title becomes "Unknown", a missing artist falls back to the query
    artist and then "Unknown".
    """
    if resolved is None:
        return None
    entity = resolved.first_entity()
    if entity is None:
        return None
    return ResolvedEntity(
        title=entity.title or UNKNOWN,
        artist_name=entity.artist_name or artist or UNKNOWN,
        artwork_url=entity.thumbnail_url,
    )


# Hey future me, this service is what the routers call. Two entry points:
# - resolve_by_url: user pasted a streaming link -> song.link -> aggregate
# - resolve_by_search: user typed artist + album -> Spotify search -> first plausible album's
#   Spotify URL -> resolve_by_url
# Metadata is assembled field by field: song.link's entity first, Spotify only fills the
# artwork gap (or the whole record when song.link gave us nothing). That enrichment is best
# effort and NEVER fails the request, except for cancellation which always propagates.
class BuyLinksService:
    """Resolve a release into purchase links plus display metadata."""

    def __init__(
        self,
        resolver: ILinkResolver,
        aggregator: LinkAggregator,
        metadata_provider: IMetadataProvider | None = None,
    ) -> None:
        self.resolver = resolver
        self.aggregator = aggregator
        self.metadata_provider = metadata_provider

    async def _fallback_candidate(
        self,
        artist: str,
        album: str,
        cancel_token: CancellationToken | None,
    ) -> ReleaseCandidate | None:
        if self.metadata_provider is None:
            return None
        try:
            candidates = await self.metadata_provider.search_albums(
                artist, album, cancel_token=cancel_token
            )
        except RequestCancelledError:
            raise
        except DomainException as e:
            logger.warning("Artwork fallback search failed: %s", e.message)
            return None
        return candidates[0] if candidates else None

    async def _enrich_metadata(
        self,
        metadata: ResolvedEntity | None,
        artist: str | None,
        album: str | None,
        cancel_token: CancellationToken | None,
        candidate: ReleaseCandidate | None = None,
    ) -> ResolvedEntity | None:
        if metadata is not None and metadata.artwork_url:
            return metadata
        if candidate is None:
            if not (artist and album):
                return metadata
            candidate = await self._fallback_candidate(artist, album, cancel_token)
        if candidate is None:
            return metadata
        if metadata is None:
            return candidate.to_entity()
        return metadata.with_fallback_artwork(candidate.image_url)

    async def resolve_by_url(
        self,
        url: str,
        region: Region,
        artist: str | None = None,
        album: str | None = None,
        cancel_token: CancellationToken | None = None,
        candidate: ReleaseCandidate | None = None,
    ) -> AggregationResult:
        """Resolve a release URL into purchase links.

        Args:
            url: Validated release URL
            region: Validated region
            artist: Sanitized artist text (enables synthesized links)
            album: Sanitized album text (enables synthesized links)
            cancel_token: Request-scoped cancel signal
            candidate: Metadata search hit the URL came from, reused for artwork

        Raises:
            UpstreamTimeoutError: Resolution exceeded its budget
            RequestCancelledError: Caller went away
        """
        resolved = await self.resolver.resolve(url, region, cancel_token)
        if resolved is None:
            logger.info("Resolution failed for %s, using synthesized links only", url)

        links = await self.aggregator.aggregate(
            resolved, region, artist=artist, album=album, cancel_token=cancel_token
        )
        metadata = await self._enrich_metadata(
            metadata_from_resolution(resolved, artist),
            artist,
            album,
            cancel_token,
            candidate=candidate,
        )

        return AggregationResult(artist=artist, album=album, links=links, metadata=metadata)

    async def resolve_by_search(
        self,
        artist: str,
        album: str,
        region: Region,
        cancel_token: CancellationToken | None = None,
    ) -> AggregationResult:
        """Find a release by artist + album text and resolve its purchase links.

        Raises:
            AuthenticationError: Metadata token exchange failed (nothing is aggregated)
            ExternalServiceError: Metadata search failed
            UpstreamTimeoutError: A provider call exceeded its budget
            RequestCancelledError: Caller went away
        """
        candidates: list[ReleaseCandidate] = []
        if self.metadata_provider is not None:
            candidates = await self.metadata_provider.search_albums(
                artist, album, cancel_token=cancel_token
            )

        candidate = next((c for c in candidates if c.spotify_url), None)
        if candidate is None or candidate.spotify_url is None:
            logger.info("No release found for '%s - %s', synthesized links only", artist, album)
            links = await self.aggregator.aggregate(
                None, region, artist=artist, album=album, cancel_token=cancel_token
            )
            return AggregationResult(artist=artist, album=album, links=links, metadata=None)

        return await self.resolve_by_url(
            candidate.spotify_url,
            region,
            artist=artist,
            album=album,
            cancel_token=cancel_token,
            candidate=candidate,
        )
