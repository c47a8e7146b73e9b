"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from streamtoshelf.domain.entities import ArtistSuggestion, ReleaseCandidate, ResolvedLinks
from streamtoshelf.domain.value_objects.region import Region

if TYPE_CHECKING:
    from streamtoshelf.infrastructure.integrations.cancellation import CancellationToken


# Hey future me, ILinkResolver is a PORT! The song.link client implements it, services and the
# aggregator depend on this ABC so tests can hand in a fake without pytest-httpx. Returning None
# means "resolution failed but it's not worth failing the request", typed errors (timeout,
# cancellation) still propagate.
class ILinkResolver(ABC):
    """Cross-platform link resolution."""

    @abstractmethod
    async def resolve(
        self,
        url: str,
        region: Region,
        cancel_token: "CancellationToken | None" = None,
    ) -> ResolvedLinks | None:
        """Resolve a release URL into equivalent links on other platforms."""
        pass


class ICatalogSearch(ABC):
    """Marketplace catalog lookup (physical releases)."""

    @abstractmethod
    async def find_release_url(
        self,
        artist: str,
        album: str,
        cancel_token: "CancellationToken | None" = None,
    ) -> str | None:
        """Return the URL of the best matching release page, or None."""
        pass


class IMetadataProvider(ABC):
    """Release and artist metadata search."""

    @abstractmethod
    async def search_albums(
        self,
        artist: str,
        album: str | None = None,
        cancel_token: "CancellationToken | None" = None,
    ) -> list[ReleaseCandidate]:
        """Search albums, filtered to plausible artist matches."""
        pass

    @abstractmethod
    async def search_artists(
        self,
        query: str,
        limit: int | None = None,
        cancel_token: "CancellationToken | None" = None,
    ) -> list[ArtistSuggestion]:
        """Search artists for autocomplete."""
        pass


__all__ = ["ICatalogSearch", "ILinkResolver", "IMetadataProvider"]
