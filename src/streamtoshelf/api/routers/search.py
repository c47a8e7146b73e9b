"""Metadata search endpoints (Spotify): album search and artist autocomplete."""

import logging

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from streamtoshelf.api.dependencies import get_cancellation_token, get_spotify_client
from streamtoshelf.api.headers import NO_STORE_HEADERS
from streamtoshelf.domain.entities import ArtistSuggestion, ReleaseCandidate
from streamtoshelf.domain.exceptions import UpstreamTimeoutError
from streamtoshelf.domain.value_objects.search_input import require_text, sanitize_text
from streamtoshelf.infrastructure.integrations.cancellation import CancellationToken
from streamtoshelf.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Search"])

MIN_AUTOCOMPLETE_LENGTH = 2


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class AlbumResult(BaseModel):
    """Album search hit."""

    id: str = Field(..., description="Spotify album ID")
    name: str = Field(..., description="Album title")
    artist_names: list[str] = Field(default_factory=list, description="Credited artists")
    release_date: str | None = Field(None, description="Release date")
    album_type: str | None = Field(None, description="album, single, compilation")
    total_tracks: int | None = Field(None, description="Number of tracks")
    image_url: str | None = Field(None, description="Largest artwork URL")
    spotify_url: str | None = Field(None, description="Spotify album URL")

    @classmethod
    def from_entity(cls, candidate: ReleaseCandidate) -> "AlbumResult":
        return cls(
            id=candidate.id,
            name=candidate.name,
            artist_names=list(candidate.artist_names),
            release_date=candidate.release_date,
            album_type=candidate.album_type,
            total_tracks=candidate.total_tracks,
            image_url=candidate.image_url,
            spotify_url=candidate.spotify_url,
        )


class AlbumSearchResponse(BaseModel):
    """Album search response."""

    artist: str = Field(..., description="Sanitized artist query")
    album: str | None = Field(None, description="Sanitized album query")
    results: list[AlbumResult] = Field(default_factory=list)


class ArtistResult(BaseModel):
    """Autocomplete suggestion."""

    id: str
    name: str
    image_url: str | None = Field(None, description="Smallest artist image")

    @classmethod
    def from_entity(cls, suggestion: ArtistSuggestion) -> "ArtistResult":
        return cls(id=suggestion.id, name=suggestion.name, image_url=suggestion.image_url)


class AutocompleteResponse(BaseModel):
    """Autocomplete response."""

    artists: list[ArtistResult] = Field(default_factory=list)


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.get("/spotify-search", response_model=AlbumSearchResponse)
async def search_albums(
    response: Response,
    artist: str | None = Query(None, description="Artist name (required)"),
    album: str | None = Query(None, description="Album title"),
    spotify: SpotifyClient = Depends(get_spotify_client),
    cancel_token: CancellationToken = Depends(get_cancellation_token),
) -> AlbumSearchResponse:
    """Search albums and keep only hits from a plausibly matching artist."""
    artist_text = require_text(artist, "Artist")
    album_text = sanitize_text(album)

    candidates = await spotify.search_albums(artist_text, album_text, cancel_token=cancel_token)

    response.headers.update(NO_STORE_HEADERS)
    return AlbumSearchResponse(
        artist=artist_text,
        album=album_text,
        results=[AlbumResult.from_entity(c) for c in candidates],
    )


# Hey future me, autocomplete fires on every keystroke, so it's lenient: short queries and
# timeouts both just mean "no suggestions". Auth and upstream errors still surface, otherwise
# a broken Spotify config would look like "no artists exist".
@router.get("/artist-autocomplete", response_model=AutocompleteResponse)
async def autocomplete_artists(
    response: Response,
    query: str | None = Query(None, description="Partial artist name"),
    spotify: SpotifyClient = Depends(get_spotify_client),
    cancel_token: CancellationToken = Depends(get_cancellation_token),
) -> AutocompleteResponse:
    """Suggest artists for a partial name."""
    text = sanitize_text(query)
    if text is None or len(text) < MIN_AUTOCOMPLETE_LENGTH:
        return AutocompleteResponse()

    try:
        suggestions = await spotify.search_artists(text, cancel_token=cancel_token)
    except UpstreamTimeoutError:
        logger.info("Artist autocomplete timed out for '%s'", text)
        return AutocompleteResponse()

    response.headers.update(NO_STORE_HEADERS)
    return AutocompleteResponse(artists=[ArtistResult.from_entity(s) for s in suggestions])
