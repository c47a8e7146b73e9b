"""Artwork URL handling: direct CDN vs proxied, and proxy target safety.

Hey future me - artwork comes from whatever platform song.link picked as its first
entity, so the host can be anything. The big CDNs (Spotify, Apple, Discogs) are served
directly. Everything else goes through /api/image-proxy, which in turn only fetches
targets that pass is_safe_proxy_target().

The private-network check is a plain hostname check on purpose (no DNS resolution).
It blocks the obvious SSRF targets, it does NOT stop a public name that resolves to a
private address.
"""

from urllib.parse import SplitResult, quote, urlsplit

IMAGE_PROXY_PATH = "/api/image-proxy"

DIRECT_IMAGE_HOSTS: frozenset[str] = frozenset(
    {
        # Spotify
        "i.scdn.co",
        "mosaic.scdn.co",
        "image-cdn-ak.spotifycdn.com",
        "image-cdn-fa.spotifycdn.com",
        # Apple Music
        "is1-ssl.mzstatic.com",
        "a1.mzstatic.com",
        "is2-ssl.mzstatic.com",
        "is3-ssl.mzstatic.com",
        "is4-ssl.mzstatic.com",
        "is5-ssl.mzstatic.com",
        # Discogs
        "img.discogs.com",
        "i.discogs.com",
        "a.discogs.com",
        "st.discogs.com",
    }
)

ALLOWED_PROXY_SCHEMES: tuple[str, ...] = ("http", "https")

_BLOCKED_HOSTS: frozenset[str] = frozenset({"localhost", "127.0.0.1", "0.0.0.0"})
_BLOCKED_HOST_PREFIXES: tuple[str, ...] = ("192.168.", "10.", "172.")


def _split(url: str) -> SplitResult | None:
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    return parts


def is_direct_image_host(url: str) -> bool:
    """Check if the URL points at a CDN we link to directly."""
    parts = _split(url)
    return parts is not None and parts.hostname in DIRECT_IMAGE_HOSTS


def optimal_image_url(url: str | None) -> str | None:
    """Return the URL clients should load artwork from.

    Direct CDN hosts are returned unchanged, anything else is rewritten to the
    image proxy endpoint. Invalid URLs yield None.
    """
    if not url:
        return None
    parts = _split(url)
    if parts is None:
        return None
    if parts.hostname in DIRECT_IMAGE_HOSTS:
        return url
    return f"{IMAGE_PROXY_PATH}?url={quote(url, safe='')}"


def is_safe_proxy_target(url: str) -> bool:
    """Check that the image proxy may fetch this URL.

    Only http/https, and no localhost or private-range hostnames.
    """
    parts = _split(url)
    if parts is None:
        return False
    if parts.scheme.lower() not in ALLOWED_PROXY_SCHEMES:
        return False
    hostname = (parts.hostname or "").lower()
    if hostname in _BLOCKED_HOSTS:
        return False
    return not hostname.startswith(_BLOCKED_HOST_PREFIXES)
