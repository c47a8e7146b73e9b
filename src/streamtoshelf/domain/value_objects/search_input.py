"""Sanitization and validation of user supplied search input."""

from urllib.parse import urlsplit

from streamtoshelf.domain.exceptions import ValidationError

MAX_QUERY_LENGTH = 100


def sanitize_text(value: str | None, max_length: int = MAX_QUERY_LENGTH) -> str | None:
    """Trim and truncate free text. Returns None when nothing is left."""
    if value is None:
        return None
    cleaned = value.strip()[:max_length].strip()
    return cleaned or None


def require_text(value: str | None, name: str) -> str:
    """Sanitize a required text parameter.

    Args:
        value: Raw query parameter value
        name: Human readable parameter name used in error messages ("Artist")

    Raises:
        ValidationError: "<Name> parameter is required" when missing,
            "<Name> parameter cannot be empty" when only whitespace
    """
    if value is None or value == "":
        raise ValidationError(f"{name} parameter is required")
    cleaned = sanitize_text(value)
    if cleaned is None:
        raise ValidationError(f"{name} parameter cannot be empty")
    return cleaned


def is_absolute_url(value: str | None, schemes: tuple[str, ...] = ("http", "https")) -> bool:
    """Check that a string is an absolute URL with one of the given schemes."""
    if not value:
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme.lower() in schemes and bool(parts.netloc)


def validate_release_url(value: str | None) -> str:
    """Validate the release URL handed to the link resolver.

    Any absolute URL is accepted, song.link also understands URIs such as
    "spotify:album:<id>". Relative references and bare words are rejected.

    Raises:
        ValidationError: If the URL is missing or not absolute
    """
    if value is None or not value.strip():
        raise ValidationError("URL parameter is required")
    url = value.strip()
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise ValidationError("Invalid URL format") from e
    if not parts.scheme or not (parts.netloc or parts.path):
        raise ValidationError("Invalid URL format")
    return url
