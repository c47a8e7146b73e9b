"""Domain exceptions.

Hey future me - every failure the provider layer can surface ends up as one of these.
The API layer (api/exception_handlers.py) is the ONLY place that turns them into HTTP
status codes. Provider clients raise, services decide what to absorb, routers never
catch them by hand.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # message is stored as an attribute so handlers can read it without parsing str(exc).
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    Raised at the request boundary for a bad region, a missing or empty required
    text parameter, or a release URL that does not parse as an absolute URL.

    HTTP Status: 400

    Example:
        raise ValidationError("Invalid region parameter")
        raise ValidationError("URL parameter is required")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    HTTP Status: 503 (Service Unavailable)

    Example:
        raise ConfigurationError("Spotify client is not initialized")
    """

    pass


class AuthenticationError(DomainException):
    """Credential exchange with the metadata provider failed.

    This is the service's own client-credentials token, not an end user login.
    The message is fixed on purpose, callers only need to know it happened.

    HTTP Status: 500
    """

    def __init__(
        self,
        message: str = "Failed to authenticate with Spotify",
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.http_status = http_status  # status of the token endpoint, None for transport errors


class ExternalServiceError(DomainException):
    """External content API returned a non-success status.

    HTTP Status: 429 when the upstream said 429, otherwise 500

    Example:
        raise ExternalServiceError("Spotify search failed", status_code=503)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        service: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.service = service

    @property
    def is_rate_limited(self) -> bool:
        """Check if the upstream rejected us with 429."""
        return self.status_code == 429


class UpstreamTimeoutError(DomainException):
    """An outbound call ran out of its time budget.

    HTTP Status: 504
    """

    def __init__(self, service: str, timeout: float) -> None:
        super().__init__(f"{service} request timed out after {timeout:.1f}s")
        self.service = service
        self.timeout = timeout


class RequestCancelledError(DomainException):
    """The caller went away and the request was cancelled cooperatively.

    Hey future me - this is NOT an error for the user! The client navigated away or
    changed the query. Handlers log it at debug level and return an empty 499.
    Never return partial results after catching this.
    """

    def __init__(self, service: str | None = None) -> None:
        super().__init__(
            f"{service} request cancelled" if service else "Request cancelled"
        )
        self.service = service


class ImageProxyError(DomainException):
    """Proxied image could not be served.

    Carries its own status because the image proxy mirrors several upstream
    conditions (unreachable 503, non-image 400, too large 413, upstream status).
    """

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "DomainException",
    "ExternalServiceError",
    "ImageProxyError",
    "RequestCancelledError",
    "UpstreamTimeoutError",
    "ValidationError",
]
