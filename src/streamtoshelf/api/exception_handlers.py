"""Global exception handlers: domain exceptions -> HTTP responses.

Hey future me - routers NEVER catch domain exceptions themselves. They bubble up to here and
get mapped to a status code plus {"detail": message}. The status table:

    ValidationError        400
    AuthenticationError    500  fixed message, no details about our credentials
    ExternalServiceError   429 if the upstream said 429, else 500
    UpstreamTimeoutError   504  "Request timeout - please try again"
    RequestCancelledError  499  empty body, debug log only (client is gone)
    ConfigurationError     503
    ImageProxyError        its own status_code
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response

from streamtoshelf.domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ExternalServiceError,
    ImageProxyError,
    RequestCancelledError,
    UpstreamTimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# nginx's "client closed request"
HTTP_499_CLIENT_CLOSED_REQUEST = 499
TIMEOUT_MESSAGE = "Request timeout - please try again"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for all domain exceptions.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Handle input validation errors with 400 Bad Request."""
        logger.info(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message},
        )

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle metadata provider credential failures with 500."""
        logger.error(
            "Upstream authentication failed at %s (status=%s)",
            request.url.path,
            exc.http_status,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message},
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_error_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        """Pass upstream 429 through, everything else is 500."""
        status_code = (
            status.HTTP_429_TOO_MANY_REQUESTS
            if exc.is_rate_limited
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        logger.error(
            "External service %s failed at %s: %s (upstream status=%s)",
            exc.service,
            request.url.path,
            exc.message,
            exc.status_code,
            extra={
                "path": request.url.path,
                "error": exc.message,
                "service": exc.service,
                "upstream_status": exc.status_code,
            },
        )
        return JSONResponse(status_code=status_code, content={"detail": exc.message})

    @app.exception_handler(UpstreamTimeoutError)
    async def upstream_timeout_handler(
        request: Request, exc: UpstreamTimeoutError
    ) -> JSONResponse:
        """Handle exhausted time budgets with 504 Gateway Timeout."""
        logger.warning(
            "Upstream timeout at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "service": exc.service, "timeout": exc.timeout},
        )
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={"detail": TIMEOUT_MESSAGE},
        )

    @app.exception_handler(RequestCancelledError)
    async def request_cancelled_handler(
        request: Request, exc: RequestCancelledError
    ) -> Response:
        """Client went away. Nobody reads this response."""
        logger.debug(
            "Request cancelled at %s (%s)",
            request.url.path,
            exc.service or "before any upstream call",
        )
        return Response(status_code=HTTP_499_CLIENT_CLOSED_REQUEST)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle misconfiguration with 503 Service Unavailable."""
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": exc.message},
        )

    @app.exception_handler(ImageProxyError)
    async def image_proxy_error_handler(request: Request, exc: ImageProxyError) -> JSONResponse:
        """Image proxy failures carry their own status."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "Image proxy error: %s (%d)",
            exc.message,
            exc.status_code,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Last resort, never leak internals to the client."""
        logger.exception(
            "Unhandled error at %s: %s",
            request.url.path,
            exc,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": INTERNAL_ERROR_MESSAGE},
        )
