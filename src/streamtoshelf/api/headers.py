"""Response headers shared by several routers."""

# JSON answers depend on live upstream data, browsers and CDNs must not keep them.
NO_STORE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
}

NOSNIFF_HEADER: dict[str, str] = {"X-Content-Type-Options": "nosniff"}
