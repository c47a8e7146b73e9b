"""API router initialization."""

# Hey future me, api_router is mounted at /api in main.py. The health router is NOT in here,
# it lives at the root (/health) so probes don't depend on the API prefix.

from fastapi import APIRouter

from streamtoshelf.api.routers import buy_links, image_proxy, search, share

api_router = APIRouter()

api_router.include_router(buy_links.router)
api_router.include_router(search.router)
api_router.include_router(share.router)
api_router.include_router(image_proxy.router)

__all__ = ["api_router"]
