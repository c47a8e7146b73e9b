"""Application services."""

from streamtoshelf.application.services.buy_links_service import BuyLinksService
from streamtoshelf.application.services.link_aggregator import LinkAggregator, sort_links
from streamtoshelf.application.services.share_metadata import (
    ShareMetadata,
    ShareMetadataService,
    build_share_metadata,
)

__all__ = [
    "BuyLinksService",
    "LinkAggregator",
    "ShareMetadata",
    "ShareMetadataService",
    "build_share_metadata",
    "sort_links",
]
