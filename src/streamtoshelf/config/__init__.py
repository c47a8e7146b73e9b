"""Configuration module for StreamToShelf."""

from .settings import (
    DiscogsSettings,
    ImageProxySettings,
    Settings,
    SonglinkSettings,
    SpotifySettings,
    get_settings,
)

__all__ = [
    "DiscogsSettings",
    "ImageProxySettings",
    "Settings",
    "SonglinkSettings",
    "SpotifySettings",
    "get_settings",
]
