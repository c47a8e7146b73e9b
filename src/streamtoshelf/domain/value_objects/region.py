"""Supported storefront regions and marketplace domain mapping.

Hey future me - the region ONLY changes which Amazon domain synthesized links point at.
There is no pricing or catalog logic per region. Seven regions, fixed. Anything else is
rejected before it reaches the aggregator.

Region detection from Accept-Language mirrors what browsers send in navigator.language:
exact tag first ("fr-CA"), then the bare language ("de"), then a couple of English
country codes, else US.
"""

from enum import Enum
from types import MappingProxyType

from streamtoshelf.domain.exceptions import ValidationError


class Region(str, Enum):
    """Country codes we can build marketplace links for."""

    US = "US"
    GB = "GB"
    CA = "CA"
    AU = "AU"
    DE = "DE"
    FR = "FR"
    JP = "JP"


DEFAULT_REGION = Region.US
DEFAULT_MARKETPLACE_DOMAIN = "amazon.com"

MARKETPLACE_DOMAINS: MappingProxyType[Region, str] = MappingProxyType(
    {
        Region.US: "amazon.com",
        Region.GB: "amazon.co.uk",
        Region.CA: "amazon.ca",
        Region.AU: "amazon.com.au",
        Region.DE: "amazon.de",
        Region.FR: "amazon.fr",
        Region.JP: "amazon.co.jp",
    }
)

LANGUAGE_TO_REGION: MappingProxyType[str, Region] = MappingProxyType(
    {
        "en-US": Region.US,
        "en-GB": Region.GB,
        "en-CA": Region.CA,
        "en-AU": Region.AU,
        "de": Region.DE,
        "de-DE": Region.DE,
        "de-AT": Region.DE,
        "de-CH": Region.DE,
        "fr": Region.FR,
        "fr-FR": Region.FR,
        "fr-CA": Region.CA,
        "fr-BE": Region.FR,
        "fr-CH": Region.FR,
        "ja": Region.JP,
        "ja-JP": Region.JP,
    }
)

_ENGLISH_COUNTRY_REGIONS: MappingProxyType[str, Region] = MappingProxyType(
    {
        "GB": Region.GB,
        "UK": Region.GB,
        "CA": Region.CA,
        "AU": Region.AU,
    }
)


def marketplace_domain(region: Region | None) -> str:
    """Return the Amazon domain for a region, amazon.com if unmapped."""
    if region is None:
        return DEFAULT_MARKETPLACE_DOMAIN
    return MARKETPLACE_DOMAINS.get(region, DEFAULT_MARKETPLACE_DOMAIN)


def region_from_language(language: str | None) -> Region:
    """Map a single BCP 47 language tag to a supported region.

    Args:
        language: Tag such as "en-GB", "de" or "fr-CA"

    Returns:
        Matching region, US when nothing matches
    """
    if not language:
        return DEFAULT_REGION

    if language in LANGUAGE_TO_REGION:
        return LANGUAGE_TO_REGION[language]

    parts = language.split("-")
    language_code = parts[0]
    if language_code in LANGUAGE_TO_REGION:
        return LANGUAGE_TO_REGION[language_code]

    if language_code == "en" and len(parts) > 1:
        return _ENGLISH_COUNTRY_REGIONS.get(parts[1].upper(), DEFAULT_REGION)

    return DEFAULT_REGION


def region_from_accept_language(header: str | None) -> Region:
    """Derive a region from the first entry of an Accept-Language header.

    "fr-CA,fr;q=0.9,en;q=0.8" -> CA. Quality values are ignored, the browser
    already lists its primary language first.
    """
    if not header:
        return DEFAULT_REGION
    first = header.split(",")[0].split(";")[0].strip()
    return region_from_language(first)


def parse_region(value: str | None, accept_language: str | None = None) -> Region:
    """Validate an explicit region parameter or detect one.

    Args:
        value: Raw region query parameter (may be None/empty)
        accept_language: Accept-Language header used when value is missing

    Returns:
        The validated region

    Raises:
        ValidationError: If value is given but not one of the supported codes
    """
    if value is None or value == "":
        return region_from_accept_language(accept_language)
    try:
        return Region(value)
    except ValueError as e:
        raise ValidationError("Invalid region parameter") from e
