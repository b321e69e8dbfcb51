"""Source type detection and the adapter registry.

The registry decides whether a company is crawled through a job board API
or falls back to the heuristic career page crawler.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from jobscout.services.sources.ashby import AshbyAdapter
from jobscout.services.sources.base import SourceAdapter
from jobscout.services.sources.greenhouse import GreenhouseAdapter
from jobscout.services.sources.lever import LeverAdapter


class SourceType(str, Enum):
    """Closed set of career page sources.

    Only GREENHOUSE, LEVER and ASHBY have API adapters; every other type is
    crawled heuristically.
    """

    GREENHOUSE = "greenhouse"
    LEVER = "lever"
    ASHBY = "ashby"
    SMARTRECRUITERS = "smartrecruiters"
    WORKDAY = "workday"
    CUSTOM = "custom"


# Ordered (source type, URL substrings) rules for detection
_DETECTION_RULES: tuple[tuple[SourceType, tuple[str, ...]], ...] = (
    (SourceType.GREENHOUSE, ("greenhouse.io", "boards.greenhouse")),
    (SourceType.LEVER, ("lever.co", "jobs.lever")),
    (SourceType.ASHBY, ("ashbyhq.com", "jobs.ashby")),
    (SourceType.SMARTRECRUITERS, ("smartrecruiters.com",)),
    (SourceType.WORKDAY, ("workday.com", "myworkdayjobs.com")),
)


def detect_source_type(url: str) -> SourceType:
    """Detect the source type of a career page from its URL.

    Args:
        url: Career page URL

    Returns:
        Matching SourceType, or SourceType.CUSTOM when no provider matches

    Example:
        >>> detect_source_type("https://boards.greenhouse.io/acme")
        <SourceType.GREENHOUSE: 'greenhouse'>
    """
    url_lower = url.lower()
    for source_type, needles in _DETECTION_RULES:
        if any(needle in url_lower for needle in needles):
            return source_type
    return SourceType.CUSTOM


class AdapterRegistry:
    """Read-only mapping from source type to adapter.

    Lookups are total: unknown or missing source types yield False/None
    instead of raising.
    """

    def __init__(self, adapters: Mapping[str, SourceAdapter]):
        self._adapters: Mapping[str, SourceAdapter] = MappingProxyType(
            {key.lower(): adapter for key, adapter in adapters.items()}
        )

    def has_parser(self, source_type: str | None) -> bool:
        if not source_type:
            return False
        return source_type.lower() in self._adapters

    def get_parser(self, source_type: str | None) -> SourceAdapter | None:
        if not source_type:
            return None
        return self._adapters.get(source_type.lower())

    def supported_source_types(self) -> list[str]:
        return list(self._adapters)


def build_default_registry() -> AdapterRegistry:
    """Registry with the built-in Greenhouse, Lever and Ashby adapters."""
    return AdapterRegistry(
        {
            SourceType.GREENHOUSE.value: GreenhouseAdapter(),
            SourceType.LEVER.value: LeverAdapter(),
            SourceType.ASHBY.value: AshbyAdapter(),
        }
    )


default_registry = build_default_registry()
