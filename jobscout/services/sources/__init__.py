"""API-based job board adapters."""

from .ashby import AshbyAdapter
from .base import SourceAdapter
from .greenhouse import GreenhouseAdapter
from .lever import LeverAdapter
from .registry import (
    AdapterRegistry,
    SourceType,
    build_default_registry,
    default_registry,
    detect_source_type,
)

__all__ = [
    "AdapterRegistry",
    "AshbyAdapter",
    "GreenhouseAdapter",
    "LeverAdapter",
    "SourceAdapter",
    "SourceType",
    "build_default_registry",
    "default_registry",
    "detect_source_type",
]
