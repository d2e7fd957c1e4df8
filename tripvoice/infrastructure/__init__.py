"""Infrastructure services and cross-cutting utilities."""

from tripvoice.infrastructure.cache import (
    ALL_CACHES,
    MemoryCache,
    geocode_cache,
    make_cache_key,
    place_cache,
    route_cache,
)
from tripvoice.infrastructure.llm_factory import get_llm, is_llm_available, reset_llm
from tripvoice.infrastructure.logging import StructuredLogger, get_logger

__all__ = [
    "ALL_CACHES",
    "MemoryCache",
    "StructuredLogger",
    "geocode_cache",
    "get_llm",
    "get_logger",
    "is_llm_available",
    "make_cache_key",
    "place_cache",
    "reset_llm",
    "route_cache",
]
