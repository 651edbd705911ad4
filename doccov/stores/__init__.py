"""On-disk stores."""

from .spec_cache import CacheContext, CacheSettings, CacheValidationResult, SpecCache, SpecCacheStore

__all__ = ["CacheContext", "CacheSettings", "CacheValidationResult", "SpecCache", "SpecCacheStore"]
