"""
Caching for dropdown-style lists: master data lists and project options.

These lists are read on nearly every page of the UI and change rarely, so
they are cached and dropped by the signal handlers in cache_signals.
"""
from django.core.cache import cache
import logging

logger = logging.getLogger(__name__)

# Cache key prefixes
MASTER_LIST_KEY_PREFIX = 'master_list:'
PROJECT_OPTIONS_KEY = 'project_options'

# Cache TTL (Time To Live) in seconds
MASTER_LIST_CACHE_TTL = 600  # 10 minutes (master data changes rarely)
PROJECT_OPTIONS_CACHE_TTL = 120  # 2 minutes

# Variants of a master list that get cached: all rows, live rows, retired rows
MASTER_LIST_VARIANTS = ('all', 'live', 'retired')


# ==================== MASTER LIST CACHING ====================

def master_list_variant(is_live):
    """Map an isLive filter value (None/True/False) to a cache variant"""
    if is_live is None:
        return 'all'
    return 'live' if is_live else 'retired'


def get_master_list_cache_key(model_name: str, variant: str = 'all') -> str:
    """Get cache key for a master data list"""
    return f"{MASTER_LIST_KEY_PREFIX}{model_name.lower()}:{variant}"


def get_cached_master_list(model_name: str, variant: str = 'all'):
    """Get a cached master data list"""
    cached_data = cache.get(get_master_list_cache_key(model_name, variant))
    if cached_data is not None:
        logger.debug(f"Cache hit for {model_name} list ({variant})")
    return cached_data


def cache_master_list(model_name: str, variant: str, data, ttl: int = None):
    """Cache a serialized master data list"""
    cache.set(get_master_list_cache_key(model_name, variant), data, ttl or MASTER_LIST_CACHE_TTL)
    logger.debug(f"Cached {model_name} list ({variant}): {len(data)} rows")


def invalidate_master_list_cache(model_name: str):
    """Drop every cached variant of a master data list"""
    cache.delete_many([get_master_list_cache_key(model_name, variant) for variant in MASTER_LIST_VARIANTS])
    logger.debug(f"Invalidated cache for {model_name} list")


# ==================== PROJECT OPTIONS CACHING ====================

def get_cached_project_options():
    cached_data = cache.get(PROJECT_OPTIONS_KEY)
    if cached_data is not None:
        logger.debug("Cache hit for project options")
    return cached_data


def cache_project_options(options, ttl: int = None):
    cache.set(PROJECT_OPTIONS_KEY, options, ttl or PROJECT_OPTIONS_CACHE_TTL)
    logger.debug(f"Cached project options: {len(options)} entries")


def invalidate_project_options_cache():
    cache.delete(PROJECT_OPTIONS_KEY)
    logger.debug("Invalidated project options cache")
