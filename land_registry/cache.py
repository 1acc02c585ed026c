"""
Read-through cache for transfer snapshots

Entries are plain dict snapshots keyed by transfer, owner, parcel, district
and visibility scope. Cache failures are logged and never reach the caller;
a miss simply falls through to the database.
"""

import logging
from urllib.parse import quote

from django.conf import settings
from django.core.cache import caches
from django.utils import timezone

logger = logging.getLogger(__name__)

DEFAULT_TTLS = {
    'transfer': 600,
    'list': 300,
    'history': 900,
    'stats': 1800,
    'user': 600,
    'district': 1200,
    'preload': 1800,
}


def get_cache():
    return caches[getattr(settings, 'LAND_TRANSFER_CACHE_ALIAS', 'default')]


def ttl(kind):
    return getattr(settings, 'LAND_TRANSFER_CACHE_TTLS', {}).get(kind, DEFAULT_TTLS[kind])


# ============================================================================
# KEYS
# ============================================================================

def transfer_key(transfer_id):
    return f"land_transfer:{transfer_id}"


def user_transfers_key(user_id):
    return f"land_transfer:user:{user_id}"


def history_key(land_id):
    return f"land_transfer:history:{land_id}"


def district_key(district):
    return f"land_transfer:district:{quote(district, safe='')}"


def stats_key(scope):
    return f"land_transfer:stats:{quote(scope, safe=':')}"


def transfer_cache_keys(transfer):
    """
    Every cache key whose content depends on this transfer.

    Computed from the transfer alone so that all mutations invalidate the
    same set: the snapshot itself, both owners' lists, the parcel history,
    the district list and the statistics of every visibility scope that can
    see the transfer.
    """
    district = transfer.land.district
    return [
        transfer_key(transfer.pk),
        user_transfers_key(transfer.current_owner_id),
        user_transfers_key(transfer.new_owner_id),
        history_key(transfer.land_id),
        district_key(district),
        stats_key(f"user:{transfer.current_owner_id}"),
        stats_key(f"user:{transfer.new_owner_id}"),
        stats_key(f"district:{district}"),
        stats_key('all'),
    ]


# ============================================================================
# OPERATIONS
# ============================================================================

def fetch(key):
    try:
        return get_cache().get(key)
    except Exception:
        logger.warning(f"Cache read failed for {key}", exc_info=True)
        return None


def store(key, value, kind):
    try:
        get_cache().set(key, value, ttl(kind))
    except Exception:
        logger.warning(f"Cache write failed for {key}", exc_info=True)


def invalidate(keys):
    try:
        get_cache().delete_many(list(keys))
    except Exception:
        logger.warning(f"Cache invalidation failed for {len(keys)} keys", exc_info=True)


def warm_transfers(snapshots):
    """Store transfer snapshots with the preload TTL"""
    try:
        get_cache().set_many(
            {transfer_key(snapshot['id']): snapshot for snapshot in snapshots},
            ttl('preload'),
        )
    except Exception:
        logger.warning("Cache warm-up failed", exc_info=True)
        return 0
    return len(snapshots)


def is_connected():
    """Round-trip a sentinel value through the cache"""
    try:
        cache = get_cache()
        cache.set('land_transfer:health_check', 'ok', 60)
        result = cache.get('land_transfer:health_check')
        cache.delete('land_transfer:health_check')
        return result == 'ok'
    except Exception:
        logger.warning("Cache health check failed", exc_info=True)
        return False


def health():
    return {
        'connected': is_connected(),
        'timestamp': timezone.now().isoformat(),
    }
