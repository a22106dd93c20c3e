"""
Cache management module

Flask-Caching backed cache shared by the application:
- Redis in production (RedisCache on REDIS_URL)
- SimpleCache when CACHE_TYPE says so (tests, single process development)

Only explicitly owned cache objects (see murshid.services.tag_translation)
write here; keys are built with make_key so every entry carries a known prefix.
"""

from flask_caching import Cache
from flask import Flask
import hashlib
import json

# Cache instance, initialised lazily by init_app
cache = Cache()

# Cache key prefixes
KEY_PREFIX = {
    'DATA': 'data:',          # generic data cache
    'TAGS': 'tags:',          # tag translation map
    'COUNT': 'count:',        # derived counters
}

# Expiry times (seconds)
TTL = {
    'DATA_SHORT': 60,
    'DATA_MEDIUM': 300,
    'DATA_LONG': 3600,
    'TAGS': 3600 * 6,
}

# Hit/miss statistics for the admin dashboard
stats = {
    'hits': 0,
    'misses': 0,
    'sets': 0,
    'deletes': 0,
}


def init_app(app: Flask):
    """Initialise the cache system"""
    cache_type = app.config.get('CACHE_TYPE', 'RedisCache')
    cache_config = {
        'CACHE_TYPE': cache_type,
        'CACHE_DEFAULT_TIMEOUT': TTL['DATA_MEDIUM'],
        'CACHE_KEY_PREFIX': app.config.get('CACHE_KEY_PREFIX', 'murshid:'),
    }
    if cache_type == 'RedisCache':
        cache_config['CACHE_REDIS_URL'] = app.config.get('REDIS_URL', 'redis://localhost:6379/0')
        cache_config['CACHE_OPTIONS'] = {
            'socket_timeout': 5,
            'socket_connect_timeout': 5,
            'retry_on_timeout': True,
            'health_check_interval': 30,
        }

    cache.init_app(app, config=cache_config)
    app.logger.info(f"Cache initialised, type: {cache_type}")


def make_key(prefix, *args):
    """Build a cache key from a prefix and arguments"""
    if not args:
        return f"{prefix}"

    serialized_args = []
    for arg in args:
        if isinstance(arg, (str, int, float, bool, type(None))):
            serialized_args.append(str(arg))
        else:
            try:
                serialized_args.append(json.dumps(arg, sort_keys=True))
            except (TypeError, ValueError):
                serialized_args.append(hashlib.md5(repr(arg).encode('utf-8')).hexdigest())

    key_parts = [prefix.rstrip(':')]
    key_parts.extend(serialized_args)
    return ':'.join(key_parts)


def get(key):
    value = cache.get(key)
    if value is None:
        stats['misses'] += 1
    else:
        stats['hits'] += 1
    return value


def set(key, value, timeout=None):
    stats['sets'] += 1
    return cache.set(key, value, timeout=timeout if timeout is not None else TTL['DATA_MEDIUM'])


def delete(key):
    stats['deletes'] += 1
    return cache.delete(key)


def get_stats():
    """Cache statistics"""
    total = stats['hits'] + stats['misses']
    return {
        'hits': stats['hits'],
        'misses': stats['misses'],
        'sets': stats['sets'],
        'deletes': stats['deletes'],
        'hit_ratio': stats['hits'] / total if total else 0,
    }
