# backend/app/services/cache_service.py
#   Redis access with a process-local fallback, shared by the profile cache and the JWT blocklist.
import json
from typing import Any, Dict, Optional

import redis
from flask import current_app

from .redisKeyGenerate import generate_blocklist_key, generate_profile_key

# Fallback in-memory cache if Redis is unavailable (process-local; not shared across workers)
_LOCAL_CACHE: Dict[str, Any] = {}


def _get_redis_client():
    """
    Resolve a Redis client.

    Priority:
      1) current_app.config["REDIS_CLIENT"] if provided by app factory
      2) Create a new redis.Redis client from config (REDIS_HOST/REDIS_PORT/REDIS_DB)
    """
    client = current_app.config.get("REDIS_CLIENT")
    if client:
        return client
    return redis.Redis(
        host=current_app.config.get("REDIS_HOST", "redis"),
        port=int(current_app.config.get("REDIS_PORT", 6379)),
        db=int(current_app.config.get("REDIS_DB", 0)),
        socket_timeout=2,
    )


def _cache_get(client, key: str):
    """
    Cache GET with graceful fallback to in-memory cache when Redis fails.
    """
    try:
        value = client.get(key)
    except Exception as exc:
        current_app.logger.warning({
            "component": "Cache",
            "event": "cache_get_failed",
            "key": key,
            "error": str(exc)
        })
        # fallback to in-memory cache
        return _LOCAL_CACHE.get(key)
    if value is None:
        return _LOCAL_CACHE.get(key)
    return value


def _cache_set(client, key: str, value: str, ex: Optional[int] = 3600):
    """
    Cache SET with graceful fallback to in-memory cache when Redis fails.
    """
    try:
        client.set(key, value, ex=ex)
        return
    except Exception as exc:
        current_app.logger.warning({
            "component": "Cache",
            "event": "cache_set_failed",
            "key": key,
            "error": str(exc)
        })
        _LOCAL_CACHE[key] = value


# ------------------------------------------------------------------------------
# Profile cache
# ------------------------------------------------------------------------------
def read_cached_profile(identity: str) -> Dict[str, Any]:
    raw = _cache_get(_get_redis_client(), generate_profile_key(identity))
    if not raw:
        return {}
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        cached = json.loads(raw)
    except ValueError:
        current_app.logger.warning({
            "component": "Cache",
            "event": "profile_cache_corrupt",
            "identity": identity,
        })
        return {}
    return cached if isinstance(cached, dict) else {}


def write_cached_profile(identity: str, profile: Dict[str, Any]) -> None:
    _cache_set(
        _get_redis_client(),
        generate_profile_key(identity),
        json.dumps(profile, sort_keys=True),
        ex=current_app.config.get("PROFILE_CACHE_TTL"),
    )


# ------------------------------------------------------------------------------
# JWT blocklist
# ------------------------------------------------------------------------------
def block_token(jti: str, ttl_seconds: int) -> None:
    _cache_set(_get_redis_client(), generate_blocklist_key(jti), "1", ex=max(1, int(ttl_seconds)))


def is_token_blocked(jti: str) -> bool:
    return bool(_cache_get(_get_redis_client(), generate_blocklist_key(jti)))


def ping_redis() -> bool:
    return bool(_get_redis_client().ping())
