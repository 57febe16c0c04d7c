from __future__ import annotations

import os

import redis


def get_redis_url() -> str | None:
    return os.environ.get("ROUNDTABLE_REDIS_URL") or None


def create_redis() -> redis.Redis | None:
    """Redis client for the event outbox, or None when no URL is configured."""

    url = get_redis_url()
    if url is None:
        return None
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(url, decode_responses=True)
