from __future__ import annotations

from roundtable.infra.redis_client import create_redis
from roundtable.match_store import MatchRegistry
from roundtable.settings import LoopSettings

_REGISTRY: MatchRegistry | None = None


def get_registry() -> MatchRegistry:
    """Process-wide match registry, created on first use from env settings."""

    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = MatchRegistry(settings=LoopSettings.from_env(), r=create_redis())
    return _REGISTRY


def shutdown_registry() -> None:
    global _REGISTRY
    if _REGISTRY is not None:
        _REGISTRY.shutdown()
        _REGISTRY = None
