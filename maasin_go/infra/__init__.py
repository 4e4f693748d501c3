"""
Инфраструктурный слой.
Работа с внешними системами: хранилище ключ-значение (Redis).
"""

from maasin_go.infra.kv_store import KeyValueStore
from maasin_go.infra.redis_client import RedisClient, get_redis

__all__ = [
    "KeyValueStore",
    "RedisClient",
    "get_redis",
]
