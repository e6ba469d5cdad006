# interfaces/kv_store.py
"""
Key-Value Store backends for per-user conversation state

The session manager talks to these through get/set/delete only, so the
in-process dict can be swapped for Redis without touching callers.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import redis
from loguru import logger


class KeyValueStore(ABC):
    """Minimal store interface keyed by an opaque string id"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class InMemoryKeyValueStore(KeyValueStore):
    """
    Plain dict store.

    Values are returned by reference, so a caller mutating a returned list
    or dict mutates the stored value. No locking: at most one in-flight
    request per key is assumed.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def __len__(self) -> int:
        return len(self._data)


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed store. Values are JSON-encoded under "<namespace>:<key>".

    Returned values are decoded copies; writes must go back through set().
    """

    def __init__(
        self,
        namespace: str,
        client: Optional[redis.Redis] = None,
        redis_url: str = "redis://localhost:6379/0",
        ttl_seconds: Optional[int] = None
    ):
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds
        self.client = client or redis.Redis.from_url(redis_url, decode_responses=True)
        logger.info(f"RedisKeyValueStore ready for namespace '{namespace}'")

    def _get_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[Any]:
        data = self.client.get(self._get_key(key))
        if data is None:
            return None
        return json.loads(data)

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False, default=str)
        if self.ttl_seconds:
            self.client.setex(self._get_key(key), self.ttl_seconds, payload)
        else:
            self.client.set(self._get_key(key), payload)

    def delete(self, key: str) -> None:
        self.client.delete(self._get_key(key))

    def keys(self) -> List[str]:
        prefix = f"{self.namespace}:"
        return [k[len(prefix):] for k in self.client.scan_iter(match=f"{prefix}*")]
