"""进程内 TTL + LRU 缓存，用于高德查询结果

None 表示“没查到”，不写入缓存，下次仍会重新请求。
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, NamedTuple, Optional


class _Entry(NamedTuple):
    value: Any
    expires_at: float


class MemoryCache:
    def __init__(self, name: str, ttl: float = 600.0, capacity: int = 256):
        self.name = name
        self._ttl = ttl
        self._capacity = capacity
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at < now:
                del self._entries[key]
                entry = None
            if entry is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = time.monotonic() + (self._ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = _Entry(value, expires_at)
            self._entries.move_to_end(key)
            while len(self._entries) > self._capacity:
                self._entries.popitem(last=False)
                self._evictions += 1

    def get_or_compute(self, key: str, compute: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = compute()
        if value is not None:
            self.set(key, value, ttl)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = self._misses = self._evictions = 0

    @property
    def stats(self) -> dict[str, Any]:
        lookups = self._hits + self._misses
        return {
            "name": self.name,
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
            "hit_rate": round(self._hits / lookups, 3) if lookups else 0.0,
        }


def make_cache_key(*parts: Any) -> str:
    """参数序列化后取 sha1，dict 参数按 key 排序保证稳定"""
    payload = json.dumps(parts, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


geocode_cache = MemoryCache("geocode", ttl=600.0, capacity=512)
place_cache = MemoryCache("place", ttl=600.0, capacity=256)
route_cache = MemoryCache("route", ttl=1800.0, capacity=256)

ALL_CACHES = (geocode_cache, place_cache, route_cache)


__all__ = [
    "ALL_CACHES",
    "MemoryCache",
    "geocode_cache",
    "make_cache_key",
    "place_cache",
    "route_cache",
]
