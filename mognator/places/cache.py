from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any


class ResponseCache:
    """TTL cache for places-search responses, keyed by the request parameters."""

    def __init__(self, ttl: float = 300.0) -> None:
        self.ttl = ttl
        self._entries: dict[str, dict[str, Any]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    @staticmethod
    def make_key(params: dict) -> str:
        normalized = json.dumps(params, sort_keys=True, default=str)
        return hashlib.sha256(normalized.encode()).hexdigest()[:16]

    def get(self, params: dict) -> Any | None:
        key = self.make_key(params)
        with self._lock:
            entry = self._entries.get(key)
            if entry and time.time() - entry["created_at"] < self.ttl:
                self._hits += 1
                return entry["value"]
            if entry:
                del self._entries[key]
            self._misses += 1
            return None

    def set(self, params: dict, value: Any) -> None:
        with self._lock:
            self._entries[self.make_key(params)] = {"value": value, "created_at": time.time()}

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
