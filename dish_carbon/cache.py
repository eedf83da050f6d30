# dish_carbon/cache.py - in-memory results for already-seen images
import hashlib, threading
from typing import Dict, Optional

from .schemas import EstimateResult


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class ResultCache:
    # no eviction: lives as long as the process
    def __init__(self):
        self._entries: Dict[str, EstimateResult] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[EstimateResult]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, result: EstimateResult) -> None:
        if result.is_fallback:
            return
        with self._lock:
            self._entries[key] = result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
