# utils/cache_manager.py
"""
鍵值快取，用於記憶較昂貴的計算結果（星座運勢、熱量估算、上市股票對照表）與對話上下文。
1. RedisCache：多實例或需要重啟後保留資料時使用，每個鍵都帶有明確的過期時間。
2. MemoryCache：單一實例部署或測試時使用的行程內快取。
讀取失敗一律視為「沒有快取」，寫入失敗只記錄日誌，呼叫端會自行重新計算。
"""
import json
import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

import redis

logger = logging.getLogger(__name__)


class BaseCache:
    def get_json(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class RedisCache(BaseCache):
    """以 redis-py 實作；連線在第一次使用時才建立。"""

    def __init__(self, url: str, client: Optional[redis.Redis] = None):
        self._url = url
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis.from_url(self._url, decode_responses=True)
        return self._client

    def get_json(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"讀取快取 {key} 失敗，視為沒有快取: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"快取 {key} 的內容不是有效的 JSON，忽略。")
            return None

    def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            self.client.set(key, json.dumps(value, ensure_ascii=False), ex=ttl)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"寫入快取 {key} 失敗: {e}")
            return False

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.warning(f"刪除快取 {key} 失敗: {e}")


class MemoryCache(BaseCache):
    """行程內快取；值以 JSON 字串保存，讀出的物件與 Redis 版本行為一致。"""

    # 過期的鍵在讀取時移除；沒人再讀的鍵由寫入時的定期清掃移除
    SWEEP_INTERVAL_SECONDS = 60

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._next_sweep = clock() + self.SWEEP_INTERVAL_SECONDS

    def size(self) -> int:
        with self._lock:
            return len(self._data)

    def get_json(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            raw, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._data[key]
                return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except TypeError as e:
            logger.warning(f"寫入快取 {key} 失敗: {e}")
            return False
        now = self._clock()
        expires_at = now + ttl if ttl else None
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            self._data[key] = (raw, expires_at)
        return True

    def _sweep(self, now: float) -> None:
        expired = [k for k, (_, expires_at) in self._data.items() if expires_at is not None and now >= expires_at]
        for k in expired:
            del self._data[k]
        self._next_sweep = now + self.SWEEP_INTERVAL_SECONDS
        if expired:
            logger.debug(f"記憶體快取清除 {len(expired)} 個過期的鍵。")

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


def build_cache(redis_url: Optional[str]) -> BaseCache:
    if redis_url:
        logger.info("使用 Redis 作為快取。")
        return RedisCache(redis_url)
    logger.info("未設定 REDIS_URL，使用行程內記憶體快取。")
    return MemoryCache()
