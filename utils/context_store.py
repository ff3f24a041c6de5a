# utils/context_store.py
"""
對話上下文儲存：記住每位使用者最後一次成功解析的地點，讓「那明天呢」這類追問不必重講城市。
介面只有 get(user_id) 與 put(user_id, location, ttl)，同一個鍵以最後一次寫入為準。
後端：
1. CacheContextStore：建立在鍵值快取之上（記憶體或 Redis），每筆都帶明確的過期時間。
2. FirestoreContextStore：寫進使用者的 Firestore 文件，讀取時檢查 expires_at。
任何後端錯誤只記錄日誌，並視為沒有上下文。
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from weather_forecast.weather_models import ResolvedLocation
from . import firestore_manager
from .cache_manager import BaseCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationContext:
    user_id: str
    last_location: ResolvedLocation
    last_updated: float


class ContextStore:
    def get(self, user_id: str) -> Optional[ConversationContext]:
        raise NotImplementedError

    def put(self, user_id: str, location: ResolvedLocation, ttl: int) -> None:
        raise NotImplementedError


class CacheContextStore(ContextStore):
    KEY_PREFIX = "ctx:last_location:"

    def __init__(self, cache: BaseCache, clock=time.time):
        self._cache = cache
        self._clock = clock

    def _key(self, user_id: str) -> str:
        return f"{self.KEY_PREFIX}{user_id}"

    def get(self, user_id: str) -> Optional[ConversationContext]:
        if not user_id:
            return None
        data = self._cache.get_json(self._key(user_id))
        if not data or not data.get("location"):
            return None
        return ConversationContext(
            user_id=user_id,
            last_location=ResolvedLocation.from_dict(data["location"]),
            last_updated=data.get("updated_at", 0.0),
        )

    def put(self, user_id: str, location: ResolvedLocation, ttl: int) -> None:
        if not user_id:
            return
        payload = {"location": location.to_dict(), "updated_at": self._clock()}
        self._cache.set_json(self._key(user_id), payload, ttl=ttl)
        logger.debug(f"已記住用戶 {user_id[:8]}... 的地點 {location.display_name} ({ttl}s)")


class FirestoreContextStore(ContextStore):
    FIELD = "last_location_context"

    def __init__(self, clock=time.time):
        self._clock = clock

    def get(self, user_id: str) -> Optional[ConversationContext]:
        if not user_id:
            return None
        try:
            user_data = firestore_manager.get_user_data(user_id) or {}
        except Exception as e:
            logger.warning(f"讀取用戶 {user_id[:8]}... 的對話上下文失敗: {e}")
            return None

        data = user_data.get(self.FIELD)
        if not data or not data.get("location"):
            return None
        if data.get("expires_at", 0) <= self._clock():
            logger.debug(f"用戶 {user_id[:8]}... 的對話上下文已過期。")
            return None
        return ConversationContext(
            user_id=user_id,
            last_location=ResolvedLocation.from_dict(data["location"]),
            last_updated=data.get("updated_at", 0.0),
        )

    def put(self, user_id: str, location: ResolvedLocation, ttl: int) -> None:
        if not user_id:
            return
        now = self._clock()
        payload = {"location": location.to_dict(), "updated_at": now, "expires_at": now + ttl}
        try:
            firestore_manager.upsert_user_fields(user_id, **{self.FIELD: payload})
        except Exception as e:
            logger.warning(f"寫入用戶 {user_id[:8]}... 的對話上下文失敗: {e}")


def build_context_store(backend: str, cache: BaseCache) -> ContextStore:
    if backend == "firestore":
        logger.info("對話上下文使用 Firestore 儲存。")
        return FirestoreContextStore()
    logger.info("對話上下文使用鍵值快取儲存。")
    return CacheContextStore(cache)
