import redis

from utils import context_store as context_module
from utils.cache_manager import MemoryCache, RedisCache, build_cache
from utils.context_store import CacheContextStore, FirestoreContextStore, build_context_store
from weather_forecast.weather_models import ResolvedLocation


class _Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


TAICHUNG = ResolvedLocation(display_name="臺中市", lat=24.14, lon=120.68)
KAOHSIUNG = ResolvedLocation(display_name="高雄", lat=22.63, lon=120.30)


def test_memory_cache_expires_entries():
    clock = _Clock()
    cache = MemoryCache(clock=clock)
    cache.set_json("k", {"a": 1}, ttl=10)
    assert cache.get_json("k") == {"a": 1}
    clock.now += 10
    assert cache.get_json("k") is None


def test_memory_cache_sweeps_expired_keys_on_write():
    clock = _Clock()
    cache = MemoryCache(clock=clock)
    for i in range(1000):
        cache.set_json(f"calorie:{i}", {"kcal": i}, ttl=10)
    cache.set_json("twse:stocks:all", {"2330": {}})
    assert cache.size() == 1001

    clock.now += 10000
    cache.set_json("horoscope:leo:2024-05-02", {"score": 4}, ttl=10)

    assert cache.size() == 2
    assert cache.get_json("twse:stocks:all") == {"2330": {}}


def test_memory_cache_without_ttl_keeps_value():
    cache = MemoryCache()
    cache.set_json("k", [1, 2])
    cache.delete("missing")
    assert cache.get_json("k") == [1, 2]


class _BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("down")

    def set(self, key, value, ex=None):
        raise redis.ConnectionError("down")

    def delete(self, key):
        raise redis.ConnectionError("down")


def test_redis_failures_read_as_miss():
    cache = RedisCache("redis://localhost:6379/0", client=_BrokenRedis())
    assert cache.get_json("k") is None
    assert cache.set_json("k", {"a": 1}, ttl=5) is False
    cache.delete("k")


def test_build_cache_picks_backend_from_url():
    assert isinstance(build_cache(""), MemoryCache)
    assert isinstance(build_cache("redis://localhost:6379/0"), RedisCache)


def test_context_round_trip_and_last_write_wins():
    clock = _Clock()
    store = CacheContextStore(MemoryCache(clock=clock), clock=clock)
    store.put("U1", TAICHUNG, ttl=60)
    store.put("U1", KAOHSIUNG, ttl=60)

    context = store.get("U1")
    assert context.last_location == KAOHSIUNG
    assert context.last_updated == 1000.0
    assert store.get("U2") is None


def test_context_expires_after_ttl():
    clock = _Clock()
    store = CacheContextStore(MemoryCache(clock=clock), clock=clock)
    store.put("U1", TAICHUNG, ttl=60)
    clock.now += 61
    assert store.get("U1") is None


def test_context_ignores_missing_user_id():
    store = CacheContextStore(MemoryCache())
    store.put(None, TAICHUNG, ttl=60)
    assert store.get(None) is None


def test_firestore_context_checks_expiry(monkeypatch):
    documents = {}

    def upsert(user_id, **data):
        documents.setdefault(user_id, {}).update(data)

    monkeypatch.setattr(context_module.firestore_manager, "upsert_user_fields", upsert)
    monkeypatch.setattr(context_module.firestore_manager, "get_user_data", lambda user_id: documents.get(user_id))

    clock = _Clock()
    store = FirestoreContextStore(clock=clock)
    store.put("U1", TAICHUNG, ttl=30)
    assert store.get("U1").last_location == TAICHUNG

    clock.now += 30
    assert store.get("U1") is None


def test_firestore_errors_are_treated_as_absence(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("無法連線到 Firebase Firestore")

    monkeypatch.setattr(context_module.firestore_manager, "get_user_data", boom)
    monkeypatch.setattr(context_module.firestore_manager, "upsert_user_fields", boom)

    store = FirestoreContextStore()
    store.put("U1", TAICHUNG, ttl=30)
    assert store.get("U1") is None


def test_build_context_store_backends():
    cache = MemoryCache()
    assert isinstance(build_context_store("cache", cache), CacheContextStore)
    assert isinstance(build_context_store("firestore", cache), FirestoreContextStore)
