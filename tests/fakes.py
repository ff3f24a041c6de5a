"""Test doubles shared by the test modules: language model, geocoder, forecast provider, services."""
import calendar
import datetime
import random

from main_initializer import AppServices
from utils.cache_manager import MemoryCache
from utils.context_store import CacheContextStore

TAIPEI_OFFSET = 8 * 60 * 60


class FakeLLM:
    def __init__(self, intent_reply="NO", chat_reply="哈囉！", json_reply=None, error=None):
        self.intent_reply = intent_reply
        self.chat_reply = chat_reply
        self.json_reply = json_reply
        self.error = error
        self.calls = []

    def classify_weather_intent(self, text):
        self.calls.append(("classify", text))
        if self.error:
            raise self.error
        return self.intent_reply

    def chat(self, text):
        self.calls.append(("chat", text))
        if self.error:
            raise self.error
        return self.chat_reply

    def generate_json(self, system, user):
        self.calls.append(("json", user))
        if self.error:
            raise self.error
        if isinstance(self.json_reply, Exception):
            raise self.json_reply
        return dict(self.json_reply or {})


class FakeGeocoder:
    """Returns the configured result for a query, [] for everything else."""

    def __init__(self, results=None):
        self.results = results or {}
        self.calls = []

    def __call__(self, query):
        self.calls.append(query)
        return list(self.results.get(query, []))


class FakeForecast:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def __call__(self, lat, lon, query):
        self.calls.append((lat, lon, query))
        return self.payload


def local_epoch(year, month, day, hour, offset=TAIPEI_OFFSET):
    """UTC epoch seconds of a wall-clock time in a zone `offset` seconds east of UTC."""
    return calendar.timegm(datetime.datetime(year, month, day, hour).timetuple()) - offset


def forecast_item(epoch, temp, feels_like=None, pop=0.0, humidity=70, description="多雲"):
    return {
        "dt": epoch,
        "main": {"temp": temp, "feels_like": temp if feels_like is None else feels_like, "humidity": humidity},
        "weather": [{"description": description}],
        "pop": pop,
    }


def three_day_payload(start=None, offset=TAIPEI_OFFSET):
    """Samples every 3 hours from 2024-05-01 09:00 local time until 2024-05-03 21:00."""
    start = start or local_epoch(2024, 5, 1, 9)
    items = []
    for i in range(21):
        epoch = start + i * 3 * 3600
        items.append(forecast_item(epoch, temp=20.0 + (i % 8), pop=0.1 * (i % 4)))
    return {"list": items, "city": {"name": "Taichung", "timezone": offset}}


def make_services(llm=None, **kwargs):
    cache = kwargs.pop("cache", None) or MemoryCache()
    context_store = kwargs.pop("context_store", None) or CacheContextStore(cache)
    kwargs.setdefault("weather_api_key", "test-weather-key")
    kwargs.setdefault("rng", random.Random(0))
    kwargs.setdefault("name_prefixes", ("KevinBot", "Kevin"))
    kwargs.setdefault("bot_user_id", "Ubot0000")
    return AppServices(cache=cache, context_store=context_store, llm=llm or FakeLLM(), **kwargs)
