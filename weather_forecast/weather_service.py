# weather_forecast/weather_service.py
"""
天氣查詢的資料流程：解析地點 → 取得預報 → 挑選目標日期的時段 → 產生穿搭建議。
這裡不建立任何 LINE 訊息；成功時回傳 WeatherReport，失敗時回傳給使用者看的說明文字。
"""
import logging
from typing import Callable, NamedTuple, Optional

from handlers.intents import WeatherQuery
from outfit_suggestion.outfit_advisor import build_outfit_advice
from .city_normalizer import WHEN_DAY_OFFSET, normalize_when
from .city_tables import CityTables, DEFAULT_TABLES
from .forecast_slot_selector import select_day
from .geocode_resolver import Geocoder, make_geocoder, resolve_location
from .owm_api import get_forecast_data, parse_forecast_samples
from .weather_models import WeatherReport

logger = logging.getLogger(__name__)

DEFAULT_CITY = "Taipei"

MISSING_KEY_MESSAGE = "後端沒有設定 WEATHER_API_KEY，請先設定環境變數。"
CITY_NOT_FOUND_MESSAGE = "查不到這個城市的天氣，再確認一下城市名稱。"
FORECAST_ERROR_MESSAGE = "查天氣時發生錯誤，可能是城市名稱或座標有問題，或 API 暫時掛了。"
NO_SLOT_MESSAGE = "暫時查不到這個時間點的天氣，等等再試一次。"

# 預報函式：(lat, lon, query) → 原始 JSON，失敗時為空字典
ForecastFetcher = Callable[[Optional[float], Optional[float], Optional[str]], dict]


class WeatherResult(NamedTuple):
    report: Optional[WeatherReport]
    message: Optional[str] = None


def _make_forecast_fetcher(api_key: str) -> ForecastFetcher:
    def fetch(lat, lon, query):
        return get_forecast_data(api_key, lat=lat, lon=lon, query=query)
    return fetch


def get_weather_report(query: WeatherQuery, api_key: Optional[str],
                       geocoder: Optional[Geocoder] = None,
                       forecast_fetcher: Optional[ForecastFetcher] = None,
                       tables: CityTables = DEFAULT_TABLES) -> WeatherResult:
    """
    取得一次天氣查詢的完整結果。

    Args:
        query: 天氣查詢意圖；已有 location 時跳過地理編碼。
        api_key: OpenWeatherMap 金鑰。
        geocoder / forecast_fetcher: 可替換的遠端呼叫，預設使用 OpenWeatherMap。
    """
    if not api_key:
        logger.error("WEATHER_API_KEY 未設定，無法查詢天氣。")
        return WeatherResult(None, MISSING_KEY_MESSAGE)

    geocoder = geocoder or make_geocoder(api_key)
    forecast_fetcher = forecast_fetcher or _make_forecast_fetcher(api_key)
    when = normalize_when(query.when)

    # 1. 解析地點
    location = query.location or resolve_location(query.city or DEFAULT_CITY, geocoder, tables)

    # 2. 取得預報
    if location.has_coordinates:
        payload = forecast_fetcher(location.lat, location.lon, None)
    else:
        payload = forecast_fetcher(None, None, location.query or location.display_name)

    if not payload:
        if not location.resolved:
            logger.info(f"以名稱查詢 '{location.query}' 的預報失敗，視為查無此城市。")
            return WeatherResult(None, CITY_NOT_FOUND_MESSAGE)
        return WeatherResult(None, FORECAST_ERROR_MESSAGE)

    # 3. 挑選目標日期
    samples, offset = parse_forecast_samples(payload)
    day = select_day(samples, offset, WHEN_DAY_OFFSET[when])
    if day is None:
        return WeatherResult(None, NO_SLOT_MESSAGE)

    # 4. 穿搭建議：有同日資料時以當天最高降雨機率判斷是否帶傘
    rep = day.representative
    pop = rep.precipitation_probability if day.is_fallback else day.max_precipitation_probability
    outfit = build_outfit_advice(rep.temperature, rep.feels_like, pop)

    report = WeatherReport(location=location, when=when, day=day, outfit=outfit, address=query.address)
    return WeatherResult(report)
