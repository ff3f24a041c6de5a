# weather_forecast/geocode_resolver.py
"""
把城市字串解析成座標。
解析策略依序排列在 RESOLUTION_STRATEGIES，由 first_success 逐一嘗試，第一個成功的結果勝出：
1. 離島對照表（不需要網路，一般地理編碼常解析錯誤）。
2. 字串含空白時（「國家 城市」或「城市 國家」），直接以原字串查詢。
3. 國家提示表命中時，以「城市,國碼」查詢。
4. 台灣縣市表命中時，以「城市,TW」查詢，避免跑到其他國家的同名地點。
5. 不加任何限定詞，直接查詢原字串。
每個遠端策略遇到 HTTP 錯誤或空結果時只回傳 None，交給下一個策略。
全部失敗時回傳「未解析」的地點，讓預報服務直接以城市名稱查詢。
"""
import logging
from functools import partial
from typing import Callable, List, Optional, Sequence

from config import DEFAULT_COUNTRY_CODE
from .city_tables import CityTables, DEFAULT_TABLES
from .owm_api import geocode_direct
from .weather_models import ResolvedLocation

logger = logging.getLogger(__name__)

# 地理編碼函式：查詢字串 → 0 或 1 筆結果
Geocoder = Callable[[str], List[dict]]
Strategy = Callable[[str, Geocoder, CityTables], Optional[ResolvedLocation]]


def make_geocoder(api_key: str) -> Geocoder:
    return partial(geocode_direct, api_key)


def _location_from_geo(geo: dict, fallback_name: str) -> Optional[ResolvedLocation]:
    lat, lon = geo.get("lat"), geo.get("lon")
    if lat is None or lon is None:
        return None
    local_names = geo.get("local_names") or {}
    name = local_names.get("zh_tw") or local_names.get("zh") or geo.get("name") or fallback_name
    return ResolvedLocation(display_name=name, lat=float(lat), lon=float(lon))


def _geocode_first(geocoder: Geocoder, query: str, fallback_name: str) -> Optional[ResolvedLocation]:
    results = geocoder(query)
    if not results:
        logger.debug(f"地理編碼查無結果：{query}")
        return None
    return _location_from_geo(results[0], fallback_name)


# --- 解析策略 ---
def resolve_island(city: str, geocoder: Geocoder, tables: CityTables) -> Optional[ResolvedLocation]:
    island = tables.find_island(city)
    if not island:
        return None
    return ResolvedLocation(display_name=island.name, lat=island.lat, lon=island.lon, is_island=True)


def resolve_literal_with_space(city: str, geocoder: Geocoder, tables: CityTables) -> Optional[ResolvedLocation]:
    if " " not in city.strip():
        return None
    return _geocode_first(geocoder, city.strip(), city)


def resolve_country_hint(city: str, geocoder: Geocoder, tables: CityTables) -> Optional[ResolvedLocation]:
    hinted = tables.find_country_hint(city)
    if not hinted:
        return None
    return _geocode_first(geocoder, hinted, city)


def _taiwan_canonical(city: str, tables: CityTables) -> Optional[str]:
    key = city.strip()
    if key in tables.tw_cities:
        return tables.tw_cities[key]
    for canonical in tables.canonical_tw_cities:
        if canonical.lower() == key.lower():
            return canonical
    return None


def resolve_taiwan_city(city: str, geocoder: Geocoder, tables: CityTables) -> Optional[ResolvedLocation]:
    canonical = _taiwan_canonical(city, tables)
    if not canonical:
        return None
    return _geocode_first(geocoder, f"{canonical},{DEFAULT_COUNTRY_CODE}", canonical)


def resolve_bare(city: str, geocoder: Geocoder, tables: CityTables) -> Optional[ResolvedLocation]:
    return _geocode_first(geocoder, city.strip(), city)


RESOLUTION_STRATEGIES: Sequence[Strategy] = (
    resolve_island,
    resolve_literal_with_space,
    resolve_country_hint,
    resolve_taiwan_city,
    resolve_bare,
)


def first_success(city: str, geocoder: Geocoder, tables: CityTables,
                  strategies: Sequence[Strategy] = RESOLUTION_STRATEGIES) -> Optional[ResolvedLocation]:
    """依序執行策略，回傳第一個成功的結果。"""
    for strategy in strategies:
        location = strategy(city, geocoder, tables)
        if location is not None:
            logger.info(f"城市 '{city}' 由 {strategy.__name__} 解析為 {location.display_name} ({location.lat}, {location.lon})")
            return location
    return None


def unresolved_location(city: str, tables: CityTables = DEFAULT_TABLES) -> ResolvedLocation:
    """
    所有策略都失敗時，直接用原始城市名稱作為預報服務的查詢字串；台灣地點會加上預設國碼。
    """
    canonical = _taiwan_canonical(city, tables)
    if canonical:
        query = f"{canonical},{DEFAULT_COUNTRY_CODE}"
    else:
        query = city.strip()
    return ResolvedLocation(display_name=city.strip(), query=query, resolved=False)


def resolve_location(city: str, geocoder: Geocoder, tables: CityTables = DEFAULT_TABLES) -> ResolvedLocation:
    """解析城市的座標；一定會回傳可以交給預報服務查詢的地點。"""
    location = first_success(city, geocoder, tables)
    if location is not None:
        return location
    logger.info(f"城市 '{city}' 無法透過地理編碼解析，改以名稱直接查詢預報。")
    return unresolved_location(city, tables)
