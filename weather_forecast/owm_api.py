# weather_forecast/owm_api.py
"""
與 OpenWeatherMap 的地理編碼 (Geocoding) 與 5 天 / 3 小時預報 API 互動。
建構 API 請求並處理網路請求的發送和回應；網路錯誤、非 2xx 狀態碼或無效 JSON 一律記錄日誌後回傳空結果，
由呼叫端決定要改用下一個策略還是回覆使用者錯誤訊息。
"""
import logging
from typing import List, Optional, Tuple

import requests

from config import OWM_GEOCODE_API, OWM_FORECAST_API
from .weather_models import ForecastSample

logger = logging.getLogger(__name__)


def geocode_direct(api_key: str, query: str, limit: int = 1) -> List[dict]:
    """
    以文字查詢地點（可帶國碼，例如 "Taipei,TW"），回傳 0 或 1 筆最佳結果。
    """
    params = {"q": query, "limit": limit, "appid": api_key}
    try:
        logger.debug(f"正在查詢地理編碼：{query}")
        response = requests.get(OWM_GEOCODE_API, params=params)
        logger.debug(f"Geocoding API response status code: {response.status_code}")
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list):
            logger.warning(f"地理編碼回應格式不正確 ({query}): {data}")
            return []
        return data
    except requests.exceptions.RequestException as e:
        logger.warning(f"查詢地理編碼 {query} 時發生網路或 HTTP 錯誤: {e}")
        return []
    except ValueError as e:
        logger.warning(f"解析地理編碼回應時發生錯誤 (無效的 JSON): {e}")
        return []


def get_forecast_data(api_key: str, lat: Optional[float] = None, lon: Optional[float] = None,
                      query: Optional[str] = None) -> dict:
    """
    取得 5 天 / 3 小時的預報資料；有座標時用座標查詢，否則用「城市,國碼」字串。
    成功時回傳原始 JSON 字典，失敗回傳空字典。
    """
    params = {"units": "metric", "lang": "zh_tw", "appid": api_key}
    if lat is not None and lon is not None:
        params.update({"lat": lat, "lon": lon})
        target = f"({lat}, {lon})"
    else:
        params["q"] = query
        target = query

    try:
        logger.info(f"正在從 OpenWeatherMap 取得 {target} 的預報資料...")
        response = requests.get(OWM_FORECAST_API, params=params)
        logger.debug(f"Forecast API response status code: {response.status_code}")
        response.raise_for_status()
        data = response.json()
        logger.info(f"成功取得 {target} 的預報資料。")
        return data
    except requests.exceptions.RequestException as e:
        logger.error(f"取得 {target} 預報資料時發生網路或 HTTP 錯誤: {e}")
        return {}
    except ValueError as e:
        logger.error(f"解析預報 API 回應時發生錯誤 (無效的 JSON): {e}")
        return {}


def _as_float(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_forecast_samples(payload: dict) -> Tuple[List[ForecastSample], int]:
    """
    將預報 API 的原始 JSON 轉成 ForecastSample 清單與當地時區位移（秒）。
    缺少時間戳的項目會被略過；其餘缺欄位保留為 None。
    """
    offset = (payload.get("city") or {}).get("timezone") or 0
    samples = []
    for item in payload.get("list") or []:
        dt = item.get("dt")
        if not isinstance(dt, int):
            continue
        main = item.get("main") or {}
        weather = item.get("weather") or [{}]
        samples.append(ForecastSample(
            epoch_seconds=dt,
            temperature=_as_float(main.get("temp")),
            feels_like=_as_float(main.get("feels_like")),
            humidity=_as_float(main.get("humidity")),
            description=(weather[0] or {}).get("description"),
            precipitation_probability=_as_float(item.get("pop")),
        ))
    samples.sort(key=lambda s: s.epoch_seconds)
    return samples, int(offset)
