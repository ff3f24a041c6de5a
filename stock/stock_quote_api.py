# stock/stock_quote_api.py
"""
從 Yahoo Finance chart API 取得即時（或最近一個交易日）的報價。
回應中任何欄位都可能缺漏：價格優先取 meta.regularMarketPrice，沒有時取最後一個非空的收盤價。
"""
import logging
from typing import List, NamedTuple, Optional

import requests

from config import YAHOO_CHART_API

logger = logging.getLogger(__name__)

# Yahoo 會拒絕沒有 User-Agent 的請求
REQUEST_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; line-weather-bot)"}


class Quote(NamedTuple):
    symbol: str
    price: float
    previous_close: Optional[float] = None
    open: Optional[float] = None
    volume: Optional[int] = None
    currency: Optional[str] = None
    name: Optional[str] = None

    # 前一日收盤為 0 或缺漏時視為沒有漲跌資料
    @property
    def change(self) -> Optional[float]:
        if not self.previous_close:
            return None
        return self.price - self.previous_close

    @property
    def change_percent(self) -> Optional[float]:
        if not self.previous_close:
            return None
        return (self.price - self.previous_close) / self.previous_close * 100


def fetch_chart(symbol: str) -> dict:
    url = f"{YAHOO_CHART_API}{symbol}"
    params = {"interval": "1d", "range": "5d"}
    try:
        logger.info(f"正在從 Yahoo Finance 取得 {symbol} 的報價...")
        response = requests.get(url, params=params, headers=REQUEST_HEADERS)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        logger.warning(f"取得 {symbol} 報價時發生網路或 HTTP 錯誤: {e}")
        return {}
    except ValueError as e:
        logger.warning(f"解析 {symbol} 報價回應時發生錯誤 (無效的 JSON): {e}")
        return {}


def _last_present(values: Optional[List]) -> Optional[float]:
    for value in reversed(values or []):
        if value is not None:
            return float(value)
    return None


def parse_quote(symbol: str, payload: dict) -> Optional[Quote]:
    """從 chart 回應中取出報價；連價格都沒有時回傳 None。"""
    results = ((payload or {}).get("chart") or {}).get("result") or []
    if not results:
        return None
    result = results[0] or {}
    meta = result.get("meta") or {}
    quotes = ((result.get("indicators") or {}).get("quote") or [{}])
    quote = quotes[0] or {}

    price = meta.get("regularMarketPrice")
    if price is None:
        price = _last_present(quote.get("close"))
    if price is None:
        return None

    previous = meta.get("chartPreviousClose")
    if previous is None:
        previous = meta.get("previousClose")
    volume = meta.get("regularMarketVolume")
    if volume is None:
        volume = _last_present(quote.get("volume"))

    return Quote(
        symbol=meta.get("symbol") or symbol,
        price=float(price),
        previous_close=float(previous) if previous is not None else None,
        open=_last_present(quote.get("open")),
        volume=int(volume) if volume is not None else None,
        currency=meta.get("currency"),
        name=meta.get("shortName") or meta.get("longName"),
    )


def get_quote(symbol: str) -> Optional[Quote]:
    return parse_quote(symbol, fetch_chart(symbol))
