# maintenance/stock_listing.py
"""
下載證交所「上市個股日成交資訊」(STOCK_DAY_ALL) 的 CSV，整理成 {代號: 資料} 的對照表，
並以一次寫入取代快取中的整份表格；下載或解析失敗時保留原本的表格。
"""
import csv
import io
import logging
import re
from typing import Callable, Dict, Optional

import requests

from config import TWSE_STOCK_DAY_ALL_URL, TWSE_TABLE_CACHE_KEY
from utils.errors import UpstreamError

logger = logging.getLogger(__name__)

_LISTED_CODE = re.compile(r"^\d{4}$")

# 欄位名稱 → 表格鍵；證交所偶爾調整欄位順序，以名稱比對
_COLUMN_KEYS = {
    "證券代號": "code",
    "證券名稱": "name",
    "開盤價": "open",
    "收盤價": "close",
    "成交股數": "volume",
}


def fetch_stock_day_all() -> str:
    try:
        logger.info("正在從證交所下載上市個股日成交資訊...")
        response = requests.get(TWSE_STOCK_DAY_ALL_URL)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise UpstreamError(f"下載證交所資料失敗: {e}") from e
    response.encoding = response.encoding or "utf-8"
    return response.text


def _to_number(value: Optional[str], cast=float):
    if value is None:
        return None
    value = value.replace(",", "").strip()
    try:
        return cast(value)
    except ValueError:
        return None


def parse_stock_day_all(text: str) -> Dict[str, dict]:
    """只保留四位數代號的上市股票；欄位缺漏的數值記為 None。"""
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    header = next(reader, None)
    if not header:
        return {}

    positions = {}
    for index, column in enumerate(header):
        key = _COLUMN_KEYS.get(column.strip())
        if key:
            positions[key] = index
    positions.setdefault("code", 0)
    positions.setdefault("name", 1)

    def column(row, key):
        index = positions.get(key)
        return row[index].strip() if index is not None and index < len(row) else None

    stocks = {}
    for row in reader:
        code = column(row, "code")
        name = column(row, "name")
        if not code or not name or not _LISTED_CODE.match(code):
            continue
        stocks[code] = {
            "code": code,
            "name": name,
            "symbol": f"{code}.TW",
            "open": _to_number(column(row, "open")),
            "close": _to_number(column(row, "close")),
            "volume": _to_number(column(row, "volume"), int),
        }
    return stocks


def refresh_stock_table(cache, fetch: Callable[[], str] = fetch_stock_day_all) -> int:
    """重新整理上市股票對照表，回傳股票數量；沒有任何資料時拋出 UpstreamError 且不覆寫快取。"""
    stocks = parse_stock_day_all(fetch())
    if not stocks:
        raise UpstreamError("證交所資料中沒有任何上市股票。")
    if not cache.set_json(TWSE_TABLE_CACHE_KEY, stocks):
        raise UpstreamError("寫入上市股票對照表失敗。")
    logger.info(f"上市股票對照表已更新，共 {len(stocks)} 檔。")
    return len(stocks)
