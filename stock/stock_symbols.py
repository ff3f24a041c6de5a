# stock/stock_symbols.py
"""
把使用者輸入的股票查詢字串（代號、公司名稱或美股代碼）轉成報價服務可用的代碼。
上市公司名稱對照表由排程任務從證交所下載後放在快取中。
"""
import re
from typing import Mapping, NamedTuple, Optional

_QUERY_NOISE = (
    "多少錢一股", "多少钱一股", "股價", "股价", "報價", "报价", "股票", "現在", "现在",
    "多少錢", "多少钱", "多少", "查詢", "查询", "查一下", "幫我查", "帮我查", "今天", "今日",
    "的", "?", "？", "!", "！",
)
_TW_CODE = re.compile(r"^\d{4,6}[A-Z]?$")
_FOREIGN_TICKER = re.compile(r"^[A-Za-z][A-Za-z.\-]{0,9}$")


class StockSymbol(NamedTuple):
    symbol: str
    name: str
    code: Optional[str] = None


def clean_stock_query(text: str) -> str:
    query = text or ""
    for word in _QUERY_NOISE:
        query = query.replace(word, " ")
    return " ".join(query.split())


def resolve_symbol(query: str, table: Optional[Mapping[str, dict]] = None) -> Optional[StockSymbol]:
    """
    依序嘗試：台股代號 → 上市公司名稱 → 外國股票代碼。
    table 為 {代號: {"code", "name", "symbol", ...}}，沒有對照表時只能查代號。
    """
    query = (query or "").strip()
    if not query:
        return None
    table = table or {}

    if _TW_CODE.match(query):
        entry = table.get(query) or {}
        return StockSymbol(symbol=entry.get("symbol") or f"{query}.TW", name=entry.get("name") or query, code=query)

    # 名稱完全相同優先，其次是名稱包含查詢字串
    for code, entry in table.items():
        if entry.get("name") == query:
            return StockSymbol(symbol=entry.get("symbol") or f"{code}.TW", name=entry["name"], code=code)
    for code, entry in table.items():
        name = entry.get("name") or ""
        if name and (query in name or name in query):
            return StockSymbol(symbol=entry.get("symbol") or f"{code}.TW", name=name, code=code)

    if _FOREIGN_TICKER.match(query):
        return StockSymbol(symbol=query.upper(), name=query.upper())
    return None
