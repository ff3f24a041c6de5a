# stock/stock_handler.py
"""
股票報價：解析代號 → 取得即時報價 → 組成文字回覆。
即時報價失敗時，若上市股票對照表中有最近一次的收盤價，改回覆收盤資料。
"""
import logging
from typing import List, Optional

from linebot.v3.messaging.models import Message

from config import TWSE_TABLE_CACHE_KEY
from handlers.intents import IncomingMessage, StockQuote
from utils.message_builder import format_text_message
from .stock_quote_api import Quote, get_quote
from .stock_symbols import StockSymbol, resolve_symbol

logger = logging.getLogger(__name__)

EMPTY_QUERY_MESSAGE = "想查哪一支股票？可以輸入代號或公司名稱，例如「2330 股價」。"
NOT_FOUND_MESSAGE = "找不到「{query}」這支股票，請確認代號或名稱。"
FAILURE_MESSAGE = "暫時查不到 {name} 的報價，等等再試一次。"


def _fmt_number(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{value:,.2f}"


def format_quote(stock: StockSymbol, quote: Quote) -> str:
    name = stock.name if stock.name != stock.symbol else (quote.name or stock.name)
    lines = [f"【{name}（{quote.symbol}）】", f"現價：{_fmt_number(quote.price)} {quote.currency or ''}".rstrip()]
    if quote.change is not None and quote.change_percent is not None:
        sign = "+" if quote.change >= 0 else ""
        lines.append(f"漲跌：{sign}{quote.change:,.2f}（{sign}{quote.change_percent:.2f}%）")
    if quote.open is not None:
        lines.append(f"開盤：{_fmt_number(quote.open)}")
    if quote.volume is not None:
        lines.append(f"成交量：{quote.volume:,}")
    return "\n".join(lines)


def format_end_of_day(stock: StockSymbol, entry: dict) -> Optional[str]:
    close = entry.get("close")
    if close is None:
        return None
    lines = [f"【{stock.name}（{stock.symbol}）】", "即時報價暫時無法取得，以下為最近一個交易日的收盤資料：",
             f"收盤：{_fmt_number(close)}"]
    if entry.get("open") is not None:
        lines.append(f"開盤：{_fmt_number(entry['open'])}")
    if entry.get("volume") is not None:
        lines.append(f"成交股數：{entry['volume']:,}")
    return "\n".join(lines)


def handle_stock(intent: StockQuote, message: IncomingMessage, services) -> List[Message]:
    if not intent.query:
        return [format_text_message(EMPTY_QUERY_MESSAGE)]

    table = services.cache.get_json(TWSE_TABLE_CACHE_KEY) or {}
    stock = resolve_symbol(intent.query, table)
    if stock is None:
        logger.info(f"無法解析股票查詢 '{intent.query}'。")
        return [format_text_message(NOT_FOUND_MESSAGE.format(query=intent.query))]

    fetch = services.quote_fetcher or get_quote
    quote = fetch(stock.symbol)
    if quote is not None:
        return [format_text_message(format_quote(stock, quote))]

    fallback = format_end_of_day(stock, table.get(stock.code) or {}) if stock.code else None
    if fallback:
        logger.info(f"{stock.symbol} 即時報價失敗，改用收盤資料回覆。")
        return [format_text_message(fallback)]
    return [format_text_message(FAILURE_MESSAGE.format(name=stock.name))]
