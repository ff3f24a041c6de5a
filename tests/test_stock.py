import datetime

import pytest

from config import TWSE_TABLE_CACHE_KEY
from handlers.intents import SOURCE_USER, IncomingMessage, StockQuote
from maintenance.jobs import run_maintenance
from maintenance.stock_listing import parse_stock_day_all, refresh_stock_table
from stock.stock_handler import NOT_FOUND_MESSAGE, format_quote, handle_stock
from stock.stock_quote_api import Quote, parse_quote
from stock.stock_symbols import StockSymbol, clean_stock_query, resolve_symbol
from utils.cache_manager import MemoryCache
from utils.errors import UpstreamError

from tests.fakes import FakeLLM, make_services

MESSAGE = IncomingMessage(source_kind=SOURCE_USER, user_id="U1", reply_token="rt")

TABLE = {
    "2330": {"code": "2330", "name": "台積電", "symbol": "2330.TW", "open": 580.0, "close": 585.0, "volume": 25000000},
    "2317": {"code": "2317", "name": "鴻海", "symbol": "2317.TW", "open": 105.0, "close": 104.5, "volume": 30000000},
}

TWSE_CSV = (
    '\ufeff"證券代號","證券名稱","成交股數","成交金額","開盤價","最高價","最低價","收盤價","漲跌價差","成交筆數"\n'
    '"0050","元大台灣50","5,000,000","700,000,000","140.00","141.00","139.50","140.50","0.50","3000"\n'
    '"00878","國泰永續高股息","9,000,000","200,000,000","22.00","22.10","21.90","22.05","0.05","5000"\n'
    '"2330","台積電","25,000,000","14,600,000,000","580.00","586.00","579.00","585.00","5.00","40000"\n'
    '"2317","鴻海","30,000,000","3,100,000,000","105.00","105.50","104.00","--","-0.50","20000"\n'
)


@pytest.mark.parametrize("query, symbol", [
    ("2330", "2330.TW"),
    ("台積電", "2330.TW"),
    ("台積", "2330.TW"),
    ("aapl", "AAPL"),
    ("00878", "00878.TW"),
])
def test_resolve_symbol(query, symbol):
    assert resolve_symbol(query, TABLE).symbol == symbol


def test_resolve_symbol_unknown_name():
    assert resolve_symbol("不存在的公司", TABLE) is None
    assert resolve_symbol("", TABLE) is None


def test_clean_stock_query():
    assert clean_stock_query("幫我查台積電股價") == "台積電"
    assert clean_stock_query("2330 現在多少？") == "2330"


def test_parse_quote_uses_latest_non_null_close():
    payload = {"chart": {"result": [{
        "meta": {"symbol": "2330.TW", "currency": "TWD", "chartPreviousClose": 580.0},
        "indicators": {"quote": [{"close": [578.0, None, 585.0, None], "open": [575.0, 582.0], "volume": [100, None]}]},
    }]}}
    quote = parse_quote("2330.TW", payload)
    assert quote.price == 585.0
    assert quote.previous_close == 580.0
    assert quote.open == 582.0
    assert quote.volume == 100
    assert quote.change == pytest.approx(5.0)


@pytest.mark.parametrize("payload", [{}, {"chart": {"result": None}}, {"chart": {"result": [{"meta": {}}]}}])
def test_parse_quote_without_price(payload):
    assert parse_quote("AAPL", payload) is None


def test_stock_reply_with_live_quote():
    services = make_services(quote_fetcher=lambda symbol: Quote(symbol=symbol, price=590.0, previous_close=585.0))
    services.cache.set_json(TWSE_TABLE_CACHE_KEY, TABLE)
    text = handle_stock(StockQuote(query="台積電"), MESSAGE, services)[0].text
    assert "台積電（2330.TW）" in text
    assert "現價：590.00" in text
    assert "+5.00" in text


def test_format_quote_without_usable_previous_close():
    quote = Quote(symbol="X.TW", price=10.0, previous_close=0.0)
    assert quote.change is None
    text = format_quote(StockSymbol("X.TW", "X", "X"), quote)
    assert "現價：10.00" in text
    assert "漲跌" not in text


def test_stock_reply_with_zero_previous_close():
    services = make_services(quote_fetcher=lambda symbol: Quote(symbol=symbol, price=590.0, previous_close=0.0))
    services.cache.set_json(TWSE_TABLE_CACHE_KEY, TABLE)
    text = handle_stock(StockQuote(query="2330"), MESSAGE, services)[0].text
    assert "現價：590.00" in text


def test_stock_reply_falls_back_to_end_of_day_table():
    services = make_services(quote_fetcher=lambda symbol: None)
    services.cache.set_json(TWSE_TABLE_CACHE_KEY, TABLE)
    text = handle_stock(StockQuote(query="2317"), MESSAGE, services)[0].text
    assert "收盤：104.50" in text


def test_stock_reply_not_found():
    services = make_services(quote_fetcher=lambda symbol: None)
    text = handle_stock(StockQuote(query="不存在的公司"), MESSAGE, services)[0].text
    assert text == NOT_FOUND_MESSAGE.format(query="不存在的公司")


def test_parse_stock_day_all_keeps_listed_four_digit_codes():
    stocks = parse_stock_day_all(TWSE_CSV)
    assert set(stocks) == {"0050", "2330", "2317"}
    assert stocks["2330"] == {
        "code": "2330", "name": "台積電", "symbol": "2330.TW",
        "open": 580.0, "close": 585.0, "volume": 25000000,
    }
    assert stocks["2317"]["close"] is None


def test_refresh_stock_table_replaces_table_in_one_write():
    cache = MemoryCache()
    cache.set_json(TWSE_TABLE_CACHE_KEY, {"9999": {"code": "9999", "name": "舊資料"}})
    assert refresh_stock_table(cache, fetch=lambda: TWSE_CSV) == 3
    assert set(cache.get_json(TWSE_TABLE_CACHE_KEY)) == {"0050", "2330", "2317"}


def test_refresh_stock_table_keeps_old_table_when_download_is_empty():
    cache = MemoryCache()
    cache.set_json(TWSE_TABLE_CACHE_KEY, TABLE)
    with pytest.raises(UpstreamError):
        refresh_stock_table(cache, fetch=lambda: "")
    assert cache.get_json(TWSE_TABLE_CACHE_KEY) == TABLE


def test_run_maintenance_pregenerates_tomorrow():
    reading = {"summary": "s", "love": "l", "career": "c", "money": "m", "lucky_color": "紅色",
               "lucky_number": 3, "score": 4}
    services = make_services(FakeLLM(json_reply=reading))
    result = run_maintenance(services, fetch=lambda: TWSE_CSV, today=datetime.date(2024, 5, 1))
    assert result == {"ok": True, "count": 3, "horoscopes": 12, "horoscope_date": "2024-05-02"}


def test_listed_company_name_with_how_much_is_a_stock_query():
    services = make_services()
    services.cache.set_json(TWSE_TABLE_CACHE_KEY, TABLE)
    message = IncomingMessage(source_kind=SOURCE_USER, user_id="U1", reply_token="rt", text="台積電多少")
    assert services.router.route(message) == StockQuote(query="台積電")
    assert services.llm.calls == []


def test_unlisted_name_with_how_much_is_not_a_stock_query():
    services = make_services()
    services.cache.set_json(TWSE_TABLE_CACHE_KEY, TABLE)
    message = IncomingMessage(source_kind=SOURCE_USER, user_id="U1", reply_token="rt", text="這件衣服多少")
    assert not isinstance(services.router.route(message), StockQuote)
