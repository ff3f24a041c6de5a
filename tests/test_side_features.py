import datetime
import random

import pytest
from linebot.v3.messaging.models import FlexMessage, TextMessage

from calorie.calorie_handler import FAILURE_MESSAGE, NO_ITEMS_MESSAGE, handle_calorie, validate_estimate
from calorie.food_parser import extract_food_items
from divination.divination_handler import build_lot_flex, draw_lot, format_lot_text, handle_divination
from divination.lots import LOTS
from handlers.default import APOLOGY_MESSAGE, handle_general_chat
from handlers.intents import (
    SOURCE_USER, CalorieEstimate, Divination, GeneralChat, Horoscope, IncomingMessage, VerseCard,
)
from horoscope.horoscope_handler import handle_horoscope
from horoscope.horoscope_service import cache_key, fallback_reading, get_reading, pregenerate, validate_reading
from horoscope.horoscope_signs import find_sign
from utils.errors import ConfigurationError, LLMParseError, UpstreamError
from utils.cache_manager import MemoryCache
from verse_card import bible_api
from verse_card.verse_card_handler import handle_verse_card, verse_text
from verse_card.verses import VERSES

from tests.fakes import FakeLLM, make_services

MESSAGE = IncomingMessage(source_kind=SOURCE_USER, user_id="U1", reply_token="rt")
DAY = datetime.date(2024, 5, 1)

CALORIE_JSON = {
    "items": [{"name": "雞排", "min": 500, "max": 650}, {"name": "珍奶", "min": 450, "max": 350}],
    "total_min": 850,
    "total_max": 1000,
    "note": "記得多喝水。",
}

READING_JSON = {
    "summary": "今天適合主動聯絡老朋友。",
    "love": "坦白說出想法。",
    "career": "專注完成手邊的工作。",
    "money": "小額進帳。",
    "lucky_color": "綠色",
    "lucky_number": 7,
    "score": 9,
}


# --- 抽籤 ---
def test_draw_lot_uses_injected_rng():
    assert draw_lot(random.Random(1)) == draw_lot(random.Random(1))
    assert draw_lot(random.Random(1)) in LOTS


def test_lot_card_and_text():
    lot = LOTS[0]
    assert lot.poem[0] in format_lot_text(lot)
    assert build_lot_flex(lot).alt_text == "第 1 籤｜上上籤"


def test_handle_divination_replies_with_card():
    messages = handle_divination(Divination(), MESSAGE, make_services())
    assert len(messages) == 1
    assert isinstance(messages[0], FlexMessage)


# --- 熱量估算 ---
def test_extract_food_items():
    assert extract_food_items("我吃了雞排、珍奶跟滷肉飯 熱量多少") == ("雞排", "珍奶", "滷肉飯")
    assert extract_food_items("和牛漢堡熱量") == ("和牛漢堡",)
    assert extract_food_items("") == ()


def test_validate_estimate_orders_ranges_and_fills_totals():
    estimate = validate_estimate({"items": CALORIE_JSON["items"]})
    assert estimate["items"][1] == {"name": "珍奶", "min": 350, "max": 450}
    assert (estimate["total_min"], estimate["total_max"]) == (850, 1100)
    assert estimate["note"] is None


@pytest.mark.parametrize("data", [{}, {"items": []}, {"items": [{"name": "雞排"}]}, {"items": ["雞排"]}])
def test_validate_estimate_rejects_bad_output(data):
    with pytest.raises(LLMParseError):
        validate_estimate(data)


def test_calorie_estimate_is_cached_per_food_list():
    llm = FakeLLM(json_reply=CALORIE_JSON)
    services = make_services(llm)
    intent = CalorieEstimate(items=("雞排", "珍奶"))

    first = handle_calorie(intent, MESSAGE, services)
    second = handle_calorie(CalorieEstimate(items=("珍奶", "雞排")), MESSAGE, services)

    assert "總計：約 850～1000 大卡" in first[0].text
    assert second[0].text == first[0].text
    assert len(llm.calls) == 1


def test_calorie_parse_failure_gets_generic_reply():
    services = make_services(FakeLLM(json_reply={"items": "oops"}))
    messages = handle_calorie(CalorieEstimate(items=("雞排",)), MESSAGE, services)
    assert messages[0].text == FAILURE_MESSAGE


def test_calorie_without_items():
    messages = handle_calorie(CalorieEstimate(items=()), MESSAGE, make_services())
    assert messages[0].text == NO_ITEMS_MESSAGE


def test_calorie_missing_key_message():
    services = make_services(FakeLLM(error=ConfigurationError("後端沒有設定 OPENAI_API_KEY")))
    messages = handle_calorie(CalorieEstimate(items=("雞排",)), MESSAGE, services)
    assert "OPENAI_API_KEY" in messages[0].text


# --- 星座運勢 ---
@pytest.mark.parametrize("text, sign", [("獅子座", "leo"), ("狮子座今天", "leo"), ("魔羯座運勢", "capricorn"), ("獅子", None)])
def test_find_sign(text, sign):
    assert find_sign(text) == sign


def test_validate_reading_clamps_score():
    assert validate_reading(READING_JSON)["score"] == 5


def test_reading_is_cached_per_sign_and_date():
    llm = FakeLLM(json_reply=READING_JSON)
    cache = MemoryCache()
    first = get_reading("leo", DAY, llm, cache)
    second = get_reading("leo", DAY, llm, cache)
    assert first == second
    assert len(llm.calls) == 1
    assert cache.get_json(cache_key("leo", DAY)) == first


def test_parse_failure_uses_deterministic_fallback():
    llm = FakeLLM(json_reply={"summary": ""})
    cache = MemoryCache()
    reading = get_reading("leo", DAY, llm, cache)
    assert reading == fallback_reading("leo", DAY)
    assert reading == get_reading("leo", DAY, llm, cache)
    assert cache.get_json(cache_key("leo", DAY)) is None


def test_upstream_failure_is_raised():
    with pytest.raises(UpstreamError):
        get_reading("leo", DAY, FakeLLM(error=UpstreamError("down")), MemoryCache())


def test_pregenerate_fills_all_signs():
    cache = MemoryCache()
    assert pregenerate(DAY, FakeLLM(json_reply=READING_JSON), cache) == 12
    assert cache.get_json(cache_key("pisces", DAY))["lucky_color"] == "綠色"


def test_handle_horoscope_replies_with_card():
    messages = handle_horoscope(Horoscope(sign="leo", when="tomorrow"), MESSAGE, make_services(FakeLLM(json_reply=READING_JSON)))
    assert isinstance(messages[0], FlexMessage)
    assert messages[0].alt_text == "獅子座明日運勢"


# --- 經文卡片 ---
def test_verse_text_falls_back_to_bundled_text():
    verse = VERSES[0]
    assert verse_text(verse, fetcher=lambda ref: None) == verse.text
    assert verse_text(verse, fetcher=lambda ref: "API 經文") == "API 經文"


def test_fetch_verse_text_joins_spaced_characters(monkeypatch):
    class _Response:
        def raise_for_status(self):
            pass

        def json(self):
            return {"reference": "John 3:16", "text": "神 愛 世 人 ，\n甚 至"}

    monkeypatch.setattr(bible_api.requests, "get", lambda *args, **kwargs: _Response())
    assert bible_api.fetch_verse_text("john 3:16") == "神愛世人，甚至"


def test_handle_verse_card():
    services = make_services(verse_fetcher=lambda ref: None)
    messages = handle_verse_card(VerseCard(), MESSAGE, services)
    assert isinstance(messages[0], FlexMessage)


# --- 一般聊天 ---
def test_general_chat_reply():
    messages = handle_general_chat(GeneralChat(text="嗨"), MESSAGE, make_services(FakeLLM(chat_reply="嗨嗨")))
    assert isinstance(messages[0], TextMessage)
    assert messages[0].text == "嗨嗨"


def test_general_chat_apologizes_when_model_fails():
    services = make_services(FakeLLM(error=UpstreamError("timeout")))
    messages = handle_general_chat(GeneralChat(text="嗨"), MESSAGE, services)
    assert messages[0].text == APOLOGY_MESSAGE
