# handlers/intent_router.py
"""
文字訊息的意圖路由器。
依照固定的優先順序判斷訊息意圖，第一個符合的規則勝出：
1. 存取閘門：群組 / 聊天室中，只有真的 @ 機器人或以機器人名字開頭的訊息才處理，其餘靜默忽略。
2. 追問：「那明天呢」這類只有相對日期的訊息，且有上一次查詢的地點時，沿用該地點。
3. 快速天氣比對：含有天氣關鍵字與台灣地名時直接判定為天氣查詢，不呼叫語言模型。
4. 固定關鍵字功能：抽籤、熱量估算、股票報價、星座運勢、經文卡片。
5. 語言模型意圖判斷：模型回覆 `WEATHER|城市|when` 時視為天氣查詢。
6. 其餘訊息交給一般聊天。
"""
import logging
import re
from typing import Callable, Mapping, Optional, Sequence, Tuple

from weather_forecast.city_tables import CityTables, DEFAULT_TABLES
from weather_forecast.city_normalizer import normalize_city, normalize_when, detect_when
from horoscope.horoscope_signs import find_sign
from calorie.food_parser import extract_food_items
from stock.stock_symbols import clean_stock_query
from utils.context_store import ContextStore
from utils.errors import BotError

from .intents import (
    IncomingMessage, WeatherQuery, Divination, CalorieEstimate, StockQuote,
    Horoscope, VerseCard, GeneralChat, Ignored,
)

logger = logging.getLogger(__name__)

DEFAULT_CITY = "Taipei"
MAX_MODEL_CITY_LENGTH = 40

# --- 追問：只有「(那) 今天/明天/後天 (呢)」---
FOLLOW_UP_PATTERN = re.compile(
    r"^(?:那|那麼|那么|還有|还有|然後|然后|and)?\s*"
    r"(今天|今日|明天|明日|後天|后天|後日|today|tomorrow|day after)\s*"
    r"(?:的)?(?:天氣|天气)?\s*(?:呢|咧|勒|如何|怎麼樣|怎么样|呀)?\s*[?？]?\s*$",
    re.IGNORECASE,
)

# 「熱量」「熱門」的熱不算天氣關鍵字
WEATHER_KEYWORD_PATTERN = re.compile(
    r"(天氣|天气|氣溫|气温|溫度|温度|下雨|降雨|雨|冷|熱(?!量|門)|热(?!量|门)|幾度|几度"
    r"|(?<![A-Za-z])(?:weather|rain|temperature)(?![A-Za-z]))",
    re.IGNORECASE,
)

DIVINATION_KEYWORDS = ("抽籤", "抽签", "求籤", "求签", "靈籤", "灵签", "抽一支籤")
CALORIE_PATTERN = re.compile(r"(熱量|热量|卡路里|大卡|kcal|calorie)", re.IGNORECASE)
ATE_PREFIXES = ("我吃了", "我剛吃了", "我刚吃了", "今天吃了", "剛剛吃了", "刚刚吃了", "吃了")
STOCK_PATTERN = re.compile(r"(股價|股价|報價|报价|股票)")
STOCK_HOW_MUCH_PATTERN = re.compile(r"^\s*(\d{4,6}[A-Z]?|[A-Za-z]{1,5})\s*(現在|现在)?\s*多少")
STOCK_NAME_HOW_MUCH_PATTERN = re.compile(r"^\s*(\S+?)\s*(?:現在|现在)?\s*多少")
VERSE_KEYWORDS = ("經文", "经文", "聖經", "圣经", "金句", "verse")

Detector = Callable[[IncomingMessage, str], Optional[object]]


def parse_weather_intent(raw: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    解析語言模型的意圖回覆 `WEATHER|城市|when`。
    不是 WEATHER 開頭（包含 NO、空字串、格式錯誤）時回傳 None；城市缺漏或過長時使用預設城市，when 不在允許值內時視為 today。
    """
    if not raw or not isinstance(raw, str):
        return None
    text = raw.strip().strip("`").strip()
    if not text:
        return None
    first_line = text.splitlines()[0].strip()
    parts = [part.strip() for part in first_line.split("|")]
    if parts[0].upper() != "WEATHER":
        return None

    city = parts[1] if len(parts) > 1 else ""
    if not city or len(city) > MAX_MODEL_CITY_LENGTH:
        city = DEFAULT_CITY
    when = normalize_when(parts[2]) if len(parts) > 2 and parts[2] else normalize_when(None)
    return city, when


def remove_mention_spans(text: str, spans: Sequence[Tuple[int, int]]) -> str:
    """依 LINE mention 的 (index, length) 切掉機器人自己的 @名稱，其他人的 mention 保留。"""
    for index, length in sorted(spans, reverse=True):
        if 0 <= index < len(text) and length > 0:
            text = text[:index] + text[index + length:]
    return text


class IntentRouter:
    """把一則訊息轉成一個意圖；本身不發送任何回覆。"""

    def __init__(self, context_store: ContextStore, llm, tables: CityTables = DEFAULT_TABLES,
                 bot_user_id: str = "", name_prefixes: Sequence[str] = (),
                 stock_table: Optional[Callable[[], Mapping[str, dict]]] = None):
        self._context_store = context_store
        self._llm = llm
        self._tables = tables
        self.bot_user_id = bot_user_id
        # 上市公司名稱對照表的讀取函式，沒有時只認代號與英文代碼
        self._stock_table = stock_table
        # 較長的名字先比對，「@KevinBot」不會被「Kevin」截斷
        self._name_prefixes = tuple(sorted((p for p in name_prefixes if p), key=len, reverse=True))
        self._place_tokens = self._build_place_tokens(tables)
        self._detectors: Sequence[Detector] = (
            self._detect_follow_up,
            self._detect_fast_weather,
            self._detect_divination,
            self._detect_calorie,
            self._detect_stock,
            self._detect_horoscope,
            self._detect_verse,
            self._detect_model_weather,
        )

    @staticmethod
    def _build_place_tokens(tables: CityTables) -> Tuple[str, ...]:
        # 離島優先於縣市名稱；同一組內較長的先比對，順序固定
        islands = sorted(dict.fromkeys(tables.islands), key=len, reverse=True)
        cities = sorted(dict.fromkeys(tables.tw_cities), key=len, reverse=True)
        return tuple(dict.fromkeys(islands + cities))

    # --- 路由入口 ---
    def route(self, message: IncomingMessage):
        text = self._pass_access_gate(message)
        if text is None:
            logger.debug(f"群組訊息未呼叫機器人，忽略 (group={message.group_id})")
            return Ignored("not addressed to bot")
        if not text:
            return Ignored("empty text")

        for detector in self._detectors:
            intent = detector(message, text)
            if intent is not None:
                logger.info(f"訊息 '{text}' 由 {detector.__name__} 判定為 {intent}")
                return intent
        return GeneralChat(text=text)

    # --- 1. 存取閘門 ---
    def _pass_access_gate(self, message: IncomingMessage) -> Optional[str]:
        """回傳去掉呼叫名稱後的文字；群組中沒有呼叫機器人時回傳 None。"""
        text = (message.text or "").strip()
        if not message.is_multi_party:
            return text

        for prefix in self._name_prefixes:
            if text.startswith(prefix):
                return text[len(prefix):].strip()

        if message.mentions_bot:
            return remove_mention_spans(message.text or "", message.mention_spans).strip()
        return None

    # --- 2. 追問 ---
    def _detect_follow_up(self, message: IncomingMessage, text: str):
        match = FOLLOW_UP_PATTERN.match(text)
        if not match or not message.user_id:
            return None
        context = self._context_store.get(message.user_id)
        if context is None:
            return None
        location = context.last_location
        return WeatherQuery(city=location.display_name, when=normalize_when(match.group(1)), location=location)

    # --- 3. 快速天氣比對 ---
    def find_place_token(self, text: str) -> Optional[str]:
        for token in self._place_tokens:
            if token.isascii():
                if re.search(rf"(?<![A-Za-z]){re.escape(token)}(?![A-Za-z])", text, re.IGNORECASE):
                    return token
            elif token in text:
                return token
        for canonical in self._tables.canonical_tw_cities:
            if re.search(rf"(?<![A-Za-z]){re.escape(canonical)}(?![A-Za-z])", text, re.IGNORECASE):
                return canonical
        return None

    def _detect_fast_weather(self, message: IncomingMessage, text: str):
        if not WEATHER_KEYWORD_PATTERN.search(text):
            return None
        token = self.find_place_token(text)
        if token is None:
            return None
        if self._tables.find_island(token):
            city = token
        else:
            city = normalize_city(text, self._tables)
            if not self._tables.is_taiwan_city(city):
                city = normalize_city(token, self._tables)
        return WeatherQuery(city=city, when=detect_when(text))

    # --- 4. 固定關鍵字功能 ---
    def _detect_divination(self, message: IncomingMessage, text: str):
        if any(word in text for word in DIVINATION_KEYWORDS):
            return Divination()
        return None

    def _detect_calorie(self, message: IncomingMessage, text: str):
        if CALORIE_PATTERN.search(text) or text.startswith(ATE_PREFIXES):
            return CalorieEstimate(items=extract_food_items(text))
        return None

    def _detect_stock(self, message: IncomingMessage, text: str):
        if STOCK_PATTERN.search(text) or STOCK_HOW_MUCH_PATTERN.match(text) or self._asks_listed_price(text):
            return StockQuote(query=clean_stock_query(text))
        return None

    def _asks_listed_price(self, text: str) -> bool:
        """「台積電多少」：多少前面是上市公司的完整名稱。"""
        match = STOCK_NAME_HOW_MUCH_PATTERN.match(text)
        if not match or self._stock_table is None:
            return False
        name = match.group(1)
        table = self._stock_table() or {}
        return any(entry.get("name") == name for entry in table.values())

    def _detect_horoscope(self, message: IncomingMessage, text: str):
        sign = find_sign(text)
        if sign is None:
            return None
        return Horoscope(sign=sign, when=detect_when(text))

    def _detect_verse(self, message: IncomingMessage, text: str):
        lowered = text.lower()
        if any(word in lowered for word in VERSE_KEYWORDS):
            return VerseCard()
        return None

    # --- 5. 語言模型意圖判斷 ---
    def _detect_model_weather(self, message: IncomingMessage, text: str):
        try:
            raw = self._llm.classify_weather_intent(text)
        except BotError as e:
            logger.warning(f"語言模型意圖判斷失敗，改走一般聊天: {e}")
            return None

        parsed = parse_weather_intent(raw)
        if parsed is None:
            logger.debug(f"語言模型判定非天氣意圖: {raw!r}")
            return None
        city_raw, when = parsed
        city = normalize_city(city_raw, self._tables) or DEFAULT_CITY
        return WeatherQuery(city=city, when=when)
