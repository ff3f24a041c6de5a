# weather_forecast/city_normalizer.py
"""
城市名稱正規化與相對日期解析。
使用者常在一整句話裡提到城市（例如「臺北市明天天氣如何」），這裡會：
1. 移除天氣、問句、相對日期、行政區後綴與國名等贅字。
2. 比對台灣主要縣市的各種寫法，命中時統一成標準名稱（例如 Taipei）。
3. 沒有命中時原樣回傳清理後的字串，交給地理編碼解析器處理。
"""
import re
from typing import Optional

from .city_tables import CityTables, DEFAULT_TABLES

WHEN_TODAY = "today"
WHEN_TOMORROW = "tomorrow"
WHEN_DAY_AFTER = "day_after"
WHEN_VALUES = (WHEN_TODAY, WHEN_TOMORROW, WHEN_DAY_AFTER)

# 相對日期 → 從預報第一筆資料起算的天數
WHEN_DAY_OFFSET = {
    WHEN_TODAY: 0,
    WHEN_TOMORROW: 1,
    WHEN_DAY_AFTER: 2,
}

WHEN_LABEL = {
    WHEN_TODAY: "今日",
    WHEN_TOMORROW: "明日",
    WHEN_DAY_AFTER: "後天",
}

# --- 要移除的中文贅字（較長的字串要排在前面）---
_FILLER_WORDS = (
    # 天氣、氣溫與問句
    "天氣預報", "天气预报", "天氣", "天气", "氣溫", "气温", "溫度", "温度",
    "會下雨嗎", "会下雨吗", "會不會下雨", "会不会下雨", "下雨", "降雨",
    "冷不冷", "熱不熱", "热不热", "會冷嗎", "会冷吗", "冷嗎", "冷吗", "熱嗎", "热吗",
    "怎麼樣", "怎么样", "怎樣", "如何", "幾度", "几度", "好嗎", "嗎", "吗", "呢",
    "請問", "请问", "幫我查", "帮我查", "查一下", "一下", "的",
    # 相對日期
    "今天", "今日", "明天", "明日", "後天", "后天", "後日",
    # 國名
    "台灣", "臺灣", "台湾",
    # 行政區後綴
    "市", "縣", "县", "區", "区", "鄉", "乡", "鎮", "镇",
    "?", "？", "!", "！", ",", "，", "。",
)

# 英文贅字前後不能緊接英文字母，不分大小寫
_FILLER_PATTERN = re.compile(
    r"(?<![A-Za-z])(weather|temperature|today|tomorrow|day[ _-]after|city|county|district|township|taiwan)(?![A-Za-z])",
    re.IGNORECASE,
)

_WHITESPACE = re.compile(r"\s+")


def _strip_fillers(text: str) -> str:
    for word in _FILLER_WORDS:
        text = text.replace(word, " ")
    text = _FILLER_PATTERN.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def _snap_taiwan_city(cleaned: str, tables: CityTables) -> Optional[str]:
    # 英文標準名稱要完全相同，避免 "New Taipei" 被 "Taipei" 吃掉
    for canonical in tables.canonical_tw_cities:
        if cleaned.lower() == canonical.lower():
            return canonical

    # 中文寫法只要包含在字串裡就算命中；台 / 臺 兩種寫法都檢查
    variants = {cleaned, cleaned.replace("台", "臺"), cleaned.replace("臺", "台")}
    for alias, canonical in tables.tw_cities.items():
        if any(alias in v for v in variants):
            return canonical
    return None


def normalize_city(raw: Optional[str], tables: CityTables = DEFAULT_TABLES) -> Optional[str]:
    """
    將自由文字中的城市名稱清理成標準形式。
    對已經是標準名稱的輸入再次呼叫時結果不變；None 或空字串原樣回傳。
    """
    if not raw:
        return raw

    cleaned = raw
    # 反覆清理直到不再變化，移除贅字後拼出的新贅字也會一併清掉
    while True:
        next_cleaned = _strip_fillers(cleaned)
        if next_cleaned == cleaned:
            break
        cleaned = next_cleaned

    snapped = _snap_taiwan_city(cleaned, tables)
    return snapped if snapped else cleaned


def normalize_when(raw: Optional[str] = WHEN_TODAY) -> str:
    """將 today / tomorrow / day_after 與中文說法統一成固定的三個值，其他一律視為 today。"""
    text = (raw or WHEN_TODAY).strip().lower()
    if text in ("tomorrow", "明天", "明日"):
        return WHEN_TOMORROW
    if text in ("day_after", "後天", "后天", "day after", "day-after", "後日"):
        return WHEN_DAY_AFTER
    return WHEN_TODAY


def detect_when(text: Optional[str]) -> str:
    """從整句話中找出使用者提到的相對日期。"""
    if not text:
        return WHEN_TODAY
    lowered = text.lower()
    if any(word in lowered for word in ("後天", "后天", "後日", "day after", "day_after")):
        return WHEN_DAY_AFTER
    if any(word in lowered for word in ("明天", "明日", "tomorrow")):
        return WHEN_TOMORROW
    return WHEN_TODAY
