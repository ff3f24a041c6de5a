# horoscope/horoscope_service.py
"""
產生每日星座運勢。
結果以「星座 + 日期」為鍵快取；模型輸出無法解析時，改用依星座與日期決定的固定內容，同一天查詢結果不會變動。
"""
import datetime
import hashlib
import logging

from utils.errors import ConfigurationError, LLMParseError, UpstreamError
from .horoscope_signs import SIGN_LABELS

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 2 * 24 * 60 * 60

HOROSCOPE_PROMPT = """
你是溫暖又務實的星座專欄作家。請依使用者給的星座與日期，寫一份當日運勢。
只回覆 JSON 物件，欄位如下：
{"summary": "整體運勢，兩句以內", "love": "感情", "career": "工作學業", "money": "財運",
 "lucky_color": "幸運色", "lucky_number": 1 到 99 的整數, "score": 1 到 5 的整數}
使用繁體中文。
"""

READING_FIELDS = ("summary", "love", "career", "money", "lucky_color")

_FALLBACK_SUMMARIES = (
    "今天步調穩定，把注意力放在手邊最重要的一件事上。",
    "適合整理思緒，和信任的人聊聊會有新的想法。",
    "小小的改變會帶來好心情，試著換條路線或換個習慣。",
    "保持彈性，計畫外的安排反而可能是好消息。",
)
_FALLBACK_COLORS = ("藍色", "綠色", "白色", "橘色", "紫色", "黃色")


def cache_key(sign: str, day: datetime.date) -> str:
    return f"horoscope:{sign}:{day.isoformat()}"


def validate_reading(data: dict) -> dict:
    reading = {}
    for key in READING_FIELDS:
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            raise LLMParseError(f"星座運勢缺少欄位 {key}")
        reading[key] = value.strip()

    try:
        score = int(data.get("score"))
        lucky_number = int(data.get("lucky_number"))
    except (TypeError, ValueError) as e:
        raise LLMParseError(f"星座運勢數值欄位格式錯誤: {e}") from e
    reading["score"] = min(max(score, 1), 5)
    reading["lucky_number"] = lucky_number
    return reading


def fallback_reading(sign: str, day: datetime.date) -> dict:
    seed = int(hashlib.md5(f"{sign}:{day.isoformat()}".encode("utf-8")).hexdigest(), 16)
    return {
        "summary": _FALLBACK_SUMMARIES[seed % len(_FALLBACK_SUMMARIES)],
        "love": "多一點傾聽，少一點猜測。",
        "career": "先完成進度，再追求完美。",
        "money": "量入為出，避免衝動購物。",
        "lucky_color": _FALLBACK_COLORS[seed % len(_FALLBACK_COLORS)],
        "lucky_number": seed % 99 + 1,
        "score": 3,
    }


def get_reading(sign: str, day: datetime.date, llm, cache, use_cache: bool = True) -> dict:
    """
    取得某星座某一天的運勢。
    模型設定缺漏（ConfigurationError）與呼叫失敗（UpstreamError）會往外拋出；只有輸出格式錯誤時才使用固定內容。
    """
    key = cache_key(sign, day)
    if use_cache:
        cached = cache.get_json(key)
        if cached:
            return cached

    label = SIGN_LABELS.get(sign, sign)
    try:
        reading = validate_reading(llm.generate_json(HOROSCOPE_PROMPT, f"{label}，{day:%Y年%m月%d日}"))
    except LLMParseError as e:
        logger.warning(f"{label} {day} 的運勢無法解析，改用固定內容: {e}")
        return fallback_reading(sign, day)

    cache.set_json(key, reading, ttl=CACHE_TTL_SECONDS)
    return reading


def pregenerate(day: datetime.date, llm, cache) -> int:
    """預先產生十二星座在某一天的運勢，回傳成功寫入快取的數量。"""
    count = 0
    for sign in SIGN_LABELS:
        try:
            get_reading(sign, day, llm, cache, use_cache=False)
        except (ConfigurationError, UpstreamError) as e:
            logger.error(f"預先產生 {sign} {day} 的運勢失敗: {e}")
            continue
        if cache.get_json(cache_key(sign, day)):
            count += 1
    return count

