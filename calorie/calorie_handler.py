# calorie/calorie_handler.py
"""
熱量估算：把食物清單交給語言模型，要求回覆固定格式的 JSON，驗證後組成文字回覆。
同一天、同一份食物清單的結果會被快取，避免重複呼叫模型。
"""
import datetime
import logging
from typing import List, Optional

from linebot.v3.messaging.models import Message

from handlers.intents import CalorieEstimate, IncomingMessage
from utils.errors import BotError, ConfigurationError, LLMParseError
from utils.local_time import local_today
from utils.message_builder import format_text_message

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 24 * 60 * 60

CALORIE_PROMPT = """
你是營養師，負責估算台灣常見食物的熱量。
請只回覆 JSON 物件，格式如下：
{"items": [{"name": "食物名稱", "min": 最低大卡, "max": 最高大卡}], "total_min": 總計最低大卡, "total_max": 總計最高大卡, "note": "一句簡短提醒"}
數值一律為整數，依一般份量估算。
"""

NO_ITEMS_MESSAGE = "想估算熱量的話，請告訴我吃了什麼，例如「我吃了雞排和珍奶」。"
FAILURE_MESSAGE = "熱量估算暫時失敗，等等再試一次。"


def _as_kcal(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = round(float(value))
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def validate_estimate(data: dict) -> dict:
    """
    檢查模型輸出；每一項都必須有名稱與合理的範圍。總計缺漏時以各項加總補上。
    """
    raw_items = data.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise LLMParseError("熱量估算缺少 items。")

    items = []
    for raw in raw_items:
        if not isinstance(raw, dict) or not raw.get("name"):
            raise LLMParseError(f"熱量估算項目格式錯誤: {raw!r}")
        low, high = _as_kcal(raw.get("min")), _as_kcal(raw.get("max"))
        if low is None or high is None:
            raise LLMParseError(f"熱量估算項目缺少數值: {raw!r}")
        items.append({"name": str(raw["name"]), "min": min(low, high), "max": max(low, high)})

    total_min = _as_kcal(data.get("total_min"))
    total_max = _as_kcal(data.get("total_max"))
    if total_min is None or total_max is None:
        total_min = sum(item["min"] for item in items)
        total_max = sum(item["max"] for item in items)

    note = data.get("note")
    return {
        "items": items,
        "total_min": min(total_min, total_max),
        "total_max": max(total_min, total_max),
        "note": str(note) if note else None,
    }


def cache_key(items, day: datetime.date) -> str:
    return f"calorie:{day.isoformat()}:{'|'.join(sorted(items))}"


def estimate_calories(items, llm, cache, day: Optional[datetime.date] = None) -> dict:
    day = day or local_today()
    key = cache_key(items, day)
    cached = cache.get_json(key)
    if cached:
        logger.debug(f"熱量估算快取命中: {key}")
        return cached

    data = llm.generate_json(CALORIE_PROMPT, "、".join(items))
    estimate = validate_estimate(data)
    cache.set_json(key, estimate, ttl=CACHE_TTL_SECONDS)
    return estimate


def format_estimate(estimate: dict) -> str:
    lines = ["【熱量估算】"]
    for item in estimate["items"]:
        lines.append(f"・{item['name']}：約 {item['min']}～{item['max']} 大卡")
    lines.append(f"總計：約 {estimate['total_min']}～{estimate['total_max']} 大卡")
    if estimate.get("note"):
        lines.append("")
        lines.append(estimate["note"])
    return "\n".join(lines)


def handle_calorie(intent: CalorieEstimate, message: IncomingMessage, services) -> List[Message]:
    if not intent.items:
        return [format_text_message(NO_ITEMS_MESSAGE)]
    try:
        estimate = estimate_calories(intent.items, services.llm, services.cache)
    except ConfigurationError as e:
        return [format_text_message(str(e))]
    except BotError as e:
        logger.warning(f"熱量估算失敗 ({'、'.join(intent.items)}): {e}")
        return [format_text_message(FAILURE_MESSAGE)]
    return [format_text_message(format_estimate(estimate))]
