# handlers/text_router.py
"""
LINE Bot 處理所有文字與位置訊息的入口。
1. 把 LINE 事件轉成 IncomingMessage（來源、是否 @ 到機器人、位置座標）。
2. 交給 IntentRouter 判斷唯一的意圖。
3. 依 DISPATCH_INTENT 動態載入對應的處理函式，取得回覆訊息後透過 reply token 送出。
每則訊息在這裡自成一個錯誤邊界：處理函式拋出的任何錯誤都會被記錄，並回覆通用的錯誤訊息，不影響同一批的其他事件。
"""
import logging
from importlib import import_module
from typing import List, Optional, Tuple

from linebot.v3.messaging.models import Message

from main_initializer import get_services
from utils.api_helper import get_messaging_api
from utils.line_common_messaging import send_line_reply_message
from utils.message_builder import format_text_message
from .intents import IncomingMessage, Ignored, SOURCE_GROUP, SOURCE_ROOM, SOURCE_USER

logger = logging.getLogger(__name__)

# --- 意圖 → (模組, 處理函式) ---
# 處理函式的簽名一律為 handler(intent, message, services) -> List[Message]
DISPATCH_INTENT = {
    "WeatherQuery": ("weather_forecast.weather_handler", "handle_weather"),
    "Divination": ("divination.divination_handler", "handle_divination"),
    "CalorieEstimate": ("calorie.calorie_handler", "handle_calorie"),
    "StockQuote": ("stock.stock_handler", "handle_stock"),
    "Horoscope": ("horoscope.horoscope_handler", "handle_horoscope"),
    "VerseCard": ("verse_card.verse_card_handler", "handle_verse_card"),
    "GeneralChat": ("handlers.default", "handle_general_chat"),
}

CONFIG_ERROR_MESSAGE = "抱歉，處理您的請求時發生內部配置錯誤。"
GENERIC_ERROR_MESSAGE = "抱歉，處理您的請求時發生錯誤，請稍候再試。"


# --- LINE 事件 → IncomingMessage ---
def _source_fields(event):
    source = event.source
    kind = getattr(source, "type", SOURCE_USER) or SOURCE_USER
    conversation_id = None
    if kind == SOURCE_GROUP:
        conversation_id = getattr(source, "group_id", None)
    elif kind == SOURCE_ROOM:
        conversation_id = getattr(source, "room_id", None)
    return kind, getattr(source, "user_id", None), conversation_id


def _bot_mentionees(message_content, bot_user_id: str):
    mention = getattr(message_content, "mention", None)
    for mentionee in getattr(mention, "mentionees", None) or []:
        if getattr(mentionee, "is_self", False):
            yield mentionee
        elif bot_user_id and getattr(mentionee, "user_id", None) == bot_user_id:
            yield mentionee


def mentions_bot(message_content, bot_user_id: str) -> bool:
    """訊息的 mention 中有機器人本身（is_self，或 user_id 等於 BOT_USER_ID）時為 True。"""
    return any(True for _ in _bot_mentionees(message_content, bot_user_id))


def bot_mention_spans(message_content, bot_user_id: str) -> Tuple[Tuple[int, int], ...]:
    spans = []
    for mentionee in _bot_mentionees(message_content, bot_user_id):
        index = getattr(mentionee, "index", None)
        length = getattr(mentionee, "length", None)
        if index is not None and length:
            spans.append((index, length))
    return tuple(spans)


def to_incoming_message(event, bot_user_id: str = "") -> IncomingMessage:
    kind, user_id, conversation_id = _source_fields(event)
    content = event.message
    return IncomingMessage(
        source_kind=kind,
        user_id=user_id,
        reply_token=event.reply_token,
        text=getattr(content, "text", None),
        group_id=conversation_id,
        mentions_bot=mentions_bot(content, bot_user_id),
        mention_spans=bot_mention_spans(content, bot_user_id),
        latitude=getattr(content, "latitude", None),
        longitude=getattr(content, "longitude", None),
        address=getattr(content, "address", None),
    )


# --- 通用函式：安全的從指定模組中調用指定的處理函式 ---
def _call_handler(module_path: str, handler_name: str, *args) -> List[Message]:
    try:
        mod = import_module(module_path)
        handler_func = getattr(mod, handler_name)
    except (ImportError, AttributeError) as e:
        logger.error(f"無法調用處理函式 {handler_name}。模組或函式不存在: {e}")
        return [format_text_message(CONFIG_ERROR_MESSAGE)]

    logger.debug(f"導向至 {module_path}.{handler_name}")
    try:
        return handler_func(*args)
    except Exception as e:
        logger.exception(f"調用處理函式 {handler_name} 時發生未預期錯誤: {e}")
        return [format_text_message(GENERIC_ERROR_MESSAGE)]


def dispatch(message: IncomingMessage, services) -> Optional[List[Message]]:
    """
    判斷意圖並產生回覆訊息；訊息應被靜默忽略時回傳 None。
    """
    try:
        intent = services.router.route(message)
    except Exception as e:
        logger.exception(f"判斷訊息意圖時發生未預期錯誤: {e}")
        return [format_text_message(GENERIC_ERROR_MESSAGE)]

    if isinstance(intent, Ignored):
        logger.debug(f"忽略訊息 ({intent.reason})")
        return None

    module_path, handler_name = DISPATCH_INTENT[type(intent).__name__]
    return _call_handler(module_path, handler_name, intent, message, services)


def _reply(message: IncomingMessage, messages: Optional[List[Message]]) -> None:
    if not messages:
        return
    # reply token 失效時改為直接推播給發話者
    send_line_reply_message(get_messaging_api(), message.reply_token, messages, user_id=message.user_id)


# --- 文字訊息的處理入口函式 ---
def handle(event) -> None:
    services = get_services()
    message = to_incoming_message(event, services.router.bot_user_id)
    logger.debug(f"用戶輸入訊息: {message.text} (source={message.source_kind})")
    _reply(message, dispatch(message, services))


# --- 位置訊息的處理入口函式 ---
def handle_location_event(event) -> None:
    services = get_services()
    message = to_incoming_message(event, services.router.bot_user_id)
    messages = _call_handler("handlers.location_handler", "handle_location", message, services)
    _reply(message, messages)
