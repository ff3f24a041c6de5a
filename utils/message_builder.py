# utils/message_builder.py
"""
訊息格式化工具模組，把處理結果轉成 LINE Messaging API 的訊息物件。
1. format_text_message：字串 → TextMessage。
2. build_flex_or_text：建立 Flex 卡片，失敗時改送同內容的純文字，確保使用者一定收到回覆。
"""
import logging
from typing import Callable, Union
from linebot.v3.messaging.models import TextMessage, FlexMessage

logger = logging.getLogger(__name__)

# LINE 單則文字訊息的長度上限
MAX_TEXT_LENGTH = 5000


# --- 將純文字字串轉換為 LINE Bot SDK 中的 TextMessage 物件 ---
def format_text_message(text: str) -> TextMessage:
    if len(text) > MAX_TEXT_LENGTH:
        text = text[:MAX_TEXT_LENGTH - 1] + "…"
    return TextMessage(text=text)


# --- 建立 Flex 卡片，失敗時降級為純文字 ---
def build_flex_or_text(build_flex: Callable[[], FlexMessage], fallback_text: str) -> Union[FlexMessage, TextMessage]:
    """
    Args:
        build_flex: 無參數的建構函式，回傳 FlexMessage。
        fallback_text: 卡片建立失敗時要送出的文字。
    """
    try:
        return build_flex()
    except (ValueError, TypeError, KeyError) as e:
        # pydantic 的驗證錯誤是 ValueError 的子類別
        logger.error(f"建立 Flex Message 失敗，改用純文字: {e}", exc_info=True)
        return format_text_message(fallback_text)
