# utils/line_common_messaging.py
"""
LINE 訊息傳送的通用工具，封裝所有與 LINE Messaging API 傳送訊息相關的邏輯。
明確區分「回覆（Reply）」和「推播（Push）」兩種情境：
回覆失敗且原因是 reply token 無效或過期時，改用推播送給原使用者；仍然失敗就只記錄日誌，不再往外拋出。
"""
import json
import logging
from typing import List, Optional, Union
from linebot.v3.messaging import ApiException, MessagingApi
from linebot.v3.messaging.models import Message, ReplyMessageRequest, PushMessageRequest

logger = logging.getLogger(__name__)

# LINE 單次回覆最多 5 則訊息
MAX_MESSAGES_PER_REQUEST = 5


# --- 向指定用戶發送 LINE 推播訊息（主動發送）---
def send_line_push_message(line_bot_api_instance: MessagingApi, user_id: str, messages: List[Message]) -> bool:
    if not messages:
        logger.warning("沒有訊息可推播。")
        return False

    try:
        push_message_request = PushMessageRequest(to=user_id, messages=messages[:MAX_MESSAGES_PER_REQUEST])
        line_bot_api_instance.push_message(push_message_request)
        logger.info(f"訊息已成功推播給用戶 ID: {user_id}")
        return True
    except ApiException as e:
        logger.error(f"Push 訊息發送失敗 (API 錯誤 - 用戶 {user_id}): ({e.status})\nReason: {e.reason}\nHTTP response body: {e.body}")
    except Exception as e:
        logger.error(f"推播訊息給 {user_id} 時發生錯誤: {e}", exc_info=True)
    return False


def _is_invalid_reply_token(e: ApiException) -> bool:
    body = e.body or ""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return "Invalid reply token" in body or "reply token" in body.lower()


# --- 對用戶的訊息進行回覆 ---
def send_line_reply_message(line_bot_api_instance: MessagingApi, reply_token: Optional[str],
                            messages: Union[Message, List[Message]], user_id: Optional[str] = None) -> bool:
    """
    用 reply token 回覆；token 無效或過期且有 user_id 時改用推播。
    回傳是否有任何一種方式送達。
    """
    if not isinstance(messages, list):
        messages = [messages]
    messages = messages[:MAX_MESSAGES_PER_REQUEST]

    if not reply_token:
        if user_id:
            logger.warning(f"沒有 reply token，直接推播給用戶 {user_id}。")
            return send_line_push_message(line_bot_api_instance, user_id, messages)
        logger.error("沒有 reply token 也沒有用戶 ID，無法送出訊息。")
        return False

    logger.debug(f"準備發送回覆。Reply Token: {reply_token}")
    try:
        messages_as_dict = [m.to_dict() for m in messages]
        logger.debug(f"準備發送的訊息內容: {json.dumps(messages_as_dict, indent=2, ensure_ascii=False)}")
    except (TypeError, ValueError) as e:
        logger.error(f"無法序列化訊息物件用於日誌: {e}")

    try:
        line_bot_api_instance.reply_message(ReplyMessageRequest(reply_token=reply_token, messages=messages))
        logger.info(f"成功回覆訊息 (reply_token: {reply_token})")
        return True
    except ApiException as e:
        logger.error(f"回覆訊息失敗 (API 錯誤 - reply_token: {reply_token}): ({e.status})\nReason: {e.reason}\nHTTP response body: {e.body}")
        if _is_invalid_reply_token(e) and user_id:
            logger.warning(f"Reply token 無效，嘗試將訊息作為 Push 訊息發送給用戶 {user_id}。")
            return send_line_push_message(line_bot_api_instance, user_id, messages)
        return False
    except Exception as e:
        logger.error(f"回覆訊息失敗 (未知錯誤 - reply_token: {reply_token}): {e}", exc_info=True)
        return False
