# handlers/default.py
# 處理沒有被任何規則判定的文字訊息：交給語言模型一般聊天
import logging
from typing import List

from linebot.v3.messaging.models import Message

from utils.errors import ConfigurationError, UpstreamError
from utils.message_builder import format_text_message
from .intents import GeneralChat, IncomingMessage

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "抱歉，我現在有點忙不過來，等等再跟我聊一次。"


def handle_general_chat(intent: GeneralChat, message: IncomingMessage, services) -> List[Message]:
    logger.info(f"[DefaultHandler] 一般聊天訊息來自用戶 {message.user_id}: '{intent.text}'")
    try:
        reply = services.llm.chat(intent.text)
    except ConfigurationError as e:
        return [format_text_message(str(e))]
    except UpstreamError as e:
        logger.warning(f"[DefaultHandler] 一般聊天失敗: {e}")
        return [format_text_message(APOLOGY_MESSAGE)]
    return [format_text_message(reply)]
