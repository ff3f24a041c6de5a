# utils/llm_client.py
"""
封裝 OpenAI Chat Completions 的呼叫，提供三種固定的用法：
1. classify_weather_intent：意圖判斷，模型只會回覆 `WEATHER|城市|when` 或 `NO`。
2. chat：一般聊天回覆，有逾時限制；主要模型失敗時改用備用模型。
3. generate_json：產生結構化 JSON（星座運勢、熱量估算），解析失敗時拋出 LLMParseError。
模型的輸出一律視為不可信的外部輸入，由呼叫端自行驗證。
"""
import json
import logging
from typing import Optional

import openai
from openai import OpenAI

from .errors import ConfigurationError, LLMParseError, UpstreamError

logger = logging.getLogger(__name__)

WEATHER_INTENT_PROMPT = """
你是一個意圖判斷與解析器。

【地點判斷規則】
1. 使用者提到的台灣城市（台北、台中、桃園、新竹、嘉義、台南、高雄、花蓮、宜蘭等）一律優先視為「台灣」的城市。
2. 如果使用者只講「台中」「台南」「台北」這類簡稱，也必須自動解析為「台灣台中市」「台灣台南市」「台灣台北市」。
3. 除非使用者明確說「中國的 XXX」，否則地點一律以「台灣」為預設國家。

【意圖規則】
如果訊息是在問天氣、氣溫、下雨、穿什麼、冷不冷，請回：
WEATHER|城市名稱（盡量從文字中推論，推論不到請回 Taipei）|when

when 僅能是 today / tomorrow / day_after
（使用者問「明天」就回 tomorrow，「後天」就回 day_after）

如果不是，請回：
NO
"""

CHAT_PROMPT = """
你是 Kevin 的專屬助理，語氣自然、冷靜又帶點幽默。
你是 Kevin 自己架的 LINE Bot，由 OpenAI API 驅動。回覆請使用繁體中文，簡潔為主。
"""

CONFIG_MISSING_MESSAGE = "後端沒有設定 OPENAI_API_KEY，請先設定環境變數。"


class LLMClient:
    def __init__(self, api_key: Optional[str], model: str, fallback_model: Optional[str] = None,
                 chat_timeout: float = 8.0, client: Optional[OpenAI] = None):
        self._api_key = api_key
        self.model = model
        self.fallback_model = fallback_model
        self.chat_timeout = chat_timeout
        self._client = client

    @property
    def client(self) -> OpenAI:
        # 沒有金鑰時不建立客戶端，讓各功能回覆固定的設定錯誤訊息
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(CONFIG_MISSING_MESSAGE)
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def _complete(self, system: str, user: str, model: Optional[str] = None,
                  timeout: Optional[float] = None, **kwargs) -> str:
        options = dict(kwargs)
        if timeout is not None:
            options["timeout"] = timeout
        try:
            completion = self.client.chat.completions.create(
                model=model or self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                **options,
            )
        except openai.OpenAIError as e:
            raise UpstreamError(f"OpenAI 呼叫失敗 ({model or self.model}): {e}") from e
        content = completion.choices[0].message.content if completion.choices else None
        return (content or "").strip()

    def classify_weather_intent(self, text: str) -> str:
        return self._complete(WEATHER_INTENT_PROMPT, text)

    def chat(self, text: str) -> str:
        """一般聊天；主要模型逾時或失敗時改用備用模型，兩者都失敗則拋出 UpstreamError。"""
        try:
            reply = self._complete(CHAT_PROMPT, text, timeout=self.chat_timeout)
            if reply:
                return reply
            logger.warning("主要模型回覆空白內容。")
        except UpstreamError as e:
            logger.warning(f"主要模型聊天失敗: {e}")
            if not self.fallback_model:
                raise

        if not self.fallback_model:
            raise UpstreamError("主要模型沒有回覆內容。")
        logger.info(f"改用備用模型 {self.fallback_model} 回覆聊天訊息。")
        reply = self._complete(CHAT_PROMPT, text, model=self.fallback_model, timeout=self.chat_timeout)
        if not reply:
            raise UpstreamError("備用模型沒有回覆內容。")
        return reply

    def generate_json(self, system: str, user: str) -> dict:
        raw = self._complete(system, user, response_format={"type": "json_object"})
        try:
            data = json.loads(_strip_code_fence(raw))
        except ValueError as e:
            raise LLMParseError(f"模型輸出不是有效的 JSON: {raw[:200]}") from e
        if not isinstance(data, dict):
            raise LLMParseError(f"模型輸出的 JSON 不是物件: {raw[:200]}")
        return data


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    return text.strip()
