# utils/errors.py
"""
專案共用的例外類別。
所有功能內部的錯誤都在單一訊息的處理範圍內被攔截，轉成使用者看得懂的文字，不會傳到 webhook 傳輸層。
"""


class BotError(Exception):
    """所有自訂例外的基底類別。"""


class ConfigurationError(BotError):
    """缺少金鑰或設定，功能無法執行。"""


class UpstreamError(BotError):
    """外部服務（語言模型、報價、經文 API 等）無法使用或回應異常。"""


class LLMParseError(BotError):
    """語言模型產生的結構化內容無法解析或驗證失敗。"""
