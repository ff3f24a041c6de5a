# utils/api_helper.py
"""
統一管理和提供 LINE Messaging API 的客戶端實例。
在檔案載入時建立一次 `ApiClient` 與 `MessagingApi`，所有回覆與推播共用同一個連線設定。
"""
from linebot.v3.messaging import ApiClient, MessagingApi, Configuration

from config import LINE_CHANNEL_ACCESS_TOKEN

# --- 全局實例的初始化，避免重複建立 ---
_conf = Configuration(access_token=LINE_CHANNEL_ACCESS_TOKEN)
_api_client = ApiClient(_conf)

# --- MessagingApi 實例：用於傳送 TextMessage、FlexMessage ---
_messaging_api = MessagingApi(_api_client)


def get_messaging_api() -> MessagingApi:
    return _messaging_api
