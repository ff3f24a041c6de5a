# main.py
"""
整個 LINE Bot 專案的主入口檔案。
使用 Flask 框架建立 Web 伺服器，處理所有來自 LINE 的 Webhook 事件。
主要職責：
1. 建立 Flask 應用程式和 LINE SDK 的 WebhookHandler。
2. 將文字訊息與位置訊息分發給 handlers.text_router。
3. 執行應用程式啟動時的初始化工作（快取、對話上下文、語言模型、意圖路由器）。
4. 提供 /update_stocks 維護端點，供外部排程器以 Bearer 密鑰呼叫。
"""
import os
import logging
from flask import Flask, request, abort, jsonify
from importlib import import_module

from linebot.v3.exceptions import InvalidSignatureError
from linebot.v3.webhook import WebhookHandler
from linebot.v3.webhooks.models import (
    MessageEvent, TextMessageContent, LocationMessageContent,
    FollowEvent, UnfollowEvent
)

import config
from main_initializer import initialize, get_services
from maintenance.jobs import run_maintenance
from utils.errors import UpstreamError

logger = logging.getLogger(__name__)

logger.info("程式開始啟動...")

# --- 初始化 LINE SDK 和 Flask ---
try:
    handler = WebhookHandler(config.LINE_CHANNEL_SECRET or "")
    app = Flask(__name__)
    logger.info("LINE SDK 和 Flask App 實例化成功。")
except Exception as e:
    logger.error("初始化 LINE SDK 或 Flask App 時發生錯誤。", exc_info=True)
    exit(1)


# --- 健康檢查路由 ---
@app.route("/health")
def health_check():
    return "OK", 200


@app.route("/")
def index():
    return f"{config.BOT_DISPLAY_NAME} LINE Bot Running"


# --- 綁定 LINE 事件 ---
@handler.add(MessageEvent, message=TextMessageContent)
def on_text(event):
    import_module("handlers.text_router").handle(event)


@handler.add(MessageEvent, message=LocationMessageContent)
def on_location(event):
    import_module("handlers.text_router").handle_location_event(event)


@handler.add(FollowEvent)
def on_follow(event):
    logger.info(f"用戶 {event.source.user_id} 追蹤了機器人。")


@handler.add(UnfollowEvent)
def handle_unfollow(event):
    logger.info(f"用戶 {event.source.user_id} 解除了追蹤。")


# --- Flask Webhook ---
@app.route("/callback", methods=["POST"])
def callback():
    """
    驗證簽名後依序處理同一批的所有事件。
    只有簽名無效時回傳 400；其餘錯誤都已記錄，仍回傳 OK，避免 LINE 重送整批事件。
    """
    sig = request.headers.get("X-Line-Signature", "")
    body = request.get_data(as_text=True)

    try:
        handler.handle(body, sig)
    except InvalidSignatureError:
        logger.warning("Webhook 簽名無效，拒絕請求。")
        abort(400)
    except Exception:
        logger.error("Webhook 處理錯誤。", exc_info=True)
    return "OK"


# --- 執行專案啟動初始化 ---
logger.info("執行專案啟動初始化...")
try:
    initialize()
    logger.info("專案初始化完成。")
except Exception as e:
    logger.error("執行 initialize() 函式時發生錯誤。", exc_info=True)
    exit(1)


# --- 外部排程觸發的維護路由 ---
def _authorized() -> bool:
    secret = config.CRON_SECRET
    return bool(secret) and request.headers.get("Authorization", "") == f"Bearer {secret}"


@app.route("/update_stocks", methods=["GET", "POST"])
def update_stocks():
    if not _authorized():
        logger.warning("維護端點收到未授權的請求。")
        return jsonify({"error": "unauthorized"}), 401

    try:
        logger.info("排程觸發維護任務：更新上市股票對照表與預先產生星座運勢。")
        result = run_maintenance(get_services())
        return jsonify(result), 200
    except UpstreamError as e:
        logger.error(f"維護任務執行失敗: {e}")
        return jsonify({"ok": False, "error": str(e)}), 502


# --- 啟動 Flask ---
# 本機測試才用 Flask 內建伺服器，部署到雲端用 gunicorn
if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host='0.0.0.0', port=port, debug=config.IS_DEBUG_MODE)
