# config.py
"""
集中處理所有配置：
1. 環境變數的讀取，包含 LINE Bot、OpenAI、OpenWeatherMap、Redis 與排程密鑰。
2. 全局日誌 (logging) 系統的設定，確保所有日誌都有統一的格式和輸出目的地。
3. 統整各外部服務的 API 端點，方便在其他模組中引用。
"""
import os
import sys
import logging
from dotenv import load_dotenv
from logging.handlers import TimedRotatingFileHandler

# --- 載入 .env 檔案中的環境變數 ---
load_dotenv()

# --- 日誌設定 ---
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "main.log")
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)

IS_DEBUG_MODE = os.getenv("IS_DEBUG_MODE", "False").lower() == "true"

def setup_logging() -> None:
    """
    配置根日誌器：一個輸出到終端機，另一個（可選）輸出到每日輪替的 log 檔案。
    """
    root = logging.getLogger()

    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(LOG_LEVEL)

    fmt = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
    )

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(LOG_LEVEL)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    if os.getenv("ENABLE_FILE_LOG", "False").lower() == "true":
        fh = TimedRotatingFileHandler(LOG_FILE, when="midnight", interval=1, backupCount=7, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

setup_logging()
logger = logging.getLogger(__name__)

# --- LINE Bot 憑證 ---
LINE_CHANNEL_SECRET = os.getenv("LINE_CHANNEL_SECRET")
LINE_CHANNEL_ACCESS_TOKEN = os.getenv("LINE_CHANNEL_ACCESS_TOKEN")

if LINE_CHANNEL_SECRET is None:
    logger.error("環境變數 LINE_CHANNEL_SECRET 未設定。請確認已設定並重新啟動程式。")

if LINE_CHANNEL_ACCESS_TOKEN is None:
    logger.error("環境變數 LINE_CHANNEL_ACCESS_TOKEN 未設定。請確認已設定並重新啟動程式。")

# --- 群組存取設定 ---
# 在首頁與聊天提示中顯示的名稱
BOT_DISPLAY_NAME = os.getenv("BOT_DISPLAY_NAME", "Kevin")
# 機器人自己的 user id，用來判斷群組訊息中的 mention 是否指向機器人
BOT_USER_ID = os.getenv("BOT_USER_ID", "")
# 以名字開頭呼叫機器人也算數，例如「KevinBot 桃園 明天天氣」
BOT_NAME_PREFIXES = tuple(
    p.strip() for p in os.getenv("BOT_NAME_PREFIXES", "@KevinBot,KevinBot,kevinbot,Kevin,kevin").split(",") if p.strip()
)

# --- OpenAI ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
# 一般聊天逾時或失敗時改用的第二個模型；留空代表不重試
OPENAI_FALLBACK_MODEL = os.getenv("OPENAI_FALLBACK_MODEL", "gpt-4.1-nano")
CHAT_TIMEOUT_SECONDS = float(os.getenv("CHAT_TIMEOUT_SECONDS", "8"))

# --- OpenWeatherMap ---
WEATHER_API_KEY = os.getenv("WEATHER_API_KEY")
OWM_GEOCODE_API = "https://api.openweathermap.org/geo/1.0/direct"
OWM_FORECAST_API = "https://api.openweathermap.org/data/2.5/forecast"
DEFAULT_COUNTRY_CODE = "TW"

# --- 快取與對話上下文 ---
# 沒有設定 REDIS_URL 時使用行程內的記憶體快取（單一實例部署）
REDIS_URL = os.getenv("REDIS_URL")
# cache | firestore
CONTEXT_STORE_BACKEND = os.getenv("CONTEXT_STORE_BACKEND", "cache").lower()
CONTEXT_TTL_SECONDS = int(os.getenv("CONTEXT_TTL_SECONDS", str(30 * 60)))

# --- 股票報價 ---
YAHOO_CHART_API = "https://query1.finance.yahoo.com/v8/finance/chart/"
TWSE_STOCK_DAY_ALL_URL = "https://www.twse.com.tw/exchangeReport/STOCK_DAY_ALL?response=open_data"
TWSE_TABLE_CACHE_KEY = "twse:stocks:all"

# --- 聖經經文 ---
BIBLE_API_URL = "https://bible-api.com/"
BIBLE_TRANSLATION = os.getenv("BIBLE_TRANSLATION", "cuv")

# --- 排程維護任務 ---
CRON_SECRET = os.getenv("CRON_SECRET")

# 以台灣時間決定「今天」的快取日期鍵
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "Asia/Taipei")
