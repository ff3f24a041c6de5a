# main_initializer.py
"""
應用程式啟動時的初始化工作。
主要職責：
1. 依照設定建立鍵值快取（Redis 或記憶體）與對話上下文儲存。
2. 建立語言模型客戶端與意圖路由器，並注入唯讀的地名查詢表。
3. 把這些共用物件包成 AppServices，供各個處理模組透過 get_services() 取得。
"""
import logging
import random
from typing import Optional

import config
from handlers.intent_router import IntentRouter
from utils.cache_manager import BaseCache, build_cache
from utils.context_store import ContextStore, build_context_store
from utils.llm_client import LLMClient
from weather_forecast.city_tables import CityTables, DEFAULT_TABLES

logger = logging.getLogger(__name__)


class AppServices:
    """所有處理模組共用的服務物件。"""

    def __init__(self, cache: BaseCache, context_store: ContextStore, llm: LLMClient,
                 tables: CityTables = DEFAULT_TABLES, weather_api_key: Optional[str] = None,
                 context_ttl: int = config.CONTEXT_TTL_SECONDS, bot_user_id: str = "",
                 name_prefixes=(), rng: Optional[random.Random] = None,
                 geocoder=None, forecast_fetcher=None, quote_fetcher=None, verse_fetcher=None):
        self.cache = cache
        self.context_store = context_store
        self.llm = llm
        self.tables = tables
        self.weather_api_key = weather_api_key
        self.context_ttl = context_ttl
        self.rng = rng or random.Random()
        # 以下為 None 時使用真正的遠端服務
        self.geocoder = geocoder
        self.forecast_fetcher = forecast_fetcher
        self.quote_fetcher = quote_fetcher
        self.verse_fetcher = verse_fetcher
        self.router = IntentRouter(
            context_store=context_store,
            llm=llm,
            tables=tables,
            bot_user_id=bot_user_id,
            name_prefixes=name_prefixes,
            stock_table=lambda: cache.get_json(config.TWSE_TABLE_CACHE_KEY),
        )


_services: Optional[AppServices] = None


def build_services() -> AppServices:
    cache = build_cache(config.REDIS_URL)
    context_store = build_context_store(config.CONTEXT_STORE_BACKEND, cache)
    llm = LLMClient(
        api_key=config.OPENAI_API_KEY,
        model=config.OPENAI_MODEL,
        fallback_model=config.OPENAI_FALLBACK_MODEL or None,
        chat_timeout=config.CHAT_TIMEOUT_SECONDS,
    )
    return AppServices(
        cache=cache,
        context_store=context_store,
        llm=llm,
        weather_api_key=config.WEATHER_API_KEY,
        context_ttl=config.CONTEXT_TTL_SECONDS,
        bot_user_id=config.BOT_USER_ID,
        name_prefixes=config.BOT_NAME_PREFIXES,
    )


def initialize(services: Optional[AppServices] = None) -> AppServices:
    """
    建立（或替換為傳入的）共用服務。在任何使用者請求被處理之前呼叫。
    """
    global _services
    logger.info("在應用程式啟動時初始化服務...")
    _services = services or build_services()

    if not config.WEATHER_API_KEY:
        logger.warning("WEATHER_API_KEY 未設定，天氣查詢會回覆設定錯誤訊息。")
    if not config.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY 未設定，語言模型相關功能會回覆設定錯誤訊息。")
    if not config.BOT_USER_ID:
        logger.warning("BOT_USER_ID 未設定，群組中只能以名字開頭呼叫機器人。")

    logger.info("服務初始化已完成。")
    return _services


def get_services() -> AppServices:
    if _services is None:
        return initialize()
    return _services
