# weather_forecast/weather_handler.py
"""
天氣查詢的處理入口：取得天氣報告後記住使用者的地點，並建立回覆訊息。
"""
import logging
from typing import List

from linebot.v3.messaging.models import Message

from handlers.intents import IncomingMessage, WeatherQuery
from utils.message_builder import build_flex_or_text, format_text_message
from .weather_formatter import build_weather_flex, format_weather_text
from .weather_service import get_weather_report

logger = logging.getLogger(__name__)


def handle_weather(intent: WeatherQuery, message: IncomingMessage, services) -> List[Message]:
    result = get_weather_report(
        intent,
        services.weather_api_key,
        geocoder=services.geocoder,
        forecast_fetcher=services.forecast_fetcher,
        tables=services.tables,
    )
    if result.report is None:
        return [format_text_message(result.message)]

    report = result.report
    # 只有成功的查詢才更新上下文，失敗的查詢不覆蓋上一個地點
    services.context_store.put(message.user_id, report.location, services.context_ttl)
    logger.info(f"已產生 {report.location.display_name} 的 {report.when} 天氣報告。")
    return [build_flex_or_text(lambda: build_weather_flex(report), format_weather_text(report))]
