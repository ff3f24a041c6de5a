# handlers/location_handler.py
"""
處理使用者分享的位置訊息：直接以座標查詢今日天氣，跳過地名解析。
"""
import logging
from typing import List

from linebot.v3.messaging.models import Message

from weather_forecast.city_normalizer import WHEN_TODAY
from weather_forecast.weather_handler import handle_weather
from weather_forecast.weather_models import ResolvedLocation
from .intents import IncomingMessage, WeatherQuery

logger = logging.getLogger(__name__)


def location_query(message: IncomingMessage) -> WeatherQuery:
    label = message.address or f"{message.latitude:.4f}, {message.longitude:.4f}"
    location = ResolvedLocation(display_name=label, lat=message.latitude, lon=message.longitude)
    return WeatherQuery(city=label, when=WHEN_TODAY, location=location, address=message.address)


def handle_location(message: IncomingMessage, services) -> List[Message]:
    logger.info(f"收到位置訊息 ({message.latitude}, {message.longitude})，查詢今日天氣。")
    return handle_weather(location_query(message), message, services)
