# handlers/intents.py
"""
進入路由器的訊息，以及路由器判斷出的意圖。
每則訊息只會產生一個意圖，並只交給一個處理函式。
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from weather_forecast.weather_models import ResolvedLocation

SOURCE_USER = "user"
SOURCE_GROUP = "group"
SOURCE_ROOM = "room"


@dataclass(frozen=True)
class IncomingMessage:
    source_kind: str
    user_id: Optional[str]
    reply_token: Optional[str]
    text: Optional[str] = None
    group_id: Optional[str] = None
    mentions_bot: bool = False
    # 機器人被 @ 的位置 (index, length)，以原始文字計算
    mention_spans: Tuple[Tuple[int, int], ...] = ()
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None

    @property
    def is_multi_party(self) -> bool:
        return self.source_kind in (SOURCE_GROUP, SOURCE_ROOM)

    @property
    def is_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class WeatherQuery:
    city: Optional[str]
    when: str = "today"
    # 追問或分享位置時已經有地點，不需要再做地理編碼
    location: Optional[ResolvedLocation] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class Divination:
    pass


@dataclass(frozen=True)
class CalorieEstimate:
    items: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class StockQuote:
    query: str


@dataclass(frozen=True)
class Horoscope:
    sign: str
    when: str = "today"


@dataclass(frozen=True)
class VerseCard:
    pass


@dataclass(frozen=True)
class GeneralChat:
    text: str


@dataclass(frozen=True)
class Ignored:
    reason: str = ""
