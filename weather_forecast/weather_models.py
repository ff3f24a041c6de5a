# weather_forecast/weather_models.py
"""
天氣查詢流程中傳遞的資料結構。
"""
import datetime
from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class ResolvedLocation:
    """
    地理編碼解析的結果。
    沒有座標時，query 必須是預報服務可以直接使用的地點字串（必要時帶國碼，例如 "Taipei,TW"）。
    """
    display_name: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    is_island: bool = False
    query: Optional[str] = None
    resolved: bool = True

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ResolvedLocation":
        return cls(
            display_name=data.get("display_name") or "",
            lat=data.get("lat"),
            lon=data.get("lon"),
            is_island=bool(data.get("is_island", False)),
            query=data.get("query"),
            resolved=bool(data.get("resolved", True)),
        )


@dataclass(frozen=True)
class ForecastSample:
    """預報服務的一個時段，內容原封不動來自預報服務。"""
    epoch_seconds: int
    temperature: Optional[float] = None
    feels_like: Optional[float] = None
    humidity: Optional[float] = None
    description: Optional[str] = None
    precipitation_probability: Optional[float] = None


@dataclass(frozen=True)
class DayAggregate:
    """
    目標日期的聚合結果。
    min/max 為 None 代表當天沒有可用的數值；is_fallback 為 True 代表當天沒有資料，代表樣本取自整份預報的第一筆。
    """
    target_date: datetime.date
    representative: ForecastSample
    min_temp: Optional[float] = None
    max_temp: Optional[float] = None
    min_feels_like: Optional[float] = None
    max_feels_like: Optional[float] = None
    max_precipitation_probability: float = 0.0
    sample_count: int = 0
    is_fallback: bool = False


@dataclass(frozen=True)
class OutfitAdvice:
    top: str
    bottom: str
    outer: str
    warmth_score: float
    rain_note: Optional[str] = None


@dataclass
class WeatherReport:
    """組好準備給格式化器使用的完整天氣查詢結果。"""
    location: ResolvedLocation
    when: str
    day: DayAggregate
    outfit: OutfitAdvice
    address: Optional[str] = None
