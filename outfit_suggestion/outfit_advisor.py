# outfit_suggestion/outfit_advisor.py
"""
根據體感溫度與降雨機率給出穿搭建議。
這個模組只負責「穿搭邏輯」本身，不處理資料取得或訊息格式化。
有體感溫度時以體感溫度為判斷依據，否則使用氣溫；溫度帶由熱到冷依序比對，下限包含在該溫度帶內。
"""
import math
from typing import Optional

from weather_forecast.weather_models import OutfitAdvice

# --- 溫度帶：(下限, 上身, 下身, 外層, 保暖等級) ---
# 由熱到冷排列，第一個符合 t >= 下限 的溫度帶生效
OUTFIT_BANDS = (
    (33, "超輕薄短袖 / 無袖排汗衫", "短褲或運動短褲", "不用外套，盡量待室內補水", 1.0),
    (27, "短袖 / POLO / 透氣襯衫", "薄長褲或短褲", "薄外套可有可無", 1.5),
    (22, "薄長袖或 T 恤", "長褲", "輕薄外套或襯衫當外層", 2.0),
    (17, "長袖 T 恤或薄針織", "長褲", "薄風衣 / 輕薄外套", 3.0),
    (12, "長袖 + 針織或薄毛衣", "長褲", "中等厚度外套 / 風衣", 3.5),
    (7, "長袖 + 毛衣", "長褲 + 厚襪子", "厚外套 / 大衣，騎車加圍巾", 4.0),
)
COLDEST_BAND = ("保暖發熱衣 + 毛衣", "長褲 + 發熱褲", "羽絨衣 / 厚大衣 + 圍巾 + 毛帽", 5.0)

RAIN_NOTE_HEAVY_THRESHOLD = 0.5
RAIN_NOTE_LIGHT_THRESHOLD = 0.2
RAIN_NOTE_HEAVY = "降雨機率高，記得帶傘或穿防水外套。"
RAIN_NOTE_LIGHT = "可能會下雨，建議帶折傘備用。"


def _decision_temperature(temperature: Optional[float], feels_like: Optional[float]) -> float:
    t = feels_like if feels_like is not None else temperature
    if t is None:
        return math.nan
    return float(t)


def rain_note_for(precipitation_probability: Optional[float]) -> Optional[str]:
    """降雨機率低於 0.2 時沒有提醒（回傳 None，而不是空字串）。"""
    pop = precipitation_probability or 0.0
    if pop >= RAIN_NOTE_HEAVY_THRESHOLD:
        return RAIN_NOTE_HEAVY
    if pop >= RAIN_NOTE_LIGHT_THRESHOLD:
        return RAIN_NOTE_LIGHT
    return None


def build_outfit_advice(temperature: Optional[float], feels_like: Optional[float],
                        precipitation_probability: Optional[float]) -> OutfitAdvice:
    """
    將 (氣溫, 體感溫度, 降雨機率) 對應到一組穿搭建議。
    任何輸入都會落在剛好一個溫度帶；NaN 或缺值會落在最冷的溫度帶。
    """
    t = _decision_temperature(temperature, feels_like)

    top, bottom, outer, warmth = COLDEST_BAND
    for lower_bound, band_top, band_bottom, band_outer, band_warmth in OUTFIT_BANDS:
        if t >= lower_bound:
            top, bottom, outer, warmth = band_top, band_bottom, band_outer, band_warmth
            break

    return OutfitAdvice(
        top=top,
        bottom=bottom,
        outer=outer,
        warmth_score=warmth,
        rain_note=rain_note_for(precipitation_probability),
    )


def format_warmth_score(score: float) -> str:
    """保暖等級以 5 分制呈現，例如 1.5 / 5。"""
    text = f"{score:.1f}".rstrip("0").rstrip(".")
    return f"{text} / 5"
