# weather_forecast/weather_formatter.py
"""
把 WeatherReport 轉成回覆內容：
1. format_weather_text：純文字版本，數值為 None 的行直接省略，不輸出空白的降雨提醒。
2. build_weather_flex：Flex Message 卡片版本。
溫度在這裡才四捨五入到小數點後一位，計算過程保留預報服務的原始精度。
"""
from typing import List, Optional

from linebot.v3.messaging.models import FlexBox, FlexBubble, FlexMessage, FlexSeparator

from outfit_suggestion.outfit_advisor import format_warmth_score
from utils.flex_message_elements import make_kv_row, make_title, make_paragraph, make_footer_note
from .city_normalizer import WHEN_LABEL, WHEN_TODAY
from .weather_models import WeatherReport


def _fmt_temp(value: Optional[float]) -> Optional[str]:
    return f"{value:.1f}°C" if value is not None else None


def _fmt_range(low: Optional[float], high: Optional[float]) -> Optional[str]:
    if low is None or high is None:
        return None
    return f"{low:.1f}°C ～ {high:.1f}°C"


def location_label(report: WeatherReport) -> str:
    if report.address:
        return f"{report.address}（座標）"
    return report.location.display_name or "未命名地點"


def report_title(report: WeatherReport) -> str:
    when_label = WHEN_LABEL.get(report.when, WHEN_LABEL[WHEN_TODAY])
    return f"【{location_label(report)}｜{when_label}天氣】"


def _precipitation(report: WeatherReport) -> float:
    day = report.day
    if day.is_fallback:
        return day.representative.precipitation_probability or 0.0
    return day.max_precipitation_probability


def _weather_rows(report: WeatherReport) -> List[tuple]:
    """(標籤, 值) 清單；值為 None 的行會被略過。"""
    day = report.day
    rep = day.representative
    temp_range = _fmt_range(day.min_temp, day.max_temp)
    feels_range = _fmt_range(day.min_feels_like, day.max_feels_like)
    rows = [
        ("狀態", rep.description or "未知"),
        ("氣溫", temp_range or _fmt_temp(rep.temperature)),
        ("體感", feels_range or _fmt_temp(rep.feels_like)),
        ("濕度", f"{rep.humidity:.0f}%" if rep.humidity is not None else None),
        ("降雨機率", f"{round(_precipitation(report) * 100)}%"),
    ]
    return [(label, value) for label, value in rows if value is not None]


def _outfit_rows(report: WeatherReport) -> List[tuple]:
    outfit = report.outfit
    return [
        ("上身", outfit.top),
        ("下身", outfit.bottom),
        ("外層", outfit.outer),
        ("保暖等級", format_warmth_score(outfit.warmth_score)),
    ]


def _fallback_note(report: WeatherReport) -> Optional[str]:
    if not report.day.is_fallback:
        return None
    return f"預報範圍內沒有 {report.day.target_date:%m/%d} 的資料，以最接近的時段代替。"


def format_weather_text(report: WeatherReport) -> str:
    lines = [report_title(report)]
    note = _fallback_note(report)
    if note:
        lines.append(note)
    lines.extend(f"{label}：{value}" for label, value in _weather_rows(report))
    lines.append("")
    lines.append("【穿搭建議】")
    lines.extend(f"{label}：{value}" for label, value in _outfit_rows(report))
    if report.outfit.rain_note:
        lines.append(report.outfit.rain_note)
    return "\n".join(lines)


def build_weather_flex(report: WeatherReport) -> FlexMessage:
    contents = make_title(f"📍 {location_label(report)}", f"{WHEN_LABEL.get(report.when, '今日')}天氣")
    note = _fallback_note(report)
    if note:
        contents.append(make_paragraph(note, color="#B8860B", size="sm"))

    contents.append(FlexBox(
        layout="vertical",
        margin="lg",
        spacing="sm",
        contents=[make_kv_row(f"{label}：", value) for label, value in _weather_rows(report)]
    ))
    contents.append(FlexSeparator(margin="md"))
    contents.append(make_paragraph("👕 穿搭建議", color="#000000"))
    contents.append(FlexBox(
        layout="vertical",
        margin="sm",
        spacing="sm",
        contents=[make_kv_row(f"{label}：", value) for label, value in _outfit_rows(report)]
    ))
    if report.outfit.rain_note:
        contents.append(make_paragraph(f"☔ {report.outfit.rain_note}", color="#1E90FF"))
    contents.append(make_footer_note("--- 資料來源：OpenWeatherMap，僅供參考 ---"))

    bubble = FlexBubble(size="mega", body=FlexBox(layout="vertical", contents=contents))
    return FlexMessage(alt_text=report_title(report), contents=bubble)
