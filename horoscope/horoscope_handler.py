# horoscope/horoscope_handler.py
"""
星座運勢的處理入口與卡片。
"""
import datetime
import logging
from typing import List

from linebot.v3.messaging.models import FlexBox, FlexBubble, FlexMessage, FlexSeparator, Message

from handlers.intents import Horoscope, IncomingMessage
from utils.errors import ConfigurationError, UpstreamError
from utils.flex_message_elements import make_footer_note, make_kv_row, make_paragraph, make_title
from utils.local_time import local_today
from utils.message_builder import build_flex_or_text, format_text_message
from weather_forecast.city_normalizer import WHEN_DAY_OFFSET, WHEN_LABEL, normalize_when
from .horoscope_service import get_reading
from .horoscope_signs import SIGN_LABELS

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "星座運勢暫時產生失敗，等等再試一次。"


def _stars(score: int) -> str:
    return "★" * score + "☆" * (5 - score)


def format_reading_text(sign: str, day: datetime.date, when_label: str, reading: dict) -> str:
    return "\n".join([
        f"【{SIGN_LABELS[sign]}｜{when_label}運勢 {day:%m/%d}】",
        f"整體：{_stars(reading['score'])}",
        reading["summary"],
        f"感情：{reading['love']}",
        f"工作：{reading['career']}",
        f"財運：{reading['money']}",
        f"幸運色：{reading['lucky_color']}　幸運數字：{reading['lucky_number']}",
    ])


def build_reading_flex(sign: str, day: datetime.date, when_label: str, reading: dict) -> FlexMessage:
    contents = make_title(f"✨ {SIGN_LABELS[sign]}", f"{when_label}運勢 {day:%m/%d}")
    contents.append(make_paragraph(_stars(reading["score"]), color="#DAA520", size="lg"))
    contents.append(make_paragraph(reading["summary"]))
    contents.append(FlexSeparator(margin="md"))
    contents.append(FlexBox(
        layout="vertical",
        margin="md",
        spacing="sm",
        contents=[
            make_kv_row("💗 感情：", reading["love"]),
            make_kv_row("💼 工作：", reading["career"]),
            make_kv_row("💰 財運：", reading["money"]),
            make_kv_row("🎨 幸運色：", reading["lucky_color"]),
            make_kv_row("🔢 幸運數字：", reading["lucky_number"]),
        ]
    ))
    contents.append(make_footer_note("--- 星座運勢僅供娛樂參考 ---"))

    bubble = FlexBubble(size="mega", body=FlexBox(layout="vertical", contents=contents))
    return FlexMessage(alt_text=f"{SIGN_LABELS[sign]}{when_label}運勢", contents=bubble)


def handle_horoscope(intent: Horoscope, message: IncomingMessage, services) -> List[Message]:
    when = normalize_when(intent.when)
    day = local_today() + datetime.timedelta(days=WHEN_DAY_OFFSET[when])
    try:
        reading = get_reading(intent.sign, day, services.llm, services.cache)
    except ConfigurationError as e:
        return [format_text_message(str(e))]
    except UpstreamError as e:
        logger.warning(f"產生 {intent.sign} 運勢失敗: {e}")
        return [format_text_message(FAILURE_MESSAGE)]

    when_label = WHEN_LABEL[when]
    return [build_flex_or_text(
        lambda: build_reading_flex(intent.sign, day, when_label, reading),
        format_reading_text(intent.sign, day, when_label, reading),
    )]
